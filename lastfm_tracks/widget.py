import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from lastfm_tracks.utils.lastfm_api import LastFMAPI
from lastfm_tracks.utils.mode_resolver import WidgetConfig, is_config_valid, resolve_config
from lastfm_tracks.utils.profile import Profile
from lastfm_tracks.utils.scrobbles_processor import ScrobblesProcessor
from lastfm_tracks.utils.update_scheduler import UpdateScheduler

OBSERVED_ATTRIBUTES = ('user', 'apikey', 'backend', 'tracks', 'updates', 'interval')


class TracksWidget:
    """
    The tracks widget: a continuously updated list of a user's scrobbles.

    Attributes are set through set_attribute()/set_attributes() and the
    configuration is resolved again after every change. Once started, a
    change of user or mode clears the list and starts over.

    Parameters:
    -----------
    renderer : object
        Shows the track list and the profile header
    timer : object
        Schedules the next update, see UpdateScheduler
    api : LastFMAPI, optional
        Data source, a default one is created if not given
    clock : callable, optional
        Returns the current time for the played texts
    on_state_change : callable, optional
        Called with the state dict whenever a valid configuration changes
    """

    def __init__(
        self,
        renderer,
        timer,
        api: Optional[LastFMAPI] = None,
        clock: Optional[Callable[[], datetime]] = None,
        on_state_change: Optional[Callable[[Dict], None]] = None
    ):
        self.renderer = renderer
        self.api = api or LastFMAPI()
        self.on_state_change = on_state_change
        self.attributes: Dict[str, Any] = {name: None for name in OBSERVED_ATTRIBUTES}
        self.config: WidgetConfig = resolve_config()
        self.initiated = False
        self.profile = Profile(self.api, renderer, lambda: self.config)
        self.scrobbles = UpdateScheduler(
            self.api, ScrobblesProcessor(clock), renderer, timer, lambda: self.config
        )

    @property
    def state(self) -> Dict:
        return dict(self.config)

    def set_attribute(self, name: str, value: Any) -> None:
        self.set_attributes(**{name: value})

    def set_attributes(self, **values) -> None:
        """Set one or more attributes and react to the resulting configuration."""
        unknown = set(values) - set(OBSERVED_ATTRIBUTES)
        if unknown:
            raise ValueError(f"Unknown attributes: {', '.join(sorted(unknown))}")
        self.attributes.update(values)

        previous = self.config
        self.config = resolve_config(**self.attributes)
        mode_changed = previous['mode'] != self.config['mode']
        user_changed = previous['user'] != self.config['user']

        if self.initiated and is_config_valid(self.config):
            self._dispatch_state_change()
            if user_changed or mode_changed:
                self.scrobbles.clear_updates_state()
                self.renderer.clear()
                logging.info(
                    f"Tracks User/WidgetMode has changed to {self.config['user']}/{self.config['mode']} "
                    f"- Update profile-header and tracklist now..."
                )
                self.profile.setup()
                self.scrobbles.update()

    def start(self) -> None:
        """Fetch the profile and the first track list, then keep updating."""
        config = self.config
        logging.info(
            f"Tracks widget initializing in '{config['mode']}'-mode. "
            f"{config['updates'] or 'Forever'} times getting {config['tracks']} tracks "
            f"for user {config['user'] or '(unknown)'} every {config['interval']} seconds."
        )
        if is_config_valid(config):
            self.profile.setup()
            self.scrobbles.update()
        else:
            logging.warning(f"Tracks widget is not configured for '{config['mode']}'-mode yet, waiting...")
        self.initiated = True
        self._dispatch_state_change()

    def stop_updating(self) -> None:
        self.scrobbles.stop()

    def _dispatch_state_change(self) -> None:
        logging.debug(f"DISPATCH stateChange {self.state}")
        if self.on_state_change is not None:
            self.on_state_change(self.state)
