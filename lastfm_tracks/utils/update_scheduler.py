import logging
from typing import Any, Callable, Dict

from lastfm_tracks.config import MODE_SETTINGS
from lastfm_tracks.utils.errors import ApiError, TransportFailure, UnexpectedPayload
from lastfm_tracks.utils.mode_resolver import is_config_valid
from lastfm_tracks.utils.scrobbles_processor import extract_tracks


class SchedulerState:
    """Counters and timer of a continuous run of updates."""

    def __init__(self):
        self.update_count = 0
        self.successive_errors = 0
        self.canceled = False
        self.timer: Any = None

    def reset(self) -> None:
        self.update_count = 0
        self.successive_errors = 0
        self.canceled = False


class UpdateScheduler:
    """
    Engine for receiving scrobbles.

    Each update() fetches the recent tracks once, hands them to the processor
    and the renderer, and arms the timer for the next update unless updating
    has been canceled or the configured number of updates is reached.

    Updating is canceled for good after fatal Last.fm errors (bad api key,
    login required, suspended key, rate limit) or too many errors in a row.
    Only clear_updates_state() starts a new run.

    Parameters:
    -----------
    api : LastFMAPI
        Data source for the scrobbles
    processor : ScrobblesProcessor
        Turns tracks into render items
    renderer : object
        Anything with render(items) and reset_scroll()
    timer : object
        Anything with call_later(delay, callback) returning a handle, and
        cancel(handle)
    config_getter : callable
        Returns the current WidgetConfig
    """

    def __init__(self, api, processor, renderer, timer, config_getter: Callable[[], Dict]):
        self.api = api
        self.processor = processor
        self.renderer = renderer
        self.timer = timer
        self.config_getter = config_getter
        self.state = SchedulerState()

    def clear_updates_state(self) -> None:
        self.state.reset()

    def update(self) -> None:
        """Run one fetch cycle. Errors are logged and counted, never raised."""
        self._clear_timer()
        config = self.config_getter()
        if not is_config_valid(config):
            logging.warning(f"Not getting scrobbles, the '{config['mode']}'-mode settings are incomplete")
            return

        url = None
        try:
            url = self.api.recent_tracks_query(config)
            if self.api.is_running(url):
                logging.warning(f"Skipping fetching scrobbles with {url} because already running...")
                return

            logging.debug(f"[{self.state.update_count + 1}] Getting Scrobbles with: {url} ...")
            payload = self.api.fetch_json(url)
            self._render_scrobbles(payload)
            self.state.successive_errors = 0
        except ApiError as e:
            if e.fatal:
                self.state.canceled = True
                logging.error(f"Tracks widget: Updates has stopped because error: {e.code} - {e.message} !")
            logging.error(f"Error calling audioscrobbler user.getrecenttracks: {url} returned {e}")
            self.state.successive_errors += 1
        except TransportFailure as e:
            logging.error(f"Error calling audioscrobbler user.getrecenttracks: {e}")
            self.state.successive_errors += 1

        self._after_update(self.config_getter())

    def stop(self) -> None:
        self.state.canceled = True
        if self.state.timer is not None:
            self._clear_timer()
            logging.info("Tracks widget: Updating canceled")

    @property
    def scheduled(self) -> bool:
        return self.state.timer is not None

    def _after_update(self, config: Dict) -> None:
        state = self.state
        state.update_count += 1
        if state.update_count == 1:
            self.renderer.reset_scroll()

        max_errors = MODE_SETTINGS[config['mode']]['max_errors']
        if state.successive_errors >= max_errors:
            state.canceled = True
            logging.warning(
                f"Updates stopped in {config['mode']}-mode, because of "
                f"{state.successive_errors} successive errors occurring."
            )

        if not state.canceled and (config['updates'] == 0 or state.update_count < config['updates']):
            logging.debug(f"Waiting {config['interval']} seconds until next update...")
            state.timer = self.timer.call_later(config['interval'], self.update)

    def _clear_timer(self) -> None:
        if self.state.timer is not None:
            self.timer.cancel(self.state.timer)
            self.state.timer = None

    def _render_scrobbles(self, payload: Dict) -> None:
        try:
            tracks = extract_tracks(payload)
            if not tracks:
                logging.warning("Tracks: The user has no recent tracks!")
                return
            items = self.processor.process(tracks)
        except UnexpectedPayload as e:
            logging.error(f"Error or aborted getting scrobbles! {e}")
            return
        self.renderer.render(items)
