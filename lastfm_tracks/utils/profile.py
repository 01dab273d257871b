import logging
from typing import Callable, Dict, Optional

from lastfm_tracks.config import PROFILE_ERROR_CODES
from lastfm_tracks.utils.errors import ApiError, TracksError
from lastfm_tracks.utils.time_formatter import registered_since


def build_profile(user: Dict) -> Optional[Dict]:
    """
    Extract the profile header data from a user.getInfo 'user' element.

    Returns:
    --------
    dict or None
        name, realname, url, avatar, title and scrobble_history,
        or None if the data has no user name
    """
    if not isinstance(user, dict) or not user.get('name'):
        return None
    images = user.get('image') or []
    avatar = next((i.get('#text') for i in images if i.get('size') == 'large'), None)
    if avatar is None and len(images) > 2:
        avatar = images[2].get('#text')
    realname = user.get('realname') or ''
    return {
        'name': user['name'],
        'realname': realname,
        'url': user.get('url', ''),
        'avatar': avatar or '',
        'title': f"{realname} ({user['name']}) on Last.fm" if realname else f"{user['name']} on Last.fm",
        'scrobble_history': registered_since((user.get('registered') or {}).get('unixtime'))
    }


class Profile:
    """Fetches the user profile for the header above the track list."""

    def __init__(self, api, renderer, config_getter: Callable[[], Dict]):
        self.api = api
        self.renderer = renderer
        self.config_getter = config_getter

    def setup(self) -> Optional[Dict]:
        """Fetch and render the profile. Errors are logged, never raised."""
        try:
            url = self.api.user_info_query(self.config_getter())
            if self.api.is_running(url):
                logging.warning(f"Skipping Profile with {url} because already running...")
                return None
            data = self.api.fetch_json(url)
        except ApiError as e:
            if e.code in PROFILE_ERROR_CODES:
                logging.error(f"Tracks widget: {e.code} - {e.message} !")
            logging.error(f"Error calling audioscrobbler user.getinfo: {e}")
            return None
        except TracksError as e:
            logging.error(f"Error calling audioscrobbler user.getinfo: {e}")
            return None
        return self.update(data)

    def update(self, data: Dict) -> Optional[Dict]:
        profile = build_profile(data.get('user') if isinstance(data, dict) else None)
        if profile is None:
            logging.error(f"Skipping update profile because unexpected data: {data!r}")
            return None
        self.renderer.render_profile(profile)
        return profile
