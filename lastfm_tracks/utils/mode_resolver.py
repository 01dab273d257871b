import logging
import math
import re
from typing import Any, Dict, Optional, TypedDict

from lastfm_tracks.config import API_SETTINGS, MODE_SETTINGS, TRACKS_SETTINGS

LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


class WidgetConfig(TypedDict):
    mode: str  # demo | basic | backend
    user: Optional[str]
    apikey: Optional[str]
    backend: Optional[str]
    tracks: int
    updates: int  # 0 means unlimited
    interval: int  # seconds


def _clean(value: Any) -> str:
    """Trimmed string form of an attribute value, empty for None."""
    if value is None:
        return ''
    return str(value).strip()


def parse_int(value: Any) -> Optional[int]:
    """
    Parse the leading integer of an attribute value.

    Mirrors the lenient parsing of HTML attributes: leading whitespace and a
    sign are accepted, anything after the digits is ignored. Returns None when
    there is no leading integer at all.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    match = LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def resolve_mode(backend: Any = None, apikey: Any = None) -> str:
    """
    Derive the widget mode from the backend and apikey attributes.

    Parameters:
    -----------
    backend : str or None
        URL of a backend proxying the Last.fm API
    apikey : str or None
        Last.fm API key

    Returns:
    --------
    str
        'backend', 'basic' or 'demo'
    """
    backend = _clean(backend)
    apikey = _clean(apikey)
    if apikey == API_SETTINGS['demo_key']:
        logging.error("You cannot use that apikey for Basic or Backend-supported mode.")
        return 'demo'
    if backend:
        if API_SETTINGS['api_root'] in backend:
            logging.error("You cannot use last.fm's own audioscrobbler-api as the backend in 'Backend-supported' mode.")
        else:
            return 'backend'
    if apikey:
        return 'basic'
    return 'demo'


def _clamp_tracks(raw: Any) -> int:
    tracks = abs(parse_int(raw) or 0)
    if not tracks:
        return TRACKS_SETTINGS['default_tracks']
    return min(tracks, TRACKS_SETTINGS['max_tracks'])


def _clamp_updates(raw: Any, mode: str) -> int:
    # Demo mode only ever gets the initial list
    if mode == 'demo':
        return 1
    return max(0, abs(parse_int(raw) or 0))


def _clamp_interval(raw: Any, mode: str) -> int:
    settings = MODE_SETTINGS[mode]
    interval = abs(parse_int(raw) or 0)
    if not interval:
        return settings['interval_default']
    return max(interval, settings['interval_min'])


def resolve_config(
    backend: Any = None,
    apikey: Any = None,
    user: Any = None,
    tracks: Any = None,
    updates: Any = None,
    interval: Any = None
) -> WidgetConfig:
    """
    Turn raw attribute values into a complete WidgetConfig.

    The config is always derived from scratch, so calling this again after any
    attribute change gives the same result as a fresh widget would get.

    Parameters:
    -----------
    backend, apikey, user : str or None
        Credential related attributes
    tracks, updates, interval : str, int or None
        Numeric attributes, parsed leniently and clamped per mode

    Returns:
    --------
    WidgetConfig
        The resolved configuration (not necessarily valid, see is_config_valid)
    """
    mode = resolve_mode(backend, apikey)
    cleaned_key = _clean(apikey)
    return WidgetConfig(
        mode=mode,
        user=_clean(user) or None,
        apikey=cleaned_key if cleaned_key and cleaned_key != API_SETTINGS['demo_key'] else None,
        backend=_clean(backend) or None,
        tracks=_clamp_tracks(tracks),
        updates=_clamp_updates(updates, mode),
        interval=_clamp_interval(interval, mode)
    )


def is_config_valid(config: Dict) -> bool:
    """Check that the config holds what its mode needs before fetching."""
    mode = config['mode']
    if mode == 'demo':
        return bool(config['user'])
    if mode == 'basic':
        return bool(config['user'] and config['apikey'])
    if mode == 'backend':
        return bool(config['backend'])
    logging.warning(f"Data is not valid! {config['user']}/{config['apikey']}/{mode}")
    return False
