import math
from datetime import datetime
from typing import Dict, Optional

from lastfm_tracks.utils.errors import UnexpectedPayload

# Fixed en-GB, 24h conventions
MONTHS = [
    'January', 'February', 'March', 'April', 'May', 'June', 'July',
    'August', 'September', 'October', 'November', 'December'
]
WEEKDAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']


def is_now_playing(track: Dict) -> bool:
    return (track.get('@attr') or {}).get('nowplaying') == 'true'


def track_datetime(track: Dict, tz=None) -> datetime:
    """Played-at time of a scrobble, in the given timezone."""
    try:
        uts = int(track['date']['uts'])
    except (KeyError, TypeError, ValueError) as e:
        raise UnexpectedPayload(f"Track without a valid played-at timestamp: {track.get('name')!r}") from e
    return datetime.fromtimestamp(uts, tz=tz)


def format_date_time_this_year(dt: datetime) -> str:
    """'19 Oct, 14:05'"""
    return f"{dt.day} {MONTHS[dt.month - 1][:3]}, {dt:%H:%M}"


def format_date_day_short(dt: datetime) -> str:
    """'19 Oct 2025'"""
    return f"{dt.day} {MONTHS[dt.month - 1][:3]} {dt.year}"


def format_month_year(dt: datetime) -> str:
    """'October 2025'"""
    return f"{MONTHS[dt.month - 1]} {dt.year}"


def format_date_time_long(dt: datetime) -> str:
    """'Sunday 19 October 2025 at 14:05'"""
    return f"{WEEKDAYS[dt.weekday()]} {dt.day} {MONTHS[dt.month - 1]} {dt.year} at {dt:%H:%M}"


def format_relative(delta: int, unit: str) -> str:
    """Short relative phrase, e.g. '5m ago', '2h ago' or 'in 3m'."""
    if delta == 0:
        return 'now'
    if delta < 0:
        return f"{-delta}{unit} ago"
    return f"in {delta}{unit}"


def played_info(track: Dict, now: datetime) -> Dict[str, str]:
    """
    Build the "played" text for a scrobble relative to a reference time.

    Parameters:
    -----------
    track : dict
        Raw track from user.getRecentTracks
    now : datetime
        Reference time, fixed for a whole batch of tracks

    Returns:
    --------
    dict
        'text' with the label to show and, unless the track is playing
        right now, 'title' with the full date and time
    """
    if is_now_playing(track):
        return {'text': 'playing'}

    dt = track_datetime(track, now.tzinfo)
    delta_minutes = math.floor((dt - now).total_seconds() / 60 + 0.5)
    delta_hours = int(delta_minutes / 60)
    delta_days = int(delta_hours / 24)

    if delta_days <= -1:
        if dt.year == now.year:
            text = format_date_time_this_year(dt)
        else:
            text = format_date_day_short(dt)
    elif delta_hours <= -1:
        text = format_relative(delta_hours, 'h')
    else:
        text = format_relative(delta_minutes, 'm')

    return {'text': text, 'title': format_date_time_long(dt)}


def registered_since(unixtime: Optional[str], tz=None) -> Optional[str]:
    """'Scrobbling since October 2015' for a profile registration time."""
    if not unixtime:
        return None
    return f"Scrobbling since {format_month_year(datetime.fromtimestamp(int(unixtime), tz=tz))}"
