import re
import unicodedata
from collections import deque
from datetime import datetime
from typing import Callable, Deque, Dict, List, Optional, TypedDict
from urllib.parse import quote

from lastfm_tracks.config import ALBUM_SETTINGS
from lastfm_tracks.utils.errors import UnexpectedPayload
from lastfm_tracks.utils.time_formatter import played_info
from lastfm_tracks.utils.title_splitter import split_album_title

LEADING_THE = re.compile(r'^the\s', re.IGNORECASE)
TRAILING_THE = re.compile(r',\sthe$', re.IGNORECASE)


class TrackItem(TypedDict, total=False):
    type: str  # 'track'
    pinfo: Dict[str, str]
    loved: bool
    track_name: str
    track_url: str
    artist_name: str
    artist_url: str
    album_cover: Optional[str]
    album_title: str
    album_url: str


class AlbumItem(TypedDict, total=False):
    type: str  # 'album'
    split_title: Dict[str, str]
    album_title: str
    album_url: str
    album_cover: Optional[str]
    artist_name: str
    artist_url: str


def same_title(a: Optional[str], b: Optional[str]) -> bool:
    """Compare ignoring case and accents."""
    return _base_letters(a or '') == _base_letters(b or '')


def _base_letters(text: str) -> str:
    decomposed = unicodedata.normalize('NFD', text)
    return ''.join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def normalize_for_comparison(text: str) -> str:
    """
    Normalize an artist name for containment checks.

    Strips a leading "The " and a trailing ", The", spells out the first
    " & " as " and " and case-folds the result.
    """
    text = (text or '').strip()
    text = LEADING_THE.sub('', text)
    text = TRAILING_THE.sub('', text)
    text = text.replace(' & ', ' and ', 1)
    return text.strip().casefold()


def containing(s: str, sub: str) -> bool:
    """True if the normalized form of sub is found in the normalized form of s."""
    return normalize_for_comparison(sub) in normalize_for_comparison(s)


def album_url(artist_url: str, album_title: str) -> str:
    encoded = quote(album_title, safe="!*'()~").replace('%20', '+')
    return f"{artist_url}/{encoded}"


def find_cover(images: Optional[List[Dict]], size: str = ALBUM_SETTINGS['cover_size']) -> Optional[str]:
    for image in images or []:
        if image.get('size') == size:
            return image.get('#text')
    return None


def extract_tracks(payload: Dict) -> List[Dict]:
    """
    Get the track list out of a user.getRecentTracks response.

    Raises:
    -------
    UnexpectedPayload
        If the response has no recenttracks.track element
    """
    recent = payload.get('recenttracks') if isinstance(payload, dict) else None
    if not isinstance(recent, dict) or 'track' not in recent:
        raise UnexpectedPayload(f"Unexpected scrobbles data: {payload!r}")
    tracks = recent['track']
    # A single track can come back as an object instead of a list
    if isinstance(tracks, dict):
        return [tracks]
    if not isinstance(tracks, list):
        raise UnexpectedPayload(f"Unexpected scrobbles data: {payload!r}")
    return tracks


def build_track_item(track: Dict, now: datetime) -> TrackItem:
    """Normalize one raw scrobble into a track item."""
    if not isinstance(track, dict):
        raise UnexpectedPayload(f"Unexpected track data: {track!r}")
    artist = track.get('artist') or {}
    album = track.get('album') or {}
    item = TrackItem(type='track')
    item['pinfo'] = played_info(track, now)
    item['loved'] = track.get('loved') == '1'
    item['track_name'] = (track.get('name') or '').strip()
    item['track_url'] = (track.get('url') or '').strip()
    item['artist_name'] = (artist.get('name') or '').strip()
    item['artist_url'] = (artist.get('url') or '').strip()
    item['album_cover'] = find_cover(track.get('image'))
    item['album_title'] = (album.get('#text') or '').strip()
    item['album_url'] = album_url(item['artist_url'], item['album_title'])
    return item


class ScrobblesProcessor:
    """Turns recent tracks into a list of track lines and album headers."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now().astimezone())

    def process(self, tracks: List[Dict], now: Optional[datetime] = None) -> List[Dict]:
        """
        Process a newest-first list of scrobbles.

        Tracks are scanned oldest-first. Whenever a run of two or more tracks
        from the same album ends, an album header is put in front of it.

        Parameters:
        -----------
        tracks : list
            Raw tracks from user.getRecentTracks, newest first
        now : datetime, optional
            Reference time for the played texts, defaults to the clock

        Returns:
        --------
        list
            Track and album items, newest first
        """
        now = now or self.clock()
        items: Deque[Dict] = deque()
        album: Dict = {}
        for track in reversed(tracks):
            self._update_items(items, album, build_track_item(track, now))
        if len(items) > 1:
            self._potential_album_header(items, album)
        return list(items)

    def _potential_album_header(self, items: Deque[Dict], album: Dict) -> None:
        first, second = items[0], items[1]
        if (first['type'] == 'track' and second['type'] == 'track'
                and same_title(first['album_title'], second['album_title'])
                and album.get('album_title')):
            header = AlbumItem(type='album', split_title=split_album_title(album['album_title']))
            header.update(album)
            items.appendleft(header)

    def _update_items(self, items: Deque[Dict], album: Dict, item: TrackItem) -> None:
        title = item['album_title']
        if len(items) > 1 and not same_title(title, items[0]['album_title']):
            self._potential_album_header(items, album)
            album.clear()

        if title and not album.get('album_title'):
            self._seed_album(album, item)
        elif title and same_title(title, album['album_title']):
            self._merge_album(album, item)
        else:
            album.clear()
            if title:
                self._seed_album(album, item)

        items.appendleft(item)

    @staticmethod
    def _seed_album(album: Dict, item: TrackItem) -> None:
        album.update(
            album_title=item['album_title'],
            album_url=item['album_url'],
            album_cover=item['album_cover'],
            artist_name=item['artist_name'],
            artist_url=item['artist_url']
        )

    @staticmethod
    def _merge_album(album: Dict, item: TrackItem) -> None:
        """Reconcile the album header artist with another track of the same album."""
        missing_cover = ALBUM_SETTINGS['missing_cover']
        various = ALBUM_SETTINGS['various_artists']
        if item['artist_name'] == album['artist_name'] or album['artist_name'] == various:
            return

        short_artist = item['artist_name'].split(',')[0]
        if containing(album['artist_name'], item['artist_name']):
            # The track artist is the more specific variant
            album['album_title'] = item['album_title']
            album['album_url'] = item['album_url']
            if item['album_cover'] != missing_cover:
                album['album_cover'] = item['album_cover']
            album['artist_name'] = item['artist_name']
            album['artist_url'] = item['artist_url']
        elif short_artist and containing(album['artist_name'], short_artist):
            album['album_title'] = item['album_title']
            if item['album_cover'] != missing_cover:
                album['album_cover'] = item['album_cover']
            album['artist_name'] = short_artist
            album['artist_url'] = item['artist_url'].split(',')[0]
            album['album_url'] = album_url(album['artist_url'], album['album_title'])
        elif not containing(item['artist_name'], album['artist_name']):
            album['artist_name'] = various
            album['artist_url'] = ALBUM_SETTINGS['various_artists_url']

        if album['album_cover'] == missing_cover:
            album['album_cover'] = item['album_cover']
