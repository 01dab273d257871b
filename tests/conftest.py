from datetime import datetime, timedelta, timezone

import pytest

from lastfm_tracks.utils.errors import TransportFailure
from lastfm_tracks.utils.lastfm_api import LastFMAPI

NOW = datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc)


def make_track(name, album, artist='Artist A', minutes_ago=None, now=NOW,
               playing=False, loved='0', cover='https://img/64s/cover.png'):
    """A raw track as found in user.getRecentTracks with extended=1."""
    artist_url = f"https://www.last.fm/music/{artist.replace(' ', '+')}"
    track = {
        'name': name,
        'url': f"{artist_url}/_/{name.replace(' ', '+')}",
        'artist': {'name': artist, 'url': artist_url},
        'album': {'#text': album},
        'image': [
            {'size': 'small', '#text': cover.replace('64s', '34s')},
            {'size': 'medium', '#text': cover},
            {'size': 'large', '#text': cover.replace('64s', '174s')},
        ],
        'loved': loved,
    }
    if playing:
        track['@attr'] = {'nowplaying': 'true'}
    else:
        track['date'] = {'uts': str(int((now - timedelta(minutes=minutes_ago)).timestamp()))}
    return track


def recent_tracks(*tracks):
    return {'recenttracks': {'track': list(tracks), '@attr': {'user': 'rockland'}}}


class FakeTimer:
    def __init__(self):
        self.pending = {}
        self.canceled = []
        self._next = 0

    def call_later(self, delay, callback):
        self._next += 1
        self.pending[self._next] = (delay, callback)
        return self._next

    def cancel(self, handle):
        if self.pending.pop(handle, None) is not None:
            self.canceled.append(handle)

    def fire(self):
        handle = min(self.pending)
        _, callback = self.pending.pop(handle)
        callback()


class FakeRenderer:
    def __init__(self):
        self.rendered = []
        self.profiles = []
        self.clears = 0
        self.scroll_resets = 0

    def render(self, items):
        self.rendered.append(items)

    def clear(self):
        self.clears += 1

    def reset_scroll(self):
        self.scroll_resets += 1

    def render_profile(self, profile):
        self.profiles.append(profile)


class ScriptedAPI(LastFMAPI):
    """LastFMAPI answering from a list of payloads or exceptions instead of the network."""

    def __init__(self, responses=None, **kwargs):
        super().__init__(**kwargs)
        self.responses = list(responses or [])
        self.requested = []
        self.during_request = None

    def _make_request(self, url):
        self.requested.append(url)
        if self.during_request is not None:
            self.during_request()
        response = self.responses.pop(0) if self.responses else TransportFailure('no response')
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def clock():
    return lambda: NOW
