import logging
from datetime import datetime, timezone

from conftest import FakeRenderer, ScriptedAPI
from lastfm_tracks.utils.errors import ApiError, TransportFailure
from lastfm_tracks.utils.mode_resolver import resolve_config
from lastfm_tracks.utils.profile import Profile, build_profile

CONFIG = resolve_config(user='rockland', apikey='k')
REGISTERED = str(int(datetime(2008, 10, 19, 12, 0, tzinfo=timezone.utc).timestamp()))

USER = {
    'name': 'rockland',
    'realname': 'Stig',
    'url': 'https://www.last.fm/user/rockland',
    'image': [
        {'size': 'small', '#text': 'https://img/34s/avatar.png'},
        {'size': 'medium', '#text': 'https://img/64s/avatar.png'},
        {'size': 'large', '#text': 'https://img/174s/avatar.png'},
    ],
    'registered': {'unixtime': REGISTERED},
}


def test_build_profile():
    profile = build_profile(USER)
    assert profile['title'] == 'Stig (rockland) on Last.fm'
    assert profile['avatar'] == 'https://img/174s/avatar.png'
    assert profile['scrobble_history'].startswith('Scrobbling since ')
    assert profile['url'] == 'https://www.last.fm/user/rockland'


def test_build_profile_without_realname():
    profile = build_profile({'name': 'rockland'})
    assert profile['title'] == 'rockland on Last.fm'
    assert profile['scrobble_history'] is None


def test_build_profile_unexpected():
    assert build_profile({}) is None
    assert build_profile(None) is None


def test_setup_renders_profile():
    renderer = FakeRenderer()
    profile = Profile(ScriptedAPI([{'user': USER}]), renderer, lambda: CONFIG)
    assert profile.setup()['name'] == 'rockland'
    assert renderer.profiles[0]['title'] == 'Stig (rockland) on Last.fm'


def test_setup_logs_rate_limit_errors(caplog):
    renderer = FakeRenderer()
    profile = Profile(ScriptedAPI([ApiError(29, 'Rate limit exceeded')]), renderer, lambda: CONFIG)
    with caplog.at_level(logging.ERROR):
        assert profile.setup() is None
    assert '29 - Rate limit exceeded' in caplog.text
    assert renderer.profiles == []


def test_setup_survives_transport_failure():
    profile = Profile(ScriptedAPI([TransportFailure('down')]), FakeRenderer(), lambda: CONFIG)
    assert profile.setup() is None


def test_setup_skips_unexpected_data(caplog):
    renderer = FakeRenderer()
    profile = Profile(ScriptedAPI([{'something': 'else'}]), renderer, lambda: CONFIG)
    with caplog.at_level(logging.ERROR):
        assert profile.setup() is None
    assert 'unexpected data' in caplog.text


def test_setup_survives_backend_without_scheme(caplog):
    api = ScriptedAPI([{'user': USER}])
    renderer = FakeRenderer()
    config = resolve_config(backend='/lastfm/proxy', user='rockland')
    profile = Profile(api, renderer, lambda: config)
    with caplog.at_level(logging.ERROR):
        assert profile.setup() is None
    assert api.requested == []
    assert renderer.profiles == []
    assert 'Invalid request URL' in caplog.text
