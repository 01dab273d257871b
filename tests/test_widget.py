from urllib.parse import parse_qsl, urlsplit

import pytest

from conftest import make_track, recent_tracks
from lastfm_tracks.utils.lastfm_api import LastFMAPI
from lastfm_tracks.widget import TracksWidget

PAYLOAD = recent_tracks(
    make_track('T1', 'Album X', minutes_ago=2),
    make_track('T2', 'Album X', minutes_ago=3),
)


class RoutingAPI(LastFMAPI):
    def __init__(self):
        super().__init__()
        self.requested = []

    def _make_request(self, url):
        query = dict(parse_qsl(urlsplit(url).query))
        self.requested.append(query)
        if query['method'] == 'user.getinfo':
            return {'user': {'name': query.get('user', 'someone')}}
        return PAYLOAD


@pytest.fixture
def api():
    return RoutingAPI()


@pytest.fixture
def widget(api, renderer, timer, clock):
    states = []
    widget = TracksWidget(renderer, timer, api=api, clock=clock, on_state_change=states.append)
    widget.states = states
    return widget


def test_start_fetches_profile_and_tracks(widget, api, renderer):
    widget.set_attributes(user='rockland')
    widget.start()
    assert [q['method'] for q in api.requested] == ['user.getinfo', 'user.getrecenttracks']
    assert len(renderer.rendered) == 1
    assert renderer.profiles[0]['name'] == 'rockland'
    assert widget.initiated
    assert widget.states[-1]['mode'] == 'demo'


def test_start_without_valid_config_does_not_fetch(widget, api):
    widget.start()
    assert api.requested == []
    assert widget.initiated


def test_attributes_before_start_do_not_fetch(widget, api):
    widget.set_attributes(user='rockland', apikey='k')
    assert api.requested == []
    assert widget.state['mode'] == 'basic'


def test_user_change_restarts(widget, api, renderer, timer):
    widget.set_attributes(user='rockland', apikey='k')
    widget.start()
    widget.scrobbles.update()
    assert widget.scrobbles.state.update_count == 2

    widget.set_attribute('user', 'someone')
    assert renderer.clears == 1
    assert widget.scrobbles.state.update_count == 1
    assert renderer.scroll_resets == 2
    assert api.requested[-1]['user'] == 'someone'
    assert api.requested[-2]['method'] == 'user.getinfo'
    assert len(timer.pending) == 1


def test_mode_change_restarts(widget, api, renderer):
    widget.set_attributes(user='rockland')
    widget.start()
    widget.set_attribute('apikey', 'k')
    assert widget.state['mode'] == 'basic'
    assert renderer.clears == 1
    assert api.requested[-1]['api_key'] == 'k'


def test_other_changes_only_dispatch_state(widget, api, renderer):
    widget.set_attributes(user='rockland', apikey='k')
    widget.start()
    requests_before = len(api.requested)
    widget.set_attribute('interval', '120')
    assert len(api.requested) == requests_before
    assert renderer.clears == 0
    assert widget.states[-1]['interval'] == 120


def test_invalid_change_does_nothing(widget, api, renderer):
    widget.set_attributes(user='rockland', apikey='k')
    widget.start()
    requests_before = len(api.requested)
    widget.set_attribute('user', '')
    assert len(api.requested) == requests_before
    assert renderer.clears == 0


def test_stop_updating(widget, timer):
    widget.set_attributes(user='rockland', apikey='k')
    widget.start()
    widget.stop_updating()
    assert widget.scrobbles.state.canceled
    assert timer.pending == {}


def test_unknown_attribute(widget):
    with pytest.raises(ValueError):
        widget.set_attribute('color', 'red')


def test_pending_update_is_dropped_after_invalid_change(widget, api, renderer, timer):
    widget.set_attributes(user='rockland', apikey='k')
    widget.start()
    requests_before = len(api.requested)
    widget.set_attribute('user', '')
    timer.fire()
    assert len(api.requested) == requests_before
    assert len(renderer.rendered) == 1
    assert timer.pending == {}


def test_backend_without_scheme_does_not_raise(widget, api, renderer, timer):
    widget.set_attributes(backend='example.com/scrobbles', user='rockland')
    widget.start()
    assert widget.initiated
    assert api.requested == []
    assert renderer.profiles == []
    assert widget.scrobbles.state.successive_errors == 1
    assert len(timer.pending) == 1
