import time
import logging
from typing import Dict, Optional, Set
from urllib.parse import urljoin

import requests

from lastfm_tracks.config import API_SETTINGS
from lastfm_tracks.utils.errors import ApiError, TransportFailure


class LastFMAPI:
    """A wrapper for the Last.fm API (or a backend proxying it) used by the tracks widget."""

    def __init__(
        self,
        base_uri: Optional[str] = None,
        timeout: int = API_SETTINGS['timeout'],
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Last.fm API wrapper.

        Parameters:
        -----------
        base_uri : str, optional
            Base to resolve relative backend URLs against
        timeout : int, default=5
            Timeout in seconds for each request
        session : requests.Session, optional
            Session to use, a new one is created if not given
        """
        self.api_url = f"https:{API_SETTINGS['api_root']}"
        self.base_uri = base_uri
        self.timeout = timeout
        self.session = session or requests.Session()
        # Add User-Agent header to improve connection reliability
        self.session.headers.update({'User-Agent': API_SETTINGS['user_agent']})
        self._running: Set[str] = set()

    def target_url(self, config: Dict) -> str:
        """The endpoint for a config: the backend in backend mode, otherwise Last.fm itself."""
        if config['mode'] == 'backend':
            if self.base_uri:
                return urljoin(self.base_uri, config['backend'])
            return config['backend']
        return self.api_url

    def build_query(self, config: Dict, method: str, **extra) -> str:
        """
        Build the full request URL for a method with the parameters of a config.

        The URL is the identity of the request, so the same config and method
        always give the same URL.

        Parameters:
        -----------
        config : WidgetConfig
            Resolved widget configuration
        method : str
            Last.fm API method name
        **extra : dict
            Parameters added after the common ones

        Returns:
        --------
        str
            The prepared request URL

        Raises:
        -------
        TransportFailure
            If no valid URL can be made, e.g. a backend without scheme
        """
        params = {'method': method}
        if 'extended' in extra:
            params['extended'] = extra.pop('extended')
        params['format'] = 'json'
        if config['mode'] == 'demo':
            params['api_key'] = API_SETTINGS['demo_key']
        elif config.get('apikey'):
            params['api_key'] = config['apikey']
        if config.get('user'):
            params['user'] = config['user']
        params.update(extra)
        target = self.target_url(config)
        try:
            return requests.Request('GET', target, params=params).prepare().url
        except requests.exceptions.RequestException as e:
            logging.error(f"Invalid request URL for {method}: {target!r}: {e}")
            raise TransportFailure(f"Invalid request URL {target!r}: {e}") from e

    def recent_tracks_query(self, config: Dict) -> str:
        return self.build_query(config, 'user.getrecenttracks', extended='1', limit=config['tracks'])

    def user_info_query(self, config: Dict) -> str:
        return self.build_query(config, 'user.getinfo')

    def is_running(self, url: str) -> bool:
        """Check if a request for exactly this URL is in progress."""
        return url in self._running

    def fetch_json(self, url: str) -> Dict:
        """
        Make the HTTP request and return the JSON response.

        Parameters:
        -----------
        url : str
            Full request URL, as built by build_query

        Returns:
        --------
        dict
            JSON response from the API

        Raises:
        -------
        TransportFailure
            On network errors, timeouts or responses that are not JSON
        ApiError
            If the response carries a Last.fm error code
        """
        self._running.add(url)
        try:
            data = self._make_request(url)
        finally:
            self._running.discard(url)
        return self._check_error(data, url)

    def _make_request(self, url: str) -> Dict:
        try:
            start_time = time.time()
            response = self.session.get(url, timeout=self.timeout)
            duration = time.time() - start_time

            if duration > 3:
                logging.info(f"Slow request to {url}: {duration:.2f} seconds")
            elif duration > 1:
                logging.debug(f"Moderate request to {url}: {duration:.2f} seconds")
        except requests.exceptions.Timeout as e:
            logging.warning(f"Timeout error for {url} after {self.timeout} seconds: {e}")
            raise TransportFailure(f"Timeout calling {url}") from e
        except requests.exceptions.RequestException as e:
            logging.error(f"Request failed for {url}: {e}")
            raise TransportFailure(f"Request failed for {url}: {e}") from e

        if 'application/json' not in response.headers.get('content-type', ''):
            raise TransportFailure(
                f"Network response from {url} was NOT ok. "
                f"Status: {response.status_code}. statusText: {response.reason}."
            )
        if not response.ok:
            # Last.fm reports its own errors as JSON with a non-2xx status
            logging.warning(f"[{url}] {response.status_code} - {response.reason}")
        try:
            return response.json()
        except ValueError as e:
            raise TransportFailure(f"Invalid JSON from {url}: {e}") from e

    def _check_error(self, data: Dict, url: str) -> Dict:
        if isinstance(data, dict) and data.get('error'):
            try:
                code = int(data['error'])
            except (TypeError, ValueError):
                code = -1
            raise ApiError(code, str(data.get('message', '')), url)
        return data
