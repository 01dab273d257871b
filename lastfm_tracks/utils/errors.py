from typing import Optional

from lastfm_tracks.config import FATAL_ERROR_CODES


class TracksError(Exception):
    """Base class for errors raised while getting scrobbles."""


class ConfigInvalid(TracksError):
    """The resolved configuration lacks what its mode needs to fetch."""


class TransportFailure(TracksError):
    """Network or protocol level failure, including non-JSON responses."""


class UnexpectedPayload(TracksError):
    """A successful response that lacks the expected fields."""


class ApiError(TracksError):
    """
    A Last.fm error response, i.e. a JSON body carrying an error code.

    Parameters:
    -----------
    code : int
        Numeric Last.fm error code
    message : str
        Error message returned with the code
    url : str, optional
        The request URL, for logging
    """

    def __init__(self, code: int, message: str, url: Optional[str] = None):
        self.code = code
        self.message = message
        self.url = url
        super().__init__(f"{code} - {message}")

    @property
    def fatal(self) -> bool:
        """True when no further requests should be made with this configuration."""
        return self.code in FATAL_ERROR_CODES
