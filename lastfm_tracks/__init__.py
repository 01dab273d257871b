"""Last.fm recent tracks, grouped by album."""

__version__ = '1.0.0'
