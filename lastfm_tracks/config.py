# lastfm_tracks/config.py

# API settings
API_SETTINGS = {
    'api_root': '//ws.audioscrobbler.com/2.0',
    'demo_key': 'de77ae918371692f6765c4bfa85c5f11',  # Only valid for demo mode
    'timeout': 5,                                     # Seconds per request
    'user_agent': 'LastFM Tracks Widget/1.0'
}

# Per-mode update settings
MODE_SETTINGS = {
    'demo': {'interval_default': 120, 'interval_min': 90, 'max_errors': 3},
    'basic': {'interval_default': 60, 'interval_min': 30, 'max_errors': 3},
    'backend': {'interval_default': 60, 'interval_min': 10, 'max_errors': 10}
}

# Track list settings
TRACKS_SETTINGS = {
    'default_tracks': 50,
    'max_tracks': 200  # Maximum allowed by Last.fm API
}

# Error codes that stop updating for good (10: invalid key, 17: login required,
# 26: suspended key, 29: rate limit exceeded)
FATAL_ERROR_CODES = (10, 17, 26, 29)

# Error codes worth shouting about when fetching the profile
PROFILE_ERROR_CODES = (26, 29)

# Album header settings
ALBUM_SETTINGS = {
    'missing_cover': 'https://lastfm.freetls.fastly.net/i/u/64s/2a96cbd8b46e442fc41c2b86b821562f.png',
    'cover_size': 'medium',  # 64px
    'various_artists': 'Various Artists',
    'various_artists_url': 'https://www.last.fm/music/Various+Artists'
}
