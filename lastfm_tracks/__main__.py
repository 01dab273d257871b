import sys

from lastfm_tracks.cli import main

sys.exit(main())
