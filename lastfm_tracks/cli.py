"""
Show a continuously updated list of a Last.fm user's recent scrobbles.

Modes:
  demo     only --user given, the list is fetched once
  basic    --user and --apikey given, the list is updated every --interval seconds
  backend  --backend given, requests go to a backend proxying the Last.fm API

Options default to the LASTFM_USER, LASTFM_API_KEY and LASTFM_BACKEND
environment variables.
"""
import argparse
import logging
import os
import sys

from lastfm_tracks.utils.errors import ConfigInvalid
from lastfm_tracks.utils.lastfm_api import LastFMAPI
from lastfm_tracks.utils.mode_resolver import is_config_valid
from lastfm_tracks.utils.renderer import ConsoleRenderer
from lastfm_tracks.utils.run_loop import RunLoopTimer
from lastfm_tracks.widget import TracksWidget


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lastfm-tracks',
        description='Last.fm recent tracks, grouped by album',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--user', '-u', default=os.environ.get('LASTFM_USER'),
                        help='Last.fm username')
    parser.add_argument('--apikey', '-k', default=os.environ.get('LASTFM_API_KEY'),
                        help='Last.fm API key (basic mode)')
    parser.add_argument('--backend', '-b', default=os.environ.get('LASTFM_BACKEND'),
                        help='URL of a backend proxying the Last.fm API (backend mode)')
    parser.add_argument('--tracks', '-t', default=None,
                        help='Number of tracks to show (default: 50, max: 200)')
    parser.add_argument('--updates', default=None,
                        help='Number of updates, 0 for unlimited (default: 0, always 1 in demo mode)')
    parser.add_argument('--interval', '-i', default=None,
                        help='Seconds between updates (default depends on mode)')
    parser.add_argument('--no-progress', action='store_true',
                        help='Do not show a countdown between updates')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log debug messages')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(message)s'
    )

    timer = RunLoopTimer(show_progress=not args.no_progress)
    widget = TracksWidget(ConsoleRenderer(), timer, api=LastFMAPI())
    widget.set_attributes(
        user=args.user,
        apikey=args.apikey,
        backend=args.backend,
        tracks=args.tracks,
        updates=args.updates,
        interval=args.interval
    )

    try:
        if not is_config_valid(widget.config):
            raise ConfigInvalid(f"Missing settings for '{widget.config['mode']}'-mode, see --help")
        widget.start()
        timer.run()
    except ConfigInvalid as e:
        logging.error(str(e))
        return 2
    except KeyboardInterrupt:
        widget.stop_updating()
    return 0


if __name__ == '__main__':
    sys.exit(main())
