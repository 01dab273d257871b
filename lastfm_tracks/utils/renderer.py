import sys
from typing import Dict, List, Optional, TextIO


def format_album_line(item: Dict) -> str:
    split_title = item['split_title']
    if split_title.get('extension'):
        title = f"{split_title['basic']}{split_title['spacer']}{split_title['extension']}"
    else:
        title = item['album_title']
    return f"{item['artist_name']} — {title}"


def format_track_line(item: Dict) -> str:
    pinfo = item['pinfo']
    marker = '♥' if item['loved'] else ' '
    played = pinfo['text']
    if played == 'playing':
        played = 'Scrobbling now...'
    return f"{marker} {item['track_name']} - {item['artist_name']}  [{played}]"


class ConsoleRenderer:
    """Shows the processed scrobbles as plain text lines."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.lines: List[str] = []
        self.profile_lines: List[str] = []
        self.scrolled_to_top = False

    def render(self, items: List[Dict]) -> None:
        """Replace the shown list with the given items."""
        lines = []
        for item in items:
            if item['type'] == 'album':
                lines.append(format_album_line(item))
            elif item['type'] == 'track':
                lines.append('  ' + format_track_line(item))
        self.lines = lines
        self._write()

    def clear(self) -> None:
        self.lines = []

    def reset_scroll(self) -> None:
        self.scrolled_to_top = True

    def render_profile(self, profile: Dict) -> None:
        self.profile_lines = [
            profile['title'],
            profile['url'],
        ]
        if profile.get('scrobble_history'):
            self.profile_lines.append(profile['scrobble_history'])
        self._write()

    def _write(self) -> None:
        for line in self.profile_lines + [''] + self.lines:
            print(line, file=self.stream)
        self.stream.flush()
