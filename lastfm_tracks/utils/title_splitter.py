import re
from typing import Dict, List, Pattern

# Groups: 1 = basic title, 2 = spacer, 3 = extension.
# Order matters, the first matching pattern wins.
DASHED_EXTENSIONS = [
    r'\w[\w\s]+\sEdition[\w\s]*',
    r'\w[\w\s]+\sVersion[\w\s]*',
    r'\w[\w\s]+\sDeluxe[\w\s]*',
    r'\w[\w\s]+\sRemaster[\w\s]*',
    r'\w[\w\s]+\sDisc[\w\s]*',
    r'\w[\w\s]+\sCD[\w\s]*',
    r'Deluxe[\w\s]*',
    r'Remaster[\w\s]*',
    r'Music from[\w\s]*',
    r'EP[\w\s]*',
    r'Live[\w\s]*',
    r'single[\w\s]*',
    r'Explicit[\w\s]*',
    r'Disc\s[\w\s]+',
    r'CD\s[\w\s]+',
]

BRACKETED_EXTENSIONS = [
    r'[\w\s]+\sEdition[\w\s]*',
    r'[\w\s]+\sVersion[\w\s]*',
    r'[\w\s]+\sDeluxe[\w\s]*',
    r'[\w\s]+\sRemaster[\w\s]*',
    r'[\w\s]+\sDisc[\w\s]*',
    r'[\w\s]+\sCD[\w\s]*',
    r'Deluxe[\w\s]*',
    r'Remaster[\w\s]*',
    r'Music from[\w\s]*',
    r'EP',
    r'Live',
    r'single',
    r'Explicit',
    r'Disc\s[\w\s]+',
    r'CD\s[\w\s]+',
]


def _compile_patterns() -> List[Pattern]:
    patterns = [rf'^(.+[^-\s])(\s-\s)({ext})$' for ext in DASHED_EXTENSIONS]
    patterns += [rf'^(.+[^-\s])(\s)([(\[]{ext}[)\]])$' for ext in BRACKETED_EXTENSIONS]
    patterns.append(r'^(.+[^-\s])(\s)(EP[\d\s]*)$')
    return [re.compile(p, re.IGNORECASE) for p in patterns]


TITLE_PATTERNS = _compile_patterns()


def split_album_title(title: str) -> Dict[str, str]:
    """
    Split an album title into its basic title and an edition-like extension.

    "Greatest Hits - Remastered" gives basic "Greatest Hits", spacer " - " and
    extension "Remastered". When no known extension is found, 'basic' is the
    whole title and there are no 'spacer' or 'extension' keys.

    Parameters:
    -----------
    title : str
        Album title

    Returns:
    --------
    dict
        'full' and 'basic', plus 'spacer' and 'extension' when split
    """
    title = (title or '').strip()
    result = {'full': title, 'basic': title}
    for pattern in TITLE_PATTERNS:
        match = pattern.match(title)
        if match:
            result['basic'], result['spacer'], result['extension'] = match.groups()
            break
    return result
