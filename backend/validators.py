"""
Input Validation Module

Prüft User-Input, bevor irgendein Netzwerk-Request passiert.
"""

import re
from urllib.parse import urlparse

ALLOWED_SCHEMES = ('http', 'https')

# Zeichen, die in keinem Hostnamen vorkommen dürfen
FORBIDDEN_HOST_CHARS = re.compile(r'[\s<>"{}|\\^`]')


def is_valid_url(url) -> bool:
    """
    Prüft, ob eine URL geparst werden kann und http/https nutzt.

    Wirft nie eine Exception: alles, was nicht geparst werden kann,
    gilt als ungültig.

    Examples:
        >>> is_valid_url("https://example.com/article")
        True

        >>> is_valid_url("ftp://example.com/file")
        False

        >>> is_valid_url("example.com")
        False
    """
    if not isinstance(url, str) or not url.strip():
        return False

    try:
        parsed = urlparse(url.strip())
        # Zugriff auf hostname/port validiert Brackets und Port-Format
        hostname = parsed.hostname
        _ = parsed.port
    except ValueError:
        return False

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        return False

    if not hostname:
        return False

    return not FORBIDDEN_HOST_CHARS.search(hostname)
