"""
Text Utilities for Album/Artist Matching

Provides normalization helpers used to compare free-text list entries with
catalog search results, and to build/interpret override table keys.

These functions handle common variations like:
- Case differences ("OK Computer" vs "ok computer")
- Punctuation noise ("Sgt. Pepper's" vs "sgt pepper's")
- Ampersands and curly apostrophes
"""

import re

_AMPERSAND = re.compile(r"&")
_DISALLOWED = re.compile(r"[^a-z0-9\s'-]")
_WHITESPACE = re.compile(r"\s+")
_ALBUM_URI = re.compile(r"^[^:]+:album:(.+)$")


def normalize(text: str) -> str:
    """
    Canonicalize an artist or album name for comparison.

    Examples:
        "Sgt. Pepper's Lonely Hearts Club Band" -> "sgt pepper's lonely hearts club band"
        "Simon & Garfunkel" -> "simon and garfunkel"
        "Don’t Stop" -> "don't stop"
        "  Abbey   Road  " -> "abbey road"

    The result is stable under repeated application.

    Args:
        text: Artist or album name to normalize

    Returns:
        Lowercased name containing only letters, digits, single spaces,
        apostrophes and hyphens
    """
    result = text.lower()
    result = _AMPERSAND.sub("and", result)
    result = result.replace("’", "'")
    result = _DISALLOWED.sub("", result)
    result = _WHITESPACE.sub(" ", result)
    return result.strip()


def album_key(artist: str, album: str) -> str:
    """Build the override table key for an entry, e.g. "Radiohead - OK Computer"."""
    return f"{artist} - {album}".strip()


def album_id_from_override(value: str) -> str:
    """
    Extract a catalog album id from an override value.

    Accepts either a bare id ("4LH4d3cOWNNsVw41Gqt2kv") or a URI shaped
    like "spotify:album:4LH4d3cOWNNsVw41Gqt2kv". Anything else is returned
    stripped, as-is.
    """
    v = str(value).strip()
    m = _ALBUM_URI.match(v)
    if m:
        return m.group(1).strip()
    return v
