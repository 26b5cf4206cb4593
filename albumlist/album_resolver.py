"""
Album Resolver

Turns a free-text (artist, album) pair into a single catalog album id.

Resolution order:
1. Override table (exact "Artist - Album" key), no network call
2. Strict search: field-qualified query, exact normalized matches only
3. Loose search: plain-words query, artist-filtered pool with substring match

Ties are always broken by the order the search service returned results in.
"""

import logging
from typing import Dict, List, Optional

from albumlist.models import ResolvedAlbum, SearchCandidate
from albumlist.spotify_client import SpotifyClient
from albumlist.text_utils import album_id_from_override, album_key, normalize

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 10


def strict_query(artist: str, album: str) -> str:
    return f"album:{album} artist:{artist}"


def loose_query(artist: str, album: str) -> str:
    return f"{artist} {album}"


def select_strict_match(
    candidates: List[SearchCandidate],
    target_artist: str,
    target_album: str
) -> Optional[SearchCandidate]:
    """
    Pick the strict-phase winner from search results.

    Prefers the first candidate whose normalized album AND primary artist both
    equal the targets, then the first whose normalized album alone matches.

    Args:
        candidates: Search results in service order
        target_artist: Normalized artist name
        target_album: Normalized album title

    Returns:
        Winning candidate, or None when no album name matches exactly
    """
    for c in candidates:
        if normalize(c.name) == target_album and normalize(c.primary_artist_name) == target_artist:
            return c
    for c in candidates:
        if normalize(c.name) == target_album:
            return c
    return None


def select_loose_match(
    candidates: List[SearchCandidate],
    target_artist: str,
    target_album: str
) -> Optional[SearchCandidate]:
    """
    Pick the loose-phase winner from search results.

    The pool is the candidates credited to the target artist, or every
    candidate when none is. Within the pool the first album whose normalized
    name contains the target album wins, else the first pool entry.

    Args:
        candidates: Search results in service order
        target_artist: Normalized artist name
        target_album: Normalized album title

    Returns:
        Winning candidate, or None for an empty result set
    """
    same_artist = [c for c in candidates if normalize(c.primary_artist_name) == target_artist]
    pool = same_artist or candidates
    for c in pool:
        if target_album in normalize(c.name):
            return c
    return pool[0] if pool else None


class AlbumResolver:
    """
    Resolves list entries to catalog album ids.

    The override table is consulted first and always wins; search is only
    used for entries without an override.
    """

    def __init__(
        self,
        client: SpotifyClient,
        overrides: Optional[Dict[str, str]] = None,
        search_limit: int = DEFAULT_SEARCH_LIMIT
    ):
        self.client = client
        self.overrides = dict(overrides or {})
        self.search_limit = search_limit

    def lookup_override(self, artist: str, album: str) -> Optional[ResolvedAlbum]:
        """Return the override for this entry, or None if the table has no usable value."""
        value = self.overrides.get(album_key(artist, album))
        if not value or not value.strip():
            return None
        return ResolvedAlbum(id=album_id_from_override(value), source="override")

    def resolve(self, artist: str, album: str) -> Optional[ResolvedAlbum]:
        """
        Resolve an entry to a catalog album.

        Args:
            artist: Artist as written in the list
            album: Album as written in the list

        Returns:
            ResolvedAlbum, or None when nothing matched (a miss)
        """
        override = self.lookup_override(artist, album)
        if override is not None:
            logger.debug(f"Override for {album_key(artist, album)}: {override.id}")
            return override

        target_artist = normalize(artist)
        target_album = normalize(album)

        strict = self.client.search_albums(strict_query(artist, album), limit=self.search_limit)
        found = select_strict_match(strict, target_artist, target_album)
        if found:
            logger.debug(f"Strict match for {album_key(artist, album)}: {found.name} ({found.id})")
            return ResolvedAlbum(id=found.id, source="strict")

        loose = self.client.search_albums(loose_query(artist, album), limit=self.search_limit)
        found = select_loose_match(loose, target_artist, target_album)
        if found:
            logger.debug(
                f"Loose match for {album_key(artist, album)}: "
                f"{found.primary_artist_name} - {found.name} ({found.id})"
            )
            return ResolvedAlbum(id=found.id, source="loose")

        logger.info(f"No album found for {album_key(artist, album)}")
        return None
