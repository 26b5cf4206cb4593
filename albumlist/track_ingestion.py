"""
Track Ingestion Pipeline

Copies an album's tracks, in album order, onto the end of a playlist:
page through the album's track listing until `next` is null, then append
the collected URIs in sequential batches of at most 100.
"""

import logging
from typing import Iterator, List, Sequence

from albumlist.spotify_client import MAX_TRACKS_PER_REQUEST, SpotifyClient

logger = logging.getLogger(__name__)


def chunked(items: Sequence[str], size: int = MAX_TRACKS_PER_REQUEST) -> Iterator[List[str]]:
    """Yield consecutive slices of at most `size` items, in order."""
    if size < 1:
        raise ValueError("size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def fetch_album_track_uris(client: SpotifyClient, album_id: str) -> List[str]:
    """
    Collect every track URI of an album, following pagination to the end.

    Args:
        client: Authenticated Spotify client
        album_id: Catalog album id

    Returns:
        Track URIs in album order
    """
    uris: List[str] = []
    next_url = client.album_tracks_url(album_id)
    pages = 0
    while next_url:
        page = client.get_album_tracks_page(next_url)
        uris.extend(t["uri"] for t in page.get("items") or [] if t and t.get("uri"))
        next_url = page.get("next")
        pages += 1
    logger.debug(f"Album {album_id}: {len(uris)} tracks across {pages} page(s)")
    return uris


def add_tracks_in_batches(client: SpotifyClient, playlist_id: str, uris: Sequence[str]) -> int:
    """
    Append URIs to a playlist one batch at a time, preserving order.

    Returns:
        Number of append requests issued
    """
    batches = 0
    for batch in chunked(uris, MAX_TRACKS_PER_REQUEST):
        client.add_tracks_to_playlist(playlist_id, batch)
        batches += 1
    return batches


def ingest_album(client: SpotifyClient, album_id: str, playlist_id: str) -> int:
    """
    Append all tracks of `album_id` to `playlist_id`.

    Returns:
        Number of tracks appended
    """
    uris = fetch_album_track_uris(client, album_id)
    batches = add_tracks_in_batches(client, playlist_id, uris)
    logger.debug(f"Appended {len(uris)} tracks from {album_id} in {batches} request(s)")
    return len(uris)
