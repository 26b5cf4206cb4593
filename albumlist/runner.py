"""
Run Coordinator

Sequences one invocation: authorize, create the playlist, resolve and
ingest every entry strictly in list order, then write the miss report.

Each entry ends the run either having contributed tracks (possibly zero)
or as exactly one miss record. Only per-entry misses are recovered here;
every exception propagates and ends the run with no rollback of tracks
already appended.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from tqdm import tqdm

from albumlist.album_resolver import AlbumResolver
from albumlist.auth import AuthorizationFlow
from albumlist.config_manager import Config, DEFAULT_DESCRIPTION
from albumlist.io_utils import load_overrides, parse_album_list, write_miss_report
from albumlist.models import AlbumEntry, MissRecord, MissReport, Playlist
from albumlist.spotify_client import SpotifyClient
from albumlist.track_ingestion import ingest_album

logger = logging.getLogger(__name__)

DEFAULT_PLAYLIST_NAME = "Simply Created Playlist"


@dataclass
class EntryOutcome:
    entry: AlbumEntry
    album_id: Optional[str] = None
    source: str = ""
    track_count: int = 0

    @property
    def missed(self) -> bool:
        return not self.album_id

    def progress_text(self) -> str:
        if self.missed:
            return "MISS"
        prefix = "OVERRIDE " if self.source == "override" else ""
        return f"{prefix}OK ({self.track_count} tracks)"


@dataclass
class RunResult:
    playlist: Playlist
    report: MissReport
    outcomes: List[EntryOutcome] = field(default_factory=list)

    @property
    def contributed(self) -> List[EntryOutcome]:
        return [o for o in self.outcomes if not o.missed]

    @property
    def total_tracks(self) -> int:
        return sum(o.track_count for o in self.outcomes)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PlaylistBuilder:
    """Creates one playlist and fills it from a list of entries."""

    def __init__(
        self,
        client: SpotifyClient,
        resolver: AlbumResolver,
        description: str = DEFAULT_DESCRIPTION,
        show_progress: bool = True
    ):
        self.client = client
        self.resolver = resolver
        self.description = description
        self.show_progress = show_progress

    def process_entry(self, entry: AlbumEntry, playlist_id: str) -> EntryOutcome:
        resolved = self.resolver.resolve(entry.artist, entry.album)
        if resolved is None or not resolved.id:
            return EntryOutcome(entry=entry)
        count = ingest_album(self.client, resolved.id, playlist_id)
        return EntryOutcome(entry=entry, album_id=resolved.id, source=resolved.source, track_count=count)

    def build(self, entries: Sequence[AlbumEntry], playlist_name: str, public: bool = False) -> RunResult:
        """
        Create the playlist and process every entry in order.

        Args:
            entries: Parsed list entries
            playlist_name: Name for the new playlist
            public: Whether the playlist is public

        Returns:
            RunResult with the playlist, per-entry outcomes and the miss report
        """
        me = self.client.get_current_user()
        playlist = self.client.create_playlist(me["id"], playlist_name, public=public, description=self.description)
        tqdm.write(f"\nCreated playlist: {playlist.url}\n")

        outcomes: List[EntryOutcome] = []
        misses: List[MissRecord] = []
        total = len(entries)
        for i, entry in enumerate(tqdm(entries, desc="Processing albums", unit="album", disable=not self.show_progress)):
            outcome = self.process_entry(entry, playlist.id)
            outcomes.append(outcome)
            if outcome.missed:
                misses.append(MissRecord(artist=entry.artist, album=entry.album))
            tqdm.write(f"[{i + 1}/{total}] {entry.key} ... {outcome.progress_text()}")

        logger.info(
            f"Processed {total} entries: {total - len(misses)} added "
            f"({sum(o.track_count for o in outcomes)} tracks), {len(misses)} missed"
        )
        report = MissReport(generated_at=utc_timestamp(), playlist_name=playlist_name, misses=misses)
        return RunResult(playlist=playlist, report=report, outcomes=outcomes)


def run(
    config: Config,
    list_path: Path,
    playlist_name: str = DEFAULT_PLAYLIST_NAME,
    public: bool = False,
    overrides_path: Path = Path("overrides.json"),
    misses_path: Path = Path("misses.json"),
    open_browser: bool = True,
    flow: Optional[AuthorizationFlow] = None
) -> RunResult:
    """
    Execute one full run and write the miss report.

    Input files are read before any network activity, so a missing list file
    fails fast.
    """
    entries = parse_album_list(list_path)
    overrides = load_overrides(overrides_path)

    if flow is None:
        flow = AuthorizationFlow(
            client_id=config.spotify_client_id,
            redirect_uri=config.spotify_redirect_uri,
            scopes=config.scope_list,
            timeout=config.auth_timeout,
            open_browser=open_browser,
            request_timeout=config.request_timeout,
        )
    token = flow.authorize()

    client = SpotifyClient(
        token,
        max_retries=config.max_retries,
        retry_delay=config.retry_delay,
        timeout=config.request_timeout,
    )
    resolver = AlbumResolver(client, overrides, search_limit=config.search_limit)
    result = PlaylistBuilder(client, resolver, description=config.playlist_description).build(
        entries, playlist_name, public=public
    )

    write_miss_report(misses_path, result.report)
    tqdm.write("\nDone.")
    return result
