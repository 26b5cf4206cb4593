#!/usr/bin/env python3
"""
albumlist-playlist - Build a Spotify playlist from an album list

This script reads a text file of `Artist - Album` lines and fills a new
Spotify playlist with every track of every album it can find, in list order.

WORKFLOW:
1. Read the list file and the optional override table (overrides.json)
2. Authorize in the browser (PKCE, no client secret)
3. Create the playlist
4. For each entry: use the override or search the catalog, then append the
   album's tracks in batches of 100
5. Write misses.json listing every entry that could not be resolved

Configure SPOTIFY_CLIENT_ID and SPOTIFY_REDIRECT_URI in config.py (copy from
config.template.py), .env, or the environment before running.

Example:
    albumlist-playlist albums.txt "Road Trip" public --overrides overrides.json
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from albumlist.config_manager import Config
from albumlist.exceptions import AlbumListError, ConfigurationError, ListFileNotFoundError
from albumlist.runner import DEFAULT_PLAYLIST_NAME, run

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create a Spotify playlist from an 'Artist - Album' list file."
    )
    parser.add_argument("list_file", nargs="?", default="playlist.txt",
                        help="Album list, one 'Artist - Album' per line (default: playlist.txt)")
    parser.add_argument("playlist_name", nargs="?", default=DEFAULT_PLAYLIST_NAME,
                        help=f"Name of the playlist to create (default: {DEFAULT_PLAYLIST_NAME})")
    parser.add_argument("visibility", nargs="?", default="private", choices=["private", "public"],
                        help="Playlist visibility (default: private)")
    parser.add_argument("--overrides", default="overrides.json",
                        help="JSON map of 'Artist - Album' to album id or spotify:album:<id> (default: overrides.json)")
    parser.add_argument("--misses", default="misses.json",
                        help="Where to write the miss report (default: misses.json)")
    parser.add_argument("--no-browser", action="store_true",
                        help="Print the authorization URL without opening a browser")
    parser.add_argument("--auth-timeout", type=float, default=None,
                        help="Seconds to wait for the authorization redirect (default: wait indefinitely)")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: LOG_LEVEL from config, else INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = Config()
        if args.log_level:
            config.log_level = args.log_level
        config._validate()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s: %(message)s")
        logger.error(str(e))
        return 1

    logging.basicConfig(level=str(config.log_level).upper(), format=config.log_format)

    if args.auth_timeout is not None:
        config.auth_timeout = args.auth_timeout

    list_path = Path(args.list_file)
    try:
        if not list_path.exists():
            raise ListFileNotFoundError(f"List file not found: {list_path}")
        logger.info(f"Configuration loaded: {config}")

        result = run(
            config,
            list_path,
            playlist_name=args.playlist_name,
            public=args.visibility == "public",
            overrides_path=Path(args.overrides),
            misses_path=Path(args.misses),
            open_browser=not args.no_browser,
        )
    except AlbumListError as e:
        logger.error(str(e))
        return 1

    logger.info(
        f"Playlist {result.playlist.url}: {len(result.contributed)} albums, "
        f"{result.total_tracks} tracks, {len(result.report.misses)} misses"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
