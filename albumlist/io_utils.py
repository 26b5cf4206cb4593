"""General I/O utilities for the album list, override table and miss report.

This module centralizes filesystem I/O helpers so the resolver and run
coordinator never touch files directly.
"""
from pathlib import Path
import json
import logging
from typing import Dict, List

from albumlist.exceptions import ListFileNotFoundError
from albumlist.models import AlbumEntry, MissReport

logger = logging.getLogger(__name__)

SEPARATOR = " - "


def parse_album_list(path: Path) -> List[AlbumEntry]:
    """Read an `Artist - Album` list file into entries.

    Blank lines are skipped. The first " - " splits artist from album; any
    further separators stay part of the album name.
    """
    p = Path(path)
    if not p.exists():
        raise ListFileNotFoundError(f"List file not found: {p}")
    entries = []
    for line in p.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line:
            continue
        artist, _, album = line.partition(SEPARATOR)
        entries.append(AlbumEntry(artist=artist, album=album))
    logger.info(f"Parsed {len(entries)} entries from {p}")
    return entries


def load_overrides(path: Path) -> Dict[str, str]:
    """Load the `"Artist - Album" -> album id` override table.

    A missing file means no overrides. A file that cannot be parsed as a JSON
    object is ignored with a warning.
    """
    p = Path(path)
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable override file {p}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring override file {p}: expected a JSON object")
        return {}
    overrides = {str(k): str(v) for k, v in data.items() if v is not None}
    logger.info(f"Loaded {len(overrides)} overrides from {p}")
    return overrides


def write_miss_report(path: Path, report: MissReport) -> Path:
    """Write the miss report as indented JSON and return its path."""
    p = Path(path)
    p.write_text(json.dumps(report.to_dict(), indent=2) + "\n", encoding='utf-8')
    logger.info(f"Wrote miss report with {len(report.misses)} misses: {p}")
    return p
