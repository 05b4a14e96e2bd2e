import os
import logging
from pathlib import Path
from typing import List

from .. import config
from ..models import SourceEntry, TriageDecision


def list_entries(root: Path) -> List[SourceEntry]:
    """
    Files directly inside root (no recursion, no directories), sorted by
    lowercased name for a stable processing order.

    The listing is taken once up front so files renamed during the run are
    not picked up a second time.
    """
    with os.scandir(root) as it:
        entries = [Path(e.path) for e in it if e.is_file(follow_symlinks=False)]

    entries.sort(key=lambda p: p.name.lower())
    logging.debug(f"Found {len(entries)} files in {root}")
    return [SourceEntry.from_path(p) for p in entries]


def triage(entry: SourceEntry) -> TriageDecision:
    # Delete thumbnails and low resolution video files
    if entry.ext in config.DELETABLE_EXTS:
        return TriageDecision.DELETE

    # Skip hidden files
    if entry.name.startswith(config.HIDDEN_PREFIX):
        return TriageDecision.SKIP

    return TriageDecision.PROCESS
