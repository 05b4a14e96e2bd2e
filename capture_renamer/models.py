from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict


class NamingConvention(Enum):
    ENCODED_DATETIME = "EncodedDateTime"
    GENERIC_IMAGE = "GenericImage"
    ACTION_CAM_FIRST_SEGMENT = "ActionCamFirstSegment"
    ACTION_CAM_CONTINUATION = "ActionCamContinuation"
    # Reserved: the DJI rule deliberately reports ACTION_CAM_FIRST_SEGMENT
    DRONE_CAPTURE = "DroneCapture"
    UNKNOWN = "Unknown"


class TimestampSource(Enum):
    FILE_MODIFICATION_TIME = "mtime"
    EMBEDDED_VIDEO_METADATA = "metadata"
    ENCODED_FILENAME_DATETIME = "filename"


class TriageDecision(Enum):
    DELETE = "delete"
    SKIP = "skip"
    PROCESS = "process"


@dataclass(frozen=True)
class SourceEntry:
    """
    A file found directly inside the working directory.
    """
    path: Path
    name: str
    ext: str                # lowercased, with leading dot ('' if none)

    @classmethod
    def from_path(cls, path: Path) -> "SourceEntry":
        path = Path(path).absolute()
        return cls(path=path, name=path.name, ext=path.suffix.lower())


@dataclass(frozen=True)
class ClassificationResult:
    convention: NamingConvention
    suffix: str
    rule: str = "fallback"  # name of the rule that matched, for logging


@dataclass(frozen=True)
class TimeShift:
    hours: int = 0
    days: int = 0
    months: int = 0


@dataclass
class RenameOptions:
    """Run-level configuration consumed by the orchestrator."""
    timestamp_source: TimestampSource = TimestampSource.FILE_MODIFICATION_TIME
    shift: TimeShift = field(default_factory=TimeShift)
    custom_tag: str = ""
    dry_run: bool = True
    set_mtime: bool = True


@dataclass(frozen=True)
class RenamePlan:
    source: SourceEntry
    target_name: str
    target_path: Path
    is_fallback: bool = False


@dataclass
class FileOutcome:
    """
    What happened (or, in a dry run, would have happened) to one entry.

    action is one of: deleted, skipped, renamed, fallback, unchanged, failed
    """
    source: Path
    decision: TriageDecision
    action: str
    target: Optional[Path] = None
    is_fallback: bool = False
    capture_datetime: Optional[datetime] = None
    shifted_datetime: Optional[datetime] = None
    convention: Optional[NamingConvention] = None
    reason: str = ""
    dry_run: bool = False


@dataclass
class ProbeResult:
    """Tags returned by the metadata probe."""
    format_name: Optional[str] = None
    duration_sec: Optional[float] = None
    format_tags: Dict[str, str] = field(default_factory=dict)
    streams: List[Dict] = field(default_factory=list)
