import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .. import config
from ..exceptions import TimestampUnavailable, MetadataProbeError
from ..models import SourceEntry, TimestampSource, TimeShift, ProbeResult
from ..naming.classifier import DATETIME_WITH_NAME
from .probe import MetadataProbe


class TimestampResolver:
    """
    Produces the capture instant for a file from the configured source.
    Results are naive local wall-clock datetimes truncated to whole seconds.
    """

    def __init__(self, probe: Optional[MetadataProbe] = None):
        self.probe = probe or MetadataProbe()

    def resolve(self, entry: SourceEntry, source: TimestampSource) -> datetime:
        if source is TimestampSource.FILE_MODIFICATION_TIME:
            return self._from_mtime(entry)
        if source is TimestampSource.EMBEDDED_VIDEO_METADATA:
            return self._from_metadata(entry)
        if source is TimestampSource.ENCODED_FILENAME_DATETIME:
            return self._from_filename(entry)
        raise ValueError(f"Unknown timestamp source: {source}")

    def _from_mtime(self, entry: SourceEntry) -> datetime:
        try:
            ts = entry.path.stat().st_mtime
        except OSError as e:
            raise TimestampUnavailable(f"Cannot stat {entry.path}: {e}") from e
        return datetime.fromtimestamp(ts).replace(microsecond=0)

    def _from_metadata(self, entry: SourceEntry) -> datetime:
        try:
            info = self.probe.probe(entry.path)
        except MetadataProbeError as e:
            raise TimestampUnavailable(str(e)) from e

        raw = find_creation_time(info)
        if raw is None:
            raise TimestampUnavailable(f"No {config.CREATION_TIME_TAG} tag in {entry.name}")

        dt = parse_creation_time(raw)
        if dt is None:
            raise TimestampUnavailable(f"Unparseable {config.CREATION_TIME_TAG} '{raw}' in {entry.name}")
        return dt

    def _from_filename(self, entry: SourceEntry) -> datetime:
        m = DATETIME_WITH_NAME.match(entry.name)
        if not m:
            raise TimestampUnavailable(f"{entry.name} does not carry an encoded date_time")

        stamp = m.group(1)
        logging.debug(f"Encoded date_time before parsing: {stamp}")
        try:
            return datetime.strptime(stamp, config.DATETIME_LAYOUT)
        except ValueError as e:
            raise TimestampUnavailable(f"Invalid encoded date_time '{stamp}' in {entry.name}") from e


def find_creation_time(info: ProbeResult) -> Optional[str]:
    """Container tags first, then the first stream that has one."""
    value = info.format_tags.get(config.CREATION_TIME_TAG)
    if value:
        return value
    for stream in info.streams:
        value = (stream.get('tags') or {}).get(config.CREATION_TIME_TAG)
        if value:
            return value
    return None


def parse_creation_time(raw: str) -> Optional[datetime]:
    """
    Parses an ISO-8601 creation_time ('2023-01-01T12:00:00.000000Z') into
    naive local time. Values without an offset are taken as UTC, which is
    what MP4/MOV containers store.
    """
    clean = re.sub(r'\bUTC\b', '', raw).strip()
    try:
        dt = isoparse(clean)
    except ValueError:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone().replace(tzinfo=None, microsecond=0)


def apply_shift(dt: datetime, shift: TimeShift) -> datetime:
    """Hours, then days, then calendar months."""
    return dt + timedelta(hours=shift.hours) + timedelta(days=shift.days) + relativedelta(months=shift.months)
