from datetime import datetime, timezone

import pytest

from capture_renamer.exceptions import TimestampUnavailable, MetadataProbeError
from capture_renamer.metadata.timestamps import (
    TimestampResolver, apply_shift, parse_creation_time, find_creation_time,
)
from capture_renamer.models import SourceEntry, TimestampSource, TimeShift, ProbeResult


def local(dt_utc: datetime) -> datetime:
    return dt_utc.replace(tzinfo=timezone.utc).astimezone().replace(tzinfo=None)


def test_mtime_source_truncates_to_seconds(make_file, fake_probe):
    p = make_file("GOPR0042.MP4", mtime=datetime(2022, 7, 14, 10, 30, 15, 987000))
    resolver = TimestampResolver(fake_probe)

    dt = resolver.resolve(SourceEntry.from_path(p), TimestampSource.FILE_MODIFICATION_TIME)

    assert dt == datetime(2022, 7, 14, 10, 30, 15)
    assert fake_probe.calls == []


def test_mtime_source_missing_file(tmp_path, fake_probe):
    entry = SourceEntry.from_path(tmp_path / "gone.mp4")
    with pytest.raises(TimestampUnavailable):
        TimestampResolver(fake_probe).resolve(entry, TimestampSource.FILE_MODIFICATION_TIME)


def test_metadata_source_reads_creation_time(make_file, fake_probe):
    p = make_file("GX010042.MP4")
    fake_probe.results["GX010042.MP4"] = ProbeResult(format_tags={"creation_time": "2023-06-01T09:15:30.000000Z"})

    dt = TimestampResolver(fake_probe).resolve(SourceEntry.from_path(p), TimestampSource.EMBEDDED_VIDEO_METADATA)

    assert dt == local(datetime(2023, 6, 1, 9, 15, 30))


def test_metadata_source_falls_back_to_stream_tags(make_file, fake_probe):
    p = make_file("DJI_0001.MP4")
    fake_probe.results["DJI_0001.MP4"] = ProbeResult(
        format_tags={"encoder": "Lavf"},
        streams=[{"codec_type": "audio", "tags": {}},
                 {"codec_type": "video", "tags": {"creation_time": "2023-06-01T09:15:30Z"}}],
    )

    dt = TimestampResolver(fake_probe).resolve(SourceEntry.from_path(p), TimestampSource.EMBEDDED_VIDEO_METADATA)

    assert dt == local(datetime(2023, 6, 1, 9, 15, 30))


def test_metadata_source_without_tag(make_file, fake_probe):
    p = make_file("GOPR0001.MP4")
    fake_probe.results["GOPR0001.MP4"] = ProbeResult(format_tags={"encoder": "GoPro AVC"})

    with pytest.raises(TimestampUnavailable):
        TimestampResolver(fake_probe).resolve(SourceEntry.from_path(p), TimestampSource.EMBEDDED_VIDEO_METADATA)


def test_metadata_source_probe_failure(make_file, fake_probe):
    p = make_file("GOPR0001.MP4")
    fake_probe.results["GOPR0001.MP4"] = MetadataProbeError("ffprobe error")

    with pytest.raises(TimestampUnavailable):
        TimestampResolver(fake_probe).resolve(SourceEntry.from_path(p), TimestampSource.EMBEDDED_VIDEO_METADATA)


def test_filename_source_parses_encoded_datetime(tmp_path, fake_probe):
    entry = SourceEntry.from_path(tmp_path / "20230101_120000_beach.mp4")
    dt = TimestampResolver(fake_probe).resolve(entry, TimestampSource.ENCODED_FILENAME_DATETIME)
    assert dt == datetime(2023, 1, 1, 12, 0, 0)


@pytest.mark.parametrize("name", ["20230101_120000.mp4", "GOPR0042.MP4", "20231301_120000_x.mp4", "20230230_120000_x.mp4"])
def test_filename_source_rejects(tmp_path, fake_probe, name):
    entry = SourceEntry.from_path(tmp_path / name)
    with pytest.raises(TimestampUnavailable):
        TimestampResolver(fake_probe).resolve(entry, TimestampSource.ENCODED_FILENAME_DATETIME)


def test_parse_creation_time_formats():
    expected = local(datetime(2020, 1, 2, 3, 4, 5))
    assert parse_creation_time("2020-01-02T03:04:05.000000Z") == expected
    assert parse_creation_time("2020-01-02T03:04:05Z") == expected
    assert parse_creation_time("2020-01-02 03:04:05") == expected
    assert parse_creation_time("2020-01-02 03:04:05 UTC") == expected
    assert parse_creation_time("UTC 2020-01-02 03:04:05") == expected
    assert parse_creation_time("2020-01-02T05:04:05+02:00") == expected
    assert parse_creation_time("not a date") is None


def test_find_creation_time_prefers_format_tags():
    info = ProbeResult(
        format_tags={"creation_time": "A"},
        streams=[{"tags": {"creation_time": "B"}}],
    )
    assert find_creation_time(info) == "A"
    assert find_creation_time(ProbeResult()) is None


def test_apply_shift_zero_is_identity():
    dt = datetime(2023, 3, 5, 8, 7, 9)
    assert apply_shift(dt, TimeShift()) == dt


def test_apply_shift_hours_days_months():
    dt = datetime(2023, 3, 5, 8, 7, 9)
    assert apply_shift(dt, TimeShift(hours=-9, days=2, months=1)) == datetime(2023, 4, 6, 23, 7, 9)


def test_apply_shift_months_clamp_to_month_end():
    assert apply_shift(datetime(2023, 1, 31, 12), TimeShift(months=1)) == datetime(2023, 2, 28, 12)
    assert apply_shift(datetime(2024, 3, 31, 12), TimeShift(months=-1)) == datetime(2024, 2, 29, 12)


def test_apply_shift_months_applied_last():
    # +1h first lands on Jan 31, then +1 month clamps to Feb 28
    dt = datetime(2023, 1, 30, 23, 0, 0)
    assert apply_shift(dt, TimeShift(hours=1, months=1)) == datetime(2023, 2, 28, 0, 0, 0)
