import os
from datetime import datetime
from pathlib import Path

import pytest

from capture_renamer.exceptions import MetadataProbeError


class FakeProbe:
    """Stands in for ffprobe: maps file names to a ProbeResult or an exception."""

    def __init__(self, results=None):
        self.results = results or {}
        self.calls = []

    def probe(self, path):
        self.calls.append(Path(path).name)
        result = self.results.get(Path(path).name)
        if result is None:
            raise MetadataProbeError(f"no metadata for {path}")
        if isinstance(result, Exception):
            raise result
        return result

    def describe(self, path):
        return f"Media information for: {path}"


@pytest.fixture
def make_file(tmp_path):
    """Creates a file in tmp_path with an optional modification time."""
    def _make(name, mtime=None, content=b"data", root=None):
        p = (root or tmp_path) / name
        p.write_bytes(content)
        if mtime is not None:
            ts = mtime.timestamp()
            os.utime(p, (ts, ts))
        return p
    return _make


@pytest.fixture
def fake_probe():
    return FakeProbe()


@pytest.fixture
def march_5():
    return datetime(2023, 3, 5, 8, 7, 9)
