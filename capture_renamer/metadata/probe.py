import logging
import subprocess
import json
from pathlib import Path
from typing import Optional, Dict, Any, List

from .. import config
from ..exceptions import MetadataProbeError
from ..models import ProbeResult

# Type hint 'Any' keeps the checker quiet about "None" having no attribute "parse"
MediaInfo: Any = None
try:
    from pymediainfo import MediaInfo
except ImportError:
    MediaInfo = None


class MetadataProbe:
    """
    Best-effort reader of container-level tags for video files.

    Strategies:
      - ffprobe (FFmpeg) JSON output, format + stream tags.
      - pymediainfo, only when the ffprobe executable is not installed.

    Anything that goes wrong surfaces as MetadataProbeError.
    """

    def __init__(self, ffprobe_cmd: str = config.FFPROBE_CMD, timeout: Optional[float] = config.PROBE_TIMEOUT_SEC):
        self.ffprobe_cmd = ffprobe_cmd
        self.timeout = timeout

    def probe(self, path: Path) -> ProbeResult:
        try:
            return self._extract_ffprobe(path)
        except FileNotFoundError:
            if MediaInfo is None:
                raise MetadataProbeError(f"{self.ffprobe_cmd} not found and pymediainfo not installed")
            logging.debug(f"{self.ffprobe_cmd} not found, falling back to MediaInfo for {path}")

        try:
            return self._extract_mediainfo(path)
        except Exception as e:
            raise MetadataProbeError(f"MediaInfo failed for {path}: {e}") from e

    def describe(self, path: Path) -> str:
        """Multi-line human readable summary, used for debug logging."""
        info = self.probe(path)
        lines = [f"Media information for: {path}"]
        lines.append(f"File format: {info.format_name}")
        lines.append(f"Duration: {info.duration_sec}")
        for key, value in info.format_tags.items():
            lines.append(f"\t{key}: {value}")

        for stream in info.streams:
            lines.append(f"Stream {stream.get('codec_name')} ({stream.get('codec_type')})")
            if stream.get('codec_type') == "video":
                lines.append(f"\tFrame size: {stream.get('width')}x{stream.get('height')}")
                lines.append(f"\tFrame rate: {stream.get('frame_rate')}")
            for key, value in (stream.get('tags') or {}).items():
                lines.append(f"\t{key}: {value}")
        return "\n".join(lines)

    # --- Internal Extraction Helpers ---

    def _extract_ffprobe(self, path: Path) -> ProbeResult:
        """
        Wraps the 'ffprobe' command line utility.
        FileNotFoundError propagates so the caller can try MediaInfo.
        """
        cmd = [
            self.ffprobe_cmd,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            str(path),
        ]
        try:
            out = subprocess.check_output(cmd, stderr=subprocess.DEVNULL, text=True, timeout=self.timeout)
        except subprocess.CalledProcessError as e:
            raise MetadataProbeError(f"ffprobe error for {path}: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise MetadataProbeError(f"ffprobe timed out for {path}") from e
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError) as e:
            raise MetadataProbeError(f"Could not run {self.ffprobe_cmd} for {path}: {e}") from e

        try:
            data = json.loads(out)
        except ValueError as e:
            raise MetadataProbeError(f"ffprobe returned invalid JSON for {path}: {e}") from e

        if not isinstance(data, dict):
            raise MetadataProbeError(f"ffprobe returned unexpected JSON for {path}")
        try:
            return self._parse_ffprobe(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise MetadataProbeError(f"Malformed ffprobe output for {path}: {e}") from e

    def _parse_ffprobe(self, data: Dict[str, Any]) -> ProbeResult:
        fmt = data.get("format") or {}
        result = ProbeResult(
            format_name=fmt.get("format_name"),
            format_tags=dict(fmt.get("tags") or {}),
        )
        if fmt.get("duration"):
            try:
                result.duration_sec = float(fmt["duration"])
            except ValueError:
                pass

        for stream in data.get("streams") or []:
            result.streams.append({
                'codec_name': stream.get("codec_name"),
                'codec_type': stream.get("codec_type"),
                'width': stream.get("width"),
                'height': stream.get("height"),
                'frame_rate': self._parse_frame_rate(stream.get("avg_frame_rate") or stream.get("r_frame_rate")),
                'tags': dict(stream.get("tags") or {}),
            })
        return result

    def _parse_frame_rate(self, rate: Optional[str]) -> Optional[float]:
        """ffprobe reports rates as fractions, e.g. '30000/1001'."""
        if not rate:
            return None
        try:
            num, _, den = rate.partition("/")
            value = float(num) / float(den or 1)
        except (ValueError, ZeroDivisionError):
            return None
        return round(value, 2)

    def _extract_mediainfo(self, path: Path) -> ProbeResult:
        """Parses video using pymediainfo, mapped onto ffprobe's tag names."""
        mi = MediaInfo.parse(str(path))
        result = ProbeResult()
        streams: List[Dict[str, Any]] = []

        for track in mi.tracks:
            if track.track_type == "General":
                result.format_name = getattr(track, "format", None)
                if getattr(track, "duration", None):
                    # MediaInfo duration is in milliseconds
                    result.duration_sec = float(track.duration) / 1000.0

                # Priority: Encoded -> Tagged -> Recorded
                for field in ["encoded_date", "tagged_date", "recorded_date"]:
                    val = getattr(track, field, None)
                    if val:
                        result.format_tags[config.CREATION_TIME_TAG] = str(val)
                        break
            elif track.track_type in ("Video", "Audio"):
                frame_rate = getattr(track, "frame_rate", None)
                streams.append({
                    'codec_name': getattr(track, "format", None),
                    'codec_type': track.track_type.lower(),
                    'width': getattr(track, "width", None),
                    'height': getattr(track, "height", None),
                    'frame_rate': float(frame_rate) if frame_rate else None,
                    'tags': {},
                })
        result.streams = streams
        return result
