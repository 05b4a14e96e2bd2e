"""
Configuration constants for the capture renamer.
"""
import os
from pathlib import Path

# --- Triage ---
# Thumbnail sidecars and low resolution proxy videos written next to the real clip
DELETABLE_EXTS = {'.thm', '.lrv'}
HIDDEN_PREFIX = '.'

# --- Filename Grammar ---
# Must match real camera output exactly
DATETIME_LAYOUT = "%Y%m%d_%H%M%S"
DATETIME_RE = r'\d{8}_\d{6}'

SINGLETON_SUFFIX = "0001"
UNKNOWN_SUFFIX = "UNKNOWN"

# --- Collisions ---
DUPLICATES_DIR = "duplicates"

# --- Metadata Probe ---
FFPROBE_CMD = "ffprobe"
# None = wait for the probe as long as it takes
PROBE_TIMEOUT_SEC = None
CREATION_TIME_TAG = "creation_time"

# --- Settings ---
SETTINGS_ENV = "CAPTURE_RENAMER_SETTINGS"
SETTINGS_PATH = Path(os.environ.get(SETTINGS_ENV, Path.home() / ".capture_renamer.json"))

