from datetime import datetime


def datetime_prefix(dt: datetime) -> str:
    """YYYYMMDD_HHMMSS, seconds precision."""
    return (
        f"{dt.year:04d}{dt.month:02d}{dt.day:02d}"
        f"_{dt.hour:02d}{dt.minute:02d}{dt.second:02d}"
    )


def build_filename(dt: datetime, suffix: str, custom_tag: str, extension: str) -> str:
    """
    Canonical target name: <prefix>_<suffix><custom_tag><extension>.

    custom_tag is appended as-is (callers include their own separator) and the
    extension keeps its leading dot but is lowercased.
    """
    return f"{datetime_prefix(dt)}_{suffix}{custom_tag}{extension.lower()}"
