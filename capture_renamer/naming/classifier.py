"""
Recognizes which camera naming convention produced a filename and pulls the
disambiguating suffix out of it.

Rules are tried in a fixed order and the first one that yields a result wins.
Order matters: the encoded date_time forms have to be tried before the bare
chapter patterns, and the GoPro 'G[XH]01' first chapter before the generic
'G[XH]NN' continuation.
"""
import re
from typing import Callable, List, Optional

from .. import config
from ..models import ClassificationResult, NamingConvention

Rule = Callable[[str], Optional[ClassificationResult]]

DATETIME_ONLY = re.compile(rf'^({config.DATETIME_RE})\.[^.]+$')
DATETIME_WITH_NAME = re.compile(rf'^({config.DATETIME_RE})_(.+)\.[^.]+$')
GENERIC_IMAGE = re.compile(r'^IMG_(.+)\.[^.]+$')

# GoPro HERO (older): GOPR0042.MP4, continuation GP010042.MP4 (chapter 01 = 2nd file)
GOPRO_FIRST_A = re.compile(r'^GOPR(\d+)')
GOPRO_CONT_A = re.compile(r'^GP(\d{2})(\d+)')

# GoPro HERO6+: GX010042.MP4 / GH010042.MP4, chapter 01 = 1st file
GOPRO_FIRST_B = re.compile(r'^G[XH]01(\d+)')
GOPRO_CONT_B = re.compile(r'^G[XH](\d{2})(\d+)')

DRONE = re.compile(r'^DJI_(\d+)')


def _datetime_only(filename: str) -> Optional[ClassificationResult]:
    if DATETIME_ONLY.match(filename):
        return ClassificationResult(NamingConvention.ENCODED_DATETIME, config.SINGLETON_SUFFIX, "datetime")
    return None


def _datetime_with_name(filename: str) -> Optional[ClassificationResult]:
    m = DATETIME_WITH_NAME.match(filename)
    if m:
        return ClassificationResult(NamingConvention.ENCODED_DATETIME, m.group(2), "datetime_name")
    return None


def _generic_image(filename: str) -> Optional[ClassificationResult]:
    m = GENERIC_IMAGE.match(filename)
    if m:
        return ClassificationResult(NamingConvention.GENERIC_IMAGE, m.group(1), "img")
    return None


def _gopro_first_a(filename: str) -> Optional[ClassificationResult]:
    m = GOPRO_FIRST_A.match(filename)
    if m:
        return ClassificationResult(NamingConvention.ACTION_CAM_FIRST_SEGMENT, m.group(1), "gopro_first")
    return None


def _gopro_continuation_a(filename: str) -> Optional[ClassificationResult]:
    m = GOPRO_CONT_A.match(filename)
    if m:
        chapter, clip_id = m.groups()
        return ClassificationResult(NamingConvention.ACTION_CAM_CONTINUATION, f"{clip_id}_{chapter}", "gopro_chapter")
    return None


def _gopro_first_b(filename: str) -> Optional[ClassificationResult]:
    m = GOPRO_FIRST_B.match(filename)
    if m:
        return ClassificationResult(NamingConvention.ACTION_CAM_FIRST_SEGMENT, m.group(1), "gopro_hevc_first")
    return None


def _chapter_index(raw: str) -> Optional[int]:
    """1-based chapter index -> 0-based. Chapter 00 becomes -1."""
    try:
        return int(raw) - 1
    except ValueError:
        return None


def _two_digits(n: int) -> str:
    # Sign first, then at least two digits: -1 -> "-01"
    return f"-{-n:02d}" if n < 0 else f"{n:02d}"


def _gopro_continuation_b(filename: str) -> Optional[ClassificationResult]:
    m = GOPRO_CONT_B.match(filename)
    if not m:
        return None
    raw_chapter, clip_id = m.groups()
    chapter = _chapter_index(raw_chapter)
    if chapter is None:
        # Fall through to the remaining rules
        return None
    return ClassificationResult(NamingConvention.ACTION_CAM_CONTINUATION, f"{clip_id}_{_two_digits(chapter)}", "gopro_hevc_chapter")


def _drone(filename: str) -> Optional[ClassificationResult]:
    m = DRONE.match(filename)
    if m:
        # Drone clips share the first-segment suffix shape
        return ClassificationResult(NamingConvention.ACTION_CAM_FIRST_SEGMENT, m.group(1), "dji")
    return None


RULES: List[Rule] = [
    _datetime_only,
    _datetime_with_name,
    _generic_image,
    _gopro_first_a,
    _gopro_continuation_a,
    _gopro_first_b,
    _gopro_continuation_b,
    _drone,
]

UNKNOWN = ClassificationResult(NamingConvention.UNKNOWN, config.UNKNOWN_SUFFIX)


def classify(filename: str) -> ClassificationResult:
    """
    Returns the convention and suffix for a bare filename (no directory part).
    Never raises; unmatched names come back as Unknown/'UNKNOWN'.
    """
    for rule in RULES:
        result = rule(filename)
        if result is not None:
            return result
    return UNKNOWN
