# roastmyrun/duration.py
from typing import Optional, Tuple


def format_duration(hours: int, minutes: int, seconds: int) -> str:
    """
    Zero-pad each field to two digits and join with colons: (1, 2, 3) -> "01:02:03".
    """
    if hours < 0 or minutes < 0 or seconds < 0:
        raise ValueError("duration fields must be non-negative")
    return f"{int(hours):02d}:{int(minutes):02d}:{int(seconds):02d}"


def parse_duration(text: str) -> Tuple[int, int, int]:
    """
    Parse "H:M:S" or "M:S" (one or two digit fields) into (hours, minutes, seconds).
    """
    parts = text.strip().split(":")
    if len(parts) == 2:
        parts = ["0"] + parts
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"not a duration: {text!r}")

    hours, minutes, seconds = (int(p) for p in parts)
    if minutes >= 60 or seconds >= 60:
        raise ValueError(f"minutes/seconds must be < 60: {text!r}")
    return hours, minutes, seconds


def normalize_duration(text: Optional[str]) -> Optional[str]:
    # unparseable input goes through as typed, we only trust the shape
    if text is None or not text.strip():
        return None
    try:
        return format_duration(*parse_duration(text))
    except ValueError:
        return text.strip()
