import os

from crate_analysis.core.formats import normalize_format
from crate_analysis.models import Format


def get_default_format() -> Format | None:
    """Format forced through ``CRATE_ANALYSIS_FORMAT``, or ``None`` to detect it per file."""
    raw = os.getenv("CRATE_ANALYSIS_FORMAT")
    if not raw:
        return None
    return normalize_format(raw)


def get_log_level() -> str:
    return os.getenv("CRATE_ANALYSIS_LOG_LEVEL", "DEBUG").strip().upper()
