import logging
from pathlib import Path

from crate_analysis.config import get_default_format
from crate_analysis.core.codec import decode, encode
from crate_analysis.core.formats import resolve_format
from crate_analysis.models import Analysis, Format

logger = logging.getLogger(__name__)


def read_document(path: str, format_name: str | None = None) -> tuple[Analysis, Format]:
    """Read and decode an analysis file.

    The format comes from ``format_name``, then ``CRATE_ANALYSIS_FORMAT``, then
    the file itself. Returns (analysis, resolved_format).
    """
    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None

    fmt = resolve_format(format_name, file_path, data, get_default_format())

    logger.info("Reading %s as %s", file_path, fmt.value)
    return decode(data, fmt), fmt


def write_document(analysis: Analysis, path: str, fmt: Format | None = None) -> Path:
    file_path = Path(path)
    data = encode(analysis, fmt)
    file_path.write_bytes(data)
    logger.info("Wrote %d bytes to %s", len(data), file_path)
    return file_path
