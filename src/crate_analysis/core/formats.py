import json
from pathlib import Path

from crate_analysis.models import Format

_FORMAT_ALIASES = {
    "csv": Format.CSV,
    "json": Format.JSON,
    "jsonapi": Format.JSON_API,
    "json-api": Format.JSON_API,
    "json_api": Format.JSON_API,
}

_EXTENSION_FORMAT_MAP = {
    ".csv": Format.CSV,
    ".json": Format.JSON,
}


def normalize_format(name: str) -> Format:
    normalized = name.strip().lower()
    resolved = _FORMAT_ALIASES.get(normalized)
    if resolved is None:
        raise ValueError(f"Unsupported format '{name}'. Supported: {sorted(_FORMAT_ALIASES)}")
    return resolved


def detect_format_from_path(file_path: Path) -> Format:
    suffix = file_path.suffix.lower()
    if suffix in _EXTENSION_FORMAT_MAP:
        return _EXTENSION_FORMAT_MAP[suffix]
    raise ValueError(f"Unsupported file extension: {suffix}")


def sniff_format(data: bytes, file_path: Path) -> Format:
    """Pick a format from the extension, telling the two ``.json`` flavours apart by content."""
    fmt = detect_format_from_path(file_path)
    if fmt != Format.JSON:
        return fmt
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return fmt
    if isinstance(raw, dict) and "jsonapi" in raw:
        return Format.JSON_API
    return fmt


def resolve_format(name: str | None, file_path: Path, data: bytes, default: Format | None = None) -> Format:
    """An explicit name wins, then ``default``, then whatever the file looks like."""
    if name:
        return normalize_format(name)
    if default is not None:
        return default
    return sniff_format(data, file_path)
