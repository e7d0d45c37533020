"""Schema versions and the adapter that lifts legacy documents to the current one.

Version 1 documents predate ``DefKind.Union`` and carry neither ``parent`` nor
``attributes`` on their defs. They also have no ``version`` key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from crate_analysis.models import SCHEMA_VERSION, DefKind

logger = logging.getLogger(__name__)

LEGACY_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class SchemaCapabilities:
    version: int
    has_union: bool
    has_def_parent: bool
    has_def_attributes: bool


_CAPABILITIES = {
    LEGACY_SCHEMA_VERSION: SchemaCapabilities(
        version=LEGACY_SCHEMA_VERSION,
        has_union=False,
        has_def_parent=False,
        has_def_attributes=False,
    ),
    SCHEMA_VERSION: SchemaCapabilities(
        version=SCHEMA_VERSION,
        has_union=True,
        has_def_parent=True,
        has_def_attributes=True,
    ),
}


class UnsupportedSchemaError(ValueError):
    """Raised when a raw document cannot be mapped onto the current schema."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


def capabilities(version: int) -> SchemaCapabilities:
    try:
        return _CAPABILITIES[version]
    except KeyError:
        raise UnsupportedSchemaError("version", f"unknown schema version {version!r}") from None


def detect_version(raw: dict[str, Any]) -> int:
    version = raw.get("version", LEGACY_SCHEMA_VERSION)
    # bool is an int subclass; reject it explicitly.
    if not isinstance(version, int) or isinstance(version, bool):
        raise UnsupportedSchemaError("version", f"expected an integer, got {type(version).__name__}")
    capabilities(version)
    return version


def upgrade_document(raw: dict[str, Any]) -> dict[str, Any]:
    """Return ``raw`` in the current schema shape.

    Current documents are returned unchanged. The input is never mutated.
    """
    version = detect_version(raw)
    if version == SCHEMA_VERSION:
        return raw

    logger.info("Upgrading analysis document from schema version %d to %d", version, SCHEMA_VERSION)
    upgraded = dict(raw)
    upgraded["version"] = SCHEMA_VERSION
    defs = raw.get("defs")
    if isinstance(defs, list):
        upgraded["defs"] = [_upgrade_def(item, idx) for idx, item in enumerate(defs)]
    return upgraded


def _upgrade_def(item: Any, idx: int) -> Any:
    if not isinstance(item, dict):
        # Left for model validation to report with its own path.
        return item
    if item.get("kind") == DefKind.UNION.value:
        raise UnsupportedSchemaError(
            f"defs.{idx}.kind",
            f"'{DefKind.UNION.value}' is not available in schema version {LEGACY_SCHEMA_VERSION}",
        )
    upgraded = dict(item)
    upgraded.setdefault("parent", None)
    upgraded.setdefault("attributes", [])
    return upgraded
