"""Encoding and decoding of analysis documents.

``Json`` is the canonical wire form: the model dumped field by field, enum
variants by name, optional fields always present. ``JsonApi`` wraps the same
records as JSON:API resource objects. ``Csv`` is a flat, lossy export that is
never decoded.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from crate_analysis.core.versioning import UnsupportedSchemaError, upgrade_document
from crate_analysis.models import Analysis, Format, Id, SpanData

logger = logging.getLogger(__name__)

ROOT_PATH = "(root)"
JSON_API_VERSION = "1.0"

_COLLECTIONS = ("imports", "defs", "refs", "macro_refs", "relations")
_REQUIRED_KEYS = ("kind", *_COLLECTIONS)

_CSV_COLUMNS = (
    "record",
    "kind",
    "id",
    "name",
    "qualname",
    "value",
    "parent",
    "children",
    "decl_id",
    "ref_id",
    "from",
    "to",
    "file_name",
    "byte_start",
    "byte_end",
    "line_start",
    "line_end",
    "column_start",
    "column_end",
)


class DecodeError(ValueError):
    """Raised when bytes do not form a structurally valid analysis document.

    ``path`` is the dotted location of the first offending field, e.g.
    ``defs.0.kind``.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


def output_filename(stem: str, fmt: Format) -> str:
    return f"{stem}{fmt.extension()}"


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode(analysis: Analysis, fmt: Format | None = None) -> bytes:
    """Serialize ``analysis``. The format defaults to ``analysis.kind``."""
    if fmt is not None and fmt != analysis.kind:
        analysis = analysis.model_copy(update={"kind": fmt})
    target = analysis.kind

    if target == Format.JSON:
        out = analysis.model_dump_json(by_alias=True).encode("utf-8")
    elif target == Format.JSON_API:
        out = json.dumps(_to_json_api(analysis), ensure_ascii=False).encode("utf-8")
    elif target == Format.CSV:
        out = _to_csv(analysis).encode("utf-8")
    else:
        raise AssertionError(f"Unhandled format: {target!r}")

    logger.debug("Encoded %s document (%d bytes)", target.value, len(out))
    return out


def _to_json_api(analysis: Analysis) -> dict[str, Any]:
    doc = analysis.model_dump(mode="json", by_alias=True)
    data: list[dict[str, Any]] = []
    for collection in _COLLECTIONS:
        for position, attributes in enumerate(doc[collection]):
            data.append(_json_api_resource(collection, position, attributes))
    return {
        "jsonapi": {"version": JSON_API_VERSION},
        "meta": {"kind": doc["kind"], "version": doc["version"], "prelude": doc["prelude"]},
        "data": data,
    }


def _json_api_resource(collection: str, position: int, attributes: dict[str, Any]) -> dict[str, Any]:
    if collection != "defs":
        return {"type": collection, "id": f"{collection}-{position}", "attributes": attributes}

    def _linkage(raw_id: dict[str, int]) -> dict[str, str]:
        return {"type": "defs", "id": f"{raw_id['krate']}:{raw_id['index']}"}

    parent = attributes["parent"]
    return {
        "type": "defs",
        "id": f"{attributes['id']['krate']}:{attributes['id']['index']}",
        "attributes": attributes,
        "relationships": {
            "parent": {"data": _linkage(parent) if parent is not None else None},
            "children": {"data": [_linkage(child) for child in attributes["children"]]},
        },
    }


def _fmt_id(value: Id | None) -> str:
    return "" if value is None else str(value)


def _span_columns(span: SpanData) -> dict[str, Any]:
    return {
        "file_name": span.file_name,
        "byte_start": span.byte_start,
        "byte_end": span.byte_end,
        "line_start": span.line_start,
        "line_end": span.line_end,
        "column_start": span.column_start,
        "column_end": span.column_end,
    }


def _to_csv(analysis: Analysis) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=_CSV_COLUMNS, restval="", lineterminator="\n")
    writer.writeheader()

    if analysis.prelude is not None:
        prelude = analysis.prelude
        writer.writerow(
            {"record": "prelude", "name": prelude.crate_name, "value": prelude.crate_root, **_span_columns(prelude.span)}
        )
        for ext in prelude.external_crates:
            writer.writerow({"record": "external_crate", "id": ext.num, "name": ext.name, "file_name": ext.file_name})

    for imp in analysis.imports:
        writer.writerow(
            {
                "record": "import",
                "kind": imp.kind.value,
                "name": imp.name,
                "value": imp.value,
                "ref_id": _fmt_id(imp.ref_id),
                **_span_columns(imp.span),
            }
        )
    for d in analysis.defs:
        writer.writerow(
            {
                "record": "def",
                "kind": d.kind.value,
                "id": str(d.id),
                "name": d.name,
                "qualname": d.qualname,
                "value": d.value,
                "parent": _fmt_id(d.parent),
                "children": ";".join(str(c) for c in d.children),
                "decl_id": _fmt_id(d.decl_id),
                **_span_columns(d.span),
            }
        )
    for r in analysis.refs:
        writer.writerow({"record": "ref", "kind": r.kind.value, "ref_id": str(r.ref_id), **_span_columns(r.span)})
    for m in analysis.macro_refs:
        writer.writerow({"record": "macro_ref", "qualname": m.qualname, **_span_columns(m.span)})
    for rel in analysis.relations:
        writer.writerow(
            {
                "record": "relation",
                "kind": rel.kind.value,
                "from": str(rel.from_),
                "to": str(rel.to),
                **_span_columns(rel.span),
            }
        )
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode(data: bytes | str, expected_kind: Format) -> Analysis:
    """Parse a document produced by :func:`encode` with ``expected_kind``.

    Raises ``DecodeError`` for the first structural violation found. Paths
    refer to the input as given, so for ``JsonApi`` they point into ``meta``
    and ``data``.
    """
    if expected_kind == Format.CSV:
        raise DecodeError(ROOT_PATH, "csv documents are an export format and cannot be decoded")

    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(ROOT_PATH, f"invalid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise DecodeError(ROOT_PATH, f"expected an object, got {type(raw).__name__}")

    positions: dict[tuple[str, int], int] | None = None
    if expected_kind == Format.JSON_API:
        raw, positions = _from_json_api(raw)

    def _fail(loc: Sequence[str | int], message: str) -> DecodeError:
        if positions is not None and loc:
            loc = _json_api_loc(loc, positions)
        return DecodeError(".".join(str(part) for part in loc) or ROOT_PATH, message)

    try:
        raw = upgrade_document(raw)
    except UnsupportedSchemaError as exc:
        loc = [int(part) if part.isdigit() else part for part in exc.path.split(".")]
        raise _fail(loc, exc.message) from exc

    for key in _REQUIRED_KEYS:
        if key not in raw:
            raise _fail([key], "Field required")

    try:
        analysis = Analysis.model_validate(raw, by_alias=True, by_name=False)
    except ValidationError as exc:
        first = exc.errors()[0]
        raise _fail(first["loc"], first["msg"]) from exc

    if analysis.kind != expected_kind:
        raise _fail(["kind"], f"expected '{expected_kind.value}', got '{analysis.kind.value}'")

    logger.debug(
        "Decoded %s document: %d defs, %d refs, %d relations",
        expected_kind.value,
        len(analysis.defs),
        len(analysis.refs),
        len(analysis.relations),
    )
    return analysis


def _from_json_api(raw: dict[str, Any]) -> tuple[dict[str, Any], dict[tuple[str, int], int]]:
    """Flatten a JSON:API envelope into the plain document shape.

    Also returns where each flattened record came from: (collection, position)
    to its index in ``data``.
    """
    meta = raw.get("meta")
    if not isinstance(meta, dict):
        raise DecodeError("meta", "expected an object")
    data = raw.get("data")
    if not isinstance(data, list):
        raise DecodeError("data", "expected a list of resource objects")

    collections: dict[str, list[Any]] = {collection: [] for collection in _COLLECTIONS}
    positions: dict[tuple[str, int], int] = {}
    for idx, resource in enumerate(data):
        if not isinstance(resource, dict):
            raise DecodeError(f"data.{idx}", "expected a resource object")
        resource_type = resource.get("type")
        if resource_type not in collections:
            raise DecodeError(f"data.{idx}.type", f"unknown resource type {resource_type!r}")
        attributes = resource.get("attributes")
        if not isinstance(attributes, dict):
            raise DecodeError(f"data.{idx}.attributes", "expected an object")
        positions[(resource_type, len(collections[resource_type]))] = idx
        collections[resource_type].append(attributes)

    return {**meta, **collections}, positions


def _json_api_loc(loc: Sequence[str | int], positions: dict[tuple[str, int], int]) -> list[str | int]:
    head, rest = loc[0], list(loc[1:])
    if head in _COLLECTIONS and rest and isinstance(rest[0], int):
        idx = positions.get((str(head), rest[0]))
        if idx is not None:
            return ["data", idx, "attributes", *rest[1:]]
    if head in _COLLECTIONS:
        return ["data", *rest]
    return ["meta", head, *rest]
