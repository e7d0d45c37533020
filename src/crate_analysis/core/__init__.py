from crate_analysis.core.builder import AnalysisBuilder, BuilderClosedError
from crate_analysis.core.codec import DecodeError, decode, encode, output_filename
from crate_analysis.core.resolve import (
    AsymmetricLink,
    DanglingId,
    DefIndex,
    find_asymmetric_links,
    find_dangling_ids,
    find_duplicate_ids,
)
from crate_analysis.core.versioning import (
    LEGACY_SCHEMA_VERSION,
    SchemaCapabilities,
    UnsupportedSchemaError,
    capabilities,
    upgrade_document,
)

__all__ = [
    "LEGACY_SCHEMA_VERSION",
    "AnalysisBuilder",
    "AsymmetricLink",
    "BuilderClosedError",
    "DanglingId",
    "DecodeError",
    "DefIndex",
    "SchemaCapabilities",
    "UnsupportedSchemaError",
    "capabilities",
    "decode",
    "encode",
    "find_asymmetric_links",
    "find_dangling_ids",
    "find_duplicate_ids",
    "output_filename",
    "upgrade_document",
]
