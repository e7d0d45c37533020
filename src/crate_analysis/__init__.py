from crate_analysis.models import (
    SCHEMA_VERSION,
    U32_MAX,
    Analysis,
    Attribute,
    CratePreludeData,
    Def,
    DefKind,
    ExternalCrateData,
    Format,
    Id,
    Import,
    ImportKind,
    MacroRef,
    Ref,
    RefKind,
    Relation,
    RelationKind,
    SigElement,
    Signature,
    SpanData,
)

__all__ = [
    "SCHEMA_VERSION",
    "U32_MAX",
    "Analysis",
    "Attribute",
    "CratePreludeData",
    "Def",
    "DefKind",
    "ExternalCrateData",
    "Format",
    "Id",
    "Import",
    "ImportKind",
    "MacroRef",
    "Ref",
    "RefKind",
    "Relation",
    "RelationKind",
    "SigElement",
    "Signature",
    "SpanData",
]
