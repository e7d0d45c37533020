"""Analysis document schema.

One ``Analysis`` describes a single compiled unit: its prelude, imports,
declarations, references, macro invocation sites and relations. Records never
hold each other by reference; every link is an ``Id`` value.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator

U32_MAX = 0xFFFFFFFF
SCHEMA_VERSION = 2

U32 = Annotated[StrictInt, Field(ge=0, le=U32_MAX)]
OneIndexed = Annotated[StrictInt, Field(ge=1, le=U32_MAX)]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_by_name=True, validate_by_alias=True)


# --- Enumerations ---


class Format(str, Enum):
    CSV = "Csv"
    JSON = "Json"
    JSON_API = "JsonApi"

    def extension(self) -> str:
        return _FORMAT_EXTENSIONS[self]


_FORMAT_EXTENSIONS = {
    Format.CSV: ".csv",
    Format.JSON: ".json",
    Format.JSON_API: ".json",
}


class ImportKind(str, Enum):
    EXTERN_CRATE = "ExternCrate"
    USE = "Use"
    GLOB_USE = "GlobUse"


class DefKind(str, Enum):
    ENUM = "Enum"
    TUPLE = "Tuple"
    STRUCT = "Struct"
    UNION = "Union"
    TRAIT = "Trait"
    FUNCTION = "Function"
    METHOD = "Method"
    MACRO = "Macro"
    MOD = "Mod"
    TYPE = "Type"
    LOCAL = "Local"
    STATIC = "Static"
    CONST = "Const"
    FIELD = "Field"

    @property
    def value_semantics(self) -> str:
        """What ``Def.value`` holds for a def of this kind."""
        return _DEF_VALUE_SEMANTICS[self]


_DEF_VALUE_SEMANTICS = {
    DefKind.ENUM: "variant names",
    DefKind.TUPLE: "enum/variant name + field types",
    DefKind.STRUCT: "name + field list",
    DefKind.UNION: "name + field list",
    DefKind.TRAIT: "signature text",
    DefKind.FUNCTION: "return type + generics",
    DefKind.METHOD: "return type + generics",
    DefKind.MACRO: "",
    DefKind.MOD: "source file name",
    DefKind.TYPE: "aliased type text",
    DefKind.LOCAL: "declared type + initializer expression",
    DefKind.STATIC: "declared type + initializer expression",
    DefKind.CONST: "declared type + initializer expression",
    DefKind.FIELD: "declared type",
}


class RefKind(str, Enum):
    FUNCTION = "Function"
    MOD = "Mod"
    TYPE = "Type"
    VARIABLE = "Variable"


class RelationKind(str, Enum):
    IMPL = "Impl"
    SUPER_TRAIT = "SuperTrait"


# --- Leaf records ---


class Id(_Record):
    """Program-wide declaration identifier: a crate number plus a crate-local index."""

    krate: U32
    index: U32

    def __str__(self) -> str:
        return f"{self.krate}:{self.index}"


class SpanData(_Record):
    file_name: StrictStr
    byte_start: U32
    byte_end: U32
    line_start: OneIndexed
    line_end: OneIndexed
    # Character offsets.
    column_start: OneIndexed
    column_end: OneIndexed

    @model_validator(mode="after")
    def _check_order(self) -> SpanData:
        if self.byte_end < self.byte_start:
            raise ValueError(f"byte_end {self.byte_end} is before byte_start {self.byte_start}")
        if (self.line_end, self.column_end) < (self.line_start, self.column_start):
            raise ValueError(
                f"end {self.line_end}:{self.column_end} is before start {self.line_start}:{self.column_start}"
            )
        return self

    @property
    def is_empty(self) -> bool:
        return self.byte_start == self.byte_end


# --- Metadata ---


class ExternalCrateData(_Record):
    """An external crate listed in the prelude; ``num`` is the slot ``Id.krate`` uses."""

    name: StrictStr
    num: U32
    file_name: StrictStr


class CratePreludeData(_Record):
    crate_name: StrictStr
    crate_root: StrictStr
    external_crates: tuple[ExternalCrateData, ...]
    span: SpanData


# --- Imports ---


class Import(_Record):
    kind: ImportKind
    ref_id: Id | None = None
    span: SpanData
    name: StrictStr
    value: StrictStr


# --- Definitions ---


class Attribute(_Record):
    value: StrictStr
    span: SpanData


class SigElement(_Record):
    id: Id
    start: U32
    end: U32


class Signature(_Record):
    span: SpanData
    text: StrictStr
    ident_start: U32
    ident_end: U32
    defs: tuple[SigElement, ...]
    refs: tuple[SigElement, ...]

    @property
    def ident(self) -> str:
        """The declared name, sliced out of ``text`` by byte offsets."""
        return self.text.encode("utf-8")[self.ident_start : self.ident_end].decode("utf-8", errors="replace")


class Def(_Record):
    kind: DefKind
    id: Id
    span: SpanData
    name: StrictStr
    qualname: StrictStr
    value: StrictStr
    parent: Id | None = None
    children: tuple[Id, ...]
    decl_id: Id | None = None
    docs: StrictStr
    sig: Signature | None = None
    attributes: tuple[Attribute, ...]


# --- References and relations ---


class Ref(_Record):
    kind: RefKind
    span: SpanData
    ref_id: Id


class MacroRef(_Record):
    span: SpanData
    qualname: StrictStr
    callee_span: SpanData


class Relation(_Record):
    span: SpanData
    kind: RelationKind
    from_: Id = Field(alias="from")
    to: Id


# --- Aggregate root ---


class Analysis(_Record):
    """The complete analysis document for one compiled unit.

    The defaults describe the empty document a producer starts from; decoding
    still requires every key except ``prelude``.
    """

    kind: Format = Format.JSON
    version: Annotated[StrictInt, Field(ge=SCHEMA_VERSION, le=SCHEMA_VERSION)] = SCHEMA_VERSION
    prelude: CratePreludeData | None = None
    imports: tuple[Import, ...] = ()
    defs: tuple[Def, ...] = ()
    refs: tuple[Ref, ...] = ()
    macro_refs: tuple[MacroRef, ...] = ()
    relations: tuple[Relation, ...] = ()

    @classmethod
    def new(cls) -> Analysis:
        return cls()
