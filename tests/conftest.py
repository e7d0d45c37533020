"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

from crate_analysis.models import (
    Analysis,
    Attribute,
    CratePreludeData,
    Def,
    DefKind,
    ExternalCrateData,
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

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag every test as "unit"
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CRATE_ANALYSIS_FORMAT", raising=False)
    monkeypatch.delenv("CRATE_ANALYSIS_LOG_LEVEL", raising=False)


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------


def make_span(byte_start: int, byte_end: int, line: int = 1, column: int = 1, file_name: str = "src/lib.rs") -> SpanData:
    """Single-line span; the end column follows from the byte length."""
    return SpanData(
        file_name=file_name,
        byte_start=byte_start,
        byte_end=byte_end,
        line_start=line,
        line_end=line,
        column_start=column,
        column_end=column + (byte_end - byte_start),
    )


def make_def(
    kind: DefKind,
    def_id: Id,
    name: str,
    qualname: str,
    span: SpanData | None = None,
    value: str = "",
    parent: Id | None = None,
    children: list[Id] | None = None,
    decl_id: Id | None = None,
    docs: str = "",
    sig: Signature | None = None,
    attributes: list[Attribute] | None = None,
) -> Def:
    return Def(
        kind=kind,
        id=def_id,
        span=span or make_span(0, len(name)),
        name=name,
        qualname=qualname,
        value=value,
        parent=parent,
        children=children or [],
        decl_id=decl_id,
        docs=docs,
        sig=sig,
        attributes=attributes or [],
    )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

MAIN_ID = Id(krate=0, index=0)


@pytest.fixture
def one_function_crate() -> Analysis:
    """``fn main() {\\n    main();\\n}`` compiled as crate ``crate_name``."""
    main_def = make_def(
        DefKind.FUNCTION,
        MAIN_ID,
        "main",
        "crate_name::main",
        span=make_span(3, 7, line=1, column=4, file_name="src/main.rs"),
        value="fn main()",
        sig=Signature(
            span=make_span(0, 9, line=1, column=1, file_name="src/main.rs"),
            text="fn main()",
            ident_start=3,
            ident_end=7,
            defs=[],
            refs=[],
        ),
    )
    call = Ref(
        kind=RefKind.FUNCTION,
        span=make_span(16, 20, line=2, column=5, file_name="src/main.rs"),
        ref_id=MAIN_ID,
    )
    prelude = CratePreludeData(
        crate_name="crate_name",
        crate_root="src",
        external_crates=[ExternalCrateData(name="std", num=1, file_name="/rust/lib/std/src/lib.rs")],
        span=make_span(0, 25, line=1, column=1, file_name="src/main.rs"),
    )
    return Analysis(prelude=prelude, defs=[main_def], refs=[call])


# Ids used by the sample crate.
MOD_ID = Id(krate=0, index=0)
POINT_ID = Id(krate=0, index=1)
X_ID = Id(krate=0, index=2)
Y_ID = Id(krate=0, index=3)
SHAPE_ID = Id(krate=0, index=4)
BITS_ID = Id(krate=0, index=5)
TRAIT_AREA_ID = Id(krate=0, index=6)
IMPL_AREA_ID = Id(krate=0, index=7)
MACRO_ID = Id(krate=0, index=8)
HASHMAP_ID = Id(krate=1, index=100)
DEBUG_ID = Id(krate=1, index=200)
DROP_ID = Id(krate=1, index=300)


@pytest.fixture
def sample_crate() -> Analysis:
    """A library crate exercising every record type and every optional field."""
    prelude = CratePreludeData(
        crate_name="shapes",
        crate_root="src",
        external_crates=[
            ExternalCrateData(name="std", num=1, file_name="/rust/lib/std/src/lib.rs"),
            ExternalCrateData(name="core", num=2, file_name="/rust/lib/core/src/lib.rs"),
        ],
        span=make_span(0, 400, line=1, column=1),
    )
    imports = [
        Import(
            kind=ImportKind.USE,
            ref_id=HASHMAP_ID,
            span=make_span(4, 29),
            name="HashMap",
            value="std::collections::HashMap",
        ),
        Import(kind=ImportKind.GLOB_USE, ref_id=None, span=make_span(35, 45, line=2), name="*", value="std::io::*"),
        Import(kind=ImportKind.EXTERN_CRATE, span=make_span(47, 65, line=3), name="serde", value="serde"),
    ]
    shape_sig = Signature(
        span=make_span(120, 138, line=9),
        text="trait Shape: Debug",
        ident_start=6,
        ident_end=11,
        defs=[],
        refs=[SigElement(id=DEBUG_ID, start=13, end=18)],
    )
    defs = [
        make_def(DefKind.MOD, MOD_ID, "", "shapes", value="src/lib.rs", children=[POINT_ID, SHAPE_ID]),
        make_def(
            DefKind.STRUCT,
            POINT_ID,
            "Point",
            "shapes::Point",
            span=make_span(80, 85, line=6, column=12),
            value="Point { x, y }",
            parent=MOD_ID,
            children=[X_ID, Y_ID],
            docs="A point in the plane.",
            attributes=[Attribute(value="derive(Debug)", span=make_span(60, 76, line=5))],
        ),
        make_def(DefKind.FIELD, X_ID, "x", "shapes::Point::x", value="i32", parent=POINT_ID),
        make_def(DefKind.FIELD, Y_ID, "y", "shapes::Point::y", value="i32", parent=POINT_ID),
        make_def(
            DefKind.TRAIT,
            SHAPE_ID,
            "Shape",
            "shapes::Shape",
            span=make_span(126, 131, line=9, column=7),
            value="trait Shape: Debug",
            parent=MOD_ID,
            children=[TRAIT_AREA_ID],
            sig=shape_sig,
        ),
        make_def(DefKind.UNION, BITS_ID, "Bits", "shapes::Bits", value="Bits { raw, float }"),
        make_def(DefKind.METHOD, TRAIT_AREA_ID, "area", "shapes::Shape::area", value="fn (&self) -> f64", parent=SHAPE_ID),
        make_def(
            DefKind.METHOD,
            IMPL_AREA_ID,
            "area",
            "<shapes::Point as shapes::Shape>::area",
            value="fn (&self) -> f64",
            decl_id=TRAIT_AREA_ID,
        ),
        make_def(DefKind.MACRO, MACRO_ID, "square", "shapes::square"),
    ]
    refs = [
        Ref(kind=RefKind.TYPE, span=make_span(210, 215, line=14), ref_id=POINT_ID),
        Ref(kind=RefKind.FUNCTION, span=make_span(230, 234, line=15), ref_id=DROP_ID),
    ]
    macro_refs = [
        MacroRef(
            span=make_span(250, 258, line=16),
            qualname="std::println",
            callee_span=make_span(1000, 1007, line=40, file_name="/rust/lib/std/src/macros.rs"),
        )
    ]
    relations = [
        Relation(span=make_span(150, 175, line=11), kind=RelationKind.IMPL, from_=POINT_ID, to=SHAPE_ID),
        Relation(span=make_span(126, 138, line=9), kind=RelationKind.SUPER_TRAIT, from_=SHAPE_ID, to=DEBUG_ID),
    ]
    return Analysis(
        prelude=prelude,
        imports=imports,
        defs=defs,
        refs=refs,
        macro_refs=macro_refs,
        relations=relations,
    )


@pytest.fixture
def asymmetric_crate() -> Analysis:
    """Parent/child links recorded in one direction only."""
    parent = make_def(DefKind.MOD, MOD_ID, "", "broken", children=[Y_ID])
    orphan_claimant = make_def(DefKind.FUNCTION, X_ID, "f", "broken::f", parent=MOD_ID)
    unclaimed_child = make_def(DefKind.FUNCTION, Y_ID, "g", "broken::g")
    return Analysis(defs=[parent, orphan_claimant, unclaimed_child])
