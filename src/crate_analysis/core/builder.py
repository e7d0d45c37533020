"""Producer-side accumulation of an analysis document."""

from __future__ import annotations

import logging

from crate_analysis.models import (
    Analysis,
    CratePreludeData,
    Def,
    Format,
    Id,
    Import,
    MacroRef,
    Ref,
    Relation,
)

logger = logging.getLogger(__name__)


class BuilderClosedError(RuntimeError):
    """Raised when records are added after ``build()`` has handed the document out."""


class AnalysisBuilder:
    """Collects records in insertion order and freezes them into an ``Analysis``."""

    def __init__(self, kind: Format = Format.JSON) -> None:
        self.kind = kind
        self.prelude: CratePreludeData | None = None
        self.imports: list[Import] = []
        self.defs: list[Def] = []
        self.refs: list[Ref] = []
        self.macro_refs: list[MacroRef] = []
        self.relations: list[Relation] = []
        self._def_positions: dict[Id, int] = {}
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise BuilderClosedError("Analysis has already been built; the builder is closed.")

    def set_prelude(self, prelude: CratePreludeData) -> None:
        self._check_open()
        self.prelude = prelude

    def add_import(self, imp: Import) -> None:
        self._check_open()
        self.imports.append(imp)

    def add_def(self, d: Def) -> None:
        self._check_open()
        self._def_positions.setdefault(d.id, len(self.defs))
        self.defs.append(d)

    def add_child(self, parent_id: Id, child: Def) -> Def:
        """Record ``child`` under ``parent_id``, linking both directions.

        Returns the child as stored, with ``parent`` set.
        """
        self._check_open()
        position = self._def_positions.get(parent_id)
        if position is None:
            raise KeyError(f"Unknown parent def {parent_id}")

        parent = self.defs[position]
        if child.id not in parent.children:
            self.defs[position] = parent.model_copy(update={"children": (*parent.children, child.id)})
        if child.parent != parent_id:
            child = child.model_copy(update={"parent": parent_id})
        self.add_def(child)
        return child

    def add_ref(self, ref: Ref) -> None:
        self._check_open()
        self.refs.append(ref)

    def add_macro_ref(self, macro_ref: MacroRef) -> None:
        self._check_open()
        self.macro_refs.append(macro_ref)

    def add_relation(self, relation: Relation) -> None:
        self._check_open()
        self.relations.append(relation)

    def build(self) -> Analysis:
        self._check_open()
        self._closed = True
        analysis = Analysis(
            kind=self.kind,
            prelude=self.prelude,
            imports=tuple(self.imports),
            defs=tuple(self.defs),
            refs=tuple(self.refs),
            macro_refs=tuple(self.macro_refs),
            relations=tuple(self.relations),
        )
        logger.info(
            "Built analysis for %s: %d defs, %d refs",
            self.prelude.crate_name if self.prelude else "<unnamed crate>",
            len(analysis.defs),
            len(analysis.refs),
        )
        return analysis
