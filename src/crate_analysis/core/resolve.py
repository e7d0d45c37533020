"""Consumer-side lookups over a decoded document.

Ids that do not name a def in the same document are treated as unresolved:
lookups return ``None`` and the consistency reports list them, but nothing
here raises for them. A document may legitimately point into other crates.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from crate_analysis.models import Analysis, Def, Id, Ref, Relation


@dataclass(frozen=True)
class DanglingId:
    path: str
    id: Id


@dataclass(frozen=True)
class AsymmetricLink:
    parent: Id
    child: Id
    # "parent" when only child.parent points up, "children" when only parent.children points down.
    declared_by: str


class DefIndex:
    """Id-keyed table of the defs in one document.

    When an id is declared twice the first def wins.
    """

    def __init__(self, defs: dict[Id, Def]) -> None:
        self._defs = defs

    @classmethod
    def build(cls, analysis: Analysis) -> DefIndex:
        defs: dict[Id, Def] = {}
        for d in analysis.defs:
            defs.setdefault(d.id, d)
        return cls(defs)

    def __len__(self) -> int:
        return len(self._defs)

    def __contains__(self, def_id: object) -> bool:
        return def_id in self._defs

    def resolve(self, def_id: Id | None) -> Def | None:
        if def_id is None:
            return None
        return self._defs.get(def_id)

    def parent_of(self, d: Def) -> Def | None:
        return self.resolve(d.parent)

    def children_of(self, d: Def) -> list[Def]:
        children = (self._defs.get(child) for child in d.children)
        return [c for c in children if c is not None]

    def resolve_ref(self, ref: Ref) -> Def | None:
        return self.resolve(ref.ref_id)

    def resolve_relation(self, relation: Relation) -> tuple[Def | None, Def | None]:
        return self.resolve(relation.from_), self.resolve(relation.to)


def _referenced_ids(analysis: Analysis) -> Iterator[tuple[str, Id]]:
    for i, imp in enumerate(analysis.imports):
        if imp.ref_id is not None:
            yield f"imports.{i}.ref_id", imp.ref_id
    for i, d in enumerate(analysis.defs):
        if d.parent is not None:
            yield f"defs.{i}.parent", d.parent
        for j, child in enumerate(d.children):
            yield f"defs.{i}.children.{j}", child
        if d.decl_id is not None:
            yield f"defs.{i}.decl_id", d.decl_id
        if d.sig is not None:
            for j, el in enumerate(d.sig.defs):
                yield f"defs.{i}.sig.defs.{j}.id", el.id
            for j, el in enumerate(d.sig.refs):
                yield f"defs.{i}.sig.refs.{j}.id", el.id
    for i, r in enumerate(analysis.refs):
        yield f"refs.{i}.ref_id", r.ref_id
    for i, rel in enumerate(analysis.relations):
        yield f"relations.{i}.from", rel.from_
        yield f"relations.{i}.to", rel.to


def find_dangling_ids(analysis: Analysis) -> list[DanglingId]:
    declared = {d.id for d in analysis.defs}
    return [DanglingId(path, ref) for path, ref in _referenced_ids(analysis) if ref not in declared]


def find_asymmetric_links(analysis: Analysis) -> list[AsymmetricLink]:
    """Parent/child pairs recorded in only one direction.

    Pairs where either side is missing from the document are not reported;
    those show up in :func:`find_dangling_ids` instead.
    """
    index = DefIndex.build(analysis)
    findings: list[AsymmetricLink] = []
    seen: set[tuple[Id, Id]] = set()

    for d in analysis.defs:
        parent = index.resolve(d.parent)
        if parent is not None and d.id not in parent.children and (parent.id, d.id) not in seen:
            seen.add((parent.id, d.id))
            findings.append(AsymmetricLink(parent=parent.id, child=d.id, declared_by="parent"))

    for d in analysis.defs:
        for child in index.children_of(d):
            if child.parent != d.id and (d.id, child.id) not in seen:
                seen.add((d.id, child.id))
                findings.append(AsymmetricLink(parent=d.id, child=child.id, declared_by="children"))

    return findings


def find_duplicate_ids(analysis: Analysis) -> list[Id]:
    seen: set[Id] = set()
    duplicates: list[Id] = []
    for d in analysis.defs:
        if d.id in seen and d.id not in duplicates:
            duplicates.append(d.id)
        seen.add(d.id)
    return duplicates
