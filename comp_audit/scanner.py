"""Scan engine: count component usage and nesting dependencies in a subtree.

An instance found anywhere inside another component's instance subtree is a
dependency of that outer component (not only of its direct parent). Usage
of a variant is attributed to its component set.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field

from .exclusion import is_excluded
from .node_model import DocNode, Document
from .resolver import resolve


@dataclass
class ComponentUsage:
    """Aggregate record for one canonical entity."""
    entity: DocNode
    count: int = 0
    depends_on: list[DocNode] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.entity.id

    def add_dependency(self, entity: DocNode):
        if entity.id == self.entity.id:
            return
        if all(d.id != entity.id for d in self.depends_on):
            self.depends_on.append(entity)


class ScanContext:
    """Per-scan state: usage records keyed by entity id, in discovery order."""

    def __init__(self, doc: Document, excluded_names: Collection[str]):
        self.doc = doc
        self.excluded_names = frozenset(excluded_names)
        self.records: dict[str, ComponentUsage] = {}

    def record(self, entity: DocNode) -> ComponentUsage:
        usage = self.records.get(entity.id)
        if usage is None:
            usage = self.records[entity.id] = ComponentUsage(entity)
        return usage

    def excluded(self, node: DocNode) -> bool:
        return is_excluded(self.doc, node, self.excluded_names)

    def visit(self, node: DocNode, chain: tuple[str, ...]):
        if self.excluded(node):
            return

        if node.is_instance:
            entity = resolve(self.doc, node)
            if entity is None or self.excluded(entity):
                return

            # mark dependencies
            for ancestor_id in chain:
                self.records[ancestor_id].add_dependency(entity)

            usage = self.record(entity)
            inner = chain if entity.id in chain else chain + (entity.id,)
            for child in node.children or ():
                self.visit(child, inner)

            usage.count += 1
            return

        for child in node.children or ():
            self.visit(child, chain)


def scan(doc: Document, root: DocNode, excluded_names: Collection[str] = ()) -> list[ComponentUsage]:
    """Scan the subtree under ``root`` and return usage records in discovery order."""
    ctx = ScanContext(doc, excluded_names)
    ctx.visit(root, ())
    return list(ctx.records.values())
