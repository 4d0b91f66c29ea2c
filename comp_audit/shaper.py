"""Result shaper: turn scan records into the records sent to the UI."""

from __future__ import annotations

from collections.abc import Collection

from .exclusion import is_excluded
from .node_model import DocNode, Document
from .resolver import display_name
from .scanner import ComponentUsage


def node_info(doc: Document, entity: DocNode) -> dict:
    """External reference to an entity: ``{"id", "name", "pageId"}``."""
    page = doc.page_of(entity)
    return {
        "id": entity.id,
        "name": display_name(doc, entity),
        "pageId": page.id if page is not None else None,
    }


def shape(doc: Document, usages: list[ComponentUsage], excluded_names: Collection[str] = ()) -> list[dict]:
    """Project usage records and order them, standalone components first.

    Entities inside excluded sections/frames are dropped, both as records
    and as dependencies. Order within each group is discovery order.
    """
    records = []
    for usage in usages:
        if is_excluded(doc, usage.entity, excluded_names):
            continue
        depends_on = [
            node_info(doc, d) for d in usage.depends_on
            if not is_excluded(doc, d, excluded_names)
        ]
        records.append({
            "node": node_info(doc, usage.entity),
            "count": usage.count,
            "dependsOn": depends_on,
        })

    # sorted() is stable, so discovery order survives within each group
    return sorted(records, key=lambda r: len(r["dependsOn"]) > 0)
