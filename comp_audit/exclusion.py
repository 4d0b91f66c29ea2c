"""Exclusion filter: skip everything inside sections/frames named by the user."""

from __future__ import annotations

from collections.abc import Collection

from .node_model import EXCLUDABLE_TYPES, DocNode, Document


def is_excluded(doc: Document, node: DocNode, excluded_names: Collection[str]) -> bool:
    """True if an ancestor of ``node`` is a section or frame named in ``excluded_names``.

    Only ancestors are tested, never the node itself: an excluded frame is
    still visited, its contents are not.
    """
    if not excluded_names:
        return False
    for ancestor in doc.ancestors(node):
        if ancestor.type in EXCLUDABLE_TYPES and ancestor.name in excluded_names:
            return True
    return False
