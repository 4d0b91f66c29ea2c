"""Component resolver: instance -> canonical component entity."""

from __future__ import annotations

from .node_model import DocNode, Document, NodeType


def resolve(doc: Document, instance: DocNode) -> DocNode | None:
    """Resolve an instance to the entity its usage is attributed to.

    Variants (components whose parent is a component set) collapse into
    their set. Returns None when the main component is missing from the
    document, e.g. a detached instance or a component from a library that
    isn't part of the export.
    """
    if not instance.main_component_id:
        return None
    main = doc.get_node_by_id(instance.main_component_id)
    if main is None or main.type is not NodeType.COMPONENT:
        return None
    parent = doc.parent(main)
    if parent is not None and parent.type is NodeType.COMPONENT_SET:
        return parent
    return main


def display_name(doc: Document, entity: DocNode) -> str:
    """Name shown for an entity: the set's name for variants, else the component's."""
    if entity.type is NodeType.COMPONENT:
        parent = doc.parent(entity)
        if parent is not None and parent.type is NodeType.COMPONENT_SET:
            return parent.name
    return entity.name
