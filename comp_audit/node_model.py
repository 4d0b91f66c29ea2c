"""Node model for design documents exported as JSON.

The scanner never talks to the design tool directly. It works on this
read-only view of the node tree, which is built from a JSON export of the
document (the Figma REST ``GET /v1/files/:key`` payload, or just its
``document`` node).

Node kinds the scanner cares about:
- PAGE: a page (``CANVAS`` in REST exports)
- SECTION / FRAME: named containers that can be excluded by name
- INSTANCE: a live copy of a component (points at its main component)
- COMPONENT: a reusable definition
- COMPONENT_SET: a group of component variants
- CONTAINER: any other node with children (document, groups, ...)
- LEAF: everything else (text, vectors, shapes)

Parent links are kept in an index on the Document (child id -> parent id)
instead of on the nodes themselves.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from pathlib import Path


class NodeType(enum.Enum):
    PAGE = "PAGE"
    SECTION = "SECTION"
    FRAME = "FRAME"
    INSTANCE = "INSTANCE"
    COMPONENT = "COMPONENT"
    COMPONENT_SET = "COMPONENT_SET"
    CONTAINER = "CONTAINER"
    LEAF = "LEAF"


_TYPE_ALIASES = {
    "PAGE": NodeType.PAGE,
    "CANVAS": NodeType.PAGE,
    "SECTION": NodeType.SECTION,
    "FRAME": NodeType.FRAME,
    "INSTANCE": NodeType.INSTANCE,
    "COMPONENT": NodeType.COMPONENT,
    "COMPONENT_SET": NodeType.COMPONENT_SET,
}

# Types whose name can put a subtree on the exclusion list
EXCLUDABLE_TYPES = frozenset({NodeType.SECTION, NodeType.FRAME})

COMPONENT_TYPES = frozenset({NodeType.COMPONENT, NodeType.COMPONENT_SET})


@dataclass(eq=False)
class DocNode:
    """A node in the document tree.

    ``children`` is None for leaves. Instances always get a list, even when
    the export omits their children.
    """
    id: str
    type: NodeType
    name: str = ""
    children: list["DocNode"] | None = None
    main_component_id: str | None = None

    @property
    def is_instance(self) -> bool:
        return self.type is NodeType.INSTANCE

    @property
    def is_component(self) -> bool:
        return self.type in COMPONENT_TYPES

    @property
    def has_children(self) -> bool:
        return self.children is not None

    def walk(self):
        """Yield all nodes in the subtree (DFS, pre-order)."""
        yield self
        for child in self.children or ():
            yield from child.walk()


@dataclass
class Document:
    """A parsed design document with id and parent indexes."""
    root: DocNode
    source_file: str = ""
    _nodes: dict[str, DocNode] = field(default_factory=dict, repr=False)
    _parents: dict[str, str] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if not self._nodes:
            self._index()

    def _index(self):
        stack = [self.root]
        self._nodes[self.root.id] = self.root
        while stack:
            node = stack.pop()
            for child in node.children or ():
                if child.id in self._nodes:
                    raise ValueError(f"Duplicate node id in document: {child.id}")
                self._nodes[child.id] = child
                self._parents[child.id] = node.id
                stack.append(child)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get_node_by_id(self, node_id: str) -> DocNode | None:
        return self._nodes.get(node_id)

    def parent(self, node: DocNode) -> DocNode | None:
        parent_id = self._parents.get(node.id)
        return self._nodes.get(parent_id) if parent_id is not None else None

    def ancestors(self, node: DocNode):
        """Yield the node's ancestors, nearest first."""
        current = self.parent(node)
        while current is not None:
            yield current
            current = self.parent(current)

    def page_of(self, node: DocNode) -> DocNode | None:
        """The page a node lives on, or None for nodes outside any page."""
        for ancestor in self.ancestors(node):
            if ancestor.type is NodeType.PAGE:
                return ancestor
        return None

    @property
    def pages(self) -> list[DocNode]:
        if self.root.type is NodeType.PAGE:
            return [self.root]
        return [n for n in self.root.children or () if n.type is NodeType.PAGE]

    @property
    def components(self) -> list[DocNode]:
        """All component and component-set definitions in the document."""
        return [n for n in self.root.walk() if n.is_component]


def _node_type(raw_type: str, has_children: bool) -> NodeType:
    node_type = _TYPE_ALIASES.get(raw_type.upper())
    if node_type is not None:
        return node_type
    return NodeType.CONTAINER if has_children else NodeType.LEAF


def _parse_node(data: dict) -> DocNode:
    """Recursively parse a raw JSON node dict into a DocNode."""
    raw_children = data.get("children")
    has_children = isinstance(raw_children, list)
    node_type = _node_type(str(data.get("type", "")), has_children)

    children = None
    if has_children:
        children = [_parse_node(c) for c in raw_children if isinstance(c, dict)]
    elif node_type in (NodeType.INSTANCE, NodeType.PAGE, NodeType.SECTION,
                       NodeType.FRAME, NodeType.COMPONENT, NodeType.COMPONENT_SET):
        children = []

    node_id = data.get("id")
    if not node_id:
        raise ValueError(f"Node without id: {data.get('name', '<unnamed>')!r}")

    main_component_id = None
    if node_type is NodeType.INSTANCE:
        main_component_id = data.get("mainComponentId") or data.get("componentId") or None

    return DocNode(
        id=str(node_id),
        type=node_type,
        name=data.get("name", ""),
        children=children,
        main_component_id=main_component_id,
    )


def parse_document_json(data: dict) -> Document:
    """Parse a JSON export (full file payload or bare node) into a Document."""
    if not isinstance(data, dict):
        raise ValueError("Document JSON must be an object")
    root_data = data.get("document", data)
    if not isinstance(root_data, dict):
        raise ValueError("'document' must be an object")
    return Document(root=_parse_node(root_data))


def load_document_file(path: str | Path) -> Document:
    """Load and parse a JSON document export."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        with open(p, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    doc = parse_document_json(data)
    doc.source_file = str(p)
    return doc
