"""In-process host: current page, selection and viewport over a Document.

Stands in for the design tool's runtime. Holds the only mutable view state
(which page is open, what is selected, what the viewport was last moved to);
the node tree itself is never modified.
"""

from __future__ import annotations

from collections.abc import Callable

from .node_model import DocNode, Document


class DocumentHost:
    def __init__(self, doc: Document):
        pages = doc.pages
        if not pages:
            raise ValueError("Document has no pages")
        self.doc = doc
        self.current_page: DocNode = pages[0]
        self._selections: dict[str, list[DocNode]] = {}
        self._listeners: list[Callable[[], None]] = []
        self.viewport_target: list[str] = []

    def get_node_by_id(self, node_id: str) -> DocNode | None:
        return self.doc.get_node_by_id(node_id)

    @property
    def selection(self) -> list[DocNode]:
        """Selection on the current page."""
        return list(self._selections.get(self.current_page.id, []))

    def selection_on(self, page: DocNode) -> list[DocNode]:
        return list(self._selections.get(page.id, []))

    def on_selection_change(self, callback: Callable[[], None]):
        self._listeners.append(callback)

    def set_current_page(self, page: DocNode):
        if page not in self.doc.pages:
            raise ValueError(f"Not a page of this document: {page.id}")
        if page is self.current_page:
            return
        self.current_page = page
        # switching pages swaps in that page's selection
        self._notify()

    def set_selection(self, nodes: list[DocNode], page: DocNode | None = None):
        """Replace the selection on ``page`` (default: current page) and notify listeners."""
        page = page or self.current_page
        for node in nodes:
            if self.doc.page_of(node) is not page:
                raise ValueError(f"Node {node.id} is not on page {page.id}")
        self._selections[page.id] = list(nodes)
        if page is self.current_page:
            self._notify()

    def _notify(self):
        for callback in list(self._listeners):
            callback()

    def scroll_and_zoom_into_view(self, nodes: list[DocNode]):
        self.viewport_target = [n.id for n in nodes]
