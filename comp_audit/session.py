"""Session controller: reacts to UI messages and selection changes.

Inbound messages (UI -> core):
- init            {default?: [str]}
- scan            {ignoredSectionsOrFrames: [str]}
- focus-instance  {pageId: str, instanceId: str}

Outbound messages (core -> UI), passed to the ``emit`` callback:
- settings-retrieved  {ignoredSectionsOrFrames: [str]}
- result              {componentsWithDependencies: [...]}
- error               {error: str}

Every trigger runs one full synchronous scan; a later trigger simply
supersedes the previous result.
"""

from __future__ import annotations

from collections.abc import Callable

from .host import DocumentHost
from .scanner import scan
from .shaper import shape
from .storage import SettingsStore, load_ignored, save_ignored
from .utils import log

Emit = Callable[[dict], None]


class SessionController:
    """Owns the exclusion list and drives scans for one host."""

    def __init__(self, host: DocumentHost, store: SettingsStore, emit: Emit):
        self.host = host
        self.store = store
        self.emit = emit
        self.ignored: list[str] = []
        self.scanning = False
        host.on_selection_change(self.on_selection_change)

    def scan_root(self):
        """First selected node on the current page, else the page itself."""
        selection = self.host.selection
        return selection[0] if selection else self.host.current_page

    def run_scan(self) -> list[dict] | None:
        """Scan the current scope and emit a result message.

        Returns the emitted records, or None when the root can't be traversed.
        """
        root = self.scan_root()
        if not root.has_children:
            log(f"  Skipping scan: {root.type.value} node {root.id} has no children")
            return None

        doc = self.host.doc
        ignored = list(self.ignored)
        self.scanning = True
        try:
            usages = scan(doc, root, ignored)
            records = shape(doc, usages, ignored)
        finally:
            self.scanning = False

        log(f"  Scanned {root.name or root.id}: {len(records)} components")
        self.emit({"type": "result", "componentsWithDependencies": records})
        return records

    def on_selection_change(self):
        self.run_scan()

    def handle_message(self, msg: dict):
        handlers = {
            "init": self._handle_init,
            "scan": self._handle_scan,
            "focus-instance": self._handle_focus_instance,
        }
        handler = handlers.get(msg.get("type")) if isinstance(msg, dict) else None
        if handler is None:
            log(f"  unsupported message {msg!r}", "error")
            return
        handler(msg)

    def _handle_init(self, msg: dict):
        self.ignored = load_ignored(self.store, msg.get("default"))
        self.emit({"type": "settings-retrieved", "ignoredSectionsOrFrames": list(self.ignored)})
        self.run_scan()

    def _handle_scan(self, msg: dict):
        names = msg.get("ignoredSectionsOrFrames") or []
        self.ignored = [str(n) for n in names]
        save_ignored(self.store, self.ignored)
        self.run_scan()

    def _handle_focus_instance(self, msg: dict):
        self.focus_instance(msg.get("pageId", ""), msg.get("instanceId", ""))

    def focus_instance(self, page_id: str, instance_id: str) -> bool:
        """Select a node, open its page and bring it into view."""
        doc = self.host.doc
        page = self.host.get_node_by_id(page_id)
        node = self.host.get_node_by_id(instance_id)
        owner = doc.page_of(node) if node is not None else None

        if page is None or node is None or owner is None:
            missing = "Page" if page is None else "Node"
            error = f"Could not find {missing} with ID: {page_id if page is None else instance_id}"
            log(f"  {error}", "error")
            self.emit({"type": "error", "error": error})
            return False

        self.host.set_selection([node], page=owner)
        self.host.set_current_page(owner)
        self.host.scroll_and_zoom_into_view([node])
        return True
