"""CLI entry point for comp-audit."""

import argparse
import json
import sys
from pathlib import Path

from .utils import c, log, print_box, print_table


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="comp-audit",
        description="comp-audit — component usage and dependency scanner for design documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  comp-audit scan design.json
  comp-audit scan design.json --page 0:1 --select 12:34
  comp-audit scan design.json --ignore "Archive" "Playground" --format markdown
  comp-audit settings
  comp-audit settings --set "Archive"
  comp-audit focus design.json 0:1 12:34
  comp-audit session design.json < messages.jsonl
""",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # scan: one-shot scan of a page or selection
    p_scan = sub.add_parser("scan", help="Scan a document export for component usage")
    p_scan.add_argument("file", type=str, help="Path to the JSON document export")
    p_scan.add_argument("--page", type=str, default=None, help="Page id to scan (default: first page)")
    p_scan.add_argument("--select", type=str, nargs="+", default=None, metavar="ID",
                        help="Node id(s) to select; the first one is the scan root")
    p_scan.add_argument("--ignore", type=str, nargs="*", default=None, metavar="NAME",
                        help="Section/frame names to skip (saved for later runs)")
    p_scan.add_argument("--settings", type=str, default=None, help="Settings file path")
    p_scan.add_argument("--format", type=str, default="summary",
                        choices=["summary", "json", "markdown"],
                        help="Output format (default: summary)")

    # settings: show or change the saved exclusion list
    p_settings = sub.add_parser("settings", help="Show or update the saved exclusion list")
    p_settings.add_argument("--set", type=str, nargs="+", default=None, metavar="NAME", dest="names")
    p_settings.add_argument("--clear", action="store_true")
    p_settings.add_argument("--settings", type=str, default=None)

    # focus: navigate to a node
    p_focus = sub.add_parser("focus", help="Select a node and bring it into view")
    p_focus.add_argument("file", type=str)
    p_focus.add_argument("page_id", type=str)
    p_focus.add_argument("node_id", type=str)

    # session: JSON-lines message bridge
    p_session = sub.add_parser("session", help="Read UI messages from stdin, write results to stdout")
    p_session.add_argument("file", type=str)
    p_session.add_argument("--settings", type=str, default=None)

    return parser


def _get_store(args):
    from .storage import SettingsStore

    p = getattr(args, "settings", None)
    return SettingsStore(Path(p) if p else None)


def _open_host(path: str):
    from .node_model import load_document_file
    from .host import DocumentHost

    doc = load_document_file(path)
    log(f"  Loaded: {path} ({len(doc)} nodes, {len(doc.pages)} pages)")
    return DocumentHost(doc)


def _lookup_all(host, ids: list[str]) -> list:
    nodes = []
    for node_id in ids:
        node = host.get_node_by_id(node_id)
        if node is None:
            raise ValueError(f"Could not find Node with ID: {node_id}")
        nodes.append(node)
    return nodes


def cmd_scan(args):
    """Scan a page (or the selected node) and print the result."""
    from .session import SessionController

    host = _open_host(args.file)
    if args.page:
        page = host.get_node_by_id(args.page)
        if page is None or page not in host.doc.pages:
            raise ValueError(f"Could not find Page with ID: {args.page}")
        host.set_current_page(page)
    if args.select:
        host.set_selection(_lookup_all(host, args.select))

    messages: list[dict] = []
    controller = SessionController(host, _get_store(args), messages.append)
    if args.ignore is not None:
        controller.handle_message({"type": "scan", "ignoredSectionsOrFrames": args.ignore})
    else:
        controller.handle_message({"type": "init"})

    result = next((m for m in messages if m["type"] == "result"), None)
    if result is None:
        print(c("  Nothing to scan: the selected node has no children.", "yellow"))
        return
    records = result["componentsWithDependencies"]

    if args.format == "json":
        print(json.dumps(result, indent=2))
    elif args.format == "markdown":
        from .formatters.markdown import generate_markdown
        print(generate_markdown(records, source=args.file, ignored=controller.ignored))
    else:
        _print_scan_summary(host, controller, records)


def _print_scan_summary(host, controller, records: list[dict]):
    root = controller.scan_root()
    standalone = sum(1 for r in records if not r["dependsOn"])
    lines = [
        "comp-audit scan results",
        "",
        f"Scope:       {root.name or root.id}",
        f"Components:  {len(records)}",
        f"Instances:   {sum(r['count'] for r in records)}",
        f"Standalone:  {standalone}",
        f"Composite:   {len(records) - standalone}",
    ]
    if controller.ignored:
        lines.append(f"Ignored:     {', '.join(controller.ignored)}")
    print_box(lines)
    print()

    if not records:
        print(c("  No component instances found.", "yellow"))
        print()
        return

    rows = []
    for r in records:
        rows.append([
            r["node"]["name"],
            f"{r['count']}x",
            r["node"]["pageId"] or "-",
            ", ".join(d["name"] for d in r["dependsOn"]) or "-",
        ])
    print_table(["Component", "Uses", "Page", "Depends on"], rows, [28, 5, 10, 40])
    print()


def cmd_settings(args):
    """Show or update the saved exclusion list."""
    from .storage import load_ignored, save_ignored

    store = _get_store(args)
    if args.clear:
        save_ignored(store, [])
    elif args.names is not None:
        save_ignored(store, args.names)

    names = load_ignored(store)
    print(c(f"\n  Settings: {store.path}\n", "bold"))
    if not names:
        print(c("  No sections or frames ignored.", "dim"))
    for name in names:
        print(f"    {name}")
    print()


def cmd_focus(args):
    """Select a node on its page and bring it into view."""
    from .session import SessionController

    host = _open_host(args.file)
    messages: list[dict] = []
    # focus never reads or writes the settings file
    controller = SessionController(host, _get_store(args), messages.append)

    if not controller.focus_instance(args.page_id, args.node_id):
        print(c(f"  Error: {messages[-1]['error']}", "red", stream=sys.stderr), file=sys.stderr)
        sys.exit(1)

    node = host.get_node_by_id(args.node_id)
    print(c("\n  Focused\n", "bold"))
    print(f"    Page:      {host.current_page.name} ({host.current_page.id})")
    print(f"    Selection: {', '.join(n.name or n.id for n in host.selection)}")
    print(f"    Viewport:  {', '.join(host.viewport_target)}")
    if node is not None:
        print(c(f"    Type:      {node.type.value}", "dim"))
    print()


def cmd_session(args):
    """JSON-lines bridge between a UI process and the controller."""
    from .session import SessionController

    host = _open_host(args.file)

    def emit(msg: dict):
        sys.stdout.write(json.dumps(msg) + "\n")
        sys.stdout.flush()

    controller = SessionController(host, _get_store(args), emit)

    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        try:
            msg = json.loads(line)
        except json.JSONDecodeError as e:
            log(f"  Invalid message ({e}): {line[:80]}", "error")
            continue

        if isinstance(msg, dict) and msg.get("type") == "select":
            try:
                host.set_selection(_lookup_all(host, msg.get("ids") or []))
            except ValueError as e:
                log(f"  {e}", "error")
                emit({"type": "error", "error": str(e)})
            continue

        controller.handle_message(msg)


def main():
    parser = create_parser()
    args = parser.parse_args()

    commands = {
        "scan": cmd_scan,
        "settings": cmd_settings,
        "focus": cmd_focus,
        "session": cmd_session,
    }

    try:
        commands[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(1)
    except (FileNotFoundError, ValueError) as e:
        print(c(f"  Error: {e}", "red", stream=sys.stderr), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
