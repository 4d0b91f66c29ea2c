"""Markdown formatter: component usage inventory for a scan result."""

from __future__ import annotations


def _names(refs: list[dict]) -> str:
    return ", ".join(r["name"] for r in refs) or "—"


def generate_markdown(records: list[dict], *, source: str = "", ignored: list[str] | None = None) -> str:
    """Generate a markdown inventory from shaped result records."""
    standalone = [r for r in records if not r["dependsOn"]]
    composite = [r for r in records if r["dependsOn"]]

    lines = [
        "# Component Inventory",
        "",
    ]
    if source:
        lines.append(f"**Source**: `{source}`")
    lines.append(f"**Components**: {len(records)}")
    lines.append(f"**Instances**: {sum(r['count'] for r in records)}")
    if ignored:
        lines.append(f"**Ignored sections/frames**: {', '.join(ignored)}")
    lines.append("")

    if not records:
        lines.append("_No component instances found._")
        lines.append("")
        return "\n".join(lines)

    for title, group in (("Standalone Components", standalone), ("Composite Components", composite)):
        if not group:
            continue
        lines.append(f"## {title}")
        lines.append("")
        lines.append("| Component | Uses | Page | Depends on |")
        lines.append("|-----------|------|------|------------|")
        for r in group:
            node = r["node"]
            lines.append(
                f"| {node['name']} | {r['count']}x | {node['pageId'] or '—'} | {_names(r['dependsOn'])} |"
            )
        lines.append("")

    return "\n".join(lines)
