"""Shared utilities: colors, stderr logging, table output."""

import io
import os
import sys

# Force UTF-8 output on Windows to handle box chars and component names
if sys.platform == "win32" and hasattr(sys.stdout, "buffer"):
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8", errors="replace")

COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
}

LEVEL_COLORS = {
    "info": "dim",
    "warn": "yellow",
    "error": "red",
}

NO_COLOR = os.environ.get("NO_COLOR") is not None


def c(text: str, color: str, stream=None) -> str:
    stream = stream or sys.stdout
    if NO_COLOR or not stream.isatty():
        return str(text)
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


def log(msg: str, level: str = "info"):
    """Diagnostic line on stderr. stdout is reserved for results."""
    print(c(msg, LEVEL_COLORS.get(level, "dim"), stream=sys.stderr), file=sys.stderr)


def print_table(headers: list[str], rows: list[list[str]], widths: list[int] | None = None):
    if not rows:
        return
    if not widths:
        widths = [max(len(str(h)), *(len(str(r[i])) for r in rows)) for i, h in enumerate(headers)]
    print(c("  ".join(h.ljust(w) for h, w in zip(headers, widths)), "bold"))
    rule_len = sum(widths) + 2 * (len(widths) - 1)
    try:
        print(c("─" * rule_len, "dim"))
    except UnicodeEncodeError:
        print(c("-" * rule_len, "dim"))
    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


def print_box(lines: list[str], width: int = 45):
    """Print a box around lines of text."""
    try:
        print("┌" + "─" * width + "┐")
        for line in lines:
            print(f"│ {line.ljust(width - 2)[:width - 2]} │")
        print("└" + "─" * width + "┘")
    except UnicodeEncodeError:
        print("+" + "-" * width + "+")
        for line in lines:
            print(f"| {line.ljust(width - 2)[:width - 2]} |")
        print("+" + "-" * width + "+")
