"""Tests for the comp-audit command line."""

import io
import json
import sys

import pytest

from comp_audit.cli import main
from comp_audit.storage import IGNORED_KEY


def _sample_doc() -> dict:
    return {
        "document": {
            "id": "0:0",
            "type": "DOCUMENT",
            "children": [
                {"id": "p1", "type": "CANVAS", "name": "Screens", "children": [
                    {"id": "f1", "type": "FRAME", "name": "Checkout", "children": [
                        {"id": "i1", "type": "INSTANCE", "componentId": "card", "children": [
                            {"id": "i2", "type": "INSTANCE", "componentId": "btn", "children": []},
                        ]},
                    ]},
                    {"id": "f2", "type": "FRAME", "name": "Archive", "children": [
                        {"id": "i3", "type": "INSTANCE", "componentId": "btn", "children": []},
                    ]},
                ]},
                {"id": "p2", "type": "CANVAS", "name": "Components", "children": [
                    {"id": "card", "type": "COMPONENT", "name": "Card"},
                    {"id": "btn", "type": "COMPONENT", "name": "Button"},
                ]},
            ],
        },
    }


@pytest.fixture
def design(tmp_path):
    path = tmp_path / "design.json"
    path.write_text(json.dumps(_sample_doc()))
    return path


@pytest.fixture
def settings(tmp_path):
    return tmp_path / "settings.json"


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["comp-audit", *map(str, argv)])
    main()


def test_scan_json(monkeypatch, capsys, design, settings):
    _run(monkeypatch, "scan", design, "--settings", settings, "--format", "json")
    result = json.loads(capsys.readouterr().out)
    assert result["type"] == "result"
    names = [(r["node"]["name"], r["count"]) for r in result["componentsWithDependencies"]]
    assert names == [("Button", 2), ("Card", 1)]
    assert not settings.exists()


def test_scan_ignore_is_saved(monkeypatch, capsys, design, settings):
    _run(monkeypatch, "scan", design, "--settings", settings, "--ignore", "Archive", "--format", "json")
    result = json.loads(capsys.readouterr().out)
    assert [r["count"] for r in result["componentsWithDependencies"]] == [1, 1]
    assert json.loads(settings.read_text()) == {IGNORED_KEY: ["Archive"]}

    # the next plain scan picks up the saved list
    _run(monkeypatch, "scan", design, "--settings", settings, "--format", "json")
    result = json.loads(capsys.readouterr().out)
    assert [r["count"] for r in result["componentsWithDependencies"]] == [1, 1]


def test_scan_selection(monkeypatch, capsys, design, settings):
    _run(monkeypatch, "scan", design, "--settings", settings, "--select", "f2", "--format", "json")
    result = json.loads(capsys.readouterr().out)
    assert [r["node"]["id"] for r in result["componentsWithDependencies"]] == ["btn"]


def test_scan_summary_and_markdown(monkeypatch, capsys, design, settings):
    _run(monkeypatch, "scan", design, "--settings", settings)
    out = capsys.readouterr().out
    assert "comp-audit scan results" in out
    assert "Card" in out

    _run(monkeypatch, "scan", design, "--settings", settings, "--format", "markdown")
    assert "# Component Inventory" in capsys.readouterr().out


def test_scan_missing_file(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "scan", tmp_path / "nope.json")
    assert exc.value.code == 1
    assert "File not found" in capsys.readouterr().err


def test_scan_unknown_page(monkeypatch, capsys, design, settings):
    with pytest.raises(SystemExit):
        _run(monkeypatch, "scan", design, "--settings", settings, "--page", "p9")
    assert "Could not find Page with ID: p9" in capsys.readouterr().err


def test_settings_command(monkeypatch, capsys, settings):
    _run(monkeypatch, "settings", "--settings", settings, "--set", "Archive", "Old")
    assert "Archive" in capsys.readouterr().out
    assert json.loads(settings.read_text()) == {IGNORED_KEY: ["Archive", "Old"]}

    _run(monkeypatch, "settings", "--settings", settings, "--clear")
    assert "No sections or frames ignored" in capsys.readouterr().out


def test_focus_command(monkeypatch, capsys, design):
    _run(monkeypatch, "focus", design, "p2", "btn")
    out = capsys.readouterr().out
    assert "Components (p2)" in out
    assert "Viewport:  btn" in out


def test_focus_command_error(monkeypatch, capsys, design):
    with pytest.raises(SystemExit):
        _run(monkeypatch, "focus", design, "p2", "nope")
    assert "Could not find Node with ID: nope" in capsys.readouterr().err


def test_session_bridge(monkeypatch, capsys, design, settings):
    stdin = "\n".join([
        json.dumps({"type": "init", "default": ["Archive"]}),
        json.dumps({"type": "select", "ids": ["f2"]}),
        "not json",
        json.dumps({"type": "scan", "ignoredSectionsOrFrames": []}),
        json.dumps({"type": "focus-instance", "pageId": "p1", "instanceId": "missing"}),
    ]) + "\n"
    monkeypatch.setattr(sys, "stdin", io.StringIO(stdin))
    _run(monkeypatch, "session", design, "--settings", settings)

    out = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [m["type"] for m in out] == ["settings-retrieved", "result", "result", "result", "error"]
    assert out[0]["ignoredSectionsOrFrames"] == ["Archive"]
    # init: page scan with Archive ignored
    assert [r["count"] for r in out[1]["componentsWithDependencies"]] == [1, 1]
    # select f2: Archive is still ignored, even as the scan root
    assert out[2]["componentsWithDependencies"] == []
    # scan with an empty list: still scoped to the selection
    assert [r["node"]["id"] for r in out[3]["componentsWithDependencies"]] == ["btn"]
    assert out[4]["error"] == "Could not find Node with ID: missing"
    assert json.loads(settings.read_text()) == {IGNORED_KEY: []}
