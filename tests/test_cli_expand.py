import json
from pathlib import Path

from typer.testing import CliRunner

from tumbler.cli import app

runner = CliRunner()

SYNOPSIS = """\
schema_version: "0.1.0"
levels:
  - name: color
    variants: {red: 42, green: 24, blue: 19}
  - name: shape
    variants: {circle: 1, square: 2}
"""


def _write(tmp_path: Path, text: str, name: str = "tumble.yaml") -> Path:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_expand_text_matches_synopsis(tmp_path: Path):
    p = _write(tmp_path, SYNOPSIS)
    r = runner.invoke(app, ["expand", str(p)])
    assert r.exit_code == 0, r.output
    assert r.stdout.splitlines() == [
        "blue circle: 19 1",
        "blue square: 19 2",
        "green circle: 24 1",
        "green square: 24 2",
        "red circle: 42 1",
        "red square: 42 2",
    ]


def test_expand_json_with_payload(tmp_path: Path):
    p = _write(tmp_path, SYNOPSIS + "payload: {run: 7}\n")
    r = runner.invoke(app, ["expand", str(p), "--format", "json"])
    assert r.exit_code == 0, r.output
    items = json.loads(r.stdout)
    assert len(items) == 6
    assert items[0] == {"path": ["blue", "circle"], "context": [19, 1], "payload": {"run": 7}}


def test_expand_only_when_prunes(tmp_path: Path):
    p = _write(
        tmp_path,
        SYNOPSIS + "  - name: fill\n    variants: {solid: s}\n    only_when: {shape: [square]}\n",
    )
    r = runner.invoke(app, ["expand", str(p)])
    assert r.exit_code == 0, r.output
    assert r.stdout.splitlines() == [
        "blue square solid: 19 2 s",
        "green square solid: 24 2 s",
        "red square solid: 42 2 s",
    ]


def test_expand_is_deterministic(tmp_path: Path):
    p = _write(tmp_path, SYNOPSIS)
    out1 = tmp_path / "out1.txt"
    out2 = tmp_path / "nested" / "out2.txt"

    r1 = runner.invoke(app, ["expand", str(p), "--out", str(out1)])
    r2 = runner.invoke(app, ["expand", str(p), "--out", str(out2)])

    assert r1.exit_code == 0, r1.output
    assert r2.exit_code == 0, r2.output
    assert "OK: wrote 6 combinations" in r1.stdout
    assert out1.read_text(encoding="utf-8") == out2.read_text(encoding="utf-8")


def test_expand_unknown_format(tmp_path: Path):
    p = _write(tmp_path, SYNOPSIS)
    r = runner.invoke(app, ["expand", str(p), "--format", "xml"])
    assert r.exit_code == 2
    assert "E_UNKNOWN_FORMAT" in r.output


def test_expand_missing_file(tmp_path: Path):
    r = runner.invoke(app, ["expand", str(tmp_path / "nope.yaml")])
    assert r.exit_code == 1
    assert "E_FILE_NOT_FOUND" in r.output


def test_expand_invalid_file(tmp_path: Path):
    p = _write(tmp_path, 'schema_version: "0.1.0"\nlevels: nope\n')
    r = runner.invoke(app, ["expand", str(p)])
    assert r.exit_code == 2
    assert "E_REQUIRED_FIELD" in r.output


def test_count(tmp_path: Path):
    p = _write(tmp_path, SYNOPSIS)
    r = runner.invoke(app, ["count", str(p)])
    assert r.exit_code == 0, r.output
    assert r.stdout.strip() == "6"
