from __future__ import annotations

import json
from pathlib import Path

import pytest

from remix.cli.main import main
from remix.optional.zstd_support import decompress_bytes, has_zstd

T1 = "2024-01-01T00:00:01.000Z"

BASE = [
    {"id": "a", "type": "heading", "title": "Intro", "children": [
        {"id": "b", "type": "content", "text": "Hello"},
        {"id": "c", "type": "content", "text": "World"},
    ]},
]
EDITED = [
    {"id": "a", "type": "heading", "title": "Intro", "children": [
        {"id": "b", "type": "content", "text": "Hello world"},
        {"id": "c", "type": "content", "text": "World"},
    ]},
]


def _write(tmp_path: Path, name: str, obj) -> str:
    p = tmp_path / name
    p.write_text(json.dumps(obj), encoding="utf-8")
    return str(p)


@pytest.fixture(autouse=True)
def _cwd(tmp_path, monkeypatch):
    # keep discovery off the repo's configs/
    monkeypatch.chdir(tmp_path)


def test_diff_prints_modify_delta(tmp_path, capsys):
    code = main(["diff", _write(tmp_path, "o.json", BASE), _write(tmp_path, "m.json", EDITED), "--now", T1])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out == [{"op": "modify", "segmentId": "b", "newText": "Hello world", "timestamp": T1}]


def test_apply_materializes_effective_tree(tmp_path, capsys):
    deltas = [
        {"op": "modify", "segmentId": "b", "newText": "Hello world", "timestamp": T1},
        {"op": "add", "afterId": "c", "segment": {"id": "n", "type": "content", "text": "new"}, "timestamp": T1},
    ]
    code = main(["apply", _write(tmp_path, "b.json", BASE), _write(tmp_path, "d.json", deltas)])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert [c["id"] for c in out[0]["children"]] == ["b", "c", "n"]
    assert out[0]["children"][0]["text"] == "Hello world"


def test_apply_report_counts_skipped(tmp_path, capsys):
    deltas = [{"op": "delete", "segmentId": "ghost", "timestamp": T1}]
    code = main(["apply", "--report", _write(tmp_path, "b.json", BASE), _write(tmp_path, "d.json", deltas)])
    assert code == 0
    captured = capsys.readouterr()
    out = json.loads(captured.out)
    assert out["applied"] == 0 and out["skipped"] == 1
    assert out["segments"] == BASE
    assert "skipped" in captured.err


def test_prune_drops_orphans(tmp_path, capsys):
    deltas = [
        {"op": "modify", "segmentId": "b", "newText": "x", "timestamp": T1},
        {"op": "modify", "segmentId": "gone", "newText": "y", "timestamp": T1},
    ]
    code = main(["prune", _write(tmp_path, "d.json", deltas), _write(tmp_path, "u.json", BASE)])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert [d["segmentId"] for d in out] == ["b"]


def test_malformed_delta_exits_1_with_path(tmp_path, capsys):
    bad = [{"op": "rename", "segmentId": "b", "timestamp": T1}]
    code = main(["apply", _write(tmp_path, "b.json", BASE), _write(tmp_path, "d.json", bad)])
    assert code == 1
    assert "DeltaFormatError: deltas[0].op" in capsys.readouterr().err


def test_non_strict_config_skips_malformed(tmp_path, capsys):
    cfg = tmp_path / "c.yaml"
    cfg.write_text("codec:\n  strict: false\n", encoding="utf-8")
    bad = [{"op": "rename"}, {"op": "delete", "segmentId": "c", "timestamp": T1}]
    code = main(["-c", str(cfg), "apply", _write(tmp_path, "b.json", BASE), _write(tmp_path, "d.json", bad)])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert [c["id"] for c in out[0]["children"]] == ["b"]


def test_missing_input_file_exits_2(tmp_path, capsys):
    code = main(["apply", str(tmp_path / "none.json"), str(tmp_path / "none2.json")])
    assert code == 2
    assert capsys.readouterr().err.startswith("CLIError: apply:")


def test_verbose_reports_config_source(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("REMIX_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    code = main(["diff", "--verbose", _write(tmp_path, "o.json", BASE), _write(tmp_path, "m.json", EDITED)])
    assert code == 0
    assert "config: <defaults> (none)" in capsys.readouterr().err


def test_bad_config_exits_1(tmp_path, capsys):
    cfg = tmp_path / "c.yaml"
    cfg.write_text("diff:\n  modify_fields: all\n", encoding="utf-8")
    code = main(["-c", str(cfg), "diff", _write(tmp_path, "o.json", BASE), _write(tmp_path, "m.json", BASE)])
    assert code == 1
    assert "ConfigError" in capsys.readouterr().err


def test_out_writes_file_atomically(tmp_path, capsys):
    out = tmp_path / "res" / "deltas.json"
    code = main([
        "diff", _write(tmp_path, "o.json", []), _write(tmp_path, "m.json", BASE),
        "--now", T1, "--out", str(out), "--pretty",
    ])
    assert code == 0
    assert capsys.readouterr().out == ""
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data[0]["op"] == "add" and data[0]["afterId"] is None


@pytest.mark.skipif(not has_zstd(), reason="zstandard not installed")
def test_out_zst_is_compressed(tmp_path):
    out = tmp_path / "deltas.json.zst"
    code = main(["diff", _write(tmp_path, "o.json", BASE), _write(tmp_path, "m.json", EDITED), "--out", str(out)])
    assert code == 0
    assert json.loads(decompress_bytes(out.read_bytes()))[0]["op"] == "modify"


def test_modify_fields_flag_overrides_config(tmp_path, capsys):
    base = [{"id": "h", "type": "heading", "title": "Old", "text": "body"}]
    edited = [{"id": "h", "type": "heading", "title": "New", "text": "body"}]
    code = main([
        "diff", _write(tmp_path, "o.json", base), _write(tmp_path, "m.json", edited),
        "--now", T1, "--modify-fields", "changed",
    ])
    assert code == 0
    (delta,) = json.loads(capsys.readouterr().out)
    assert "newText" not in delta and delta["newTitle"] == "New"


def test_validate_defaults_and_json(tmp_path, capsys):
    assert main(["validate"]) == 0
    assert capsys.readouterr().out.strip() == "OK"
    assert main(["validate", "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["version"] == "v1"


def test_validate_errors(tmp_path, capsys):
    assert main(["validate", str(tmp_path / "missing.yaml")]) == 2
    bad = tmp_path / "bad.yaml"
    bad.write_text("logz: {}\n", encoding="utf-8")
    assert main(["validate", str(bad)]) == 1
    assert "did you mean 'logs'" in capsys.readouterr().err


def test_no_subcommand_prints_help(capsys):
    assert main([]) == 2
    assert "usage: remix" in capsys.readouterr().err
