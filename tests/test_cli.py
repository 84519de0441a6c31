"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from response2files.cli import main
from response2files.config import settings

MARKER_RESPONSE = (
    "<!-- FILE:src/App.tsx -->\nexport default function App() {\n  return null;\n}\n"
    "<!-- /FILE:src/App.tsx -->\n"
)

BATCH_RESPONSE = MARKER_RESPONSE + (
    "<!-- BATCH -->\ncurrent: 1\ntotal: 2\nisComplete: false\ncompleted: src/App.tsx\n"
    "remaining: src/Header.tsx\n<!-- /BATCH -->\n"
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def write(tmp_path):
    def _write(content: str, name: str = "response.txt"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


class TestParseCommand:
    def test_summary(self, runner, write):
        result = runner.invoke(main, ["parse", write(MARKER_RESPONSE)])
        assert result.exit_code == 0
        assert "Format: marker-v1" in result.output
        assert "Files: 1" in result.output
        assert "src/App.tsx" in result.output
        assert "Truncated: no" in result.output

    def test_json_output(self, runner, write):
        result = runner.invoke(main, ["parse", "--json", write(MARKER_RESPONSE)])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["format"] == "marker-v1"
        assert data["files"]["src/App.tsx"].startswith("export default function App()")
        assert data["incompleteFiles"] == []

    def test_output_dir(self, runner, write, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(main, ["parse", write(MARKER_RESPONSE), "-o", str(out)])
        assert result.exit_code == 0
        assert (out / "src" / "App.tsx").read_text(encoding="utf-8").startswith("export default")
        assert "Wrote 1 files" in result.output

    def test_unparseable_exits_1(self, runner, write):
        result = runner.invoke(main, ["parse", write("Just some prose.")])
        assert result.exit_code == 1
        assert "Error: [NoStructureFound]" in result.output

    def test_too_large(self, runner, write, monkeypatch):
        monkeypatch.setattr(settings, "max_response_size", 10)
        result = runner.invoke(main, ["parse", write(MARKER_RESPONSE)])
        assert result.exit_code == 1
        assert "too large" in result.output


class TestOtherCommands:
    def test_detect(self, runner, write):
        result = runner.invoke(main, ["detect", write('{"files": {"a.ts": "x"}}')])
        assert result.exit_code == 0
        assert result.output.strip() == "json-v1"

    def test_repair_json(self, runner, write):
        result = runner.invoke(main, ["repair-json", write('{"a": [1, 2, {"b": 3')])
        assert result.exit_code == 0
        assert '{"a": [1, 2, {"b": 3}]}' in result.output

    def test_fix_code(self, runner, write):
        result = runner.invoke(main, ["fix-code", write("const onClick = () { doThing(); }", "a.ts")])
        assert result.exit_code == 0
        assert "const onClick = () => { doThing(); }" in result.output

    def test_continue(self, runner, write):
        result = runner.invoke(main, ["continue", write(BATCH_RESPONSE)])
        assert result.exit_code == 0
        assert "REMAINING FILES TO GENERATE:\n- src/Header.tsx" in result.output
        assert "This is batch 2 of 2." in result.output

    def test_continue_complete_batch(self, runner, write):
        result = runner.invoke(main, ["continue", write(MARKER_RESPONSE)])
        assert result.exit_code == 1
