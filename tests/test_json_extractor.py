"""Tests for the JSON v1 / v2 extractors."""

import json

from response2files.extractors.base import ExtractionState
from response2files.extractors.json_extractor import (
    extract_json_v1,
    extract_json_v2,
    prepare_json_string,
)
from response2files.schemas.result import FileStatus


def _extract_v1(payload) -> ExtractionState:
    state = ExtractionState()
    text = payload if isinstance(payload, str) else json.dumps(payload)
    extract_json_v1(text, state)
    return state


class TestPrepareJsonString:
    def test_unwraps_fenced_block(self):
        assert prepare_json_string('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_unclosed_fence_keeps_rest(self):
        assert prepare_json_string('```json\n{"a": 1') == '{"a": 1'

    def test_strips_bom_and_plan(self):
        text = '\ufeff// PLAN: {"create": []}\n{"a": 1}'
        assert prepare_json_string(text) == '{"a": 1}'


class TestExtractJsonV1:
    """Test file extraction from v1 payloads."""

    def test_files_mapping(self):
        state = _extract_v1({"explanation": "Done", "files": {"src/a.ts": "export const a = 1;"}})
        assert state.files == {"src/a.ts": "export const a = 1;"}
        assert state.explanation == "Done"
        assert not state.truncated

    def test_content_objects(self):
        state = _extract_v1({"files": {"src/a.ts": {"content": "export const a = 1;"}}})
        assert state.files == {"src/a.ts": "export const a = 1;"}

    def test_files_list(self):
        state = _extract_v1({"files": [{"path": "src/a.ts", "content": "export const a = 1;"}]})
        assert state.files == {"src/a.ts": "export const a = 1;"}

    def test_file_changes_key(self):
        state = _extract_v1({"fileChanges": {"src/a.ts": "export const a = 1;"}})
        assert list(state.files) == ["src/a.ts"]

    def test_root_level_paths(self):
        state = _extract_v1({"src/a.ts": "export const a = 1;"})
        assert list(state.files) == ["src/a.ts"]

    def test_short_content_skipped(self):
        assert _extract_v1({"files": {"a.ts": "x"}}).files == {}

    def test_ignored_paths_skipped(self):
        state = _extract_v1({"files": {"node_modules/x/index.js": "module.exports = 1;"}})
        assert state.files == {}

    def test_fenced_content_cleaned(self):
        state = _extract_v1({"files": {"src/a.ts": "```ts\nexport const a = 1;\n```"}})
        assert state.files["src/a.ts"] == "export const a = 1;"

    def test_deleted_files(self):
        state = _extract_v1({"files": {"src/a.ts": "export const a = 1;"}, "deletedFiles": ["src/old.ts"]})
        assert state.deleted_files == ["src/old.ts"]

    def test_trailing_prose(self):
        text = json.dumps({"files": {"src/a.ts": "export const a = 1;"}}) + "\n\nLet me know!"
        state = _extract_v1(text)
        assert list(state.files) == ["src/a.ts"]
        assert not state.truncated

    def test_truncated_payload_repaired(self):
        text = '{"explanation":"Added header","files":{"src/App.tsx":"export default function App(){return null}'
        state = _extract_v1(text)
        assert state.files["src/App.tsx"] == "export default function App(){return null}"
        assert state.truncated
        assert "JSON was repaired from truncated response" in state.warnings

    def test_no_json(self):
        state = _extract_v1("no json here")
        assert state.errors == ["[JsonParseFailed] No JSON object found"]


class TestExtractJsonV2:
    """Test metadata extraction from v2 payloads."""

    payload = {
        "meta": {"format": "json", "version": "2.0", "timestamp": "2024-01-01T00:00:00Z"},
        "plan": {
            "create": ["src/a.ts", "src/b.ts"],
            "update": [],
            "delete": ["src/old.ts"],
            "sizes": {"src/a.ts": 1},
        },
        "manifest": [
            {"path": "src/a.ts", "action": "create", "lines": 1, "tokens": 10, "status": "included"},
            {"path": "src/b.ts", "action": "create", "lines": 3, "tokens": 30, "status": "pending"},
        ],
        "batch": {
            "current": 1,
            "total": 2,
            "isComplete": False,
            "completed": ["src/a.ts"],
            "remaining": ["src/b.ts"],
        },
        "files": {"src/a.ts": "export const a = 1;"},
    }

    def _extract(self, payload) -> ExtractionState:
        state = ExtractionState()
        extract_json_v2(json.dumps(payload), state)
        return state

    def test_meta_and_plan(self):
        state = self._extract(self.payload)
        assert state.meta.version == "2.0"
        assert state.meta.timestamp == "2024-01-01T00:00:00Z"
        assert state.plan.create == ["src/a.ts", "src/b.ts"]
        assert state.plan.sizes == {"src/a.ts": 1}
        assert state.deleted_files == ["src/old.ts"]

    def test_manifest(self):
        state = self._extract(self.payload)
        assert [entry.path for entry in state.manifest] == ["src/a.ts", "src/b.ts"]
        assert state.manifest[1].status == FileStatus.PENDING
        assert state.validation.is_valid

    def test_incomplete_batch_marks_truncated(self):
        state = self._extract(self.payload)
        assert state.batch.remaining == ["src/b.ts"]
        assert not state.batch.is_complete
        assert state.truncated

    def test_manifest_mismatch_warns(self):
        payload = dict(self.payload)
        payload["manifest"] = [
            {"path": "src/a.ts", "lines": 1, "tokens": 10},
            {"path": "src/c.ts", "lines": 1, "tokens": 10},
        ]
        state = self._extract(payload)
        assert state.validation.missing == ["src/c.ts"]
        assert "[ManifestMismatch] Manifest validation: missing files: src/c.ts" in state.warnings

    def test_meta_defaults(self):
        state = self._extract({"meta": {}, "files": {"src/a.ts": "export const a = 1;"}})
        assert state.meta is not None
        assert (state.meta.format, state.meta.version) == ("json", "2.0")
