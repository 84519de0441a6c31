"""Tests for manifest validation."""

from response2files.schemas.result import FileAction, FileStatus, ManifestEntry
from response2files.validation import manifest_warnings, validate_manifest


class TestValidateManifest:
    def test_missing_file(self):
        manifest = [ManifestEntry(path="src/Header.tsx"), ManifestEntry(path="src/Footer.tsx")]
        validation = validate_manifest(manifest, {"src/Header.tsx": "..."})
        assert validation.missing == ["src/Footer.tsx"]
        assert validation.expected == ["src/Header.tsx", "src/Footer.tsx"]
        assert not validation.is_valid

    def test_extra_file_is_still_valid(self):
        validation = validate_manifest([ManifestEntry(path="a.ts")], ["a.ts", "b.ts"])
        assert validation.extra == ["b.ts"]
        assert validation.is_valid

    def test_deleted_and_pending_not_expected(self):
        manifest = [
            ManifestEntry(path="a.ts"),
            ManifestEntry(path="old.ts", action=FileAction.DELETE),
            ManifestEntry(path="later.ts", status=FileStatus.PENDING),
        ]
        validation = validate_manifest(manifest, ["a.ts"])
        assert validation.expected == ["a.ts"]
        assert validation.is_valid

    def test_no_manifest(self):
        validation = validate_manifest(None, ["a.ts"])
        assert validation.is_valid
        assert validation.received == ["a.ts"]


class TestManifestWarnings:
    def test_warning_text(self):
        validation = validate_manifest([ManifestEntry(path="a.ts"), ManifestEntry(path="b.ts")], [])
        assert manifest_warnings(validation) == [
            "[ManifestMismatch] Manifest validation: missing files: a.ts, b.ts"
        ]

    def test_valid_has_no_warnings(self):
        assert manifest_warnings(validate_manifest(None, [])) == []
