"""Tests for manifest documents, diagnostics and configuration models."""

import threading

import pytest
from pydantic import ValidationError

from manifest_lint import messages
from manifest_lint.models.config import LinterConfig, ValidationContext, parse_blocklist
from manifest_lint.models.diagnostic import DiagnosticsCollector, Metadata, Severity
from manifest_lint.models.manifest import (
    AddonKind,
    ManifestDocument,
    coerce_manifest_version,
    detect_kind,
    normalize_manifest,
)


class TestManifestDocument:
    """Tests for the manifest document model."""

    @pytest.mark.parametrize(
        "keys,kind",
        [
            ({}, AddonKind.EXTENSION),
            ({"theme": {}}, AddonKind.STATIC_THEME),
            ({"langpack_id": "x"}, AddonKind.LANGUAGE_PACK),
            ({"dictionaries": {}}, AddonKind.DICTIONARY),
            ({"site_permissions": []}, AddonKind.SITE_PERMISSION),
            ({"dictionaries": {}, "theme": {}}, AddonKind.STATIC_THEME),
            ({"site_permissions": [], "langpack_id": "x"}, AddonKind.LANGUAGE_PACK),
        ],
    )
    def test_detect_kind(self, keys: dict, kind: AddonKind) -> None:
        assert detect_kind(keys) is kind

    @pytest.mark.parametrize(
        "value,expected",
        [(2, 2), (3.0, 3), ("3", None), (True, None), (2.5, None), (None, None)],
    )
    def test_coerce_manifest_version(self, value, expected) -> None:
        assert coerce_manifest_version(value) == expected

    def test_from_dict_owns_its_data(self) -> None:
        source = {"manifest_version": 2, "permissions": ["tabs"]}
        document = ManifestDocument.from_dict(source)

        source["permissions"].append("dns")

        assert document.get("permissions") == ["tabs"]
        assert document.manifest_version == 2

    def test_from_dict_rejects_non_objects(self) -> None:
        with pytest.raises(ValueError):
            ManifestDocument.from_dict(["not", "a", "manifest"])

    def test_gecko_accessors_tolerate_bad_shapes(self) -> None:
        document = ManifestDocument.from_dict({"applications": {"gecko": "nope"}})
        assert document.gecko == {}
        assert document.addon_id is None
        assert document.strict_min_version is None

    def test_is_legacy(self) -> None:
        assert ManifestDocument.from_dict({"manifest_version": 2}).is_legacy()
        assert ManifestDocument.from_dict({}).is_legacy()
        assert not ManifestDocument.from_dict({"manifest_version": 3}).is_legacy()


class TestNormalizeManifest:
    """Tests for the one-time legacy shape merge."""

    def test_browser_specific_settings_replace_applications(self) -> None:
        document = ManifestDocument.from_dict(
            {
                "applications": {"gecko": {"id": "old@example.com"}},
                "browser_specific_settings": {"gecko": {"id": "new@example.com"}},
            }
        )
        normalized = normalize_manifest(document)

        assert normalized.addon_id == "new@example.com"
        assert document.addon_id == "old@example.com"

    def test_empty_gecko_keeps_applications(self) -> None:
        document = ManifestDocument.from_dict(
            {
                "applications": {"gecko": {"id": "old@example.com"}},
                "browser_specific_settings": {"gecko": {}},
            }
        )
        assert normalize_manifest(document).addon_id == "old@example.com"

    def test_developer_is_promoted(self) -> None:
        document = ManifestDocument.from_dict(
            {
                "author": "Someone",
                "homepage_url": "https://a.example.com",
                "developer": {"name": "Dev", "url": "https://b.example.com"},
            }
        )
        normalized = normalize_manifest(document)

        assert normalized.get("author") == "Dev"
        assert normalized.get("homepage_url") == "https://b.example.com"
        assert document.get("author") == "Someone"

    def test_normalize_is_idempotent(self) -> None:
        normalized = normalize_manifest(ManifestDocument.from_dict({"name": "x"}))
        assert normalize_manifest(normalized) is normalized
        assert normalized.normalized


class TestDiagnosticsCollector:
    """Tests for collecting diagnostics and deriving validity."""

    def test_empty_collector_is_valid(self) -> None:
        assert DiagnosticsCollector().is_valid

    def test_warnings_and_notices_keep_valid(self) -> None:
        collector = DiagnosticsCollector()
        collector.add_warning(messages.MANIFEST_PERMISSIONS)
        collector.add_notice(messages.MANIFEST_UNUSED_UPDATE)
        assert collector.is_valid

    def test_error_invalidates(self) -> None:
        collector = DiagnosticsCollector()
        collector.add_error(messages.NO_DEFAULT_LOCALE)
        assert not collector.is_valid

    def test_bad_permission_invalidates_on_any_channel(self) -> None:
        collector = DiagnosticsCollector()
        collector.add_warning(messages.MANIFEST_BAD_PERMISSION)
        assert not collector.is_valid

    def test_add_once_per_code_and_file(self) -> None:
        collector = DiagnosticsCollector()
        missing = messages.manifest_icon_missing("a.png")

        assert collector.add_once(Severity.ERROR, missing, file="a.png")
        assert not collector.add_once(Severity.ERROR, missing, file="a.png")
        assert collector.add_once(Severity.ERROR, missing, file="b.png")
        assert collector.add_once(Severity.ERROR, messages.corrupt_icon_file("a.png"), file="a.png")
        assert len(collector.diagnostics) == 3

    def test_concurrent_appends(self) -> None:
        collector = DiagnosticsCollector()

        def report(n: int) -> None:
            for _ in range(50):
                collector.add_once(
                    Severity.ERROR, messages.manifest_icon_missing(f"{n}.png"), file=f"{n}.png"
                )

        threads = [threading.Thread(target=report, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(d.file for d in collector.diagnostics) == [f"{n}.png" for n in range(8)]

    def test_to_report_partitions_by_severity(self) -> None:
        collector = DiagnosticsCollector()
        collector.add_error(messages.NO_DEFAULT_LOCALE)
        collector.add_warning(messages.MANIFEST_PERMISSIONS, instance_path="/permissions/0")
        collector.add_notice(messages.MANIFEST_UNUSED_UPDATE)

        report = collector.to_report(Metadata(id="a@b", manifest_version=2))

        assert report.valid is False
        assert [d.code for d in report.errors] == ["NO_DEFAULT_LOCALE"]
        assert report.warnings[0].instance_path == "/permissions/0"
        assert [d.code for d in report.notices] == ["MANIFEST_UNUSED_UPDATE"]
        assert report.metadata.id == "a@b"

    def test_diagnostics_are_frozen(self) -> None:
        diagnostic = DiagnosticsCollector().add_error(messages.NO_DEFAULT_LOCALE)
        with pytest.raises(ValidationError):
            diagnostic.code = "OTHER"


class TestConfig:
    """Tests for configuration models."""

    def test_parse_blocklist(self) -> None:
        text = "# comment\n\naddons.mozilla.org\n  accounts.firefox.com  \n"
        assert parse_blocklist(text) == ("addons.mozilla.org", "accounts.firefox.com")

    def test_default_config_loads_blocklist(self, config: LinterConfig) -> None:
        assert "accounts.firefox.com" in config.blocked_content_script_hosts
        assert config.restricted_permissions == {"proxy": "91.1.0"}
        assert "png" in config.image_extensions
        assert "webp" not in config.theme_image_extensions

    def test_context_defaults(self) -> None:
        context = ValidationContext()
        assert not context.privileged
        assert (context.min_manifest_version, context.max_manifest_version) == (2, 3)
        assert context.restricted_permissions is None

    def test_context_is_frozen(self) -> None:
        with pytest.raises(ValidationError):
            ValidationContext().privileged = True
