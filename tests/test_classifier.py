"""Tests for schema issue classification."""

import pytest

from manifest_lint import messages
from manifest_lint.models.config import LinterConfig, ValidationContext
from manifest_lint.models.diagnostic import DiagnosticsCollector, Severity
from manifest_lint.models.issue import IssueKind, RawSchemaIssue
from manifest_lint.models.manifest import ManifestDocument
from manifest_lint.validators.classifier import ErrorClassifier


def _document(manifest_version: int = 2) -> ManifestDocument:
    return ManifestDocument.from_dict(
        {"manifest_version": manifest_version, "name": "x", "version": "1.0"}
    )


@pytest.fixture
def classifier(config: LinterConfig) -> ErrorClassifier:
    return ErrorClassifier(config, ValidationContext())


@pytest.fixture
def privileged_classifier(config: LinterConfig) -> ErrorClassifier:
    return ErrorClassifier(config, ValidationContext(privileged=True))


class TestRequiredAndType:
    """Tests for required and type issues."""

    def test_required_field(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.REQUIRED, value={}, message="'name' is a required property"
        )
        result = classifier.classify(issue, _document())

        assert result.message.code == "MANIFEST_FIELD_REQUIRED"
        assert result.severity is Severity.ERROR
        assert result.message.message == "\"/\" 'name' is a required property"

    def test_type_mismatch(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.TYPE, path=("name",), value=5, message="5 is not of type 'string'"
        )
        result = classifier.classify(issue, _document())

        assert result.message.code == "MANIFEST_FIELD_INVALID"
        assert result.instance_path == "/name"
        assert result.message.message.startswith('"/name"')

    def test_unknown_keyword_is_json_invalid(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.OTHER,
            path=("content_security_policy",),
            value=5,
            message="5 is not valid under any of the given schemas",
        )
        result = classifier.classify(issue, _document())

        assert result.message.code == "JSON_INVALID"
        assert result.message.message == (
            '"/content_security_policy" is not a valid key or has invalid extra properties'
        )


class TestDeprecated:
    """Tests for deprecated properties."""

    def test_registered_path_uses_replacement(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.DEPRECATED,
            path=("theme", "images", "headerURL"),
            value="bg.png",
            message="Please use theme_frame",
        )
        result = classifier.classify(issue, _document())

        assert result.message.code == "MANIFEST_THEME_LWT_ALIAS"
        assert result.message.description == messages.MANIFEST_THEME_LWT_ALIAS.description

    def test_unregistered_path_is_generic(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.DEPRECATED, path=("options_page",), value="a.html", message="Use options_ui"
        )
        result = classifier.classify(issue, _document())

        assert result.message.code == "MANIFEST_FIELD_DEPRECATED"
        assert result.message.description == "Use options_ui"


class TestManifestVersionRange:
    """Tests for min/max manifest version issues."""

    def test_permission_element(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.MAX_MANIFEST_VERSION,
            path=("permissions", 0),
            value="<all_urls>",
            params={"max_manifest_version": 2},
        )
        result = classifier.classify(issue, _document(3))

        assert result.message.code == "MANIFEST_PERMISSION_UNSUPPORTED"
        assert "<all_urls>" in result.message.message
        assert result.severity is Severity.WARNING

    def test_applications(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.MAX_MANIFEST_VERSION,
            path=("applications",),
            value={},
            params={"max_manifest_version": 2},
        )
        result = classifier.classify(issue, _document(3))

        assert result.message.code == "APPLICATIONS_INVALID"
        assert result.severity is Severity.ERROR

    def test_other_field(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.MIN_MANIFEST_VERSION,
            path=("action",),
            value={},
            params={"min_manifest_version": 3},
        )
        result = classifier.classify(issue, _document(2))

        assert result.message.code == "MANIFEST_FIELD_UNSUPPORTED"
        assert "/action" in result.message.message
        assert result.severity is Severity.WARNING


class TestPrivileged:
    """Tests for privileged permissions and properties."""

    def test_non_privileged_with_privileged_permissions(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.PRIVILEGED_PERMISSIONS,
            path=("permissions",),
            value=["telemetry"],
            params={"privileged_permissions": ["telemetry"]},
        )
        result = classifier.classify(issue, _document())

        assert result.message.code == "MANIFEST_PERMISSIONS_PRIVILEGED"
        assert result.severity is Severity.ERROR

    def test_already_signed_downgrades(self, config: LinterConfig) -> None:
        classifier = ErrorClassifier(config, ValidationContext(already_signed=True))
        issue = RawSchemaIssue(
            kind=IssueKind.PRIVILEGED_PERMISSIONS,
            path=("permissions",),
            value=["telemetry"],
            params={"privileged_permissions": ["telemetry"]},
        )
        assert classifier.classify(issue, _document()).severity is Severity.WARNING

    def test_privileged_without_privileged_permissions(
        self, privileged_classifier: ErrorClassifier
    ) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.PRIVILEGED_PERMISSIONS,
            path=("permissions",),
            value=["tabs"],
            params={"privileged_permissions": []},
        )
        result = privileged_classifier.classify(issue, _document())
        assert result.message.code == "PRIVILEGED_FEATURES_REQUIRED"

    def test_privileged_missing_mozilla_addons(
        self, privileged_classifier: ErrorClassifier
    ) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.PRIVILEGED_PERMISSIONS,
            path=("permissions",),
            value=["telemetry"],
            params={"privileged_permissions": ["telemetry"]},
        )
        result = privileged_classifier.classify(issue, _document())
        assert result.message.code == "MOZILLA_ADDONS_PERMISSION_REQUIRED"

    def test_privileged_field(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(kind=IssueKind.PRIVILEGED, path=("hidden",), value=True)
        result = classifier.classify(issue, _document())

        assert result.message.code == "MANIFEST_FIELD_PRIVILEGED"
        assert '"/hidden"' in result.message.message

    def test_privileged_field_on_privileged_addon(
        self, privileged_classifier: ErrorClassifier
    ) -> None:
        issue = RawSchemaIssue(kind=IssueKind.PRIVILEGED, path=("hidden",), value=True)
        result = privileged_classifier.classify(issue, _document())
        assert result.message.code == "MOZILLA_ADDONS_PERMISSION_REQUIRED"


class TestPermissionElements:
    """Tests for bad permission values and array element refinement."""

    @pytest.mark.parametrize(
        "field,code",
        [
            ("permissions", "MANIFEST_BAD_PERMISSION"),
            ("optional_permissions", "MANIFEST_BAD_OPTIONAL_PERMISSION"),
            ("host_permissions", "MANIFEST_BAD_HOST_PERMISSION"),
        ],
    )
    def test_non_string_value(self, classifier: ErrorClassifier, field: str, code: str) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.OTHER,
            path=(field, 0),
            value=42,
            message="42 is not valid under any of the given schemas",
        )
        result = classifier.classify(issue, _document(3))

        assert result.message.code == code
        assert result.message.message.startswith("Permissions ")
        assert result.severity is Severity.ERROR

    def test_unknown_permission_is_refined(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.OTHER,
            path=("permissions", 1),
            value="notAPermission",
            message="'notAPermission' is not valid under any of the given schemas",
        )
        result = classifier.classify(issue, _document())

        assert result.message.code == "MANIFEST_PERMISSIONS"
        assert result.message.message == (
            '/permissions: Invalid permissions "notAPermission" at 1.'
        )
        assert result.severity is Severity.WARNING

    def test_install_origin_is_refined(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(
            kind=IssueKind.OTHER,
            path=("install_origins", 0),
            value="ftp://example.com",
            message="does not match",
        )
        result = classifier.classify(issue, _document())

        assert result.message.code == "MANIFEST_INSTALL_ORIGINS"
        assert result.message.message == (
            '/install_origins: Invalid install_origins "ftp://example.com" at 0.'
        )


class TestHostPermissionSuppression:
    """Host permission findings only count from manifest version 3."""

    def _issue(self) -> RawSchemaIssue:
        return RawSchemaIssue(
            kind=IssueKind.OTHER,
            path=("host_permissions", 0),
            value="not-a-pattern",
            message="'not-a-pattern' does not match",
        )

    def test_suppressed_on_manifest_v2(self, classifier: ErrorClassifier) -> None:
        assert classifier.classify(self._issue(), _document(2)) is None

    def test_warning_on_manifest_v3(self, classifier: ErrorClassifier) -> None:
        result = classifier.classify(self._issue(), _document(3))

        assert result.message.code == "MANIFEST_HOST_PERMISSIONS"
        assert result.severity is Severity.WARNING

        collector = DiagnosticsCollector()
        collector.add(result.severity, result.message, instance_path=result.instance_path)
        assert collector.is_valid

    def test_bad_host_permission_suppressed_on_v2(self, classifier: ErrorClassifier) -> None:
        issue = RawSchemaIssue(kind=IssueKind.TYPE, path=("host_permissions", 0), value=1)
        assert classifier.classify(issue, _document(2)) is None
