"""Classification of raw schema issues into diagnostics."""

from dataclasses import dataclass

from .. import messages
from ..messages import Message
from ..models.config import LinterConfig, ValidationContext
from ..models.diagnostic import Severity
from ..models.issue import IssueKind, RawSchemaIssue
from ..models.manifest import ManifestDocument
from ..security.policy import INSTALL_ORIGINS_DATAPATH_RE, PERMS_DATAPATH_RE

ANYOF_MESSAGE_SUFFIX = "is not valid under any of the given schemas"
ANYOF_REPLACEMENT = "is not a valid key or has invalid extra properties"

BAD_PERMISSION_TEMPLATES: dict[str, Message] = {
    "/permissions": messages.MANIFEST_BAD_PERMISSION,
    "/optional_permissions": messages.MANIFEST_BAD_OPTIONAL_PERMISSION,
    "/host_permissions": messages.MANIFEST_BAD_HOST_PERMISSION,
}

# Codes the array-element refinement must not override.
REFINEMENT_EXEMPT_CODES = frozenset({
    messages.MANIFEST_BAD_PERMISSION.code,
    messages.MANIFEST_BAD_OPTIONAL_PERMISSION.code,
    messages.MANIFEST_BAD_HOST_PERMISSION.code,
    messages.MANIFEST_PERMISSION_UNSUPPORTED_CODE,
})

# Host permissions are not a separate manifest key before manifest version 3.
IGNORED_ON_MV2 = frozenset({
    messages.MANIFEST_HOST_PERMISSIONS.code,
    messages.MANIFEST_BAD_HOST_PERMISSION.code,
})

WARNING_CODES = frozenset({
    messages.MANIFEST_PERMISSIONS.code,
    messages.MANIFEST_OPTIONAL_PERMISSIONS.code,
    messages.MANIFEST_HOST_PERMISSIONS.code,
    messages.MANIFEST_PERMISSION_UNSUPPORTED_CODE,
    messages.MANIFEST_FIELD_UNSUPPORTED_CODE,
})

# Reported as warnings instead of errors once the add-on is already signed.
PRIVILEGED_CODES = frozenset({
    messages.MANIFEST_PERMISSIONS_PRIVILEGED_CODE,
    messages.MANIFEST_FIELD_PRIVILEGED_CODE,
})


@dataclass(frozen=True)
class Classification:
    """A classified schema issue, ready to be collected."""

    severity: Severity
    message: Message
    instance_path: str


class ErrorClassifier:
    """Maps raw schema issues onto diagnostics, or suppresses them."""

    def __init__(self, config: LinterConfig, context: ValidationContext) -> None:
        self.config = config
        self.context = context

    def classify(
        self, issue: RawSchemaIssue, document: ManifestDocument
    ) -> Classification | None:
        """Classify one issue; None means it must not be reported."""
        template = self.lookup(issue, document)
        if template is None:
            return None
        return Classification(
            severity=self.severity_for(template.code),
            message=template,
            instance_path=issue.instance_path,
        )

    def severity_for(self, code: str) -> Severity:
        if code in WARNING_CODES:
            return Severity.WARNING
        if code in PRIVILEGED_CODES and self.context.already_signed:
            return Severity.WARNING
        return Severity.ERROR

    def lookup(self, issue: RawSchemaIssue, document: ManifestDocument) -> Message | None:
        """Select the message template for an issue."""
        path = issue.instance_path
        raw_message = issue.message
        if raw_message.endswith(ANYOF_MESSAGE_SUFFIX):
            raw_message = ANYOF_REPLACEMENT

        default_text = f'"{path or "/"}" {raw_message}'
        template = self._dispatch(issue, path, raw_message, default_text)

        match = PERMS_DATAPATH_RE.match(path) or INSTALL_ORIGINS_DATAPATH_RE.match(path)
        if match and template.code not in REFINEMENT_EXEMPT_CODES:
            field, index = match.group(1), match.group(2)
            template = messages.ARRAY_ELEMENT_TEMPLATES[field].with_overrides(
                message=f'/{field}: Invalid {field} "{_display(issue.value)}" at {index}.'
            )

        if document.manifest_version == 2 and template.code in IGNORED_ON_MV2:
            return None
        return template

    def _dispatch(
        self, issue: RawSchemaIssue, path: str, raw_message: str, default_text: str
    ) -> Message:
        kind = issue.kind

        if kind is IssueKind.REQUIRED:
            return messages.MANIFEST_FIELD_REQUIRED.with_overrides(message=default_text)

        if kind is IssueKind.DEPRECATED:
            name = self.config.deprecated_properties.get(path)
            replacement = messages.DEPRECATED_REPLACEMENTS.get(name) if name else None
            if replacement is None:
                return messages.MANIFEST_FIELD_DEPRECATED.with_overrides(
                    description=raw_message
                )
            return replacement.with_overrides(
                description=replacement.description or raw_message
            )

        if kind in (IssueKind.MIN_MANIFEST_VERSION, IssueKind.MAX_MANIFEST_VERSION):
            min_version = issue.params.get("min_manifest_version")
            max_version = issue.params.get("max_manifest_version")
            if PERMS_DATAPATH_RE.match(path):
                return messages.manifest_permission_unsupported(
                    _display(issue.value), min_version, max_version
                )
            if path == "/applications":
                return messages.APPLICATIONS_INVALID
            return messages.manifest_field_unsupported(path, min_version, max_version)

        if kind is IssueKind.PRIVILEGED_PERMISSIONS and path.startswith("/permissions"):
            if self.context.privileged:
                if issue.params.get("privileged_permissions"):
                    return messages.mozilla_addons_permission_required(path)
                return messages.privileged_features_required(path)
            return messages.manifest_permissions_privileged(path)

        if issue.has_value and not isinstance(issue.value, str):
            for prefix, bad_template in BAD_PERMISSION_TEMPLATES.items():
                if path.startswith(prefix):
                    return bad_template.with_overrides(
                        message=f"Permissions {raw_message}."
                    )

        if kind is IssueKind.TYPE:
            return messages.MANIFEST_FIELD_INVALID.with_overrides(message=default_text)

        if kind is IssueKind.PRIVILEGED:
            if self.context.privileged:
                return messages.mozilla_addons_permission_required(path)
            return messages.manifest_field_privileged(path)

        return messages.JSON_INVALID.with_overrides(message=default_text)


def _display(value: object) -> str:
    """Render an offending value the way it appears in messages."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)
