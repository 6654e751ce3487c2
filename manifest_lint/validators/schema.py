"""JSON Schema validation of manifests.

Wraps a jsonschema Draft 7 validator extended with the manifest-specific
keywords (deprecated, min/max_manifest_version, privileged,
validate_privileged_permissions) and converts every failure into a
RawSchemaIssue carrying an explicit IssueKind. An anyOf/oneOf failure is
reported through the branch that only a gating keyword ruled out, when
there is one.
"""

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from importlib import resources
from typing import Any

from jsonschema import Draft7Validator, ValidationError
from jsonschema.validators import extend

from ..models.config import ValidationContext
from ..models.issue import IssueKind, RawSchemaIssue
from ..models.manifest import AddonKind, ManifestDocument
from ..security.policy import PRIVILEGED_PERMISSIONS

logger = logging.getLogger(__name__)

SCHEMA_RESOURCE = "manifest.schema.json"
MOZILLA_ADDONS_PERMISSION = "mozillaAddons"

# Keywords that gate a value rather than describe its shape.
GATING_KEYWORDS = frozenset({
    "deprecated",
    "min_manifest_version",
    "max_manifest_version",
    "privileged",
})
COMBINATOR_KEYWORDS = frozenset({"anyOf", "oneOf"})


@dataclass
class SchemaValidationResult:
    """Outcome of validating one document."""

    valid: bool
    issues: list[RawSchemaIssue] = field(default_factory=list)


def load_default_schema() -> dict:
    """Load the manifest schema shipped with the package."""
    resource = resources.files("manifest_lint") / "data" / SCHEMA_RESOURCE
    return json.loads(resource.read_text(encoding="utf-8"))


def _keyword_error(message: str, **params: Any) -> ValidationError:
    error = ValidationError(message)
    error.params = params
    return error


def expand_combinator_error(error: ValidationError) -> list[ValidationError]:
    """Replace an anyOf/oneOf failure by its gating branch errors, if any.

    A branch whose only failures are gating keywords would have matched but
    for the manifest version (or privilege, or deprecation), and its errors
    say more than "is not valid under any of the given schemas". Otherwise
    the combinator error itself is kept.
    """
    if error.validator not in COMBINATOR_KEYWORDS or not error.context:
        return [error]

    branches: dict[Any, list[ValidationError]] = {}
    for sub_error in error.context:
        branch = sub_error.relative_schema_path[0] if sub_error.relative_schema_path else None
        branches.setdefault(branch, []).append(sub_error)

    gated = [
        sub_error
        for branch_errors in branches.values()
        if all(e.validator in GATING_KEYWORDS for e in branch_errors)
        for sub_error in branch_errors
    ]
    return gated or [error]


def _declared_permissions(document: ManifestDocument) -> list[str]:
    permissions = document.get("permissions")
    if not isinstance(permissions, list):
        return []
    return [p for p in permissions if isinstance(p, str)]


class SchemaValidationAdapter:
    """Validates manifests against JSON schemas, one schema per add-on kind."""

    def __init__(
        self,
        default_schema: dict | None = None,
        schemas: Mapping[AddonKind, dict] | None = None,
        privileged_permissions: frozenset[str] = PRIVILEGED_PERMISSIONS,
    ) -> None:
        self.default_schema = default_schema if default_schema is not None else load_default_schema()
        self.schemas = dict(schemas or {})
        self.privileged_permissions = privileged_permissions
        Draft7Validator.check_schema(self.default_schema)
        for schema in self.schemas.values():
            Draft7Validator.check_schema(schema)

    def schema_for(self, kind: AddonKind) -> dict:
        return self.schemas.get(kind, self.default_schema)

    def _validator_class(self, document: ManifestDocument, context: ValidationContext) -> type:
        """Build a validator class whose custom keywords see this document."""
        manifest_version = document.manifest_version
        declared = _declared_permissions(document)
        privileged_set = self.privileged_permissions

        def deprecated(validator, value, instance, schema) -> Iterator[ValidationError]:
            if value:
                yield _keyword_error(value if isinstance(value, str) else "is deprecated")

        def min_manifest_version(validator, value, instance, schema) -> Iterator[ValidationError]:
            if manifest_version is not None and manifest_version < value:
                yield _keyword_error(
                    f"must be used with manifest_version {value} or above",
                    min_manifest_version=value,
                )

        def max_manifest_version(validator, value, instance, schema) -> Iterator[ValidationError]:
            if manifest_version is not None and manifest_version > value:
                yield _keyword_error(
                    f"must be used with manifest_version {value} or below",
                    max_manifest_version=value,
                )

        def privileged(validator, value, instance, schema) -> Iterator[ValidationError]:
            if not value:
                return
            if not context.privileged or MOZILLA_ADDONS_PERMISSION not in declared:
                yield _keyword_error("is a privileged property")

        def validate_privileged_permissions(
            validator, value, instance, schema
        ) -> Iterator[ValidationError]:
            if not value or not isinstance(instance, list):
                return
            found = [p for p in instance if isinstance(p, str) and p in privileged_set]
            if not context.privileged:
                if found:
                    yield _keyword_error(
                        "contains privileged permissions", privileged_permissions=found
                    )
            elif not found:
                yield _keyword_error(
                    "does not contain any privileged permission", privileged_permissions=found
                )
            elif MOZILLA_ADDONS_PERMISSION not in instance:
                yield _keyword_error(
                    f'requires the "{MOZILLA_ADDONS_PERMISSION}" permission',
                    privileged_permissions=found,
                )

        return extend(
            Draft7Validator,
            {
                "deprecated": deprecated,
                "min_manifest_version": min_manifest_version,
                "max_manifest_version": max_manifest_version,
                "privileged": privileged,
                "validate_privileged_permissions": validate_privileged_permissions,
            },
        )

    def validate(
        self, document: ManifestDocument, context: ValidationContext
    ) -> SchemaValidationResult:
        """Validate a document; every failure becomes a RawSchemaIssue."""
        validator_class = self._validator_class(document, context)
        schema = self.with_version_window(self.schema_for(document.kind), context)
        validator = validator_class(schema)
        issues = [
            self._to_issue(expanded)
            for error in validator.iter_errors(document.data)
            for expanded in expand_combinator_error(error)
        ]
        if issues:
            logger.debug(
                "Schema validation messages: %s",
                json.dumps([issue.message for issue in issues], indent=2),
            )
        return SchemaValidationResult(valid=not issues, issues=issues)

    @staticmethod
    def with_version_window(schema: dict, context: ValidationContext) -> dict:
        """Bound `manifest_version` by the context's accepted window."""
        properties = schema.get("properties", {})
        if "manifest_version" not in properties:
            return schema
        manifest_version = {
            **properties["manifest_version"],
            "minimum": context.min_manifest_version,
            "maximum": context.max_manifest_version,
        }
        return {**schema, "properties": {**properties, "manifest_version": manifest_version}}

    @staticmethod
    def _to_issue(error: ValidationError) -> RawSchemaIssue:
        return RawSchemaIssue(
            kind=IssueKind.from_keyword(error.validator),
            path=tuple(error.absolute_path),
            value=error.instance,
            message=error.message,
            params=dict(getattr(error, "params", {})),
        )
