"""Manifest linting: the rule engine.

A lint pass runs in a fixed order:
1. JSON Schema validation of the document as written, each issue classified
2. Legacy shape warnings, then one normalization of the document
3. Structural rules (CSP, background, content scripts, dictionaries, ...)
4. Browser compatibility against the declared minimum version
5. Icons and theme images, checked concurrently

No rule aborts the pass; callers always get every diagnostic.
"""

import json
import logging
import posixpath
import re
from typing import Any

from .. import messages
from ..assets.decoder import ImageDecoder
from ..assets.validator import AssetValidator
from ..compat.checker import CompatibilityChecker
from ..compat.index import CompatibilityIndex
from ..messages import Message
from ..models.config import LinterConfig, ValidationContext, load_default_config
from ..models.diagnostic import DiagnosticsCollector, LintReport, Metadata, Severity
from ..models.manifest import AddonKind, ManifestDocument, normalize_manifest
from ..package import FileOracle, normalize_path
from ..security.csp import CSPAnalyzer
from ..security.policy import HIDDEN_EXCLUSIVE_KEYS, LOCALES_DIRECTORY, MESSAGES_JSON
from ..versions import is_toolkit_version_string, is_valid_version_string, moz_compare
from .classifier import ErrorClassifier
from .schema import SchemaValidationAdapter

logger = logging.getLogger(__name__)

LOCALE_DIR_RE = re.compile(rf"^{LOCALES_DIRECTORY}/(.*?)/")
LOCALE_MESSAGES_RE = re.compile(rf"^{LOCALES_DIRECTORY}/.*?/{re.escape(MESSAGES_JSON)}$")


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def experiment_api_paths(document: ManifestDocument) -> frozenset[str]:
    """Dot-joined API paths declared by every experiment's parent and child.

    {"exp": {"parent": {"paths": [["some", "name"]]}}} gives {"some.name"}.
    """
    experiments = document.get("experiment_apis")
    if not isinstance(experiments, dict):
        return frozenset()

    paths = set()
    for experiment in experiments.values():
        if not isinstance(experiment, dict):
            continue
        for side in ("parent", "child"):
            declared = experiment.get(side)
            if not isinstance(declared, dict):
                continue
            for api_path in declared.get("paths") or []:
                if isinstance(api_path, list) and api_path:
                    paths.add(".".join(str(part) for part in api_path))
    return frozenset(paths)


class ManifestLinter:
    """Lints one manifest against the files packaged with it."""

    def __init__(
        self,
        document: ManifestDocument | dict,
        package: FileOracle,
        context: ValidationContext | None = None,
        config: LinterConfig | None = None,
        schema_adapter: SchemaValidationAdapter | None = None,
        compat_index: CompatibilityIndex | None = None,
        decoder: ImageDecoder | None = None,
    ) -> None:
        if not isinstance(document, ManifestDocument):
            document = ManifestDocument.from_dict(document)
        self.raw_document = document
        self.document = normalize_manifest(document)
        self.package = package
        self.context = context or ValidationContext()
        self.config = config or load_default_config()
        self.schema_adapter = schema_adapter or SchemaValidationAdapter(
            privileged_permissions=self.config.privileged_permissions
        )
        self.compat_index = compat_index or CompatibilityIndex()
        self.decoder = decoder
        self.classifier = ErrorClassifier(self.config, self.context)
        self.csp = CSPAnalyzer()
        self.collector = DiagnosticsCollector()

    @property
    def restricted_permissions(self) -> dict[str, str]:
        if self.context.restricted_permissions is not None:
            return self.context.restricted_permissions
        return self.config.restricted_permissions

    # =========================================================================
    # Entry points
    # =========================================================================

    async def run(self) -> LintReport:
        """Run a full lint pass and return its report.

        Each call starts from an empty collector, so repeated runs over the
        same inputs report the same diagnostics.
        """
        self.collector = DiagnosticsCollector()
        self.check_structure()
        assets = AssetValidator(self.package, self.collector, self.config, self.decoder)
        await assets.run(
            self.document, include_theme_images=self.document.kind is AddonKind.STATIC_THEME
        )
        report = self.collector.to_report(self.metadata())
        logger.debug(
            "Linted %s: valid=%s errors=%d warnings=%d notices=%d",
            self.document.get("name"),
            report.valid,
            len(report.errors),
            len(report.warnings),
            len(report.notices),
        )
        return report

    def check_structure(self) -> None:
        """Run every synchronous rule into the collector."""
        self.check_schema()
        self.check_legacy_shape()
        self.check_csp()
        self.check_top_level_fields()
        self.check_background()
        self.check_content_scripts()
        self.check_dictionaries()
        self.check_update_url()
        self.check_strict_max_version()
        self.check_compatibility()
        self.check_version_string()
        self.check_default_locale()
        self.check_locales()
        self.check_homepage_url()
        self.check_restricted_permissions()
        self.check_extension_id()
        self.check_hidden_addon()

    def metadata(self) -> Metadata:
        """Summary of the (normalized) manifest."""
        document = self.document
        return Metadata(
            id=document.addon_id,
            manifest_version=document.manifest_version,
            name=_str_or_none(document.get("name")),
            version=_str_or_none(document.get("version")),
            firefox_min_version=document.strict_min_version,
            experiment_api_paths=experiment_api_paths(document),
        )

    # =========================================================================
    # Rules
    # =========================================================================

    def check_schema(self) -> None:
        # Validated as written: the normalized shape would put
        # browser_specific_settings under `applications`.
        result = self.schema_adapter.validate(self.raw_document, self.context)
        for issue in result.issues:
            classified = self.classifier.classify(issue, self.raw_document)
            if classified is None:
                continue
            self.collector.add(
                classified.severity,
                classified.message,
                instance_path=classified.instance_path,
            )

    def check_legacy_shape(self) -> None:
        raw = self.raw_document
        if raw.manifest_version is None or raw.manifest_version >= 3:
            return
        if "applications" in raw and "browser_specific_settings" in raw:
            self.collector.add_warning(messages.IGNORED_APPLICATIONS_PROPERTY)
        elif "applications" in raw:
            self.collector.add_warning(messages.APPLICATIONS_DEPRECATED)

    def check_csp(self) -> None:
        policy = self.document.get("content_security_policy")
        if isinstance(policy, str):
            self.csp.report(policy, "content_security_policy", self.collector)
        elif isinstance(policy, dict):
            for context_name, value in policy.items():
                if isinstance(value, str):
                    self.csp.report(
                        value, f"content_security_policy.{context_name}", self.collector
                    )

    def check_top_level_fields(self) -> None:
        if self.document.get("update_url"):
            self.collector.add_notice(messages.MANIFEST_UNUSED_UPDATE)
        if self.document.get("granted_host_permissions"):
            self.collector.add_warning(
                messages.manifest_field_privileged_only("granted_host_permissions")
            )

    def file_exists(
        self,
        file_path: Any,
        file_type: str,
        template=messages.manifest_background_missing,
    ) -> bool:
        """Report a missing packaged file; returns whether it exists."""
        if not isinstance(file_path, str):
            return False
        path = normalize_path(file_path)
        if self.package.exists(path):
            return True
        self.collector.add_once(Severity.ERROR, template(path, file_type), file=path)
        return False

    def check_background(self) -> None:
        background = self.document.get("background")
        if not isinstance(background, dict):
            return

        scripts = background.get("scripts")
        if isinstance(scripts, list):
            for script in scripts:
                self.file_exists(script, "script")
        if background.get("page"):
            self.file_exists(background["page"], "page")

        if background.get("service_worker"):
            if not self.context.enable_background_service_worker:
                self.collector.add_error(messages.manifest_field_unsupported("/background"))
            elif not self.document.is_legacy():
                self.file_exists(background["service_worker"], "script")

    def check_content_scripts(self) -> None:
        content_scripts = self.document.get("content_scripts")
        if not isinstance(content_scripts, list):
            return

        for rule in content_scripts:
            if not isinstance(rule, dict):
                continue
            for pattern in rule.get("matches") or []:
                if isinstance(pattern, str):
                    self.check_match_pattern(pattern)
            for script in rule.get("js") or []:
                self.file_exists(script, "script", messages.manifest_content_script_file_missing)
            for style in rule.get("css") or []:
                self.file_exists(style, "css", messages.manifest_content_script_file_missing)

    def check_match_pattern(self, pattern: str) -> None:
        # include_globs only narrow `matches`, so checking matches is enough
        for blocked in self.config.blocked_content_script_hosts:
            if blocked in pattern:
                self.collector.add_error(messages.MANIFEST_INVALID_CONTENT)

    def check_dictionaries(self) -> None:
        dictionaries = self.document.get("dictionaries")
        if not isinstance(dictionaries, dict):
            return

        if not self.document.addon_id:
            self.collector.add_error(messages.MANIFEST_DICT_MISSING_ID)
        if len(dictionaries) < 1:
            self.collector.add_error(messages.MANIFEST_EMPTY_DICTS)
        elif len(dictionaries) > 1:
            self.collector.add_error(messages.MANIFEST_MULTIPLE_DICTS)

        for file_path in dictionaries.values():
            if not isinstance(file_path, str):
                continue
            self.file_exists(file_path, "binary", messages.manifest_dictionary_file_missing)
            # Every .dic needs its .aff sibling.
            self.file_exists(
                re.sub(r"\.dic$", ".aff", file_path),
                "binary",
                messages.manifest_dictionary_file_missing,
            )

    def check_update_url(self) -> None:
        if self.context.self_hosted or not self.document.gecko.get("update_url"):
            return
        # A privileged add-on may end up listed or unlisted.
        if self.context.privileged:
            self.collector.add_warning(messages.MANIFEST_UPDATE_URL)
        else:
            self.collector.add_error(messages.MANIFEST_UPDATE_URL)

    def check_strict_max_version(self) -> None:
        document = self.document
        if document.kind is AddonKind.LANGUAGE_PACK:
            return
        if not document.gecko.get("strict_max_version"):
            return
        if document.kind is AddonKind.DICTIONARY:
            self.collector.add_error(messages.STRICT_MAX_VERSION)
        else:
            self.collector.add_notice(messages.STRICT_MAX_VERSION)

    def check_compatibility(self) -> None:
        if self.document.kind in (AddonKind.LANGUAGE_PACK, AddonKind.DICTIONARY):
            return
        CompatibilityChecker(self.compat_index).check(self.document, self.collector)

    def check_version_string(self) -> None:
        version = self.document.get("version")
        if is_valid_version_string(version):
            return
        manifest_version = self.document.manifest_version
        if (
            manifest_version is not None
            and manifest_version < 3
            and is_toolkit_version_string(version)
        ):
            self.collector.add_warning(messages.VERSION_FORMAT_DEPRECATED)
        else:
            self.collector.add_error(messages.VERSION_FORMAT_INVALID)

    def check_default_locale(self) -> None:
        default_locale = self.document.get("default_locale")
        if not default_locale or not isinstance(default_locale, str):
            return
        messages_path = posixpath.join(LOCALES_DIRECTORY, default_locale, MESSAGES_JSON)
        if not self.package.exists(messages_path):
            self.collector.add_error(messages.NO_MESSAGES_FILE)

    def check_locales(self) -> None:
        locales: list[str] = []
        with_messages: set[str] = set()
        for file_path in sorted(self.package.files()):
            match = LOCALE_DIR_RE.match(file_path)
            if not match:
                continue
            locale = match.group(1)
            if locale not in locales:
                locales.append(locale)
            if LOCALE_MESSAGES_RE.match(file_path):
                with_messages.add(locale)

        # Without a default locale the _locales files are ignored, which is
        # only a problem if they were meant to be used.
        if not self.document.get("default_locale"):
            if with_messages:
                self.collector.add_error(messages.NO_DEFAULT_LOCALE)
            return

        for locale in locales:
            if locale not in with_messages:
                self.collector.add_error(
                    messages.no_messages_file_in_locales(posixpath.join(LOCALES_DIRECTORY, locale))
                )

    def check_homepage_url(self) -> None:
        url = self.document.get("homepage_url")
        if not isinstance(url, str):
            return
        if any(restricted in url for restricted in self.config.restricted_homepage_urls):
            self.collector.add_error(messages.RESTRICTED_HOMEPAGE_URL)

    def check_restricted_permissions(self) -> None:
        permissions = self.document.get("permissions")
        if not isinstance(permissions, list) or not permissions:
            return
        declared = {str(permission).lower() for permission in permissions}
        min_version = self.document.strict_min_version

        for permission, required in self.restricted_permissions.items():
            if permission.lower() not in declared:
                continue
            # No declared minimum can't guarantee support.
            if min_version is None or moz_compare(min_version, required) < 0:
                self.collector.add_error(messages.restricted_permission(permission, required))

    def check_extension_id(self) -> None:
        manifest_version = self.document.manifest_version
        if manifest_version is None or manifest_version < 3:
            return
        if not self.document.addon_id:
            self.collector.add_error(messages.EXTENSION_ID_REQUIRED)

    def check_hidden_addon(self) -> None:
        # `hidden` is only honored for privileged add-ons.
        if not self.context.privileged:
            return
        if self.document.get("hidden") and any(key in self.document for key in HIDDEN_EXCLUSIVE_KEYS):
            self.collector.add_error(messages.HIDDEN_NO_ACTION)


def _invalid_json_report(message: Message) -> LintReport:
    collector = DiagnosticsCollector()
    collector.add_error(message)
    return collector.to_report(Metadata())


async def lint_manifest_text(
    text: str,
    package: FileOracle,
    context: ValidationContext | None = None,
    **linter_options: Any,
) -> LintReport:
    """Parse manifest text and lint it.

    Undecodable JSON (or JSON that isn't an object) is reported as
    JSON_INVALID instead of raised.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug("Manifest JSON decode error: %s", e)
        return _invalid_json_report(
            messages.JSON_INVALID.with_overrides(description=f"Your JSON file could not be parsed: {e}")
        )
    if not isinstance(data, dict):
        return _invalid_json_report(
            messages.JSON_INVALID.with_overrides(description="The manifest must be a JSON object.")
        )

    linter = ManifestLinter(data, package, context=context, **linter_options)
    return await linter.run()
