"""Message templates for manifest diagnostics.

Each template carries a stable code plus the user-facing message and an
optional longer description. Parametrized templates are plain functions
returning a Message.
"""

from dataclasses import dataclass, replace

MDN_MANIFEST_DOCS = "See https://mzl.la/1ZOhoEN (MDN Docs) for more information."


@dataclass(frozen=True)
class Message:
    """A diagnostic template: code, message and optional description."""

    code: str
    message: str
    description: str | None = None

    def with_overrides(self, **overrides: str | None) -> "Message":
        """Return a copy with message and/or description replaced."""
        return replace(self, **overrides)


# =============================================================================
# Schema-derived messages
# =============================================================================

JSON_INVALID = Message("JSON_INVALID", "Your JSON is not valid.", "Your JSON file could not be parsed.")

MANIFEST_FIELD_REQUIRED = Message(
    "MANIFEST_FIELD_REQUIRED", "The field is required.", MDN_MANIFEST_DOCS
)
MANIFEST_FIELD_INVALID = Message(
    "MANIFEST_FIELD_INVALID", "The field is invalid.", MDN_MANIFEST_DOCS
)
MANIFEST_FIELD_DEPRECATED = Message(
    "MANIFEST_FIELD_DEPRECATED", "This field is deprecated.", None
)
MANIFEST_PERMISSIONS = Message(
    "MANIFEST_PERMISSIONS", "Unknown permission.", MDN_MANIFEST_DOCS
)
MANIFEST_OPTIONAL_PERMISSIONS = Message(
    "MANIFEST_OPTIONAL_PERMISSIONS", "Unknown permission.", MDN_MANIFEST_DOCS
)
MANIFEST_HOST_PERMISSIONS = Message(
    "MANIFEST_HOST_PERMISSIONS", "Invalid host permission.", MDN_MANIFEST_DOCS
)
MANIFEST_INSTALL_ORIGINS = Message(
    "MANIFEST_INSTALL_ORIGINS", "Invalid install origin.", MDN_MANIFEST_DOCS
)
MANIFEST_BAD_PERMISSION = Message(
    "MANIFEST_BAD_PERMISSION", "The permission type is unsupported.", MDN_MANIFEST_DOCS
)
MANIFEST_BAD_OPTIONAL_PERMISSION = Message(
    "MANIFEST_BAD_OPTIONAL_PERMISSION",
    "The permission type is unsupported.",
    MDN_MANIFEST_DOCS,
)
MANIFEST_BAD_HOST_PERMISSION = Message(
    "MANIFEST_BAD_HOST_PERMISSION",
    "The permission type is unsupported.",
    MDN_MANIFEST_DOCS,
)
APPLICATIONS_INVALID = Message(
    "APPLICATIONS_INVALID",
    '"applications" is no longer allowed in Manifest Version 3 and above.',
    'The "applications" property in the manifest is no longer allowed in '
    'Manifest Version 3 and above. Use "browser_specific_settings" instead.',
)
MANIFEST_THEME_LWT_ALIAS = Message(
    "MANIFEST_THEME_LWT_ALIAS",
    "This theme LWT alias has been removed in Firefox 70.",
    "See https://mzl.la/2T11Lkc (MDN Docs) for more information.",
)

MANIFEST_FIELD_UNSUPPORTED_CODE = "MANIFEST_FIELD_UNSUPPORTED"
MANIFEST_PERMISSION_UNSUPPORTED_CODE = "MANIFEST_PERMISSION_UNSUPPORTED"
MANIFEST_PERMISSIONS_PRIVILEGED_CODE = "MANIFEST_PERMISSIONS_PRIVILEGED"
MANIFEST_FIELD_PRIVILEGED_CODE = "MANIFEST_FIELD_PRIVILEGED"


def _version_range(min_version: int | None, max_version: int | None) -> str:
    if min_version is not None and max_version is not None:
        return f"{min_version} to {max_version}"
    if min_version is not None:
        return f">= {min_version}"
    if max_version is not None:
        return f"<= {max_version}"
    return "in use"


def manifest_field_unsupported(
    field: str, min_version: int | None = None, max_version: int | None = None
) -> Message:
    """Field not supported by the manifest version in use."""
    return Message(
        MANIFEST_FIELD_UNSUPPORTED_CODE,
        f'"{field}" is in a format not supported in manifest versions '
        f"{_version_range(min_version, max_version)}.",
        f'"{field}" is not supported in manifest versions '
        f"{_version_range(min_version, max_version)}.",
    )


def manifest_permission_unsupported(
    permission: object, min_version: int | None = None, max_version: int | None = None
) -> Message:
    """Permission not supported by the manifest version in use."""
    return Message(
        MANIFEST_PERMISSION_UNSUPPORTED_CODE,
        f'/permissions: "{permission}" is not supported in manifest versions '
        f"{_version_range(min_version, max_version)}.",
        f'"{permission}" is not supported in manifest versions '
        f"{_version_range(min_version, max_version)}.",
    )


def manifest_permissions_privileged(instance_path: str) -> Message:
    return Message(
        MANIFEST_PERMISSIONS_PRIVILEGED_CODE,
        "Privileged permissions are not allowed in non-privileged extensions.",
        f'"{instance_path}" contains permissions that are only available '
        "to privileged extensions.",
    )


def manifest_field_privileged(instance_path: str) -> Message:
    return Message(
        MANIFEST_FIELD_PRIVILEGED_CODE,
        f'"{instance_path}" is only available to privileged extensions.',
        f'"{instance_path}" is a privileged manifest property and cannot be '
        "used by non-privileged extensions.",
    )


def mozilla_addons_permission_required(instance_path: str) -> Message:
    return Message(
        "MOZILLA_ADDONS_PERMISSION_REQUIRED",
        'The "mozillaAddons" permission is required for privileged extensions.',
        f'"{instance_path}" requires the "mozillaAddons" permission to be '
        "declared by privileged extensions.",
    )


def privileged_features_required(instance_path: str) -> Message:
    return Message(
        "PRIVILEGED_FEATURES_REQUIRED",
        "Privileged extensions should declare privileged permissions.",
        f'"{instance_path}" does not contain any privileged permission. '
        "Privileged extensions must use at least one privileged feature.",
    )


# =============================================================================
# Structural rules
# =============================================================================

IGNORED_APPLICATIONS_PROPERTY = Message(
    "IGNORED_APPLICATIONS_PROPERTY",
    '"applications" is ignored when "browser_specific_settings" is also present.',
    'Both "applications" and "browser_specific_settings" are set. Firefox '
    'ignores "applications" in this case; remove it.',
)
APPLICATIONS_DEPRECATED = Message(
    "APPLICATIONS_DEPRECATED",
    '"applications" is deprecated; use "browser_specific_settings".',
    'The "applications" property is deprecated and will be removed from '
    'Manifest Version 3. Use "browser_specific_settings" instead.',
)
MANIFEST_UNUSED_UPDATE = Message(
    "MANIFEST_UNUSED_UPDATE",
    'The "update_url" property is not used by Firefox.',
    'The "update_url" is not used by Firefox in the root of a manifest; '
    "your add-on will be updated via the Add-ons site and not your "
    '"update_url".',
)
MANIFEST_UPDATE_URL = Message(
    "MANIFEST_UPDATE_URL",
    '"update_url" is not allowed.',
    '"applications.gecko.update_url" or "browser_specific_settings.gecko.update_url" '
    "are not allowed for Mozilla-hosted add-ons.",
)
MANIFEST_INVALID_CONTENT = Message(
    "MANIFEST_INVALID_CONTENT",
    "Forbidden content found in add-on.",
    "This add-on contains forbidden content.",
)
MANIFEST_DICT_MISSING_ID = Message(
    "MANIFEST_DICT_MISSING_ID",
    "The dictionary file is missing an id.",
    'Dictionaries must declare an id in "browser_specific_settings.gecko.id".',
)
MANIFEST_EMPTY_DICTS = Message(
    "MANIFEST_EMPTY_DICTS",
    'The "dictionaries" property must not be empty.',
    'A dictionary add-on must declare exactly one entry in "dictionaries".',
)
MANIFEST_MULTIPLE_DICTS = Message(
    "MANIFEST_MULTIPLE_DICTS",
    "Multiple dictionaries are not allowed.",
    'A dictionary add-on must declare exactly one entry in "dictionaries".',
)
STRICT_MAX_VERSION = Message(
    "STRICT_MAX_VERSION",
    "strict_max_version not required.",
    "strict_max_version shouldn't be used unless the add-on is expected "
    "not to work with future versions of Firefox.",
)
VERSION_FORMAT_DEPRECATED = Message(
    "VERSION_FORMAT_DEPRECATED",
    'The "version" property uses a deprecated format.',
    "Version strings with letters are deprecated. Use up to four dot-separated "
    "integers without leading zeros.",
)
VERSION_FORMAT_INVALID = Message(
    "VERSION_FORMAT_INVALID",
    'The "version" property must be a string with 1-4 numbers separated by dots.',
    "Each number is limited to 9 digits and leading zeros are not allowed.",
)
NO_MESSAGES_FILE = Message(
    "NO_MESSAGES_FILE",
    'The "default_locale" is missing localizations.',
    'The "default_locale" value is specified in the manifest, but no matching '
    '"messages.json" in the "_locales" directory exists.',
)
NO_DEFAULT_LOCALE = Message(
    "NO_DEFAULT_LOCALE",
    'The "default_locale" is missing but "_locales" exist.',
    'The "default_locale" value is not specifed in the manifest, but a '
    '"_locales" directory exists.',
)
RESTRICTED_HOMEPAGE_URL = Message(
    "RESTRICTED_HOMEPAGE_URL",
    'Linking to "addons.mozilla.org" is not allowed.',
    'Links directing to "addons.mozilla.org" are not allowed to be used for '
    "homepage.",
)
EXTENSION_ID_REQUIRED = Message(
    "EXTENSION_ID_REQUIRED",
    "The extension ID is required in Manifest Version 3 and above.",
    'Set "browser_specific_settings.gecko.id" in the manifest.',
)
HIDDEN_NO_ACTION = Message(
    "HIDDEN_NO_ACTION",
    'Cannot use actions in hidden add-ons.',
    'The hidden and browser_action/page_action (or action in Manifest Version '
    "3 and above) properties are mutually exclusive.",
)
WRONG_ICON_EXTENSION = Message(
    "WRONG_ICON_EXTENSION",
    "Unsupported image extension",
    "Icons should be one of JPG/JPEG, WebP, GIF, PNG or SVG.",
)


def manifest_field_privileged_only(field: str) -> Message:
    return Message(
        "MANIFEST_FIELD_PRIVILEGEDONLY",
        f'"{field}" is ignored for non-privileged add-ons.',
        f'"{field}" manifest field is only used for privileged and temporarily '
        "installed extensions.",
    )


def manifest_csp(property_name: str) -> Message:
    """Generic insecure content security policy."""
    return Message(
        "MANIFEST_CSP",
        f'"{property_name}" allows remote code execution in manifest.json',
        "A custom content_security_policy needs additional review.",
    )


def manifest_csp_unsafe_eval(property_name: str) -> Message:
    return Message(
        "MANIFEST_CSP_UNSAFE_EVAL",
        f"Using 'eval' in \"{property_name}\" is strongly discouraged.",
        "'unsafe-eval' is not allowed because it allows remote code execution.",
    )


def manifest_background_missing(path: str, file_type: str) -> Message:
    return Message(
        "MANIFEST_BACKGROUND_FILE_NOT_FOUND",
        f'A background {file_type} defined in the manifest could not be found.',
        f'Background {file_type} could not be found at "{path}".',
    )


def manifest_content_script_file_missing(path: str, file_type: str) -> Message:
    return Message(
        "MANIFEST_CONTENT_SCRIPT_FILE_NOT_FOUND",
        f"A content script {file_type} defined in the manifest could not be found.",
        f'Content script defined in the manifest could not be found at "{path}".',
    )


def manifest_dictionary_file_missing(path: str, file_type: str) -> Message:
    return Message(
        "MANIFEST_DICT_NOT_FOUND",
        "A dictionary file defined in the manifest could not be found.",
        f'Dictionary file defined in the manifest could not be found at "{path}".',
    )


def manifest_theme_image_missing(path: str, property_name: str) -> Message:
    return Message(
        "MANIFEST_THEME_IMAGE_NOT_FOUND",
        "A theme image file defined in the manifest could not be found.",
        f'Theme image for "{property_name}" could not be found at "{path}".',
    )


def manifest_theme_image_wrong_extension(path: str) -> Message:
    return Message(
        "MANIFEST_THEME_IMAGE_WRONG_EXT",
        "Theme image file has an unsupported file extension.",
        f'Theme image file at "{path}" has an unsupported file extension.',
    )


def manifest_theme_image_wrong_mime(path: str, mime: str | None) -> Message:
    return Message(
        "MANIFEST_THEME_IMAGE_WRONG_MIME",
        "Theme image file has an unsupported mime type.",
        f'Theme image file at "{path}" has the unsupported mime type "{mime}".',
    )


def manifest_theme_image_mime_mismatch(path: str, mime: str | None) -> Message:
    return Message(
        "MANIFEST_THEME_IMAGE_MIME_MISMATCH",
        "Theme image file mime type does not match its file extension.",
        f'Theme image file extension at "{path}" does not match its actual '
        f'mime type "{mime}".',
    )


def manifest_theme_image_corrupted(path: str) -> Message:
    return Message(
        "MANIFEST_THEME_IMAGE_CORRUPTED",
        "Corrupted theme image file.",
        f'Theme image file at "{path}" is corrupted.',
    )


def manifest_icon_missing(path: str) -> Message:
    return Message(
        "MANIFEST_ICON_NOT_FOUND",
        "An icon defined in the manifest could not be found in the package.",
        f'Icon could not be found at "{path}".',
    )


def icon_not_square(path: str) -> Message:
    return Message(
        "ICON_NOT_SQUARE",
        "Icons must be square.",
        f'Icon at "{path}" must be square.',
    )


def icon_size_invalid(path: str, expected: int, actual: int) -> Message:
    return Message(
        "ICON_SIZE_INVALID",
        "The size of the icon does not match the manifest.",
        f'Expected icon at "{path}" to be {expected} pixels wide but was {actual}.',
    )


def corrupt_icon_file(path: str) -> Message:
    return Message(
        "CORRUPT_ICON_FILE",
        "Corrupt image file",
        f'Icon at "{path}" is corrupt.',
    )


def no_messages_file_in_locales(locale_dir: str) -> Message:
    return Message(
        "NO_MESSAGES_FILE_IN_LOCALES",
        'Some localized directories are missing a "messages.json" file.',
        f'"{locale_dir}" does not contain a "messages.json" file.',
    )


def restricted_permission(permission: str, min_version: str) -> Message:
    return Message(
        "RESTRICTED_PERMISSION",
        f'The "{permission}" permission requires "strict_min_version" to be '
        f'set to "{min_version}" or above',
        f'The "{permission}" permission requires "strict_min_version" to be '
        f'set to "{min_version}" or above. Please update your manifest.json '
        "version to specify a minimum Firefox version.",
    )


def key_firefox_unsupported_by_min_version(
    key: str, min_version: str, version_added: str
) -> Message:
    return Message(
        "KEY_FIREFOX_UNSUPPORTED_BY_MIN_VERSION",
        "Manifest key not supported by the specified minimum Firefox version",
        f'"strict_min_version" requires Firefox {min_version}, which was '
        f'released before version {version_added} introduced support for "{key}".',
    )


def key_firefox_android_unsupported_by_min_version(
    key: str, min_version: str, version_added: str
) -> Message:
    return Message(
        "KEY_FIREFOX_ANDROID_UNSUPPORTED_BY_MIN_VERSION",
        "Manifest key not supported by the specified minimum Firefox for "
        "Android version",
        f'"strict_min_version" requires Firefox for Android {min_version}, '
        f"which was released before version {version_added} introduced support "
        f'for "{key}".',
    )


def permission_firefox_unsupported_by_min_version(
    key: str, min_version: str, version_added: str
) -> Message:
    return Message(
        "PERMISSION_FIREFOX_UNSUPPORTED_BY_MIN_VERSION",
        "Permission not supported by the specified minimum Firefox version",
        f'"strict_min_version" requires Firefox {min_version}, which was '
        f'released before version {version_added} introduced support for "{key}".',
    )


def permission_firefox_android_unsupported_by_min_version(
    key: str, min_version: str, version_added: str
) -> Message:
    return Message(
        "PERMISSION_FIREFOX_ANDROID_UNSUPPORTED_BY_MIN_VERSION",
        "Permission not supported by the specified minimum Firefox for "
        "Android version",
        f'"strict_min_version" requires Firefox for Android {min_version}, '
        f"which was released before version {version_added} introduced support "
        f'for "{key}".',
    )


# Templates that a deprecated-path table may point at, by name.
DEPRECATED_REPLACEMENTS: dict[str, Message] = {
    "MANIFEST_THEME_LWT_ALIAS": MANIFEST_THEME_LWT_ALIAS,
}

# Templates selected by the array-element refinement, by field name.
ARRAY_ELEMENT_TEMPLATES: dict[str, Message] = {
    "permissions": MANIFEST_PERMISSIONS,
    "optional_permissions": MANIFEST_OPTIONAL_PERMISSIONS,
    "host_permissions": MANIFEST_HOST_PERMISSIONS,
    "install_origins": MANIFEST_INSTALL_ORIGINS,
}
