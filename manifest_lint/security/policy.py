"""Static policy tables for manifest linting.

These are the defaults a LinterConfig is built from. Nothing reads them as
globals at lint time; the engine only sees the injected config.
"""

import re

# CSP directives evaluated for script execution, in precedence order.
# default-src must come before script-src so the latter can override it.
CSP_CANDIDATE_DIRECTIVES = (
    "default-src",
    "script-src",
    "script-src-elem",
    "script-src-attr",
    "worker-src",
)

# Source expressions that never allow remote or inline code.
CSP_KEYWORD_RE = re.compile(
    r"^'(?:self|none|strict-dynamic|nonce-.+|sha(?:256|384|512)-.+)'$"
)

CSP_UNSAFE_EVAL = "'unsafe-eval'"

RESTRICTED_HOMEPAGE_URLS = (
    "addons-dev.allizom.org",
    "addons.mozilla.org",
)

# permission -> minimum strict_min_version required to use it
RESTRICTED_PERMISSIONS = {
    "proxy": "91.1.0",
}

PRIVILEGED_PERMISSIONS = frozenset({
    "activityLog",
    "mozillaAddons",
    "networkStatus",
    "normandyAddonStudy",
    "telemetry",
    "urlbar",
})

# instance path -> name of the replacement message template
DEPRECATED_MANIFEST_PROPERTIES = {
    "/theme/images/headerURL": "MANIFEST_THEME_LWT_ALIAS",
    "/theme/colors/accentcolor": "MANIFEST_THEME_LWT_ALIAS",
    "/theme/colors/textcolor": "MANIFEST_THEME_LWT_ALIAS",
}

IMAGE_FILE_EXTENSIONS = frozenset({"jpg", "jpeg", "webp", "gif", "png", "svg"})

# Static themes accept raster images only, and no WebP.
STATIC_THEME_IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "gif", "png"})
STATIC_THEME_IMAGE_MIMES = frozenset({"image/jpeg", "image/png", "image/gif"})

FILE_EXTENSIONS_TO_MIME = {
    "svg": "image/svg+xml",
    "gif": "image/gif",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}

SVG_MIME = "image/svg+xml"

# Action keys whose default_icon is collected as an icon.
ICON_ACTION_KEYS = ("browser_action", "page_action", "sidebar_action", "action")

# Actions that cannot be combined with `hidden`.
HIDDEN_EXCLUSIVE_KEYS = ("action", "browser_action", "page_action")

LOCALES_DIRECTORY = "_locales"
MESSAGES_JSON = "messages.json"

# Manifest array fields whose elements are reported individually.
PERMS_DATAPATH_RE = re.compile(r"^/(permissions|optional_permissions|host_permissions)/(\d+)")
INSTALL_ORIGINS_DATAPATH_RE = re.compile(r"^/(install_origins)/(\d+)")

# Valid for AMO and Firefox: 1-4 integers, up to 9 digits, no leading zeros.
VERSION_RE = re.compile(r"^(?:0|[1-9]\d{0,8})(?:\.(?:0|[1-9]\d{0,8})){0,3}$")

# Legacy toolkit format, e.g. "1.0b2", "2.1a1pre", "3.0.1+".
TOOLKIT_VERSION_PART = r"(?:\d+(?:[a-z]+\d*[a-z]*|\+)?)"
TOOLKIT_VERSION_RE = re.compile(
    rf"^{TOOLKIT_VERSION_PART}(?:\.{TOOLKIT_VERSION_PART}){{0,3}}$", re.IGNORECASE
)
TOOLKIT_VERSION_MAX_LENGTH = 100
