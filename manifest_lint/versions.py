"""Mozilla version string helpers.

Firefox compares versions part by part, each dot-separated part being parsed
as <number-a><string-b><number-c><string-d> (e.g. "1b2pre" or "0a1"). A
missing string sorts after any present string, so "1.0" > "1.0b1".
"""

import math
import re
from functools import cmp_to_key

from .security.policy import TOOLKIT_VERSION_MAX_LENGTH, TOOLKIT_VERSION_RE, VERSION_RE

_PART_RE = re.compile(r"^(-?\d*)([^-\d]*)(-?\d*)(.*)$")

VersionPart = tuple[float, str, float, str]


def _parse_part(part: str) -> VersionPart:
    if part == "*":
        return (math.inf, "", 0, "")

    match = _PART_RE.match(part)
    # The pattern accepts any string, every group may be empty.
    num_a, str_b, num_c, extra_d = match.groups() if match else ("", part, "", "")

    a = int(num_a) if num_a not in ("", "-") else 0
    c = int(num_c) if num_c not in ("", "-") else 0

    if str_b.startswith("+"):
        # "1+" is "2pre"
        a += 1
        str_b = "pre"

    return (a, str_b, c, extra_d)


def _compare_strings(left: str, right: str) -> int:
    # An absent string is greater than a present one.
    if left == right:
        return 0
    if not left:
        return 1
    if not right:
        return -1
    return -1 if left < right else 1


def _compare_parts(left: VersionPart, right: VersionPart) -> int:
    for index in range(4):
        a, b = left[index], right[index]
        if index in (1, 3):
            result = _compare_strings(a, b)
        else:
            result = (a > b) - (a < b)
        if result:
            return result
    return 0


def moz_compare(left: str, right: str) -> int:
    """Compare two Mozilla version strings; returns -1, 0 or 1."""
    left_parts = str(left).split(".")
    right_parts = str(right).split(".")
    for index in range(max(len(left_parts), len(right_parts))):
        a = _parse_part(left_parts[index] if index < len(left_parts) else "0")
        b = _parse_part(right_parts[index] if index < len(right_parts) else "0")
        result = _compare_parts(a, b)
        if result:
            return result
    return 0


def moz_sort_key(version: str):
    return cmp_to_key(moz_compare)(version)


def is_valid_version_string(version: object) -> bool:
    """True for 1-4 dot-separated integers without leading zeros."""
    return isinstance(version, str) and VERSION_RE.match(version) is not None


def is_toolkit_version_string(version: object) -> bool:
    """True for legacy toolkit versions such as "1.0b2" or "2.0a1pre"."""
    return (
        isinstance(version, str)
        and len(version) <= TOOLKIT_VERSION_MAX_LENGTH
        and TOOLKIT_VERSION_RE.match(version) is not None
    )


_MAJOR_RE = re.compile(r"^\s*≤?(\d+)")


def major_version(version: object) -> int | None:
    """Leading integer of a version string ("57.0a1" -> 57), if any."""
    if not isinstance(version, str):
        return None
    match = _MAJOR_RE.match(version)
    return int(match.group(1)) if match else None


def normalize_compat_version(version_added: object) -> str | None:
    """Return the comparable part of a compat `version_added` value.

    Booleans, null and "preview" mean there is no version to compare
    against. Ranged values such as "≤58" compare as their bound.
    """
    if not isinstance(version_added, str):
        return None
    value = version_added.strip().lstrip("≤")
    if not value or not value[0].isdigit():
        return None
    return value


def is_added_after(version_added: object, min_version: str | None) -> bool:
    """True when a feature first shipped in a major release above `min_version`.

    Only major versions are compared, so both "57.0" and toolkit style
    "57.0a1" minimums read as 57.
    """
    added = major_version(normalize_compat_version(version_added))
    minimum = major_version(min_version)
    return added is not None and minimum is not None and added > minimum
