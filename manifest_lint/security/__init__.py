"""Security module for manifest linting.

Provides the content security policy posture check and the static policy
tables the linter is configured from.
"""

from .csp import CSPAnalyzer, CspResult, parse_csp
from .policy import (
    CSP_CANDIDATE_DIRECTIVES,
    CSP_KEYWORD_RE,
    RESTRICTED_HOMEPAGE_URLS,
    RESTRICTED_PERMISSIONS,
)

__all__ = [
    "CSPAnalyzer",
    "CspResult",
    "parse_csp",
    "CSP_CANDIDATE_DIRECTIVES",
    "CSP_KEYWORD_RE",
    "RESTRICTED_HOMEPAGE_URLS",
    "RESTRICTED_PERMISSIONS",
]
