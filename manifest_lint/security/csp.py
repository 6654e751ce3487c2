"""Content security policy posture check.

Only the subset needed to tell whether a policy allows remote or eval'd
script execution:
1. Parse the policy into directive -> tokens
2. Walk the script-related directives in precedence order
3. Report unsafe-eval and generally insecure policies
"""

from dataclasses import dataclass

from .. import messages
from ..models.diagnostic import DiagnosticsCollector
from .policy import CSP_CANDIDATE_DIRECTIVES, CSP_KEYWORD_RE, CSP_UNSAFE_EVAL

CSPDirectiveSet = dict[str, tuple[str, ...]]


def parse_csp(policy: str) -> CSPDirectiveSet:
    """Split a policy into lowercased directive names and their tokens.

    The first occurrence of a directive wins, as in browsers.
    """
    directives: CSPDirectiveSet = {}
    if not policy:
        return directives
    for entry in policy.lower().split(";"):
        tokens = entry.split()
        if not tokens:
            continue
        name, values = tokens[0], tuple(tokens[1:])
        directives.setdefault(name, values)
    return directives


def is_secure_csp_value(value: str) -> bool:
    return CSP_KEYWORD_RE.match(value) is not None


@dataclass
class CspResult:
    """Result of evaluating one policy string."""

    insecure: bool
    unsafe_eval: bool


class CSPAnalyzer:
    """Evaluates the security posture of content security policies."""

    def check(self, policy: str) -> CspResult:
        """Evaluate one policy string."""
        directives = parse_csp(policy)

        # A missing default-src is very permissive.
        insecure_src_directive = "default-src" not in directives
        warn_insecure = insecure_src_directive
        warn_eval = False

        for candidate in CSP_CANDIDATE_DIRECTIVES:
            if candidate not in directives:
                continue
            values = directives[candidate]

            # A strict script-src makes up for a missing or broad default-src.
            # script-src-elem/-attr only cover part of it and cannot do this.
            if (
                insecure_src_directive
                and candidate == "script-src"
                and all(is_secure_csp_value(v) for v in values)
            ):
                insecure_src_directive = False
                warn_insecure = False
                continue

            for value in values:
                if value == CSP_UNSAFE_EVAL:
                    warn_eval = True
                    continue
                if not is_secure_csp_value(value):
                    warn_insecure = True
                    if candidate == "default-src":
                        insecure_src_directive = True

        return CspResult(insecure=warn_insecure, unsafe_eval=warn_eval)

    def report(
        self, policy: str, property_name: str, collector: DiagnosticsCollector
    ) -> CspResult:
        """Evaluate a policy and add its warnings to the collector."""
        result = self.check(policy)
        if result.unsafe_eval:
            collector.add_warning(messages.manifest_csp_unsafe_eval(property_name))
        if result.insecure:
            collector.add_warning(messages.manifest_csp(property_name))
        return result
