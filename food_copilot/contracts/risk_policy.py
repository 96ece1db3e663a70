"""
Risk Policy Contract v1.0
Immutable rule records used by the risk synthesis engine and the scorer.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Tuple


@dataclass(frozen=True)
class IssueRule:
    """
    One detection rule: a predicate over a single validated directive that
    yields zero or more issue tags.
    """
    rule_id: str
    description: str
    detect: Callable[[Any], List[str]]


@dataclass(frozen=True)
class RemediationRule:
    """
    Maps an issue category (matched by regex against issue tags) to
    remediation ideas, each a (title, reason) pair.
    """
    rule_id: str
    category: str
    issue_pattern: str
    suggestions: Tuple[Tuple[str, str], ...]

    def matches(self, issue: str) -> bool:
        return re.search(self.issue_pattern, issue, flags=re.IGNORECASE) is not None


@dataclass(frozen=True)
class RemediationPolicy:
    """Versioned remediation lookup table plus the generic fallback swaps."""
    policy_id: str
    version: str
    max_suggestions: int
    rule_set: Tuple[RemediationRule, ...]
    fallback: Tuple[Tuple[str, str], ...]

    def validate(self):
        if not 1 <= self.max_suggestions <= 3:
            raise RuntimeError(f"Policy {self.policy_id}: max_suggestions must be within 1-3")
        if not self.fallback:
            raise RuntimeError(f"Policy {self.policy_id} has no fallback suggestions.")
        for rule in self.rule_set:
            if not rule.suggestions:
                raise RuntimeError(f"Policy {self.policy_id}: rule {rule.rule_id} has no suggestions.")

    def get_rules(self) -> List[RemediationRule]:
        return list(self.rule_set)
