"""
Ordering Engine

Fixed precedence over a finalized directive set. Pure rearrangement:
nothing is added or removed, and directives of equal precedence keep
their relative order.

- risk-warning first
- alternative-suggestions right after the warning (when one is present)
- the first science-explainer anchors a block followed by
  evidence-sources, then long-term-impact
- everything else keeps its post-synthesis order
"""

import logging
from typing import List

from food_copilot.contracts.directive_schema import Directive, DirectiveKind, DirectiveSequence

logger = logging.getLogger(__name__)

# CANONICAL EXPLAINER BLOCK ORDER
EXPLAINER_BLOCK = [
    DirectiveKind.SCIENCE_EXPLAINER,
    DirectiveKind.EVIDENCE_SOURCES,
    DirectiveKind.LONG_TERM_IMPACT,
]


def order_sequence(sequence: DirectiveSequence) -> DirectiveSequence:
    sequence = tuple(sequence)

    warnings = [d for d in sequence if d.kind == DirectiveKind.RISK_WARNING]
    remediation = [d for d in sequence if d.kind == DirectiveKind.ALTERNATIVE_SUGGESTIONS] if warnings else []

    anchor = next(
        (i for i, d in enumerate(sequence) if d.kind == DirectiveKind.SCIENCE_EXPLAINER),
        None,
    )
    evidence: List[Directive] = []
    impacts: List[Directive] = []
    if anchor is not None:
        evidence = [d for d in sequence if d.kind == DirectiveKind.EVIDENCE_SOURCES]
        impacts = [d for d in sequence if d.kind == DirectiveKind.LONG_TERM_IMPACT]

    ordered: List[Directive] = warnings + remediation
    for i, d in enumerate(sequence):
        if d.kind == DirectiveKind.RISK_WARNING:
            continue
        if warnings and d.kind == DirectiveKind.ALTERNATIVE_SUGGESTIONS:
            continue
        if anchor is not None and d.kind in (DirectiveKind.EVIDENCE_SOURCES, DirectiveKind.LONG_TERM_IMPACT):
            continue
        ordered.append(d)
        if i == anchor:
            ordered.extend(evidence)
            ordered.extend(impacts)

    if len(ordered) != len(sequence):
        # Unreachable by construction; never hand the renderer a different set
        logger.error(f"[ORDERING] Size mismatch {len(ordered)} != {len(sequence)}; keeping input order")
        return sequence

    return tuple(ordered)
