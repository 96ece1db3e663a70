"""
Directive Pipeline

Normalizer → Validator → Risk Synthesis → Ordering, with the heuristic
scorer run off the finalized sequence. Deterministic, synchronous and free
of I/O; one run per completed generator turn.

run() never raises: a stage that fails unexpectedly is logged and
collapses to an empty sequence, so nothing unvalidated reaches the renderer.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from food_copilot.contracts.directive_schema import DirectiveSequence, sequence_to_dicts
from food_copilot.directive_normalizer import DirectiveNormalizer, normalize_sequence
from food_copilot.nutrition_score import ScoreResult, compute_nutrition_score
from food_copilot.ordering_engine import order_sequence
from food_copilot.risk_engine import RiskSynthesisEngine
from food_copilot.schema_validator import validate_sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    sequence: DirectiveSequence
    issues: Tuple[str, ...] = ()
    score: Optional[ScoreResult] = None
    dropped: int = 0

    def to_response(self) -> Dict[str, Any]:
        """Wire shape handed to the renderer."""
        return {
            "uiComponents": sequence_to_dicts(self.sequence),
            "score": self.score.to_dict() if self.score else None,
        }


class DirectivePipeline:
    def __init__(
        self,
        normalizer: Optional[DirectiveNormalizer] = None,
        risk_engine: Optional[RiskSynthesisEngine] = None,
    ):
        self.normalizer = normalizer or DirectiveNormalizer()
        self.risk_engine = risk_engine or RiskSynthesisEngine()

    def _stage(self, name: str, fn: Callable[[], Any], fallback: Any) -> Any:
        try:
            return fn()
        except Exception:
            logger.exception(f"[PIPELINE] Stage '{name}' failed; failing closed")
            return fallback

    def run(self, raw: Any) -> PipelineResult:
        candidates = self._stage("normalize", lambda: normalize_sequence(raw, self.normalizer), [])

        validated, dropped = self._stage(
            "validate", lambda: validate_sequence(candidates), ((), len(candidates))
        )

        synthesis = self._stage("risk_synthesis", lambda: self.risk_engine.apply(validated), None)
        if synthesis is None:
            return PipelineResult(sequence=(), dropped=len(candidates))

        ordered = self._stage("ordering", lambda: order_sequence(synthesis.sequence), ())
        score = self._stage("score", lambda: compute_nutrition_score(ordered), None)

        logger.info(
            f"[PIPELINE] {len(candidates)} candidates → {len(ordered)} directives "
            f"(dropped={dropped}, issues={len(synthesis.issues)})"
        )
        return PipelineResult(
            sequence=ordered,
            issues=synthesis.issues,
            score=score,
            dropped=dropped,
        )


_default_pipeline: Optional[DirectivePipeline] = None


def run_pipeline(raw: Any) -> PipelineResult:
    """Module-level convenience over a shared stateless pipeline."""
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = DirectivePipeline()
    return _default_pipeline.run(raw)
