from typing import Any, Iterable, List, Optional

import structlog

from emgdx.data.muscles import DEFAULT_MUP_RANGES
from emgdx.data.store import PatternLibrary, ReferenceDataStore
from emgdx.schemas.emg import EMGResultSet, MuscleEvaluation
from emgdx.schemas.pattern import (
    CategoricalCondition,
    DiagnosticPattern,
    KeyFinding,
    ParameterCategory,
    PatternMatchResult,
    WithinNormalCondition,
)
from emgdx.schemas.reference import ReferenceRange
from emgdx.services.conditions import compare_value
from emgdx.services.distribution import matches_chronicity, matches_distribution

logger = structlog.get_logger()

# A per-muscle criterion holds when at least this share of the evaluated
# muscles satisfies it.
MUSCLE_MATCH_FRACTION = 0.3

_DEFAULT_MUP_RANGES = {field: ReferenceRange(**bounds) for field, bounds in DEFAULT_MUP_RANGES.items()}

_PANEL_CATEGORIES = frozenset({
    ParameterCategory.SPONTANEOUS,
    ParameterCategory.INSERTIONAL,
    ParameterCategory.MUP,
    ParameterCategory.RECRUITMENT,
    ParameterCategory.INTERFERENCE,
})


class PatternScorer:

    @staticmethod
    def score_patterns(
        result_set: EMGResultSet,
        library: PatternLibrary,
        references: Optional[ReferenceDataStore] = None,
    ) -> List[PatternMatchResult]:
        """
        Scores every pattern of the library against one EMG/NCS panel.
        Returns results by descending score; equal scores keep library order.
        """
        results = [
            PatternScorer.score_pattern(pattern, result_set, references)
            for pattern in library
        ]
        ranked = sorted(results, key=lambda r: r.score, reverse=True)

        if ranked:
            logger.info(
                "patterns_scored",
                patterns=len(ranked),
                muscles=len(result_set.muscles),
                top_pattern=ranked[0].pattern_id,
                top_score=round(ranked[0].score, 3),
            )
        return ranked

    @staticmethod
    def score_pattern(
        pattern: DiagnosticPattern,
        result_set: EMGResultSet,
        references: Optional[ReferenceDataStore] = None,
    ) -> PatternMatchResult:
        total_weight = pattern.total_weight
        if total_weight == 0:
            return PatternMatchResult(pattern_id=pattern.id, score=0.0)

        matched_weight = 0
        matched: List[str] = []
        for finding in pattern.key_findings:
            if PatternScorer.finding_is_present(finding, result_set, references):
                matched_weight += finding.weight
                matched.append(finding.parameter.raw)

        return PatternMatchResult(
            pattern_id=pattern.id,
            score=matched_weight / total_weight,
            matched_criteria=matched,
        )

    @staticmethod
    def finding_is_present(
        finding: KeyFinding,
        result_set: EMGResultSet,
        references: Optional[ReferenceDataStore] = None,
    ) -> bool:
        path = finding.parameter
        condition = finding.condition

        if path.category in _PANEL_CATEGORIES:
            return _panel_fraction_matches(finding, result_set, references)

        if path.category == ParameterCategory.NCS:
            if not result_set.ncs_results:
                return False
            study = result_set.ncs_results.get(path.target)
            if study is None:
                return False
            reference = references.ncs_range(path.target, path.field) if references else None
            return compare_value(study.value_of(path.field), condition, reference)

        if path.category == ParameterCategory.DISTRIBUTION:
            return isinstance(condition, CategoricalCondition) and matches_distribution(
                result_set, condition.token
            )

        if path.category == ParameterCategory.CHRONICITY:
            return isinstance(condition, CategoricalCondition) and matches_chronicity(
                result_set, condition.token
            )

        return False


def _muscle_value(muscle: MuscleEvaluation, category: ParameterCategory, field: str) -> Any:
    if category == ParameterCategory.SPONTANEOUS:
        return getattr(muscle.spontaneous_activity, field)
    if category == ParameterCategory.MUP:
        return getattr(muscle.motor_unit_potentials, field)
    if category == ParameterCategory.RECRUITMENT:
        return muscle.recruitment.pattern
    if category == ParameterCategory.INSERTIONAL:
        return muscle.insertional_activity
    if category == ParameterCategory.INTERFERENCE:
        return muscle.interference.pattern if muscle.interference else None
    return None


def _mup_reference(
    muscle_id: str,
    field: str,
    references: Optional[ReferenceDataStore],
) -> Optional[ReferenceRange]:
    if references is not None:
        return references.mup_range(muscle_id, field)
    return _DEFAULT_MUP_RANGES.get(field)


def _select_muscles(result_set: EMGResultSet, target: Optional[str]) -> List[MuscleEvaluation]:
    evaluations: Iterable[MuscleEvaluation] = result_set.evaluations()
    if target is None:
        return list(evaluations)
    return [m for m in evaluations if m.muscle == target]


def _panel_fraction_matches(
    finding: KeyFinding,
    result_set: EMGResultSet,
    references: Optional[ReferenceDataStore],
) -> bool:
    path = finding.parameter
    muscles = _select_muscles(result_set, path.target)
    if not muscles:
        return False

    needs_range = isinstance(finding.condition, WithinNormalCondition)
    hits = 0
    for muscle in muscles:
        reference = _mup_reference(muscle.muscle, path.field, references) if needs_range else None
        if compare_value(_muscle_value(muscle, path.category, path.field), finding.condition, reference):
            hits += 1

    return hits / len(muscles) >= MUSCLE_MATCH_FRACTION


def describe_pattern_match(
    pattern: DiagnosticPattern,
    match: PatternMatchResult,
    severity: Optional[str] = None,
) -> str:
    """One-sentence, report-ready explanation of a pattern match."""
    strength = (
        "highly consistent with"
        if len(match.matched_criteria) > len(pattern.key_findings) / 2
        else "suggestive of"
    )
    sentence = f"The electromyographic findings are {strength} {pattern.name}, {pattern.description}"
    if severity:
        sentence += f", of {severity} severity"
    return sentence + "."
