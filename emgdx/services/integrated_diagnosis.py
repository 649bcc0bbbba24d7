"""
Combines the NCS patterns, the needle EMG panel and (optionally) the clinical
exam into one report-ready diagnosis.
"""

from typing import Dict, List, Optional, Set

import structlog

from emgdx.core.config import Settings, settings as default_settings
from emgdx.data.store import ReferenceDataStore
from emgdx.schemas.clinical import ClinicalEvaluation
from emgdx.schemas.diagnosis import (
    IntegratedDiagnosis,
    LesionType,
    PathologyType,
    Severity,
    SuggestedDiagnosis,
)
from emgdx.schemas.emg import (
    EMGResultSet,
    MuscleEvaluation,
    NerveConductionMeasurement,
    RecruitmentPattern,
)
from emgdx.schemas.ncs import NcsPattern, NcsPatternResult
from emgdx.schemas.pattern import PatternCategory, PatternMatchResult
from emgdx.schemas.reference import StudyType
from emgdx.services.criteria_evaluator import FULL_STRENGTH_MRC, DiagnosticCriteriaEvaluator
from emgdx.services.distribution import (
    ABNORMAL_MUP_AMPLITUDE_UV,
    ABNORMAL_MUP_DURATION_MS,
    classify_chronicity,
    classify_distribution,
)
from emgdx.services.ncs_pattern_detector import VELOCITY_MARKED_FACTOR, NcsPatternDetector
from emgdx.services.parameter_classifier import is_nerve_abnormal
from emgdx.services.pattern_scorer import PatternScorer, describe_pattern_match

logger = structlog.get_logger()

# Small, short MUPs
MYOPATHIC_MUP_DURATION_MS = 8.0
MYOPATHIC_MUP_AMPLITUDE_UV = 2000.0

# Additive severity score, thresholds are exclusive
SEVERE_SCORE = 7
MODERATE_SCORE = 4
MOTOR_AMPLITUDE_SEVERE_FACTOR = 0.25
SENSORY_AMPLITUDE_SEVERE_FACTOR = 0.5

NORMAL_STUDY = "Normal electrophysiological study."

_LESION_RECOMMENDATIONS = {
    LesionType.DEMYELINATING: [
        "Consider autoimmune work-up",
        "Evaluate need for immunomodulatory treatment",
    ],
    LesionType.AXONAL: [
        "Complete metabolic screening",
        "Evaluate toxic exposures",
    ],
    LesionType.MIXED: [
        "Complete etiological work-up",
        "Consider nerve biopsy if etiology remains unclear",
    ],
}
_DEFAULT_RECOMMENDATIONS = [
    "Clinical follow-up",
    "Complementary studies according to clinical course",
]


class IntegratedDiagnosisBuilder:

    def __init__(self, store: ReferenceDataStore, config: Optional[Settings] = None):
        self.store = store
        self.config = config or default_settings

    def build(
        self,
        result_set: EMGResultSet,
        clinical: Optional[ClinicalEvaluation] = None,
    ) -> IntegratedDiagnosis:
        ncs_patterns = NcsPatternDetector.detect_panel(self.store, result_set.ncs_results)
        distribution = classify_distribution(result_set)
        lesion_type = self.lesion_type(ncs_patterns)
        severity = self.severity(result_set)
        suggestions = self.suggest(result_set)

        diagnosis = IntegratedDiagnosis(
            lesion_type=lesion_type,
            pathology_type=self.pathology_type(result_set),
            severity=severity,
            chronicity=classify_chronicity(result_set),
            distribution=distribution.labels,
            abnormal_muscles=distribution.abnormal_muscles,
            ncs_patterns=ncs_patterns,
            suggested_diagnoses=suggestions,
        )

        if clinical is not None:
            diagnosis.criteria = DiagnosticCriteriaEvaluator(self.store).evaluate(clinical)
            diagnosis.clinical_correlation = self.clinical_correlation(
                clinical, distribution.abnormal_muscles
            )

        diagnosis.final_diagnosis = self.final_diagnosis(result_set, diagnosis)
        diagnosis.recommendations = self.recommendations(lesion_type, severity)

        logger.info(
            "integrated_diagnosis_built",
            lesion_type=lesion_type.value if lesion_type else None,
            severity=severity.value,
            suggestions=len(suggestions),
        )
        return diagnosis

    @staticmethod
    def lesion_type(ncs_patterns: Dict[str, NcsPatternResult]) -> Optional[LesionType]:
        found = {r.pattern for r in ncs_patterns.values() if r.pattern != NcsPattern.NONE}
        if not found:
            return None
        if NcsPattern.MIXED in found or {NcsPattern.AXONAL, NcsPattern.DEMYELINATING} <= found:
            return LesionType.MIXED
        return LesionType(found.pop().value)

    @staticmethod
    def pathology_type(result_set: EMGResultSet) -> Optional[PathologyType]:
        # Fibrillations occur in both, so only MUP morphology and recruitment decide
        neuropathic = any(_neuropathic_signs(m) for m in result_set.evaluations())
        myopathic = any(_myopathic_signs(m) for m in result_set.evaluations())
        if neuropathic and myopathic:
            return PathologyType.MIXED
        if neuropathic:
            return PathologyType.NEUROPATHIC
        if myopathic:
            return PathologyType.MYOPATHIC
        return None

    def severity(self, result_set: EMGResultSet) -> Severity:
        score = sum(self._ncs_severity_points(nerve_id, study)
                    for nerve_id, study in (result_set.ncs_results or {}).items())
        score += sum(_emg_severity_points(m) for m in result_set.evaluations())

        if score > SEVERE_SCORE:
            return Severity.SEVERE
        if score > MODERATE_SCORE:
            return Severity.MODERATE
        return Severity.MILD

    def _ncs_severity_points(self, nerve_id: str, study: NerveConductionMeasurement) -> int:
        reference = self.store.nerves.get(nerve_id)
        if reference is None or study.amplitude is None:
            return 0
        amp_min = reference.amplitude.min

        if reference.study_type == StudyType.MOTOR:
            if study.amplitude < amp_min * MOTOR_AMPLITUDE_SEVERE_FACTOR:
                return 3
            if study.amplitude < amp_min:
                return 2
            if study.velocity is not None and study.velocity < reference.velocity.min * VELOCITY_MARKED_FACTOR:
                return 2
            return 0

        if study.amplitude < amp_min * SENSORY_AMPLITUDE_SEVERE_FACTOR:
            return 2
        if study.amplitude < amp_min:
            return 1
        return 0

    def suggest(self, result_set: EMGResultSet) -> List[SuggestedDiagnosis]:
        ranked = PatternScorer.score_patterns(result_set, self.store.patterns, self.store)
        suggestions = []
        for match in ranked:
            if match.score < self.config.SUGGESTION_MIN_CONFIDENCE:
                break
            pattern = self.store.pattern(match.pattern_id)
            suggestions.append(SuggestedDiagnosis(
                pattern_id=pattern.id,
                name=pattern.name,
                confidence=match.score,
                matched_criteria=match.matched_criteria,
            ))
            if len(suggestions) >= self.config.SUGGESTION_LIMIT:
                break
        return suggestions

    def final_diagnosis(self, result_set: EMGResultSet, diagnosis: IntegratedDiagnosis) -> str:
        abnormal_ncs = any(
            is_nerve_abnormal(self.store.nerves[nerve_id], study)
            for nerve_id, study in (result_set.ncs_results or {}).items()
            if nerve_id in self.store.nerves
        )
        if not diagnosis.abnormal_muscles and diagnosis.lesion_type is None and not abnormal_ncs:
            return NORMAL_STUDY

        for suggestion in diagnosis.suggested_diagnoses:
            pattern = self.store.pattern(suggestion.pattern_id)
            if pattern.category == PatternCategory.NORMAL:
                continue
            match = PatternMatchResult(
                pattern_id=pattern.id,
                score=suggestion.confidence,
                matched_criteria=suggestion.matched_criteria,
            )
            return describe_pattern_match(pattern, match, diagnosis.severity.value)

        parts = []
        if diagnosis.lesion_type is not None:
            parts.append(f"{diagnosis.lesion_type.value} nerve conduction pattern")
        elif abnormal_ncs:
            parts.append("abnormal nerve conduction values")
        if diagnosis.pathology_type is not None:
            parts.append(f"{diagnosis.pathology_type.value} muscle involvement")
        elif diagnosis.abnormal_muscles:
            parts.append("abnormal needle findings")
        return f"Abnormal electrophysiological study: {' with '.join(parts)}."

    @staticmethod
    def recommendations(lesion_type: Optional[LesionType], severity: Severity) -> List[str]:
        recommendations = []
        if severity == Severity.SEVERE:
            recommendations.append("Urgent neurological evaluation recommended")
        if lesion_type is not None:
            recommendations.extend(_LESION_RECOMMENDATIONS[lesion_type])
        if severity != Severity.MILD:
            recommendations.append("Periodic follow-up to monitor progression")
        return recommendations or list(_DEFAULT_RECOMMENDATIONS)

    @staticmethod
    def clinical_correlation(clinical: ClinicalEvaluation, abnormal_muscles: List[str]) -> str:
        weak: Set[str] = {
            m.muscle for m in clinical.affected_muscles if m.mrc_grade < FULL_STRENGTH_MRC
        }
        if not weak:
            if abnormal_muscles:
                return "Needle abnormalities without clinical weakness."
            return "No clinical weakness reported."
        confirmed = weak.intersection(abnormal_muscles)
        return (
            f"Clinical weakness in {len(weak)} muscle(s); "
            f"needle EMG abnormal in {len(confirmed)} of them."
        )


def _neuropathic_signs(muscle: MuscleEvaluation) -> bool:
    mup = muscle.motor_unit_potentials
    return (
        mup.duration > ABNORMAL_MUP_DURATION_MS
        or mup.amplitude > ABNORMAL_MUP_AMPLITUDE_UV
        or muscle.recruitment.pattern == RecruitmentPattern.REDUCED
    )


def _myopathic_signs(muscle: MuscleEvaluation) -> bool:
    mup = muscle.motor_unit_potentials
    return (
        (mup.duration < MYOPATHIC_MUP_DURATION_MS and mup.amplitude < MYOPATHIC_MUP_AMPLITUDE_UV)
        or muscle.recruitment.pattern == RecruitmentPattern.EARLY
    )


def _emg_severity_points(muscle: MuscleEvaluation) -> int:
    if muscle.spontaneous_activity.fibrillations.rank > 2:
        return 2
    if muscle.recruitment.pattern == RecruitmentPattern.ABSENT:
        return 3
    if muscle.recruitment.pattern == RecruitmentPattern.REDUCED:
        return 1
    return 0
