"""
Panel-level descriptors derived from which muscles are abnormal.

Both classifiers feed the pattern scorer (the `distribution` and
`chronicity` criteria) and the integrated diagnosis.
"""

from typing import List, Optional

from emgdx.schemas.diagnosis import Chronicity, Distribution, DistributionSummary
from emgdx.schemas.emg import EMGResultSet, MuscleEvaluation, RecruitmentPattern

# Per-muscle abnormality limits
ABNORMAL_MUP_DURATION_MS = 10.0
ABNORMAL_MUP_AMPLITUDE_UV = 5000.0

# Large, long MUPs mark reinnervation
CHRONIC_MUP_DURATION_MS = 12.0
CHRONIC_MUP_AMPLITUDE_UV = 6000.0

# Abnormal fraction bounds for diffuse / generalized involvement
DIFFUSE_LOWER_FRACTION = 0.3
GENERALIZED_FRACTION = 0.7

PROXIMAL_MUSCLES = frozenset({
    "deltoid", "biceps_brachii", "triceps_brachii",
    "iliopsoas", "quadriceps", "hamstrings",
})
DISTAL_MUSCLES = frozenset({
    "abductor_pollicis_brevis", "first_dorsal_interosseous",
    "abductor_hallucis", "extensor_digitorum_brevis",
})


# "progressive" is computed by the same predicate as "acute on chronic"
CHRONICITY_ALIASES = {
    "acute": Chronicity.ACUTE,
    "chronic": Chronicity.CHRONIC,
    "acute on chronic": Chronicity.ACUTE_ON_CHRONIC,
    "progressive": Chronicity.ACUTE_ON_CHRONIC,
}

# Primary label precedence when several extent labels hold at once
_EXTENT_ORDER = (
    Distribution.FOCAL,
    Distribution.MULTIFOCAL,
    Distribution.DIFFUSE,
    Distribution.GENERALIZED,
)


def is_muscle_abnormal(muscle: MuscleEvaluation) -> bool:
    spontaneous = muscle.spontaneous_activity
    mup = muscle.motor_unit_potentials
    return (
        spontaneous.fibrillations.is_present
        or spontaneous.positive_waves.is_present
        or mup.duration > ABNORMAL_MUP_DURATION_MS
        or mup.amplitude > ABNORMAL_MUP_AMPLITUDE_UV
        or muscle.recruitment.pattern == RecruitmentPattern.REDUCED
    )


def abnormal_muscle_ids(result_set: EMGResultSet) -> List[str]:
    return [m.muscle for m in result_set.evaluations() if is_muscle_abnormal(m)]


def matches_distribution(result_set: EMGResultSet, label: str) -> bool:
    """True when the panel satisfies one distribution label. Unknown labels never match."""
    abnormal = abnormal_muscle_ids(result_set)
    total = len(result_set.muscles)
    fraction = len(abnormal) / total if total else 0.0

    if label == Distribution.FOCAL.value:
        return len(abnormal) == 1
    if label == Distribution.MULTIFOCAL.value:
        return 1 < len(abnormal) <= 3
    if label == Distribution.DIFFUSE.value:
        return DIFFUSE_LOWER_FRACTION < fraction < GENERALIZED_FRACTION
    if label == Distribution.GENERALIZED.value:
        return fraction >= GENERALIZED_FRACTION
    if label == Distribution.PROXIMAL.value:
        return bool(abnormal) and all(m in PROXIMAL_MUSCLES for m in abnormal)
    if label == Distribution.DISTAL.value:
        return bool(abnormal) and all(m in DISTAL_MUSCLES for m in abnormal)
    return False


def classify_distribution(result_set: EMGResultSet) -> DistributionSummary:
    abnormal = abnormal_muscle_ids(result_set)
    total = len(result_set.muscles)
    labels = [d for d in Distribution if matches_distribution(result_set, d.value)]
    primary = next((d for d in _EXTENT_ORDER if d in labels), None)
    return DistributionSummary(
        abnormal_muscles=abnormal,
        total_muscles=total,
        abnormal_fraction=len(abnormal) / total if total else 0.0,
        labels=labels,
        primary=primary,
    )


def has_fibrillations(result_set: EMGResultSet) -> bool:
    return any(m.spontaneous_activity.fibrillations.is_present for m in result_set.evaluations())


def has_chronic_changes(result_set: EMGResultSet) -> bool:
    return any(
        m.motor_unit_potentials.duration > CHRONIC_MUP_DURATION_MS
        and m.motor_unit_potentials.amplitude > CHRONIC_MUP_AMPLITUDE_UV
        for m in result_set.evaluations()
    )


def classify_chronicity(result_set: EMGResultSet) -> Optional[Chronicity]:
    """None when the panel shows neither denervation nor reinnervation."""
    fibrillations = has_fibrillations(result_set)
    chronic = has_chronic_changes(result_set)
    if fibrillations and chronic:
        return Chronicity.ACUTE_ON_CHRONIC
    if fibrillations:
        return Chronicity.ACUTE
    if chronic:
        return Chronicity.CHRONIC
    return None


def matches_chronicity(result_set: EMGResultSet, label: str) -> bool:
    expected = CHRONICITY_ALIASES.get(label)
    if expected is None:
        return False
    return classify_chronicity(result_set) == expected
