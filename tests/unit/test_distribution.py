import pytest
from emgdx.schemas.diagnosis import Chronicity, Distribution
from emgdx.services.distribution import (
    classify_chronicity,
    classify_distribution,
    is_muscle_abnormal,
    matches_chronicity,
    matches_distribution,
)
from emgdx.schemas.emg import MuscleEvaluation


@pytest.fixture
def chronic_denervated():
    return dict(fib="present", duration=14, amplitude=7000)


def test_muscle_abnormality_criteria(muscle):
    def evaluate(**kwargs):
        return is_muscle_abnormal(MuscleEvaluation.model_validate(muscle(**kwargs)))

    assert not evaluate()
    assert not evaluate(duration=10, amplitude=5000)
    assert evaluate(fib="+1")
    assert evaluate(pw="present")
    assert evaluate(duration=10.5)
    assert evaluate(amplitude=5001)
    assert evaluate(recruitment="reduced")
    # Early recruitment alone is not counted
    assert not evaluate(recruitment="early")


def test_two_of_five_abnormal_is_multifocal_and_acute_on_chronic(muscle, panel, chronic_denervated):
    result_set = panel(
        muscle("deltoid", **chronic_denervated),
        muscle("biceps_brachii", **chronic_denervated),
        muscle("triceps_brachii"),
        muscle("tibialis_anterior"),
        muscle("quadriceps"),
    )

    summary = classify_distribution(result_set)

    assert summary.primary == Distribution.MULTIFOCAL
    # 2/5 = 0.4 also falls in the diffuse band; both abnormal muscles are proximal
    assert summary.labels == [Distribution.MULTIFOCAL, Distribution.DIFFUSE, Distribution.PROXIMAL]
    assert summary.abnormal_muscles == ["deltoid", "biceps_brachii"]
    assert summary.abnormal_fraction == pytest.approx(0.4)
    assert summary.proximal and not summary.distal

    assert classify_chronicity(result_set) == Chronicity.ACUTE_ON_CHRONIC
    assert matches_chronicity(result_set, "acute on chronic")
    assert matches_chronicity(result_set, "progressive")
    assert not matches_chronicity(result_set, "chronic")
    assert not matches_chronicity(result_set, "acute")


def test_single_abnormal_muscle_is_focal(muscle, panel):
    result_set = panel(
        muscle("tibialis_anterior", fib="present"),
        muscle("deltoid"),
        muscle("quadriceps"),
        muscle("gastrocnemius"),
    )
    summary = classify_distribution(result_set)

    assert Distribution.FOCAL in summary.labels
    assert summary.primary == Distribution.FOCAL


def test_no_abnormal_muscle_satisfies_no_label(muscle, panel):
    result_set = panel(muscle("deltoid"), muscle("abductor_pollicis_brevis"))

    summary = classify_distribution(result_set)

    assert summary.labels == []
    assert summary.primary is None
    assert not any(matches_distribution(result_set, d.value) for d in Distribution)


def test_generalized_involvement(muscle, panel):
    result_set = panel(
        muscle("deltoid", fib="present"),
        muscle("biceps_brachii", fib="present"),
        muscle("tibialis_anterior", fib="present"),
        muscle("quadriceps", fib="present"),
        muscle("soleus"),
    )
    assert matches_distribution(result_set, "generalized")
    assert not matches_distribution(result_set, "multifocal")
    assert classify_distribution(result_set).primary == Distribution.GENERALIZED


def test_distal_only_involvement(muscle, panel):
    result_set = panel(
        muscle("abductor_pollicis_brevis", pw="+2"),
        muscle("first_dorsal_interosseous", recruitment="reduced"),
        muscle("deltoid"),
    )
    assert matches_distribution(result_set, "distal")
    assert not matches_distribution(result_set, "proximal")


def test_unknown_distribution_label_never_matches(muscle, panel):
    assert not matches_distribution(panel(muscle(fib="present")), "segmental")


@pytest.mark.parametrize("kwargs, expected", [
    (dict(fib="present"), Chronicity.ACUTE),
    (dict(duration=14, amplitude=7000), Chronicity.CHRONIC),
    (dict(fib="present", duration=14, amplitude=7000), Chronicity.ACUTE_ON_CHRONIC),
    # Long but not large MUPs are not chronic changes
    (dict(duration=14, amplitude=5500), None),
    (dict(), None),
])
def test_chronicity(muscle, panel, kwargs, expected):
    assert classify_chronicity(panel(muscle(**kwargs))) == expected


def test_unknown_chronicity_label_never_matches(muscle, panel):
    assert not matches_chronicity(panel(muscle(fib="present")), "subacute")
