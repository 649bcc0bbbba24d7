import pytest
from emgdx.core.exceptions import ReferenceDataError
from emgdx.data.store import PatternLibrary
from emgdx.schemas.emg import RecruitmentPattern, SpontaneousGrade
from emgdx.schemas.pattern import (
    CategoricalCondition,
    NumericCondition,
    ParameterCategory,
    ParameterPath,
    WithinNormalCondition,
    parse_condition,
)
from emgdx.schemas.reference import ReferenceRange
from emgdx.services.conditions import compare_value


# --- Condition parsing ---

def test_parse_numeric_conditions():
    assert parse_condition(">10") == NumericCondition(op=">", threshold=10)
    assert parse_condition("<4.0") == NumericCondition(op="<", threshold=4.0)
    assert parse_condition("=3") == NumericCondition(op="=", threshold=3)


def test_parse_within_normal_and_tokens():
    assert parse_condition("=normal") == WithinNormalCondition()
    assert parse_condition("present") == CategoricalCondition(token="present")
    assert parse_condition("unstable") == CategoricalCondition(token="unstable")


@pytest.mark.parametrize("raw", ["", "  ", ">", "<abc", "=unstable", "= present"])
def test_parse_rejects_malformed_conditions(raw):
    with pytest.raises(ValueError):
        parse_condition(raw)


def test_operator_with_word_never_matches():
    assert compare_value("unstable", "=unstable") is False


def test_library_rejects_operator_with_word():
    definition = {
        "id": "broken", "name": "Broken", "description": "", "category": "neuropathic",
        "key_findings": [
            {"parameter": "motorUnitPotentials.stability", "condition": "=unstable", "importance": "high"},
        ],
    }
    with pytest.raises(ReferenceDataError, match="broken"):
        PatternLibrary.from_definitions([definition])


# --- Path parsing ---

@pytest.mark.parametrize("raw, category, target, field", [
    ("fibrillations", ParameterCategory.SPONTANEOUS, None, "fibrillations"),
    ("positiveWaves", ParameterCategory.SPONTANEOUS, None, "positive_waves"),
    ("spontaneousActivity.fasciculations", ParameterCategory.SPONTANEOUS, None, "fasciculations"),
    ("motorUnitPotentials.duration", ParameterCategory.MUP, None, "duration"),
    ("recruitment.pattern", ParameterCategory.RECRUITMENT, None, "pattern"),
    ("multiple_muscles.fibrillations", ParameterCategory.SPONTANEOUS, None, "fibrillations"),
    ("biceps_brachii.motorUnitPotentials.amplitude", ParameterCategory.MUP, "biceps_brachii", "amplitude"),
    ("median_motor.latency", ParameterCategory.NCS, "median_motor", "latency"),
    ("tibial_motor.amplitude", ParameterCategory.NCS, "tibial_motor", "amplitude"),
    ("ulnar_motor.conductionVelocity", ParameterCategory.NCS, "ulnar_motor", "velocity"),
    ("distribution", ParameterCategory.DISTRIBUTION, None, None),
    ("chronicity", ParameterCategory.CHRONICITY, None, None),
])
def test_parameter_paths(raw, category, target, field):
    path = ParameterPath.parse(raw)
    assert (path.category, path.target, path.field) == (category, target, field)


@pytest.mark.parametrize("raw", ["", "a..b", "deltoid.motorUnitPotentials.area", "multiple_muscles.latency"])
def test_unrecognised_paths_are_unknown(raw):
    assert ParameterPath.parse(raw).category == ParameterCategory.UNKNOWN


# --- compare_value ---

def test_numeric_comparisons():
    assert compare_value("15", ">10") is True
    assert compare_value(10, ">10") is False
    assert compare_value(3.9, "<4.0") is True
    assert compare_value(3, "=3") is True


def test_non_numeric_value_never_matches_numeric_condition():
    assert compare_value("absent", ">10") is False
    assert compare_value(None, ">10") is False


def test_present_alias():
    assert compare_value("absent", "present") is False
    assert compare_value("+1", "present") is True
    assert compare_value(SpontaneousGrade.PLUS_2, "present") is True


def test_increased_alias():
    assert compare_value("+3", "increased") is True
    assert compare_value("increased", "increased") is True
    assert compare_value("+1", "increased") is False


def test_categorical_equality_with_enums():
    assert compare_value(RecruitmentPattern.REDUCED, "reduced") is True
    assert compare_value(RecruitmentPattern.EARLY, "reduced") is False
    assert compare_value("decreased", "decreased") is True


def test_within_normal_uses_inclusive_reference():
    reference = ReferenceRange(min=5, max=15)
    assert compare_value(15, "=normal", reference) is True
    assert compare_value(5, "=normal", reference) is True
    assert compare_value(15.5, "=normal", reference) is False


def test_within_normal_without_reference_does_not_match():
    assert compare_value(10, "=normal") is False


def test_malformed_condition_does_not_match():
    assert compare_value(10, ">") is False


def test_parsed_condition_accepted():
    assert compare_value(12, NumericCondition(op=">", threshold=10)) is True
