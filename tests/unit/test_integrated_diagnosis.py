import pytest
from emgdx.core.config import Settings
from emgdx.schemas.clinical import ClinicalEvaluation
from emgdx.schemas.diagnosis import (
    Chronicity,
    Distribution,
    LesionType,
    PathologyType,
    Severity,
)
from emgdx.schemas.ncs import NcsPattern, NcsPatternResult
from emgdx.services.integrated_diagnosis import NORMAL_STUDY, IntegratedDiagnosisBuilder


@pytest.fixture
def builder(store):
    return IntegratedDiagnosisBuilder(store, Settings(SUGGESTION_MIN_CONFIDENCE=0.5, SUGGESTION_LIMIT=5))


@pytest.fixture
def carpal_tunnel_panel(muscle, panel):
    return panel(
        muscle("abductor_pollicis_brevis", fib="present", duration=14, amplitude=7000, recruitment="reduced"),
        ncs={
            "median_motor": {"latency": 5.5, "amplitude": 8.0, "conductionVelocity": 50},
            "median_sensory": {"latency": 5.0, "amplitude": 20.0, "conductionVelocity": 55},
        },
    )


def _patterns(*patterns):
    return {
        f"n{i}": NcsPatternResult(nerve_id=f"n{i}", pattern=pattern)
        for i, pattern in enumerate(patterns)
    }


# --- Lesion type ---

def test_lesion_type_from_ncs_patterns():
    assert IntegratedDiagnosisBuilder.lesion_type({}) is None
    assert IntegratedDiagnosisBuilder.lesion_type(_patterns(NcsPattern.NONE)) is None
    assert IntegratedDiagnosisBuilder.lesion_type(
        _patterns(NcsPattern.AXONAL, NcsPattern.NONE)
    ) == LesionType.AXONAL
    assert IntegratedDiagnosisBuilder.lesion_type(
        _patterns(NcsPattern.DEMYELINATING, NcsPattern.DEMYELINATING)
    ) == LesionType.DEMYELINATING
    assert IntegratedDiagnosisBuilder.lesion_type(
        _patterns(NcsPattern.AXONAL, NcsPattern.DEMYELINATING)
    ) == LesionType.MIXED
    assert IntegratedDiagnosisBuilder.lesion_type(
        _patterns(NcsPattern.MIXED, NcsPattern.NONE)
    ) == LesionType.MIXED


# --- Pathology type ---

def test_pathology_type(muscle, panel):
    neuropathic = muscle("deltoid", duration=14)
    myopathic = muscle("biceps_brachii", duration=6, amplitude=800, recruitment="early")

    assert IntegratedDiagnosisBuilder.pathology_type(panel(neuropathic)) == PathologyType.NEUROPATHIC
    assert IntegratedDiagnosisBuilder.pathology_type(panel(myopathic)) == PathologyType.MYOPATHIC
    assert IntegratedDiagnosisBuilder.pathology_type(panel(neuropathic, myopathic)) == PathologyType.MIXED
    assert IntegratedDiagnosisBuilder.pathology_type(panel(muscle())) is None


# --- Severity ---

def test_severity_is_additive(builder, muscle, panel):
    # 0.5 mV < 0.25 x 4.0 mV: 3 points per motor study
    mild = panel(muscle(), ncs={"median_motor": {"amplitude": 0.5}})
    moderate = panel(muscle(), ncs={
        "median_motor": {"amplitude": 0.5},
        "ulnar_motor": {"amplitude": 3.0},
    })
    severe = panel(
        muscle("deltoid", recruitment="absent"),
        ncs={"median_motor": {"amplitude": 0.5}, "ulnar_motor": {"amplitude": 0.5}},
    )

    assert builder.severity(mild) == Severity.MILD
    assert builder.severity(moderate) == Severity.MODERATE
    assert builder.severity(severe) == Severity.SEVERE


def test_sensory_and_needle_points(builder, muscle, panel):
    # sural 2.0 uV < 0.5 x 5.0 uV (2), +3 fibrillations (2), reduced recruitment (1)
    result_set = panel(
        muscle("deltoid", fib="+3"),
        muscle("tibialis_anterior", recruitment="reduced"),
        ncs={"sural": {"amplitude": 2.0}},
    )
    assert builder.severity(result_set) == Severity.MODERATE


def test_unknown_nerves_add_no_severity(builder, muscle, panel):
    assert builder.severity(panel(muscle(), ncs={"facial": {"amplitude": 0.1}})) == Severity.MILD


# --- Whole report ---

def test_normal_study(builder, muscle, panel):
    diagnosis = builder.build(panel(muscle("deltoid"), muscle("tibialis_anterior")))

    assert diagnosis.final_diagnosis == NORMAL_STUDY
    assert diagnosis.lesion_type is None
    assert diagnosis.severity == Severity.MILD
    assert diagnosis.distribution == []
    assert [s.pattern_id for s in diagnosis.suggested_diagnoses] == ["normal"]
    assert diagnosis.recommendations == [
        "Clinical follow-up",
        "Complementary studies according to clinical course",
    ]


def test_carpal_tunnel_report(builder, carpal_tunnel_panel):
    diagnosis = builder.build(carpal_tunnel_panel)

    ids = [s.pattern_id for s in diagnosis.suggested_diagnoses]
    # Moderate and severe both score 1.0; declaration order breaks the tie
    assert ids[:2] == ["carpal_tunnel_syndrome_moderate", "carpal_tunnel_syndrome_severe"]
    assert len(ids) == 5
    assert all(s.confidence >= 0.5 for s in diagnosis.suggested_diagnoses)

    assert "highly consistent with Carpal tunnel syndrome (moderate)" in diagnosis.final_diagnosis
    assert diagnosis.chronicity == Chronicity.ACUTE_ON_CHRONIC
    assert Distribution.FOCAL in diagnosis.distribution
    assert Distribution.DISTAL in diagnosis.distribution
    assert diagnosis.abnormal_muscles == ["abductor_pollicis_brevis"]
    assert diagnosis.pathology_type == PathologyType.NEUROPATHIC
    assert set(diagnosis.ncs_patterns) == {"median_motor", "median_sensory"}
    assert diagnosis.criteria is None


def test_suggestion_limit_comes_from_settings(store, carpal_tunnel_panel):
    builder = IntegratedDiagnosisBuilder(store, Settings(SUGGESTION_LIMIT=2))
    assert len(builder.build(carpal_tunnel_panel).suggested_diagnoses) == 2


def test_demyelinating_severe_recommendations(builder, muscle, panel):
    result_set = panel(
        muscle("abductor_pollicis_brevis", recruitment="absent"),
        muscle("first_dorsal_interosseous", recruitment="absent"),
        ncs={"median_motor": {"latency": 5.1, "amplitude": 3.5, "conductionVelocity": 45}},
    )
    diagnosis = builder.build(result_set)

    assert diagnosis.lesion_type == LesionType.DEMYELINATING
    assert diagnosis.severity == Severity.SEVERE
    assert diagnosis.recommendations == [
        "Urgent neurological evaluation recommended",
        "Consider autoimmune work-up",
        "Evaluate need for immunomodulatory treatment",
        "Periodic follow-up to monitor progression",
    ]


def test_abnormal_ncs_without_matching_pattern(store, muscle, panel):
    builder = IntegratedDiagnosisBuilder(store, Settings(SUGGESTION_MIN_CONFIDENCE=0.99))
    result_set = panel(
        muscle("deltoid"),
        ncs={"median_motor": {"latency": 5.1, "amplitude": 3.5, "conductionVelocity": 45}},
    )
    diagnosis = builder.build(result_set)

    assert diagnosis.final_diagnosis == (
        "Abnormal electrophysiological study: demyelinating nerve conduction pattern."
    )


def test_clinical_exam_is_correlated(builder, carpal_tunnel_panel):
    clinical = ClinicalEvaluation.model_validate({
        "clinicalFindings": {
            "muscleStrength": {"affectedMuscles": [
                {"muscle": "abductor_pollicis_brevis", "mrcGrade": 4},
                {"muscle": "deltoid", "mrcGrade": 4},
            ]},
        },
    })
    diagnosis = builder.build(carpal_tunnel_panel, clinical)

    assert diagnosis.criteria is not None
    assert diagnosis.criteria.requires_emg is True
    assert diagnosis.clinical_correlation == (
        "Clinical weakness in 2 muscle(s); needle EMG abnormal in 1 of them."
    )
