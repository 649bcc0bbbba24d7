"""
Nerve conduction reference values.

Adult values, distal stimulation. Amplitudes are mV for motor studies and
µV for sensory studies.
"""

_DEMYELINATING = [
    "Prolonged distal latency",
    "Slowed conduction velocity",
    "Relatively preserved amplitude",
]
_AXONAL = [
    "Reduced response amplitude",
    "Latency and conduction velocity near normal",
]
_MIXED = [
    "Markedly prolonged latency",
    "Reduced response amplitude",
    "Slowed conduction velocity",
]


def _findings(**overrides):
    findings = {
        "demyelinating": list(_DEMYELINATING),
        "axonal": list(_AXONAL),
        "mixed": list(_MIXED),
    }
    findings.update(overrides)
    return findings


NERVE_REFERENCES = [
    {
        "id": "median_motor",
        "name": "Median Motor",
        "nerve": "median",
        "study_type": "motor",
        "latency": {"min": 2.5, "max": 4.2},
        "amplitude": {"min": 4.0, "max": 20.0},
        "velocity": {"min": 48, "max": 60},
        "pattern_findings": _findings(
            demyelinating=_DEMYELINATING + ["Consider median compression at the wrist"],
        ),
    },
    {
        "id": "ulnar_motor",
        "name": "Ulnar Motor",
        "nerve": "ulnar",
        "study_type": "motor",
        "latency": {"min": 2.5, "max": 4.2},
        "amplitude": {"min": 4.0, "max": 20.0},
        "velocity": {"min": 48, "max": 60},
        "pattern_findings": _findings(
            demyelinating=_DEMYELINATING + ["Consider ulnar entrapment at the elbow"],
        ),
    },
    {
        "id": "peroneal",
        "name": "Peroneal Motor",
        "nerve": "peroneal",
        "study_type": "motor",
        "latency": {"min": 3.0, "max": 5.0},
        "amplitude": {"min": 2.0, "max": 10.0},
        "velocity": {"min": 40, "max": 55},
        "pattern_findings": _findings(
            demyelinating=_DEMYELINATING + ["Consider compression at the fibular head"],
        ),
    },
    {
        "id": "tibial",
        "name": "Tibial Motor",
        "nerve": "tibial",
        "study_type": "motor",
        "latency": {"min": 3.0, "max": 5.0},
        "amplitude": {"min": 2.0, "max": 10.0},
        "velocity": {"min": 40, "max": 55},
        "pattern_findings": _findings(),
    },
    {
        "id": "tibial_motor",
        "name": "Tibial Motor (Abductor Hallucis)",
        "nerve": "tibial",
        "study_type": "motor",
        "latency": {"min": 3.0, "max": 5.0},
        "amplitude": {"min": 4.0, "max": 20.0},
        "velocity": {"min": 40, "max": 55},
        "pattern_findings": _findings(
            demyelinating=_DEMYELINATING + ["Consider tibial compression at the tarsal tunnel"],
        ),
    },
    {
        "id": "radial",
        "name": "Radial Motor",
        "nerve": "radial",
        "study_type": "motor",
        "latency": {"min": 2.5, "max": 4.5},
        "amplitude": {"min": 5.0, "max": 25.0},
        "velocity": {"min": 45, "max": 65},
        "pattern_findings": _findings(),
    },
    {
        "id": "median_sensory",
        "name": "Median Sensory",
        "nerve": "median",
        "study_type": "sensory",
        "latency": {"min": 1.5, "max": 3.0},
        "amplitude": {"min": 10.0, "max": 50.0},
        "velocity": {"min": 50, "max": 65},
        "pattern_findings": _findings(),
    },
    {
        "id": "ulnar_sensory",
        "name": "Ulnar Sensory",
        "nerve": "ulnar",
        "study_type": "sensory",
        "latency": {"min": 1.5, "max": 3.0},
        "amplitude": {"min": 10.0, "max": 50.0},
        "velocity": {"min": 50, "max": 65},
        "pattern_findings": _findings(),
    },
    {
        "id": "sural",
        "name": "Sural Sensory",
        "nerve": "sural",
        "study_type": "sensory",
        "latency": {"min": 2.0, "max": 4.0},
        "amplitude": {"min": 5.0, "max": 30.0},
        "velocity": {"min": 40, "max": 55},
        "pattern_findings": _findings(
            axonal=_AXONAL + ["Length-dependent sensory axonal loss"],
        ),
    },
    {
        "id": "plantar_medial",
        "name": "Medial Plantar Sensory",
        "nerve": "tibial",
        "study_type": "sensory",
        "latency": {"min": 2.0, "max": 4.0},
        "amplitude": {"min": 2.0, "max": 10.0},
        "velocity": {"min": 35, "max": 50},
        "pattern_findings": _findings(),
    },
]
