"""
Grades a comparative median nerve study for carpal tunnel syndrome.

Sensory criteria compare the median nerve with its ulnar and radial
neighbours on the same fingers; motor criteria use the distal latency and the
lumbrical-interossei difference. The needle exam of abductor pollicis brevis,
when sent, only adds denervation evidence.
"""

from typing import Dict, List

import structlog

from emgdx.schemas.cts import (
    CarpalTunnelAnalysis,
    CarpalTunnelStudy,
    CtsSeverity,
    FindingGroup,
)

logger = structlog.get_logger()

# Sensory (ms, m/s)
PEAK_LATENCY_MS = 3.5
LATENCY_DIFFERENCE_MS = 0.4
PALM_WRIST_LATENCY_MS = 2.2
SENSORY_VELOCITY_MIN = 49.0

# Motor (ms)
DISTAL_LATENCY_MS = 4.2
LUMBRICAL_INTEROSSEI_DIFFERENCE_MS = 0.5

# Axonal loss
SNAP_AXONAL_UV = 2.0
CMAP_AXONAL_MV = 4.0

SENSORY_CRITERION = "sensory abnormalities"
MOTOR_CRITERION = "motor abnormalities"
AXONAL_CRITERION = "axonal damage"

_CONSERVATIVE = [
    "Night splint",
    "Activity modification",
    "Consider physical therapy",
]
_SURGICAL = [
    "Priority surgical evaluation",
    "Carpal tunnel release",
    "Post-surgical follow-up with rehabilitation",
]
RECOMMENDATIONS: Dict[CtsSeverity, List[str]] = {
    CtsSeverity.NORMAL: ["No specific carpal tunnel measures required"],
    CtsSeverity.MINIMAL: _CONSERVATIVE,
    CtsSeverity.MILD: _CONSERVATIVE,
    CtsSeverity.MODERATE: [
        "Intensive conservative treatment",
        "Consider local corticosteroid injection",
        "Surgical assessment if no improvement in 6-8 weeks",
    ],
    CtsSeverity.SEVERE: _SURGICAL,
    CtsSeverity.VERY_SEVERE: _SURGICAL,
}


def _difference(a: float, b: float) -> float:
    # Latencies are read to 0.1 ms; keep float noise off the 0.4 / 0.5 limits
    return round(a - b, 2)


class CarpalTunnelAnalyzer:

    @staticmethod
    def sensory_findings(study: CarpalTunnelStudy) -> FindingGroup:
        median = study.sensory_median
        details = []

        if median.latency_d2 > PEAK_LATENCY_MS:
            details.append(f"Prolonged D2 peak latency ({median.latency_d2:.1f} ms)")
        if median.latency_d3 > PEAK_LATENCY_MS:
            details.append(f"Prolonged D3 peak latency ({median.latency_d3:.1f} ms)")

        d4 = _difference(median.latency_d4, study.sensory_ulnar.latency_d4)
        if d4 > LATENCY_DIFFERENCE_MS:
            details.append(f"Abnormal median-ulnar D4 latency difference ({d4:.1f} ms)")

        d1 = _difference(median.latency_d1, study.sensory_radial.latency_d1)
        if d1 > LATENCY_DIFFERENCE_MS:
            details.append(f"Abnormal median-radial D1 latency difference ({d1:.1f} ms)")

        if median.palm_latency > PALM_WRIST_LATENCY_MS:
            details.append(f"Prolonged palm-wrist latency ({median.palm_latency:.1f} ms)")
        if median.conduction_velocity < SENSORY_VELOCITY_MIN:
            details.append(
                f"Reduced sensory conduction velocity ({median.conduction_velocity:.1f} m/s)"
            )

        return FindingGroup(abnormal=bool(details), details=details)

    @staticmethod
    def motor_findings(study: CarpalTunnelStudy) -> FindingGroup:
        motor = study.motor_median
        details = []

        if motor.distal_latency > DISTAL_LATENCY_MS:
            details.append(f"Prolonged distal motor latency ({motor.distal_latency:.1f} ms)")

        lumbrical = _difference(motor.lumbrical_latency, study.motor_ulnar.interosseous_latency)
        if lumbrical > LUMBRICAL_INTEROSSEI_DIFFERENCE_MS:
            details.append(f"Abnormal lumbrical-interossei difference ({lumbrical:.1f} ms)")

        return FindingGroup(abnormal=bool(details), details=details)

    @staticmethod
    def axonal_damage(study: CarpalTunnelStudy) -> FindingGroup:
        details = []

        if study.sensory_median.amplitude < SNAP_AXONAL_UV:
            details.append(
                f"Severely reduced median SNAP ({study.sensory_median.amplitude:.1f} µV)"
            )
        if study.motor_median.amplitude < CMAP_AXONAL_MV:
            details.append(f"Reduced median CMAP ({study.motor_median.amplitude:.1f} mV)")

        apb = study.emg_apb
        if apb is not None and apb.denervated:
            details.append(
                f"Denervation in APB (fibrillations {apb.fibrillations}/4, "
                f"positive waves {apb.positive_waves}/4)"
            )

        return FindingGroup(abnormal=bool(details), details=details)

    @staticmethod
    def severity(
        study: CarpalTunnelStudy,
        sensory_abnormal: bool,
        motor_abnormal: bool,
    ) -> CtsSeverity:
        """
        Conduction abnormalities decide whether there is a syndrome at all.
        Absent responses and APB denervation then grade it upwards.
        """
        if not sensory_abnormal and not motor_abnormal:
            return CtsSeverity.NORMAL

        snap_absent = study.sensory_median.amplitude == 0
        cmap_absent = study.motor_median.amplitude == 0
        apb = study.emg_apb

        if apb is not None and apb.denervated and snap_absent and cmap_absent:
            return CtsSeverity.VERY_SEVERE
        if snap_absent and study.motor_median.distal_latency > DISTAL_LATENCY_MS:
            return CtsSeverity.SEVERE
        if sensory_abnormal and motor_abnormal:
            return CtsSeverity.MODERATE
        if sensory_abnormal:
            return CtsSeverity.MILD
        return CtsSeverity.MINIMAL

    @staticmethod
    def conclusion(severity: CtsSeverity, criteria: List[str]) -> str:
        if len(criteria) >= 2:
            grade = severity.value.replace("_", " ")
            text = f"Electrophysiological findings consistent with {grade} carpal tunnel syndrome."
            if AXONAL_CRITERION in criteria:
                text += " Axonal damage is present."
            return text
        if criteria:
            return "Findings suggestive of early carpal tunnel syndrome. Clinical correlation recommended."
        return "No significant electrophysiological abnormalities suggesting carpal tunnel syndrome."

    @staticmethod
    def analyze(study: CarpalTunnelStudy) -> CarpalTunnelAnalysis:
        sensory = CarpalTunnelAnalyzer.sensory_findings(study)
        motor = CarpalTunnelAnalyzer.motor_findings(study)
        axonal = CarpalTunnelAnalyzer.axonal_damage(study)
        severity = CarpalTunnelAnalyzer.severity(study, sensory.abnormal, motor.abnormal)

        criteria = [
            name for name, group in (
                (SENSORY_CRITERION, sensory),
                (MOTOR_CRITERION, motor),
                (AXONAL_CRITERION, axonal),
            )
            if group.abnormal
        ]

        logger.info(
            "carpal_tunnel_analyzed",
            severity=severity.value,
            criteria=len(criteria),
        )
        return CarpalTunnelAnalysis(
            severity=severity,
            abnormal_criteria=criteria,
            sensory_findings=sensory,
            motor_findings=motor,
            axonal_damage=axonal,
            recommendations=list(RECOMMENDATIONS[severity]),
            conclusion=CarpalTunnelAnalyzer.conclusion(severity, criteria),
        )
