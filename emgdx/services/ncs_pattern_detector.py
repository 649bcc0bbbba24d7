from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Tuple

import structlog

from emgdx.data.store import ReferenceDataStore
from emgdx.schemas.emg import NerveConductionMeasurement
from emgdx.schemas.ncs import NcsPattern, NcsPatternResult
from emgdx.schemas.reference import NerveReference

logger = structlog.get_logger()

# Relative thresholds against the reference range
AMPLITUDE_LOSS_FACTOR = 0.8     # amplitude < 0.8 x min counts as lost
LATENCY_MARKED_FACTOR = 1.2     # latency > 1.2 x max counts as markedly prolonged
VELOCITY_MARKED_FACTOR = 0.8    # velocity < 0.8 x min counts as markedly slowed


@dataclass(frozen=True)
class NcsRule:
    pattern: NcsPattern
    matches: Callable[[NerveReference, float, float, float], bool]


def _demyelinating(ref: NerveReference, lat: float, amp: float, vel: float) -> bool:
    return (
        lat > ref.latency.max
        and vel < ref.velocity.min
        and amp >= ref.amplitude.min * AMPLITUDE_LOSS_FACTOR
    )


def _axonal(ref: NerveReference, lat: float, amp: float, vel: float) -> bool:
    return (
        amp < ref.amplitude.min * AMPLITUDE_LOSS_FACTOR
        and lat <= ref.latency.max * LATENCY_MARKED_FACTOR
        and vel >= ref.velocity.min * VELOCITY_MARKED_FACTOR
    )


def _mixed(ref: NerveReference, lat: float, amp: float, vel: float) -> bool:
    return (
        lat > ref.latency.max * LATENCY_MARKED_FACTOR
        and amp < ref.amplitude.min * AMPLITUDE_LOSS_FACTOR
        and vel < ref.velocity.min * VELOCITY_MARKED_FACTOR
    )


# First match wins. The triggers overlap, so this order is part of the contract.
NCS_RULES: Tuple[NcsRule, ...] = (
    NcsRule(NcsPattern.DEMYELINATING, _demyelinating),
    NcsRule(NcsPattern.AXONAL, _axonal),
    NcsRule(NcsPattern.MIXED, _mixed),
)


class NcsPatternDetector:

    @staticmethod
    def detect_pattern(
        reference: NerveReference,
        measured: NerveConductionMeasurement,
    ) -> NcsPatternResult:
        """
        Classifies one nerve's (latency, amplitude, velocity) triplet.
        A study missing any of the three values is reported as NONE.
        """
        lat, amp, vel = measured.latency, measured.amplitude, measured.velocity
        if lat is None or amp is None or vel is None:
            return NcsPatternResult(nerve_id=reference.id)

        for rule in NCS_RULES:
            if rule.matches(reference, lat, amp, vel):
                return NcsPatternResult(
                    nerve_id=reference.id,
                    pattern=rule.pattern,
                    findings=list(reference.pattern_findings.get(rule.pattern.value, [])),
                )

        return NcsPatternResult(nerve_id=reference.id)

    @staticmethod
    def detect_panel(
        store: ReferenceDataStore,
        ncs_results: Optional[Mapping[str, NerveConductionMeasurement]],
    ) -> Dict[str, NcsPatternResult]:
        """
        Runs detect_pattern over every study with known reference values.
        Studies of nerves missing from the store are skipped.
        """
        results: Dict[str, NcsPatternResult] = {}
        for nerve_id, measured in (ncs_results or {}).items():
            reference = store.nerves.get(nerve_id)
            if reference is None:
                logger.debug("ncs_study_without_reference", nerve_id=nerve_id)
                continue
            results[nerve_id] = NcsPatternDetector.detect_pattern(reference, measured)

        logger.info(
            "ncs_patterns_detected",
            studies=len(results),
            abnormal=sum(1 for r in results.values() if r.pattern != NcsPattern.NONE),
        )
        return results
