"""
Decides, from the questionnaire and exam, whether the needle EMG can be
skipped and whether it is clinically indicated.

The two answers are independent and can both be true; the conflict is left
to the clinician.
"""

from typing import Optional, Set

import structlog

from emgdx.data.store import ReferenceDataStore
from emgdx.schemas.clinical import AffectedMuscle, ClinicalEvaluation, DiagnosticCriteria
from emgdx.services.parameter_classifier import is_nerve_abnormal

logger = structlog.get_logger()

FULL_STRENGTH_MRC = 5

CTS_DIAGNOSIS_MARKERS = ("síndrome del túnel del carpo", "carpal tunnel syndrome")

# canSkipEMG reasons
PURE_SENSORY = "pure sensory neuropathy without weakness"
DISTAL_SYMMETRIC = "typical bilateral distal symmetric polyneuropathy pattern"
MILD_CTS = "mild/moderate carpal tunnel syndrome without axonal features"
SINGLE_NERVE = "focal neuropathy limited to a single nerve without weakness"

# requiresEMG reasons
MUSCLE_WEAKNESS = "muscle weakness present"
RADICULOPATHY = "suspected radiculopathy"
PLEXOPATHY = "suspected plexopathy"
MYOPATHY = "suspected myopathy"


class DiagnosticCriteriaEvaluator:

    def __init__(self, store: ReferenceDataStore):
        self.store = store

    def evaluate(self, evaluation: ClinicalEvaluation) -> DiagnosticCriteria:
        criteria = DiagnosticCriteria()

        skip_rules = (
            (self.is_pure_sensory_neuropathy, PURE_SENSORY),
            (self.is_distal_symmetric_pattern, DISTAL_SYMMETRIC),
            (self.is_mild_carpal_tunnel, MILD_CTS),
            (self.is_single_nerve_without_weakness, SINGLE_NERVE),
        )
        for rule, reason in skip_rules:
            if rule(evaluation):
                criteria.can_skip_emg = True
                criteria.reasons.append(reason)

        emg_rules = (
            (self.has_muscle_weakness, MUSCLE_WEAKNESS),
            (self.suspected_radiculopathy, RADICULOPATHY),
            (self.suspected_plexopathy, PLEXOPATHY),
            (self.suspected_myopathy, MYOPATHY),
        )
        for rule, reason in emg_rules:
            if rule(evaluation):
                criteria.requires_emg = True
                criteria.emg_reasons.append(reason)

        logger.info(
            "diagnostic_criteria_evaluated",
            can_skip_emg=criteria.can_skip_emg,
            requires_emg=criteria.requires_emg,
            conflicting=criteria.conflicting,
        )
        return criteria

    # --- canSkipEMG ---

    @staticmethod
    def is_pure_sensory_neuropathy(evaluation: ClinicalEvaluation) -> bool:
        reason = evaluation.reason_for_study
        return (
            reason.sensory.present
            and not reason.weakness.present
            and len(evaluation.affected_muscles) == 0
        )

    @staticmethod
    def is_distal_symmetric_pattern(evaluation: ClinicalEvaluation) -> bool:
        weakness = evaluation.reason_for_study.weakness
        sensory = evaluation.reason_for_study.sensory
        regions = weakness.distribution + sensory.distribution
        return (
            (weakness.present or sensory.present)
            and bool(regions)
            and all("distal" in region.lower() for region in regions)
        )

    @staticmethod
    def is_mild_carpal_tunnel(evaluation: ClinicalEvaluation) -> bool:
        diagnosis = evaluation.preliminary_diagnosis.lower()
        return (
            any(marker in diagnosis for marker in CTS_DIAGNOSIS_MARKERS)
            and not evaluation.reason_for_study.weakness.present
            and len(evaluation.affected_muscles) == 0
        )

    def is_single_nerve_without_weakness(self, evaluation: ClinicalEvaluation) -> bool:
        """NCS-only variant: exactly one anatomic nerve is abnormal and nothing is weak."""
        if self.has_muscle_weakness(evaluation) or evaluation.reason_for_study.weakness.present:
            return False
        abnormal_nerves: Set[str] = set()
        for nerve_id, measurement in evaluation.ncs_findings.items():
            reference = self.store.nerves.get(nerve_id)
            if reference is not None and is_nerve_abnormal(reference, measurement):
                abnormal_nerves.add(reference.nerve)
        return len(abnormal_nerves) == 1

    # --- requiresEMG ---

    @staticmethod
    def has_muscle_weakness(evaluation: ClinicalEvaluation) -> bool:
        return any(m.mrc_grade < FULL_STRENGTH_MRC for m in evaluation.affected_muscles)

    @staticmethod
    def suspected_radiculopathy(evaluation: ClinicalEvaluation) -> bool:
        return (
            DiagnosticCriteriaEvaluator.has_muscle_weakness(evaluation)
            and not evaluation.clinical_findings.reflexes.all_normal()
        )

    def suspected_plexopathy(self, evaluation: ClinicalEvaluation) -> bool:
        roots = {
            root
            for root in (self._root_of(m) for m in evaluation.affected_muscles)
            if root is not None
        }
        return len(roots) > 1

    @staticmethod
    def suspected_myopathy(evaluation: ClinicalEvaluation) -> bool:
        return (
            DiagnosticCriteriaEvaluator.has_muscle_weakness(evaluation)
            and evaluation.clinical_findings.reflexes.all_normal()
        )

    def _root_of(self, affected: AffectedMuscle) -> Optional[str]:
        muscle = self.store.muscle(affected.muscle)
        if muscle is None:
            # Forms may send the display name instead of the id
            wanted = affected.muscle.strip().lower()
            muscle = next(
                (m for m in self.store.muscles.values() if m.name.lower() == wanted),
                None,
            )
        return muscle.root if muscle is not None else None
