from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from emgdx.schemas.emg import CamelModel, NerveConductionMeasurement, Side


class SymptomSeverity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class ReflexGrade(str, Enum):
    NORMAL = "normal"
    INCREASED = "increased"
    DECREASED = "decreased"
    ABSENT = "absent"


class Weakness(CamelModel):
    present: bool = False
    distribution: List[str] = Field(default_factory=list)
    severity: Optional[SymptomSeverity] = None


class Pain(CamelModel):
    present: bool = False
    type: List[str] = Field(default_factory=list)
    distribution: List[str] = Field(default_factory=list)
    intensity: Optional[int] = Field(None, ge=0, le=10)


class SensorySymptoms(CamelModel):
    present: bool = False
    type: List[str] = Field(default_factory=list)
    distribution: List[str] = Field(default_factory=list)
    severity: Optional[SymptomSeverity] = None


class ReasonForStudy(CamelModel):
    weakness: Weakness = Field(default_factory=Weakness)
    pain: Pain = Field(default_factory=Pain)
    sensory: SensorySymptoms = Field(default_factory=SensorySymptoms)


class AffectedMuscle(CamelModel):
    muscle: str = Field(..., min_length=1)
    side: Optional[Side] = None
    mrc_grade: int = Field(..., ge=0, le=5)
    notes: Optional[str] = None


class MuscleStrength(CamelModel):
    affected_muscles: List[AffectedMuscle] = Field(default_factory=list)


class Reflexes(CamelModel):
    biceps: ReflexGrade = ReflexGrade.NORMAL
    triceps: ReflexGrade = ReflexGrade.NORMAL
    patellar: ReflexGrade = ReflexGrade.NORMAL
    achilles: ReflexGrade = ReflexGrade.NORMAL

    def all_normal(self) -> bool:
        return all(
            grade == ReflexGrade.NORMAL
            for grade in (self.biceps, self.triceps, self.patellar, self.achilles)
        )


class ClinicalFindings(CamelModel):
    muscle_strength: MuscleStrength = Field(default_factory=MuscleStrength)
    reflexes: Reflexes = Field(default_factory=Reflexes)


class ClinicalEvaluation(CamelModel):
    """Questionnaire and physical exam, as captured before the needle study."""

    reason_for_study: ReasonForStudy = Field(default_factory=ReasonForStudy)
    clinical_findings: ClinicalFindings = Field(default_factory=ClinicalFindings)
    preliminary_diagnosis: str = ""
    # Nerve conduction studies already performed, keyed by nerve study id
    ncs_findings: Dict[str, NerveConductionMeasurement] = Field(default_factory=dict)

    @property
    def affected_muscles(self) -> List[AffectedMuscle]:
        return self.clinical_findings.muscle_strength.affected_muscles


class DiagnosticCriteria(BaseModel):
    can_skip_emg: bool = False
    reasons: List[str] = Field(default_factory=list)
    requires_emg: bool = False
    emg_reasons: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def conflicting(self) -> bool:
        return self.can_skip_emg and self.requires_emg
