from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from emgdx.schemas.clinical import ClinicalEvaluation, DiagnosticCriteria
from emgdx.schemas.emg import CamelModel, EMGResultSet
from emgdx.schemas.ncs import NcsPatternResult


class Distribution(str, Enum):
    FOCAL = "focal"
    MULTIFOCAL = "multifocal"
    DIFFUSE = "diffuse"
    GENERALIZED = "generalized"
    PROXIMAL = "proximal"
    DISTAL = "distal"


class Chronicity(str, Enum):
    ACUTE = "acute"
    SUBACUTE = "subacute"
    CHRONIC = "chronic"
    ACUTE_ON_CHRONIC = "acute on chronic"


class LesionType(str, Enum):
    AXONAL = "axonal"
    DEMYELINATING = "demyelinating"
    MIXED = "mixed"


class PathologyType(str, Enum):
    NEUROPATHIC = "neuropathic"
    MYOPATHIC = "myopathic"
    MIXED = "mixed"


class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class DistributionSummary(BaseModel):
    abnormal_muscles: List[str] = Field(default_factory=list)
    total_muscles: int = 0
    abnormal_fraction: float = 0.0
    labels: List[Distribution] = Field(default_factory=list)
    primary: Optional[Distribution] = None

    @property
    def proximal(self) -> bool:
        return Distribution.PROXIMAL in self.labels

    @property
    def distal(self) -> bool:
        return Distribution.DISTAL in self.labels


class SuggestedDiagnosis(BaseModel):
    pattern_id: str
    name: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    matched_criteria: List[str] = Field(default_factory=list)


class IntegratedDiagnosis(BaseModel):
    lesion_type: Optional[LesionType] = None
    pathology_type: Optional[PathologyType] = None
    severity: Severity = Severity.MILD
    chronicity: Optional[Chronicity] = None
    distribution: List[Distribution] = Field(default_factory=list)
    abnormal_muscles: List[str] = Field(default_factory=list)
    ncs_patterns: Dict[str, NcsPatternResult] = Field(default_factory=dict)
    suggested_diagnoses: List[SuggestedDiagnosis] = Field(default_factory=list)
    criteria: Optional[DiagnosticCriteria] = None
    clinical_correlation: str = ""
    final_diagnosis: str = ""
    recommendations: List[str] = Field(default_factory=list)


class DiagnosisRequest(CamelModel):
    emg: EMGResultSet
    clinical: Optional[ClinicalEvaluation] = None
