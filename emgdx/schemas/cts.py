from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from emgdx.schemas.emg import CamelModel


# --- Comparative carpal tunnel study (input) ---

class MedianSensoryStudy(CamelModel):
    latency_d1: float = Field(..., ge=0, description="Thumb peak latency, ms")
    latency_d2: float = Field(..., ge=0, description="ms")
    latency_d3: float = Field(..., ge=0, description="ms")
    latency_d4: float = Field(..., ge=0, description="Ring finger peak latency, ms")
    palm_latency: float = Field(..., ge=0, description="Palm-to-wrist latency, ms")
    conduction_velocity: float = Field(..., ge=0, description="m/s")
    amplitude: float = Field(..., ge=0, description="SNAP, µV")


class UlnarSensoryStudy(CamelModel):
    latency_d4: float = Field(..., ge=0, description="ms")
    conduction_velocity: Optional[float] = Field(None, ge=0)
    amplitude: Optional[float] = Field(None, ge=0)


class RadialSensoryStudy(CamelModel):
    latency_d1: float = Field(..., ge=0, description="ms")
    conduction_velocity: Optional[float] = Field(None, ge=0)
    amplitude: Optional[float] = Field(None, ge=0)


class MedianMotorStudy(CamelModel):
    distal_latency: float = Field(..., ge=0, description="ms")
    amplitude: float = Field(..., ge=0, description="CMAP, mV")
    conduction_velocity: Optional[float] = Field(None, ge=0)
    lumbrical_latency: float = Field(..., ge=0, description="Second lumbrical, ms")


class UlnarMotorStudy(CamelModel):
    interosseous_latency: float = Field(..., ge=0, description="ms")
    amplitude: Optional[float] = Field(None, ge=0)


class ApbNeedleFindings(CamelModel):
    """Needle exam of abductor pollicis brevis, graded 0-4."""
    fibrillations: int = Field(0, ge=0, le=4)
    positive_waves: int = Field(0, ge=0, le=4)
    recruitment: Literal["normal", "reduced", "discrete", "absent"] = "normal"

    @property
    def denervated(self) -> bool:
        return self.fibrillations > 0 or self.positive_waves > 0


class CarpalTunnelStudy(CamelModel):
    id: Optional[str] = None
    date: Optional[str] = None
    sensory_median: MedianSensoryStudy
    sensory_ulnar: UlnarSensoryStudy
    sensory_radial: RadialSensoryStudy
    motor_median: MedianMotorStudy
    motor_ulnar: UlnarMotorStudy
    emg_apb: Optional[ApbNeedleFindings] = Field(None, alias="emgAPB")


# --- Analysis (output) ---

class CtsSeverity(str, Enum):
    NORMAL = "normal"
    MINIMAL = "minimal"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    VERY_SEVERE = "very_severe"


class FindingGroup(BaseModel):
    abnormal: bool = False
    details: List[str] = Field(default_factory=list)


class CarpalTunnelAnalysis(BaseModel):
    severity: CtsSeverity
    abnormal_criteria: List[str] = Field(default_factory=list)
    sensory_findings: FindingGroup
    motor_findings: FindingGroup
    axonal_damage: FindingGroup
    recommendations: List[str] = Field(default_factory=list)
    conclusion: str
