from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ReferenceRange(BaseModel):
    """Closed interval; both bounds count as normal."""
    model_config = ConfigDict(frozen=True)

    min: float
    max: float

    @model_validator(mode="after")
    def check_order(self):
        if self.min > self.max:
            raise ValueError(f"reference range min {self.min} exceeds max {self.max}")
        return self

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def __str__(self) -> str:
        return f"{self.min:g}-{self.max:g}"


class StudyType(str, Enum):
    MOTOR = "motor"
    SENSORY = "sensory"


class NerveReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Study id, e.g. 'median_motor'")
    name: str
    nerve: str = Field(..., description="Anatomic nerve, e.g. 'median'")
    study_type: StudyType
    latency: ReferenceRange
    amplitude: ReferenceRange
    velocity: ReferenceRange
    # Supporting evidence attached to an NCS pattern match, keyed by pattern value
    pattern_findings: Dict[str, List[str]] = Field(default_factory=dict)

    @property
    def amplitude_unit(self) -> str:
        return "mV" if self.study_type == StudyType.MOTOR else "µV"

    def range_for(self, parameter: str) -> Optional[ReferenceRange]:
        return {
            "latency": self.latency,
            "amplitude": self.amplitude,
            "velocity": self.velocity,
        }.get(parameter)


class MuscleReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    nerve: str
    root: str = Field(..., description="Root level label, e.g. 'C5-C6'")
    duration: ReferenceRange = Field(..., description="MUP duration, ms")
    amplitude: ReferenceRange = Field(..., description="MUP amplitude, µV")
    polyphasia: ReferenceRange = Field(..., description="Polyphasic MUPs, %")

    def range_for(self, field: str) -> Optional[ReferenceRange]:
        return {
            "duration": self.duration,
            "amplitude": self.amplitude,
        }.get(field)
