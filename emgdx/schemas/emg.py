from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Form payloads arrive camelCase; Python code uses snake_case names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Side(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class InsertionalActivity(str, Enum):
    NORMAL = "normal"
    INCREASED = "increased"
    DECREASED = "decreased"
    ABSENT = "absent"


class SpontaneousGrade(str, Enum):
    ABSENT = "absent"
    PRESENT = "present"
    INCREASED = "increased"
    PLUS_1 = "+1"
    PLUS_2 = "+2"
    PLUS_3 = "+3"
    PLUS_4 = "+4"

    @property
    def is_present(self) -> bool:
        return self is not SpontaneousGrade.ABSENT

    @property
    def rank(self) -> int:
        """Ordinal 0-4; ungraded 'present' counts as +1."""
        if self is SpontaneousGrade.ABSENT:
            return 0
        if self.value.startswith("+"):
            return int(self.value[1:])
        return 1


class RecruitmentPattern(str, Enum):
    NORMAL = "normal"
    REDUCED = "reduced"
    EARLY = "early"
    ABSENT = "absent"


class InterferencePattern(str, Enum):
    FULL = "full"
    REDUCED = "reduced"
    DISCRETE = "discrete"
    SINGLE = "single"


class Stability(str, Enum):
    STABLE = "stable"
    UNSTABLE = "unstable"


def _coerce_grade(value: Any) -> Any:
    # Some forms send booleans or plain 0-4 integers for graded findings
    if isinstance(value, bool):
        return SpontaneousGrade.PRESENT if value else SpontaneousGrade.ABSENT
    if isinstance(value, int):
        return SpontaneousGrade.ABSENT if value <= 0 else f"+{min(value, 4)}"
    return value


class SpontaneousActivity(CamelModel):
    fibrillations: SpontaneousGrade = SpontaneousGrade.ABSENT
    positive_waves: SpontaneousGrade = SpontaneousGrade.ABSENT
    fasciculations: SpontaneousGrade = SpontaneousGrade.ABSENT
    complex_repetitive_discharges: Optional[SpontaneousGrade] = None
    myotonic_discharges: Optional[SpontaneousGrade] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_grade(cls, value):
        return _coerce_grade(value)


class MotorUnitPotentials(CamelModel):
    duration: float = Field(..., ge=0, description="ms")
    amplitude: float = Field(..., ge=0, description="µV")
    phases: int = Field(..., ge=1)
    stability: Optional[Stability] = None

    @field_validator("duration", "amplitude", mode="before")
    @classmethod
    def unwrap_measured_value(cls, value):
        # Accept {"value": 12.0, "percentOfNormal": 110} as well as a bare number
        if isinstance(value, dict):
            return value.get("value")
        return value


class Recruitment(CamelModel):
    pattern: RecruitmentPattern = RecruitmentPattern.NORMAL
    ratio_to_amplitude: Optional[float] = None


class Interference(CamelModel):
    pattern: InterferencePattern


class MuscleEvaluation(CamelModel):
    muscle: str = Field(..., min_length=1, description="Muscle id, e.g. 'deltoid'")
    side: Optional[Side] = None
    insertional_activity: InsertionalActivity = InsertionalActivity.NORMAL
    spontaneous_activity: SpontaneousActivity = Field(default_factory=SpontaneousActivity)
    motor_unit_potentials: MotorUnitPotentials
    recruitment: Recruitment = Field(default_factory=Recruitment)
    interference: Optional[Interference] = None
    associated_nerves: List[str] = Field(default_factory=list)
    associated_roots: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class NerveConductionMeasurement(CamelModel):
    side: Optional[Side] = None
    latency: Optional[float] = Field(None, ge=0, description="ms")
    amplitude: Optional[float] = Field(None, ge=0)
    velocity: Optional[float] = Field(
        None, ge=0, alias="conductionVelocity", description="m/s"
    )
    notes: Optional[str] = None

    def value_of(self, field: str) -> Optional[float]:
        return getattr(self, field, None)


class RawWaveform(CamelModel):
    muscle_id: str
    sampling_rate: float = Field(..., gt=0)
    samples: List[float] = Field(default_factory=list)


class EMGResultSet(CamelModel):
    """One patient's needle EMG panel, optionally with the NCS results of the same study."""

    muscles: Dict[str, MuscleEvaluation] = Field(default_factory=dict)
    ncs_results: Optional[Dict[str, NerveConductionMeasurement]] = None
    analysis_date: Optional[date] = None
    reviewed_by: Optional[str] = None
    raw_wave_data: List[RawWaveform] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def fill_muscle_ids(cls, data):
        # The panel key doubles as the muscle id when the entry omits it
        if isinstance(data, dict):
            muscles = data.get("muscles")
            if isinstance(muscles, dict):
                data = dict(data)
                data["muscles"] = {
                    key: ({"muscle": key, **entry} if isinstance(entry, dict) and "muscle" not in entry else entry)
                    for key, entry in muscles.items()
                }
        return data

    @model_validator(mode="after")
    def check_muscle_ids(self):
        # Keys are unique, so matching key and id also rules out duplicate muscles
        for key, evaluation in self.muscles.items():
            if evaluation.muscle != key:
                raise ValueError(
                    f"Panel key '{key}' does not match its muscle id '{evaluation.muscle}'"
                )
        return self

    def evaluations(self) -> List[MuscleEvaluation]:
        return list(self.muscles.values())
