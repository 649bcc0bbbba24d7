"""
Diagnostic pattern definitions.

Parameter paths and conditions are parsed once, when a KeyFinding is built
from the reference tables, so the scorer only ever sees typed values.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Importance(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class PatternCategory(str, Enum):
    NORMAL = "normal"
    NEUROPATHIC = "neuropathic"
    MYOPATHIC = "myopathic"
    NEUROMUSCULAR_JUNCTION = "neuromuscular_junction"


# --- Parameter paths ---

class ParameterCategory(str, Enum):
    SPONTANEOUS = "spontaneous"
    INSERTIONAL = "insertional"
    MUP = "mup"
    RECRUITMENT = "recruitment"
    INTERFERENCE = "interference"
    NCS = "ncs"
    DISTRIBUTION = "distribution"
    CHRONICITY = "chronicity"
    UNKNOWN = "unknown"


# Path token -> attribute name on SpontaneousActivity
SPONTANEOUS_FIELDS = {
    "fibrillations": "fibrillations",
    "positiveWaves": "positive_waves",
    "positive_waves": "positive_waves",
    "fasciculations": "fasciculations",
    "complexRepetitiveDischarges": "complex_repetitive_discharges",
    "complex_repetitive_discharges": "complex_repetitive_discharges",
    "myotonicDischarges": "myotonic_discharges",
    "myotonic_discharges": "myotonic_discharges",
}
MUP_FIELDS = ("duration", "amplitude", "phases", "stability")
NCS_FIELDS = {
    "latency": "latency",
    "amplitude": "amplitude",
    "velocity": "velocity",
    "conductionVelocity": "velocity",
}
# Means "evaluate across the whole panel", same as no target
PANEL_TARGET = "multiple_muscles"


class ParameterPath(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str
    category: ParameterCategory
    target: Optional[str] = None
    field: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "ParameterPath":
        if raw in ("distribution", "chronicity"):
            return cls(raw=raw, category=ParameterCategory(raw))

        segments = raw.split(".")
        if any(not s for s in segments):
            return cls(raw=raw, category=ParameterCategory.UNKNOWN)

        parsed = _parse_muscle_field(segments)
        if parsed is not None:
            category, field = parsed
            return cls(raw=raw, category=category, field=field)

        target, rest = segments[0], segments[1:]
        parsed = _parse_muscle_field(rest)
        if parsed is not None:
            category, field = parsed
            return cls(
                raw=raw,
                category=category,
                target=None if target == PANEL_TARGET else target,
                field=field,
            )

        if len(rest) == 1 and rest[0] in NCS_FIELDS and target != PANEL_TARGET:
            return cls(raw=raw, category=ParameterCategory.NCS, target=target, field=NCS_FIELDS[rest[0]])

        return cls(raw=raw, category=ParameterCategory.UNKNOWN)


def _parse_muscle_field(segments: List[str]):
    """Match the per-muscle part of a path; None if it isn't one."""
    if segments and segments[0] == "spontaneousActivity":
        segments = segments[1:]
        if len(segments) == 1 and segments[0] in SPONTANEOUS_FIELDS:
            return ParameterCategory.SPONTANEOUS, SPONTANEOUS_FIELDS[segments[0]]
        return None
    if len(segments) == 1 and segments[0] in SPONTANEOUS_FIELDS:
        return ParameterCategory.SPONTANEOUS, SPONTANEOUS_FIELDS[segments[0]]
    if len(segments) == 2 and segments[0] == "motorUnitPotentials" and segments[1] in MUP_FIELDS:
        return ParameterCategory.MUP, segments[1]
    if segments in (["recruitment"], ["recruitment", "pattern"]):
        return ParameterCategory.RECRUITMENT, "pattern"
    if segments == ["insertionalActivity"]:
        return ParameterCategory.INSERTIONAL, "insertional_activity"
    if segments in (["interference"], ["interference", "pattern"]):
        return ParameterCategory.INTERFERENCE, "pattern"
    return None


# --- Conditions ---

class NumericCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["numeric"] = "numeric"
    op: Literal[">", "<", "="]
    threshold: float


class WithinNormalCondition(BaseModel):
    """'=normal': value inside the reference range of the muscle or nerve."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["normal"] = "normal"


class CategoricalCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["categorical"] = "categorical"
    token: str


Condition = Annotated[
    Union[NumericCondition, WithinNormalCondition, CategoricalCondition],
    Field(discriminator="kind"),
]


def parse_condition(raw: str) -> Union[NumericCondition, WithinNormalCondition, CategoricalCondition]:
    text = raw.strip()
    if text and text[0] in "<>=":
        op, rest = text[0], text[1:].strip()
        try:
            return NumericCondition(op=op, threshold=float(rest))
        except ValueError:
            if op == "=" and rest == "normal":
                return WithinNormalCondition()
            # '=' takes a number or 'normal'; bare tokens carry no operator
            raise ValueError(f"Unparsable condition '{raw}'")
    if not text:
        raise ValueError("Empty condition")
    return CategoricalCondition(token=text)


# --- Patterns ---

class KeyFinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    parameter: ParameterPath
    condition: Condition
    importance: Importance

    @field_validator("parameter", mode="before")
    @classmethod
    def parse_parameter(cls, value):
        if isinstance(value, str):
            return ParameterPath.parse(value)
        return value

    @field_validator("condition", mode="before")
    @classmethod
    def parse_condition_string(cls, value):
        if isinstance(value, str):
            return parse_condition(value)
        return value

    @property
    def weight(self) -> int:
        return self.importance.weight


class DiagnosticPattern(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: PatternCategory
    key_findings: List[KeyFinding] = Field(default_factory=list)

    @property
    def total_weight(self) -> int:
        return sum(f.weight for f in self.key_findings)


class PatternSummary(BaseModel):
    id: str
    name: str
    description: str
    category: PatternCategory
    criteria: List[str]

    @classmethod
    def from_pattern(cls, pattern: DiagnosticPattern) -> "PatternSummary":
        return cls(
            id=pattern.id,
            name=pattern.name,
            description=pattern.description,
            category=pattern.category,
            criteria=[f.parameter.raw for f in pattern.key_findings],
        )


class PatternMatchResult(BaseModel):
    pattern_id: str
    score: float = Field(..., ge=0.0, le=1.0)
    matched_criteria: List[str] = Field(default_factory=list)
