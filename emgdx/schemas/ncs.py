from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class AbnormalityDirection(str, Enum):
    NORMAL = "normal"
    ABOVE_NORMAL = "above_normal"
    BELOW_NORMAL = "below_normal"


class ParameterClassification(BaseModel):
    parameter: str
    value: Optional[float] = None
    message: str
    abnormal: bool = False
    direction: AbnormalityDirection = AbnormalityDirection.NORMAL
    reference_range: Optional[str] = None


class NcsPattern(str, Enum):
    DEMYELINATING = "demyelinating"
    AXONAL = "axonal"
    MIXED = "mixed"
    NONE = "none"


class NcsPatternResult(BaseModel):
    nerve_id: str
    pattern: NcsPattern = NcsPattern.NONE
    findings: List[str] = Field(default_factory=list)


class NerveClassification(BaseModel):
    """Inline form feedback for one nerve study."""
    nerve_id: str
    parameters: Dict[str, ParameterClassification]
    pattern: NcsPatternResult
