"""
Single-parameter classification against a nerve reference range.

Bounds are inclusive: a value equal to min or max is normal.
"""

from typing import Any, Dict, Optional

from emgdx.schemas.emg import NerveConductionMeasurement
from emgdx.schemas.ncs import AbnormalityDirection, ParameterClassification
from emgdx.schemas.reference import NerveReference, ReferenceRange

NCS_PARAMETERS = ("latency", "amplitude", "velocity")


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number:  # NaN
        return None
    return number


def classify_parameter(
    parameter: str,
    value: Any,
    reference: Optional[ReferenceRange],
    unit: str = "mV",
) -> ParameterClassification:
    """Classify one measured NCS value; amplitude unit depends on the study type."""
    number = _as_number(value)
    ref_str = str(reference) if reference is not None else None

    if parameter not in NCS_PARAMETERS or reference is None:
        return ParameterClassification(
            parameter=parameter,
            value=number,
            message="Unknown parameter.",
            reference_range=ref_str,
        )

    if number is None:
        return ParameterClassification(
            parameter=parameter,
            message=f"No numeric {parameter} value to classify.",
            reference_range=ref_str,
        )

    above = number > reference.max
    below = number < reference.min

    if parameter == "latency":
        if above:
            message = f"Prolonged latency ({number:g} ms): suggests demyelinating neuropathy."
        elif below:
            message = f"Unusually short latency ({number:g} ms): possible hyperexcitability."
        else:
            message = f"Normal latency ({number:g} ms)."
    elif parameter == "velocity":
        if below:
            message = f"Reduced conduction velocity ({number:g} m/s): indicates demyelinating neuropathy."
        elif above:
            message = f"Increased conduction velocity ({number:g} m/s): unusual finding."
        else:
            message = f"Normal conduction velocity ({number:g} m/s)."
    else:
        if below:
            message = f"Reduced amplitude ({number:g} {unit}): possible axonal loss or conduction block."
        elif above:
            message = f"Increased amplitude ({number:g} {unit}): possible hyperexcitability syndrome."
        else:
            message = f"Normal amplitude ({number:g} {unit})."

    if above:
        direction = AbnormalityDirection.ABOVE_NORMAL
    elif below:
        direction = AbnormalityDirection.BELOW_NORMAL
    else:
        direction = AbnormalityDirection.NORMAL

    return ParameterClassification(
        parameter=parameter,
        value=number,
        message=message,
        abnormal=above or below,
        direction=direction,
        reference_range=ref_str,
    )


def classify_nerve(
    reference: NerveReference,
    measurement: NerveConductionMeasurement,
) -> Dict[str, ParameterClassification]:
    """Classify latency, amplitude and velocity of one nerve study."""
    return {
        parameter: classify_parameter(
            parameter,
            measurement.value_of(parameter),
            reference.range_for(parameter),
            unit=reference.amplitude_unit,
        )
        for parameter in NCS_PARAMETERS
    }


def is_nerve_abnormal(reference: NerveReference, measurement: NerveConductionMeasurement) -> bool:
    return any(c.abnormal for c in classify_nerve(reference, measurement).values())
