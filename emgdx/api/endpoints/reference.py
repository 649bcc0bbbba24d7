import structlog
from typing import List
from fastapi import APIRouter, Depends, HTTPException

from emgdx.core.exceptions import PatternNotFoundError, UnknownNerveError
from emgdx.data.store import ReferenceDataStore, get_reference_store
from emgdx.schemas.emg import NerveConductionMeasurement
from emgdx.schemas.ncs import NerveClassification
from emgdx.schemas.pattern import PatternSummary
from emgdx.services.ncs_pattern_detector import NcsPatternDetector
from emgdx.services.parameter_classifier import classify_nerve

router = APIRouter()
logger = structlog.get_logger()


@router.get("/patterns", response_model=List[PatternSummary])
async def list_patterns(store: ReferenceDataStore = Depends(get_reference_store)):
    return [PatternSummary.from_pattern(p) for p in store.patterns]


@router.get("/patterns/{pattern_id}", response_model=PatternSummary)
async def get_pattern(
    pattern_id: str,
    store: ReferenceDataStore = Depends(get_reference_store)
):
    try:
        pattern = store.pattern(pattern_id)
    except PatternNotFoundError:
        raise HTTPException(status_code=404, detail=f"Pattern '{pattern_id}' not found")
    return PatternSummary.from_pattern(pattern)


@router.post("/nerves/{nerve_id}/classify", response_model=NerveClassification)
async def classify_nerve_study(
    nerve_id: str,
    measurement: NerveConductionMeasurement,
    store: ReferenceDataStore = Depends(get_reference_store)
):
    """
    Inline feedback while a nerve study is being typed in.
    """
    try:
        reference = store.nerve(nerve_id)
    except UnknownNerveError:
        logger.warning("unknown_nerve_requested", nerve_id=nerve_id)
        raise HTTPException(status_code=404, detail=f"No reference values for nerve '{nerve_id}'")

    return NerveClassification(
        nerve_id=nerve_id,
        parameters=classify_nerve(reference, measurement),
        pattern=NcsPatternDetector.detect_pattern(reference, measurement),
    )
