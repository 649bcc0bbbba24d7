import structlog
from typing import List
from fastapi import APIRouter, Depends
from prometheus_client import Counter

from emgdx.core.config import settings
from emgdx.data.store import ReferenceDataStore, get_reference_store
from emgdx.schemas.clinical import ClinicalEvaluation, DiagnosticCriteria
from emgdx.schemas.cts import CarpalTunnelAnalysis, CarpalTunnelStudy
from emgdx.schemas.diagnosis import DiagnosisRequest, IntegratedDiagnosis
from emgdx.schemas.emg import EMGResultSet
from emgdx.schemas.pattern import PatternMatchResult
from emgdx.services.criteria_evaluator import DiagnosticCriteriaEvaluator
from emgdx.services.cts_analyzer import CarpalTunnelAnalyzer
from emgdx.services.integrated_diagnosis import IntegratedDiagnosisBuilder
from emgdx.services.pattern_scorer import PatternScorer

router = APIRouter()
logger = structlog.get_logger()

EVALUATIONS = Counter(
    "emgdx_evaluations_total",
    "Engine evaluations served, by kind",
    ["kind"],
)


@router.post("/patterns/score", response_model=List[PatternMatchResult])
async def score_patterns(
    payload: EMGResultSet,
    store: ReferenceDataStore = Depends(get_reference_store)
):
    EVALUATIONS.labels(kind="score").inc()
    return PatternScorer.score_patterns(payload, store.patterns, store)


@router.post("/criteria", response_model=DiagnosticCriteria)
async def evaluate_criteria(
    payload: ClinicalEvaluation,
    store: ReferenceDataStore = Depends(get_reference_store)
):
    EVALUATIONS.labels(kind="criteria").inc()
    return DiagnosticCriteriaEvaluator(store).evaluate(payload)


@router.post("/diagnosis", response_model=IntegratedDiagnosis)
async def build_diagnosis(
    payload: DiagnosisRequest,
    store: ReferenceDataStore = Depends(get_reference_store)
):
    """
    Full report: NCS patterns, needle EMG descriptors, ranked suggestions
    and, when the clinical exam is sent along, the EMG indication criteria.
    """
    EVALUATIONS.labels(kind="diagnosis").inc()
    builder = IntegratedDiagnosisBuilder(store, settings)
    return builder.build(payload.emg, payload.clinical)


@router.post("/carpal-tunnel/analyze", response_model=CarpalTunnelAnalysis)
async def analyze_carpal_tunnel(payload: CarpalTunnelStudy):
    """
    Comparative median nerve study graded from normal to very severe.
    """
    EVALUATIONS.labels(kind="carpal_tunnel").inc()
    return CarpalTunnelAnalyzer.analyze(payload)
