from fastapi import APIRouter
from emgdx.api.endpoints import evaluations, reference

api_router = APIRouter()

# Register the endpoints
api_router.include_router(reference.router, tags=["Reference Data"])
api_router.include_router(evaluations.router, tags=["Evaluations"])
