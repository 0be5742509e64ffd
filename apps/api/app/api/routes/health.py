from fastapi import APIRouter

from app.schemas.attestation import HealthResponse

router = APIRouter(tags=["health"])

HEALTH_MESSAGE = "attestgate gateway"


@router.get("/health", response_model=HealthResponse, summary="Health")
@router.get("/api/health", response_model=HealthResponse, include_in_schema=False)
async def health() -> HealthResponse:
    return HealthResponse(ok=True, message=HEALTH_MESSAGE)
