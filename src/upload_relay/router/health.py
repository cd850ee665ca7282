"""Router – liveness probe for the relay."""

from fastapi import APIRouter

from src.upload_relay.schemas.health import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """The relay holds no state, so being able to answer means being ready."""
    return HealthResponse()
