"""
Creator Campaign Service Main Application

FastAPI application for brand campaigns, creator matching, the approval
pipeline and campaign ROI.
Port: 8260
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from core.auth_dependencies import AuthContext, optional_auth_context, require_auth_context
from core.config import get_settings
from core.logger import setup_service_logger

from .factory import CreatorCampaignServiceFactory
from .models import (
    ApplyRequest,
    CampaignAnalytics,
    CampaignCreateRequest,
    CampaignCreatorLink,
    CampaignListResponse,
    CampaignResponse,
    CampaignStats,
    CampaignUpdateRequest,
    HealthResponse,
    InviteRequest,
    LinkTransitionRequest,
    LivenessResponse,
    PackageRecommendation,
    ReadinessResponse,
    RoiReport,
    SuggestionsResponse,
    TrackEventKind,
    TrackRequest,
    TransitionResult,
)
from .protocols import (
    AuthorizationError,
    CreatorCampaignServiceError,
    EngineValidationError,
    InvalidCampaignStateError,
    InvariantViolationError,
    BudgetRangeError,
    ResourceNotFoundError,
)
from .routes_registry import SERVICE_METADATA, get_route_summary

settings = get_settings()
logger = logging.getLogger(__name__)

# Service configuration
SERVICE_NAME = "creator_campaign_service"
SERVICE_PORT = settings.services.service_port
SERVICE_VERSION = SERVICE_METADATA["version"]
API_PREFIX = "/api/v1/creator-campaigns"

# Track startup time for uptime calculation
startup_time = time.time()

# Global factory instance
factory: Optional[CreatorCampaignServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global factory

    setup_service_logger(SERVICE_NAME, config=settings.logging)
    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")

    # Initialize factory
    factory = CreatorCampaignServiceFactory(settings)
    await factory.initialize()

    yield

    # Cleanup
    logger.info(f"Shutting down {SERVICE_NAME}")
    await factory.close()
    factory = None


# Create FastAPI application
app = FastAPI(
    title="Creator Campaign Service",
    description="Campaign matching, approval pipeline and ROI for the brand/creator marketplace",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# ====================
# Exception Handlers
# ====================


def _error_response(status_code: int, exc: CreatorCampaignServiceError) -> JSONResponse:
    content = {"detail": str(exc), "error_code": exc.error_code}
    field = getattr(exc, "field", None)
    if field:
        content["field"] = field
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(EngineValidationError)
async def validation_error_handler(request: Request, exc: EngineValidationError):
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(BudgetRangeError)
async def budget_range_handler(request: Request, exc: BudgetRangeError):
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(ResourceNotFoundError)
async def not_found_handler(request: Request, exc: ResourceNotFoundError):
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(InvariantViolationError)
async def invariant_violation_handler(request: Request, exc: InvariantViolationError):
    return _error_response(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(InvalidCampaignStateError)
async def invalid_state_handler(request: Request, exc: InvalidCampaignStateError):
    return _error_response(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    return _error_response(status.HTTP_403_FORBIDDEN, exc)


@app.exception_handler(CreatorCampaignServiceError)
async def service_error_handler(request: Request, exc: CreatorCampaignServiceError):
    logger.error(f"Unhandled service error: {exc}")
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


# ====================
# Dependencies
# ====================


def get_service():
    """Get creator campaign service from factory"""
    if not factory:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return factory.service


async def require_brand(auth: AuthContext = Depends(require_auth_context)) -> AuthContext:
    """Caller must be a brand account"""
    if not auth.is_brand:
        raise AuthorizationError("Brand account required")
    return auth


async def require_creator(auth: AuthContext = Depends(require_auth_context)) -> AuthContext:
    """Caller must be a creator account"""
    if not auth.is_creator:
        raise AuthorizationError("Creator account required")
    return auth


# ====================
# Health Endpoints
# ====================


@app.get(f"{API_PREFIX}/health")
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    dependencies = {}

    if factory:
        try:
            db_healthy = await factory.repository.health_check()
            dependencies["postgres"] = "healthy" if db_healthy else "unhealthy"
        except Exception as e:
            logger.warning(f"Postgres health check failed: {e}")
            dependencies["postgres"] = "unhealthy"

        if factory.nats_client:
            dependencies["nats"] = "healthy" if factory.nats_client.is_connected else "unhealthy"
        else:
            dependencies["nats"] = "not_configured"

    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        dependencies=dependencies,
    )


@app.get("/health/ready", response_model=ReadinessResponse, tags=["Health"])
async def readiness_check():
    """Readiness check endpoint"""
    checks = {}
    details = {}

    if factory:
        try:
            db_healthy = await factory.repository.health_check()
            checks["database"] = db_healthy
            details["database"] = "Connected" if db_healthy else "Connection failed"
        except Exception as e:
            checks["database"] = False
            details["database"] = str(e)

        if factory.nats_client:
            checks["nats"] = factory.nats_client.is_connected
            details["nats"] = "Connected" if factory.nats_client.is_connected else "Disconnected"
        else:
            checks["nats"] = True  # Optional
            details["nats"] = "Not configured (optional)"
    else:
        checks["factory"] = False
        details["factory"] = "Factory not initialized"

    ready = all(checks.get(k, False) for k in ["database"])

    return ReadinessResponse(
        ready=ready,
        checks=checks,
        details=details,
    )


@app.get("/health/live", response_model=LivenessResponse, tags=["Health"])
async def liveness_check():
    """Liveness check endpoint"""
    return LivenessResponse(
        alive=True,
        uptime_seconds=time.time() - startup_time,
    )


@app.get(f"{API_PREFIX}/info", tags=["Health"])
async def service_info():
    """Service metadata and route summary"""
    return {**SERVICE_METADATA, **get_route_summary()}


# ====================
# Campaign Endpoints
# ====================


@app.post(
    f"{API_PREFIX}/campaigns",
    response_model=CampaignResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Campaigns"],
)
async def create_campaign(
    request: CampaignCreateRequest,
    service=Depends(get_service),
    auth: AuthContext = Depends(require_brand),
):
    """Create a campaign (draft by default)"""
    campaign = await service.create_campaign(request, brand_id=auth.user_id)
    return CampaignResponse(campaign=campaign, message="Campaign created successfully")


@app.get(f"{API_PREFIX}/campaigns", response_model=CampaignListResponse, tags=["Campaigns"])
async def list_campaigns(
    service=Depends(get_service),
    auth: AuthContext = Depends(require_brand),
):
    """List the calling brand's campaigns"""
    campaigns = await service.list_campaigns(auth.user_id)
    return CampaignListResponse(campaigns=campaigns, total=len(campaigns))


@app.get(
    f"{API_PREFIX}/campaigns/{{campaign_id}}",
    response_model=CampaignResponse,
    tags=["Campaigns"],
)
async def get_campaign(
    campaign_id: str,
    service=Depends(get_service),
    auth: AuthContext = Depends(require_brand),
):
    campaign = await service.get_campaign(campaign_id, auth.user_id)
    return CampaignResponse(campaign=campaign)


@app.patch(
    f"{API_PREFIX}/campaigns/{{campaign_id}}",
    response_model=CampaignResponse,
    tags=["Campaigns"],
)
async def update_campaign(
    campaign_id: str,
    request: CampaignUpdateRequest,
    service=Depends(get_service),
    auth: AuthContext = Depends(require_brand),
):
    """Partially update a campaign"""
    campaign = await service.update_campaign(campaign_id, auth.user_id, request)
    return CampaignResponse(campaign=campaign, message="Campaign updated successfully")


# ====================
# Matching Endpoints
# ====================


@app.get(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/suggested",
    response_model=SuggestionsResponse,
    tags=["Matching"],
)
async def suggested_creators(
    campaign_id: str,
    service=Depends(get_service),
    auth: AuthContext = Depends(require_brand),
):
    """Ranked creator suggestions"""
    suggested = await service.match_candidates(campaign_id, auth.user_id)
    return SuggestionsResponse(campaign_id=campaign_id, suggested=suggested)


@app.get(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/smart-package",
    response_model=PackageRecommendation,
    tags=["Matching"],
)
async def smart_package(
    campaign_id: str,
    creator_id: Optional[str] = Query(None),
    service=Depends(get_service),
    auth: AuthContext = Depends(require_brand),
):
    """Recommend one of the creator's packages for this campaign"""
    return await service.recommend_package(campaign_id, auth.user_id, creator_id)


# ====================
# Link Pipeline Endpoints
# ====================


@app.patch(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/creators/{{creator_id}}",
    response_model=TransitionResult,
    tags=["Pipeline"],
)
async def transition_link(
    campaign_id: str,
    creator_id: str,
    request: LinkTransitionRequest,
    service=Depends(get_service),
    auth: AuthContext = Depends(require_brand),
):
    """Move a creator's link to a new status; approval creates the order"""
    return await service.transition_link(
        campaign_id,
        auth.user_id,
        creator_id,
        request.status,
        note=request.note,
        package_id=request.package_id,
    )


@app.post(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/invite",
    response_model=CampaignCreatorLink,
    status_code=status.HTTP_201_CREATED,
    tags=["Pipeline"],
)
async def invite_creator(
    campaign_id: str,
    request: InviteRequest,
    service=Depends(get_service),
    auth: AuthContext = Depends(require_brand),
):
    return await service.invite_creator(
        campaign_id, auth.user_id, request.creator_id, message=request.message
    )


@app.post(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/apply",
    response_model=CampaignCreatorLink,
    status_code=status.HTTP_201_CREATED,
    tags=["Pipeline"],
)
async def apply_to_campaign(
    campaign_id: str,
    request: ApplyRequest,
    service=Depends(get_service),
    auth: AuthContext = Depends(require_creator),
):
    return await service.apply_to_campaign(
        campaign_id, auth.user_id, message=request.message
    )


# ====================
# Reporting Endpoints
# ====================


@app.get(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/roi",
    response_model=RoiReport,
    tags=["Reporting"],
)
async def campaign_roi(
    campaign_id: str,
    service=Depends(get_service),
    auth: AuthContext = Depends(require_brand),
):
    """Funnel, spend and per-creator breakdown"""
    return await service.get_funnel_and_roi(campaign_id, auth.user_id)


@app.get(
    f"{API_PREFIX}/campaigns/{{campaign_id}}/analytics",
    response_model=CampaignAnalytics,
    tags=["Reporting"],
)
async def campaign_analytics(
    campaign_id: str,
    service=Depends(get_service),
    auth: AuthContext = Depends(require_brand),
):
    return await service.get_campaign_analytics(campaign_id, auth.user_id)


@app.post(
    f"{API_PREFIX}/track/{{kind}}",
    response_model=CampaignStats,
    tags=["Reporting"],
)
async def track_event(
    kind: TrackEventKind,
    request: TrackRequest,
    service=Depends(get_service),
    auth: Optional[AuthContext] = Depends(optional_auth_context),
):
    """Count a view/click/save/order; anonymous callers allowed"""
    return await service.track_campaign_event(request.campaign_id, kind)


# ====================
# Main Entry Point
# ====================


def main():
    """Run the service"""
    import uvicorn

    uvicorn.run(
        "microservices.creator_campaign_service.main:app",
        host=settings.services.service_host,
        port=SERVICE_PORT,
        reload=settings.debug,
        log_level=settings.logging.log_level.lower(),
    )


if __name__ == "__main__":
    main()
