"""
Creator Campaign Service Routes Registry

Defines service metadata and the route table exposed by the service.
"""

SERVICE_METADATA = {
    "service_name": "creator_campaign_service",
    "version": "1.0.0",
    "tags": ["creator-campaign", "marketplace", "v1"],
    "capabilities": [
        "campaign_management",
        "creator_matching",
        "approval_pipeline",
        "package_recommendation",
        "campaign_roi",
    ],
}

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": "/health/ready", "methods": ["GET"], "description": "Readiness check"},
    {"path": "/health/live", "methods": ["GET"], "description": "Liveness check"},
    {"path": "/api/v1/creator-campaigns/health", "methods": ["GET"], "description": "Service health check (API v1)"},
    {"path": "/api/v1/creator-campaigns/info", "methods": ["GET"], "description": "Service metadata"},
    {"path": "/api/v1/creator-campaigns/campaigns", "methods": ["GET", "POST"], "description": "List/create campaigns"},
    {"path": "/api/v1/creator-campaigns/campaigns/{campaign_id}", "methods": ["GET", "PATCH"], "description": "Get/update campaign"},
    {"path": "/api/v1/creator-campaigns/campaigns/{campaign_id}/suggested", "methods": ["GET"], "description": "Suggested creators"},
    {"path": "/api/v1/creator-campaigns/campaigns/{campaign_id}/smart-package", "methods": ["GET"], "description": "Package recommendation"},
    {"path": "/api/v1/creator-campaigns/campaigns/{campaign_id}/creators/{creator_id}", "methods": ["PATCH"], "description": "Transition creator link"},
    {"path": "/api/v1/creator-campaigns/campaigns/{campaign_id}/invite", "methods": ["POST"], "description": "Invite creator"},
    {"path": "/api/v1/creator-campaigns/campaigns/{campaign_id}/apply", "methods": ["POST"], "description": "Apply to campaign"},
    {"path": "/api/v1/creator-campaigns/campaigns/{campaign_id}/roi", "methods": ["GET"], "description": "Funnel and ROI"},
    {"path": "/api/v1/creator-campaigns/campaigns/{campaign_id}/analytics", "methods": ["GET"], "description": "Engagement analytics"},
    {"path": "/api/v1/creator-campaigns/track/{kind}", "methods": ["POST"], "description": "Track engagement"},
]


def get_route_summary():
    """Route metadata published by the info endpoint"""
    return {
        "route_count": len(ROUTES),
        "routes": ROUTES,
        "api_version": "v1",
        "base_path": "/api/v1/creator-campaigns",
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "get_route_summary"]
