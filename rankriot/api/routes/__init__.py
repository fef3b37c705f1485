"""API route modules"""
from rankriot.api.routes.projects import router as projects_router
from rankriot.api.routes.scans import router as scans_router
from rankriot.api.routes.billing import router as billing_router
from rankriot.api.routes.webhooks import router as webhooks_router
from rankriot.api.routes.profiles import router as profiles_router
from rankriot.api.routes.dashboard import router as dashboard_router

__all__ = [
    "projects_router", "scans_router", "billing_router", "webhooks_router", "profiles_router",
    "dashboard_router",
]
