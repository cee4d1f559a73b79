from fastapi import APIRouter, Depends

from dependencies.auth import get_current_user

from .assistant import router as assistant_router
from .clones import router as clones_router
from .health import router as health_router
from .seeds import router as seeds_router
from .support import router as support_router


# Public API router (health)
api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])


# Protected routers: include with a router-level dependency so all routes
# require authentication by default. Use get_current_user dependency to
# surface the OAuth2 security scheme in OpenAPI as well.
protected_deps = [Depends(get_current_user)]
api_router.include_router(assistant_router, dependencies=protected_deps)
api_router.include_router(seeds_router, dependencies=protected_deps)
api_router.include_router(clones_router, dependencies=protected_deps)
api_router.include_router(support_router, dependencies=protected_deps)
