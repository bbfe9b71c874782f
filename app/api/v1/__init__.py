"""API v1 routes. Every route counts against the general rate limit."""

from fastapi import APIRouter, Depends

from app.api.v1 import auth, health, master_data, posts, roles, users
from app.core.rate_limit import rate_limit

router = APIRouter(dependencies=[Depends(rate_limit("general"))])
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(roles.router, prefix="/roles", tags=["roles"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
router.include_router(master_data.router, prefix="/master-data", tags=["master-data"])
