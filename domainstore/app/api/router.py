# domainstore/app/api/router.py
from fastapi import APIRouter

from domainstore.app.api.endpoints import admin, auth, data, domain_users

api_router = APIRouter()
# Order matters: the fixed /admin and /users prefixes must win over /{domain}
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(domain_users.router, tags=["domain-users"])
api_router.include_router(data.router, tags=["data"])
