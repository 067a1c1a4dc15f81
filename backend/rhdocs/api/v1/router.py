from fastapi import APIRouter

from rhdocs.api.v1.endpoints import auth, employees, health, notifications, reference, registration

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(employees.router)
api_router.include_router(reference.router)
api_router.include_router(registration.router)
api_router.include_router(notifications.router)
