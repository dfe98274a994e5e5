"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from app.api.v1 import (
    admin,
    appointments,
    auth,
    chat,
    health,
    realtime,
    records,
    triage,
)

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Authentication
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["auth"],
)

# Triage
api_router.include_router(
    triage.router,
    prefix="/triage",
    tags=["triage"],
)

# Chat history
api_router.include_router(
    chat.router,
    prefix="/chat",
    tags=["chat"],
)

# Appointments
api_router.include_router(
    appointments.router,
    prefix="/appointments",
    tags=["appointments"],
)

# Medical records
api_router.include_router(
    records.router,
    prefix="/records",
    tags=["records"],
)

# Administration
api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["admin"],
)

# Realtime presence and messaging
api_router.include_router(
    realtime.router,
    prefix="/realtime",
    tags=["realtime"],
)
