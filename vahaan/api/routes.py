# vahaan/api/routes.py
import os
import time

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db, ping
from ..identity import Identity, get_current_user
from ..utils import now_utc
from .contacts import router as contacts_router
from .feedback import router as feedback_router
from .listings import bikes_router, scooters_router
from .service_requests import router as services_router

VERSION = "1.0.0"
STARTED_AT = time.monotonic()

router = APIRouter()


@router.get("/")
def root():
    return {
        "message": "Welcome to VAHAAN BAZAAR API",
        "version": VERSION,
        "endpoints": {
            "auth": "/api/auth",
            "bikes": "/api/bikes",
            "scooters": "/api/scooters",
            "contacts": "/api/contacts",
            "services": "/api/services",
            "feedback": "/api/feedback",
            "health": "/api/health",
        },
    }


@router.get("/api/health")
def health(db: Session = Depends(get_db)):
    return {
        "message": "Server is healthy",
        "status": "OK",
        "timestamp": now_utc().isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": os.getenv("APP_ENV", "development"),
        "database": "connected" if ping(db) else "disconnected",
    }


@router.get("/api/auth/profile")
def profile(user: Identity = Depends(get_current_user)):
    return {"message": "Profile retrieved successfully", "data": {"user": user.to_dict()}}


api_router = APIRouter()
api_router.include_router(router)
api_router.include_router(bikes_router)
api_router.include_router(scooters_router)
api_router.include_router(services_router)
api_router.include_router(feedback_router)
api_router.include_router(contacts_router)
