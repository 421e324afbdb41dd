import os
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from vahaan.api.routes import api_router
from vahaan.db import Base, engine
from vahaan.errors import MarketplaceError, StoreError
from vahaan.identity import GuestIdentityResolver
from vahaan.services import error_messages
from vahaan.utils import logger, now_utc
import vahaan.models  # noqa: F401 ensure models are imported so tables are known

APP_ENV = os.getenv("APP_ENV", "development")
DEV_ORIGINS = ["http://localhost:5173", "http://localhost:5174", "http://localhost:3000"]


def cors_origins():
    configured = os.getenv("CORS_ORIGINS")
    if configured:
        return [o.strip() for o in configured.split(",") if o.strip()]
    return [] if APP_ENV == "production" else DEV_ORIGINS


# create FastAPI instance
app = FastAPI(title="Vahaan Bazaar API", version="1.0.0")
app.state.identity_resolver = GuestIdentityResolver()

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method, request.url.path, response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = error_messages(exc.errors(), skip_prefixes=("body", "query", "path"))
    logger.warning("%s %s rejected: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=400, content={"message": "Validation error", "errors": errors})


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store error on %s %s", request.method, request.url.path, exc_info=exc)
    error = StoreError(detail=str(exc))
    content = error.to_dict()
    if APP_ENV != "production":
        content["error"] = error.detail
    return JSONResponse(status_code=error.status_code, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={
            "message": "Route not found",
            "path": request.url.path,
            "method": request.method,
            "timestamp": now_utc().isoformat(),
        })
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    content = {"message": "Internal server error"}
    if APP_ENV != "production":
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.on_event("startup")
def on_startup_create_tables():
    # Ensure database tables are created on startup
    Base.metadata.create_all(bind=engine)
    logger.info("Vahaan Bazaar API ready (%s)", APP_ENV)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 5000))
    uvicorn.run(app, host="0.0.0.0", port=port)
