from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from db_mongo import ensure_indexes, get_db
from settings import settings

from server.src.modules.analytics_api import router as analytics_router
from server.src.modules.auth_api import router as auth_router
from server.src.modules.auth_config import get_auth_settings
from server.src.modules.errors import ApiError, InternalError
from server.src.modules.logging_helpers import logger
from server.src.modules.potions_api import router as potions_router


# ---------- Lifespan (startup/shutdown) ----------
@asynccontextmanager
async def lifespan(app: FastAPI):
    if get_auth_settings().uses_default_secret:
        logger.warning("JWT_SECRET is not set; using the development secret.")
    ensure_indexes()
    yield

app = FastAPI(title="Potions API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Errors ----------
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if isinstance(exc, InternalError):
        logger.error("%s %s failed: %s", request.method, request.url.path, type(exc).__name__)
        return JSONResponse({"error": InternalError.message}, status_code=exc.status_code)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # never echo the submitted values back, they may hold a password
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse({"errors": errors}, status_code=400)


@app.exception_handler(PyMongoError)
async def store_error_handler(request: Request, exc: PyMongoError):
    logger.exception("%s %s database failure", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": "Database error"}, status_code=500)


# ---------- Routes ----------
app.include_router(potions_router)
app.include_router(auth_router)
app.include_router(analytics_router)


# ---------- Ops ----------
@app.get("/health")
def health():
    try:
        get_db().list_collection_names()
        return {"status": "ok", "mongo": "connected"}
    except PyMongoError:
        logger.exception("health check failed")
        return JSONResponse({"status": "degraded", "mongo": "unreachable"}, status_code=503)


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=3000)
