# hazardscan/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI
import time
import uuid

from hazardscan.core.config import settings
from hazardscan.core.exceptions import HazardScanError
from hazardscan.core.identity import JWTIdentityProvider
from hazardscan.core.logging import logger
from hazardscan.db.database import create_engine, create_session_factory, init_db, close_db
from hazardscan.api.v1.router import api_router
from hazardscan.services.analysis_service import HazardAnalyzer
from hazardscan.services.image_service import ImageNormalizer
from hazardscan.services.storage_service import S3BlobPublisher
from hazardscan.services.usage_service import UsageRecorder


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting HazardScan API")
    engine = create_engine(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        echo=settings.DB_ECHO,
    )
    if settings.AUTO_CREATE_TABLES:
        await init_db(engine)

    session_factory = create_session_factory(engine)
    openai_client = AsyncOpenAI(
        api_key=settings.OPENAI_API_KEY,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.OPENAI_TIMEOUT_SECONDS,
        max_retries=0,
    )

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.identity_provider = JWTIdentityProvider(
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        jwks_url=settings.JWT_JWKS_URL,
        issuer=settings.JWT_ISSUER,
        audience=settings.JWT_AUDIENCE,
        role_claim=settings.ROLE_CLAIM,
    )
    app.state.normalizer = ImageNormalizer(max_side=settings.IMAGE_MAX_SIDE, quality=settings.IMAGE_QUALITY)
    app.state.publisher = S3BlobPublisher(
        bucket=settings.S3_BUCKET,
        access_key=settings.S3_ACCESS_KEY,
        secret_key=settings.S3_SECRET_KEY,
        endpoint=settings.S3_ENDPOINT,
        region=settings.S3_REGION,
        public_base_url=settings.S3_PUBLIC_BASE_URL,
        object_acl=settings.S3_OBJECT_ACL,
        timeout=settings.STORAGE_TIMEOUT_SECONDS,
    )
    app.state.analyzer = HazardAnalyzer(openai_client, model=settings.OPENAI_MODEL)
    app.state.usage_recorder = UsageRecorder(session_factory)

    yield

    # Shutdown
    logger.info("Shutting down HazardScan API")
    await openai_client.close()
    await close_db(engine)


app = FastAPI(
    title="HazardScan API",
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=("/api/docs" if settings.ENVIRONMENT == "development" else None),
    redoc_url=("/api/redoc" if settings.ENVIRONMENT == "development" else None),
    lifespan=lifespan
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Tag each request with an id, time it and log the outcome"""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as exc:
        response = await global_exception_handler(request, exc)
    process_time = time.time() - start_time

    response.headers["X-Process-Time"] = str(process_time)
    response.headers["X-Request-ID"] = request_id
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        extra={"request_id": request_id, "duration_ms": round(process_time * 1000, 1)},
    )
    return response


# Include routers
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.exception_handler(HazardScanError)
async def hazardscan_exception_handler(request: Request, exc: HazardScanError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message}", extra={"request_id": getattr(request.state, "request_id", None)})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query parameters are client errors"""
    details = [
        {
            "loc": ".".join(str(p) for p in error.get("loc", ())),
            "msg": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"ok": False, "error": "invalid_input", "message": "Invalid request", "details": details},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.exception("Unhandled exception while handling request", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": "internal_error"},
    )
