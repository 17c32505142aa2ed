"""
Aplicação FastAPI principal.
Define rotas, middlewares e configurações globais.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
import time

from src.core.config import get_settings
from src.core.exceptions import BaseAppException
from src.core.logging import log_request
from src.infrastructure.firestore.client import lifespan_firestore, check_firestore_connection
from src.api.routes import dashboard, jobs, health

settings = get_settings()


# ========================================
# LIFESPAN (startup/shutdown)
# ========================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Gerencia o ciclo de vida da aplicação.
    Executa setup no startup e cleanup no shutdown.
    """
    # ========== STARTUP ==========
    logger.info(f"🚀 Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    async with lifespan_firestore():
        logger.success("✅ Firestore ready")

        if not settings.is_firestore_configured:
            logger.warning("⚠️  No Firestore project/credentials configured, using ADC")

        logger.info("=" * 60)
        logger.info(f"  {settings.app_name} v{settings.app_version}")
        logger.info(f"  Listening on: http://{settings.api_host}:{settings.api_port}")
        logger.info(f"  Docs: http://{settings.api_host}:{settings.api_port}/docs")
        logger.info("=" * 60)
        logger.success(f"✅ {settings.app_name} is ready!")

        yield

    # ========== SHUTDOWN ==========
    logger.info("Shutting down application...")
    logger.success("👋 Goodbye!")


# ========================================
# APP INSTANCE
# ========================================

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Métricas por fase do bot de jogos no WhatsApp (Firestore)",
    lifespan=lifespan,
    debug=settings.debug,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
)


# ========================================
# MIDDLEWARES
# ========================================

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Compressão GZIP
app.add_middleware(GZipMiddleware, minimum_size=1000)


# Middleware de logging de requisições
@app.middleware("http")
async def log_requests_middleware(request: Request, call_next):
    """Loga todas as requisições HTTP com tempo de processamento"""

    start_time = time.time()

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000

    # Skip health checks para não poluir logs
    if not request.url.path.startswith("/health"):
        log_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms
        )

    response.headers["X-Process-Time"] = f"{duration_ms:.2f}ms"

    return response


# ========================================
# EXCEPTION HANDLERS
# ========================================

@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    """Handler para exceções customizadas da aplicação"""

    logger.error(f"Application error: {exc.message}", extra=exc.details)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "details": exc.details
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler para erros de validação do Pydantic"""

    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(f"Validation error: {errors}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation error",
            "details": errors
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handler global para exceções não tratadas"""

    logger.exception(f"Unhandled exception: {exc}")

    # Em produção, não expõe detalhes do erro
    if settings.is_production:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred"
            }
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": str(exc),
            "type": type(exc).__name__
        }
    )


# ========================================
# ROTAS
# ========================================

app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["Jobs"])


# Root endpoint
@app.get("/", include_in_schema=False)
async def root():
    """Endpoint raiz"""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs" if settings.is_development else "disabled",
        "health": "/health"
    }


# ========================================
# DEBUG INFO (apenas desenvolvimento)
# ========================================

if settings.is_development:
    @app.get("/debug/config", include_in_schema=False)
    async def debug_config():
        """Mostra configurações (sem secrets)"""
        return settings.model_dump_safe()

    @app.get("/debug/firestore", include_in_schema=False)
    async def debug_firestore():
        """Testa conexão com o Firestore"""
        return {
            "firestore_connected": await check_firestore_connection(),
            "project": settings.google_cloud_project,
            "database": settings.firestore_database,
            "emulator": settings.firestore_emulator_host
        }
