"""
Cliente do Firestore (google-cloud-firestore, API assíncrona).
Cria o AsyncClient a partir das configurações e executa as chamadas do SDK
com retry para erros transitórios.

Documentação: https://cloud.google.com/python/docs/reference/firestore/latest
"""

import os
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

import google.auth
from google.api_core import exceptions as google_exceptions
from google.auth.exceptions import DefaultCredentialsError
from google.cloud import firestore
from google.oauth2 import service_account
from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.core.config import get_settings
from src.core.exceptions import DataSourceError, FirestoreNotConfiguredError

settings = get_settings()

T = TypeVar("T")

EMULATOR_PROJECT = "demo-game-dashboard"

# 429 / 500 / 502 / 503 / 504 (ResourceExhausted e DeadlineExceeded são subclasses)
TRANSIENT_ERRORS = (
    google_exceptions.TooManyRequests,
    google_exceptions.InternalServerError,
    google_exceptions.BadGateway,
    google_exceptions.ServiceUnavailable,
    google_exceptions.GatewayTimeout,
)


def create_firestore_client() -> firestore.AsyncClient:
    """
    AsyncClient a partir das configurações.

    - emulador: FIRESTORE_EMULATOR_HOST, sem credenciais reais
    - GOOGLE_APPLICATION_CREDENTIALS: JSON da service account
    - senão: Application Default Credentials
    """
    if settings.firestore_emulator_host:
        # O SDK só enxerga o emulador pela variável de ambiente
        os.environ["FIRESTORE_EMULATOR_HOST"] = settings.firestore_emulator_host
        return firestore.AsyncClient(
            project=settings.google_cloud_project or EMULATOR_PROJECT,
            database=settings.firestore_database
        )

    try:
        if settings.google_application_credentials:
            credentials = service_account.Credentials.from_service_account_file(
                settings.google_application_credentials
            )
            project = settings.google_cloud_project or credentials.project_id
        else:
            credentials, project = google.auth.default()
            project = settings.google_cloud_project or project
    except (DefaultCredentialsError, FileNotFoundError, ValueError) as e:
        logger.error(f"Firestore credentials not found: {e}")
        raise FirestoreNotConfiguredError(str(e)) from e

    if not project:
        raise FirestoreNotConfiguredError(
            "Project ID not found. Set GOOGLE_CLOUD_PROJECT or "
            "GOOGLE_APPLICATION_CREDENTIALS"
        )

    return firestore.AsyncClient(
        project=project,
        credentials=credentials,
        database=settings.firestore_database
    )


# ========================================
# CHAMADAS AO SDK
# ========================================

@retry(
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True
)
async def _attempt(call: Callable[[], Awaitable[T]]) -> T:
    return await call()


async def firestore_call(collection: str, call: Callable[[], Awaitable[T]]) -> T:
    """
    Executa a chamada (factory, para poder repetir).
    Erros transitórios são repetidos; o que sobrar vira DataSourceError.
    """
    try:
        return await _attempt(call)
    except google_exceptions.GoogleAPICallError as e:
        logger.error(f"Firestore call on {collection} failed: {e.code} {e.message}")
        raise DataSourceError(collection, e.message or type(e).__name__, status=e.code) from e
    except google_exceptions.GoogleAPIError as e:
        logger.error(f"Firestore call on {collection} failed: {e}")
        raise DataSourceError(collection, str(e) or type(e).__name__) from e


def snapshot_to_dict(snapshot: Any) -> Dict[str, Any]:
    """Campos do documento + ``id``."""
    return {**(snapshot.to_dict() or {}), "id": snapshot.id}


async def fetch_all(collection: str, query: Any) -> List[Dict[str, Any]]:
    """Executa a query e devolve os documentos como dicts."""
    snapshots = await firestore_call(
        collection,
        lambda: query.get(timeout=settings.firestore_timeout_seconds)
    )
    return [snapshot_to_dict(snapshot) for snapshot in snapshots]


async def count_all(collection: str, query: Any) -> int:
    """COUNT() no servidor, sem baixar os documentos."""
    aggregation = query.count(alias="total")
    results = await firestore_call(
        collection,
        lambda: aggregation.get(timeout=settings.firestore_timeout_seconds)
    )
    for row in results:
        for result in row:
            if result.alias == "total":
                return int(result.value)
    return 0


# ========================================
# SINGLETON / LIFECYCLE
# ========================================

_firestore: Optional[firestore.AsyncClient] = None


def get_firestore() -> firestore.AsyncClient:
    """Cliente compartilhado (criado na primeira chamada)."""
    global _firestore
    if _firestore is None:
        _firestore = create_firestore_client()
        logger.info(
            f"Firestore client ready (project={_firestore.project}, "
            f"database={settings.firestore_database})"
        )
    return _firestore


async def check_firestore_connection() -> bool:
    """
    Verifica se o Firestore responde (lê 1 documento de processing_jobs).
    Útil para health checks.
    """
    try:
        client = get_firestore()
        collection = settings.jobs_collection
        await fetch_all(collection, client.collection(collection).limit(1))
        logger.debug("Firestore connection OK")
        return True
    except Exception as e:
        logger.error(f"Firestore connection failed: {e}")
        return False


async def close_firestore() -> None:
    """Descarta o cliente compartilhado, se criado."""
    global _firestore
    if _firestore is not None:
        logger.info("Closing Firestore client...")
        _firestore = None
        logger.success("Firestore client closed")


@asynccontextmanager
async def lifespan_firestore():
    """
    Context manager para lifecycle do Firestore no FastAPI.

    Uso no main.py:
        @asynccontextmanager
        async def lifespan(app: FastAPI):
            async with lifespan_firestore():
                yield
    """
    logger.info("Starting Firestore...")

    if settings.firestore_check_on_startup:
        if not await check_firestore_connection():
            logger.error("Failed to connect to Firestore on startup")
            raise RuntimeError("Firestore connection failed")

    yield

    logger.info("Shutting down Firestore...")
    await close_firestore()
