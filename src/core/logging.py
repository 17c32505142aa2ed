"""
Sistema de logging centralizado usando Loguru.
Configuração de logs estruturados, rotação e interceptação do logging padrão.
"""

import sys
import logging
from pathlib import Path
from typing import Optional
from loguru import logger

from src.core.config import get_settings

settings = get_settings()


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    enable_json: bool = False
) -> None:
    """
    Configura o sistema de logging da aplicação.

    Args:
        log_level: Nível de log (DEBUG, INFO, WARNING, ERROR)
        log_file: Caminho para arquivo de log (opcional)
        enable_json: Se True, usa formato JSON estruturado
    """

    # Remove handler padrão do loguru
    logger.remove()

    level = log_level or settings.log_level

    # ========================================
    # CONSOLE (stdout)
    # ========================================
    if enable_json or settings.is_production:
        log_format = (
            "{{"
            '"time": "{time:YYYY-MM-DD HH:mm:ss.SSS}", '
            '"level": "{level}", '
            '"module": "{name}", '
            '"function": "{function}", '
            '"line": {line}, '
            '"message": "{message}"'
            "}}"
        )
    else:
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

    logger.add(
        sys.stdout,
        format=log_format,
        level=level,
        colorize=not enable_json,
        backtrace=True,
        diagnose=settings.is_development
    )

    # ========================================
    # ARQUIVO (se especificado)
    # ========================================
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file,
            format=log_format,
            level=level,
            rotation="100 MB",
            retention="30 days",
            compression="zip",
            enqueue=True,
            backtrace=True,
            diagnose=False
        )

    # ========================================
    # INTEGRAÇÃO COM LOGGING PADRÃO
    # ========================================
    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            frame, depth = logging.currentframe(), 2
            while frame and frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in [
        "uvicorn", "uvicorn.access",
        "google.auth", "google.api_core"
    ]:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False

    logger.info(
        f"Logging configured: level={level}, environment={settings.environment}"
    )


def mask_phone_number(phone: str, show_last_digits: int = 4) -> str:
    """
    Mascara número de telefone para logs (LGPD compliance).

    Ex: "5511999991234" -> "*********1234"
    """
    if len(phone) <= show_last_digits:
        return "*" * len(phone)

    return "*" * (len(phone) - show_last_digits) + phone[-show_last_digits:]


def log_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """Loga requisição HTTP de forma estruturada."""
    log_data = {
        "method": method,
        "path": path,
        "status": status_code,
        "duration_ms": round(duration_ms, 2)
    }

    if status_code < 400:
        logger.bind(**log_data).info(f"{method} {path} - {status_code}")
    elif status_code < 500:
        logger.bind(**log_data).warning(f"{method} {path} - {status_code}")
    else:
        logger.bind(**log_data).error(f"{method} {path} - {status_code}")


def log_aggregation(
    strategy: str,
    documents: int,
    phases: int,
    duration_ms: float,
    game_id: Optional[str] = None,
    period: Optional[str] = None
) -> None:
    """Loga uma passada de agregação do dashboard."""
    log_data = {
        "strategy": strategy,
        "documents": documents,
        "phases": phases,
        "duration_ms": round(duration_ms, 2),
        "game_id": game_id,
        "period": period
    }

    logger.bind(**log_data).info(
        f"Aggregation {strategy}: {documents} docs -> {phases} phases "
        f"({duration_ms:.0f}ms)"
    )


# Configuração automática ao importar
if settings.is_development:
    setup_logging(enable_json=False)
else:
    setup_logging(enable_json=True, log_file="logs/app.log")
