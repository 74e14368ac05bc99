# -*- coding: utf-8 -*-
"""
Настройка логирования ExamHub на loguru.

Два вывода в stdout: обычный (с именем модуля, привязанным через
``configure_logger``) и системный (``system=True``) для статуса запуска.
Стандартный ``logging`` (uvicorn, sqlalchemy) перенаправляется в loguru.
"""
import logging
import os
import sys

from loguru import logger

# Шумные библиотеки, чьи записи не нужны в логе сервиса
MUTED_LOGGERS = ("httpx", "httpcore", "aiosqlite", "asyncio")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

SYSTEM_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>SYSTEM</cyan> | "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Перехватывает стандартные логи и перенаправляет их в loguru."""

    def emit(self, record):
        # Стартовые INFO uvicorn дублируют системный статус
        if record.name.startswith("uvicorn") and record.levelno == logging.INFO:
            return
        if record.name.startswith(MUTED_LOGGERS):
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(module=record.name).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


def _is_system(record) -> bool:
    return record["extra"].get("system") is True


def setup_logging(level: str = "INFO", debug: bool = False) -> None:
    """
    Пересобрать обработчики loguru.

    Args:
        level: Минимальный уровень
        debug: Показывать TRACE и подробные трассировки
    """
    logger.remove()
    logger.configure(extra={"module": "examhub"})

    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=True,
        backtrace=debug,
        diagnose=debug,
        filter=lambda record: not _is_system(record)
        and (record["level"].name != "TRACE" or debug),
    )
    logger.add(
        sys.stdout,
        format=SYSTEM_FORMAT,
        level=level,
        colorize=True,
        backtrace=False,
        diagnose=False,
        filter=_is_system,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


setup_logging(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    debug=os.getenv("DEBUG", "false").lower() == "true",
)


def configure_logger(name: str = "examhub"):
    """
    Логгер с привязанным именем модуля.

    Args:
        name: Имя модуля, выводится в колонке источника

    Returns:
        loguru.Logger: Настроенный логгер
    """
    return logger.bind(module=name)


def get_logger(name: str = "examhub"):
    """Получает настроенный логгер."""
    return configure_logger(name)


def get_system_logger():
    """Логгер для системных сообщений без файловых путей."""
    return logger.bind(system=True)
