# -*- coding: utf-8 -*-
"""
Точка входа FastAPI-приложения ExamHub.
"""

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from examhub.api.v1.admin import router as admin_router
from examhub.api.v1.auth import router as auth_router
from examhub.api.v1.history import router as history_router
from examhub.api.v1.questions import router as questions_router
from examhub.api.v1.results import router as results_router
from examhub.api.v1.tests import router as tests_router
from examhub.api.v1.topics import router as topics_router
from examhub.clients.database_client import AsyncSessionLocal, init_db, ping_db
from examhub.config.logger import configure_logger, get_system_logger
from examhub.config.settings import settings
from examhub.service.cache_service import cache_service
from examhub.service.users import ensure_default_admin
from examhub.utils.exceptions import APIException, ErrorCode

logger = configure_logger()
system_logger = get_system_logger()

app = FastAPI(
    title="ExamHub API",
    description="API для сборки, прохождения и анализа тестов",
    version="0.1.0",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
    openapi_url="/api/v1/openapi.json",
    openapi_tags=[
        {"name": "🔐 Аутентификация", "description": "Регистрация, вход и токены"},
        {"name": "🧪 Тесты", "description": "Сборка, чтение и отправка тестов"},
        {"name": "📊 Результаты", "description": "Разбор результатов и рекомендации"},
        {"name": "📈 История", "description": "История и сводная аналитика студента"},
        {"name": "📚 Темы", "description": "Таксономия предметов и тем"},
        {"name": "❓ Вопросы", "description": "Банк вопросов"},
        {"name": "👨‍💼 Администрирование", "description": "Распределение, каталог и пользователи"},
    ],
)

# Настройка CORS из настроек
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.get_cors_methods(),
    allow_headers=settings.get_cors_headers(),
)


# Middleware для логирования всех запросов
@app.middleware("http")
async def log_all_requests(request: Request, call_next):
    if request.url.path.startswith("/api/"):
        logger.info(f"🌐 API запрос: {request.method} {request.url.path}")

    try:
        response = await call_next(request)

        if request.url.path.startswith("/api/"):
            if response.status_code >= 400:
                logger.warning(
                    f"❌ API ошибка: {request.method} {request.url.path} → {response.status_code}"
                )
            else:
                logger.info(
                    f"✅ API ответ: {request.method} {request.url.path} → {response.status_code}"
                )

        return response

    except Exception as e:
        if request.url.path.startswith("/api/"):
            logger.error(
                f"💥 Критическая ошибка API: {request.method} {request.url.path}"
            )
            error_msg = str(e)
            if len(error_msg) > 1000:
                error_msg = error_msg[:1000] + "... (содержимое обрезано)"
            logger.exception(f"Детали ошибки: {error_msg}")
        raise


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    if exc.is_client_error:
        logger.warning(f"{exc.error_code}: {exc.detail}")
    else:
        logger.error(f"{exc.error_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(
        f"Необработанная ошибка: {request.method} {request.url.path}"
    )
    content = {
        "detail": "Внутренняя ошибка сервера",
        "error_code": ErrorCode.INTERNAL_ERROR.value,
    }
    if settings.debug:
        content["debug"] = f"{type(exc).__name__}: {exc}"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content
    )


# Подключаем роутеры
app.include_router(auth_router, prefix="/api/v1/auth", tags=["🔐 Аутентификация"])
app.include_router(tests_router, prefix="/api/v1/tests", tags=["🧪 Тесты"])
app.include_router(results_router, prefix="/api/v1/results", tags=["📊 Результаты"])
app.include_router(history_router, prefix="/api/v1/history", tags=["📈 История"])
app.include_router(topics_router, prefix="/api/v1/topics", tags=["📚 Темы"])
app.include_router(questions_router, prefix="/api/v1/questions", tags=["❓ Вопросы"])
app.include_router(admin_router, prefix="/api/v1/admin", tags=["👨‍💼 Администрирование"])


@app.on_event("startup")
async def startup_event():
    db_status = "❌"
    redis_status = "❌"
    admin_status = "❌"

    system_logger.info("🔧 Инициализация сервисов...")
    system_logger.info(f"⚙️ Конфигурация: {settings.get_config_source()}")

    try:
        await ping_db()
        db_status = "✅"
        logger.info("✅ База данных подключена")
    except Exception as e:
        logger.error(f"❌ Ошибка базы данных: {e}")
        raise

    await init_db()

    async with AsyncSessionLocal() as session:
        await ensure_default_admin(session)
    admin_status = "✅"

    try:
        await cache_service.get_redis()
        redis_status = "✅"
        logger.info("✅ Redis подключен и готов")
    except Exception as e:
        # Redis не критичен: аналитика считается без кэша
        logger.warning(f"⚠️ Продолжаем работу без Redis кэширования: {e}")
        redis_status = "⚠️"

    system_logger.info(
        f"📊 Статус сервисов: БД {db_status}  Redis {redis_status}  Админ {admin_status}"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Обработчик завершения приложения"""
    system_logger.info("🛑 Завершение работы ExamHub API")
    await cache_service.close()


@app.get("/api/v1")
async def api_root():
    """Корневой эндпоинт API."""
    return {"message": "ExamHub API работает", "version": app.version}


@app.get("/api/v1/health")
async def api_health():
    """Проверка живости приложения."""
    return {"status": "ok"}


def run() -> None:
    """Запуск сервера uvicorn с параметрами из настроек."""
    uvicorn.run(
        "examhub.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    run()
