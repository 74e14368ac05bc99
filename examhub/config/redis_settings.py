"""
Настройки конфигурации Redis для сервиса тестирования.

Этот модуль предоставляет настройки подключения к Redis и конфигурации TTL кэша.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """Настройки конфигурации Redis."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Игнорируем лишние переменные окружения
    )

    # Настройки подключения
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    # Настройки пула подключений
    redis_max_connections: int = 10
    redis_retry_on_timeout: bool = True
    redis_socket_timeout: float = 2.0

    # Настройки TTL кэша (в секундах)
    cache_ttl_analytics: int = 300  # 5 минут

    # Префиксы ключей кэша
    cache_prefix_analytics: str = "analytics"


# Глобальный экземпляр настроек Redis
redis_settings = RedisSettings()


def get_redis_connection_params() -> dict:
    """
    Получить параметры подключения к Redis для redis-py.

    Returns:
        Словарь с параметрами подключения
    """
    params = {
        "host": redis_settings.redis_host,
        "port": redis_settings.redis_port,
        "db": redis_settings.redis_db,
        "max_connections": redis_settings.redis_max_connections,
        "retry_on_timeout": redis_settings.redis_retry_on_timeout,
        "socket_timeout": redis_settings.redis_socket_timeout,
        "socket_connect_timeout": redis_settings.redis_socket_timeout,
        "decode_responses": True,
    }

    if redis_settings.redis_password:
        params["password"] = redis_settings.redis_password

    return params
