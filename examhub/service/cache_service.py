"""
Сервис кэширования для интеграции с Redis.

Недоступность Redis не ломает запросы: ошибки логируются, а операции
чтения ведут себя как промах кэша.
"""

import json
from typing import Any, Optional

import redis.asyncio as redis
from redis.asyncio import Redis

from examhub.config.logger import configure_logger
from examhub.config.redis_settings import (get_redis_connection_params,
                                           redis_settings)

logger = configure_logger(__name__)


class CacheService:
    """Высокоуровневый сервис кэширования для операций с Redis."""

    def __init__(self):
        self._redis: Optional[Redis] = None
        self._connection_params = get_redis_connection_params()

    async def get_redis(self) -> Redis:
        """
        Получить подключение к Redis (ленивая инициализация).

        Returns:
            Экземпляр подключения к Redis
        """
        if self._redis is None:
            client = redis.Redis(**self._connection_params)
            try:
                await client.ping()
            except Exception as e:
                logger.error(f"Ошибка подключения к Redis: {e}")
                await client.aclose()
                raise
            self._redis = client
            logger.info("Подключение к Redis установлено успешно")

        return self._redis

    async def close(self):
        """Закрыть подключение к Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Подключение к Redis закрыто")

    def _serialize(self, data: Any) -> str:
        return json.dumps(data, default=str, ensure_ascii=False)

    def _deserialize(self, data: str) -> Any:
        return json.loads(data)

    def build_key(self, prefix: str, *parts: Any) -> str:
        """Построить ключ кэша вида ``prefix:part1:part2``."""
        return f"{prefix}:{':'.join(str(part) for part in parts)}"

    async def get(self, key: str) -> Optional[Any]:
        """
        Получить значение из кэша.

        Returns:
            Кэшированное значение или None, если его нет или Redis недоступен
        """
        try:
            redis_client = await self.get_redis()
            data = await redis_client.get(key)
            if data is None:
                return None
            return self._deserialize(data)
        except Exception as e:
            logger.warning(f"Ошибка получения ключа кэша '{key}': {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Установить значение в кэш; возвращает False при ошибке."""
        try:
            redis_client = await self.get_redis()
            serialized_value = self._serialize(value)
            if ttl:
                await redis_client.setex(key, ttl, serialized_value)
            else:
                await redis_client.set(key, serialized_value)
            return True
        except Exception as e:
            logger.warning(f"Ошибка установки ключа кэша '{key}': {e}")
            return False

    async def delete(self, key: str) -> bool:
        try:
            redis_client = await self.get_redis()
            result = await redis_client.delete(key)
            return result > 0
        except Exception as e:
            logger.warning(f"Ошибка удаления ключа кэша '{key}': {e}")
            return False


# Глобальный экземпляр сервиса кэширования
cache_service = CacheService()


def analytics_cache_key(student_id: int) -> str:
    """Ключ кэша исторической аналитики студента."""
    return cache_service.build_key(
        redis_settings.cache_prefix_analytics, "student", student_id
    )


async def invalidate_student_analytics(student_id: int) -> None:
    """Сбросить кэш аналитики после новой отправки теста."""
    await cache_service.delete(analytics_cache_key(student_id))
    logger.debug(f"Кэш аналитики студента {student_id} сброшен")
