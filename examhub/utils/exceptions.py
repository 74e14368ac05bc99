# -*- coding: utf-8 -*-
"""
Этот модуль определяет пользовательские исключения для API сервиса тестирования.
Эти исключения используются для обработки общих сценариев ошибок с соответствующими HTTP статус-кодами и сообщениями.

Клиентские ошибки (4xx) сообщают о проблеме во входных данных, серверные (5xx)
о недостающей конфигурации или сбое хранилища.
"""

from enum import Enum

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    """Перечисление для уникальных кодов ошибок."""

    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INSUFFICIENT_QUESTIONS = "INSUFFICIENT_QUESTIONS"
    ANSWER_COUNT_MISMATCH = "ANSWER_COUNT_MISMATCH"
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
    CREATION_FAILED = "CREATION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class APIException(HTTPException):
    """Базовый класс для пользовательских исключений API."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str,
        headers: dict | None = None,
    ):
        """
        Инициализирует APIException с кодом статуса, деталями и кодом ошибки.

        Args:
            status_code (int): HTTP код статуса.
            detail (str): Сообщение об ошибке.
            error_code (str): Уникальный код ошибки.
            headers (dict, optional): Дополнительные заголовки.
        """
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

    def __str__(self) -> str:
        return str(self.detail)

    @property
    def is_client_error(self) -> bool:
        return self.status_code < 500


class NotFoundError(APIException):
    """Вызывается, когда ресурс не найден."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str | int = None,
        details: str | None = None,
    ):
        """
        Инициализирует NotFoundError.

        Args:
            resource_type (str): Тип ресурса (например, "Test", "Topic").
            resource_id (str or int, optional): ID ресурса.
            details (str, optional): Дополнительные детали об ошибке.
        """
        detail = f"{resource_type} не найден"
        if resource_id is not None:
            detail = f"{resource_type} {resource_id} не найден"
        if details:
            detail = f"{detail}: {details}"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=ErrorCode.NOT_FOUND,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(APIException):
    """Вызывается, когда ресурс уже существует или возникает конфликт."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=ErrorCode.CONFLICT,
        )


class PermissionDeniedError(APIException):
    """Вызывается, когда у пользователя недостаточно прав."""

    def __init__(self, detail: str = "Недостаточно прав"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=ErrorCode.PERMISSION_DENIED,
        )


class ValidationError(APIException):
    """Вызывается, когда входные данные недействительны."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=ErrorCode.VALIDATION_ERROR,
        )


class InsufficientQuestionsError(APIException):
    """
    Пул вопросов не может покрыть запрошенную квоту.

    Args:
        topic (str): Тема (или объединение тем), в которой не хватило вопросов.
        required (int): Сколько вопросов требовалось.
        available (int): Сколько вопросов удалось выбрать.
    """

    def __init__(self, topic: str, required: int, available: int):
        self.topic = topic
        self.required = required
        self.available = available
        self.shortfall = required - available
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Недостаточно вопросов по теме '{topic}': "
                f"требуется {required}, доступно {available}"
            ),
            error_code=ErrorCode.INSUFFICIENT_QUESTIONS,
        )


class AnswerCountMismatchError(APIException):
    """Количество ответов не совпадает с количеством вопросов теста."""

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Количество ответов ({received}) не совпадает "
                f"с количеством вопросов теста ({expected})"
            ),
            error_code=ErrorCode.ANSWER_COUNT_MISMATCH,
        )


class ConfigurationMissingError(APIException):
    """Отсутствуют данные настройки (например, активное распределение CET)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=ErrorCode.CONFIGURATION_MISSING,
        )


class PersistenceError(APIException):
    """Хранилище не подтвердило запись."""

    def __init__(
        self,
        detail: str = "Не удалось сохранить данные",
        error_code: str = ErrorCode.PERSISTENCE_FAILURE,
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code,
        )


class CreationFailedError(PersistenceError):
    """Не удалось сохранить новый тест."""

    def __init__(self, detail: str = "Не удалось создать тест"):
        super().__init__(detail=detail, error_code=ErrorCode.CREATION_FAILED)
