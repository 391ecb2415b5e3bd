# glowback/errors.py
from __future__ import annotations


class GlowBackError(Exception):
    """Базовая ошибка приложения; str(e) показывается пользователю как есть."""


class ValidationError(GlowBackError):
    """Выбран не графический файл."""


class EncodingError(GlowBackError):
    """Файл не удалось прочитать или закодировать."""


class RemoteServiceError(GlowBackError):
    """Сбой внешнего сервиса, включая пустой ответ без изображения."""


class ConfigError(GlowBackError):
    pass
