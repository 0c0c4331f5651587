from __future__ import annotations

from typing import Callable

from docbuilder.domain.error_codes import ErrorCode
from docbuilder.domain.exceptions import ConfigurationError
from docbuilder.domain.ports.documents import FieldNameMapperProtocol


class NoOpFieldNameMapper:
    """
    Назначение:
        Маппер по умолчанию: имя поля без изменений.
    """

    def map(self, name: str) -> str:
        return name


class LowerCaseFieldNameMapper:
    def map(self, name: str) -> str:
        return name.lower()


class UpperCaseFieldNameMapper:
    def map(self, name: str) -> str:
        return name.upper()


class PrefixFieldNameMapper:
    """
    Назначение:
        Добавляет фиксированный префикс к каждому имени поля.
    """

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def map(self, name: str) -> str:
        return f"{self.prefix}{name}"


_MAPPERS: dict[str, Callable[[], FieldNameMapperProtocol]] = {
    "noop": NoOpFieldNameMapper,
    "lowercase": LowerCaseFieldNameMapper,
    "uppercase": UpperCaseFieldNameMapper,
}


def list_field_name_mappers() -> list[str]:
    return sorted(_MAPPERS)


def get_field_name_mapper(name: str | None) -> FieldNameMapperProtocol:
    """
    Назначение:
        Возвращает маппер по имени из конфигурации.

    Поведение:
        - None/пустое имя -> NoOpFieldNameMapper.
        - Неизвестное имя -> ConfigurationError.
    """
    key = (name or "noop").strip().lower()
    factory = _MAPPERS.get(key)
    if factory is None:
        raise ConfigurationError(
            code=ErrorCode.UNKNOWN_FIELD_NAME_MAPPER,
            message=f"Unknown field name mapper: {name}",
            details={"available": list_field_name_mappers()},
        )
    return factory()
