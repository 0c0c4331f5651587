from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from docbuilder.domain.error_codes import ErrorCode


@dataclass(eq=False)
class DocumentBuilderError(Exception):
    """
    Назначение:
        Базовая ошибка построения документов из CSV.
    Инварианты/гарантии:
        - Исходная причина (csv.Error, IndexError и т.п.) доступна через __cause__.
        - line_no указывает на строку CSV, если она известна.
    """

    code: ErrorCode
    message: str
    line_no: int | None = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.line_no is None:
            return self.message
        return f"{self.message} (line {self.line_no})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.code.category,
            "code": self.code.value,
            "message": self.message,
            "line_no": self.line_no,
            "details": self.details or {},
        }


class FormatError(DocumentBuilderError):
    """
    Назначение:
        Нет заголовка, битый CSV или ширина записи не совпадает с заголовком.
        Фатальна для всего потока.
    """


class ConfigurationError(DocumentBuilderError):
    """
    Назначение:
        Конфигурация не подходит к данным (индекс unique-id вне записи,
        неизвестный маппер имён полей и т.п.).
    """


__all__ = ["DocumentBuilderError", "FormatError", "ConfigurationError"]
