from __future__ import annotations

from typing import Protocol

from docbuilder.domain.documents.models import Document


class FieldNameMapperProtocol(Protocol):
    """
    Назначение/ответственность:
        Преобразование имени поля перед вставкой в документ
        (нормализация регистра, префиксы и т.п.).
    """

    def map(self, name: str) -> str:
        """
        Контракт:
            Чистая функция: одинаковый вход -> одинаковый выход.
        """
        ...


class TimestampStamperProtocol(Protocol):
    """
    Назначение/ответственность:
        Хук, добавляющий в документ поле времени генерации.
    """

    def stamp(self, document: Document) -> None:
        """
        Контракт:
            Добавляет в document.content ноль или одно поле.
        """
        ...


class DocumentSinkProtocol(Protocol):
    """
    Назначение/ответственность:
        Получатель готовых документов (файл, stdout, клиент индексации).
    """

    def write(self, document: Document) -> None:
        ...
