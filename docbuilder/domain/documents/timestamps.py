from __future__ import annotations

from datetime import datetime
from typing import Callable

from docbuilder.common.time import getUtcNow
from docbuilder.domain.documents.models import Document


class NullTimestampStamper:
    """
    Назначение:
        Документы без поля времени генерации (по умолчанию).
    """

    def stamp(self, document: Document) -> None:
        return None


class FieldTimestampStamper:
    """
    Назначение:
        Записывает время генерации документа (ISO 8601) в заданное поле.

    Входные данные:
        field_name: str
            Имя поля; маппер имён полей к нему не применяется.
        clock: Callable[[], datetime]
            Источник времени, по умолчанию UTC.
    """

    def __init__(self, field_name: str, clock: Callable[[], datetime] = getUtcNow) -> None:
        self.field_name = field_name
        self.clock = clock

    def stamp(self, document: Document) -> None:
        document.content[self.field_name] = self.clock().isoformat()
