from __future__ import annotations

import json
from typing import Any, TextIO

from docbuilder.domain.documents.models import Document


def document_to_line(document: Document) -> str:
    """
    Назначение:
        Сериализация документа в одну JSON-строку.

    Выходные данные:
        str
            {"_id": ..., "_source": {...}}; GeoPoint -> {"lat": ..., "lon": ...}.
    """
    payload: dict[str, Any] = {"_id": document.document_id, "_source": document.to_source()}
    return json.dumps(payload, ensure_ascii=False)


class JsonLinesDocumentSink:
    """
    Назначение/ответственность:
        Пишет документы построчно (JSON Lines) в открытый текстовый поток.
    Взаимодействия:
        Поток открывает и закрывает вызывающий код.
    """

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self.written = 0

    def write(self, document: Document) -> None:
        self.stream.write(document_to_line(document))
        self.stream.write("\n")
        self.written += 1
