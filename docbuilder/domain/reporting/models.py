from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ReportMeta:
    """
    Назначение:
        Метаданные запуска команды.
    """

    run_id: str
    command: str
    started_at: str
    finished_at: str | None = None
    duration_ms: int | None = None
    csv_path: str | None = None
    output_path: str | None = None
    items_limit: int | None = None
    items_truncated: bool = False


@dataclass
class ReportSummary:
    """
    Назначение:
        Счётчики построения документов.
    """

    rows_total: int = 0
    documents_written: int = 0
    rows_failed: int = 0
    documents_without_location: int = 0


@dataclass
class ReportItem:
    """
    Назначение:
        Диагностика по конкретной строке CSV.
    """

    status: str
    line_no: int | None
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class ReportEnvelope:
    """
    Назначение:
        Корневой объект отчёта.
    """

    status: str
    meta: ReportMeta
    summary: ReportSummary
    items: list[ReportItem] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
