from __future__ import annotations

from dataclasses import asdict
from typing import Any

from docbuilder.common.time import getNowIso
from docbuilder.domain.exceptions import DocumentBuilderError
from docbuilder.domain.reporting.models import ReportEnvelope, ReportItem, ReportMeta, ReportSummary


class ReportCollector:
    """
    Назначение/ответственность:
        Сборщик отчёта одного запуска команды.
    """

    def __init__(self, run_id: str, command: str, started_at: str | None = None) -> None:
        self.meta = ReportMeta(
            run_id=run_id,
            command=command,
            started_at=started_at or getNowIso(),
        )
        self.summary = ReportSummary()
        self.items: list[ReportItem] = []
        self.context: dict[str, Any] = {}
        self.status: str | None = None

    def set_context(self, name: str, value: dict[str, Any]) -> None:
        self.context[name] = value

    def add_failure(self, error: DocumentBuilderError) -> None:
        """
        Назначение:
            Учитывает строку, не ставшую документом, и сохраняет диагностику
            с учётом лимита items_limit.
        """
        self.summary.rows_failed += 1
        limit = self.meta.items_limit
        if limit is not None and len(self.items) >= limit:
            self.meta.items_truncated = True
            return
        self.items.append(
            ReportItem(
                status="FAILED",
                line_no=error.line_no,
                code=error.code.value,
                message=error.message,
                details=dict(error.details),
            )
        )

    def finish(self, finished_at: str | None = None, duration_ms: int | None = None) -> None:
        self.meta.finished_at = finished_at or getNowIso()
        self.meta.duration_ms = duration_ms
        if self.status is None:
            self.status = self._derive_status()

    def build(self) -> ReportEnvelope:
        return ReportEnvelope(
            status=self.status or self._derive_status(),
            meta=self.meta,
            summary=self.summary,
            items=self.items,
            context=self.context,
        )

    def _derive_status(self) -> str:
        if self.summary.rows_failed:
            return "PARTIAL" if self.summary.documents_written else "FAILED"
        return "SUCCESS"


def asdict_report(envelope: ReportEnvelope) -> dict[str, Any]:
    return asdict(envelope)
