from __future__ import annotations

import logging
from typing import TextIO

from docbuilder.domain.documents.builder import RowDocumentBuilder
from docbuilder.domain.exceptions import ConfigurationError, FormatError
from docbuilder.domain.ports.documents import DocumentSinkProtocol
from docbuilder.domain.reporting.collector import ReportCollector
from docbuilder.infra.logging.setup import logEvent, logRowFailure


class BuildDocumentsUseCase:
    """
    Назначение/ответственность:
        Use-case построения документов: CSV -> курсор -> sink, со счётчиками
        и диагностикой в отчёте.

    Поведение:
        - FormatError прерывает обработку (exit code 2).
        - ConfigurationError по строке: пропуск строки при skip_invalid_rows,
          иначе прерывание (exit code 2).
    """

    def __init__(self, skip_invalid_rows: bool, report_items_limit: int) -> None:
        self.skip_invalid_rows = skip_invalid_rows
        self.report_items_limit = report_items_limit

    def run(
        self,
        stream: TextIO,
        builder: RowDocumentBuilder,
        sink: DocumentSinkProtocol,
        logger: logging.Logger,
        run_id: str,
        report: ReportCollector,
    ) -> int:
        report.meta.items_limit = self.report_items_limit
        summary = report.summary

        try:
            cursor = builder.open(stream)
        except FormatError as exc:
            report.add_failure(exc)
            report.status = "FAILED"
            logEvent(logger, logging.ERROR, run_id, "csv", f"CSV format error: {exc}")
            return 2

        location_field = cursor.location_field
        report.set_context(
            "header",
            {
                "columns": list(cursor.headers),
                "latitude_index": cursor.geo_columns.latitude_index,
                "longitude_index": cursor.geo_columns.longitude_index,
                "location_field": location_field,
            },
        )
        logEvent(logger, logging.INFO, run_id, "csv", f"Header: {len(cursor.headers)} columns, location_field={location_field}")

        while True:
            try:
                if not cursor.has_next():
                    break
                summary.rows_total += 1
                document = cursor.next()
            except ConfigurationError as exc:
                report.add_failure(exc)
                logRowFailure(logger, run_id, exc, skipped=self.skip_invalid_rows)
                if self.skip_invalid_rows:
                    continue
                report.status = "FAILED"
                return 2
            except FormatError as exc:
                report.add_failure(exc)
                report.status = "FAILED"
                logRowFailure(logger, run_id, exc, skipped=False)
                return 2

            sink.write(document)
            summary.documents_written += 1
            if location_field is not None and location_field not in document.content:
                summary.documents_without_location += 1

        logEvent(
            logger,
            logging.INFO,
            run_id,
            "document",
            f"Documents written: {summary.documents_written}, failed rows: {summary.rows_failed}",
        )
        return 0
