from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from docbuilder.config.settings import Settings
from docbuilder.domain.reporting.collector import ReportCollector, asdict_report


def createEmptyReport(runId: str, command: str, configSources: list[str], csvPath: str | None) -> ReportCollector:
    """
    Назначение:
        Создаёт отчёт-скелет запуска с путём к входному CSV и источниками настроек.
    """
    collector = ReportCollector(run_id=runId, command=command)
    collector.meta.csv_path = csvPath
    if configSources:
        collector.set_context("config", {"sources": configSources})
    return collector


def describeDocumentOptions(settings: Settings) -> dict[str, Any]:
    """
    Назначение:
        Параметры построения документов, с которыми реально шёл запуск.
        Попадают в context.options отчёта, чтобы по отчёту было видно,
        какие колонки считались широтой/долготой и куда писалась геоточка.
    """
    return {
        "unique_id_field": settings.unique_id_field,
        "latitude_field_names": settings.latitude_field_names,
        "longitude_field_names": settings.longitude_field_names,
        "location_field_name": settings.location_field_name,
        "field_name_mapper": settings.field_name_mapper,
        "timestamp_field": settings.timestamp_field,
        "csv_delimiter": settings.csv_delimiter,
        "csv_encoding": settings.csv_encoding,
        "skip_invalid_rows": settings.skip_invalid_rows,
    }


def finalizeReport(
    report: ReportCollector,
    durationMs: int,
    logFile: str | None,
    outputPath: str | None,
    documentOptions: dict[str, Any],
) -> None:
    """
    Назначение:
        Финализирует отчёт запуска.

    Поведение:
        - meta.output_path: файл документов или None (документы шли в stdout).
        - context.options: параметры построения документов.
        - context.runtime.log_file: лог команды.
        - статус выводится из счётчиков, если команда не задала его явно.
    """
    report.meta.output_path = outputPath
    report.set_context("options", documentOptions)
    report.set_context("runtime", {"log_file": logFile})
    report.finish(duration_ms=durationMs)


def reportFileName(command: str, runId: str) -> str:
    return f"report_{command}_{runId}.json"


def writeReportJson(report: ReportCollector, reportDir: str) -> str:
    """
    Назначение:
        Записывает отчёт в <reportDir>/report_<command>_<runId>.json.

    Выходные данные:
        str
            Путь к файлу отчёта.
    """
    Path(reportDir).mkdir(parents=True, exist_ok=True)
    reportPath = str(Path(reportDir) / reportFileName(report.meta.command, report.meta.run_id))

    data: dict[str, Any] = asdict_report(report.build())

    with open(reportPath, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return reportPath
