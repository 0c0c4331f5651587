from __future__ import annotations

import logging
import sys
import time
from contextlib import ExitStack
from dataclasses import replace
from pathlib import Path

import typer

from docbuilder.common.run_id import generate_run_id
from docbuilder.common.time import getDurationMs
from docbuilder.config.settings import Settings, loadSettings
from docbuilder.domain.documents.builder import RowDocumentBuilder
from docbuilder.domain.documents.field_names import get_field_name_mapper
from docbuilder.domain.documents.models import CsvFormat
from docbuilder.domain.documents.timestamps import FieldTimestampStamper, NullTimestampStamper
from docbuilder.domain.exceptions import DocumentBuilderError
from docbuilder.infra.artifacts.report_writer import (
    createEmptyReport,
    describeDocumentOptions,
    finalizeReport,
    writeReportJson,
)
from docbuilder.infra.logging.setup import (
    StderrTee,
    closeCommandLogger,
    createCommandLogger,
    logEvent,
)
from docbuilder.infra.sinks.jsonl_sink import JsonLinesDocumentSink
from docbuilder.usecases.build_documents_usecase import BuildDocumentsUseCase

app = typer.Typer(no_args_is_help=True, add_completion=False)


def ensureDir(path: str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def requireCsv(csvPath: str | None) -> None:
    """
    Назначение:
        Базовая проверка наличия CSV-файла.

    Поведение:
        - Если csvPath не задан или файл не существует — завершает процесс с exit code 2.
    """
    if not csvPath:
        typer.echo("ERROR: --csv is required", err=True)
        raise typer.Exit(code=2)

    p = Path(csvPath)
    if not p.exists() or not p.is_file():
        typer.echo(f"ERROR: CSV file not found: {csvPath}", err=True)
        raise typer.Exit(code=2)


def printRunHeader(runId: str, command: str, settings: Settings, sources: list[str]) -> None:
    """
    Назначение:
        Печатает сводку параметров запуска в stderr (stdout может быть занят документами).
    """
    typer.echo(
        f"run_id={runId} command={command} "
        f"unique_id_field={settings.unique_id_field} "
        f"field_name_mapper={settings.field_name_mapper} "
        f"location_field_name={settings.location_field_name} sources={sources}",
        err=True,
    )


def buildDocumentBuilder(settings: Settings, logger: logging.Logger | None = None) -> RowDocumentBuilder:
    """
    Назначение:
        Собирает RowDocumentBuilder из итоговых настроек.
    """
    if settings.timestamp_field:
        stamper = FieldTimestampStamper(settings.timestamp_field)
    else:
        stamper = NullTimestampStamper()
    return RowDocumentBuilder(
        unique_id_field=settings.unique_id_field,
        latitude_field_names=settings.latitude_field_names,
        longitude_field_names=settings.longitude_field_names,
        location_field_name=settings.location_field_name,
        field_name_mapper=get_field_name_mapper(settings.field_name_mapper),
        timestamp_stamper=stamper,
        csv_format=CsvFormat(delimiter=settings.csv_delimiter),
        logger=logger,
    )


def runWithReport(
    ctx: typer.Context,
    commandName: str,
    csvPath: str | None,
    runner,
    outputPath: str | None = None,
) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - создаёт логгер + файл лога
        - создаёт report.json skeleton
        - проверяет CSV
        - дублирует stderr в лог
        - гарантирует запись отчёта в finally

    Поведение:
        - Исключение из runner помечает отчёт FAILED, пишется в лог
          и пробрасывается дальше после записи отчёта.
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    sources = ctx.obj["sources"]

    startMonotonic = time.monotonic()

    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )

    report = createEmptyReport(runId=runId, command=commandName, configSources=sources, csvPath=csvPath)

    stderrTee = StderrTee(sys.stderr, logger, runId)
    sys.stderr = stderrTee

    exitCode: int | None = None

    try:
        logEvent(logger, logging.INFO, runId, "core", "Command started")
        printRunHeader(runId, commandName, settings, sources)

        try:
            requireCsv(csvPath)
        except typer.Exit:
            logEvent(logger, logging.ERROR, runId, "csv", "CSV is missing or not accessible")
            report.status = "FAILED"
            exitCode = 2
            return

        exitCode = runner(logger, report)

    except Exception as exc:
        report.status = "FAILED"
        logEvent(logger, logging.ERROR, runId, "core", f"Command failed: {exc!r}")
        raise

    finally:
        durationMs = getDurationMs(startMonotonic, time.monotonic())
        finalizeReport(
            report=report,
            durationMs=durationMs,
            logFile=logFilePath,
            outputPath=outputPath,
            documentOptions=describeDocumentOptions(settings),
        )
        reportPath = writeReportJson(report, settings.report_dir)
        logEvent(logger, logging.INFO, runId, "report", f"Report written: {reportPath}")

        sys.stderr = stderrTee.drain()
        closeCommandLogger(logger)

        if exitCode is not None:
            raise typer.Exit(code=exitCode)


def runBuildCommand(ctx: typer.Context, csvPath: str | None, outPath: str | None) -> None:
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]

    def execute(logger, report) -> int:
        try:
            builder = buildDocumentBuilder(settings, logger)
        except DocumentBuilderError as exc:
            logEvent(logger, logging.ERROR, runId, "config", f"Invalid configuration: {exc}")
            typer.echo(f"ERROR: {exc}", err=True)
            report.status = "FAILED"
            return 2

        usecase = BuildDocumentsUseCase(
            skip_invalid_rows=settings.skip_invalid_rows,
            report_items_limit=settings.report_items_limit,
        )
        try:
            with ExitStack() as stack:
                stream = stack.enter_context(open(csvPath, "r", encoding=settings.csv_encoding, newline=""))
                if outPath:
                    ensureDir(str(Path(outPath).parent))
                    out = stack.enter_context(open(outPath, "w", encoding="utf-8", newline="\n"))
                else:
                    out = sys.stdout
                exitCode = usecase.run(
                    stream=stream,
                    builder=builder,
                    sink=JsonLinesDocumentSink(out),
                    logger=logger,
                    run_id=runId,
                    report=report,
                )
        except OSError as exc:
            logEvent(logger, logging.ERROR, runId, "csv", f"CSV read error: {exc}")
            typer.echo(f"ERROR: CSV read error: {exc}", err=True)
            report.status = "FAILED"
            return 2
        except (ValueError, LookupError) as exc:
            # UnicodeDecodeError вне курсора и неизвестное имя csv_encoding
            logEvent(logger, logging.ERROR, runId, "csv", f"CSV decode error: {exc}")
            typer.echo(f"ERROR: CSV decode error: {exc}", err=True)
            report.status = "FAILED"
            return 2

        if exitCode != 0:
            failure = report.items[-1].message if report.items else "build failed"
            typer.echo(f"ERROR: {failure} (see logs/report)", err=True)
        return exitCode

    runWithReport(ctx=ctx, commandName="build", csvPath=csvPath, runner=execute, outputPath=outPath)


def runHeadersCommand(ctx: typer.Context, csvPath: str | None) -> None:
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]

    def execute(logger, report) -> int:
        try:
            builder = buildDocumentBuilder(settings, logger)
            with open(csvPath, "r", encoding=settings.csv_encoding, newline="") as stream:
                cursor = builder.open(stream)
        except DocumentBuilderError as exc:
            report.add_failure(exc)
            report.status = "FAILED"
            logEvent(logger, logging.ERROR, runId, "csv", f"CSV format error: {exc}")
            typer.echo(f"ERROR: CSV format error: {exc}", err=True)
            return 2
        except (ValueError, LookupError) as exc:
            report.status = "FAILED"
            logEvent(logger, logging.ERROR, runId, "csv", f"CSV decode error: {exc}")
            typer.echo(f"ERROR: CSV decode error: {exc}", err=True)
            return 2

        for index, name in enumerate(cursor.headers):
            typer.echo(f"{index}\t{name}")
        geo = cursor.geo_columns
        typer.echo(f"latitude={geo.latitude_index} longitude={geo.longitude_index} location_field={cursor.location_field}")
        return 0

    runWithReport(ctx=ctx, commandName="headers", csvPath=csvPath, runner=execute)


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (UUID). If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    reportDir: str | None = typer.Option(None, "--report-dir", help="Directory for reports."),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - создаёт каталоги log/report
        - сохраняет всё в ctx.obj для подкоманд
    """
    if not runId:
        runId = generate_run_id()

    cliOverrides = {
        "log_level": logLevel,
        "log_dir": logDir,
        "report_dir": reportDir,
    }
    try:
        loaded = loadSettings(config_path=config, cli_overrides=cliOverrides)
    except DocumentBuilderError as exc:
        typer.echo(f"ERROR: invalid settings: {exc}", err=True)
        raise typer.Exit(code=2)

    ensureDir(loaded.settings.log_dir)
    ensureDir(loaded.settings.report_dir)

    ctx.obj = {
        "runId": runId,
        "settings": loaded.settings,
        "sources": loaded.sources_used,
        "configPath": config,
    }


def applyCommandOverrides(ctx: typer.Context, overrides: dict) -> None:
    """
    Назначение:
        Применяет параметры подкоманды поверх загруженных настроек.
    """
    explicit = {k: v for k, v in overrides.items() if v is not None}
    if not explicit:
        return
    settings: Settings = ctx.obj["settings"]
    ctx.obj["settings"] = replace(settings, **explicit)
    if "cli" not in ctx.obj["sources"]:
        ctx.obj["sources"] = [*ctx.obj["sources"], "cli"]


@app.command()
def build(
    ctx: typer.Context,
    csv: str | None = typer.Option(None, "--csv", help="Path to input CSV"),
    out: str | None = typer.Option(None, "--out", help="Output JSON Lines file (stdout if omitted)"),
    uniqueIdField: int | None = typer.Option(None, "--unique-id-field", help="Zero-based column index of the document id"),
    latitudeFieldNames: str | None = typer.Option(None, "--latitude-field-names", help="Comma separated latitude column names"),
    longitudeFieldNames: str | None = typer.Option(None, "--longitude-field-names", help="Comma separated longitude column names"),
    locationFieldName: str | None = typer.Option(None, "--location-field-name", help="Name of the composite geo field"),
    fieldNameMapper: str | None = typer.Option(None, "--field-name-mapper", help="noop|lowercase|uppercase"),
    timestampField: str | None = typer.Option(None, "--timestamp-field", help="Add generation timestamp under this field"),
    delimiter: str | None = typer.Option(None, "--delimiter", help="CSV delimiter"),
    skipInvalidRows: bool | None = typer.Option(None, "--skip-invalid-rows", help="Skip rows whose unique-id column is missing"),
):
    applyCommandOverrides(
        ctx,
        {
            "unique_id_field": uniqueIdField,
            "latitude_field_names": latitudeFieldNames,
            "longitude_field_names": longitudeFieldNames,
            "location_field_name": locationFieldName,
            "field_name_mapper": fieldNameMapper,
            "timestamp_field": timestampField,
            "csv_delimiter": delimiter,
            "skip_invalid_rows": skipInvalidRows,
        },
    )
    runBuildCommand(ctx, csv, out)


@app.command()
def headers(
    ctx: typer.Context,
    csv: str | None = typer.Option(None, "--csv", help="Path to input CSV"),
    latitudeFieldNames: str | None = typer.Option(None, "--latitude-field-names", help="Comma separated latitude column names"),
    longitudeFieldNames: str | None = typer.Option(None, "--longitude-field-names", help="Comma separated longitude column names"),
    delimiter: str | None = typer.Option(None, "--delimiter", help="CSV delimiter"),
):
    applyCommandOverrides(
        ctx,
        {
            "latitude_field_names": latitudeFieldNames,
            "longitude_field_names": longitudeFieldNames,
            "csv_delimiter": delimiter,
        },
    )
    runHeadersCommand(ctx, csv)


if __name__ == "__main__":
    app()
