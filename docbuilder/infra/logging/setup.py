from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

from docbuilder.domain.exceptions import DocumentBuilderError

LOG_FORMAT = "%(asctime)s %(levelname)s runId=%(runId)s comp=%(component)s msg=%(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class EnsureFieldsFilter(logging.Filter):
    """
    Назначение:
        Гарантирует наличие полей runId и component в LogRecord.
        Нужен для записей builder'а, который пишет в логгер команды
        обычными logger.debug(...) без extra.

    Входные данные:
        runId: str
            Идентификатор запуска.
        defaultComponent: str
            Компонент для записей без extra (по умолчанию 'builder').
    """

    def __init__(self, runId: str, defaultComponent: str = "builder"):
        super().__init__()
        self.runId = runId
        self.defaultComponent = defaultComponent

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "runId"):
            record.runId = self.runId
        if not hasattr(record, "component"):
            record.component = self.defaultComponent
        return True


class StderrTee:
    """
    Назначение:
        Подмена sys.stderr на время команды: сообщения об ошибках CLI
        идут и в терминал, и построчно в лог команды (comp=stderr).
        stdout не перехватывается, там могут идти документы.

    Входные данные:
        stream: TextIO
            Исходный sys.stderr.
        logger: logging.Logger
            Логгер команды.
        runId: str

    Поведение:
        - Неполная последняя строка попадает в лог при drain().
    """

    def __init__(self, stream: TextIO, logger: logging.Logger, runId: str):
        self.stream = stream
        self.logger = logger
        self.runId = runId
        self.pending = ""

    def write(self, s: str) -> int:
        written = self.stream.write(s)
        self.pending += s
        *lines, self.pending = self.pending.split("\n")
        for line in lines:
            if line.strip():
                logEvent(self.logger, logging.ERROR, self.runId, "stderr", line.rstrip())
        return written

    def flush(self) -> None:
        self.stream.flush()

    def drain(self) -> TextIO:
        """
        Назначение:
            Дописывает хвост в лог и возвращает исходный stream для восстановления sys.stderr.
        """
        if self.pending.strip():
            logEvent(self.logger, logging.ERROR, self.runId, "stderr", self.pending.rstrip())
        self.pending = ""
        return self.stream


def mapLogLevel(levelName: str) -> int:
    """
    Назначение:
        Преобразует строковый уровень логирования в logging level.

    Входные данные:
        levelName: str
            ERROR|WARN|WARNING|INFO|DEBUG (проверяется заранее в loadSettings).

    Выходные данные:
        int
    """
    value = (levelName or "").strip().upper()
    if value == "WARN":
        value = "WARNING"
    level = logging.getLevelName(value)
    if value not in ("ERROR", "WARNING", "INFO", "DEBUG") or not isinstance(level, int):
        raise ValueError(f"Unsupported log level: {levelName}")
    return level


def createCommandLogger(commandName: str, logDir: str, runId: str, logLevel: str) -> tuple[logging.Logger, str]:
    """
    Назначение:
        Создаёт файловый логгер одной команды (build/headers).

    Входные данные:
        commandName: str
        logDir: str
        runId: str
        logLevel: str

    Выходные данные:
        (logger, logFilePath)
            Файл: <logDir>/<commandName>_<runId>.log
    """
    Path(logDir).mkdir(parents=True, exist_ok=True)
    logFilePath = str(Path(logDir) / f"{commandName}_{runId}.log")

    logger = logging.getLogger(f"docbuilder.{commandName}.{runId}")
    logger.handlers.clear()
    logger.propagate = False
    level = mapLogLevel(logLevel)
    logger.setLevel(level)

    fileHandler = logging.FileHandler(logFilePath, encoding="utf-8")
    fileHandler.setLevel(level)
    fileHandler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    fileHandler.addFilter(EnsureFieldsFilter(runId=runId))
    logger.addHandler(fileHandler)

    return logger, logFilePath


def closeCommandLogger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def logEvent(logger: logging.Logger, level: int, runId: str, component: str, message: str) -> None:
    """
    Назначение:
        Унифицированная запись событий с runId/component.
    """
    logger.log(level, message, extra={"runId": runId, "component": component})


def logRowFailure(logger: logging.Logger, runId: str, error: DocumentBuilderError, skipped: bool) -> None:
    """
    Назначение:
        Запись о строке CSV, не ставшей документом: код, номер строки, сообщение.

    Входные данные:
        skipped: bool
            True — строка пропущена и обработка продолжается (WARNING),
            False — обработка прервана (ERROR).
    """
    action = "skipped" if skipped else "aborted"
    logEvent(
        logger,
        logging.WARNING if skipped else logging.ERROR,
        runId,
        error.code.category,
        f"Row {action}: code={error.code.value} line={error.line_no} {error.message}",
    )
