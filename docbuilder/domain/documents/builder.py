from __future__ import annotations

import csv
import logging
from enum import Enum
from typing import Iterator, Sequence, TextIO

from docbuilder.domain.documents.field_names import NoOpFieldNameMapper
from docbuilder.domain.documents.geo_point import GeoColumns, build_geo_point, resolve_geo_columns
from docbuilder.domain.documents.models import CsvFormat, Document, GeoFieldSpec
from docbuilder.domain.documents.timestamps import NullTimestampStamper
from docbuilder.domain.error_codes import ErrorCode
from docbuilder.domain.exceptions import ConfigurationError, FormatError
from docbuilder.domain.ports.documents import FieldNameMapperProtocol, TimestampStamperProtocol


class CursorState(str, Enum):
    # До open() курсора нет; неудачный open() курсор не возвращает.
    OPENED = "OPENED"
    EXHAUSTED = "EXHAUSTED"


class RowDocumentBuilder:
    """
    Назначение/ответственность:
        Строит документы для индексации из CSV: первая запись — заголовок,
        каждая следующая — один документ. Колонки широты/долготы
        сворачиваются в одно составное поле.

    Входные данные:
        unique_id_field: int
            Индекс колонки (с нуля), значение которой — идентификатор документа.
        latitude_field_names / longitude_field_names: str | None
            Имена-кандидаты через запятую, без учёта регистра.
            None -> "latitude,lat" / "longitude,lon".
        location_field_name: str | None
            Имя составного поля. None -> "location".
        field_name_mapper, timestamp_stamper:
            Внешние хуки (см. domain.ports.documents).
        csv_format: CsvFormat
            Параметры токенизации CSV.

    Взаимодействия:
        Поток принадлежит вызывающему коду; builder его не закрывает.
    """

    def __init__(
        self,
        unique_id_field: int = 0,
        latitude_field_names: str | None = None,
        longitude_field_names: str | None = None,
        location_field_name: str | None = None,
        field_name_mapper: FieldNameMapperProtocol | None = None,
        timestamp_stamper: TimestampStamperProtocol | None = None,
        csv_format: CsvFormat | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.unique_id_field = unique_id_field
        self.geo_spec = GeoFieldSpec.from_options(
            latitude_field_names=latitude_field_names,
            longitude_field_names=longitude_field_names,
            location_field_name=location_field_name,
        )
        self.field_name_mapper = field_name_mapper or NoOpFieldNameMapper()
        self.timestamp_stamper = timestamp_stamper or NullTimestampStamper()
        self.csv_format = csv_format or CsvFormat()
        self.logger = logger or logging.getLogger("docbuilder.builder")

    def open(self, stream: TextIO) -> "DocumentCursor":
        """
        Назначение:
            Читает заголовок и возвращает курсор по документам.

        Поведение:
            - Пустой поток (нет ни одной непустой записи) -> FormatError HEADER_MISSING.
        """
        reader = csv.reader(stream, **self.csv_format.reader_kwargs())
        headers = _next_record(reader)
        if headers is None:
            raise FormatError(
                code=ErrorCode.HEADER_MISSING,
                message="Missing header record in source CSV",
                line_no=reader.line_num or None,
            )
        geo_columns = resolve_geo_columns(headers, self.geo_spec)
        self.logger.debug(
            "Header parsed: %d columns, latitude=%d longitude=%d",
            len(headers),
            geo_columns.latitude_index,
            geo_columns.longitude_index,
        )
        return DocumentCursor(self, reader, tuple(headers), geo_columns)


def _next_record(reader) -> list[str] | None:
    """
    Назначение:
        Следующая непустая запись CSV или None в конце потока.
    """
    try:
        for record in reader:
            if not record:
                continue
            return record
    except csv.Error as exc:
        raise FormatError(
            code=ErrorCode.CSV_MALFORMED,
            message=f"Malformed CSV: {exc}",
            line_no=reader.line_num,
        ) from exc
    except UnicodeDecodeError as exc:
        raise FormatError(
            code=ErrorCode.CSV_MALFORMED,
            message=f"CSV is not valid {exc.encoding}: {exc.reason}",
        ) from exc
    return None


class DocumentCursor:
    """
    Назначение/ответственность:
        Ленивый однопроходный курсор документов.

    Инварианты/гарантии:
        - Заголовок и колонки координат неизменны после open().
        - После исчерпания next() бросает StopIteration, устаревший документ не возвращается.
        - Документ либо собран целиком, либо не возвращается вовсе.
    """

    def __init__(
        self,
        builder: RowDocumentBuilder,
        reader,
        headers: tuple[str, ...],
        geo_columns: GeoColumns,
    ) -> None:
        self._builder = builder
        self._reader = reader
        self.headers = headers
        self.geo_columns = geo_columns
        self.state = CursorState.OPENED
        self._pending: list[str] | None = None
        self._pending_line_no: int | None = None

    @property
    def location_field(self) -> str | None:
        if not self.geo_columns.resolved:
            return None
        return self._builder.field_name_mapper.map(self._builder.geo_spec.location_field_name)

    def has_next(self) -> bool:
        if self._pending is not None:
            return True
        if self.state is CursorState.EXHAUSTED:
            return False
        record = _next_record(self._reader)
        if record is None:
            self.state = CursorState.EXHAUSTED
            return False
        self._pending = record
        self._pending_line_no = self._reader.line_num
        return True

    def next(self) -> Document:
        if not self.has_next():
            raise StopIteration
        record, line_no = self._pending, self._pending_line_no
        self._pending = None
        self._pending_line_no = None
        return self._build(record, line_no)

    def __iter__(self) -> Iterator[Document]:
        return self

    def __next__(self) -> Document:
        return self.next()

    def _build(self, record: Sequence[str], line_no: int | None) -> Document:
        builder = self._builder
        mapper = builder.field_name_mapper
        width = len(record)

        if not 0 <= builder.unique_id_field < width:
            raise ConfigurationError(
                code=ErrorCode.UNIQUE_ID_OUT_OF_RANGE,
                message="unique-id field index exceeds record width",
                line_no=line_no,
                details={"unique_id_field": builder.unique_id_field, "record_width": width},
            )
        document = Document(document_id=record[builder.unique_id_field])

        if width > len(self.headers):
            raise FormatError(
                code=ErrorCode.COLUMN_COUNT_MISMATCH,
                message=f"Invalid column count: expected {len(self.headers)}, got {width}",
                line_no=line_no,
            )
        for index, value in enumerate(record):
            if self.geo_columns.is_geo_column(index):
                continue
            document.content[mapper.map(self.headers[index])] = value

        if self.geo_columns.resolved:
            try:
                latitude = record[self.geo_columns.latitude_index]
                longitude = record[self.geo_columns.longitude_index]
            except IndexError as exc:
                raise FormatError(
                    code=ErrorCode.COLUMN_COUNT_MISMATCH,
                    message=f"Invalid column count: expected {len(self.headers)}, got {width}",
                    line_no=line_no,
                ) from exc
            point = build_geo_point(latitude, longitude)
            if point is None:
                builder.logger.debug(
                    "No location for document %s: lat=%r lon=%r",
                    document.document_id,
                    latitude,
                    longitude,
                )
            else:
                document.content[self.location_field] = point

        builder.timestamp_stamper.stamp(document)
        return document
