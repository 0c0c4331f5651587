from __future__ import annotations

import io
import logging

from docbuilder.domain.documents import RowDocumentBuilder
from docbuilder.domain.reporting.collector import ReportCollector
from docbuilder.usecases.build_documents_usecase import BuildDocumentsUseCase


class ListSink:
    def __init__(self) -> None:
        self.documents = []

    def write(self, document) -> None:
        self.documents.append(document)


def run_usecase(text: str, builder: RowDocumentBuilder, skip_invalid_rows: bool = False, limit: int = 10):
    sink = ListSink()
    report = ReportCollector(run_id="run-1", command="build")
    usecase = BuildDocumentsUseCase(skip_invalid_rows=skip_invalid_rows, report_items_limit=limit)
    code = usecase.run(
        stream=io.StringIO(text),
        builder=builder,
        sink=sink,
        logger=logging.getLogger("test.build"),
        run_id="run-1",
        report=report,
    )
    return code, sink, report


def test_counts_documents_and_missing_locations():
    text = "id,lat,lon\n1,1.0,2.0\n2,bad,2.0\n3,3.0,4.0\n"
    code, sink, report = run_usecase(text, RowDocumentBuilder())

    assert code == 0
    assert [d.document_id for d in sink.documents] == ["1", "2", "3"]
    assert report.summary.rows_total == 3
    assert report.summary.documents_written == 3
    assert report.summary.documents_without_location == 1
    assert report.summary.rows_failed == 0
    assert report.context["header"]["location_field"] == "location"
    assert report.build().status == "SUCCESS"


def test_no_geo_columns_are_not_counted_as_missing_location():
    code, _, report = run_usecase("id,name\n1,a\n", RowDocumentBuilder())

    assert code == 0
    assert report.summary.documents_without_location == 0
    assert report.context["header"]["location_field"] is None


def test_short_rows_abort_without_skip():
    text = "name,code\na,A\nb\nc,C\n"
    code, sink, report = run_usecase(text, RowDocumentBuilder(unique_id_field=1))

    assert code == 2
    assert [d.document_id for d in sink.documents] == ["A"]
    assert report.status == "FAILED"
    assert report.items[0].code == "UNIQUE_ID_OUT_OF_RANGE"
    assert report.items[0].line_no == 3


def test_short_rows_skipped_when_enabled():
    text = "name,code\na,A\nb\nc,C\n"
    code, sink, report = run_usecase(text, RowDocumentBuilder(unique_id_field=1), skip_invalid_rows=True)

    assert code == 0
    assert [d.document_id for d in sink.documents] == ["A", "C"]
    assert report.summary.rows_failed == 1
    assert report.build().status == "PARTIAL"


def test_report_items_limit_marks_truncation():
    text = "name,code\na\nb\nc\n"
    code, _, report = run_usecase(text, RowDocumentBuilder(unique_id_field=1), skip_invalid_rows=True, limit=2)

    assert code == 0
    assert report.summary.rows_failed == 3
    assert len(report.items) == 2
    assert report.meta.items_truncated is True
    assert report.build().status == "FAILED"


def test_missing_header_is_fatal():
    code, sink, report = run_usecase("", RowDocumentBuilder())

    assert code == 2
    assert sink.documents == []
    assert report.items[0].code == "HEADER_MISSING"


def test_format_error_always_aborts():
    text = "id,name\n1,a\n2,b,extra\n3,c\n"
    code, sink, report = run_usecase(text, RowDocumentBuilder(), skip_invalid_rows=True)

    assert code == 2
    assert [d.document_id for d in sink.documents] == ["1"]
    assert report.items[0].code == "COLUMN_COUNT_MISMATCH"
