from __future__ import annotations

import io
import json

from docbuilder.domain.documents.models import Document, GeoPoint
from docbuilder.infra.sinks.jsonl_sink import JsonLinesDocumentSink, document_to_line


def test_document_line_shape_keeps_field_order():
    document = Document(
        document_id="1",
        content={"id": "1", "name": "Zoë", "location": GeoPoint(12.5, -0.3)},
    )

    line = document_to_line(document)

    assert line == '{"_id": "1", "_source": {"id": "1", "name": "Zoë", "location": {"lat": 12.5, "lon": -0.3}}}'


def test_sink_writes_one_line_per_document():
    out = io.StringIO()
    sink = JsonLinesDocumentSink(out)

    sink.write(Document(document_id="a", content={"k": "v"}))
    sink.write(Document(document_id="b", content={}))

    lines = out.getvalue().splitlines()
    assert sink.written == 2
    assert [json.loads(line)["_id"] for line in lines] == ["a", "b"]
    assert json.loads(lines[1])["_source"] == {}
