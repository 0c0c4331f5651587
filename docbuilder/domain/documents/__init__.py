from docbuilder.domain.documents.models import CsvFormat, Document, GeoFieldSpec, GeoPoint
from docbuilder.domain.documents.builder import CursorState, DocumentCursor, RowDocumentBuilder

__all__ = [
    "CsvFormat",
    "Document",
    "GeoFieldSpec",
    "GeoPoint",
    "CursorState",
    "DocumentCursor",
    "RowDocumentBuilder",
]
