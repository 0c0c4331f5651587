from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия кодов ошибок построения документов.
    """

    HEADER_MISSING = "HEADER_MISSING"
    CSV_MALFORMED = "CSV_MALFORMED"
    COLUMN_COUNT_MISMATCH = "COLUMN_COUNT_MISMATCH"
    UNIQUE_ID_OUT_OF_RANGE = "UNIQUE_ID_OUT_OF_RANGE"
    UNKNOWN_FIELD_NAME_MAPPER = "UNKNOWN_FIELD_NAME_MAPPER"
    INVALID_SETTING = "INVALID_SETTING"

    @property
    def category(self) -> str:
        if self in (ErrorCode.HEADER_MISSING, ErrorCode.CSV_MALFORMED, ErrorCode.COLUMN_COUNT_MISMATCH):
            return "format"
        return "config"
