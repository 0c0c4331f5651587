from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple

DEFAULT_LATITUDE_FIELD_NAMES = "latitude,lat"
DEFAULT_LONGITUDE_FIELD_NAMES = "longitude,lon"
DEFAULT_LOCATION_FIELD_NAME = "location"


class GeoPoint(NamedTuple):
    """
    Назначение:
        Составное поле координат (широта, долгота).
    """

    lat: float
    lon: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}


def _split_names(value: str) -> frozenset[str]:
    # Пробелы вокруг имён не обрезаются: " lat" не совпадёт с "lat".
    return frozenset(value.lower().split(","))


@dataclass(frozen=True)
class GeoFieldSpec:
    """
    Назначение:
        Наборы имён-кандидатов для широты/долготы и имя итогового поля.

    Инварианты/гарантии:
        - Имена-кандидаты хранятся в нижнем регистре.
        - None в from_options означает значение по умолчанию.
    """

    latitude_names: frozenset[str]
    longitude_names: frozenset[str]
    location_field_name: str

    @classmethod
    def from_options(
        cls,
        latitude_field_names: str | None = None,
        longitude_field_names: str | None = None,
        location_field_name: str | None = None,
    ) -> "GeoFieldSpec":
        if latitude_field_names is None:
            latitude_field_names = DEFAULT_LATITUDE_FIELD_NAMES
        if longitude_field_names is None:
            longitude_field_names = DEFAULT_LONGITUDE_FIELD_NAMES
        if location_field_name is None:
            location_field_name = DEFAULT_LOCATION_FIELD_NAME
        return cls(
            latitude_names=_split_names(latitude_field_names),
            longitude_names=_split_names(longitude_field_names),
            location_field_name=location_field_name,
        )

    def is_latitude(self, name: str) -> bool:
        return name.lower() in self.latitude_names

    def is_longitude(self, name: str) -> bool:
        return name.lower() in self.longitude_names


@dataclass(frozen=True)
class CsvFormat:
    """
    Назначение:
        Параметры токенизации CSV (аналог диалекта модуля csv).
    """

    delimiter: str = ","
    quotechar: str = '"'
    escapechar: str | None = None
    skipinitialspace: bool = False
    strict: bool = True

    def reader_kwargs(self) -> dict[str, Any]:
        return {
            "delimiter": self.delimiter,
            "quotechar": self.quotechar,
            "escapechar": self.escapechar,
            "skipinitialspace": self.skipinitialspace,
            "strict": self.strict,
        }


@dataclass
class Document:
    """
    Назначение:
        Документ для индексации: идентификатор + упорядоченные поля.

    Инварианты/гарантии:
        - content сохраняет порядок вставки полей.
        - Значения: исходные строки, GeoPoint для составного поля,
          строка ISO-времени для штампа времени.
    """

    document_id: str
    content: dict[str, Any] = field(default_factory=dict)

    def to_source(self) -> dict[str, Any]:
        source: dict[str, Any] = {}
        for name, value in self.content.items():
            if isinstance(value, GeoPoint):
                source[name] = value.to_dict()
            else:
                source[name] = value
        return source
