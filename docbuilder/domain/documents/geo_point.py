from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Sequence

from docbuilder.domain.documents.models import GeoFieldSpec, GeoPoint

UNRESOLVED = -1

# Десятичная запись с необязательной экспонентой и суффиксом типа (1.5, -.3, 2e-4, 12.5d).
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?[fFdD]?", re.ASCII)


@dataclass(frozen=True)
class GeoColumns:
    """
    Назначение:
        Индексы колонок широты и долготы, найденные по заголовку.
    Инварианты/гарантии:
        - UNRESOLVED (-1), если колонка не найдена.
    """

    latitude_index: int = UNRESOLVED
    longitude_index: int = UNRESOLVED

    @property
    def resolved(self) -> bool:
        return self.latitude_index != UNRESOLVED and self.longitude_index != UNRESOLVED

    def is_geo_column(self, index: int) -> bool:
        return index in (self.latitude_index, self.longitude_index)


def resolve_geo_columns(headers: Sequence[str], spec: GeoFieldSpec) -> GeoColumns:
    """
    Назначение:
        Один проход по заголовку: поиск колонок широты/долготы без учёта регистра.

    Алгоритм:
        - Если несколько колонок подходят под один набор, побеждает последняя.
    """
    latitude_index = UNRESOLVED
    longitude_index = UNRESOLVED
    for index, name in enumerate(headers):
        if spec.is_latitude(name):
            latitude_index = index
        if spec.is_longitude(name):
            longitude_index = index
    return GeoColumns(latitude_index=latitude_index, longitude_index=longitude_index)


def parse_coordinate(value: str) -> float | None:
    """
    Назначение:
        Разбор координаты как десятичного числа.

    Выходные данные:
        float | None
            None, если значение не десятичное число или не конечно.

    Алгоритм:
        - Пробелы по краям отбрасываются.
        - "1_000", "0x1p3", "nan", "inf" не считаются координатами.
    """
    text = value.strip()
    if not _DECIMAL_RE.fullmatch(text):
        return None
    parsed = float(text.rstrip("fFdD"))
    if not math.isfinite(parsed):
        return None
    return parsed


def build_geo_point(latitude: str, longitude: str) -> GeoPoint | None:
    lat = parse_coordinate(latitude)
    lon = parse_coordinate(longitude)
    if lat is None or lon is None:
        return None
    return GeoPoint(lat=lat, lon=lon)
