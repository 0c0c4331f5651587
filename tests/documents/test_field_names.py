from __future__ import annotations

import pytest

from docbuilder.domain.documents.field_names import (
    LowerCaseFieldNameMapper,
    NoOpFieldNameMapper,
    UpperCaseFieldNameMapper,
    get_field_name_mapper,
    list_field_name_mappers,
)
from docbuilder.domain.error_codes import ErrorCode
from docbuilder.domain.exceptions import ConfigurationError


def test_lookup_by_name():
    assert isinstance(get_field_name_mapper(None), NoOpFieldNameMapper)
    assert isinstance(get_field_name_mapper("noop"), NoOpFieldNameMapper)
    assert isinstance(get_field_name_mapper("LowerCase"), LowerCaseFieldNameMapper)
    assert isinstance(get_field_name_mapper("uppercase"), UpperCaseFieldNameMapper)
    assert list_field_name_mappers() == ["lowercase", "noop", "uppercase"]


def test_unknown_mapper_is_configuration_error():
    with pytest.raises(ConfigurationError) as excinfo:
        get_field_name_mapper("camel")

    assert excinfo.value.code is ErrorCode.UNKNOWN_FIELD_NAME_MAPPER
    assert excinfo.value.to_dict()["category"] == "config"
    assert excinfo.value.details["available"] == ["lowercase", "noop", "uppercase"]


def test_mappers():
    assert NoOpFieldNameMapper().map("Name") == "Name"
    assert LowerCaseFieldNameMapper().map("Name") == "name"
    assert UpperCaseFieldNameMapper().map("Name") == "NAME"
