from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import yaml

from docbuilder.domain.error_codes import ErrorCode
from docbuilder.domain.exceptions import ConfigurationError


@dataclass(frozen=True)
class Settings:
    # Paths
    log_dir: str = "./logs"
    report_dir: str = "./reports"

    # Logging
    log_level: str = "INFO"

    # CSV
    csv_encoding: str = "utf-8-sig"
    csv_delimiter: str = ","

    # Documents
    unique_id_field: int = 0
    latitude_field_names: str | None = None
    longitude_field_names: str | None = None
    location_field_name: str | None = None
    field_name_mapper: str = "noop"
    timestamp_field: str | None = None
    skip_invalid_rows: bool = False

    # Report
    report_items_limit: int = 200


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


ENV_PREFIX = "DOCBUILDER_"

_INT_FIELDS = ("unique_id_field", "report_items_limit")
_BOOL_FIELDS = ("skip_invalid_rows",)
LOG_LEVELS = ("ERROR", "WARN", "WARNING", "INFO", "DEBUG")


def _read_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    # Без strip: пробелы в списках имён полей значимы.
    return v


def parse_int(v: str | None) -> int | None:
    if v is None:
        return None
    return int(v.strip())


def parse_bool(v: str | None) -> bool | None:
    if v is None:
        return None
    vv = v.strip().lower()
    if vv in ("1", "true", "yes", "y"):
        return True
    if vv in ("0", "false", "no", "n"):
        return False
    raise ValueError(f"Invalid boolean env value: {v}")


def _invalid_setting(name: str, value, exc: Exception | None = None) -> ConfigurationError:
    return ConfigurationError(
        code=ErrorCode.INVALID_SETTING,
        message=f"Invalid value for {name}: {value!r}",
        details={"setting": name, "reason": str(exc) if exc else None},
    )


def loadSettings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Priority: CLI > ENV > config > defaults

    Raises ConfigurationError(INVALID_SETTING) for values that cannot be parsed.
    """
    sources: list[str] = []
    defaults = Settings()
    field_names = list(Settings.__dataclass_fields__)

    # 1) config file
    cfg: dict = {}
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")

    merged = {name: cfg.get(name, getattr(defaults, name)) for name in field_names}

    # 2) env
    env = {name: _env_get(ENV_PREFIX + name.upper()) for name in field_names}
    if any(v is not None for v in env.values()):
        sources.append("env")

    for name, raw in env.items():
        if raw is None:
            continue
        try:
            if name in _INT_FIELDS:
                merged[name] = parse_int(raw)
            elif name in _BOOL_FIELDS:
                merged[name] = parse_bool(raw)
            else:
                merged[name] = raw
        except ValueError as exc:
            raise _invalid_setting(ENV_PREFIX + name.upper(), raw, exc) from exc

    # 3) apply CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")

    for k, v in cli_overrides.items():
        if v is None:
            continue
        merged[k] = v

    for name in _INT_FIELDS:
        try:
            merged[name] = int(merged[name])
        except (TypeError, ValueError) as exc:
            raise _invalid_setting(name, merged[name], exc) from exc
    if str(merged["log_level"]).strip().upper() not in LOG_LEVELS:
        raise _invalid_setting("log_level", merged["log_level"])

    settings = Settings(
        log_dir=str(merged["log_dir"]),
        report_dir=str(merged["report_dir"]),
        log_level=str(merged["log_level"]),
        csv_encoding=str(merged["csv_encoding"]),
        csv_delimiter=str(merged["csv_delimiter"]),
        unique_id_field=merged["unique_id_field"],
        latitude_field_names=merged["latitude_field_names"],
        longitude_field_names=merged["longitude_field_names"],
        location_field_name=merged["location_field_name"],
        field_name_mapper=str(merged["field_name_mapper"]),
        timestamp_field=merged["timestamp_field"],
        skip_invalid_rows=bool(merged["skip_invalid_rows"]),
        report_items_limit=merged["report_items_limit"],
    )

    return LoadedSettings(settings=settings, sources_used=sources)
