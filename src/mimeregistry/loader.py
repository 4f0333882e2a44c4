"""Loading type records from the canonical data file.

The data file is a list of descriptor mappings (the same form
``MimeType.to_dict()`` produces), stored as JSON or YAML. Without an explicit
path the data file bundled with the package is read.
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import structlog
import yaml

from mimeregistry.errors import DataSourceError
from mimeregistry.registry import RegistryIndex

log = structlog.get_logger()

DataFormat = Literal["json", "yaml"]

_SUFFIX_FORMATS: dict[str, DataFormat] = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def bundled_data_path() -> Path:
    return Path(str(resources.files("mimeregistry") / "data" / "types.json"))


def _detect_format(path: Path) -> DataFormat:
    try:
        return _SUFFIX_FORMATS[path.suffix.lower()]
    except KeyError:
        raise DataSourceError(
            f"Cannot tell the data format of {path.name!r}; pass data_format explicitly"
        ) from None


def read_records(path: str | Path | None = None, *, data_format: str | None = None) -> list[Any]:
    """Parse the data file and return its raw list of records."""
    source = Path(path).expanduser() if path is not None else bundled_data_path()
    fmt = data_format or _detect_format(source)
    if fmt not in ("json", "yaml"):
        raise DataSourceError(f"Unsupported data format: {fmt!r}")

    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise DataSourceError(f"Cannot read type data from {source}: {exc}") from exc

    try:
        records = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise DataSourceError(f"Cannot parse type data in {source}: {exc}") from exc

    if not isinstance(records, list):
        raise DataSourceError(f"Type data in {source} must be a list of records")
    return records


def load_registry(
    path: str | Path | None = None,
    *,
    data_format: str | None = None,
    index: RegistryIndex | None = None,
) -> RegistryIndex:
    """Build (or extend) a registry index from a type data file.

    Variants are expected in the data, so records are added quietly. A
    record that does not describe a valid type aborts the load with
    ``DataSourceError`` naming its position.
    """
    records = read_records(path, data_format=data_format)
    if index is None:
        index = RegistryIndex()

    for position, record in enumerate(records):
        if not isinstance(record, dict):
            raise DataSourceError(f"Type record {position} is not a mapping")
        try:
            index.add_record(record, quiet=True)
        except ValueError as exc:
            raise DataSourceError(f"Invalid type record {position}: {exc}") from exc

    log.debug("registry_loaded", source=str(path or "bundled"), count=index.count)
    return index
