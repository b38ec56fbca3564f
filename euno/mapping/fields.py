"""
Euno Field Mapping — presence-aware bidirectional conversion.

A MappingContract is built once per block from a declarative list of
ConfigField entries and converts between a typed dataclass and the untyped
JSON map the service speaks:
- to_remote: required fields must be present; optional fields are emitted
  only when present (not None)
- from_remote: recognised keys with the expected JSON type become present;
  missing keys stay absent; mismatched types are skipped with a warning
- merge: overlay an observed object on the desired one, keeping desired
  values for keys the service did not echo back
"""
from __future__ import annotations
from dataclasses import dataclass, fields as dataclass_fields, replace
from enum import Enum
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar
import logging

from euno.errors import InputValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

class FieldType(str, Enum):
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING_LIST = "string_list"
    STRING_MAP = "string_map"


def _as_string(v: Any) -> str:
    if not isinstance(v, str):
        raise TypeError
    return v


def _as_bool(v: Any) -> bool:
    if not isinstance(v, bool):
        raise TypeError
    return v


def _as_int(v: Any) -> int:
    if isinstance(v, bool):
        raise TypeError
    if isinstance(v, float) and v.is_integer():
        return int(v)
    if not isinstance(v, int):
        raise TypeError
    return v


def _as_float(v: Any) -> float:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise TypeError
    return float(v)


def _as_string_list(v: Any) -> list[str]:
    if not isinstance(v, (list, tuple)) or not all(isinstance(s, str) for s in v):
        raise TypeError
    return list(v)


def _as_string_map(v: Any) -> dict[str, str]:
    if not isinstance(v, Mapping) or not all(
        isinstance(k, str) and isinstance(s, str) for k, s in v.items()
    ):
        raise TypeError
    return dict(v)


# Each coercer returns a fresh JSON-compatible value or raises TypeError.
COERCERS: dict[FieldType, Callable[[Any], Any]] = {
    FieldType.STRING: _as_string,
    FieldType.BOOL: _as_bool,
    FieldType.INT: _as_int,
    FieldType.FLOAT: _as_float,
    FieldType.STRING_LIST: _as_string_list,
    FieldType.STRING_MAP: _as_string_map,
}

# JSON names used in diagnostics; never the value itself.
def _json_type(v: Any) -> str:
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "boolean"
    if isinstance(v, (int, float)):
        return "number"
    if isinstance(v, str):
        return "string"
    if isinstance(v, (list, tuple)):
        return "array"
    if isinstance(v, Mapping):
        return "object"
    return type(v).__name__


# ---------------------------------------------------------------------------
# Field table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfigField:
    """One key of a JSON block and the typed attribute that mirrors it."""
    key: str                      # JSON key; also the dataclass attribute name
    field_type: FieldType = FieldType.STRING
    required: bool = False
    sensitive: bool = False       # credentials: never logged or repr'd
    zero_is_absent: bool = False  # service sends "" / 0 to mean "not set"
    description: str = ""

    def is_absent_remote(self, value: Any) -> bool:
        if value is None:
            return True
        return self.zero_is_absent and value in ("", 0) and not isinstance(value, bool)


class MappingContract(Generic[ModelT]):
    """Bidirectional converter for one block (a kind's configuration,
    the schedule, the invalidation strategy)."""

    def __init__(self, name: str, model: type[ModelT], fields: list[ConfigField]):
        self.name = name
        self.model = model
        self.fields = list(fields)

        attrs = {f.name for f in dataclass_fields(model)}
        keys = [f.key for f in self.fields]
        missing = [k for k in keys if k not in attrs]
        if missing:
            raise ValueError(f"{model.__name__} has no attribute for keys {missing}")
        if len(set(keys)) != len(keys):
            raise ValueError(f"{name}: duplicate keys in field table")

    @property
    def keys(self) -> list[str]:
        return [f.key for f in self.fields]

    @property
    def required_keys(self) -> list[str]:
        return [f.key for f in self.fields if f.required]

    @property
    def sensitive_keys(self) -> list[str]:
        return [f.key for f in self.fields if f.sensitive]

    def get_field(self, key: str) -> Optional[ConfigField]:
        for f in self.fields:
            if f.key == key:
                return f
        return None

    # --- typed -> JSON ---

    def to_remote(self, value: ModelT) -> dict[str, Any]:
        """Serialise present fields. Raises InputValidationError for a
        missing required field or a value of the wrong type."""
        result: dict[str, Any] = {}
        for f in self.fields:
            current = getattr(value, f.key)
            if current is None:
                if f.required:
                    raise InputValidationError(f"{self.name}.{f.key} is required", field=f.key)
                continue
            try:
                result[f.key] = COERCERS[f.field_type](current)
            except TypeError:
                raise InputValidationError(
                    f"{self.name}.{f.key} must be a {f.field_type.value}, "
                    f"got {type(current).__name__}",
                    field=f.key,
                ) from None
        return result

    # --- JSON -> typed ---

    def from_remote(self, data: Optional[Mapping[str, Any]]) -> ModelT:
        """Build a typed object; unknown keys are ignored, absent keys stay None."""
        kwargs: dict[str, Any] = {}
        for f in self.fields:
            raw = (data or {}).get(f.key)
            if f.is_absent_remote(raw):
                continue
            try:
                kwargs[f.key] = COERCERS[f.field_type](raw)
            except TypeError:
                logger.warning(
                    "Ignoring %s.%s from server: expected %s, got %s",
                    self.name, f.key, f.field_type.value, _json_type(raw),
                )
        return self.model(**kwargs)

    def merge(self, desired: Optional[ModelT], observed: ModelT) -> ModelT:
        """Observed values win; keys the server left out keep the desired value."""
        if desired is None:
            return observed
        kept = {
            f.key: getattr(desired, f.key)
            for f in self.fields
            if getattr(observed, f.key) is None and getattr(desired, f.key) is not None
        }
        return replace(observed, **kept) if kept else observed
