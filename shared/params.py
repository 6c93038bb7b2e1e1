"""Declarative parameter schema.

A parameter contract is defined as a list of ParamDef objects. ParamSchema
wraps the list, derives defaults and validates raw dicts (preset JSON,
command line overrides) against it.

Each ParamDef has an external key (the name used in URLs and preset files) and
an attribute name (the Python field it maps to). They default to the same
string.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ParamType(Enum):
    FLOAT = "float"
    INT = "int"
    CHOICE = "choice"
    BOOL = "bool"
    STR = "str"


@dataclass
class ParamDef:
    key: str
    type: ParamType
    default: Any
    section: str
    label: str = ""
    attr: str = ""                      # Python attribute name, defaults to key
    range: tuple | None = None          # (min, max) for continuous params
    choices: list[str] | None = None    # allowed ids for CHOICE type
    unit: str = ""

    def __post_init__(self):
        if not self.attr:
            self.attr = self.key


class ParamSchema:
    """Defaults and validation for a declarative param list."""

    def __init__(self, params: list[ParamDef]):
        self._params = params
        self._by_key: dict[str, ParamDef] = {p.key: p for p in params}
        self._by_attr: dict[str, ParamDef] = {p.attr: p for p in params}

    def default_params(self) -> dict:
        """Defaults keyed by attribute name."""
        return {p.attr: p.default for p in self._params}

    def validate_and_clamp(self, raw: dict) -> dict:
        """Validate and clamp a raw params dict (e.g. from a preset file).

        Keys may be external keys or attribute names; the result is keyed by
        attribute name. Unknown keys and values that cannot be cast are
        dropped. Numbers are clamped to range, choices must be listed.
        """
        result = {}
        for key, value in raw.items():
            p = self._by_key.get(key) or self._by_attr.get(key)
            if p is None or value is None:
                continue

            if p.type == ParamType.INT:
                try:
                    v = int(round(float(value)))
                except (TypeError, ValueError):
                    continue
                if p.range:
                    lo, hi = p.range
                    v = max(lo, min(hi, v))
                result[p.attr] = v

            elif p.type == ParamType.FLOAT:
                try:
                    v = float(value)
                except (TypeError, ValueError):
                    continue
                if p.range:
                    lo, hi = p.range
                    v = max(lo, min(hi, v))
                result[p.attr] = v

            elif p.type == ParamType.CHOICE:
                v = str(value)
                if p.choices and v not in p.choices:
                    continue
                result[p.attr] = v

            elif p.type == ParamType.BOOL:
                if isinstance(value, str):
                    if value.lower() not in ("true", "false", "1", "0"):
                        continue
                    result[p.attr] = value.lower() in ("true", "1")
                else:
                    result[p.attr] = bool(value)

            else:
                result[p.attr] = str(value)

        return result

    def __iter__(self):
        return iter(self._params)

    def __len__(self):
        return len(self._params)
