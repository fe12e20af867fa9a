"""
Type-directed conversion of one textual parameter value.

The declared type from the method catalog is authoritative: the value's
shape is never used to guess a type. Rules are checked in order and the
first matching rule wins. Error messages name the parameter, its declared
type and any file path involved, never the raw value.
"""

from __future__ import annotations

import json
import math
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from xero_cli.errors import (
    StructuredDataParseFailure,
    TypeMismatch,
)

BINARY_TYPES = frozenset(
    {"fs.ReadStream", "Buffer", "Readable", "stream", "Blob", "bytes"}
)
DATE_TYPES = frozenset({"Date", "datetime", "timestamp"})
STRING_ARRAY_TYPES = frozenset({"Array<string>", "string[]"})
JSON_FILE_SUFFIXES = (".json",)
YAML_FILE_SUFFIXES = (".yaml", ".yml")

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_QUOTED_LITERAL_PATTERN = re.compile(r"""^(['"])(.*)\1$""")

TypeMatcher = Callable[[str], bool]
Converter = Callable[[str, str, str, Optional[bytes]], Any]


def parse_literal_union(declared_type: str) -> Optional[tuple[str, ...]]:
    """Return the literals of a `'A' | 'B'` type, or None if it is not one."""
    literals = []
    for part in declared_type.split("|"):
        match = _QUOTED_LITERAL_PATTERN.match(part.strip())
        if match is None:
            return None
        literals.append(match.group(2))
    return tuple(literals) if literals else None


class ParameterParser:
    def __init__(self) -> None:
        self._rules: list[tuple[TypeMatcher, Converter]] = [
            (lambda t: t == "string", self._parse_string),
            (lambda t: t == "number", self._parse_number),
            (lambda t: t in ("boolean", "bool"), self._parse_boolean),
            (lambda t: t in DATE_TYPES, self._parse_date),
            (lambda t: t in STRING_ARRAY_TYPES, self._parse_string_array),
            (lambda t: t in BINARY_TYPES, self._parse_binary),
            (
                lambda t: parse_literal_union(t) is not None,
                self._parse_literal,
            ),
        ]

    def parse(
        self,
        declared_type: str,
        raw_value: str,
        param_name: str,
        binary_payload: Optional[bytes] = None,
    ) -> Any:
        normalized_type = declared_type.strip()
        for matches, convert in self._rules:
            if matches(normalized_type):
                return convert(
                    normalized_type,
                    raw_value,
                    param_name,
                    binary_payload,
                )
        return self._parse_structured(
            normalized_type, raw_value, param_name, binary_payload
        )

    def reads_file(self, declared_type: str, raw_value: str) -> bool:
        """True when parsing this value consumes file content."""
        normalized_type = declared_type.strip()
        if normalized_type in BINARY_TYPES:
            return True
        if any(matches(normalized_type) for matches, _ in self._rules):
            return False
        return _names_structured_file(raw_value)

    # -------------------------------------------------------------------------
    # Scalars
    # -------------------------------------------------------------------------

    @staticmethod
    def _parse_string(declared_type, raw_value, param_name, _payload):
        return raw_value

    @staticmethod
    def _parse_number(declared_type, raw_value, param_name, _payload):
        text = raw_value.strip()
        if not text:
            raise TypeMismatch(param_name, declared_type, "value is empty")

        if _INTEGER_PATTERN.match(text):
            return int(text)

        if "_" in text:
            raise TypeMismatch(
                param_name, declared_type, "value is not a number"
            )
        try:
            number = float(text)
        except ValueError:
            raise TypeMismatch(
                param_name, declared_type, "value is not a number"
            ) from None

        if not math.isfinite(number):
            raise TypeMismatch(
                param_name, declared_type, "value must be finite"
            )
        return number

    @staticmethod
    def _parse_boolean(declared_type, raw_value, param_name, _payload):
        if raw_value == "true":
            return True
        if raw_value == "false":
            return False
        raise TypeMismatch(
            param_name, declared_type, 'expected "true" or "false"'
        )

    @staticmethod
    def _parse_date(declared_type, raw_value, param_name, _payload):
        text = raw_value.strip()
        if not text:
            raise TypeMismatch(param_name, declared_type, "value is empty")
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise TypeMismatch(
                param_name,
                declared_type,
                "expected an ISO-8601 date or timestamp",
            ) from None

    @staticmethod
    def _parse_string_array(declared_type, raw_value, param_name, _payload):
        items = [item.strip() for item in raw_value.split(",")]
        if any(not item for item in items):
            raise TypeMismatch(
                param_name,
                declared_type,
                "comma-separated list contains an empty element",
            )
        return items

    @staticmethod
    def _parse_literal(declared_type, raw_value, param_name, _payload):
        literals = parse_literal_union(declared_type) or ()
        if raw_value in literals:
            return raw_value
        valid = ", ".join(f"'{literal}'" for literal in literals)
        raise TypeMismatch(
            param_name, declared_type, f"expected one of: {valid}"
        )

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    @staticmethod
    def _parse_binary(declared_type, raw_value, param_name, payload):
        if payload is not None:
            return payload

        path = Path(raw_value).expanduser()
        if not path.exists():
            raise TypeMismatch(
                param_name, declared_type, f"file does not exist: {path}"
            )
        if not path.is_file():
            raise TypeMismatch(
                param_name, declared_type, f"path is not a file: {path}"
            )
        try:
            return path.read_bytes()
        except OSError as read_error:
            raise TypeMismatch(
                param_name,
                declared_type,
                f"could not read {path}: {read_error.strerror}",
            ) from None

    def _parse_structured(
        self, declared_type, raw_value, param_name, _payload
    ):
        if _names_structured_file(raw_value):
            return self._load_structured_file(
                Path(raw_value.strip()).expanduser(),
                declared_type,
                param_name,
            )

        try:
            return json.loads(raw_value)
        except json.JSONDecodeError:
            raise StructuredDataParseFailure(
                param_name,
                declared_type,
                "value is not valid inline JSON and does not name a "
                ".json/.yaml/.yml file",
            ) from None

    @staticmethod
    def _load_structured_file(path: Path, declared_type, param_name):
        if not path.is_file():
            raise StructuredDataParseFailure(
                param_name, declared_type, f"file does not exist: {path}"
            )
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            raise StructuredDataParseFailure(
                param_name, declared_type, f"could not read {path}"
            ) from None

        if path.suffix.lower() in YAML_FILE_SUFFIXES:
            try:
                return yaml.safe_load(content)
            except yaml.YAMLError:
                raise StructuredDataParseFailure(
                    param_name, declared_type, f"invalid YAML in {path}"
                ) from None

        try:
            return json.loads(content)
        except json.JSONDecodeError:
            raise StructuredDataParseFailure(
                param_name, declared_type, f"invalid JSON in {path}"
            ) from None


def _names_structured_file(raw_value: str) -> bool:
    return (
        raw_value.strip()
        .lower()
        .endswith(JSON_FILE_SUFFIXES + YAML_FILE_SUFFIXES)
    )


_default_parser = ParameterParser()


def parse_parameter(
    declared_type: str,
    raw_value: str,
    param_name: str,
    binary_payload: Optional[bytes] = None,
) -> Any:
    return _default_parser.parse(
        declared_type, raw_value, param_name, binary_payload
    )


def reads_file(declared_type: str, raw_value: str) -> bool:
    return _default_parser.reads_file(declared_type, raw_value)
