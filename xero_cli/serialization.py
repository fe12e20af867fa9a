from __future__ import annotations

import base64
import dataclasses
import json
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional


def to_jsonable(value: Any) -> Any:
    """``json.dumps`` fallback for values SDK bindings commonly return."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, Path):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return str(value)


def dump_json(value: Any, indent: Optional[int] = None) -> str:
    return json.dumps(value, indent=indent, default=to_jsonable)
