from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml

from xero_cli.errors import PolicyConfigError
from xero_cli.types import MethodPolicy, PolicyDocument

YAML_SUFFIXES = (".yaml", ".yml")
VALID_POLICY_VALUES = tuple(policy.value for policy in MethodPolicy)


class PolicyDocumentLoader:
    """
    Reads ``{"methods": {"<alias>.<method>": "allow"|"ask"|"block"}}``.

    JSON by default; ``.yaml``/``.yml`` files are parsed with PyYAML. A
    missing file is not an error (``load`` returns None); anything
    malformed is.
    """

    def load(self, path: Path | str) -> Optional[PolicyDocument]:
        resolved_path = Path(path)
        if not resolved_path.exists():
            return None

        raw_data = self._read_policy_file(resolved_path)
        return self._parse_document(raw_data, resolved_path)

    @staticmethod
    def _read_policy_file(path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as file_handle:
                if path.suffix.lower() in YAML_SUFFIXES:
                    return yaml.safe_load(file_handle)
                return json.load(file_handle)
        except OSError as read_error:
            raise PolicyConfigError(
                path, f"cannot be read ({read_error.strerror})"
            ) from None
        except json.JSONDecodeError as parse_error:
            raise PolicyConfigError(
                path, f"invalid JSON ({parse_error.msg} at line {parse_error.lineno})"
            ) from None
        except yaml.YAMLError:
            raise PolicyConfigError(path, "invalid YAML") from None

    @staticmethod
    def _parse_document(data: Any, path: Path) -> PolicyDocument:
        if not isinstance(data, dict):
            raise PolicyConfigError(path, "root must be an object")

        raw_methods = data.get("methods", {})
        if not isinstance(raw_methods, dict):
            raise PolicyConfigError(path, '"methods" must be an object')

        methods: dict[str, MethodPolicy] = {}
        for method_key, raw_policy in raw_methods.items():
            if raw_policy not in VALID_POLICY_VALUES:
                raise PolicyConfigError(
                    path,
                    f'"{method_key}" must be one of '
                    f"{', '.join(VALID_POLICY_VALUES)}",
                )
            methods[str(method_key)] = MethodPolicy(raw_policy)

        return PolicyDocument(path=path, methods=methods)


def load_policy_document(path: Path | str) -> Optional[PolicyDocument]:
    return PolicyDocumentLoader().load(path)
