from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Optional

from xero_cli.errors import CatalogError
from xero_cli.types import (
    ManifestApi,
    ManifestMethod,
    ManifestParam,
    MethodCatalog,
)

MANIFEST_RESOURCE_NAME = "xero-api-manifest.json"
SUPPORTED_SCHEMA_VERSIONS = frozenset({1})


def default_manifest_path() -> Path:
    return Path(
        str(
            resources.files("xero_cli.resources").joinpath(
                MANIFEST_RESOURCE_NAME
            )
        )
    )


def load_method_catalog(
    path: Optional[Path | str] = None,
) -> MethodCatalog:
    """Load the method catalog; each path is read once per process."""
    resolved_path = (
        Path(path) if path is not None else default_manifest_path()
    )
    return _load_cached(str(resolved_path.resolve()))


@lru_cache(maxsize=None)
def _load_cached(path: str) -> MethodCatalog:
    raw_data = _read_manifest_file(Path(path))
    return _parse_catalog(raw_data, path)


def _read_manifest_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as file_handle:
            data = json.load(file_handle)
    except OSError as read_error:
        raise CatalogError(
            f"Failed to read method catalog {path}: {read_error.strerror}"
        ) from read_error
    except json.JSONDecodeError as parse_error:
        raise CatalogError(
            f"Failed to parse method catalog {path}: {parse_error}"
        ) from parse_error

    if not isinstance(data, dict):
        raise CatalogError(
            f"Method catalog {path} must be a JSON object"
        )
    return data


def _parse_catalog(
    data: dict[str, Any], path: str
) -> MethodCatalog:
    schema_version = data.get("schemaVersion")
    if schema_version not in SUPPORTED_SCHEMA_VERSIONS:
        raise CatalogError(
            f"Method catalog {path} has unsupported schemaVersion "
            f"{schema_version!r}"
        )

    sdk = data.get("sdk") or {}
    apis = tuple(
        _parse_api(raw_api, path)
        for raw_api in data.get("apis", [])
    )

    return MethodCatalog(
        schema_version=schema_version,
        generated_at=data.get("generatedAt"),
        sdk_name=str(sdk.get("name", "unknown")),
        sdk_version=str(sdk.get("version", "unknown")),
        apis=apis,
    )


def _parse_api(raw_api: dict[str, Any], path: str) -> ManifestApi:
    if "name" not in raw_api:
        raise CatalogError(
            f"Method catalog {path}: API entry without a name"
        )

    methods = tuple(
        ManifestMethod(
            name=raw_method["name"],
            signature_found=bool(
                raw_method.get("signatureFound", False)
            ),
            params=tuple(
                _parse_param(raw_param, raw_method["name"], path)
                for raw_param in raw_method.get("params", [])
            ),
        )
        for raw_method in raw_api.get("methods", [])
    )
    return ManifestApi(name=raw_api["name"], methods=methods)


def _parse_param(
    raw_param: dict[str, Any], method_name: str, path: str
) -> ManifestParam:
    is_optional = bool(raw_param.get("isOptional", False))
    has_default_value = bool(
        raw_param.get("hasDefaultValue", False)
    )
    expected_required = not is_optional and not has_default_value
    is_required = bool(
        raw_param.get("isRequired", expected_required)
    )

    if is_required != expected_required:
        raise CatalogError(
            f"Method catalog {path}: parameter "
            f"{method_name}.{raw_param.get('name')} has inconsistent "
            "isRequired flag"
        )

    return ManifestParam(
        name=raw_param["name"],
        declared_type=str(
            raw_param.get("declaredType") or "unknown"
        ),
        is_optional=is_optional,
        has_default_value=has_default_value,
        is_required=is_required,
    )
