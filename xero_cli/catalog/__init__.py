from .api_aliases import (
    API_ALIASES,
    ApiAlias,
    find_api_alias,
    known_aliases,
)
from .manifest_loader import (
    default_manifest_path,
    load_method_catalog,
)

__all__ = [
    "API_ALIASES",
    "ApiAlias",
    "find_api_alias",
    "known_aliases",
    "default_manifest_path",
    "load_method_catalog",
]
