from .method_catalog_renderer import MethodCatalogRenderer
from .server_panel_renderer import ServerPanelRenderer

__all__ = [
    "MethodCatalogRenderer",
    "ServerPanelRenderer",
]
