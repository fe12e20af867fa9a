from .assets import (
    BANNER_STYLE_MAP,
    STATUS_ICON_MAP,
    XERO_LOGO_FULL,
    XERO_LOGO_MINI,
    XERO_LOGO_SMALL,
)
from .banner_renderer import BannerRenderer
from .status_printer import StatusPrinter

__all__ = [
    "BANNER_STYLE_MAP",
    "STATUS_ICON_MAP",
    "XERO_LOGO_FULL",
    "XERO_LOGO_MINI",
    "XERO_LOGO_SMALL",
    "BannerRenderer",
    "StatusPrinter",
]
