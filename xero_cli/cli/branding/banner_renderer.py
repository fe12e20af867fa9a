from __future__ import annotations

from rich.console import Console

from .assets import BANNER_STYLE_MAP, XERO_LOGO_MINI


class BannerRenderer:
    def __init__(self, console: Console, version: str):
        self._console = console
        self._version = version

    def render(self, style: str = "full"):
        template = BANNER_STYLE_MAP.get(style, XERO_LOGO_MINI)
        self._console.print(template.format(version=self._version))
