from .arguments_table_renderer import ArgumentsTableRenderer
from .options_table_renderer import OptionsTableRenderer
from .rich_command import RichCommand
from .rich_group import RichGroup

__all__ = [
    "ArgumentsTableRenderer",
    "OptionsTableRenderer",
    "RichCommand",
    "RichGroup",
]
