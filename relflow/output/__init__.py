"""Output abstraction layer."""

from .console import ConsoleProtocol, MockConsole, RichConsole, Style, format_command

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
    "format_command",
]
