"""Interactive terminal front-end."""

from .repl import ComposerREPL, REPLConfig, Colors, supports_color, get_terminal_width

__all__ = ["ComposerREPL", "REPLConfig", "Colors", "supports_color", "get_terminal_width"]
