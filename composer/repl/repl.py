"""Interactive terminal front-end for the composer.

Renders the orchestrator's state: a result card after each generation and
every error exactly once.
"""

import os
import sys
import textwrap
from dataclasses import dataclass
from typing import Optional

from ..generation import (
    GenerateOutcome,
    GenerationOrchestrator,
    OrchestratorState,
)
from ..models import Audience, GenerationResult, RequestContext, Tone
from ..utils.logging import get_logger

logger = get_logger(__name__)


class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


def supports_color() -> bool:
    """Check if terminal supports colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if not hasattr(sys.stdout, "isatty"):
        return False
    return sys.stdout.isatty()


def get_terminal_width() -> int:
    """Get terminal width, default to 80."""
    try:
        return os.get_terminal_size().columns
    except OSError:
        return 80


@dataclass
class REPLConfig:
    """Configuration for the REPL."""
    tone: Tone = Tone.FORMAL
    audience: Audience = Audience.PEER
    use_color: bool = True


class ComposerREPL:
    """Read a message, generate a response in the selected tone, show it."""

    def __init__(self, orchestrator: GenerationOrchestrator, config: Optional[REPLConfig] = None):
        self.orchestrator = orchestrator
        self.config = config or REPLConfig()
        self.use_color = self.config.use_color and supports_color()
        self.running = False
        self._unsubscribe = orchestrator.subscribe(self._on_state_change)

    @property
    def context(self) -> RequestContext:
        return RequestContext(tone=self.config.tone, audience=self.config.audience)

    def _color(self, text: str, *codes: str) -> str:
        """Apply color codes to text if colors are enabled."""
        if not self.use_color:
            return text
        return "".join(codes) + text + Colors.RESET

    def _on_state_change(self, state: OrchestratorState) -> None:
        if state.is_processing:
            print(self._color("  Generating...", Colors.DIM), flush=True)
            return
        if state.current_error is not None:
            print(self._color(f"  Error: {state.current_error.message}", Colors.RED))
            # Acknowledge so the same error is not shown again
            self.orchestrator.clear_error()

    def _print_header(self) -> None:
        width = get_terminal_width()
        title = " Context Composer "
        padding = max(0, (width - len(title)) // 2)

        print()
        print(self._color("─" * padding, Colors.DIM) +
              self._color(title, Colors.BOLD, Colors.CYAN) +
              self._color("─" * max(0, width - padding - len(title)), Colors.DIM))
        print()
        print(self._color("  Enter a message (press Enter on an empty line to submit)", Colors.DIM))
        print(self._color("  Commands: /tone, /audience, /tones, /retry, /last, /help, /quit", Colors.DIM))
        self._print_selection()

    def _print_selection(self) -> None:
        print(self._color(
            f"  Tone: {self.config.tone.value} | Audience: {self.config.audience.value}",
            Colors.YELLOW,
        ))
        print()

    def _print_help(self) -> None:
        print()
        print(self._color("Commands:", Colors.BOLD))
        print(f"  {self._color('/tone <name>', Colors.CYAN)}      Select the tone")
        print(f"  {self._color('/audience <name>', Colors.CYAN)}  Select the audience")
        print(f"  {self._color('/tones', Colors.CYAN)}            List tones and audiences")
        print(f"  {self._color('/retry', Colors.CYAN)}            Check the engine again and start a session")
        print(f"  {self._color('/last', Colors.CYAN)}             Show the last result")
        print(f"  {self._color('/quit', Colors.CYAN)}             Exit")
        print()

    def _print_choices(self) -> None:
        print(f"  Tones: {', '.join(Tone.values())}")
        print(f"  Audiences: {', '.join(Audience.values())}")

    def _print_wrapped(self, text: str, indent: int = 2) -> None:
        width = max(20, get_terminal_width() - indent - 2)
        wrapper = textwrap.TextWrapper(
            width=width,
            initial_indent=" " * indent,
            subsequent_indent=" " * indent,
        )
        for paragraph in text.split("\n\n"):
            if paragraph.strip():
                print(wrapper.fill(paragraph))
                print()

    def print_result(self, result: GenerationResult) -> None:
        """Print the result card."""
        width = get_terminal_width()
        print()
        print(self._color("─" * width, Colors.DIM))
        print(self._color(
            f"  {result.tone.value.title()} for {result.audience.value} "
            f"({result.word_count} words, formality {result.formality_score}/10)",
            Colors.GREEN, Colors.BOLD,
        ))
        print(self._color("─" * width, Colors.DIM))
        print()
        self._print_wrapped(result.text)

    def _read_input(self) -> Optional[str]:
        """Read lines until an empty line; None on EOF."""
        lines = []
        try:
            while True:
                print(self._color("│ ", Colors.BLUE), end="", flush=True)
                try:
                    line = input()
                except EOFError:
                    return "\n".join(lines) if lines else None
                if line.startswith("/") and not lines:
                    return line
                if not line:
                    break
                lines.append(line)
        except KeyboardInterrupt:
            print()
            return ""
        return "\n".join(lines)

    def _select(self, enum_cls, argument: str, attribute: str) -> None:
        try:
            setattr(self.config, attribute, enum_cls.parse(argument))
        except ValueError:
            print(self._color(f"  Unknown {attribute}: {argument or '(none)'}", Colors.RED))
            self._print_choices()
            return
        self._print_selection()

    def handle_command(self, command: str) -> bool:
        """Handle a slash command. Returns False to quit."""
        name, _, argument = command.strip().partition(" ")
        name = name.lower()
        argument = argument.strip()

        if name in ("/quit", "/exit", "/q"):
            return False
        elif name in ("/help", "/h", "/?"):
            self._print_help()
        elif name == "/tone":
            self._select(Tone, argument, "tone")
        elif name == "/audience":
            self._select(Audience, argument, "audience")
        elif name == "/tones":
            self._print_choices()
        elif name == "/retry":
            if self.orchestrator.is_processing:
                print(self._color(
                    "  Still working on the previous message, try again when it finishes.",
                    Colors.YELLOW,
                ))
            elif self.orchestrator.retry_initialization():
                print(self._color("  Session ready.", Colors.GREEN))
        elif name == "/last":
            result = self.orchestrator.current_result
            if result is None:
                print(self._color("  No result yet.", Colors.DIM))
            else:
                self.print_result(result)
        else:
            print(self._color(f"  Unknown command: {name}", Colors.RED))
            print(self._color("  Type /help for available commands", Colors.DIM))
        return True

    def submit(self, text: str) -> GenerateOutcome:
        """Generate for ``text`` with the current selection and show the result."""
        outcome = self.orchestrator.generate(text, self.context)
        if outcome == GenerateOutcome.SUCCEEDED:
            self.print_result(self.orchestrator.current_result)
        elif outcome == GenerateOutcome.REJECTED_BUSY:
            print(self._color("  Still working on the previous message.", Colors.YELLOW))
        return outcome

    def run(self) -> None:
        """Run the REPL main loop."""
        self.running = True
        self._print_header()

        try:
            while self.running:
                text = self._read_input()
                if text is None:
                    break
                if not text.strip():
                    continue
                if text.startswith("/"):
                    if not self.handle_command(text):
                        break
                    continue
                try:
                    self.submit(text)
                except KeyboardInterrupt:
                    self.orchestrator.cancel()
                    print(self._color("\n  Cancelled.", Colors.DIM))
        finally:
            self.running = False
            self._unsubscribe()

        print()
        print(self._color("  Goodbye!", Colors.CYAN))
        print()
