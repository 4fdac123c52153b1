"""Command-line entry point."""

import argparse
import sys
from typing import List, Optional

from .config import Config, default_config, load_config
from .generation import GenerateOutcome, GenerationOrchestrator
from .llm import SessionManager, create_provider_from_config
from .models import Audience, Tone
from .repl import ComposerREPL, REPLConfig
from .utils.logging import LOG_LEVELS, get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rewrite a message in a chosen tone with a local language model.",
    )
    parser.add_argument("--config", default="config.json", help="Path to config file")
    parser.add_argument("--tone", choices=Tone.values(), default=Tone.FORMAL.value)
    parser.add_argument("--audience", choices=Audience.values(), default=Audience.PEER.value)
    parser.add_argument("--text", help="Generate once for this text and exit")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS,
                        help="Override the configured log level")
    parser.add_argument("--log-json", action="store_true", help="Log JSON lines")
    parser.add_argument("--log-file", help="Also write JSON logs to this file")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    return parser


def _load(config_path: str) -> Config:
    try:
        return load_config(config_path)
    except FileNotFoundError:
        return default_config()


def build_orchestrator(config: Config) -> GenerationOrchestrator:
    """Wire provider, session manager and orchestrator from configuration."""
    provider = create_provider_from_config(config.llm)
    session_manager = SessionManager(provider, config.session.instructions)
    return GenerationOrchestrator(session_manager, config.generation)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = _load(args.config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    setup_logging(
        level=args.log_level or config.log_level,
        json_format=args.log_json or config.log_json,
        log_file=args.log_file,
    )

    try:
        orchestrator = build_orchestrator(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    repl = ComposerREPL(
        orchestrator,
        REPLConfig(
            tone=Tone(args.tone),
            audience=Audience(args.audience),
            use_color=not args.no_color,
        ),
    )

    try:
        ready = orchestrator.initialize()
        if args.text is not None:
            if not ready:
                return 1
            outcome = repl.submit(args.text)
            return 0 if outcome == GenerateOutcome.SUCCEEDED else 1
        repl.run()
        return 0
    finally:
        orchestrator.shutdown()
