from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from rich.console import Console
from rich.text import Text

from .dispatcher import Dispatcher, ToolResult
from .errors import ParameterValidationError
from .logging_utils import configure_logging, debug_enabled, log_exception
from .presets import SOUND_TYPES
from .reporting import render_error
from .server import build_dispatcher, run_server
from .settings import Settings

_LOGGER = logging.getLogger("retrosfx.cli")
_CONSOLE = Console()


def _parse_assignment(raw: str) -> tuple[str, float]:
    name, sep, value = raw.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {raw!r}")
    try:
        return name.strip(), float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{name.strip()} needs a numeric value") from exc


def _parse_seed(raw: str) -> int | float:
    try:
        return int(raw)
    except ValueError:
        try:
            return float(raw)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"seed must be a number, got {raw!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="retrosfx")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the MCP server on stdio.")

    generate = sub.add_parser("generate", help="Render a preset sound effect.")
    generate.add_argument("type", choices=SOUND_TYPES)
    generate.add_argument("--output", required=True)
    generate.add_argument("--param", action="append", type=_parse_assignment, default=[])

    custom = sub.add_parser("custom", help="Render a sound from explicit parameters.")
    custom.add_argument("--output", required=True)
    custom.add_argument("--param", action="append", type=_parse_assignment, default=[])

    random = sub.add_parser("random", help="Render a randomized sound.")
    random.add_argument("--output", required=True)
    random.add_argument("--seed", type=_parse_seed, default=None)

    sub.add_parser("presets", help="List the built-in presets.")
    return parser


def _print(result: ToolResult) -> int:
    if result.is_error:
        _CONSOLE.print(Text(result.text, style="red"))
        return 1
    _CONSOLE.print(result.text, markup=False, highlight=False)
    return 0


def _render(dispatcher: Dispatcher, name: str, arguments: dict[str, object]) -> int:
    status = _print(dispatcher.dispatch(name, arguments))
    if status == 0:
        _print(dispatcher.dispatch("get_parameters"))
    return status


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        settings = Settings.from_env()

        if args.command == "serve":
            run_server(settings)
            return 0

        dispatcher = build_dispatcher(settings)

        if args.command == "generate":
            arguments: dict[str, object] = {"type": args.type, "filepath": args.output}
            if args.param:
                arguments["customParams"] = dict(args.param)
            return _render(dispatcher, "generate_sound_effect", arguments)

        if args.command == "custom":
            if not args.param:
                raise ParameterValidationError(
                    "parameters", None, reason="pass at least one --param NAME=VALUE"
                )
            return _render(
                dispatcher,
                "create_custom_sound",
                {"parameters": dict(args.param), "filepath": args.output},
            )

        if args.command == "random":
            arguments = {"filepath": args.output}
            if args.seed is not None:
                arguments["seed"] = args.seed
            return _render(dispatcher, "randomize_sound", arguments)

        if args.command == "presets":
            return _print(dispatcher.dispatch("list_presets"))

        parser.print_help()
        return 1
    except Exception as exc:
        _LOGGER.warning("retrosfx CLI failed: %s", exc, exc_info=debug_enabled())
        log_exception("retrosfx CLI", exc)
        render_error("retrosfx CLI", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
