"""MCP stdio transport: six tools forwarded to the ``Dispatcher``."""

from __future__ import annotations

import logging
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from .dispatcher import (
    Dispatcher,
    FilePathArg,
    OverridesArg,
    ParametersArg,
    SeedArg,
    SoundTypeArg,
    ToolResult,
)
from .errors import EngineInitError
from .session import SoundSession
from .settings import Settings
from .synth import ChipSynth

_LOGGER = logging.getLogger("retrosfx.server")


def build_dispatcher(settings: Settings | None = None) -> Dispatcher:
    """Construct engine, session and dispatcher; engine failures are fatal."""
    settings = settings or Settings.from_env()
    try:
        engine = ChipSynth(sample_rate=settings.sample_rate, max_seconds=settings.max_seconds)
        engine.reset_to_defaults()
    except Exception as exc:
        raise EngineInitError(f"Failed to initialize synthesis engine: {exc}") from exc
    return Dispatcher(SoundSession(engine), debug=settings.debug)


def _respond(result: ToolResult) -> str:
    if result.is_error:
        raise ToolError(result.text)
    return result.text


def create_mcp_app(dispatcher: Dispatcher, *, name: str = "retrosfx") -> FastMCP:
    """Register the sound tools on a FastMCP app.

    Tool names and descriptions come from ``dispatcher.tool_definitions()``;
    the wrapper signatures reuse the dispatcher's argument types so clients
    see the same enum, ranges and field descriptions.
    """
    mcp = FastMCP(name)
    definitions = {tool.name: tool for tool in dispatcher.tool_definitions()}

    def register(tool: str) -> Callable[[Callable[..., str]], Callable[..., str]]:
        return mcp.tool(name=tool, description=definitions[tool].description)

    @register("generate_sound_effect")
    def generate_sound_effect(
        type: SoundTypeArg,
        filepath: FilePathArg,
        customParams: OverridesArg = None,
    ) -> str:
        arguments: dict[str, Any] = {"type": type, "filepath": filepath}
        if customParams is not None:
            arguments["customParams"] = customParams
        return _respond(dispatcher.dispatch("generate_sound_effect", arguments))

    @register("create_custom_sound")
    def create_custom_sound(parameters: ParametersArg, filepath: FilePathArg) -> str:
        return _respond(
            dispatcher.dispatch(
                "create_custom_sound", {"parameters": parameters, "filepath": filepath}
            )
        )

    @register("randomize_sound")
    def randomize_sound(filepath: FilePathArg, seed: SeedArg = None) -> str:
        arguments: dict[str, Any] = {"filepath": filepath}
        if seed is not None:
            arguments["seed"] = seed
        return _respond(dispatcher.dispatch("randomize_sound", arguments))

    @register("export_wav")
    def export_wav(filepath: FilePathArg) -> str:
        return _respond(dispatcher.dispatch("export_wav", {"filepath": filepath}))

    @register("get_parameters")
    def get_parameters() -> str:
        return _respond(dispatcher.dispatch("get_parameters"))

    @register("list_presets")
    def list_presets() -> str:
        return _respond(dispatcher.dispatch("list_presets"))

    return mcp


def run_server(settings: Settings | None = None) -> None:
    settings = settings or Settings.from_env()
    dispatcher = build_dispatcher(settings)
    app = create_mcp_app(dispatcher, name=settings.server_name)
    _LOGGER.info("Starting %s MCP server on stdio", settings.server_name)
    app.run()
