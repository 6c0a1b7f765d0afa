"""
Interactive runner for the narrative world engine.

Loads a world, connects to the reasoning engine and plays turns from the
terminal. Nothing is written to disk; the state lives only in the session.

Usage:
    python -m runtime.main [--world FILE] [--debug] [--model ID]
                           [--max-iterations N] [--tools a,b,c]
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

# Add project root to path for imports
project_root = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from pydantic import ValidationError

import config
from backend.world.game_state import GameState
from backend.world.tool_catalog import DEFAULT_ENABLED_TOOLS, DEFAULT_REGISTRY
from runtime.orchestrator import AISettings, TurnOrchestrator, TurnResult
from runtime.reasoning_client import OpenAIReasoningClient
from runtime.session import GameSession

DEFAULT_WORLD = os.path.join(os.path.dirname(__file__), "demo_world.json")


def setup_logging(debug: bool = False) -> None:
    """Set up logging for the CLI."""
    level = logging.DEBUG if debug else getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    # Keep HTTP client chatter out of the game output unless debugging.
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("openai").setLevel(logging.WARNING)


def load_world(world_file: str = DEFAULT_WORLD) -> GameState:
    """Load game world from JSON file."""
    try:
        with open(world_file, "r", encoding="utf-8") as f:
            world_data = json.load(f)

        world = GameState.model_validate(world_data)
        logging.info(f"Loaded world from {world_file}")
    except FileNotFoundError:
        logging.error(f"World file not found: {world_file}")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"Invalid JSON in world file: {e}")
        raise
    except ValidationError as e:
        logging.error(f"World file does not match the expected schema: {e}")
        raise

    for problem in world.validate_invariants():
        logging.warning(f"World problem: {problem}")
    return world


def parse_tools(value: Optional[str]) -> List[str]:
    """Parse a comma-separated tool list, dropping unknown names."""
    if not value:
        return list(DEFAULT_ENABLED_TOOLS)
    tools = []
    for name in (part.strip() for part in value.split(",")):
        if not name:
            continue
        if name not in DEFAULT_REGISTRY:
            logging.warning(f"Ignoring unknown tool: {name}")
            continue
        tools.append(name)
    return tools


def print_result(result: TurnResult, debug: bool = False) -> None:
    if result.tool_logs:
        print("\nTool calls:")
        for log in result.tool_logs:
            print(f"  [{log.iteration}] {log.name}({json.dumps(log.args, ensure_ascii=False)})")
            print(f"      -> {log.result}")

    prefix = "" if result.success else "❌ "
    print(f"\n{prefix}{result.narrative}")

    if debug and result.token_usage:
        total = result.token_usage.total
        cost = f", ${result.cost_info.total_cost:.6f}" if result.cost_info else ""
        print(
            f"\n(tokens: {total.prompt_tokens} in / {total.completion_tokens} out{cost}; "
            f"iterations: {result.iterations})"
        )


def handle_command(session: GameSession, command: str) -> bool:
    """Handle a /command. Returns True when the input was a command."""
    if not command.startswith("/"):
        return False

    name, _, arg = command[1:].partition(" ")
    arg = arg.strip()
    if name == "state":
        print(session.state.to_prompt_json())
    elif name == "tools":
        for tool_name in DEFAULT_REGISTRY.names():
            marker = "x" if tool_name in session.enabled_tools else " "
            print(f"  [{marker}] {tool_name}")
    elif name == "enable" and arg:
        print("enabled" if session.enable_tool(arg) else f"unknown tool: {arg}")
    elif name == "disable" and arg:
        print("disabled" if session.disable_tool(arg) else f"not enabled: {arg}")
    else:
        print("Commands: /state, /tools, /enable NAME, /disable NAME, quit")
    return True


def run_game(
    world_file: str = DEFAULT_WORLD,
    debug: bool = False,
    model: Optional[str] = None,
    max_iterations: Optional[int] = None,
    tools: Optional[List[str]] = None,
) -> None:
    """
    Run the interactive game loop.

    Args:
        world_file: JSON file containing the initial world state
        debug: Enable debug logging and token/cost output
        model: Model id for the simulation phase (config default if None)
        max_iterations: Tool loop cap (config default if None)
        tools: Enabled tool names (default set if None)
    """
    overrides = {}
    if model:
        overrides["model_id"] = model
    if max_iterations:
        overrides["max_iterations"] = max_iterations
    settings = AISettings.from_config(**overrides)

    world = load_world(world_file)
    client = OpenAIReasoningClient.from_config()
    if not client.is_configured():
        print("⚠️  OPENAI_API_KEY is not set; every turn will fail until it is.")

    session = GameSession(
        world,
        TurnOrchestrator(client),
        settings=settings,
        enabled_tools=tools,
    )

    print("=" * 60)
    print(f"🎲 {world.world.game_genre or 'Narrative world'} 🎲")
    print("=" * 60)
    if world.world.world_description:
        print(world.world.world_description)
    print()
    print("Type what your character does. /tools lists tools, 'quit' exits.")
    print()

    while True:
        try:
            user_input = input(f"[Turn {session.turn_count + 1}] > ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            break

        if not user_input:
            continue
        if user_input.lower() in ["quit", "exit", "q"]:
            print("\nThanks for playing! Goodbye!")
            break
        if handle_command(session, user_input):
            continue

        print("\n" + "." * 40)
        result = session.play(user_input)
        print_result(result, debug=debug)
        print("\n" + "." * 40)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Play a narrative world turn by turn")
    parser.add_argument("--world", default=DEFAULT_WORLD, help="World file to load")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    parser.add_argument("--model", help="Model id for the simulation phase")
    parser.add_argument(
        "--max-iterations", type=int, help="Maximum tool-calling iterations per turn"
    )
    parser.add_argument(
        "--tools",
        help=f"Comma-separated enabled tools (default: {','.join(DEFAULT_ENABLED_TOOLS)})",
    )
    args = parser.parse_args(argv)

    setup_logging(args.debug)
    run_game(
        world_file=args.world,
        debug=args.debug,
        model=args.model,
        max_iterations=args.max_iterations,
        tools=parse_tools(args.tools),
    )


if __name__ == "__main__":
    main()
