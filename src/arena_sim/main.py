"""
Main entry point for the arena simulation.
"""

import argparse
import logging
import sys
import traceback
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from arena_sim.config import GameConfig
from arena_sim.core.engine import Engine
from arena_sim.input.handler import AutopilotInput
from arena_sim.ui.renderer import TerminalRenderer
from arena_sim.world.persistence import JsonFileStore, PersistenceGateway
from arena_sim.world.world import World

logger = logging.getLogger("arena_sim")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arena-sim", description="Run an arena session with the autopilot playing."
    )
    parser.add_argument("--config", default="config.toml", help="Path to config.toml")
    parser.add_argument("--ticks", type=int, help="Stop after this many simulation ticks")
    parser.add_argument("--seed", type=int, help="Seed for walls, spawns and AI jitter")
    parser.add_argument("--save-dir", help="Directory for the player save (overrides config)")
    parser.add_argument(
        "--render", action="store_true", help="Draw the arena in the terminal while running"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def setup_logging(console: Console, verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def run_session(args: argparse.Namespace, console: Console) -> World:
    config = GameConfig.load_from_toml(args.config)
    if args.seed is not None:
        config.seed = args.seed
    if args.save_dir:
        config.save_dir = args.save_dir

    gateway = PersistenceGateway(JsonFileStore(config.save_dir))
    try:
        world = World(config, gateway=gateway)
        controls = AutopilotInput(world)
        renderer = TerminalRenderer(console) if args.render else None

        engine = Engine(
            world,
            render=renderer.render if renderer else None,
            controls=controls,
            poll=controls.poll,
        )

        if args.render:
            engine.run(max_frames=args.ticks)
        else:
            # Headless: no real-time pacing, one fixed tick per step
            ticks = args.ticks if args.ticks is not None else config.target_fps * 60
            for _ in range(ticks):
                engine.step()
                if world.game_over:
                    break

        world.mark_dirty()
        world.persist_if_dirty()
    finally:
        gateway.flush()
        gateway.close()

    return world


def print_summary(world: World, console: Console):
    player = world.player
    console.print(
        f"[bold]{world.config.game_title}[/bold] "
        f"ticks={world.tick_count} wave={world.wave.index} score={player.score} "
        f"gold={player.ledger.get('gold')} high_score={player.high_score} "
        f"{'game over' if world.game_over else 'still standing'}"
    )


def main(argv: Optional[List[str]] = None):
    """Entry point for the arena."""
    args = build_parser().parse_args(argv)
    console = Console()
    setup_logging(console, args.verbose)

    try:
        world = run_session(args, console)
    except KeyboardInterrupt:
        console.print("\nSession interrupted by user.")
        sys.exit(0)
    except Exception as e:
        with open("arena_debug.log", "w") as f:
            f.write(f"CRASH REPORT:\n{str(e)}\n\n{traceback.format_exc()}")
        logger.error("An error occurred: %s", e)
        console.print("See arena_debug.log for details.")
        sys.exit(1)

    print_summary(world, console)


if __name__ == "__main__":
    main()
