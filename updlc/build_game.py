#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from updlc.compiler.constants import (
    DEFAULT_ROOM_NAME,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
)
from updlc.config import CompilerConfig, MultiplayerConfig
from updlc.errors import UPDLError
from updlc.exporter import GAME_DATA_FILENAME, GAME_SCRIPTS_FILENAME, export_flow, load_flow
from updlc.game_model import GameMode, MultiplayerGameData

logger = logging.getLogger("updlc.build_game")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Compile a UPDL flow JSON file into PlayCanvas scene scripts "
            "(game_data.json and game_scripts.js)."
        )
    )
    parser.add_argument("flow", help="Path to the flow JSON file.")
    parser.add_argument("output", help="Directory where the generated files will be written.")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in GameMode],
        default=GameMode.SINGLEPLAYER.value,
        help="Compilation mode (default: singleplayer).",
    )
    parser.add_argument(
        "--server-host",
        default=DEFAULT_SERVER_HOST,
        help="Multiplayer room server host.",
    )
    parser.add_argument(
        "--server-port",
        type=int,
        default=DEFAULT_SERVER_PORT,
        help="Multiplayer room server port.",
    )
    parser.add_argument(
        "--room-name",
        default=DEFAULT_ROOM_NAME,
        help="Multiplayer room name.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = CompilerConfig(
            game_mode=GameMode(args.mode),
            multiplayer=MultiplayerConfig(
                server_host=args.server_host,
                server_port=args.server_port,
                room_name=args.room_name,
            ),
        )
        flow = load_flow(args.flow)
        output_dir = Path(args.output).resolve()
        result = export_flow(flow, output_dir, config)
    except (UPDLError, OSError, ValueError) as exc:
        logger.error("Build failed: %s", exc)
        return 1

    print(f"Generated UPDL scene ({args.mode}): {output_dir}")
    print(f"- {output_dir / GAME_DATA_FILENAME}")
    print(f"- {output_dir / GAME_SCRIPTS_FILENAME}")
    print(
        f"  entities={len(result.entities)} components={len(result.components)} "
        f"lights={len(result.lights)}"
    )
    if isinstance(result, MultiplayerGameData):
        print(f"  network entities={len(result.network_entities)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
