import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from updlc.compiler.helpers import IdGenerator
from updlc.config import CompilerConfig
from updlc.game_model import (
    AuthScreenData,
    CompiledArtifact,
    MultiplayerGameData,
    ProcessedGameData,
    ServerConfig,
)
from updlc.handler_manager import HandlerManager
from updlc.js_writer import RUNTIME_CONTRACT, ScriptWriter
from updlc.network import network_entity_to_dict, transform_to_dict

logger = logging.getLogger(__name__)

GAME_DATA_FILENAME = "game_data.json"
GAME_SCRIPTS_FILENAME = "game_scripts.js"

# Execution order of the assembled bundle.
BUNDLE_CATEGORIES = ("spaces", "lights", "entities", "components", "events", "actions", "data")

GameResult = Union[ProcessedGameData, MultiplayerGameData]


def compile_flow(
    flow: Optional[Mapping[str, Any]],
    config: Optional[CompilerConfig] = None,
    *,
    id_generator: Optional[IdGenerator] = None,
) -> GameResult:
    """Compile a flow in the mode selected by ``config``."""
    return HandlerManager(config, id_generator=id_generator).process(flow)


def load_flow(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a flow JSON file."""
    flow_path = Path(path)
    if not flow_path.exists():
        raise FileNotFoundError(f"Flow file not found: {flow_path}")
    return json.loads(flow_path.read_text(encoding="utf-8"))


def game_data_to_dict(result: GameResult) -> Dict[str, Any]:
    """Serialize a compilation result into its JSON payload (camelCase keys)."""
    payload: Dict[str, Any] = {
        "entities": [_artifact_to_dict(item) for item in result.entities],
        "spaces": [_artifact_to_dict(item) for item in result.spaces],
        "components": [_artifact_to_dict(item) for item in result.components],
        "actions": [_artifact_to_dict(item) for item in result.actions],
        "events": [_artifact_to_dict(item) for item in result.events],
        "lights": [_artifact_to_dict(item) for item in result.lights],
        "data": [_artifact_to_dict(item) for item in result.data],
    }
    if isinstance(result, MultiplayerGameData):
        payload.update(
            {
                "networkEntities": [network_entity_to_dict(item) for item in result.network_entities],
                "playerSpawnPoint": transform_to_dict(result.player_spawn_point),
                "authScreenData": _auth_screen_to_dict(result.auth_screen_data),
                "serverConfig": _server_config_to_dict(result.server_config),
            }
        )
    return payload


def assemble_bundle(result: GameResult) -> str:
    """Concatenate every distinct script into one ``runScene`` function.

    Categories whose records share a fanned-out script contribute it once.
    """
    writer = ScriptWriter()
    writer.block(RUNTIME_CONTRACT)
    writer.line("function runScene(app, pc, runtime) {")
    with writer.indent():
        seen = set()
        for category in BUNDLE_CATEGORIES:
            for artifact in getattr(result, category):
                if not artifact.script or artifact.script in seen:
                    continue
                seen.add(artifact.script)
                writer.block(artifact.script)
    writer.line("}")
    writer.line()
    writer.line("if (typeof module !== 'undefined') {")
    writer.line("    module.exports = { runScene };")
    writer.line("}")
    return writer.render() + "\n"


def export_flow(
    flow: Optional[Mapping[str, Any]],
    output_dir: Union[str, Path],
    config: Optional[CompilerConfig] = None,
    *,
    id_generator: Optional[IdGenerator] = None,
) -> GameResult:
    """Compile ``flow`` and write the JSON payload and script bundle to ``output_dir``."""
    result = compile_flow(flow, config, id_generator=id_generator)
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    data_path = out_dir / GAME_DATA_FILENAME
    scripts_path = out_dir / GAME_SCRIPTS_FILENAME

    data_path.write_text(
        json.dumps(game_data_to_dict(result), indent=2, sort_keys=True),
        encoding="utf-8",
    )
    scripts_path.write_text(assemble_bundle(result), encoding="utf-8")
    logger.info("Wrote %s and %s", data_path, scripts_path)
    return result


def _artifact_to_dict(artifact: CompiledArtifact) -> Dict[str, Any]:
    payload = {
        "id": artifact.id,
        "script": artifact.script,
        "data": dict(artifact.data.as_mapping()),
    }
    if artifact.transform is not None:
        payload["transform"] = transform_to_dict(artifact.transform)
    return payload


def _auth_screen_to_dict(auth: AuthScreenData) -> Dict[str, Any]:
    return {
        "collectName": auth.collect_name,
        "title": auth.title,
        "description": auth.description,
        "placeholder": auth.placeholder,
    }


def _server_config_to_dict(config: Optional[ServerConfig]) -> Optional[Dict[str, Any]]:
    if config is None:
        return None
    return {
        "host": config.host,
        "port": config.port,
        "roomName": config.room_name,
        "protocol": config.protocol,
    }
