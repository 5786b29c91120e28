"""Orchestrates node extraction and per-category compilation.

Single-player and multiplayer outputs are derived from one compilation pass:
:meth:`HandlerManager.process_for_multiplayer` starts from the single-player
result and only adds the network derivation layer on top of it.
"""

import logging
from dataclasses import fields, replace
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple

from updlc.compiler import (
    ActionCompiler,
    ComponentCompiler,
    DataCompiler,
    EntityCompiler,
    EventCompiler,
    LightCompiler,
    SpaceCompiler,
)
from updlc.compiler.constants import DEFAULT_SPAWN_POSITION, LOCAL_HOSTS
from updlc.compiler.helpers import IdGenerator, random_id
from updlc.config import CompilerConfig
from updlc.errors import compile_context
from updlc.extractor import NodeExtractor
from updlc.fields import TRANSFORM_PATHS, coerce_text
from updlc.game_model import (
    DEFAULT_ROTATION,
    DEFAULT_SCALE,
    AuthScreenData,
    BuildOptions,
    CompiledArtifact,
    ExtractedNodes,
    GameMode,
    MultiplayerGameData,
    Node,
    ProcessedGameData,
    ServerConfig,
    Transform,
    Vec3,
)
from updlc.network import adapt_entities_for_network
from updlc.normalize import normalize_transform, normalize_vec3

logger = logging.getLogger(__name__)

SINGLE_PLAYER = BuildOptions(game_mode=GameMode.SINGLEPLAYER)

DEFAULT_AUTH_SCREEN = AuthScreenData()


class HandlerManager:
    """Compile a flow into :class:`ProcessedGameData` or
    :class:`MultiplayerGameData`.

    Every collaborator is injected at construction time; omitted ones are
    created with the shared ``id_generator``.
    """

    def __init__(
        self,
        config: Optional[CompilerConfig] = None,
        *,
        id_generator: Optional[IdGenerator] = None,
        extractor: Optional[NodeExtractor] = None,
        space_compiler: Optional[SpaceCompiler] = None,
        entity_compiler: Optional[EntityCompiler] = None,
        component_compiler: Optional[ComponentCompiler] = None,
        event_compiler: Optional[EventCompiler] = None,
        action_compiler: Optional[ActionCompiler] = None,
        data_compiler: Optional[DataCompiler] = None,
        light_compiler: Optional[LightCompiler] = None,
    ):
        self.config = config or CompilerConfig()
        self._id_generator = id_generator or random_id
        self._extractor = extractor or NodeExtractor()
        self._components = component_compiler or ComponentCompiler(self._id_generator)
        self._spaces = space_compiler or SpaceCompiler(self._id_generator)
        self._entities = entity_compiler or EntityCompiler(self._components, self._id_generator)
        self._events = event_compiler or EventCompiler(self._id_generator)
        self._actions = action_compiler or ActionCompiler(self._id_generator)
        self._data = data_compiler or DataCompiler(self._id_generator)
        self._lights = light_compiler or LightCompiler(self._id_generator)

    def process(self, flow_data: Optional[Mapping[str, Any]]):
        if self.config.game_mode is GameMode.MULTIPLAYER:
            return self.process_for_multiplayer(flow_data)
        return self.process_for_single_player(flow_data)

    def process_for_single_player(
        self, flow_data: Optional[Mapping[str, Any]]
    ) -> ProcessedGameData:
        nodes = self._extract(flow_data)
        return self._compile(nodes)

    def process_for_multiplayer(
        self, flow_data: Optional[Mapping[str, Any]]
    ) -> MultiplayerGameData:
        nodes = self._extract(flow_data)
        base = self._compile(nodes)
        try:
            network_entities = adapt_entities_for_network(nodes.entities, self._id_generator)
            result = MultiplayerGameData(
                **{name: getattr(base, name) for name in _BASE_FIELDS},
                network_entities=network_entities,
                player_spawn_point=self._player_spawn_point(nodes.spaces),
                auth_screen_data=self._auth_screen_data(nodes.spaces),
                server_config=self._server_config(),
            )
        except Exception:
            logger.exception("Multiplayer derivation failed")
            raise
        logger.debug(
            "Multiplayer processing complete: network_entities=%d server=%s:%d",
            len(result.network_entities),
            result.server_config.host,
            result.server_config.port,
        )
        return result

    def _extract(self, flow_data) -> ExtractedNodes:
        try:
            nodes = self._extractor.extract(flow_data)
        except Exception:
            logger.exception("Node extraction failed")
            raise
        # Script, artifact and network record must agree on a generated id.
        return replace(nodes, entities=self._with_ids(nodes.entities, "entity"))

    def _with_ids(self, nodes: Tuple[Node, ...], prefix: str) -> Tuple[Node, ...]:
        return tuple(node if node.id else replace(node, id=self._id_generator(prefix)) for node in nodes)

    def _compile(self, nodes: ExtractedNodes) -> ProcessedGameData:
        options = SINGLE_PLAYER
        result = ProcessedGameData(
            spaces=self._per_node("space", nodes.spaces, lambda node: self._spaces.process(node, options)),
            entities=self._per_node(
                "entity",
                nodes.entities,
                lambda node: self._entities.compile(node, options),
                with_transform=True,
            ),
            components=self._fanned_out("component", nodes.components, self._components.process, options),
            events=self._fanned_out("event", nodes.events, self._events.process, options),
            actions=self._fanned_out("action", nodes.actions, self._actions.process, options),
            data=self._fanned_out("data", nodes.data, self._data.process, options),
            lights=self._per_node("light", nodes.lights, lambda node: self._lights.process_one(node, options)),
        )
        logger.debug(
            "Single-player processing complete: spaces=%d entities=%d components=%d "
            "events=%d actions=%d data=%d lights=%d",
            len(result.spaces),
            len(result.entities),
            len(result.components),
            len(result.events),
            len(result.actions),
            len(result.data),
            len(result.lights),
        )
        return result

    def _per_node(
        self,
        category: str,
        nodes: Iterable[Node],
        compile_one: Callable[[Node], str],
        *,
        with_transform: bool = False,
    ) -> Tuple[CompiledArtifact, ...]:
        artifacts = []
        for node in nodes:
            with compile_context(category, node.id):
                try:
                    script = compile_one(node)
                except Exception:
                    logger.exception("Failed to compile %s %r", category, node.id)
                    raise
            transform = normalize_transform(node.lookup(TRANSFORM_PATHS)) if with_transform else None
            artifacts.append(
                CompiledArtifact(
                    id=_record_id(node, category),
                    script=script,
                    data=node,
                    transform=transform,
                )
            )
        return tuple(artifacts)

    def _fanned_out(
        self,
        category: str,
        nodes: Tuple[Node, ...],
        compile_all: Callable[[Iterable[Node], BuildOptions], str],
        options: BuildOptions,
    ) -> Tuple[CompiledArtifact, ...]:
        # One script for the whole category, shared by every record.
        if not nodes:
            return ()
        with compile_context(category, None):
            try:
                script = compile_all(nodes, options)
            except Exception:
                logger.exception("Failed to compile %s nodes", category)
                raise
        return tuple(
            CompiledArtifact(id=_record_id(node, category), script=script, data=node)
            for node in nodes
        )

    def _player_spawn_point(self, spaces: Tuple[Node, ...]) -> Transform:
        spawn = spaces[0].lookup(("data.playerSpawn", "playerSpawn")) if spaces else None
        if not isinstance(spawn, Mapping):
            spawn = {}
        return Transform(
            position=normalize_vec3(spawn.get("position"), Vec3(*DEFAULT_SPAWN_POSITION)),
            rotation=normalize_vec3(spawn.get("rotation"), DEFAULT_ROTATION),
            scale=DEFAULT_SCALE,
        )

    def _auth_screen_data(self, spaces: Tuple[Node, ...]) -> AuthScreenData:
        if not spaces:
            return DEFAULT_AUTH_SCREEN
        space = spaces[0]
        collect_name = space.lookup(("leadCollection.collectName", "data.leadCollection.collectName"))
        return AuthScreenData(
            collect_name=DEFAULT_AUTH_SCREEN.collect_name if collect_name is None else collect_name,
            title=coerce_text(space.lookup(("name", "data.name")), DEFAULT_AUTH_SCREEN.title),
            description=coerce_text(
                space.lookup(("description", "data.description")), DEFAULT_AUTH_SCREEN.description
            ),
            placeholder=DEFAULT_AUTH_SCREEN.placeholder,
        )

    def _server_config(self) -> ServerConfig:
        multiplayer = self.config.multiplayer
        return ServerConfig(
            host=multiplayer.server_host,
            port=multiplayer.server_port,
            room_name=multiplayer.room_name,
            protocol="ws" if multiplayer.server_host in LOCAL_HOSTS else "wss",
        )


_BASE_FIELDS = tuple(item.name for item in fields(ProcessedGameData))


def _record_id(node: Node, category: str) -> str:
    return node.id or f"default-{category}"
