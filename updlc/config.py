from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from updlc.compiler.constants import (
    DEFAULT_ROOM_NAME,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
)
from updlc.errors import ConfigError
from updlc.game_model import GameMode


@dataclass(frozen=True)
class MultiplayerConfig:
    server_host: str = DEFAULT_SERVER_HOST
    server_port: int = DEFAULT_SERVER_PORT
    room_name: str = DEFAULT_ROOM_NAME

    def __post_init__(self) -> None:
        if not isinstance(self.server_host, str) or not self.server_host.strip():
            raise ConfigError("multiplayer.serverHost must be a non-empty string.")
        if isinstance(self.server_port, bool) or not isinstance(self.server_port, int):
            raise ConfigError("multiplayer.serverPort must be an integer.")
        if not 0 < self.server_port < 65536:
            raise ConfigError(
                f"multiplayer.serverPort must be in 1..65535, got {self.server_port}."
            )
        if not isinstance(self.room_name, str) or not self.room_name.strip():
            raise ConfigError("multiplayer.roomName must be a non-empty string.")


@dataclass(frozen=True)
class CompilerConfig:
    """Compilation settings. Only the multiplayer derivation layer reads
    ``multiplayer``; the single-player pipeline depends on nothing here."""

    game_mode: GameMode = GameMode.SINGLEPLAYER
    multiplayer: MultiplayerConfig = field(default_factory=MultiplayerConfig)

    @classmethod
    def from_dict(cls, payload: Optional[Mapping[str, Any]]) -> "CompilerConfig":
        """Build a config from a camelCase mapping.

        Recognized keys are ``gameMode`` and ``multiplayer.serverHost``,
        ``multiplayer.serverPort``, ``multiplayer.roomName``. Missing keys keep
        their defaults; invalid values raise :class:`ConfigError`.
        """
        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise ConfigError(f"Config must be a mapping, got {type(payload).__name__}.")

        game_mode = parse_game_mode(payload.get("gameMode", GameMode.SINGLEPLAYER.value))

        multiplayer = payload.get("multiplayer")
        if multiplayer is None:
            multiplayer = {}
        elif not isinstance(multiplayer, Mapping):
            raise ConfigError("multiplayer must be a mapping.")
        port = multiplayer.get("serverPort", DEFAULT_SERVER_PORT)
        if isinstance(port, str) and port.strip().isdigit():
            port = int(port.strip())

        return cls(
            game_mode=game_mode,
            multiplayer=MultiplayerConfig(
                server_host=multiplayer.get("serverHost", DEFAULT_SERVER_HOST),
                server_port=port,
                room_name=multiplayer.get("roomName", DEFAULT_ROOM_NAME),
            ),
        )


def parse_game_mode(value: Any) -> GameMode:
    if isinstance(value, GameMode):
        return value
    try:
        return GameMode(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(mode.value for mode in GameMode)
        raise ConfigError(f"Unknown gameMode {value!r}; expected one of: {allowed}.") from None
