import pytest

from updlc.config import CompilerConfig, MultiplayerConfig
from updlc.errors import ConfigError
from updlc.game_model import GameMode


def test_defaults():
    config = CompilerConfig()
    assert config.game_mode is GameMode.SINGLEPLAYER
    assert config.multiplayer == MultiplayerConfig("localhost", 2567, "mmoomm")
    assert CompilerConfig.from_dict(None) == config
    assert CompilerConfig.from_dict({}) == config


def test_from_dict_reads_camel_case_keys():
    config = CompilerConfig.from_dict(
        {
            "gameMode": "Multiplayer",
            "multiplayer": {"serverHost": "game.example.com", "serverPort": "3000", "roomName": "arena"},
        }
    )
    assert config.game_mode is GameMode.MULTIPLAYER
    assert config.multiplayer.server_host == "game.example.com"
    assert config.multiplayer.server_port == 3000
    assert config.multiplayer.room_name == "arena"


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"gameMode": "coop"}, "Unknown gameMode"),
        ({"multiplayer": {"serverPort": "abc"}}, "serverPort must be an integer"),
        ({"multiplayer": {"serverPort": 70000}}, "1..65535"),
        ({"multiplayer": {"serverHost": ""}}, "serverHost"),
        ({"multiplayer": {"roomName": 5}}, "roomName"),
        ({"multiplayer": []}, "multiplayer must be a mapping"),
    ],
)
def test_invalid_values_raise_config_error(payload, message):
    with pytest.raises(ConfigError, match=message):
        CompilerConfig.from_dict(payload)


def test_non_mapping_config_is_rejected():
    with pytest.raises(ConfigError, match="Config must be a mapping"):
        CompilerConfig.from_dict(["multiplayer"])
