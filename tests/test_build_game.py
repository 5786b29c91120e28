import json
from pathlib import Path

from updlc.build_game import main


def write_flow(tmp_path):
    flow_path = tmp_path / "flow.json"
    flow_path.write_text(
        json.dumps(
            {
                "updlSpace": {
                    "id": "space-1",
                    "entities": [{"id": "ship-1", "data": {"entityType": "ship"}}],
                }
            }
        ),
        encoding="utf-8",
    )
    return flow_path


def test_cli_builds_single_player_bundle(tmp_path, capsys):
    out_dir = tmp_path / "out"
    assert main([str(write_flow(tmp_path)), str(out_dir)]) == 0

    assert (out_dir / "game_data.json").exists()
    assert (out_dir / "game_scripts.js").exists()
    stdout = capsys.readouterr().out
    assert "Generated UPDL scene (singleplayer)" in stdout
    assert "entities=1" in stdout


def test_cli_multiplayer_options(tmp_path, capsys):
    out_dir = tmp_path / "out"
    code = main(
        [
            str(write_flow(tmp_path)),
            str(out_dir),
            "--mode",
            "multiplayer",
            "--server-host",
            "play.example.com",
            "--server-port",
            "4000",
            "--room-name",
            "arena",
        ]
    )
    assert code == 0

    payload = json.loads((out_dir / "game_data.json").read_text(encoding="utf-8"))
    assert payload["serverConfig"] == {
        "host": "play.example.com",
        "port": 4000,
        "roomName": "arena",
        "protocol": "wss",
    }
    assert "network entities=1" in capsys.readouterr().out


def test_cli_reports_failures(tmp_path):
    assert main([str(tmp_path / "missing.json"), str(tmp_path / "out")]) == 1
    assert main([str(write_flow(tmp_path)), str(tmp_path / "out"), "--server-port", "0"]) == 1


def test_cli_builds_bundled_example(tmp_path, capsys):
    example = Path(__file__).resolve().parent.parent / "examples" / "mining_sector.json"
    out_dir = tmp_path / "out"
    assert main([str(example), str(out_dir), "--mode", "multiplayer"]) == 0

    stdout = capsys.readouterr().out
    assert "entities=4" in stdout
    assert "lights=2" in stdout
    assert "network entities=4" in stdout

    payload = json.loads((out_dir / "game_data.json").read_text(encoding="utf-8"))
    assert payload["serverConfig"]["protocol"] == "ws"
    assert payload["authScreenData"]["collectName"] is True
    scripts = (out_dir / "game_scripts.js").read_text(encoding="utf-8")
    assert 'new pc.Entity("asteroid-1")' in scripts
