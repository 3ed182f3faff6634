import json
from pathlib import Path

from prthread import cli


def test_cli_parser_supports_serve_and_check_config() -> None:
    parser = cli.build_parser()

    parsed = parser.parse_args(["serve", "--config", "prthread.yaml", "--port", "8080"])
    assert parsed.command == "serve"
    assert parsed.port == 8080

    parsed_check = parser.parse_args(["check-config"])
    assert parsed_check.config == "config.json"


def test_check_config_prints_routing_table(tmp_path: Path, capsys) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"AutomaticPrMessages": {"Alpha": {"ChannelId": "C1"}}}))

    assert cli.main(["check-config", "--config", str(path)]) == 0
    out = capsys.readouterr().out
    assert "1 project(s) configured" in out
    assert "Alpha\tC1" in out


def test_serve_without_token_exits_with_config_error(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "prthread.yaml"
    path.write_text("projects:\n  Alpha:\n    channel_id: C1\n")
    monkeypatch.delenv("SLACK_ACCESS_TOKEN", raising=False)

    code = cli.main(["serve", "--config", str(path), "--env-file", str(tmp_path / "missing.env")])
    assert code == 2
