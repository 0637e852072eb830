# tests/test_cli.py
import os
from unittest.mock import AsyncMock, patch

import pytest

from calc_core import cli
from calc_core.exceptions import ConnectionFailed, UnknownOperator


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """在没有 .env、没有 CALC_ 环境变量的临时目录中运行"""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("CALC_"):
            monkeypatch.delenv(key, raising=False)
    return tmp_path


@pytest.fixture
def mock_core():
    with patch("calc_core.cli.CalcCore") as core_cls:
        core_cls.return_value.run = AsyncMock(return_value="TOKEN123")
        yield core_cls


def _config_of(core_cls):
    (config,), _ = core_cls.call_args
    return config


def test_cli_prints_token_only(isolated, mock_core, capsys):
    code = cli.run_cli(["example.edu", "001234567"])

    assert code == cli.EXIT_OK
    assert capsys.readouterr().out == "TOKEN123\n"

    config = _config_of(mock_core)
    assert config.host == "example.edu"
    assert config.identifier == "001234567"
    assert config.port == 27998
    assert config.encrypted is False


def test_cli_ssl_switches_default_port(isolated, mock_core):
    assert cli.run_cli(["-s", "example.edu", "001234567"]) == cli.EXIT_OK

    config = _config_of(mock_core)
    assert config.encrypted is True
    assert config.port == 27999


def test_cli_explicit_port(isolated, mock_core):
    cli.run_cli(["-p", "4444", "-s", "example.edu", "001234567"])
    assert _config_of(mock_core).port == 4444


def test_cli_session_error_exit_code(isolated, mock_core, capsys):
    mock_core.return_value.run.side_effect = UnknownOperator("%")

    assert cli.run_cli(["example.edu", "001234567"]) == cli.EXIT_FAILURE
    assert capsys.readouterr().out == ""


def test_cli_error_with_cause(isolated, mock_core, caplog):
    err = ConnectionFailed("连接失败 tcp://example.edu:27998")
    err.__cause__ = ConnectionRefusedError(111, "Connection refused")
    mock_core.return_value.run.side_effect = err

    assert cli.run_cli(["example.edu", "001234567"]) == cli.EXIT_FAILURE
    assert "Connection refused" in caplog.text


def test_cli_config_error(isolated, mock_core):
    assert cli.run_cli(["-p", "0", "example.edu", "001234567"]) == cli.EXIT_FAILURE
    mock_core.assert_not_called()


def test_cli_requires_two_arguments(isolated, mock_core):
    with pytest.raises(SystemExit) as exc:
        cli.run_cli(["example.edu"])
    assert exc.value.code == 2


def test_cli_layers_toml_env_and_flags(isolated, mock_core, monkeypatch):
    toml_path = isolated / "client.toml"
    toml_path.write_text(
        '[client]\nhost = "ignored"\nidentifier = "ignored"\nread_timeout = 7\nprefix = "tomlprefix"\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("CALC_PREFIX", "envprefix")

    cli.run_cli(["-c", str(toml_path), "example.edu", "001234567"])

    config = _config_of(mock_core)
    assert config.read_timeout == 7.0
    assert config.prefix == "envprefix"
    assert config.host == "example.edu"


def test_cli_loads_dotenv(isolated, mock_core, monkeypatch):
    # 先经 monkeypatch 登记，测试结束后由它清理 load_dotenv 写入的值
    monkeypatch.setenv("CALC_READ_TIMEOUT", "1")
    (isolated / ".env").write_text("CALC_READ_TIMEOUT=4\n", encoding="utf-8")

    cli.run_cli(["example.edu", "001234567"])

    assert _config_of(mock_core).read_timeout == 4.0
