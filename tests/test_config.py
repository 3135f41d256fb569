# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

import dataclasses

import pytest

from spark_server.config import Config, parse_args


def test_defaults():
    config = parse_args([])
    assert config == Config()
    assert config.listen == ("0.0.0.0", 8080)
    assert config.listen_tls == ("0.0.0.0", 10433)
    assert config.target == "."
    assert config.deny == ""
    assert config.origin == "*"


def test_single_dash_flags():
    config = parse_args([
        "-address", "127.0.0.1", "-port", "9000", "-sslPort", "9443",
        "-origin", "https://example.com", "-path", "/static/", "-deny", ".git,*.pem",
        "-status", "404", "-cert", "c.pem", "-key", "k.pem", "site",
    ])
    assert config == Config(
        address="127.0.0.1", port=9000, ssl_port=9443, origin="https://example.com",
        path="/static/", deny=".git,*.pem", status=404, cert="c.pem", key="k.pem",
        target="site",
    )


def test_double_dash_flags():
    config = parse_args(["--port", "81", "--ssl-port", "444", "--log-level", "debug"])
    assert config.port == 81
    assert config.ssl_port == 444
    assert config.log_level == "DEBUG"


def test_explicit_empty_target_is_kept():
    assert parse_args([""]).target == ""


def test_config_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        Config().port = 1


@pytest.mark.parametrize("argv", [
    ["-status", "99"],
    ["-status", "1000"],
    ["-status", "ok"],
    ["-port", "70000"],
    ["-port", "http"],
    ["-path", "static"],
])
def test_invalid_values_are_rejected(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        parse_args(argv)
    assert excinfo.value.code == 2
