"""Tests for the command-line entrypoint."""

import json

import pytest
from conftest import ENDPOINT

from jsonrpc_http.__main__ import (
    EXIT_CLIENT_ERROR,
    EXIT_OK,
    EXIT_RPC_ERROR,
    build_parser,
    main,
    parse_param,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("JSONRPC_BASIC_AUTH", "JSONRPC_DEFAULT_REQUEST_ID", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_parse_param():
    assert parse_param("1") == 1
    assert parse_param('{"name": "Alex"}') == {"name": "Alex"}
    assert parse_param("null") is None
    assert parse_param("Alex") == "Alex"


def test_parser_headers():
    args = build_parser().parse_args([ENDPOINT, "m", "-H", "X-A: 1", "--header", "Host:h"])
    assert args.headers == [("X-A", "1"), ("Host", "h")]


def test_parser_rejects_bad_header():
    with pytest.raises(SystemExit):
        build_parser().parse_args([ENDPOINT, "m", "-H", "no-colon"])


def test_call(http, server, capsys):
    server.reply('{"jsonrpc":"2.0","result":3,"id":5}')
    code = main([ENDPOINT, "addNumbers", "1", "2", "--id", "5"], http_client=http)
    assert code == EXIT_OK
    assert server.last.body == '{"jsonrpc":"2.0","method":"addNumbers","params":[1,2],"id":5}'
    assert json.loads(capsys.readouterr().out)["result"] == 3


def test_single_object_param(http, server):
    main([ENDPOINT, "createPerson", '{"name": "Alex", "age": 33}'], http_client=http)
    assert server.last.json()["params"] == {"name": "Alex", "age": 33}


def test_protocol_error_exit_code(http, server):
    server.reply('{"error":{"code":-32601,"message":"Method not found"},"id":0}')
    assert main([ENDPOINT, "missing"], http_client=http) == EXIT_RPC_ERROR


def test_http_error_exit_code(http, server, capsys):
    server.reply('{"error":{"code":123,"message":"bad"}}', status_code=500)
    assert main([ENDPOINT, "m"], http_client=http) == EXIT_CLIENT_ERROR
    assert json.loads(capsys.readouterr().out)["error"]["code"] == 123


def test_notify(http, server):
    server.reply("")
    assert main([ENDPOINT, "log", "hi", "--notify"], http_client=http) == EXIT_OK
    assert "id" not in server.last.json()


def test_headers_and_basic_auth(http, server):
    main(
        [ENDPOINT, "m", "-H", "X-Trace: abc", "--basic-auth", "alex:secret"],
        http_client=http,
    )
    assert server.last.headers["x-trace"] == "abc"
    assert server.last.headers["authorization"].startswith("Basic ")


def test_real_result_printed(http, server, capsys):
    server.reply('{"jsonrpc":"2.0","result":1.25,"id":0}')
    assert main([ENDPOINT, "m"], http_client=http) == EXIT_OK
    assert json.loads(capsys.readouterr().out)["result"] == 1.25
