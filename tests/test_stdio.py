import io
import json

import anyio
import pytest

from es_mcp.stdio import serve_stdio


async def _serve(engine, lines: list[str]) -> list[dict]:
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    stdout = io.StringIO()
    await serve_stdio(engine, anyio.wrap_file(stdin), anyio.wrap_file(stdout))
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


@pytest.mark.asyncio
async def test_serves_requests_until_eof(make_engine, backend):
    backend.route("POST", "/_query", {"columns": [{"name": "n", "type": "long"}], "values": [[1]]})
    requests = [
        {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {"protocolVersion": "2024-11-05"}},
        {"jsonrpc": "2.0", "method": "notifications/initialized"},
        {"jsonrpc": "2.0", "id": 2, "method": "tools/call", "params": {"name": "esql", "arguments": {"query": "ROW n = 1"}}},
    ]

    responses = {r["id"]: r for r in await _serve(make_engine(), [json.dumps(r) for r in requests])}

    assert set(responses) == {1, 2}
    assert responses[1]["result"]["protocolVersion"] == "2024-11-05"
    assert responses[2]["result"]["content"][-1]["text"] == json.dumps({"n": 1}, indent=2)


@pytest.mark.asyncio
async def test_tool_errors_are_jsonrpc_errors(make_engine):
    request = {"jsonrpc": "2.0", "id": 7, "method": "tools/call", "params": {"name": "nope"}}

    [response] = await _serve(make_engine(), [json.dumps(request)])

    assert response["id"] == 7
    assert response["error"]["code"] == -32602


@pytest.mark.asyncio
async def test_invalid_lines_are_skipped(make_engine):
    ping = {"jsonrpc": "2.0", "id": "p", "method": "ping"}

    responses = await _serve(make_engine(), ["{oops", json.dumps(ping)])

    assert responses == [{"jsonrpc": "2.0", "id": "p", "result": {}}]


@pytest.mark.asyncio
async def test_engine_is_closed_at_eof(make_engine):
    engine = make_engine()
    closed = []

    async def aclose():
        closed.append(True)

    engine.aclose = aclose
    await _serve(engine, [])
    assert closed == [True]
