"""API test fixtures — a Shell exposed through create_app and an async HTTP client.

Invariants:
    - Every test gets a fresh Shell and app
    - The client talks to the app in-process through ASGITransport
"""

import pytest
from httpx import ASGITransport, AsyncClient

from flexmap.core.convert_numeric import int64
from flexmap.core.enforce_constraints import require
from flexmap.core.schema_type import Type
from flexmap.main import create_app
from flexmap.services.command_shell import Shell

ROUTES = {
    "/sum": "sum",
    "/noop": "noop",
    "/boom": "boom",
}


@pytest.fixture
def calls():
    return []


@pytest.fixture
def shell(calls):
    shell = Shell()
    pair = Type().field("a", require(), int64()).field("b", require(), int64())

    @shell.command("sum", pair)
    async def sum_(params):
        calls.append(params)
        return {"sum": params.get("a") + params.get("b")}

    @shell.command("noop")
    async def noop(params):
        calls.append(params)
        return None

    @shell.command("boom")
    async def boom(params):
        raise RuntimeError("boom")

    return shell


@pytest.fixture
def app(shell):
    return create_app(shell, ROUTES)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
