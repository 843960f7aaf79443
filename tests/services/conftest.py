"""Service test fixtures — a Shell with native, JSON and failing commands.

Invariants:
    - Every test gets a fresh Shell; handlers record their calls on `calls`
"""

import pytest

from flexmap.core.convert_numeric import int64
from flexmap.core.enforce_constraints import require
from flexmap.core.schema_type import Type
from flexmap.services.command_shell import Shell


def pair_type() -> Type:
    return Type().field("a", require(), int64()).field("b", require(), int64())


@pytest.fixture
def calls():
    return []


@pytest.fixture
def shell(calls):
    shell = Shell()

    @shell.command("sum", pair_type())
    async def sum_(params):
        calls.append(params)
        return {"sum": params.get("a") + params.get("b")}

    @shell.command("sum_json", pair_type(), json=True)
    async def sum_json(params):
        calls.append(params)
        return b'{"sum": %d}' % (params.get("a") + params.get("b"))

    @shell.command("nothing")
    async def nothing(params):
        return None

    @shell.command("nothing_json", json=True)
    async def nothing_json(params):
        return b""

    @shell.command("boom")
    async def boom(params):
        raise RuntimeError("boom")

    @shell.command("array_json", json=True)
    async def array_json(params):
        return b"[1, 2]"

    return shell
