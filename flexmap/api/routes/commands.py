"""Command Index — lists the commands a Shell exposes.

Invariants:
    - GET {prefix}/commands returns every registered command sorted by name
    - The router is built per Shell: no module-level registry
"""

import logging

from fastapi import APIRouter

from flexmap.schemas.command import CommandInfo, CommandListResponse
from flexmap.services.command_shell import Shell

logger = logging.getLogger(__name__)


def build_router(shell: Shell, prefix: str = "") -> APIRouter:
    """Create the command index router for `shell`."""
    router = APIRouter(prefix=f"{prefix}/commands", tags=["commands"])

    @router.get("", response_model=CommandListResponse)
    async def list_commands():
        """List registered commands and their param fields."""
        infos = [
            CommandInfo(
                name=name,
                fields=[f.name for f in command.params_type.fields]
                if command.params_type is not None else [],
                returns_json=command.exec_json_func is not None,
            )
            for name, command in sorted(shell.commands.items())
        ]
        return CommandListResponse(commands=infos, total=len(infos))

    return router
