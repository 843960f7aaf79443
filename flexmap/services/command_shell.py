"""Command Shell — explicit routing from command name to handler.

Invariants:
    - Every name -> Command mapping is registered explicitly: no getattr magic, no auto-discovery
    - Unknown names raise CommandNotFoundError
    - Params are parsed before the handler runs; invalid params raise ParamsInvalidError
      and the handler is never invoked
    - Handler exceptions are wrapped in CommandHandlerError with the original as __cause__;
      asyncio.CancelledError is never wrapped
    - exec() always yields a dict or None, exec_json() always yields bytes (b"" for no result)

Design Decisions:
    - A Command carries either a native (dict) or a JSON (bytes) handler; the shell
      converts between the two on demand through json_codec
    - Handlers are async so request cancellation reaches them; the core stays synchronous
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping

from flexmap.core.errors import (
    CommandDefinitionError, CommandHandlerError, CommandNotFoundError,
    CommandSerializationError, ParamsInvalidError,
)
from flexmap.core.record import Record
from flexmap.core.schema_type import Type
from flexmap.services import json_codec

logger = logging.getLogger(__name__)

ExecFunc = Callable[[Record], Awaitable[dict[str, Any] | None]]
ExecJSONFunc = Callable[[Record], Awaitable[bytes | None]]

_EMPTY_PARAMS = Type().freeze()


@dataclass(frozen=True)
class Command:
    """Binds a name and a params Type to a native or JSON handler."""

    name: str
    params_type: Type | None = None
    exec_func: ExecFunc | None = None
    exec_json_func: ExecJSONFunc | None = None

    def __post_init__(self):
        if not self.name:
            raise CommandDefinitionError("command name must not be empty")
        if self.exec_func is None and self.exec_json_func is None:
            raise CommandDefinitionError(
                f"{self.name}: missing function (exec_func or exec_json_func)",
            )

    def parse_params(self, params: Mapping[str, Any] | None) -> Record:
        """Parse raw params. Raises ParamsInvalidError when any field fails."""
        params_type = self.params_type if self.params_type is not None else _EMPTY_PARAMS
        record = params_type.parse(params or {})
        errors = record.errors()
        if errors is not None:
            logger.info(
                f"{self.name}: rejected params ({len(errors)} field error(s))",
                extra={"command_name": self.name, "field_count": len(errors)},
            )
            raise ParamsInvalidError(self.name, errors) from errors
        return record

    async def exec(self, params: Mapping[str, Any] | None) -> dict[str, Any] | None:
        record = self.parse_params(params)

        if self.exec_func is not None:
            return await self._call(self.exec_func, "exec_func", record)

        buf = await self._call(self.exec_json_func, "exec_json_func", record)
        try:
            return json_codec.unmarshal(buf)
        except Exception as e:
            raise CommandSerializationError(self.name, "unmarshal", e) from e

    async def exec_json(self, params: Mapping[str, Any] | None) -> bytes:
        record = self.parse_params(params)

        if self.exec_json_func is not None:
            buf = await self._call(self.exec_json_func, "exec_json_func", record)
            if not buf:
                return b""
            if not isinstance(buf, (bytes, bytearray, memoryview)):
                error = TypeError(f"{type(buf).__name__} is not bytes")
                raise CommandSerializationError(self.name, "marshal", error)
            return bytes(buf)

        response = await self._call(self.exec_func, "exec_func", record)
        try:
            return json_codec.marshal(response)
        except Exception as e:
            raise CommandSerializationError(self.name, "marshal", e) from e

    async def _call(self, func: Callable[[Record], Awaitable[Any]], label: str, record: Record) -> Any:
        try:
            return await func(record)
        except Exception as e:
            logger.warning(
                f"{self.name}: {label} failed: {e}",
                extra={"command_name": self.name},
            )
            raise CommandHandlerError(self.name, label, e) from e


class Shell:
    """Name-indexed registry of Commands. Explicit registration, no auto-discovery."""

    def __init__(self, *commands: Command):
        self._commands: dict[str, Command] = {}
        for command in commands:
            self.register(command)

    def register(self, command: Command) -> Command:
        if command.name in self._commands:
            raise CommandDefinitionError(f"duplicate command: {command.name}")
        self._commands[command.name] = command
        return command

    def command(
        self, name: str, params_type: Type | None = None, *, json: bool = False,
    ) -> Callable[[Callable[[Record], Awaitable[Any]]], Callable[[Record], Awaitable[Any]]]:
        """Decorator form of register(). `json=True` registers an exec_json_func."""
        def decorator(func):
            if json:
                self.register(Command(name, params_type, exec_json_func=func))
            else:
                self.register(Command(name, params_type, exec_func=func))
            return func
        return decorator

    @property
    def commands(self) -> Mapping[str, Command]:
        return MappingProxyType(self._commands)

    def get(self, name: str) -> Command:
        command = self._commands.get(name)
        if command is None:
            raise CommandNotFoundError(name)
        return command

    async def exec(
        self, name: str, params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Run a command and return its native result."""
        command = self.get(name)
        logger.debug(f"exec {name}", extra={"command_name": name})
        return await command.exec(params)

    async def exec_json(
        self, name: str, params: Mapping[str, Any] | None = None,
    ) -> bytes:
        """Run a command and return its JSON result (b"" for no result)."""
        command = self.get(name)
        logger.debug(f"exec_json {name}", extra={"command_name": name})
        return await command.exec_json(params)
