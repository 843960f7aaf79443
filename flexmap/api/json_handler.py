"""JSON Command Handler — exposes one Shell command as an ASGI JSON endpoint.

Invariants:
    - Request flow: build params -> Shell.exec_json -> write body
    - Each stage's failure is wrapped (BuildParamsError / ExecError / WriteError) and
      handed to the caller-supplied error_handler; nothing is swallowed
    - A WriteError after the response has started is still reported to error_handler,
      then re-raised: a second response cannot be sent
    - error_handler is mandatory: constructing without one raises CommandDefinitionError
    - Empty command output -> 204 No Content; otherwise the body with
      Content-Type: application/json

Design Decisions:
    - Raw ASGI app instead of a FastAPI endpoint function: the handler owns the send,
      so a failed write can still be routed through error_handler
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Sequence

from fastapi import APIRouter, status
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Message, Receive, Scope, Send

from flexmap.core.errors import (
    BuildParamsError, CommandDefinitionError, ExecError, FlexmapError, WriteError,
)
from flexmap.services.command_shell import Shell

logger = logging.getLogger(__name__)

ParamsBuilder = Callable[[Request], Awaitable[Mapping[str, Any] | None]]
ErrorHandler = Callable[[Request, FlexmapError], Awaitable[Response] | Response]

DEFAULT_METHODS: tuple[str, ...] = ("GET", "POST")


# ─── Params Builders ─────────────────────────────────────────────

async def query_params(request: Request) -> dict[str, Any]:
    """Query string as params. Repeated keys become lists."""
    params: dict[str, Any] = {}
    for key in request.query_params.keys():
        values = request.query_params.getlist(key)
        params[key] = values[0] if len(values) == 1 else values
    return params


async def json_body_params(request: Request) -> dict[str, Any]:
    """JSON object body as params. An empty body yields no params."""
    body = await request.body()
    if not body.strip():
        return {}
    value = await request.json()
    if not isinstance(value, dict):
        raise ValueError("request body must be a JSON object")
    return value


async def query_and_json_params(request: Request) -> dict[str, Any]:
    """Query params overlaid with the JSON body (body wins) for non-GET requests."""
    params = await query_params(request)
    if request.method not in ("GET", "HEAD"):
        params.update(await json_body_params(request))
    return params


# ─── Handler ─────────────────────────────────────────────────────

class JSONHandler:
    """ASGI app that runs one named command and writes its JSON result."""

    def __init__(
        self,
        shell: Shell,
        command_name: str,
        error_handler: ErrorHandler,
        params_builder: ParamsBuilder | None = None,
    ):
        if error_handler is None:
            raise CommandDefinitionError(f"{command_name}: error_handler is required")
        self.shell = shell
        self.command_name = command_name
        self.error_handler = error_handler
        self.params_builder = params_builder

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await self.handle(request)
        started = False

        async def tracked_send(message: Message) -> None:
            nonlocal started
            await send(message)
            if message["type"] == "http.response.start":
                started = True

        try:
            await response(scope, receive, tracked_send)
        except Exception as e:
            error = WriteError(self.command_name, e)
            error.__cause__ = e
            fallback = await self._handle_error(request, error)
            if started:
                # status line already sent: the fallback cannot be written
                raise error from e
            await fallback(scope, receive, send)

    async def handle(self, request: Request) -> Response:
        """Build params, execute, and produce the response (or the error handler's)."""
        try:
            params = await self._build_params(request)
        except Exception as e:
            error = BuildParamsError(self.command_name, e)
            error.__cause__ = e
            return await self._handle_error(request, error)

        try:
            body = await self.shell.exec_json(self.command_name, params)
        except Exception as e:
            error = ExecError(self.command_name, e)
            error.__cause__ = e
            return await self._handle_error(request, error)

        if not body:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        return Response(content=body, media_type="application/json")

    async def _build_params(self, request: Request) -> Mapping[str, Any] | None:
        if self.params_builder is None:
            return None
        return await self.params_builder(request)

    async def _handle_error(self, request: Request, error: FlexmapError) -> Response:
        logger.info(
            f"{error.message}",
            extra={
                "command_name": self.command_name,
                "error_code": error.code,
                "path": request.url.path,
            },
        )
        response = self.error_handler(request, error)
        if inspect.isawaitable(response):
            response = await response
        if not isinstance(response, Response):
            raise CommandDefinitionError(
                f"{self.command_name}: error_handler must return a Response",
            )
        return response

    def mount(
        self,
        app: Starlette | APIRouter,
        path: str,
        methods: Sequence[str] = DEFAULT_METHODS,
    ) -> "JSONHandler":
        """Register this handler as a route on a FastAPI/Starlette app or router."""
        app.add_route(path, self, methods=list(methods), name=self.command_name)
        return self
