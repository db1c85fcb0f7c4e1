import logging

from aiohttp import web

from .backend import Backend
from .config import ProxyConfig, build_backend
from .exceptions import ObjectFetchError, ProxyError

BACKEND_KEY = web.AppKey("backend", Backend)


class ProxyHandler:
    """Answers ``GET /<identifier>`` with the content the backend resolves."""

    def __init__(
        self,
        backend: Backend,
        passthrough_status: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.backend = backend
        self.passthrough_status = passthrough_status
        self.logger = logger or logging.getLogger(__name__)

    async def handle(self, request: web.Request) -> web.Response:
        if request.method != "GET":
            return web.Response(
                status=501, text=f"Method {request.method} not implemented"
            )
        return await self.get(request)

    def _error_status(self, error: ProxyError) -> int:
        if self.passthrough_status and isinstance(error, ObjectFetchError):
            return error.status_code
        return 500

    async def get(self, request: web.Request) -> web.Response:
        identifier = request.path[1:]

        try:
            content = await self.backend.get(identifier)
        except ProxyError as e:
            self.logger.error("GET %s failed: %s", request.path, e)
            return web.Response(status=self._error_status(e), text=f"Get error: {e}")

        return web.Response(status=200, body=content.body, headers=content.headers)


def create_app(
    backend: Backend,
    passthrough_status: bool = False,
    logger: logging.Logger | None = None,
) -> web.Application:
    handler = ProxyHandler(
        backend, passthrough_status=passthrough_status, logger=logger
    )

    app = web.Application()
    app[BACKEND_KEY] = backend
    app.router.add_route("*", "/{path:.*}", handler.handle)

    async def close_backend(app: web.Application):
        await app[BACKEND_KEY].close()

    app.on_cleanup.append(close_backend)
    return app


def app_from_config(
    config: ProxyConfig, logger: logging.Logger | None = None
) -> web.Application:
    backend = build_backend(config, logger=logger)
    return create_app(
        backend, passthrough_status=config.passthrough_status, logger=logger
    )
