import asyncio
import logging
import pathlib

from .backend import ObjectContent
from .exceptions import FileNotFound, LocalIOError


class LocalBackend:
    """Serves files below one directory of the local filesystem."""

    def __init__(
        self, directory: str | pathlib.Path, logger: logging.Logger | None = None
    ):
        self.directory = pathlib.Path(directory)
        self.logger = logger or logging.getLogger(__name__)

    def _file_path(self, identifier: str) -> pathlib.Path:
        root = self.directory.resolve()
        path = (root / identifier).resolve()
        if not path.is_relative_to(root):
            # "../" must not escape the served directory
            raise FileNotFound(identifier)
        return path

    async def get(self, identifier: str) -> ObjectContent:
        file_path = self.directory / identifier
        try:
            path = self._file_path(identifier)
            content = await asyncio.to_thread(path.read_bytes)
        except FileNotFound:
            self.logger.error("Refused path outside %s: %r", self.directory, identifier)
            raise
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError) as e:
            self.logger.error("%s", e)
            raise FileNotFound(str(file_path)) from e
        except OSError as e:
            self.logger.error("%s", e)
            raise LocalIOError(str(file_path), e.strerror or str(e)) from e

        self.logger.debug("%r read", str(file_path))
        return ObjectContent(body=content)

    async def close(self):
        pass
