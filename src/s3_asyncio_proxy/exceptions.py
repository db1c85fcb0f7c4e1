class ProxyError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code:
            return f"HTTP {self.status_code}: {self.message}"
        return self.message


class ConfigurationError(ProxyError):
    pass


class InvalidAddressingStyle(ConfigurationError):
    def __init__(self, style: object):
        super().__init__(f"Invalid addressing style {style!r}, use 'path' or 'vhost'")
        self.style = style


class FetchTransportError(ProxyError):
    """The object store could not be reached (DNS, connect, TLS or timeout)."""


class ObjectFetchError(ProxyError):
    """The object store answered with a non-200 status.

    ``body`` holds the upstream payload verbatim, usually an S3 XML error
    document.
    """

    def __init__(self, status_code: int, body: str):
        super().__init__(body or "Failed to fetch object", status_code=status_code)
        self.body = body


class FileNotFound(ProxyError):
    def __init__(self, path: str):
        super().__init__(f"File not found: {path}")
        self.path = path


class LocalIOError(ProxyError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
