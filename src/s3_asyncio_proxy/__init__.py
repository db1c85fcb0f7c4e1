"""Serve objects from S3 compatible stores or a local directory over HTTP."""

__version__ = "0.1.0"

from .auth import AWSSignatureV4
from .backend import Backend, ObjectContent
from .config import ProxyConfig, build_backend
from .exceptions import (
    ConfigurationError,
    FetchTransportError,
    FileNotFound,
    InvalidAddressingStyle,
    LocalIOError,
    ObjectFetchError,
    ProxyError,
)
from .local import LocalBackend
from .s3 import S3Backend
from .server import create_app
from .urlparsing import AddressStyle

__all__ = [
    "AWSSignatureV4",
    "AddressStyle",
    "Backend",
    "ObjectContent",
    "ProxyConfig",
    "build_backend",
    "create_app",
    "S3Backend",
    "LocalBackend",
    "ProxyError",
    "ConfigurationError",
    "InvalidAddressingStyle",
    "FetchTransportError",
    "ObjectFetchError",
    "FileNotFound",
    "LocalIOError",
]
