import enum
import urllib.parse

from yarl import URL

from .exceptions import ConfigurationError, InvalidAddressingStyle


class AddressStyle(enum.Enum):
    PATH = "path"
    VHOST = "vhost"

    @classmethod
    def parse(cls, value: "AddressStyle | str") -> "AddressStyle":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidAddressingStyle(value) from None


def split_endpoint(endpoint: str) -> tuple[str, str]:
    """Splits an endpoint into ``(scheme, host)``.

    Accepts a bare host (``s3.example.com``, ``minio:9000``) or a full URL
    (``https://s3.example.com``). A bare host is served over https. The
    returned host keeps an explicit port since it is signed as-is.
    """
    endpoint = endpoint.strip().rstrip("/")
    if "://" not in endpoint:
        endpoint = f"https://{endpoint}"

    url = URL(endpoint)
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(f"Invalid endpoint URL '{endpoint}'")
    if url.path not in ("", "/"):
        raise ConfigurationError(
            f"Endpoint URL '{endpoint}' must not contain a path, use the prefix"
        )

    host = url.raw_host
    if url.explicit_port:
        host = f"{host}:{url.port}"
    return url.scheme, host


def escape_key(key: str) -> str:
    """Percent-encodes an object key segment by segment, keeping ``/``."""
    return urllib.parse.quote(key, safe="/~")


def resolve_host_and_uri(
    endpoint_host: str,
    bucket: str,
    key: str,
    address_style: AddressStyle | str,
) -> tuple[str, str]:
    """Returns the ``(host, canonical_uri)`` pair for one object.

    The two values are always derived from the same style, so a URL never
    mixes path-style hosts with virtual-hosted paths.
    """
    bucket = bucket.strip("/")
    escaped_key = escape_key(key)

    match AddressStyle.parse(address_style):
        case AddressStyle.PATH:
            # https://endpoint/bucket/key, old AWS S3 buckets or MinIO
            return endpoint_host, f"/{escape_key(bucket)}/{escaped_key}"
        case AddressStyle.VHOST:
            # https://bucket.endpoint/key
            return f"{bucket}.{endpoint_host}", f"/{escaped_key}"
