import dataclasses
import enum
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .auth import DEFAULT_EXPIRES_IN, check_expires_in
from .backend import Backend
from .exceptions import ConfigurationError
from .local import LocalBackend
from .s3 import S3Backend
from .urlparsing import AddressStyle


class Service(enum.Enum):
    S3 = "s3"
    LOCAL = "local"


# config field -> environment variable used when the field is empty
ENV_FALLBACKS = {
    "access_key_id": "AWS_ACCESS_KEY_ID",
    "secret_access_key": "AWS_SECRET_ACCESS_KEY",
    "endpoint_url": "AWS_ENDPOINT_URL_S3",
    "region": "AWS_DEFAULT_REGION",
}

REQUIRED_S3_FIELDS = (
    "access_key_id",
    "secret_access_key",
    "region",
    "endpoint_url",
    "bucket",
)


@dataclass(frozen=True)
class ProxyConfig:
    service: str = ""
    timeout_seconds: float = 5

    # local
    directory: str = ""

    # s3
    access_key_id: str = ""
    secret_access_key: str = field(default="", repr=False)
    region: str = ""
    endpoint_url: str = ""
    bucket: str = ""
    prefix: str = ""
    link_style: str = ""
    expires_in: int = DEFAULT_EXPIRES_IN
    passthrough_status: bool = False

    def with_defaults(
        self,
        environ: Mapping[str, str] | None = None,
        logger: logging.Logger | None = None,
    ) -> "ProxyConfig":
        """Fills unset S3 settings from the standard AWS environment variables.

        Only applies to the s3 service, a missing link style becomes ``vhost``.
        """
        if self.service != Service.S3.value:
            return self

        if environ is None:
            environ = os.environ
        logger = logger or logging.getLogger(__name__)

        changes = {}
        for name, env_var in ENV_FALLBACKS.items():
            if not getattr(self, name):
                logger.info("%s not configured, using %s", name, env_var)
                changes[name] = environ.get(env_var, "")

        if not self.link_style:
            changes["link_style"] = AddressStyle.VHOST.value

        return dataclasses.replace(self, **changes)

    def validate(self):
        try:
            service = Service(self.service)
        except ValueError:
            raise ConfigurationError(
                f"Invalid configuration: Service {self.service!r} is unknown"
            ) from None

        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be positive")

        match service:
            case Service.LOCAL:
                if not self.directory:
                    raise ConfigurationError("directory is required for local service")
            case Service.S3:
                missing = [n for n in REQUIRED_S3_FIELDS if not getattr(self, n)]
                if missing:
                    raise ConfigurationError(
                        f"Missing S3 configuration: {', '.join(missing)}"
                    )
                AddressStyle.parse(self.link_style)
                check_expires_in(self.expires_in)


def build_backend(config: ProxyConfig, logger: logging.Logger | None = None) -> Backend:
    """Creates the single backend serving all requests of one app."""
    config = config.with_defaults(logger=logger)
    config.validate()

    match Service(config.service):
        case Service.S3:
            return S3Backend(
                access_key=config.access_key_id,
                secret_key=config.secret_access_key,
                region=config.region,
                endpoint_url=config.endpoint_url,
                bucket=config.bucket,
                prefix=config.prefix,
                address_style=config.link_style,
                timeout_seconds=config.timeout_seconds,
                expires_in=config.expires_in,
                logger=logger,
            )
        case Service.LOCAL:
            return LocalBackend(config.directory, logger=logger)
