import asyncio
import logging

import aiohttp
from yarl import URL

from .auth import DEFAULT_EXPIRES_IN, AWSSignatureV4, check_expires_in
from .backend import ObjectContent
from .exceptions import FetchTransportError, ObjectFetchError
from .urlparsing import AddressStyle, split_endpoint

PASSTHROUGH_HEADERS = ("Content-Type", "Content-Length")


class S3Backend:
    """Serves objects from an S3 compatible store through presigned GET URLs.

    Credentials and the signing context are fixed at construction, every
    request signs a fresh URL and performs exactly one GET.
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        region: str,
        endpoint_url: str,
        bucket: str,
        prefix: str = "",
        address_style: AddressStyle | str = AddressStyle.VHOST,
        timeout_seconds: float = 5,
        expires_in: int = DEFAULT_EXPIRES_IN,
        logger: logging.Logger | None = None,
    ):
        self.region = region
        self.scheme, self.endpoint_host = split_endpoint(endpoint_url)
        self.bucket = bucket
        self.prefix = prefix
        self.address_style = AddressStyle.parse(address_style)
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.expires_in = check_expires_in(expires_in)
        self.logger = logger or logging.getLogger(__name__)

        self._auth = AWSSignatureV4(access_key, secret_key, region)
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            # bodies are passed through as stored, Content-Length must match
            self._session = aiohttp.ClientSession(auto_decompress=False)
        return self._session

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None

    def generate_presigned_url(self, key: str) -> str:
        return self._auth.create_presigned_url(
            endpoint_host=self.endpoint_host,
            bucket=self.bucket,
            key=key,
            address_style=self.address_style,
            expires_in=self.expires_in,
            scheme=self.scheme,
        )

    async def fetch(self, presigned_url: str) -> ObjectContent:
        session = await self._ensure_session()
        # already signed, must be sent without requoting
        url = URL(presigned_url, encoded=True)

        try:
            async with session.get(url, timeout=self.timeout) as response:
                if response.status != 200:
                    error_text = await response.text(errors="replace")
                    raise ObjectFetchError(response.status, error_text)

                headers = {
                    name: response.headers[name]
                    for name in PASSTHROUGH_HEADERS
                    if name in response.headers
                }
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchTransportError(
                f"Unable to fetch object from {url.host}{url.raw_path}: "
                f"{str(e) or type(e).__name__}"
            ) from e

        return ObjectContent(body=body, headers=headers)

    async def get(self, identifier: str) -> ObjectContent:
        key = self.prefix + identifier
        presigned_url = self.generate_presigned_url(key)
        self.logger.debug("Fetching s3://%s/%s", self.bucket, key)

        try:
            content = await self.fetch(presigned_url)
        except ObjectFetchError as e:
            self.logger.error(
                "S3 rejected GET s3://%s/%s (%s): %s",
                self.bucket,
                key,
                URL(presigned_url, encoded=True).raw_path,
                e,
            )
            raise
        except FetchTransportError as e:
            self.logger.error("Transport error for s3://%s/%s: %s", self.bucket, key, e)
            raise

        self.logger.debug(
            "Fetched s3://%s/%s (%d bytes)", self.bucket, key, len(content.body)
        )
        return content
