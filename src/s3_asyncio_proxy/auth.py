"""AWS Signature Version 4 query-string authentication for S3."""

import datetime as dt
import hashlib
import hmac
import urllib.parse
from collections.abc import Mapping

from yarl import URL

from .exceptions import ConfigurationError
from .urlparsing import AddressStyle, resolve_host_and_uri

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "s3"
TERMINATOR = "aws4_request"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
SIGNED_HEADERS = "host"

DEFAULT_EXPIRES_IN = 86400
# AWS refuses presigned URLs valid for more than 7 days
MAX_EXPIRES_IN = 604800


def _sha256_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _hmac_sha256(key: bytes, data: str) -> bytes:
    return hmac.new(key, data.encode("utf-8"), hashlib.sha256).digest()


def get_signing_key(secret_key: str, date_stamp: str, region: str) -> bytes:
    """Derives the SigV4 signing key for one day, region and the s3 service.

    Every step feeds the raw digest of the previous one, only the final
    signature computed with this key is hex-encoded.
    """
    k_date = _hmac_sha256(f"AWS4{secret_key}".encode(), date_stamp)
    k_region = _hmac_sha256(k_date, region)
    k_service = _hmac_sha256(k_region, SERVICE)
    k_signing = _hmac_sha256(k_service, TERMINATOR)
    return k_signing


def check_expires_in(expires_in: int) -> int:
    if not 1 <= expires_in <= MAX_EXPIRES_IN:
        raise ConfigurationError(
            f"expires_in must be between 1 and {MAX_EXPIRES_IN} seconds, "
            f"got {expires_in}"
        )
    return expires_in


def _uri_encode(value: str) -> str:
    # AWS requires ALL characters to be encoded except unreserved ones
    return urllib.parse.quote(value, safe="~")


def canonical_query_string(query_params: Mapping[str, str]) -> str:
    pairs = sorted(
        (_uri_encode(k), _uri_encode(str(v))) for k, v in query_params.items()
    )
    return "&".join(f"{k}={v}" for k, v in pairs)


def create_canonical_request(
    method: str,
    canonical_uri: str,
    query_params: Mapping[str, str],
    host: str,
) -> str:
    """Builds the canonical request of a presigned request.

    ``canonical_uri`` must already be escaped, it is used verbatim. Only the
    ``host`` header is signed and the payload is never hashed.
    """
    canonical_headers = f"host:{host.strip()}\n"

    return "\n".join(
        [
            method,
            canonical_uri,
            canonical_query_string(query_params),
            canonical_headers,
            SIGNED_HEADERS,
            UNSIGNED_PAYLOAD,
        ]
    )


class AWSSignatureV4:
    def __init__(self, access_key: str, secret_key: str, region: str = "us-east-1"):
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region

    def __repr__(self) -> str:
        return f"AWSSignatureV4(access_key={self.access_key!r}, region={self.region!r})"

    def _credential_scope(self, date_stamp: str) -> str:
        return f"{date_stamp}/{self.region}/{SERVICE}/{TERMINATOR}"

    def _create_string_to_sign(
        self,
        timestamp: str,
        date_stamp: str,
        canonical_request: str,
    ) -> str:
        return "\n".join(
            [
                ALGORITHM,
                timestamp,
                self._credential_scope(date_stamp),
                _sha256_hash(canonical_request.encode("utf-8")),
            ]
        )

    def create_presigned_url(
        self,
        endpoint_host: str,
        bucket: str,
        key: str,
        address_style: AddressStyle | str = AddressStyle.VHOST,
        expires_in: int = DEFAULT_EXPIRES_IN,
        scheme: str = "https",
    ) -> str:
        check_expires_in(expires_in)

        host, canonical_uri = resolve_host_and_uri(
            endpoint_host, bucket, key, address_style
        )

        now = dt.datetime.now(dt.UTC)
        timestamp = now.strftime("%Y%m%dT%H%M%SZ")
        date_stamp = now.strftime("%Y%m%d")
        credential_scope = self._credential_scope(date_stamp)

        query_params = {
            "X-Amz-Algorithm": ALGORITHM,
            "X-Amz-Credential": f"{self.access_key}/{credential_scope}",
            "X-Amz-Date": timestamp,
            "X-Amz-Expires": str(expires_in),
            "X-Amz-SignedHeaders": SIGNED_HEADERS,
        }

        canonical_request = create_canonical_request(
            method="GET",
            canonical_uri=canonical_uri,
            query_params=query_params,
            host=host,
        )

        string_to_sign = self._create_string_to_sign(
            timestamp=timestamp,
            date_stamp=date_stamp,
            canonical_request=canonical_request,
        )

        signing_key = get_signing_key(self.secret_key, date_stamp, self.region)
        signature = hmac.new(
            signing_key,
            string_to_sign.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

        query_params["X-Amz-Signature"] = signature

        # The path is already escaped, only the query gets encoded by yarl
        url = URL(f"{scheme}://{host}{canonical_uri}", encoded=True)
        return str(url.with_query(query_params))
