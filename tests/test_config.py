import logging

import pytest

from s3_asyncio_proxy.config import ProxyConfig, build_backend
from s3_asyncio_proxy.exceptions import ConfigurationError, InvalidAddressingStyle
from s3_asyncio_proxy.local import LocalBackend
from s3_asyncio_proxy.s3 import S3Backend

AWS_ENV = {
    "AWS_ACCESS_KEY_ID": "env-access-key",
    "AWS_SECRET_ACCESS_KEY": "env-secret-key",
    "AWS_ENDPOINT_URL_S3": "https://s3.eu-central-1.amazonaws.com",
    "AWS_DEFAULT_REGION": "eu-central-1",
}


def test_defaults():
    config = ProxyConfig()
    assert config.timeout_seconds == 5
    assert config.expires_in == 86400
    assert config.passthrough_status is False


def test_with_defaults_uses_environment(caplog):
    config = ProxyConfig(service="s3", bucket="bucket")

    with caplog.at_level(logging.INFO):
        resolved = config.with_defaults(environ=AWS_ENV)

    assert resolved.access_key_id == "env-access-key"
    assert resolved.secret_access_key == "env-secret-key"
    assert resolved.endpoint_url == "https://s3.eu-central-1.amazonaws.com"
    assert resolved.region == "eu-central-1"
    assert resolved.link_style == "vhost"
    assert "access_key_id not configured, using AWS_ACCESS_KEY_ID" in caplog.text
    assert "env-secret-key" not in caplog.text
    # the original is frozen and left untouched
    assert config.access_key_id == ""


def test_with_defaults_keeps_explicit_values():
    config = ProxyConfig(
        service="s3",
        access_key_id="explicit",
        region="us-west-2",
        link_style="path",
    )

    resolved = config.with_defaults(environ=AWS_ENV)

    assert resolved.access_key_id == "explicit"
    assert resolved.region == "us-west-2"
    assert resolved.link_style == "path"
    assert resolved.secret_access_key == "env-secret-key"


def test_with_defaults_ignored_for_local():
    config = ProxyConfig(service="local", directory="/srv")
    assert config.with_defaults(environ=AWS_ENV) is config


def test_with_defaults_reads_os_environ(monkeypatch):
    for name, value in AWS_ENV.items():
        monkeypatch.setenv(name, value)

    resolved = ProxyConfig(service="s3").with_defaults()

    assert resolved.region == "eu-central-1"


def test_repr_hides_secret():
    config = ProxyConfig(service="s3", secret_access_key="super-secret")
    assert "super-secret" not in repr(config)


def test_validate_unknown_service():
    with pytest.raises(ConfigurationError, match="Service 'ftp' is unknown"):
        ProxyConfig(service="ftp").validate()


def test_validate_missing_s3_settings():
    config = ProxyConfig(service="s3", access_key_id="key", link_style="vhost")
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate()
    message = str(exc_info.value)
    assert "secret_access_key" in message
    assert "bucket" in message
    assert "access_key_id" not in message


def test_validate_invalid_link_style():
    config = ProxyConfig(service="s3", bucket="b", link_style="auto")
    config = config.with_defaults(environ=AWS_ENV)
    with pytest.raises(InvalidAddressingStyle):
        config.validate()


def test_validate_local_requires_directory():
    with pytest.raises(ConfigurationError, match="directory"):
        ProxyConfig(service="local").validate()


def test_validate_timeout():
    with pytest.raises(ConfigurationError, match="timeout_seconds"):
        ProxyConfig(service="local", directory="/srv", timeout_seconds=0).validate()


def test_build_s3_backend(monkeypatch):
    for name, value in AWS_ENV.items():
        monkeypatch.setenv(name, value)

    backend = build_backend(
        ProxyConfig(
            service="s3",
            bucket="bucket",
            prefix="p/",
            link_style="path",
            timeout_seconds=3,
            expires_in=600,
        )
    )

    assert isinstance(backend, S3Backend)
    assert backend.endpoint_host == "s3.eu-central-1.amazonaws.com"
    assert backend.region == "eu-central-1"
    assert backend.prefix == "p/"
    assert backend.address_style.value == "path"
    assert backend.timeout.total == 3
    assert backend.expires_in == 600


@pytest.mark.parametrize("expires_in", [0, 604801])
def test_build_backend_rejects_expiry_out_of_range(monkeypatch, expires_in):
    for name, value in AWS_ENV.items():
        monkeypatch.setenv(name, value)

    config = ProxyConfig(service="s3", bucket="bucket", expires_in=expires_in)
    with pytest.raises(ConfigurationError, match="expires_in"):
        build_backend(config)


def test_build_local_backend(tmp_path):
    backend = build_backend(ProxyConfig(service="local", directory=str(tmp_path)))

    assert isinstance(backend, LocalBackend)
    assert backend.directory == tmp_path


def test_build_backend_unknown_service():
    with pytest.raises(ConfigurationError):
        build_backend(ProxyConfig(service="gcs"))
