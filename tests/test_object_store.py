import asyncio
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from exceptions import ConfigurationError, StorageError
from storage.object_store import ObjectStore, build_cover_key, extract_storage_key


def _client_error(code, operation="PutObject"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def _store(client=None, endpoint="https://r2.example.com", bucket="holiday"):
    return ObjectStore(
        bucket=bucket,
        endpoint=endpoint,
        region="us-east-1",
        access_key_id="key",
        secret_access_key="secret",
        client=client or MagicMock(),
    )


def test_build_cover_key():
    assert build_cover_key("abc") == "cards/abc/cover-1.png"
    assert build_cover_key("abc", "1733050000000") == "cards/abc/cover-1733050000000.png"


@pytest.mark.parametrize("url, key", [
    ("https://r2.example.com/holiday/cards/abc/cover-1.png", "cards/abc/cover-1.png"),
    ("https://holiday.s3.us-east-1.amazonaws.com/cards/abc/cover-1733050000000.png",
     "cards/abc/cover-1733050000000.png"),
    ("not a url cards/abc/cover-2.png", "cards/abc/cover-2.png"),
    ("/placeholder-cover.jpg", None),
    ("https://elsewhere.example.com/images/cat.png", None),
    ("", None),
    (None, None),
])
def test_extract_storage_key(url, key):
    assert extract_storage_key(url) == key


def test_public_url_path_style_and_aws():
    assert _store().public_url("cards/a/cover-1.png") == "https://r2.example.com/holiday/cards/a/cover-1.png"
    assert _store(endpoint="").public_url("cards/a/cover-1.png") == (
        "https://holiday.s3.us-east-1.amazonaws.com/cards/a/cover-1.png"
    )


def test_put_uploads_public_object():
    client = MagicMock()

    url = asyncio.run(_store(client).put("cards/a/cover-1.png", b"png"))

    assert url == "https://r2.example.com/holiday/cards/a/cover-1.png"
    kwargs = client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "holiday"
    assert kwargs["ACL"] == "public-read"
    assert kwargs["ContentType"] == "image/png"
    assert kwargs["CacheControl"] == "public, max-age=31536000"


def test_missing_bucket_is_configuration_error():
    with pytest.raises(ConfigurationError):
        asyncio.run(_store(bucket="").put("cards/a/cover-1.png", b"png"))


def test_missing_credentials_is_configuration_error():
    store = ObjectStore(bucket="holiday", endpoint="", region="us-east-1", access_key_id="", secret_access_key="")

    with pytest.raises(ConfigurationError):
        asyncio.run(store.put("cards/a/cover-1.png", b"png"))


@pytest.mark.parametrize("code", ["AccessDenied", "NoSuchBucket", "InvalidAccessKeyId", "SignatureDoesNotMatch"])
def test_permission_errors_are_configuration_errors(code):
    client = MagicMock()
    client.put_object.side_effect = _client_error(code)

    with pytest.raises(ConfigurationError) as exc_info:
        asyncio.run(_store(client).put("cards/a/cover-1.png", b"png"))

    assert exc_info.value.status_code == 500


def test_other_failures_are_storage_errors():
    client = MagicMock()
    client.delete_object.side_effect = EndpointConnectionError(endpoint_url="https://r2.example.com")

    with pytest.raises(StorageError):
        asyncio.run(_store(client).delete("cards/a/cover-1.png"))
