"""
Object storage for card cover images
S3-compatible (AWS S3, R2, MinIO) through boto3; blocking calls run in a worker thread
"""
# Standard library imports
import asyncio
import logging
import re
from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse

# Third-party imports
import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

# Local imports
from config import settings
from exceptions import ConfigurationError, StorageError

logger = logging.getLogger(__name__)

COVER_CONTENT_TYPE = "image/png"
COVER_CACHE_CONTROL = "public, max-age=31536000"

_COVER_KEY_RE = re.compile(r"cards/[^/]+/cover-[^/]+\.png")

# S3 error codes that mean the deployment is wrong, not that S3 is flaky
_CONFIG_ERROR_MESSAGES = {
    "AccessDenied": "Storage access denied, check bucket permissions and ACL settings",
    "NoSuchBucket": "Storage bucket does not exist",
    "InvalidAccessKeyId": "Storage access key is invalid",
    "SignatureDoesNotMatch": "Storage secret key is invalid",
}


def build_cover_key(card_id: str, version: str = "1") -> str:
    """cards/{card_id}/cover-{version}.png"""
    return f"cards/{card_id}/cover-{version}.png"


def extract_storage_key(url: Optional[str]) -> Optional[str]:
    """
    Recover the storage key from a public cover URL

    Handles path-style (``{endpoint}/{bucket}/cards/...``) and virtual-host
    style (``https://{bucket}.s3.{region}.amazonaws.com/cards/...``) URLs,
    falling back to a pattern search.

    Args:
        url: stored cover image URL

    Returns:
        the key, or None for placeholders and foreign URLs
    """
    if not url:
        return None

    try:
        parts = [part for part in urlparse(url).path.split("/") if part]
    except ValueError:
        parts = []

    if "cards" in parts:
        key = "/".join(parts[parts.index("cards"):])
        if _COVER_KEY_RE.fullmatch(key):
            return key

    match = _COVER_KEY_RE.search(url)
    return match.group(0) if match else None


class ObjectStore:
    """Upload and delete cover images"""

    def __init__(
        self,
        bucket: Optional[str] = None,
        endpoint: Optional[str] = None,
        region: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket if bucket is not None else settings.STORAGE_BUCKET_NAME
        self.endpoint = (endpoint if endpoint is not None else settings.STORAGE_ENDPOINT).rstrip("/")
        self.region = region or settings.STORAGE_REGION
        self._access_key_id = access_key_id if access_key_id is not None else settings.STORAGE_ACCESS_KEY_ID
        self._secret_access_key = (
            secret_access_key if secret_access_key is not None else settings.STORAGE_SECRET_ACCESS_KEY
        )
        self._client = client

    def _get_client(self):
        if not self.bucket:
            raise ConfigurationError(cause="Storage bucket is not configured (STORAGE_BUCKET_NAME)")

        if self._client is None:
            if not self._access_key_id or not self._secret_access_key:
                raise ConfigurationError(cause="Storage credentials are not configured")

            self._client = boto3.client(
                "s3",
                endpoint_url=self.endpoint or None,
                region_name=self.region,
                aws_access_key_id=self._access_key_id,
                aws_secret_access_key=self._secret_access_key,
                # R2 and MinIO need path-style addressing
                config=BotoConfig(s3={"addressing_style": "path"}),
            )
            logger.info(f"Storage client created, bucket: {self.bucket}, endpoint: {self.endpoint or 'aws'}")

        return self._client

    def public_url(self, key: str) -> str:
        if self.endpoint:
            return f"{self.endpoint}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def _translate(self, error: Exception, action: str, key: str) -> Exception:
        if isinstance(error, ClientError):
            code = error.response.get("Error", {}).get("Code", "")
            if code in _CONFIG_ERROR_MESSAGES:
                logger.error(f"Storage {action} failed for {key}: {code}")
                return ConfigurationError(cause=_CONFIG_ERROR_MESSAGES[code])
        if isinstance(error, NoCredentialsError):
            logger.error(f"Storage {action} failed for {key}: no credentials")
            return ConfigurationError(cause="Storage credentials are not configured")

        logger.error(f"Storage {action} failed for {key}: {str(error)}")
        return StorageError(cause=f"Failed to {action} {key}: {str(error)}")

    async def put(self, key: str, data: bytes, content_type: str = COVER_CONTENT_TYPE) -> str:
        """
        Upload an object with public-read ACL and a one year cache header

        Args:
            key: storage key
            data: object bytes
            content_type: MIME type

        Returns:
            public URL of the object

        Raises:
            ConfigurationError: bucket, credentials or permissions are wrong
            StorageError: any other storage failure
        """
        client = self._get_client()
        try:
            await asyncio.to_thread(
                client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl=COVER_CACHE_CONTROL,
                ACL="public-read",
            )
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "upload", key) from e

        logger.info(f"Uploaded {key}, size: {len(data)} bytes")
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        """Delete an object; S3 treats a missing key as success"""
        client = self._get_client()
        try:
            await asyncio.to_thread(client.delete_object, Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "delete", key) from e

        logger.info(f"Deleted {key}")


@lru_cache
def make_object_store() -> ObjectStore:
    return ObjectStore()
