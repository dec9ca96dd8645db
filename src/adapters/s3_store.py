"""S3 object store adapter.

Implements the core ObjectStorePort on top of a boto3 S3 client. Timeouts
and retries are configured on the client itself (see client.py).
"""

from __future__ import annotations

from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from core.errors import StoreAccessError
from core.models import ObjectPage


class S3ObjectStore:
    """Thin boto3 wrapper that satisfies the ObjectStorePort contract."""

    def __init__(self, client: Any, bucket: str, page_size: Optional[int] = None) -> None:
        self._client = client
        self._bucket = bucket
        self._page_size = page_size

    def list_page(self, prefix: str, continuation_token: Optional[str] = None) -> ObjectPage:
        """Return one ListObjectsV2 page under the prefix."""

        request: dict[str, Any] = {"Bucket": self._bucket, "Prefix": prefix}
        if continuation_token:
            request["ContinuationToken"] = continuation_token
        if self._page_size:
            request["MaxKeys"] = self._page_size
        try:
            response = self._client.list_objects_v2(**request)
        except (BotoCoreError, ClientError) as exc:
            raise StoreAccessError(
                f"Listing s3://{self._bucket}/{prefix} failed: {type(exc).__name__}: {exc}"
            ) from exc

        keys = [item["Key"] for item in response.get("Contents", [])]
        next_token = response.get("NextContinuationToken") if response.get("IsTruncated") else None
        return ObjectPage(keys=keys, next_token=next_token)

    def get_object(self, key: str) -> bytes:
        """Return the full body of one object."""

        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except (BotoCoreError, ClientError) as exc:
            raise StoreAccessError(
                f"Fetching s3://{self._bucket}/{key} failed: {type(exc).__name__}: {exc}",
                key=key,
            ) from exc
