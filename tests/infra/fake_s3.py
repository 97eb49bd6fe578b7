"""In-memory stand-in for the boto3 S3 client used in tests."""

from __future__ import annotations

import base64
import hashlib
import io
from dataclasses import dataclass, field
from typing import Any

from botocore.exceptions import ClientError
from botocore.response import StreamingBody

BUCKET = "strata-backups"


def client_error(code: str, message: str, operation: str, status: int = 400) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": message},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


@dataclass
class FakeS3Client:
    """Keeps objects per bucket and records every list request.

    ``page_cap`` mirrors the provider's hard per-request ceiling: MaxKeys above
    it is silently reduced.
    """

    buckets: dict[str, dict[str, bytes]] = field(default_factory=dict)
    etags: dict[tuple[str, str], str] = field(default_factory=dict)
    list_calls: list[dict[str, Any]] = field(default_factory=list)
    create_calls: list[dict[str, Any]] = field(default_factory=list)
    put_calls: list[dict[str, Any]] = field(default_factory=list)
    truncated: set[tuple[str, str]] = field(default_factory=set)
    page_cap: int = 1000

    def add_bucket(self, bucket: str) -> None:
        self.buckets.setdefault(bucket, {})

    def _bucket(self, bucket: str, operation: str) -> dict[str, bytes]:
        if bucket not in self.buckets:
            raise client_error(
                "NoSuchBucket", "The specified bucket does not exist.", operation, 404
            )
        return self.buckets[bucket]

    def create_bucket(self, *, Bucket: str, ACL: str = "private", **kwargs: Any) -> dict:
        self.create_calls.append({"Bucket": Bucket, "ACL": ACL, **kwargs})
        if Bucket in self.buckets:
            raise client_error(
                "BucketAlreadyExists",
                "The requested bucket name is not available.",
                "CreateBucket",
                409,
            )
        self.buckets[Bucket] = {}
        return {}

    def put_object(
        self,
        *,
        Bucket: str,
        Key: str,
        Body: bytes,
        ContentMD5: str | None = None,
        **kwargs: Any,
    ) -> dict:
        self.put_calls.append({"Bucket": Bucket, "Key": Key, **kwargs})
        objects = self._bucket(Bucket, "PutObject")
        digest = hashlib.md5(Body).digest()
        if ContentMD5 is not None and base64.b64decode(ContentMD5) != digest:
            raise client_error(
                "BadDigest",
                "The Content-MD5 you specified did not match what we received.",
                "PutObject",
            )
        objects[Key] = bytes(Body)
        etag = f'"{digest.hex()}"'
        self.etags[(Bucket, Key)] = etag
        return {"ETag": etag}

    def get_object(self, *, Bucket: str, Key: str) -> dict:
        objects = self._bucket(Bucket, "GetObject")
        if Key not in objects:
            raise client_error(
                "NoSuchKey", "The specified key does not exist.", "GetObject", 404
            )
        data = objects[Key]
        length = len(data)
        if (Bucket, Key) in self.truncated:
            data = data[: length // 2]
        return {
            "Body": StreamingBody(io.BytesIO(data), length),
            "ContentLength": length,
            "ETag": self.etags[(Bucket, Key)],
        }

    def delete_object(self, *, Bucket: str, Key: str) -> dict:
        objects = self._bucket(Bucket, "DeleteObject")
        objects.pop(Key, None)
        self.etags.pop((Bucket, Key), None)
        return {}

    def list_objects(
        self,
        *,
        Bucket: str,
        Prefix: str = "",
        Delimiter: str = "",
        Marker: str = "",
        MaxKeys: int = 1000,
    ) -> dict:
        self.list_calls.append(
            {"Prefix": Prefix, "Delimiter": Delimiter, "Marker": Marker, "MaxKeys": MaxKeys}
        )
        objects = self._bucket(Bucket, "ListObjects")
        matching = sorted(
            key for key in objects if key.startswith(Prefix) and key > Marker
        )
        limit = min(MaxKeys, self.page_cap)
        page = matching[:limit]
        return {
            "Contents": [{"Key": key, "Size": len(objects[key])} for key in page],
            "IsTruncated": len(matching) > limit,
        }

    def corrupt(self, bucket: str, key: str, data: bytes) -> None:
        """Replace stored bytes while keeping the recorded ETag."""
        self.buckets[bucket][key] = data

    def truncate(self, bucket: str, key: str) -> None:
        """Deliver only half of the object while declaring its full length."""
        self.truncated.add((bucket, key))
