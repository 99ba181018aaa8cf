"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

import datetime
import logging
import mimetypes
from types import TracebackType
from urllib.parse import quote

import oss2
from oss2.exceptions import OssError

from .environment import ObjectStorageProperties, StorageError

LOGGER = logging.getLogger(__name__)


def object_key(name: str, now: datetime.datetime | None = None) -> str:
    """
    Destination key for an uploaded file, grouped by month, e.g. `blog/202410/image.png`.

    :param name: Original file name. Directory components are discarded.
    """

    moment = now or datetime.datetime.now()
    basename = name.replace("\\", "/").rsplit("/", 1)[-1]
    if not basename:
        raise ValueError(f"expected: file name; got: {name!r}")
    return f"blog/{moment.strftime('%Y%m')}/{basename}"


def _error_message(e: OssError) -> str:
    if e.message or e.code:
        return e.message or e.code

    # transport failures carry the underlying error text in the body
    body = e.body.decode("utf-8", errors="replace") if isinstance(e.body, bytes) else str(e.body or "")
    return body or f"OSS status {e.status}"


def create_bucket(properties: ObjectStorageProperties) -> oss2.Bucket:
    "Opens a bucket with permanent credentials, or with temporary STS credentials if a security token is set."

    auth: oss2.Auth | oss2.StsAuth
    if properties.security_token is not None:
        auth = oss2.StsAuth(properties.access_key_id, properties.access_key_secret, properties.security_token)
    else:
        auth = oss2.Auth(properties.access_key_id, properties.access_key_secret)
    return oss2.Bucket(auth, properties.endpoint, properties.bucket)


class ObjectStorageAPI:
    """
    Represents an active connection to an Aliyun OSS bucket.
    """

    properties: ObjectStorageProperties
    session: "ObjectStorageSession | None" = None

    def __init__(self, properties: ObjectStorageProperties) -> None:
        self.properties = properties

    def __enter__(self) -> "ObjectStorageSession":
        self.session = ObjectStorageSession(create_bucket(self.properties), self.properties)
        return self.session

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.session = None


class ObjectStorageSession:
    """
    Uploads files to an object storage bucket, returning their public URL.
    """

    _bucket: oss2.Bucket
    properties: ObjectStorageProperties

    def __init__(self, bucket: oss2.Bucket, properties: ObjectStorageProperties) -> None:
        self._bucket = bucket
        self.properties = properties

    def url_for(self, key: str) -> str:
        "Public URL of an object in the bucket."

        return f"{self.properties.public_url}/{quote(key)}"

    def upload(self, name: str, data: bytes, *, content_type: str | None = None, now: datetime.datetime | None = None) -> str:
        """
        Uploads a file to the bucket.

        :param name: Original file name, used as the last component of the object key.
        :param data: File content.
        :param content_type: MIME type; guessed from the file name when omitted.
        :returns: Public URL of the uploaded object.
        :raises StorageError: The service rejected the upload, or the service could not be reached.
        """

        if content_type is None:
            content_type, _ = mimetypes.guess_type(name, strict=True)
            if content_type is None:
                content_type = "application/octet-stream"

        key = object_key(name, now)
        LOGGER.info("Uploading file: %s", key)
        try:
            result = self._bucket.put_object(key, data, headers={"Content-Type": content_type})
        except OssError as e:
            raise StorageError(_error_message(e)) from e

        LOGGER.debug("Uploaded %s with ETag %s (request ID %s)", key, result.etag, result.request_id)
        return self.url_for(key)
