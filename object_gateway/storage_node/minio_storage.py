# object_gateway/storage_node/minio_storage.py
import asyncio
import io
import logging
from typing import Tuple

import urllib3
from minio import Minio
from minio.error import MinioException, S3Error
from urllib3.exceptions import HTTPError as TransportError

from object_gateway.common.exceptions import (
    BlobNotFoundError,
    MissingCredentialsError,
    StorageBackendError,
)
from object_gateway.common.interfaces import IStorage
from object_gateway.models.schemas import NodeDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_STORAGE_TIMEOUT = 10.0
BACKEND_ERRORS = (MinioException, TransportError)


class MinioStorage(IStorage):
    """Single-node storage backed by one MinIO worker and one bucket"""

    def __init__(self, client: Minio, bucket_name: str, node_id: str = None):
        self.client = client
        self.bucket_name = bucket_name
        self.node_id = node_id

    async def setup(self) -> None:
        await self.ensure_bucket_exists()

    async def ensure_bucket_exists(self) -> None:
        """Create the bucket unless this node already owns it.

        Tolerates a concurrent creator winning the race between the
        existence check and the create call.
        """
        try:
            exists = await asyncio.to_thread(
                self.client.bucket_exists, bucket_name=self.bucket_name
            )
        except BACKEND_ERRORS as e:
            raise StorageBackendError(
                f"cannot get bucket info for {self.bucket_name}: {str(e)}",
                node_id=self.node_id,
            ) from e

        if exists:
            logger.debug(f"We already own {self.bucket_name}")
            return

        try:
            await asyncio.to_thread(self.client.make_bucket, bucket_name=self.bucket_name)
        except S3Error as e:
            if e.code == "BucketAlreadyOwnedByYou":
                logger.info(f"Bucket {self.bucket_name} was created concurrently")
                return
            raise StorageBackendError(
                f"cannot create bucket {self.bucket_name}: {str(e)}",
                node_id=self.node_id,
            ) from e
        except BACKEND_ERRORS as e:
            raise StorageBackendError(
                f"cannot create bucket {self.bucket_name}: {str(e)}",
                node_id=self.node_id,
            ) from e
        logger.info(f"Successfully created bucket {self.bucket_name}")

    async def put(self, object_id: str, content_type: str, body: bytes) -> None:
        try:
            await asyncio.to_thread(
                self.client.put_object,
                bucket_name=self.bucket_name,
                object_name=object_id,
                data=io.BytesIO(body),
                length=len(body),
                content_type=content_type or DEFAULT_CONTENT_TYPE,
            )
        except BACKEND_ERRORS as e:
            raise StorageBackendError(
                f"cannot put object into storage instance: {str(e)}",
                node_id=self.node_id,
                object_id=object_id,
            ) from e

    def _read_object(self, object_id: str) -> Tuple[bytes, str]:
        response = self.client.get_object(
            bucket_name=self.bucket_name, object_name=object_id
        )
        try:
            body = response.read()
            content_type = response.headers.get("Content-Type", DEFAULT_CONTENT_TYPE)
            expected = response.headers.get("Content-Length")
            if expected is not None and len(body) != int(expected):
                raise StorageBackendError(
                    f"short read: got {len(body)} of {expected} bytes",
                    node_id=self.node_id,
                    object_id=object_id,
                )
            return body, content_type
        finally:
            response.close()
            response.release_conn()

    async def get(self, object_id: str) -> Tuple[bytes, str]:
        try:
            return await asyncio.to_thread(self._read_object, object_id)
        except S3Error as e:
            if e.code == "NoSuchKey":
                raise BlobNotFoundError(
                    f"Blob {object_id} not found",
                    node_id=self.node_id,
                    object_id=object_id,
                ) from e
            raise StorageBackendError(
                f"cannot get object: {str(e)}",
                node_id=self.node_id,
                object_id=object_id,
            ) from e
        except BACKEND_ERRORS as e:
            raise StorageBackendError(
                f"cannot read object body: {str(e)}",
                node_id=self.node_id,
                object_id=object_id,
            ) from e


def make_http_client(timeout: float = DEFAULT_STORAGE_TIMEOUT) -> urllib3.PoolManager:
    """Connection pool whose calls give up after ``timeout`` seconds, without retries"""
    return urllib3.PoolManager(
        timeout=urllib3.Timeout(connect=timeout, read=timeout),
        retries=urllib3.Retry(total=0, redirect=False, raise_on_status=False),
    )


def connect(
    node: NodeDescriptor, bucket_name: str, timeout: float = DEFAULT_STORAGE_TIMEOUT
) -> MinioStorage:
    """Build a storage client bound to ``node``; does not touch the network"""
    if not node.credentials.complete:
        raise MissingCredentialsError(
            f"missing credential variables {node.credentials.missing}",
            node_id=node.key,
        )
    try:
        client = Minio(
            node.endpoint,
            access_key=node.credentials.access_key,
            secret_key=node.credentials.secret_key,
            secure=False,
            http_client=make_http_client(timeout),
        )
    except ValueError as e:
        raise StorageBackendError(
            f"cannot create storage instance for {node.endpoint}: {str(e)}",
            node_id=node.key,
        ) from e
    return MinioStorage(client, bucket_name, node_id=node.key)
