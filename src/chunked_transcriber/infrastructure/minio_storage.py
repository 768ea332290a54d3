"""MinIO implementation of the StorageClient interface."""

from typing import BinaryIO

from minio import Minio

from chunked_transcriber.exceptions import StorageDownloadError, StorageUploadError
from chunked_transcriber.logging import setup_logging

from .interfaces import StorageClient

logger = setup_logging()


class MinioStorageClient(StorageClient):
    """Fetches source recordings and stores finished transcripts in MinIO."""

    def __init__(self, client: Minio):
        self._client = client

    def download(self, bucket_name: str, object_name: str) -> bytes:
        response = None
        try:
            response = self._client.get_object(bucket_name, object_name)
            data = response.data
            logger.info(
                "Audio downloaded from MinIO",
                extra={
                    "bucket_name": bucket_name,
                    "object_name": object_name,
                    "size": len(data),
                },
            )
            return data
        except Exception as e:
            logger.exception(
                "MinIO download failed",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
            raise StorageDownloadError(object_name, e) from e
        finally:
            if response is not None:
                response.close()
                response.release_conn()

    def upload(
        self,
        bucket_name: str,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
    ) -> None:
        try:
            self._client.put_object(
                bucket_name=bucket_name,
                object_name=object_name,
                data=data,
                length=size,
                content_type=content_type,
            )
            logger.info(
                "Transcript uploaded to MinIO",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
        except Exception as e:
            logger.exception(
                "MinIO upload failed",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
            raise StorageUploadError(object_name, e) from e

    def ensure_bucket_exists(self, bucket_name: str) -> None:
        if not self._client.bucket_exists(bucket_name):
            self._client.make_bucket(bucket_name)
            logger.info("Bucket created", extra={"bucket_name": bucket_name})
