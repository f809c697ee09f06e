"""MinIO 객체 스토리지 서비스"""

import logging
from io import BytesIO
from typing import BinaryIO

from minio import Minio
from minio.error import S3Error

from toolbox.core.config import get_settings

logger = logging.getLogger(__name__)


class StorageService:
    """MinIO 스토리지 서비스"""

    BUCKET_AVATARS = "avatars"

    def __init__(self):
        self._client: Minio | None = None

    def _get_client(self) -> Minio:
        """Lazy initialization of MinIO client"""
        if self._client is None:
            settings = get_settings()
            self._client = Minio(
                endpoint=settings.minio_endpoint,
                access_key=settings.minio_access_key,
                secret_key=settings.minio_secret_key,
                secure=settings.minio_secure,
            )
            self._ensure_buckets()
        return self._client

    def _ensure_buckets(self) -> None:
        """필요한 버킷 생성"""
        try:
            if not self._client.bucket_exists(self.BUCKET_AVATARS):
                self._client.make_bucket(self.BUCKET_AVATARS)
                logger.info(f"Created bucket: {self.BUCKET_AVATARS}")
        except S3Error as e:
            logger.error(f"Failed to create bucket: {e}")
            raise

    def upload_file(
        self,
        bucket: str,
        object_name: str,
        data: BinaryIO,
        length: int,
        content_type: str = "application/octet-stream",
    ) -> str:
        """파일 업로드

        Args:
            bucket: 버킷 이름
            object_name: 객체 경로
            data: 파일 데이터 스트림
            length: 데이터 길이
            content_type: 콘텐츠 타입

        Returns:
            업로드된 객체 경로
        """
        client = self._get_client()
        try:
            client.put_object(
                bucket_name=bucket,
                object_name=object_name,
                data=data,
                length=length,
                content_type=content_type,
            )
            logger.info(f"Uploaded: {bucket}/{object_name}")
            return object_name
        except S3Error as e:
            logger.error(f"Upload failed: {e}")
            raise

    def upload_avatar(self, object_name: str, data: bytes, content_type: str) -> str:
        """아바타 이미지 업로드 (upsert)"""
        return self.upload_file(
            bucket=self.BUCKET_AVATARS,
            object_name=object_name,
            data=BytesIO(data),
            length=len(data),
            content_type=content_type,
        )

    def get_public_url(self, bucket: str, object_name: str) -> str:
        """공개 URL 생성"""
        base = get_settings().storage_public_url.rstrip("/")
        return f"{base}/{bucket}/{object_name}"


storage_service = StorageService()
