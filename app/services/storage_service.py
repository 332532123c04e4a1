"""스토리지 서비스 — S3 또는 로컬 파일 저장.

Storage Service — S3 bucket or local disk.
AWS 키가 비어있으면 자동으로 로컬 모드로 전환됩니다 (Falls back to local mode
when AWS credentials or the bucket are not configured). Local files are
served by the app under /uploads.
"""

import logging
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings
from app.utils.errors import ErrorKind, StorageError

logger = logging.getLogger(__name__)

_PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent


def uploads_dir() -> Path:
    """로컬 업로드 디렉토리 — LOCAL_UPLOADS_DIR 또는 <project>/uploads."""
    return Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _PROJECT_ROOT / "uploads"


class StorageService:
    """파일 저장 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self) -> None:
        self._client = None

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID or not settings.AWS_S3_BUCKET

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def _base_url(self) -> str:
        if self.is_local:
            return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/uploads/"
        return f"https://{settings.AWS_S3_BUCKET}.s3.{settings.AWS_S3_REGION}.amazonaws.com/"

    def public_url(self, key: str) -> str:
        """저장 키의 공개 URL — Public URL for a storage key."""
        return f"{self._base_url()}{key}"

    def extract_key(self, file_url: str) -> str | None:
        """file URL에서 storage key를 추출합니다 (None if the URL is not ours)."""
        base: str = self._base_url()
        if file_url.startswith(base):
            return file_url[len(base):]
        return None

    def put_object(self, key: str, data: bytes, content_type: str | None = None) -> str:
        """객체를 저장하고 공개 URL을 반환합니다.

        Store an object and return its public URL.

        Raises:
            StorageError: 저장 실패 시 (kind=STORAGE)
        """
        try:
            if self.is_local:
                path: Path = uploads_dir() / key
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(data)
            else:
                params: dict[str, str | bytes] = {"Bucket": settings.AWS_S3_BUCKET, "Key": key, "Body": data}
                if content_type:
                    params["ContentType"] = content_type
                self.client.put_object(**params)
        except (OSError, BotoCoreError, ClientError) as exc:
            raise StorageError(ErrorKind.STORAGE, detail=f"{key}: {exc}") from exc
        return self.public_url(key)

    def delete_object(self, key: str) -> None:
        """객체를 삭제합니다.

        Delete a stored object.

        Raises:
            StorageError: 객체가 없으면 STORAGE_NOT_FOUND, 그 외 실패는 STORAGE
        """
        try:
            if self.is_local:
                (uploads_dir() / key).unlink()
            else:
                self.client.delete_object(Bucket=settings.AWS_S3_BUCKET, Key=key)
        except FileNotFoundError as exc:
            raise StorageError(ErrorKind.STORAGE_NOT_FOUND, detail=key) from exc
        except (OSError, BotoCoreError, ClientError) as exc:
            raise StorageError(ErrorKind.STORAGE, detail=f"{key}: {exc}") from exc

    def delete_objects(self, file_urls: list[str]) -> int:
        """공개 URL 목록의 객체를 삭제합니다 (best effort).

        Delete the objects behind a list of public URLs. Missing objects and
        foreign URLs are skipped. Returns the number deleted.
        """
        deleted: int = 0
        for file_url in file_urls:
            key: str | None = self.extract_key(file_url)
            if key is None:
                continue
            try:
                self.delete_object(key)
                deleted += 1
            except StorageError as exc:
                logger.warning("failed to delete %s: %s", key, exc.kind.value)
        return deleted


storage_service: StorageService = StorageService()
