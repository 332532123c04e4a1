"""사진 업로드 파이프라인 — 개수/크기 검증, 개별 업로드, 보상 등록.

Photo upload pipeline.
Validates the batch up front (count limit, per-file size), uploads each
file under a collision-free key, skips and logs individual failures, and
registers a delete compensation on the caller's Saga for every object it
stored. If the parent record write later fails, the Saga removes exactly
the objects uploaded during that attempt.
"""

import logging
import uuid
from typing import Sequence

from fastapi import UploadFile

from app.config import settings
from app.services.storage_service import storage_service
from app.utils.errors import ErrorKind, StorageError
from app.utils.exceptions import BadRequestError
from app.utils.saga import Saga

logger = logging.getLogger(__name__)


def _extension(filename: str | None) -> str:
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    return "bin"


def non_empty(files: Sequence[UploadFile] | None) -> list[UploadFile]:
    """빈 파일 파트 제거 — Drop empty multipart parts (no filename)."""
    return [f for f in (files or []) if f is not None and f.filename]


class PhotoUploadService:
    """사진 업로드 파이프라인 서비스.

    Photo upload pipeline service used by checklists, responses, defects
    and vehicle documents.
    """

    def generate_key(self, prefix: str, filename: str | None) -> str:
        """충돌 없는 저장 키 — ``<prefix>/<uuid hex>.<ext>``."""
        return f"{prefix.strip('/')}/{uuid.uuid4().hex}.{_extension(filename)}"

    def check_count(self, count: int, max_count: int | None, scope: str = "item") -> None:
        """최대 개수 검증 — 초과분은 잘라내지 않고 거부합니다.

        Reject a batch over the limit; nothing is uploaded.

        Raises:
            BadRequestError: 개수 초과 시 (e.g. "Máximo de 3 fotos por item")
        """
        if max_count is not None and count > max_count:
            raise BadRequestError(f"Máximo de {max_count} fotos por {scope}")

    async def upload(
        self,
        files: Sequence[UploadFile] | None,
        prefix: str,
        saga: Saga,
        max_count: int | None = None,
        scope: str = "item",
    ) -> list[str]:
        """파일 목록을 업로드하고 공개 URL 목록을 반환합니다.

        Upload a batch of files and return the public URL of each stored one.

        Args:
            files: 업로드할 파일 (Files to upload; empty parts are ignored)
            prefix: 저장 경로 접두사 (Destination key prefix)
            saga: 보상을 등록할 사가 (Saga receiving a delete compensation per object)
            max_count: 최대 개수, None이면 무제한 (Per-call limit, None = unbounded)
            scope: 오류 메시지용 범위 이름 (Scope word used in the limit message)

        Returns:
            list[str]: 업로드 성공한 파일의 공개 URL (URLs of successful uploads only)

        Raises:
            BadRequestError: 개수 초과 (Over the per-call limit, before any upload)
            StorageError: 파일 크기 초과 (kind=FILE_TOO_LARGE, before any upload)
        """
        batch: list[UploadFile] = non_empty(files)
        self.check_count(len(batch), max_count, scope)

        # 업로드 전 전체 검증 — Read and size-check the whole batch first
        payloads: list[tuple[UploadFile, bytes]] = []
        for upload_file in batch:
            # 한도 + 1바이트까지만 읽음 — never buffers more than the limit plus one byte
            data: bytes = await upload_file.read(settings.MAX_UPLOAD_BYTES + 1)
            if len(data) > settings.MAX_UPLOAD_BYTES:
                raise StorageError(ErrorKind.FILE_TOO_LARGE, detail=upload_file.filename)
            payloads.append((upload_file, data))

        urls: list[str] = []
        for upload_file, data in payloads:
            key: str = self.generate_key(prefix, upload_file.filename)
            try:
                url: str = storage_service.put_object(key, data, upload_file.content_type)
            except StorageError as exc:
                # 개별 실패는 기록 후 건너뜀 — Single-file failure is logged and skipped
                logger.warning("upload skipped for %s (%s): %s", upload_file.filename, prefix, exc.detail)
                continue
            saga.add_compensation(f"delete {key}", lambda key=key: storage_service.delete_object(key))
            urls.append(url)
        return urls


photo_upload_service: PhotoUploadService = PhotoUploadService()
