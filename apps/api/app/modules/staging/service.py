import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from app.core.config import settings

logger = logging.getLogger("attestgate.staging")


@dataclass(frozen=True)
class StagedFile:
    path: Path
    role: Literal["input", "output"]


def staged_name(prefix: str, extension: str) -> str:
    # 128 bits of randomness; concurrent requests share the directory without locks.
    name = f"{prefix}_{uuid.uuid4().hex}"
    extension = extension.lstrip(".")
    return f"{name}.{extension}" if extension else name


class StagingArea:
    """Owns the upload and output directories shared by all requests."""

    def __init__(self, upload_dir: Path, output_dir: Path) -> None:
        self.upload_dir = upload_dir
        self.output_dir = output_dir

    def ensure_dirs(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def stage(self, data: bytes, *, prefix: str, extension: str) -> StagedFile:
        self.ensure_dirs()
        path = self.upload_dir / staged_name(prefix, extension)
        # "xb" so a collision surfaces instead of clobbering another request's file.
        with path.open("xb") as handle:
            handle.write(data)
        return StagedFile(path=path, role="input")

    def reserve_output_path(self, extension: str, *, prefix: str = "signed") -> Path:
        self.ensure_dirs()
        return self.output_dir / staged_name(prefix, extension)

    def read(self, path: Path) -> bytes:
        return path.read_bytes()

    def release(self, staged: StagedFile) -> None:
        self.discard(staged.path)

    def discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning(
                "staged_file_cleanup_failed",
                extra={"event_name": "staged_file_cleanup_failed", "file_name": path.name},
                exc_info=True,
            )

    @contextmanager
    def staged_input(self, data: bytes, *, prefix: str, extension: str) -> Iterator[StagedFile]:
        staged = self.stage(data, prefix=prefix, extension=extension)
        try:
            yield staged
        finally:
            self.release(staged)


_staging_area = StagingArea(settings.upload_path, settings.output_path)


def get_staging_area() -> StagingArea:
    return _staging_area
