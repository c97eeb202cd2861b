"""
Upload sinks: where uploaded files of a resource end up.

The repository hands every declared upload field to the sink and stores the
returned reference in the mapped column.
"""

import os
import uuid
from pathlib import Path
from typing import Any, Protocol

from scaffold_shared.config.logging import get_logger
from scaffold_shared.config.settings import settings

logger = get_logger(__name__)


class UploadSink(Protocol):
    """Stores an uploaded file and returns a reference to it."""

    def store(self, resource: str, field: str, upload: Any) -> str:
        ...


class LocalUploadSink:
    """
    Local filesystem upload sink.

    Files are written to ``<base_path>/<resource>/<uuid><ext>``; the returned
    reference is that path relative to ``base_path``. Directories are
    created on the first store.
    """

    def __init__(self, base_path: str | Path | None = None):
        self.base_path = Path(base_path or settings.upload_dir).resolve()

    def _resolve_path(self, relative: str) -> Path:
        full_path = (self.base_path / relative).resolve()

        # Keep every write inside base_path
        try:
            full_path.relative_to(self.base_path)
        except ValueError:
            raise ValueError(f"Invalid upload path: {relative} (outside base directory)")

        return full_path

    def store(self, resource: str, field: str, upload: Any) -> str:
        extension = os.path.splitext(upload.filename or "")[1].lower()
        relative = f"{resource}/{uuid.uuid4().hex}{extension}"
        full_path = self._resolve_path(relative)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        upload.file.seek(0)
        content = upload.file.read()
        full_path.write_bytes(content)

        logger.info(
            "Upload stored",
            resource=resource,
            field=field,
            path=relative,
            size=len(content),
        )
        return relative
