from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class StoragePaths:
    root: Path

    def document_dir(self, document_id: str) -> Path:
        return self.root / "documents" / str(document_id)

    def original_path(self, document_id: str, suffix: str) -> Path:
        return self.document_dir(document_id) / f"original{suffix.lower()}"


class LocalDocumentStorage:
    """
    Keeps the uploaded source file of each document next to the library so a
    document can be re-extracted later.
    """

    def __init__(self, storage_paths: StoragePaths):
        self.paths = storage_paths

    def ensure_base_dirs(self, document_id: str) -> None:
        self.paths.document_dir(document_id).mkdir(parents=True, exist_ok=True)

    def save_original(self, document_id: str, source: Path) -> Path:
        self.ensure_base_dirs(document_id)
        target = self.paths.original_path(document_id, source.suffix)
        shutil.copy2(source, target)
        return target

    def find_original(self, document_id: str) -> Optional[Path]:
        base = self.paths.document_dir(document_id)
        if not base.exists():
            return None
        for candidate in sorted(base.glob("original*")):
            return candidate
        return None

    def delete_document(self, document_id: str) -> None:
        base = self.paths.document_dir(document_id)
        if base.exists():
            shutil.rmtree(base)
        else:
            logger.debug("No stored files for document %s", document_id)
