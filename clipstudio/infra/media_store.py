# -*- coding: utf-8 -*-
"""
Armazenamento local de mídia (equivalente aos blobs locais do navegador)

Os arquivos criados aqui pertencem exclusivamente a quem os recebeu
(clipe ou renderização) e são apagados em `release`.
"""

import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Optional

from .logging import get_logger


class MediaStore:
    """Diretório de blobs locais endereçáveis por caminho"""

    def __init__(self, root: Optional[Path] = None):
        self.logger = get_logger("MediaStore")
        self._temporary = root is None
        self.root = Path(root) if root else Path(tempfile.mkdtemp(prefix="clipstudio_"))
        self.root.mkdir(parents=True, exist_ok=True)

    def put(self, data: bytes, suffix: str = ".mp4", prefix: str = "blob") -> Path:
        path = self.root / f"{prefix}-{uuid.uuid4().hex}{suffix}"
        path.write_bytes(data)
        self.logger.debug("Blob criado: %s (%d bytes)", path, len(data))
        return path

    def owns(self, location) -> bool:
        try:
            path = Path(location).resolve()
        except (TypeError, OSError):
            return False
        return path.parent == self.root.resolve()

    def release(self, location) -> bool:
        """Apaga o blob se ele pertencer a este store"""
        if not self.owns(location):
            return False
        path = Path(location)
        path.unlink(missing_ok=True)
        self.logger.debug("Blob liberado: %s", path)
        return True

    def cleanup(self):
        """Remove o diretório inteiro quando ele é temporário"""
        if self._temporary:
            shutil.rmtree(self.root, ignore_errors=True)
