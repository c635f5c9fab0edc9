# -*- coding: utf-8 -*-
"""
Exportação e pré-visualização do vídeo renderizado
"""

import shutil
from pathlib import Path

from ...domain.errors import RenderError
from ...infra.logging import get_logger
from ...rendering.render_executor import RenderArtifact


class ExportService:
    """Entrega o artefato renderizado como arquivo baixável ou URI reproduzível"""

    def __init__(self):
        self.logger = get_logger("ExportService")

    def export(self, artifact: RenderArtifact, destination: Path) -> Path:
        """Copia o vídeo final para o destino escolhido"""
        self._require_file(artifact)
        destination = Path(destination)
        if destination.is_dir():
            destination = destination / "clipstudio_video.mp4"
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(artifact.path, destination)
        self.logger.info("Vídeo exportado para %s", destination)
        return destination

    def preview_uri(self, artifact: RenderArtifact) -> str:
        self._require_file(artifact)
        return Path(artifact.path).resolve().as_uri()

    def _require_file(self, artifact: RenderArtifact):
        if not Path(artifact.path).exists():
            raise RenderError("O vídeo renderizado não está mais disponível. Renderize novamente.")
