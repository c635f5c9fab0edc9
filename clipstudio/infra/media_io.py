# -*- coding: utf-8 -*-
"""
Serviços de mídia/IO para FFprobe
"""

import json
import subprocess
from pathlib import Path
from typing import Optional

from ..domain.errors import MediaProbeError
from .logging import get_logger
from .paths import ffprobe_bin


class MediaIO:
    """Leitura de metadados de mídia via ffprobe"""

    def __init__(self, ffprobe_path: Optional[str] = None, timeout: float = 30):
        self.logger = get_logger("MediaIO")
        self.ffprobe_path = ffprobe_path
        self.timeout = timeout

    def probe_duration(self, media_path: Path) -> float:
        """Obtém a duração decodificável em segundos"""
        media_path = Path(media_path)
        if not media_path.exists():
            raise MediaProbeError(f"Arquivo de mídia não encontrado: {media_path}")

        cmd = [
            ffprobe_bin(self.ffprobe_path),
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "json",
            str(media_path),
        ]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
            data = json.loads(result.stdout)
            duration = float(data["format"]["duration"])
        except subprocess.CalledProcessError as e:
            self.logger.error("ffprobe falhou para %s: %s", media_path, e.stderr)
            raise MediaProbeError(
                f"Não foi possível ler os metadados de {media_path.name}"
            ) from e
        except (OSError, subprocess.TimeoutExpired, ValueError, KeyError) as e:
            self.logger.error("Erro ao obter duração de %s: %s", media_path, e)
            raise MediaProbeError(
                f"Não foi possível ler os metadados de {media_path.name}"
            ) from e

        if duration <= 0:
            raise MediaProbeError(f"Mídia sem duração decodificável: {media_path.name}")

        self.logger.debug("Duração de %s: %.2fs", media_path, duration)
        return duration
