# -*- coding: utf-8 -*-
"""
Motor de mídia: sistema de arquivos de trabalho + execução do FFmpeg
"""

import asyncio
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Optional, Protocol

from ..domain.errors import EngineError
from ..domain.models.program import CompiledProgram
from ..domain.models.timeline import RenderSettings
from ..infra.logging import get_logger
from ..infra.paths import ffmpeg_bin
from .cli_builder import CliBuilder
from .runner import Progress, Runner

ProgressCallback = Callable[[float], None]  # segundos já processados


class MediaEngine(Protocol):
    """Contrato do motor de mídia usado pelo RenderExecutor"""

    async def load(self) -> None:
        ...

    def register_file(self, name: str, data: bytes) -> None:
        ...

    async def execute(
        self, program: CompiledProgram, on_progress: Optional[ProgressCallback] = None
    ) -> None:
        ...

    def read_output(self, name: str) -> bytes:
        ...

    def close(self) -> None:
        ...


class FFmpegEngine:
    """MediaEngine sobre o binário ffmpeg, com diretório temporário como FS"""

    def __init__(
        self,
        settings: RenderSettings = None,
        ffmpeg_path: Optional[str] = None,
        timeout: Optional[float] = None,
        runner: Optional[Runner] = None,
    ):
        self.logger = get_logger("FFmpegEngine")
        self.settings = settings or RenderSettings()
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout
        self.runner = runner or Runner()
        self.cli_builder = CliBuilder(ffmpeg_path)
        self.workdir: Optional[Path] = None

    async def load(self):
        """Verifica o binário e prepara o diretório de trabalho"""
        binary = ffmpeg_bin(self.ffmpeg_path)
        try:
            await asyncio.to_thread(
                subprocess.run,
                [binary, "-version"],
                capture_output=True,
                check=True,
                timeout=30,
            )
        except (OSError, subprocess.SubprocessError) as e:
            self.logger.error("FFmpeg indisponível (%s): %s", binary, e)
            raise EngineError("Falha ao carregar as ferramentas de edição de vídeo (FFmpeg).") from e

        self.workdir = Path(tempfile.mkdtemp(prefix="clipstudio_render_"))
        self.logger.debug("Diretório de trabalho: %s", self.workdir)

    def register_file(self, name: str, data: bytes):
        self._require_loaded()
        (self.workdir / name).write_bytes(data)

    async def execute(
        self, program: CompiledProgram, on_progress: Optional[ProgressCallback] = None
    ):
        self._require_loaded()
        cmd = self.cli_builder.make_command(program, self.settings)

        callback = None
        if on_progress:
            loop = asyncio.get_running_loop()

            # o Runner roda em outra thread; o progresso volta para o event loop
            def callback(progress: Progress):
                loop.call_soon_threadsafe(on_progress, progress.seconds)

        await asyncio.to_thread(
            self.runner.run, cmd, callback, self.timeout, self.workdir
        )

    def read_output(self, name: str) -> bytes:
        self._require_loaded()
        path = self.workdir / name
        if not path.exists():
            raise EngineError(f"Arquivo de saída não encontrado: {name}")
        return path.read_bytes()

    def close(self):
        if self.workdir is not None:
            shutil.rmtree(self.workdir, ignore_errors=True)
            self.workdir = None

    def _require_loaded(self):
        if self.workdir is None:
            raise EngineError("Motor de mídia não carregado")
