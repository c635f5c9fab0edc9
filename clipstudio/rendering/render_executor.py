# -*- coding: utf-8 -*-
"""
Executor de renderização

Pipeline:
1. TimelineSnapshot -> GraphBuilder -> CompiledProgram
2. Bytes de cada clipe -> MediaEngine (input{i}.mp4)
3. CompiledProgram -> MediaEngine.execute -> output.mp4 -> MediaStore
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..domain.errors import ClipStudioError, RenderError, ValidationError
from ..domain.models.timeline import RenderSettings, Timeline, TimelineSnapshot
from ..infra.logging import get_logger
from ..infra.media_fetch import MediaFetcher
from ..infra.media_store import MediaStore
from .engine import MediaEngine
from .graph_builder import GraphBuilder


@dataclass(frozen=True)
class RenderArtifact:
    """Vídeo final renderizado, endereçável localmente"""

    path: Path
    duration: float
    revision: int
    clip_ids: tuple[str, ...]

    def references(self, clip_id: str) -> bool:
        return clip_id in self.clip_ids


class ProgressTracker:
    """Converte tempo processado em fração monotônica [0, 1]"""

    def __init__(self, total: float, callback: Optional[Callable[[float], None]] = None):
        self.total = total
        self.callback = callback
        self.fraction = 0.0

    def update(self, time_elapsed: float):
        if self.total > 0:
            fraction = min(time_elapsed / self.total, 1.0)
        else:
            fraction = 1.0
        if fraction > self.fraction:
            self.fraction = fraction
            self._emit()

    def finish(self):
        if self.fraction < 1.0:
            self.fraction = 1.0
            self._emit()

    def _emit(self):
        if self.callback:
            self.callback(self.fraction)


class RenderExecutor:
    """Materializa os clipes, executa o programa e produz um único artefato"""

    def __init__(
        self,
        engine_factory: Callable[[], MediaEngine],
        fetcher: MediaFetcher,
        store: MediaStore,
        settings: RenderSettings = None,
        graph_builder: Optional[GraphBuilder] = None,
    ):
        self.logger = get_logger("RenderExecutor")
        self.engine_factory = engine_factory
        self.fetcher = fetcher
        self.store = store
        self.settings = settings or RenderSettings()
        self.graph_builder = graph_builder or GraphBuilder()
        self._rendering = False

    @property
    def busy(self) -> bool:
        return self._rendering

    async def render(
        self,
        timeline: Timeline | TimelineSnapshot,
        on_progress: Optional[Callable[[float], None]] = None,
    ) -> RenderArtifact:
        if self._rendering:
            raise ValidationError("Já existe uma renderização em andamento.")

        snapshot = timeline.snapshot() if isinstance(timeline, Timeline) else timeline
        if not snapshot.clips:
            raise ValidationError("Adicione pelo menos um clipe antes de renderizar.")

        self._rendering = True
        try:
            return await self._render(snapshot, on_progress)
        finally:
            self._rendering = False

    async def _render(
        self, snapshot: TimelineSnapshot, on_progress: Optional[Callable[[float], None]]
    ) -> RenderArtifact:
        program = self.graph_builder.build(snapshot, self.settings)
        tracker = ProgressTracker(program.duration, on_progress)
        self.logger.info(
            "Iniciando renderização de %d clipes (%.2fs)", len(program.inputs), program.duration
        )

        engine = self.engine_factory()
        try:
            await engine.load()

            # downloads concorrentes; gather preserva a ordem da sequência
            payloads = await asyncio.gather(
                *(self.fetcher.fetch(clip.source_location) for clip in snapshot.clips)
            )
            for name, data in zip(program.inputs, payloads):
                engine.register_file(name, data)

            await engine.execute(program, on_progress=tracker.update)
            data = engine.read_output(program.output_name)
        except ClipStudioError as e:
            self.logger.error("Renderização falhou: %s", e.message)
            raise RenderError(f"Falha na renderização do vídeo: {e.message}") from e
        except Exception as e:
            self.logger.exception("Erro inesperado na renderização")
            raise RenderError("Falha na renderização do vídeo.") from e
        finally:
            engine.close()

        path = self.store.put(data, suffix=".mp4", prefix="render")
        tracker.finish()
        self.logger.info("Renderização concluída: %s", path)
        return RenderArtifact(
            path=path,
            duration=program.duration,
            revision=snapshot.revision,
            clip_ids=tuple(clip.id for clip in snapshot.clips),
        )
