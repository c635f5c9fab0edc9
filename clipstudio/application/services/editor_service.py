# -*- coding: utf-8 -*-
"""
Sessão de edição: estado explícito que liga timeline, geração e renderização
"""

from pathlib import Path
from typing import Callable, Optional

from ...domain.errors import ValidationError
from ...domain.models.generation import GenerationRequest
from ...domain.models.timeline import Clip, RenderSettings, Timeline
from ...infra.gemini_client import GeminiVideoService
from ...infra.logging import get_logger
from ...infra.media_fetch import MediaFetcher
from ...infra.media_io import MediaIO
from ...infra.media_store import MediaStore
from ...infra.project_io import load_project, save_project
from ...infra.settings import AppSettings
from ...rendering.engine import FFmpegEngine
from ...rendering.render_executor import RenderArtifact, RenderExecutor
from .export_service import ExportService
from .generation_orchestrator import GenerationOrchestrator


class EditorService:
    """Serviço de edição seguindo Clean Architecture"""

    def __init__(
        self,
        timeline: Timeline,
        store: MediaStore,
        orchestrator: GenerationOrchestrator,
        executor: RenderExecutor,
        exporter: Optional[ExportService] = None,
    ):
        self.logger = get_logger("EditorService")
        self.timeline = timeline
        self.store = store
        self.orchestrator = orchestrator
        self.executor = executor
        self.exporter = exporter or ExportService()
        self.current_render: Optional[RenderArtifact] = None

    @classmethod
    def from_settings(
        cls, settings: AppSettings, project_path: Optional[Path] = None
    ) -> "EditorService":
        """Monta a sessão com os colaboradores de produção"""
        store = MediaStore(Path(settings.media_dir))

        def release(clip: Clip):
            store.release(clip.source_location)

        if project_path is not None:
            timeline = load_project(project_path, on_release=release)
        else:
            timeline = Timeline(on_release=release)

        fetcher = MediaFetcher(api_key=settings.gemini_api_key)
        media_io = MediaIO(settings.ffprobe_path)
        service = GeminiVideoService(
            api_key=settings.gemini_api_key,
            fast_model=settings.fast_model,
            quality_model=settings.quality_model,
            resolution=settings.video_resolution,
        )
        orchestrator = GenerationOrchestrator(
            timeline,
            service,
            fetcher,
            store,
            probe=media_io.probe_duration,
            poll_interval=settings.poll_interval,
            poll_timeout=settings.poll_timeout,
        )
        render_settings = RenderSettings(
            vcodec=settings.vcodec,
            crf=settings.crf,
            preset=settings.preset,
            resolution=settings.frame_size(),
        )
        executor = RenderExecutor(
            engine_factory=lambda: FFmpegEngine(
                render_settings, settings.ffmpeg_path, settings.render_timeout
            ),
            fetcher=fetcher,
            store=store,
            settings=render_settings,
        )
        return cls(timeline, store, orchestrator, executor)

    async def generate_clip(self, request: GenerationRequest) -> Clip:
        """Submete a geração e aguarda o clipe ser adicionado à timeline"""
        self.invalidate_render()
        await self.orchestrator.submit(request)
        return await self.orchestrator.wait()

    def remove_clip(self, clip_id: str) -> Clip:
        clip = self.timeline.remove_clip(clip_id)
        if self.current_render and self.current_render.references(clip_id):
            self.invalidate_render()
        return clip

    async def render(self, on_progress: Optional[Callable[[float], None]] = None) -> RenderArtifact:
        artifact = await self.executor.render(self.timeline.snapshot(), on_progress)
        self.invalidate_render()
        self.current_render = artifact
        return artifact

    def invalidate_render(self):
        if self.current_render is not None:
            self.store.release(self.current_render.path)
            self.current_render = None

    def export(self, destination: Path) -> Path:
        if self.current_render is None:
            raise ValidationError("Nenhum vídeo renderizado para exportar.")
        return self.exporter.export(self.current_render, destination)

    def save(self, project_path: Path):
        save_project(self.timeline, project_path)

    def close(self):
        """Encerra a sessão: cancela o polling e libera o render em cache"""
        self.orchestrator.teardown()
        self.invalidate_render()
        self.store.cleanup()
