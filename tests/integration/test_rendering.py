# -*- coding: utf-8 -*-
"""
Testes de integração: sessão de edição completa e renderização com FFmpeg real
"""

import asyncio
import shutil
import subprocess
import pytest
from pathlib import Path

from clipstudio.application.services.editor_service import EditorService
from clipstudio.application.services.generation_orchestrator import GenerationOrchestrator
from clipstudio.domain.errors import ValidationError
from clipstudio.domain.models.generation import GenerationRequest, GenerationStatus, SeedImage
from clipstudio.domain.models.timeline import Clip, RenderSettings, Timeline
from clipstudio.infra.media_fetch import MediaFetcher
from clipstudio.infra.media_io import MediaIO
from clipstudio.infra.media_store import MediaStore
from clipstudio.rendering.engine import FFmpegEngine
from clipstudio.rendering.render_executor import RenderExecutor

HAS_FFMPEG = shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None


class ScriptedService:
    """Cada submissão termina na segunda consulta com um novo arquivo"""

    def __init__(self, source_dir: Path):
        self.source_dir = source_dir
        self.count = 0

    async def submit(self, prompt, seed_image, aspect_ratio, quality_mode):
        self.count += 1
        path = self.source_dir / f"gerado{self.count}.mp4"
        path.write_bytes(f"video {self.count}".encode())
        return {"path": path, "checks": 0}

    async def check_status(self, handle):
        handle = dict(handle, checks=handle["checks"] + 1)
        if handle["checks"] < 2:
            return GenerationStatus(done=False, handle=handle)
        return GenerationStatus(done=True, result_location=str(handle["path"]), handle=handle)


class RecordingEngine:
    def __init__(self):
        self.files = {}

    async def load(self):
        pass

    def register_file(self, name, data):
        self.files[name] = data

    async def execute(self, program, on_progress=None):
        on_progress(program.duration / 2)
        self.files[program.output_name] = b"|".join(self.files[n] for n in program.inputs)

    def read_output(self, name):
        return self.files[name]

    def close(self):
        pass


@pytest.fixture
def editor(tmp_path):
    source_dir = tmp_path / "api"
    source_dir.mkdir()
    store = MediaStore(tmp_path / "media")
    timeline = Timeline(on_release=lambda clip: store.release(clip.source_location))
    fetcher = MediaFetcher()
    durations = iter([10.0, 8.0, 5.0])
    orchestrator = GenerationOrchestrator(
        timeline,
        ScriptedService(source_dir),
        fetcher,
        store,
        probe=lambda path: next(durations),
        poll_interval=0,
    )
    executor = RenderExecutor(RecordingEngine, fetcher, store)
    service = EditorService(timeline, store, orchestrator, executor)
    yield service
    service.close()


def request(prompt):
    return GenerationRequest(prompt=prompt, seed_image=SeedImage(b"png", "image/png"))


def test_generate_render_export_flow(editor, tmp_path):
    progress = []

    async def scenario():
        first = await editor.generate_clip(request("Praia ao amanhecer"))
        second = await editor.generate_clip(request("Cidade à noite"))
        editor.timeline.add_overlay("Bem-vindo", "top")
        artifact = await editor.render(progress.append)
        return first, second, artifact

    first, second, artifact = asyncio.run(scenario())

    assert [c.name for c in editor.timeline.clips] == ["Praia ao amanhecer", "Cidade à noite"]
    assert editor.timeline.overlays[0].end_time == 18
    assert Path(artifact.path).read_bytes() == b"video 1|video 2"
    assert progress == [0.5, 1.0]

    exported = editor.export(tmp_path / "saida")
    assert exported.name == "clipstudio_video.mp4"
    assert exported.read_bytes() == b"video 1|video 2"

    editor.remove_clip(first.id)
    assert editor.current_render is None
    assert not Path(artifact.path).exists()
    assert not Path(first.source_location).exists()
    assert Path(second.source_location).exists()
    # a legenda mantém o intervalo original após a remoção
    assert editor.timeline.overlays[0].end_time == 18


def test_export_requires_render(editor, tmp_path):
    with pytest.raises(ValidationError):
        editor.export(tmp_path / "saida.mp4")


def test_new_render_replaces_previous(editor):
    async def scenario():
        await editor.generate_clip(request("Floresta"))
        old = await editor.render()
        new = await editor.render()
        return old, new

    old, new = asyncio.run(scenario())

    assert not Path(old.path).exists()
    assert Path(new.path).exists()
    assert editor.current_render is new


def make_source_clip(path: Path, seconds: int, frequency: int):
    subprocess.run(
        [
            "ffmpeg", "-y", "-v", "error",
            "-f", "lavfi", "-i", f"testsrc=size=320x240:rate=25:duration={seconds}",
            "-f", "lavfi", "-i", f"sine=frequency={frequency}:duration={seconds}",
            "-c:v", "mpeg4", "-c:a", "aac", "-shortest",
            str(path),
        ],
        check=True,
        capture_output=True,
    )


@pytest.mark.skipif(not HAS_FFMPEG, reason="ffmpeg/ffprobe não disponíveis")
def test_real_ffmpeg_render(tmp_path):
    media_io = MediaIO()
    timeline = Timeline()
    for i, (seconds, frequency) in enumerate([(2, 440), (2, 880)]):
        path = tmp_path / f"fonte{i}.mp4"
        make_source_clip(path, seconds, frequency)
        timeline.append_clip(
            Clip(id=f"c{i}", source_location=path, name=f"c{i}", duration=media_io.probe_duration(path))
        )
    timeline.set_trim("c0", "end", 1.0)

    settings = RenderSettings(vcodec="mpeg4", resolution=(320, 240))
    executor = RenderExecutor(
        engine_factory=lambda: FFmpegEngine(settings),
        fetcher=MediaFetcher(),
        store=MediaStore(tmp_path / "media"),
        settings=settings,
    )
    progress = []

    artifact = asyncio.run(executor.render(timeline, progress.append))

    assert progress[-1] == 1.0
    assert progress == sorted(progress)
    assert media_io.probe_duration(artifact.path) == pytest.approx(3.0, abs=0.3)
