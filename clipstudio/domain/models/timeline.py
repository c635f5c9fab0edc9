# -*- coding: utf-8 -*-
"""
Modelos de domínio para timeline, clipes e legendas sobrepostas

A timeline composta é a concatenação dos trechos aparados de cada clipe, na
ordem de inserção. As legendas (TextOverlay) são posicionadas nesse tempo
composto e não são reajustadas quando clipes são aparados ou removidos.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Literal, Optional
import uuid

from ..errors import ValidationError

OverlayPosition = Literal["top", "center", "bottom"]
OVERLAY_POSITIONS = ("top", "center", "bottom")
OVERLAY_FIELDS = ("start_time", "end_time", "text", "position")


def new_id(prefix: str) -> str:
    """Gera um identificador único (nunca reutilizado)"""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@dataclass
class Clip:
    """Segmento de vídeo gerado, posicionado na timeline"""

    id: str
    source_location: Path | str  # caminho local (blob) ou URL
    name: str
    duration: float  # segundos, fixo após a criação
    trim_start: float = 0.0
    trim_end: float | None = None
    owned: bool = False  # True se o arquivo pertence ao MediaStore

    def __post_init__(self):
        if self.trim_end is None:
            self.trim_end = self.duration

    @property
    def trimmed_duration(self) -> float:
        return self.trim_end - self.trim_start


@dataclass
class TextOverlay:
    """Legenda desenhada sobre a timeline composta num intervalo de tempo"""

    id: str
    text: str
    start_time: float
    end_time: float
    position: OverlayPosition = "center"


@dataclass(frozen=True)
class TimelineSnapshot:
    """Cópia imutável da timeline usada por uma única compilação"""

    clips: tuple[Clip, ...]
    overlays: tuple[TextOverlay, ...]
    revision: int = 0

    def total_duration(self) -> float:
        return sum(clip.trimmed_duration for clip in self.clips)


@dataclass(frozen=True)
class RenderSettings:
    """Configurações de renderização"""

    container: str = "mp4"
    vcodec: str = "libx264"  # "libx264" | "h264_nvenc" | "libx265"
    acodec: str = "aac"
    crf: int = 23  # 18-23
    preset: str = "medium"
    audio_bitrate: str = "192k"
    hwaccel: str | None = None  # "cuda"|"qsv"|"vaapi"|None
    resolution: tuple[int, int] = (1280, 720)


class Timeline:
    """
    Estado de edição: sequência de clipes e conjunto de legendas

    Mutações incrementam `revision`; a duração composta é sempre recalculada.
    """

    def __init__(self, on_release: Optional[Callable[[Clip], None]] = None):
        self._clips: list[Clip] = []
        self._overlays: list[TextOverlay] = []
        self._on_release = on_release
        self.revision = 0

    @property
    def clips(self) -> tuple[Clip, ...]:
        return tuple(self._clips)

    @property
    def overlays(self) -> tuple[TextOverlay, ...]:
        return tuple(self._overlays)

    def __len__(self) -> int:
        return len(self._clips)

    def get_clip(self, clip_id: str) -> Clip:
        for clip in self._clips:
            if clip.id == clip_id:
                return clip
        raise KeyError(clip_id)

    def get_overlay(self, overlay_id: str) -> TextOverlay:
        for overlay in self._overlays:
            if overlay.id == overlay_id:
                return overlay
        raise KeyError(overlay_id)

    def append_clip(self, clip: Clip) -> Clip:
        self._clips.append(clip)
        self._touch()
        return clip

    def remove_clip(self, clip_id: str) -> Clip:
        """Remove o clipe e libera o recurso de mídia que ele possui"""
        clip = self.get_clip(clip_id)
        self._clips.remove(clip)
        self._touch()
        if clip.owned and self._on_release:
            self._on_release(clip)
        return clip

    def set_trim(self, clip_id: str, bound: Literal["start", "end"], value: float) -> Clip:
        # trim invertido não é rejeitado aqui; o GraphBuilder decide
        clip = self.get_clip(clip_id)
        if bound == "start":
            clip.trim_start = float(value)
        elif bound == "end":
            clip.trim_end = float(value)
        else:
            raise ValueError(f"Limite de corte inválido: {bound!r}")
        self._touch()
        return clip

    def add_overlay(
        self, text: str, position: OverlayPosition = "center"
    ) -> TextOverlay | None:
        """Cria legenda cobrindo toda a timeline composta atual; texto vazio é ignorado"""
        if not text or not text.strip():
            return None
        if position not in OVERLAY_POSITIONS:
            raise ValidationError(f"Posição de legenda inválida: {position!r}")

        overlay = TextOverlay(
            id=new_id("overlay"),
            text=text,
            start_time=0.0,
            end_time=self.total_duration(),
            position=position,
        )
        self._overlays.append(overlay)
        self._touch()
        return overlay

    def append_overlay(self, overlay: TextOverlay) -> TextOverlay:
        """Adiciona uma legenda já existente (ex: carregada de um projeto)"""
        self._overlays.append(overlay)
        self._touch()
        return overlay

    def update_overlay(self, overlay_id: str, field_name: str, value) -> TextOverlay:
        overlay = self.get_overlay(overlay_id)
        if field_name not in OVERLAY_FIELDS:
            raise ValueError(f"Campo de legenda inválido: {field_name!r}")
        if field_name in ("start_time", "end_time"):
            value = float(value)
        elif field_name == "position" and value not in OVERLAY_POSITIONS:
            raise ValidationError(f"Posição de legenda inválida: {value!r}")
        elif field_name == "text" and (not value or not str(value).strip()):
            raise ValidationError("O texto da legenda não pode ficar vazio.")
        setattr(overlay, field_name, value)
        self._touch()
        return overlay

    def remove_overlay(self, overlay_id: str) -> TextOverlay:
        overlay = self.get_overlay(overlay_id)
        self._overlays.remove(overlay)
        self._touch()
        return overlay

    def total_duration(self) -> float:
        """Soma de (trim_end - trim_start) na ordem da sequência"""
        return sum(clip.trimmed_duration for clip in self._clips)

    def snapshot(self) -> TimelineSnapshot:
        return TimelineSnapshot(
            clips=tuple(replace(clip) for clip in self._clips),
            overlays=tuple(replace(overlay) for overlay in self._overlays),
            revision=self.revision,
        )

    def _touch(self):
        self.revision += 1
