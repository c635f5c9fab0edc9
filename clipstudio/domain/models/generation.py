# -*- coding: utf-8 -*-
"""
Modelos de domínio para a geração de clipes por IA
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Literal, Optional, Protocol
import mimetypes

AspectRatio = Literal["16:9", "9:16"]
QualityMode = Literal["fast", "quality"]


class GenerationState(str, Enum):
    """Estados do orquestrador de geração"""

    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    MATERIALIZING = "materializing"


@dataclass(frozen=True)
class SeedImage:
    """Imagem inicial enviada junto com o prompt"""

    data: bytes
    mime_type: str

    @classmethod
    def from_path(cls, path: Path) -> "SeedImage":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(data=path.read_bytes(), mime_type=mime_type or "image/png")


@dataclass(frozen=True)
class GenerationRequest:
    """Requisição de geração de um clipe"""

    prompt: str
    seed_image: Optional[SeedImage]
    aspect_ratio: AspectRatio = "16:9"
    quality_mode: QualityMode = "fast"


@dataclass(frozen=True)
class GenerationStatus:
    """Resultado de uma consulta de status da operação"""

    done: bool
    result_location: Optional[str] = None
    error: Optional[str] = None
    handle: Any = None  # handle atualizado, quando o serviço devolve um


class GenerationService(Protocol):
    """Contrato do serviço externo de geração de vídeo"""

    async def submit(
        self,
        prompt: str,
        seed_image: SeedImage,
        aspect_ratio: AspectRatio,
        quality_mode: QualityMode,
    ) -> Any:
        ...

    async def check_status(self, handle: Any) -> GenerationStatus:
        ...
