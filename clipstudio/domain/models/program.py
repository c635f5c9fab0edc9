# -*- coding: utf-8 -*-
"""
Programa compilado: lista estruturada de instruções de mídia

Gerado pelo GraphBuilder a partir de um TimelineSnapshot e serializado para
FFmpeg apenas pelo CliBuilder.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class OverlayStyle:
    """Estilo fixo das legendas desenhadas"""

    font_size: int = 48
    font_color: str = "white"
    box_color: str = "black@0.5"
    box_border: int = 5
    margin: int = 20


@dataclass(frozen=True)
class TrimInstruction:
    """Seleciona [start, end] de um input, zera o tempo e normaliza o quadro"""

    index: int
    start: float
    end: float
    width: int
    height: int
    video_out: str
    audio_out: str


@dataclass(frozen=True)
class ConcatInstruction:
    """Concatena os pares (vídeo, áudio) na ordem da sequência"""

    pairs: tuple[tuple[str, str], ...]
    video_out: str = "outv"
    audio_out: str = "outa"


@dataclass(frozen=True)
class DrawTextInstruction:
    """Desenha uma legenda sobre o stream de vídeo atual"""

    source: str
    output: str
    text: str
    start: float
    end: float
    position: str
    style: OverlayStyle = OverlayStyle()


@dataclass(frozen=True)
class OutputInstruction:
    """Mapeia os streams finais para o arquivo de saída"""

    video: str
    audio: str
    filename: str


Instruction = Union[TrimInstruction, ConcatInstruction, DrawTextInstruction, OutputInstruction]


@dataclass(frozen=True)
class CompiledProgram:
    """Programa de renderização de uma única invocação"""

    inputs: tuple[str, ...]
    instructions: tuple[Instruction, ...]
    duration: float  # duração composta efetiva (após clamp)

    @property
    def trims(self) -> list[TrimInstruction]:
        return [i for i in self.instructions if isinstance(i, TrimInstruction)]

    @property
    def concat(self) -> ConcatInstruction:
        return next(i for i in self.instructions if isinstance(i, ConcatInstruction))

    @property
    def overlays(self) -> list[DrawTextInstruction]:
        return [i for i in self.instructions if isinstance(i, DrawTextInstruction)]

    @property
    def output(self) -> OutputInstruction:
        return next(i for i in self.instructions if isinstance(i, OutputInstruction))

    @property
    def output_name(self) -> str:
        return self.output.filename
