# -*- coding: utf-8 -*-
"""
Construção de comandos FFmpeg a partir do programa compilado

Único ponto que conhece a sintaxe de filtergraph do FFmpeg e suas regras de
escape.
"""

from typing import List, Optional

from ..domain.models.program import (
    CompiledProgram,
    ConcatInstruction,
    DrawTextInstruction,
    OutputInstruction,
    TrimInstruction,
)
from ..domain.models.timeline import RenderSettings
from ..infra.logging import get_logger
from ..infra.paths import ffmpeg_bin

# Caracteres especiais em cada nível de parsing do FFmpeg
_OPTION_SPECIALS = "\\':"
_GRAPH_SPECIALS = "\\'[],;"

_Y_POSITIONS = {
    "top": "{margin}",
    "center": "(H-text_h)/2",
    "bottom": "H-th-{margin}",
}


def _escape(value: str, specials: str) -> str:
    return "".join("\\" + ch if ch in specials else ch for ch in value)


def escape_filter_text(text: str) -> str:
    """
    Escapa texto livre para uso como valor de opção dentro de -filter_complex

    Primeiro o nível de opções do filtro, depois o nível do filtergraph.
    """
    return _escape(_escape(text, _OPTION_SPECIALS), _GRAPH_SPECIALS)


def fmt_time(value: float) -> str:
    """Formata segundos sem zeros à direita (10.0 -> '10', 2.5 -> '2.5')"""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


class CliBuilder:
    """Constrói comandos FFmpeg a partir do CompiledProgram"""

    def __init__(self, ffmpeg_path: Optional[str] = None):
        self.logger = get_logger("CliBuilder")
        self.ffmpeg_path = ffmpeg_path

    def to_filter_complex(self, program: CompiledProgram) -> str:
        """Converte o programa para a string de -filter_complex"""
        parts = []
        for instruction in program.instructions:
            if isinstance(instruction, TrimInstruction):
                parts.extend(self._trim_filters(instruction))
            elif isinstance(instruction, ConcatInstruction):
                parts.append(self._concat_filter(instruction))
            elif isinstance(instruction, DrawTextInstruction):
                parts.append(self._drawtext_filter(instruction))
        return ";".join(parts)

    def make_command(
        self,
        program: CompiledProgram,
        settings: RenderSettings = None,
        output_path: str = None,
    ) -> List[str]:
        """Gera o comando FFmpeg completo"""
        settings = settings or RenderSettings()
        output: OutputInstruction = program.output

        self.logger.info("Construindo comando FFmpeg para %d inputs", len(program.inputs))

        cmd = [ffmpeg_bin(self.ffmpeg_path), "-y"]

        # Hardware acceleration primeiro, se especificado
        if settings.hwaccel:
            cmd.extend(["-hwaccel", settings.hwaccel])

        for name in program.inputs:
            cmd.extend(["-i", name])

        cmd.extend(["-filter_complex", self.to_filter_complex(program)])
        cmd.extend(["-map", f"[{output.video}]", "-map", f"[{output.audio}]"])

        # Configurações de codec de vídeo
        cmd.extend(["-c:v", settings.vcodec])
        if settings.vcodec == "libx264":
            cmd.extend(["-preset", settings.preset, "-crf", str(settings.crf)])
        elif settings.vcodec == "h264_nvenc":
            cmd.extend(["-preset", "p5", "-rc", "constqp", "-qp", str(settings.crf)])

        # Codec de áudio
        cmd.extend(["-c:a", settings.acodec, "-b:a", settings.audio_bitrate])

        # Formato de pixel e otimizações
        cmd.extend(["-pix_fmt", "yuv420p", "-movflags", "+faststart"])

        cmd.append(output_path or output.filename)

        self.logger.debug("Comando FFmpeg: %s", " ".join(map(str, cmd)))
        return cmd

    def _trim_filters(self, trim: TrimInstruction) -> List[str]:
        start, end = fmt_time(trim.start), fmt_time(trim.end)
        video = (
            f"[{trim.index}:v]trim=start={start}:end={end},setpts=PTS-STARTPTS,"
            f"scale={trim.width}:{trim.height},setsar=1[{trim.video_out}]"
        )
        audio = (
            f"[{trim.index}:a]atrim=start={start}:end={end},"
            f"asetpts=PTS-STARTPTS[{trim.audio_out}]"
        )
        return [video, audio]

    def _concat_filter(self, concat: ConcatInstruction) -> str:
        inputs = "".join(f"[{video}][{audio}]" for video, audio in concat.pairs)
        return (
            f"{inputs}concat=n={len(concat.pairs)}:v=1:a=1"
            f"[{concat.video_out}][{concat.audio_out}]"
        )

    def _drawtext_filter(self, draw: DrawTextInstruction) -> str:
        style = draw.style
        y = _Y_POSITIONS.get(draw.position, _Y_POSITIONS["center"]).format(margin=style.margin)
        options = [
            f"text={escape_filter_text(draw.text)}",
            "expansion=none",
            "x=(w-text_w)/2",
            f"y={y}",
            f"fontsize={style.font_size}",
            f"fontcolor={style.font_color}",
            "box=1",
            f"boxcolor={style.box_color}",
            f"boxborderw={style.box_border}",
            f"enable='between(t,{fmt_time(draw.start)},{fmt_time(draw.end)})'",
        ]
        return f"[{draw.source}]drawtext={':'.join(options)}[{draw.output}]"
