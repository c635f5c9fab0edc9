# -*- coding: utf-8 -*-
"""
Compilação da timeline em um programa estruturado de filtros
"""

from ..domain.errors import ValidationError
from ..domain.models.program import (
    CompiledProgram,
    ConcatInstruction,
    DrawTextInstruction,
    OutputInstruction,
    OverlayStyle,
    TrimInstruction,
)
from ..domain.models.timeline import Clip, RenderSettings, Timeline, TimelineSnapshot
from ..infra.logging import get_logger

OUTPUT_NAME = "output.mp4"


def input_name(index: int) -> str:
    return f"input{index}.mp4"


def clamp_trim(clip: Clip) -> tuple[float, float]:
    """
    Limites efetivos do corte

    Os limites são restritos a [0, duration]; um intervalo invertido ou vazio
    vira um segmento de duração zero (end == start).
    """
    start = min(max(clip.trim_start, 0.0), clip.duration)
    end = min(max(clip.trim_end, 0.0), clip.duration)
    if end < start:
        end = start
    return start, end


class GraphBuilder:
    """Constrói o CompiledProgram a partir de um snapshot da timeline"""

    def __init__(self, style: OverlayStyle = OverlayStyle()):
        self.logger = get_logger("GraphBuilder")
        self.style = style

    def build(
        self, timeline: Timeline | TimelineSnapshot, settings: RenderSettings = None
    ) -> CompiledProgram:
        snapshot = timeline.snapshot() if isinstance(timeline, Timeline) else timeline
        settings = settings or RenderSettings()

        if not snapshot.clips:
            raise ValidationError("Adicione pelo menos um clipe antes de renderizar.")

        self.logger.info(
            "Compilando programa: %d clipes, %d legendas",
            len(snapshot.clips),
            len(snapshot.overlays),
        )

        width, height = settings.resolution
        instructions = []
        pairs = []
        duration = 0.0

        # 1. Corte e normalização de cada clipe
        for i, clip in enumerate(snapshot.clips):
            start, end = clamp_trim(clip)
            if (start, end) != (clip.trim_start, clip.trim_end):
                self.logger.warning(
                    "Corte do clipe %s ajustado de [%s, %s] para [%s, %s]",
                    clip.id, clip.trim_start, clip.trim_end, start, end,
                )
            trim = TrimInstruction(
                index=i,
                start=start,
                end=end,
                width=width,
                height=height,
                video_out=f"v{i}",
                audio_out=f"a{i}",
            )
            instructions.append(trim)
            pairs.append((trim.video_out, trim.audio_out))
            duration += end - start

        # 2. Concatenação: define a timeline composta
        concat = ConcatInstruction(pairs=tuple(pairs))
        instructions.append(concat)

        # 3. Legendas encadeadas na ordem de inserção
        last_video = concat.video_out
        for i, overlay in enumerate(snapshot.overlays):
            draw = DrawTextInstruction(
                source=last_video,
                output=f"v_overlay_{i}",
                text=overlay.text,
                start=overlay.start_time,
                end=overlay.end_time,
                position=overlay.position,
                style=self.style,
            )
            instructions.append(draw)
            last_video = draw.output

        # 4. Mapeamento de saída
        instructions.append(
            OutputInstruction(video=last_video, audio=concat.audio_out, filename=OUTPUT_NAME)
        )

        return CompiledProgram(
            inputs=tuple(input_name(i) for i in range(len(snapshot.clips))),
            instructions=tuple(instructions),
            duration=duration,
        )
