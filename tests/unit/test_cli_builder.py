# -*- coding: utf-8 -*-
"""
Testes para a serialização do programa em comando FFmpeg
"""

from pathlib import Path

from clipstudio.domain.models.timeline import Clip, RenderSettings, Timeline
from clipstudio.rendering.cli_builder import CliBuilder, escape_filter_text, fmt_time
from clipstudio.rendering.graph_builder import GraphBuilder


def compile_timeline(overlays=(), durations=(10, 8)):
    timeline = Timeline()
    for i, duration in enumerate(durations):
        timeline.append_clip(
            Clip(id=f"c{i}", source_location=Path(f"c{i}.mp4"), name=f"c{i}", duration=duration)
        )
    for text, position in overlays:
        timeline.add_overlay(text, position)
    return GraphBuilder().build(timeline)


def test_fmt_time():
    assert fmt_time(10.0) == "10"
    assert fmt_time(2.5) == "2.5"
    assert fmt_time(0.0) == "0"
    assert fmt_time(1.23456) == "1.235"


def test_escape_filter_text():
    assert escape_filter_text("simples") == "simples"
    # ' e : passam pelos dois níveis de escape
    assert escape_filter_text("it's") == "it\\\\\\'s"
    assert escape_filter_text("a:b") == "a\\\\:b"
    # , ; [ ] só no nível do filtergraph
    assert escape_filter_text("a,b;[c]") == "a\\,b\\;\\[c\\]"
    assert escape_filter_text("c:\\") == "c\\\\:\\\\\\\\"


def test_filter_complex_without_overlays():
    graph = CliBuilder().to_filter_complex(compile_timeline())

    assert graph.split(";") == [
        "[0:v]trim=start=0:end=10,setpts=PTS-STARTPTS,scale=1280:720,setsar=1[v0]",
        "[0:a]atrim=start=0:end=10,asetpts=PTS-STARTPTS[a0]",
        "[1:v]trim=start=0:end=8,setpts=PTS-STARTPTS,scale=1280:720,setsar=1[v1]",
        "[1:a]atrim=start=0:end=8,asetpts=PTS-STARTPTS[a1]",
        "[v0][a0][v1][a1]concat=n=2:v=1:a=1[outv][outa]",
    ]


def test_filter_complex_with_overlays():
    program = compile_timeline([("Topo", "top"), ("Meio", "center"), ("Base", "bottom")])
    parts = CliBuilder().to_filter_complex(program).split(";")
    drawtexts = [p for p in parts if "drawtext" in p]

    assert len(drawtexts) == 3
    assert drawtexts[0].startswith("[outv]drawtext=text=Topo:")
    assert "y=20:" in drawtexts[0]
    assert "y=(H-text_h)/2:" in drawtexts[1]
    assert "y=H-th-20:" in drawtexts[2]
    assert drawtexts[0].endswith("[v_overlay_0]")
    assert drawtexts[1].startswith("[v_overlay_0]")
    assert "enable='between(t,0,18)'" in drawtexts[2]
    assert "fontsize=48:fontcolor=white:box=1:boxcolor=black@0.5:boxborderw=5" in drawtexts[0]
    assert "expansion=none" in drawtexts[0]


def test_overlay_text_is_escaped_in_graph():
    program = compile_timeline([("Olá: 'mundo'; 100%", "center")])
    graph = CliBuilder().to_filter_complex(program)

    assert "text=Olá\\\\: \\\\\\'mundo\\\\\\'\\; 100%:" in graph


def test_make_command():
    program = compile_timeline([("Oi", "top")])
    settings = RenderSettings(crf=20, preset="fast")

    cmd = CliBuilder("/opt/ffmpeg").make_command(program, settings)

    assert cmd[:2] == ["/opt/ffmpeg", "-y"]
    assert cmd[cmd.index("-i") + 1] == "input0.mp4"
    assert cmd.count("-i") == 2
    assert "-filter_complex" in cmd
    maps = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-map"]
    assert maps == ["[v_overlay_0]", "[outa]"]
    assert cmd[cmd.index("-crf") + 1] == "20"
    assert cmd[cmd.index("-c:a") + 1] == "aac"
    assert cmd[-1] == "output.mp4"


def test_make_command_hwaccel_and_nvenc():
    program = compile_timeline()
    settings = RenderSettings(vcodec="h264_nvenc", hwaccel="cuda")

    cmd = CliBuilder("ffmpeg").make_command(program, settings, output_path="final.mp4")

    assert cmd[2:4] == ["-hwaccel", "cuda"]
    assert "-qp" in cmd
    assert cmd[-1] == "final.mp4"
