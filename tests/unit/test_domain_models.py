# -*- coding: utf-8 -*-
"""
Testes unitários para os modelos de domínio
"""

import pytest
from pathlib import Path

from clipstudio.domain.errors import ValidationError
from clipstudio.domain.models.timeline import (
    Clip,
    RenderSettings,
    TextOverlay,
    Timeline,
)


def make_clip(clip_id: str, duration: float, owned: bool = False) -> Clip:
    return Clip(
        id=clip_id,
        source_location=Path(f"{clip_id}.mp4"),
        name=clip_id,
        duration=duration,
        owned=owned,
    )


def test_clip_defaults_to_full_range():
    """Clipe novo cobre toda a duração"""
    clip = make_clip("c1", 8.0)

    assert clip.trim_start == 0.0
    assert clip.trim_end == 8.0
    assert clip.trimmed_duration == 8.0


def test_total_duration_two_clips():
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 10.0))
    timeline.append_clip(make_clip("c2", 8.0))

    assert timeline.total_duration() == 18.0


def test_overlay_spans_whole_timeline_at_creation():
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 10.0))
    timeline.append_clip(make_clip("c2", 8.0))

    overlay = timeline.add_overlay("Olá mundo")

    assert overlay.start_time == 0
    assert overlay.end_time == 18
    assert overlay.position == "center"
    assert timeline.overlays == (overlay,)


def test_whitespace_overlay_is_rejected():
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 5.0))

    assert timeline.add_overlay("   \t ") is None
    assert timeline.add_overlay("") is None
    assert len(timeline.overlays) == 0


def test_invalid_overlay_position():
    timeline = Timeline()
    with pytest.raises(ValidationError):
        timeline.add_overlay("texto", "left")


def test_update_overlay_validates_like_add_overlay():
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 5.0))
    overlay = timeline.add_overlay("Legenda", "bottom")
    revision = timeline.revision

    with pytest.raises(ValidationError):
        timeline.update_overlay(overlay.id, "position", "foo")
    with pytest.raises(ValidationError):
        timeline.update_overlay(overlay.id, "text", "   ")

    assert overlay.position == "bottom"
    assert overlay.text == "Legenda"
    assert timeline.revision == revision


def test_trim_updates_total_duration():
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 10.0))
    timeline.append_clip(make_clip("c2", 8.0))

    timeline.set_trim("c1", "start", 2.0)
    timeline.set_trim("c2", "end", 5.0)

    assert timeline.total_duration() == pytest.approx(13.0)


def test_inverted_trim_is_accepted_by_model():
    """O modelo não rejeita corte invertido; a soma pode ficar negativa"""
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 10.0))

    timeline.set_trim("c1", "start", 7.0)
    timeline.set_trim("c1", "end", 3.0)

    assert timeline.get_clip("c1").trim_start == 7.0
    assert timeline.total_duration() == pytest.approx(-4.0)


def test_set_trim_invalid_bound():
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 10.0))
    with pytest.raises(ValueError):
        timeline.set_trim("c1", "middle", 1.0)


def test_remove_first_clip_keeps_overlay_bounds():
    """Remover clipe não reajusta o fim das legendas existentes"""
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 10.0))
    timeline.append_clip(make_clip("c2", 8.0))
    overlay = timeline.add_overlay("Legenda", "bottom")

    timeline.remove_clip("c1")

    assert [c.id for c in timeline.clips] == ["c2"]
    assert timeline.total_duration() == 8.0
    assert overlay.end_time == 18.0
    assert timeline.overlays[0].end_time == 18.0


def test_remove_owned_clip_releases_resource():
    released = []
    timeline = Timeline(on_release=released.append)
    owned = timeline.append_clip(make_clip("c1", 4.0, owned=True))
    timeline.append_clip(make_clip("c2", 4.0))

    timeline.remove_clip("c1")
    timeline.remove_clip("c2")

    assert released == [owned]


def test_remove_unknown_clip():
    with pytest.raises(KeyError):
        Timeline().remove_clip("nope")


def test_update_and_remove_overlay():
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 10.0))
    overlay = timeline.add_overlay("Primeira")

    timeline.update_overlay(overlay.id, "start_time", "2.5")
    timeline.update_overlay(overlay.id, "end_time", 40)
    timeline.update_overlay(overlay.id, "text", "Editada")
    timeline.update_overlay(overlay.id, "position", "top")

    assert overlay.start_time == 2.5
    assert overlay.end_time == 40.0  # sem revalidação de limites
    assert overlay.text == "Editada"
    assert overlay.position == "top"

    with pytest.raises(ValueError):
        timeline.update_overlay(overlay.id, "id", "x")

    timeline.remove_overlay(overlay.id)
    assert timeline.overlays == ()


def test_snapshot_is_isolated_from_later_mutations():
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 10.0))
    snapshot = timeline.snapshot()

    timeline.set_trim("c1", "end", 4.0)
    timeline.append_clip(make_clip("c2", 3.0))

    assert len(snapshot.clips) == 1
    assert snapshot.clips[0].trim_end == 10.0
    assert snapshot.total_duration() == 10.0
    assert timeline.revision > snapshot.revision


def test_ids_are_unique():
    timeline = Timeline()
    timeline.append_clip(make_clip("c1", 10.0))
    ids = {timeline.add_overlay(f"t{i}").id for i in range(20)}

    assert len(ids) == 20


def test_render_settings_defaults():
    settings = RenderSettings()

    assert settings.container == "mp4"
    assert settings.vcodec == "libx264"
    assert settings.resolution == (1280, 720)
    assert settings.hwaccel is None


def test_text_overlay_creation():
    overlay = TextOverlay(id="o1", text="Oi", start_time=1.0, end_time=2.0)

    assert overlay.position == "center"
