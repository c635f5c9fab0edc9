# -*- coding: utf-8 -*-
"""
Persistência do projeto (clipes e legendas) em JSON
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Callable, Optional

from ..domain.models.timeline import Clip, TextOverlay, Timeline
from .logging import get_logger

PROJECT_VERSION = 1

logger = get_logger("ProjectIO")


def timeline_to_dict(timeline: Timeline) -> dict:
    clips = []
    for clip in timeline.clips:
        data = asdict(clip)
        data["source_location"] = str(clip.source_location)
        clips.append(data)
    return {
        "version": PROJECT_VERSION,
        "clips": clips,
        "overlays": [asdict(overlay) for overlay in timeline.overlays],
    }


def timeline_from_dict(
    data: dict, on_release: Optional[Callable[[Clip], None]] = None
) -> Timeline:
    timeline = Timeline(on_release=on_release)
    for item in data.get("clips", []):
        location = item["source_location"]
        if "://" not in location:
            location = Path(location)
        timeline.append_clip(
            Clip(
                id=item["id"],
                source_location=location,
                name=item["name"],
                duration=float(item["duration"]),
                trim_start=float(item["trim_start"]),
                trim_end=float(item["trim_end"]),
                owned=bool(item.get("owned", False)),
            )
        )
    for item in data.get("overlays", []):
        timeline.append_overlay(TextOverlay(**item))
    return timeline


def save_project(timeline: Timeline, path: Path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(timeline_to_dict(timeline), f, ensure_ascii=False, indent=2)
    logger.debug("Projeto salvo em %s", path)


def load_project(
    path: Path, on_release: Optional[Callable[[Clip], None]] = None
) -> Timeline:
    """Carrega o projeto; arquivo inexistente resulta em timeline vazia"""
    path = Path(path)
    if not path.exists():
        return Timeline(on_release=on_release)
    with open(path, "r", encoding="utf-8") as f:
        return timeline_from_dict(json.load(f), on_release=on_release)
