# -*- coding: utf-8 -*-
"""
Paths utilities for FFmpeg binaries
"""

import shutil
from typing import Optional


def _resolve(configured: Optional[str], exe_name: str) -> str:
    if configured:
        return configured
    return shutil.which(exe_name) or exe_name


def ffmpeg_bin(configured: Optional[str] = None) -> str:
    """Resolve o caminho para o binário do FFmpeg"""
    return _resolve(configured, "ffmpeg")


def ffprobe_bin(configured: Optional[str] = None) -> str:
    """Resolve o caminho para o binário do FFprobe"""
    return _resolve(configured, "ffprobe")
