# -*- coding: utf-8 -*-
"""
Settings management using pydantic-settings
"""

from pydantic_settings import BaseSettings
from pathlib import Path
from typing import Optional


class AppSettings(BaseSettings):
    """Configurações da aplicação"""

    gemini_api_key: Optional[str] = None
    ffmpeg_path: Optional[str] = None
    ffprobe_path: Optional[str] = None
    media_dir: str = "clipstudio_media"

    # Geração de clipes
    fast_model: str = "veo-3.1-fast-generate-preview"
    quality_model: str = "veo-3.1-generate-preview"
    video_resolution: str = "720p"
    image_model: str = "gemini-2.5-flash-image"
    poll_interval: float = 10.0
    poll_timeout: Optional[float] = None  # None = sem limite

    # SEO e palavras-chave
    seo_model: str = "gemini-2.5-flash-lite"
    seo_thinking_model: str = "gemini-2.5-pro"
    keyword_model: str = "gemini-2.5-flash"

    # Renderização
    resolution: str = "1280x720"
    vcodec: str = "libx264"
    crf: int = 23
    preset: str = "medium"
    render_timeout: Optional[float] = None  # None = sem limite

    class Config:
        env_prefix = "CLIPSTUDIO_"
        env_file = ".env"
        case_sensitive = False

    def frame_size(self) -> tuple[int, int]:
        """Resolução canônica (largura, altura) dos clipes renderizados"""
        try:
            width, height = map(int, self.resolution.lower().split("x"))
        except ValueError:
            width, height = 1280, 720
        return width, height


def load_settings() -> AppSettings:
    """Carrega as configurações da aplicação"""
    # Primeiro tenta carregar do config.json (compatibilidade)
    config_path = Path("config.json")
    if config_path.exists():
        import json

        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)
        return AppSettings(**config_data)

    # Senão carrega das variáveis de ambiente ou padrões
    return AppSettings()
