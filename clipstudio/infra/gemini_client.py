# -*- coding: utf-8 -*-
"""
Cliente da API Gemini (google-genai) para geração de vídeo e imagens
"""

from typing import Any, Optional

from google import genai
from google.genai import types

from ..domain.errors import PollingError, SubmissionError
from ..domain.models.generation import (
    AspectRatio,
    GenerationStatus,
    QualityMode,
    SeedImage,
)
from .logging import get_logger

logger = get_logger("GeminiClient")

FORMAT_ERROR_MESSAGE = (
    "O modelo retornou um formato inesperado. Pode ser um problema temporário; tente novamente."
)

# (trechos da mensagem original, mensagem apresentada ao usuário)
_ERROR_RULES = [
    (
        ("api key not valid", "api key is invalid", "permission denied", "403", "requested entity was not found"),
        "Chave de API inválida. Selecione uma chave válida e verifique se ela tem as permissões necessárias.",
    ),
    (
        ("failed to fetch", "connecterror", "connection", "network"),
        "Erro de rede. Não foi possível conectar à API; verifique sua conexão e tente novamente.",
    ),
    (
        ("quota", "rate limit", "429", "resource_exhausted"),
        "Cota da API excedida. Você pode ter atingido o limite de uso; tente novamente mais tarde.",
    ),
    (
        ("safety", "blocked"),
        "A requisição foi bloqueada pelas configurações de segurança. Ajuste a entrada e tente novamente.",
    ),
    (
        ("did not return an image",),
        "O modelo não conseguiu gerar uma imagem para este prompt. Tente um prompt mais descritivo.",
    ),
    (
        ("json", "markdown"),
        FORMAT_ERROR_MESSAGE,
    ),
    (
        ("server error", "500", "internal"),
        "O serviço de IA apresentou um erro interno. Tente novamente em alguns instantes.",
    ),
]


def describe_api_error(error: BaseException, context: str) -> str:
    """Traduz um erro bruto da API para uma mensagem estável e legível"""
    logger.error("Erro em %s: %r", context, error)
    message = str(error).lower()
    for needles, friendly in _ERROR_RULES:
        if any(needle in message for needle in needles):
            return friendly
    return f"Ocorreu um erro inesperado ao {context}. Tente novamente."


class GeminiVideoService:
    """Implementação do GenerationService sobre os modelos Veo"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        fast_model: str = "veo-3.1-fast-generate-preview",
        quality_model: str = "veo-3.1-generate-preview",
        resolution: str = "720p",
        client: Optional[genai.Client] = None,
    ):
        self.api_key = api_key
        self._client = client
        self.fast_model = fast_model
        self.quality_model = quality_model
        self.resolution = resolution

    @property
    def client(self) -> genai.Client:
        # Criado no primeiro uso: comandos que só editam a timeline não exigem chave.
        # Sem chave explícita o cliente lê GEMINI_API_KEY/GOOGLE_API_KEY do ambiente.
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def model_for(self, quality_mode: QualityMode) -> str:
        return self.quality_model if quality_mode == "quality" else self.fast_model

    async def submit(
        self,
        prompt: str,
        seed_image: SeedImage,
        aspect_ratio: AspectRatio,
        quality_mode: QualityMode,
    ) -> types.GenerateVideosOperation:
        model = self.model_for(quality_mode)
        logger.info("Iniciando geração de vídeo com %s (%s)", model, aspect_ratio)
        try:
            return await self.client.aio.models.generate_videos(
                model=model,
                prompt=prompt,
                image=types.Image(
                    image_bytes=seed_image.data, mime_type=seed_image.mime_type
                ),
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution=self.resolution,
                    aspect_ratio=aspect_ratio,
                ),
            )
        except Exception as e:
            raise SubmissionError(describe_api_error(e, "iniciar a geração do vídeo")) from e

    async def check_status(self, handle: Any) -> GenerationStatus:
        try:
            operation = await self.client.aio.operations.get(handle)
        except Exception as e:
            raise PollingError(
                describe_api_error(e, "consultar o status da geração do vídeo")
            ) from e

        if not operation.done:
            return GenerationStatus(done=False, handle=operation)

        if operation.error:
            message = operation.error.get("message") if isinstance(operation.error, dict) else operation.error
            return GenerationStatus(done=True, error=str(message), handle=operation)

        return GenerationStatus(
            done=True, result_location=_first_video_uri(operation), handle=operation
        )


def _first_video_uri(operation: types.GenerateVideosOperation) -> Optional[str]:
    response = operation.response
    videos = response.generated_videos if response else None
    if not videos or videos[0].video is None:
        return None
    return videos[0].video.uri
