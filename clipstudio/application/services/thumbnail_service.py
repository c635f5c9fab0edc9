# -*- coding: utf-8 -*-
"""
Geração de miniaturas (thumbnails) a partir de ideias em texto

No lote, a falha de um item não derruba os demais: o item fica sem imagem.
"""

import asyncio
from typing import List, Optional

from google import genai
from google.genai import types

from ...domain.errors import SubmissionError, ValidationError
from ...domain.models.seo import Thumbnail
from ...infra.gemini_client import describe_api_error
from ...infra.logging import get_logger

THUMBNAIL_PROMPT = (
    "Create a vibrant, eye-catching, high-contrast YouTube video thumbnail. "
    'The image should have clear visuals that represent: "{idea}". '
    "Do not include any text in the image. The style should be photorealistic "
    "or cinematic, depending on the subject."
)


class ThumbnailService:
    """Gera imagens de miniatura com o modelo de imagem do Gemini"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.5-flash-image",
        client: Optional[genai.Client] = None,
    ):
        self.logger = get_logger("ThumbnailService")
        self.api_key = api_key
        self._client = client
        self.model = model

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate_batch(self, ideas: List[str]) -> List[Thumbnail]:
        """Gera uma imagem por ideia, degradando falhas individuais para None"""
        return list(await asyncio.gather(*(self._generate_or_empty(idea) for idea in ideas)))

    async def generate_single(self, idea: str) -> Thumbnail:
        if not idea or not idea.strip():
            raise ValidationError("Descreva a miniatura desejada.")
        try:
            thumbnail = await self._generate(idea)
        except Exception as e:
            raise SubmissionError(describe_api_error(e, "gerar a miniatura")) from e
        if not thumbnail.available:
            raise SubmissionError(
                "O modelo não conseguiu gerar uma imagem para este prompt. "
                "Tente um prompt mais descritivo."
            )
        return thumbnail

    async def _generate_or_empty(self, idea: str) -> Thumbnail:
        try:
            return await self._generate(idea)
        except Exception as e:
            self.logger.warning("Falha ao gerar miniatura para %r: %s", idea, e)
            return Thumbnail(idea=idea)

    async def _generate(self, idea: str) -> Thumbnail:
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=THUMBNAIL_PROMPT.format(idea=idea),
            config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
        )
        for candidate in response.candidates or []:
            parts = candidate.content.parts if candidate.content else None
            for part in parts or []:
                if part.inline_data and part.inline_data.data:
                    return Thumbnail(
                        idea=idea,
                        image=part.inline_data.data,
                        mime_type=part.inline_data.mime_type,
                    )

        self.logger.warning("Resposta sem imagem para a ideia %r", idea)
        return Thumbnail(idea=idea)
