# -*- coding: utf-8 -*-
"""
Pacote de SEO (títulos, descrições, tags, miniaturas) e pesquisa de palavras-chave

As imagens das ideias de miniatura são geradas pelo ThumbnailService; uma
falha individual deixa a miniatura sem imagem em vez de derrubar o pacote.
"""

import asyncio
import json
import mimetypes
from dataclasses import replace
from pathlib import Path
from typing import Optional

from google import genai
from google.genai import types

from ...domain.errors import SubmissionError, ValidationError
from ...domain.models.seo import (
    LEVELS,
    GroundingSource,
    KeywordResearch,
    KeywordSuggestion,
    LanguageDetection,
    SeoDescription,
    SeoPack,
    SeoScore,
    VideoCategory,
    VideoLanguage,
)
from ...infra.gemini_client import FORMAT_ERROR_MESSAGE, describe_api_error
from ...infra.logging import get_logger
from .thumbnail_service import ThumbnailService

THINKING_BUDGET = 32768

_STRING_LIST = {"type": "ARRAY", "items": {"type": "STRING"}}

SEO_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "isIdea": {"type": "BOOLEAN"},
        "languageDetection": {
            "type": "OBJECT",
            "properties": {
                "language": {"type": "STRING"},
                "confidence": {"type": "NUMBER"},
            },
            "required": ["language", "confidence"],
        },
        "generatedStory": {"type": "STRING"},
        "seoTitles": _STRING_LIST,
        "seoDescription": {
            "type": "OBJECT",
            "properties": {"short": {"type": "STRING"}, "long": {"type": "STRING"}},
            "required": ["short", "long"],
        },
        "tags": _STRING_LIST,
        "hashtags": _STRING_LIST,
        "thumbnailIdeas": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {"idea": {"type": "STRING"}},
                "required": ["idea"],
            },
        },
        "seoScore": {
            "type": "OBJECT",
            "properties": {
                "score": {"type": "NUMBER"},
                "justification": {"type": "STRING"},
            },
            "required": ["score", "justification"],
        },
    },
    "required": [
        "isIdea",
        "languageDetection",
        "generatedStory",
        "seoTitles",
        "seoDescription",
        "tags",
        "hashtags",
        "thumbnailIdeas",
        "seoScore",
    ],
}

_PACK_TASKS = """
Based on the {source}, perform the following actions and return the result in a single JSON object that strictly adheres to the provided schema.
1. isIdea: {is_idea}
2. languageDetection: Detect the {language_target} and provide a confidence score (0-100).
3. generatedStory: {story}
4. seoTitles: Create 5 highly clickable, SEO-optimized titles.
5. seoDescription: Write a short description for social media (under 150 chars) and a long, detailed one for YouTube (200-300 words).
6. tags: Generate 10-15 relevant YouTube tags.
7. hashtags: Generate 3-5 relevant hashtags for social media (with the # symbol).
8. thumbnailIdeas: Come up with 3 distinct, creative and visually compelling thumbnail ideas.
9. seoScore: Provide an overall SEO score (1-100) and a brief justification.
"""

TEXT_PACK_PROMPT = """
You are a YouTube SEO expert and content strategist. Analyze the provided video content and generate a complete SEO optimization pack.

Video Category: {category}
Target Language: {language}
Input Text (a brief idea or a full video script):
---
{text}
---
""" + _PACK_TASKS.format(
    source="input",
    is_idea="Determine if the input text is a brief idea (less than 100 words) or a full script.",
    language_target="language of the input text",
    story="If the input is an idea, expand it into an engaging 200-300 word story. If it is already a full script, return an empty string.",
)

VIDEO_PACK_PROMPT = """
You are a YouTube SEO expert and content strategist. Analyze the provided video file (visuals and audio) and generate a complete SEO optimization pack.

Video Category: {category}
Target Language: {language}
""" + _PACK_TASKS.format(
    source="video content",
    is_idea="This is a video upload. Set this to false.",
    language_target="primary spoken language in the video",
    story="Write a detailed 200-300 word summary of the video's content. This field must not be empty.",
)

KEYWORD_PROMPT = """
You are a keyword research specialist. For the given topic, use Google Search to find up-to-date information and generate a list of 15-20 related long-tail keywords that a content creator could target.
For each keyword, provide an estimated search volume (High, Medium, or Low) and competition level (High, Medium, or Low).

Topic: "{topic}"

Return the result ONLY as a markdown table with three columns: "Keyword", "Volume", and "Competition". Do not include any other text.
"""


def parse_keyword_table(text: str) -> list[KeywordSuggestion]:
    """Extrai as linhas válidas de uma tabela markdown Keyword | Volume | Competition"""
    suggestions = []
    # cabeçalho e separador
    for row in text.strip().splitlines()[2:]:
        cells = [cell.strip() for cell in row.split("|") if cell.strip()]
        if len(cells) < 3:
            continue
        keyword, volume, competition = cells[:3]
        if volume in LEVELS and competition in LEVELS:
            suggestions.append(KeywordSuggestion(keyword, volume, competition))
    return suggestions


def pack_from_dict(data: dict) -> tuple[SeoPack, list[str]]:
    """Converte a resposta JSON; as miniaturas voltam como ideias ainda sem imagem"""
    language = data["languageDetection"]
    description = data["seoDescription"]
    score = data["seoScore"]
    return SeoPack(
        is_idea=bool(data["isIdea"]),
        language=LanguageDetection(language["language"], float(language["confidence"])),
        story=data.get("generatedStory") or "",
        titles=list(data["seoTitles"]),
        description=SeoDescription(description["short"], description["long"]),
        tags=list(data["tags"]),
        hashtags=list(data["hashtags"]),
        thumbnails=[],
        score=SeoScore(float(score["score"]), score["justification"]),
    ), [item["idea"] for item in data["thumbnailIdeas"]]


class SeoService:
    """Gera o pacote de SEO e sugestões de palavras-chave com o Gemini"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.5-flash-lite",
        thinking_model: str = "gemini-2.5-pro",
        keyword_model: str = "gemini-2.5-flash",
        thumbnails: Optional[ThumbnailService] = None,
        client: Optional[genai.Client] = None,
    ):
        self.logger = get_logger("SeoService")
        self.api_key = api_key
        self._client = client
        self.model = model
        self.thinking_model = thinking_model
        self.keyword_model = keyword_model
        self.thumbnails = thumbnails or ThumbnailService(api_key=api_key, client=client)

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate_pack(
        self,
        text: str = "",
        video: Optional[Path] = None,
        category: VideoCategory = VideoCategory.ENTERTAINMENT,
        language: VideoLanguage = VideoLanguage.AUTO_DETECT,
        thinking: bool = False,
    ) -> SeoPack:
        if not video and not text.strip():
            raise ValidationError("Informe um texto ou um vídeo para gerar o pacote de SEO.")

        target = (
            "Detect automatically"
            if language is VideoLanguage.AUTO_DETECT
            else language.value
        )
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=SEO_SCHEMA,
        )
        if video:
            model = self.thinking_model
            contents = [
                types.Part.from_text(
                    text=VIDEO_PACK_PROMPT.format(category=category.value, language=target)
                ),
                await self._video_part(Path(video)),
            ]
        else:
            model = self.thinking_model if thinking else self.model
            contents = TEXT_PACK_PROMPT.format(
                category=category.value, language=target, text=text
            )
            if thinking:
                config.thinking_config = types.ThinkingConfig(thinking_budget=THINKING_BUDGET)

        self.logger.info("Gerando pacote de SEO com %s", model)
        try:
            response = await self.client.aio.models.generate_content(
                model=model, contents=contents, config=config
            )
        except Exception as e:
            raise SubmissionError(describe_api_error(e, "gerar o conteúdo de SEO")) from e

        try:
            pack, ideas = pack_from_dict(json.loads((response.text or "").strip()))
        except (ValueError, KeyError, TypeError) as e:
            self.logger.error("Resposta de SEO em formato inesperado: %s", e)
            raise SubmissionError(FORMAT_ERROR_MESSAGE) from e

        thumbnails = await self.thumbnails.generate_batch(ideas)
        return replace(pack, thumbnails=thumbnails)

    async def suggest_keywords(self, topic: str) -> KeywordResearch:
        """Pesquisa palavras-chave de cauda longa com base na Busca do Google"""
        if not topic or not topic.strip():
            raise ValidationError("Informe um tópico para a pesquisa de palavras-chave.")

        try:
            response = await self.client.aio.models.generate_content(
                model=self.keyword_model,
                contents=KEYWORD_PROMPT.format(topic=topic),
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_search=types.GoogleSearch())]
                ),
            )
        except Exception as e:
            raise SubmissionError(
                describe_api_error(e, "gerar sugestões de palavras-chave")
            ) from e

        text = response.text or ""
        suggestions = parse_keyword_table(text)
        if not suggestions and text:
            self.logger.warning("Tabela de palavras-chave não reconhecida: %r", text)
        return KeywordResearch(suggestions=suggestions, sources=_grounding_sources(response))

    async def _video_part(self, path: Path) -> types.Part:
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise ValidationError(f"Não foi possível ler o vídeo {path.name}") from e
        mime_type = mimetypes.guess_type(path.name)[0] or "video/mp4"
        return types.Part.from_bytes(data=data, mime_type=mime_type)


def _grounding_sources(response) -> list[GroundingSource]:
    candidates = response.candidates or []
    metadata = candidates[0].grounding_metadata if candidates else None
    sources = []
    for chunk in (metadata.grounding_chunks if metadata else None) or []:
        if chunk.web and chunk.web.uri:
            sources.append(GroundingSource(uri=chunk.web.uri, title=chunk.web.title or chunk.web.uri))
    return sources
