# -*- coding: utf-8 -*-
"""
Modelos do pacote de SEO e da pesquisa de palavras-chave
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional

Level = Literal["High", "Medium", "Low"]
LEVELS = ("High", "Medium", "Low")


class VideoCategory(str, Enum):
    DIY = "DIY"
    EDUCATION = "Education"
    ENTERTAINMENT = "Entertainment"
    FINANCE = "Finance"
    FITNESS = "Fitness"
    FOOD = "Food"
    GAMING = "Gaming"
    NEWS = "News"
    STORY = "Story"
    TECHNOLOGY = "Technology"
    TRAVEL = "Travel"
    YOUTUBE_TIPS = "YouTube Tips"
    VIDEO_SCRIPT_WRITING_TOOL = "Video Script Writing Tool"


class VideoLanguage(str, Enum):
    AUTO_DETECT = "Auto-detect"
    ENGLISH = "English"
    HINDI = "Hindi"
    HINGLISH = "Hinglish"


@dataclass(frozen=True)
class LanguageDetection:
    language: str
    confidence: float


@dataclass(frozen=True)
class SeoDescription:
    short: str
    long: str


@dataclass(frozen=True)
class SeoScore:
    score: float
    justification: str


@dataclass(frozen=True)
class Thumbnail:
    """Ideia de miniatura; `image` fica None quando a geração falha"""

    idea: str
    image: Optional[bytes] = None
    mime_type: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.image is not None


@dataclass(frozen=True)
class SeoPack:
    """Pacote completo de SEO para um vídeo"""

    is_idea: bool
    language: LanguageDetection
    story: str
    titles: list[str]
    description: SeoDescription
    tags: list[str]
    hashtags: list[str]
    thumbnails: list[Thumbnail]
    score: SeoScore


@dataclass(frozen=True)
class KeywordSuggestion:
    keyword: str
    volume: Level
    competition: Level


@dataclass(frozen=True)
class GroundingSource:
    uri: str
    title: str


@dataclass(frozen=True)
class KeywordResearch:
    suggestions: list[KeywordSuggestion] = field(default_factory=list)
    sources: list[GroundingSource] = field(default_factory=list)
