# -*- coding: utf-8 -*-
"""
Download dos bytes de mídia (URLs remotas ou caminhos locais)
"""

import asyncio
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from ..domain.errors import MediaFetchError
from .logging import get_logger

GOOGLE_API_HOST_SUFFIX = "googleapis.com"


class MediaFetcher:
    """Obtém o conteúdo completo de uma localização de mídia"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 120.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.logger = get_logger("MediaFetcher")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    async def fetch(self, location) -> bytes:
        parsed = urlparse(str(location))
        if parsed.scheme in ("http", "https"):
            return await self._fetch_remote(str(location), parsed.hostname or "")

        path = Path(url2pathname(parsed.path)) if parsed.scheme == "file" else Path(location)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            self.logger.error("Falha ao ler mídia local %s: %s", path, e)
            raise MediaFetchError(f"Não foi possível ler a mídia {path.name}") from e

    async def _fetch_remote(self, url: str, host: str) -> bytes:
        params = {}
        # URIs de arquivos gerados exigem a chave da API
        if self.api_key and host.endswith(GOOGLE_API_HOST_SUFFIX):
            params["key"] = self.api_key

        self.logger.info("Baixando mídia de %s", host)
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.logger.error("Download falhou com status %d", e.response.status_code)
            raise MediaFetchError(
                f"Falha ao baixar a mídia (HTTP {e.response.status_code})."
            ) from e
        except httpx.HTTPError as e:
            self.logger.error("Erro de rede ao baixar mídia: %s", e)
            raise MediaFetchError(
                "Erro de rede. Não foi possível baixar a mídia; verifique sua conexão."
            ) from e

        return response.content
