# -*- coding: utf-8 -*-
"""
Testes para a geração de miniaturas
"""

import asyncio
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from clipstudio.application.services.thumbnail_service import ThumbnailService
from clipstudio.domain.errors import SubmissionError, ValidationError


def image_response(data=b"\x89PNG", mime_type="image/png"):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def text_only_response():
    part = SimpleNamespace(inline_data=None, text="sem imagem")
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def make_service(side_effect):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(side_effect=side_effect)
    return ThumbnailService(client=client), client


def test_batch_keeps_order_and_degrades_failures():
    def respond(model, contents, config):
        if "praia" in contents:
            raise RuntimeError("quota exceeded")
        if "cidade" in contents:
            return text_only_response()
        return image_response()

    service, client = make_service(respond)

    thumbnails = asyncio.run(service.generate_batch(["floresta", "praia", "cidade"]))

    assert [t.idea for t in thumbnails] == ["floresta", "praia", "cidade"]
    assert [t.available for t in thumbnails] == [True, False, False]
    assert thumbnails[0].mime_type == "image/png"
    assert client.aio.models.generate_content.await_count == 3


def test_prompt_and_modalities():
    service, client = make_service(lambda **kwargs: image_response())

    asyncio.run(service.generate_single("um robô cozinhando"))

    kwargs = client.aio.models.generate_content.call_args.kwargs
    assert '"um robô cozinhando"' in kwargs["contents"]
    assert "Do not include any text" in kwargs["contents"]
    assert kwargs["config"].response_modalities == ["IMAGE"]


def test_single_rejects_empty_idea():
    service, client = make_service(lambda **kwargs: image_response())

    with pytest.raises(ValidationError):
        asyncio.run(service.generate_single("  "))

    client.aio.models.generate_content.assert_not_called()


def test_single_without_image_fails():
    service, _ = make_service(lambda **kwargs: text_only_response())

    with pytest.raises(SubmissionError) as info:
        asyncio.run(service.generate_single("nada"))

    assert "não conseguiu gerar uma imagem" in info.value.message


def test_single_api_error_is_translated():
    service, _ = make_service(RuntimeError("429 Too Many Requests"))

    with pytest.raises(SubmissionError) as info:
        asyncio.run(service.generate_single("algo"))

    assert "Cota da API excedida" in info.value.message
