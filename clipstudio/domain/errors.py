# -*- coding: utf-8 -*-
"""
Hierarquia de erros do domínio

Toda falha vinda de colaboradores externos (serviço de geração, download de
mídia, FFmpeg) é classificada numa destas classes na fronteira do
orquestrador/executor e apresentada como uma única mensagem legível.
"""


class ClipStudioError(Exception):
    """Erro base da aplicação"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ClipStudioError):
    """Pré-condição violada pelo chamador (rejeitada antes de qualquer chamada externa)"""


class SubmissionError(ClipStudioError):
    """Requisição de geração rejeitada pelo serviço"""


class PollingError(ClipStudioError):
    """Falha ao consultar o status de uma geração já submetida"""


class MaterializationError(ClipStudioError):
    """Geração concluída, mas o resultado não pôde ser recuperado"""


class RenderError(ClipStudioError):
    """Falha na renderização; nenhum artefato parcial é exposto"""


class MediaFetchError(ClipStudioError):
    """Falha ao baixar/ler os bytes de uma mídia"""


class MediaProbeError(ClipStudioError):
    """Falha ao obter metadados (duração) de uma mídia"""


class EngineError(ClipStudioError):
    """Falha do motor de mídia (FFmpeg)"""
