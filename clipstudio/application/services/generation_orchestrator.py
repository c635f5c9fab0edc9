# -*- coding: utf-8 -*-
"""
Orquestrador de geração de clipes

Máquina de estados:
    IDLE -> SUBMITTING -> POLLING -> MATERIALIZING -> IDLE (sucesso ou erro)

Durante POLLING existe no máximo um timer pendente (uma asyncio.Task); a
próxima consulta só é agendada depois que a resposta anterior foi processada.
"""

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional

from ...domain.errors import (
    ClipStudioError,
    MaterializationError,
    PollingError,
    SubmissionError,
    ValidationError,
)
from ...domain.models.generation import (
    GenerationRequest,
    GenerationService,
    GenerationState,
    GenerationStatus,
)
from ...domain.models.timeline import Clip, Timeline, new_id
from ...infra.logging import get_logger
from ...infra.media_fetch import MediaFetcher
from ...infra.media_store import MediaStore

StatusListener = Callable[[GenerationState, str], None]


class GenerationOrchestrator:
    """Transforma uma requisição de geração em exatamente um novo Clip"""

    def __init__(
        self,
        timeline: Timeline,
        service: GenerationService,
        fetcher: MediaFetcher,
        store: MediaStore,
        probe: Callable[[Path], float],
        poll_interval: float = 10.0,
        poll_timeout: Optional[float] = None,
        on_status: Optional[StatusListener] = None,
    ):
        self.logger = get_logger("GenerationOrchestrator")
        self.timeline = timeline
        self.service = service
        self.fetcher = fetcher
        self.store = store
        self.probe = probe
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.on_status = on_status

        self.state = GenerationState.IDLE
        self.prompt = ""
        self.error: Optional[ClipStudioError] = None
        self.last_clip: Optional[Clip] = None
        self.checks = 0

        self._handle: Any = None
        self._timer: Optional[asyncio.Task] = None
        self._polling_since: Optional[float] = None
        self._finished: Optional[asyncio.Event] = None

    @property
    def busy(self) -> bool:
        return self.state is not GenerationState.IDLE

    @property
    def has_pending_check(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def submit(self, request: GenerationRequest):
        """Submete a geração e inicia o polling; erros de submissão são relançados"""
        if self.busy:
            raise ValidationError("Já existe uma geração de clipe em andamento.")
        if not request.prompt or not request.prompt.strip() or request.seed_image is None:
            raise ValidationError("Informe um prompt e uma imagem.")

        self.error = None
        self.last_clip = None
        self.checks = 0
        self.prompt = request.prompt
        self._finished = asyncio.Event()
        self._set_state(GenerationState.SUBMITTING, "Preparando a geração do clipe...")

        try:
            handle = await self.service.submit(
                request.prompt,
                request.seed_image,
                request.aspect_ratio,
                request.quality_mode,
            )
        except SubmissionError as e:
            self._fail(e)
            raise
        except Exception as e:
            error = SubmissionError("Ocorreu um erro desconhecido ao iniciar a geração.")
            self._fail(error)
            raise error from e

        self._handle = handle
        self._polling_since = asyncio.get_running_loop().time()
        self._set_state(
            GenerationState.POLLING,
            "Geração iniciada. Isso pode levar alguns minutos.",
        )
        self._schedule_next_check()

    async def check_now(self):
        """
        Executa uma consulta de status imediatamente (cancela o timer pendente)

        Só tem efeito em POLLING; durante a materialização o timer já está
        baixando o clipe e não pode ser interrompido.
        """
        if self.state is not GenerationState.POLLING:
            self.logger.debug("check_now ignorado no estado %s", self.state.value)
            return
        self._cancel_timer()
        await self._check()

    async def wait(self) -> Clip:
        """Aguarda o fim da geração atual; retorna o clipe ou lança o erro"""
        if self._finished is None:
            raise ValidationError("Nenhuma geração foi submetida.")
        await self._finished.wait()
        if self.error is not None:
            raise self.error
        return self.last_clip

    def teardown(self):
        """Cancela o timer em qualquer estado (sessão encerrada)"""
        self._cancel_timer()
        if self.busy:
            self.logger.info("Geração abandonada no estado %s", self.state.value)
            self.state = GenerationState.IDLE
            if self._finished is not None and not self._finished.is_set():
                self.error = ClipStudioError("Geração cancelada.")
                self._finished.set()

    def _schedule_next_check(self):
        if self.has_pending_check:
            raise RuntimeError("Já existe uma consulta de status agendada")
        self._timer = asyncio.create_task(self._wait_and_check())

    async def _wait_and_check(self):
        await asyncio.sleep(self.poll_interval)
        await self._check()

    async def _check(self):
        if self.state is not GenerationState.POLLING:
            return

        self.checks += 1
        self._notify("Verificando o status da geração...")
        try:
            status: GenerationStatus = await self.service.check_status(self._handle)
        except PollingError as e:
            self._fail(e)
            return
        except Exception as e:
            error = PollingError("Falha ao consultar o status da geração.")
            error.__cause__ = e
            self._fail(error)
            return

        if self.state is not GenerationState.POLLING:
            # teardown durante a consulta
            return
        if status.handle is not None:
            self._handle = status.handle

        if status.error:
            self._fail(PollingError(f"A geração falhou: {status.error}"))
            return

        if not status.done:
            if self._timed_out():
                self._fail(PollingError("Tempo limite excedido aguardando a geração do clipe."))
                return
            self._notify("Ainda processando o clipe...")
            self._timer = None
            self._schedule_next_check()
            return

        self._set_state(GenerationState.MATERIALIZING, "Clipe pronto! Baixando...")
        try:
            clip = await self._materialize(status)
        except asyncio.CancelledError:
            # teardown já devolveu a máquina para IDLE; outro cancelamento encerra a geração
            if self.busy:
                self._fail(ClipStudioError("Geração cancelada."))
            raise
        except MaterializationError as e:
            self._fail(e)
            return
        except ClipStudioError as e:
            error = MaterializationError(
                f"A geração terminou, mas o vídeo não pôde ser recuperado: {e.message}"
            )
            error.__cause__ = e
            self._fail(error)
            return
        except Exception as e:
            self.logger.exception("Erro inesperado ao materializar o clipe")
            error = MaterializationError(
                "A geração terminou, mas o vídeo não pôde ser recuperado."
            )
            error.__cause__ = e
            self._fail(error)
            return

        self._succeed(clip)

    async def _materialize(self, status: GenerationStatus) -> Clip:
        if not status.result_location:
            raise MaterializationError(
                "A geração terminou, mas nenhuma URL de vídeo foi encontrada."
            )

        data = await self.fetcher.fetch(status.result_location)
        path = self.store.put(data, suffix=".mp4", prefix="clip")
        try:
            duration = await asyncio.to_thread(self.probe, path)
        except BaseException:
            self.store.release(path)
            raise

        clip = Clip(
            id=new_id("clip"),
            source_location=path,
            name=self.prompt or f"Clip {len(self.timeline) + 1}",
            duration=duration,
            trim_start=0.0,
            trim_end=duration,
            owned=True,
        )
        self.timeline.append_clip(clip)
        return clip

    def _succeed(self, clip: Clip):
        self._timer = None
        self.last_clip = clip
        self.prompt = ""
        self._handle = None
        self._set_state(GenerationState.IDLE, "Clipe adicionado à timeline.")
        self.logger.info("Clipe %s materializado (%.2fs)", clip.id, clip.duration)
        self._finished.set()

    def _fail(self, error: ClipStudioError):
        self._cancel_timer()
        self.error = error
        self._handle = None
        self.logger.error("Geração falhou: %s", error.message)
        self._set_state(GenerationState.IDLE, error.message)
        if self._finished is not None:
            self._finished.set()

    def _cancel_timer(self):
        timer, self._timer = self._timer, None
        if timer is not None and timer is not asyncio.current_task() and not timer.done():
            timer.cancel()

    def _timed_out(self) -> bool:
        if self.poll_timeout is None or self._polling_since is None:
            return False
        elapsed = asyncio.get_running_loop().time() - self._polling_since
        return elapsed > self.poll_timeout

    def _set_state(self, state: GenerationState, message: str):
        self.state = state
        self.logger.debug("Estado: %s (%s)", state.value, message)
        self._notify(message)

    def _notify(self, message: str):
        if self.on_status:
            self.on_status(self.state, message)
