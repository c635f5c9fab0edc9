# -*- coding: utf-8 -*-
"""
Execução de comandos FFmpeg com progresso
"""

import os
import subprocess
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..domain.errors import EngineError
from ..infra.logging import get_logger


@dataclass(frozen=True)
class Progress:
    """Representa o progresso de renderização"""

    out_time_us: int
    speed: Optional[float] = None
    frame: Optional[int] = None

    @property
    def seconds(self) -> float:
        return self.out_time_us / 1_000_000


class Runner:
    """Executa comandos FFmpeg com monitoramento de progresso"""

    def __init__(self):
        self.logger = get_logger("Runner")

    def run(
        self,
        cmd: list[str],
        on_progress: Callable[[Progress], None] = None,
        timeout: Optional[float] = None,
        cwd: Optional[Path] = None,
    ) -> subprocess.CompletedProcess:
        """Executa comando FFmpeg com callback de progresso e timeout opcional"""
        self.logger.info("Executando comando FFmpeg: %s", " ".join(map(str, cmd)))

        # Adiciona parâmetros para progresso se callback fornecido
        if on_progress:
            cmd = cmd[:1] + ["-progress", "pipe:1", "-nostats"] + cmd[1:]

        kwargs = {}
        if os.name == "nt":
            kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP

        # stderr vai para arquivo para não bloquear o pipe durante renders longos
        stderr_file = tempfile.TemporaryFile(mode="w+", encoding="utf-8", errors="replace")
        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=stderr_file,
                text=True,
                cwd=str(cwd) if cwd else None,
                **kwargs,
            )
        except OSError as e:
            stderr_file.close()
            self.logger.error("Não foi possível iniciar o FFmpeg: %s", e)
            raise EngineError(f"Não foi possível iniciar o FFmpeg: {e}") from e

        # O prazo é vigiado fora da leitura bloqueante do stdout
        timed_out = threading.Event()
        watchdog = None
        if timeout:

            def expire():
                timed_out.set()
                self.logger.error("Timeout de %ss excedido, terminando processo", timeout)
                self._terminate(process)

            watchdog = threading.Timer(timeout, expire)
            watchdog.daemon = True
            watchdog.start()

        with stderr_file:
            try:
                stdout_lines = self._consume_output(process, on_progress)
            except BaseException:
                if process.poll() is None:
                    self._terminate(process)
                raise
            finally:
                if watchdog is not None:
                    watchdog.cancel()
            return_code = process.wait()
            stderr_file.seek(0)
            stderr = stderr_file.read()

        if timed_out.is_set():
            raise EngineError(f"Comando FFmpeg excedeu timeout de {timeout}s")

        if return_code != 0:
            self.logger.error(
                "Comando FFmpeg retornou código %d. Stderr: %s", return_code, stderr
            )
            raise EngineError(f"FFmpeg falhou (código {return_code}): {_tail(stderr)}")

        self.logger.info("Comando FFmpeg finalizado com sucesso.")
        return subprocess.CompletedProcess(
            args=cmd,
            returncode=return_code,
            stdout="\n".join(stdout_lines),
            stderr=stderr,
        )

    def _consume_output(
        self,
        process: subprocess.Popen,
        on_progress: Optional[Callable[[Progress], None]],
    ) -> list[str]:
        stdout_lines = []
        # -progress emite um bloco key=value por atualização
        block = {}

        while True:
            output = process.stdout.readline() if process.stdout else ""
            if output == "" and process.poll() is not None:
                break
            if not output:
                continue

            line = output.strip()
            stdout_lines.append(line)
            if on_progress and "=" in line:
                key, value = line.split("=", 1)
                block[key] = value
                if key == "progress":
                    progress = self._parse_progress_block(block)
                    block = {}
                    if progress:
                        on_progress(progress)

        return stdout_lines

    def _terminate(self, process: subprocess.Popen):
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            self.logger.error("Processo não terminou graciosamente, forçando...")
            process.kill()
            process.wait()

    def _parse_progress_block(self, data: dict) -> Optional[Progress]:
        """Parseia um bloco de progresso do FFmpeg"""
        # out_time_ms também é expresso em microssegundos pelo FFmpeg
        raw = data.get("out_time_us") or data.get("out_time_ms")
        if raw is None:
            return None
        try:
            out_time_us = int(raw)
        except ValueError:
            return None
        if out_time_us < 0:
            return None

        speed = data.get("speed", "").rstrip("x")
        frame = data.get("frame")
        try:
            return Progress(
                out_time_us=out_time_us,
                speed=float(speed) if speed and speed != "N/A" else None,
                frame=int(frame) if frame else None,
            )
        except ValueError:
            return Progress(out_time_us=out_time_us)


def _tail(text: str, lines: int = 5) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])
