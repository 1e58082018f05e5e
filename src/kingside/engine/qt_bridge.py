"""Qt bridge to an external UCI engine running in a child process."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, QProcess, QTimer, pyqtSignal, pyqtSlot

from kingside.engine.search import (
    BestMoveResponse,
    EngineResponse,
    ErrorResponse,
    EvaluationResponse,
)
from kingside.engine.uci import UciChannel, setup_commands
from kingside.settings import EngineSettings

_LOGGER = logging.getLogger(__name__)


class EngineUnavailable(RuntimeError):
    """Raised when no UCI engine binary can be located."""


class UciEngineWorker(QObject):
    """Drives one UCI engine process through :class:`QProcess`.

    Every result is tagged with the request id of the search that produced
    it so the session can drop answers for superseded requests.
    """

    ready_changed = pyqtSignal(bool)  # True: engine ready, False: fallback only
    best_move_ready = pyqtSignal(str, str)  # request_id, move
    evaluation_ready = pyqtSignal(str, object)  # request_id, EvaluationResponse
    search_error = pyqtSignal(str, str)  # request_id, reason

    def __init__(
        self,
        settings: EngineSettings | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or EngineSettings()
        self._channel = UciChannel()
        self._buffer = ""
        self._request_id: str | None = None
        self._is_available = False

        self._process = QProcess(self)
        self._process.readyReadStandardOutput.connect(self._on_stdout)
        self._process.errorOccurred.connect(self._on_process_error)

        self._init_timer = QTimer(self)
        self._init_timer.setSingleShot(True)
        self._init_timer.timeout.connect(self._on_init_timeout)

    @property
    def is_available(self) -> bool:
        return self._is_available

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self) -> None:
        """Launch the engine binary; readiness is reported via ``ready_changed``.

        Raises:
            EngineUnavailable: no binary at ``engine_path`` or on PATH.
        """
        path = self._settings.resolve_engine_path()
        if path is None:
            raise EngineUnavailable("No UCI engine binary found")

        _LOGGER.info("Starting UCI engine %s", path)
        self._channel = UciChannel()
        self._buffer = ""
        self._process.setProgram(str(path))
        self._process.start()
        self._write(self._channel.handshake())
        self._init_timer.start(self._settings.init_timeout_ms)

    def shutdown(self) -> None:
        self._init_timer.stop()
        self._is_available = False
        if self._process.state() == QProcess.ProcessState.NotRunning:
            return
        self._write(["quit"])
        if not self._process.waitForFinished(1000):
            self._process.kill()
            self._process.waitForFinished(1000)

    # ── Commands ─────────────────────────────────────────────────────────

    @pyqtSlot(str, str, int, int)
    def evaluate(self, request_id: str, fen: str, depth: int, move_time_ms: int) -> None:
        """Start a search; any earlier search must have been stopped."""
        if not self._is_available:
            self.search_error.emit(request_id, "Engine not ready")
            return
        self._request_id = request_id
        _LOGGER.debug(
            "Engine request %s: depth %d, movetime %d ms", request_id, depth, move_time_ms
        )
        self._write(self._channel.begin_search(fen, depth, move_time_ms))

    @pyqtSlot()
    def stop(self) -> None:
        """Best-effort request to end the running search."""
        self._write(self._channel.stop())

    # ── Process I/O ──────────────────────────────────────────────────────

    def _write(self, commands: list[str]) -> None:
        for command in commands:
            self._process.write(f"{command}\n".encode())

    def _on_stdout(self) -> None:
        data = bytes(self._process.readAllStandardOutput().data())
        self._buffer += data.decode(errors="replace")
        *lines, self._buffer = self._buffer.split("\n")
        for line in lines:
            self._handle_line(line)

    def _handle_line(self, line: str) -> None:
        was_ready = self._channel.is_ready
        response = self._channel.feed(line)
        if not was_ready and self._channel.is_ready:
            self._init_timer.stop()
            self._is_available = True
            self._write(
                setup_commands(
                    threads=self._settings.threads, hash_mb=self._settings.hash_mb
                )
            )
            _LOGGER.info("UCI engine ready")
            self.ready_changed.emit(True)
        if response is not None:
            self._dispatch(response)

    def _dispatch(self, response: EngineResponse) -> None:
        request_id = self._request_id
        if request_id is None:
            return
        if isinstance(response, BestMoveResponse):
            self.best_move_ready.emit(request_id, response.move)
        elif isinstance(response, EvaluationResponse):
            self.evaluation_ready.emit(request_id, response)
        elif isinstance(response, ErrorResponse):
            self.search_error.emit(request_id, response.reason)

    def _on_process_error(self, error: QProcess.ProcessError) -> None:
        _LOGGER.error("UCI engine process error: %s", error.name)
        was_available = self._is_available
        self._is_available = False
        self._init_timer.stop()
        if was_available and self._request_id is not None:
            self.search_error.emit(self._request_id, f"Engine process {error.name}")
        self.ready_changed.emit(False)

    def _on_init_timeout(self) -> None:
        _LOGGER.error(
            "UCI engine not ready after %d ms, using built-in fallback only",
            self._settings.init_timeout_ms,
        )
        self._process.kill()
        self._is_available = False
        self.ready_changed.emit(False)
