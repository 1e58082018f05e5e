"""UCI text protocol: commands sent to the engine and parsing of its output."""

from __future__ import annotations

import re

from kingside.engine.search import (
    BestMoveResponse,
    EngineResponse,
    ErrorResponse,
    EvaluationResponse,
)

_BESTMOVE_RE = re.compile(r"bestmove\s+(\S+)")
_DEPTH_RE = re.compile(r"\bdepth\s+(\d+)")
_SCORE_CP_RE = re.compile(r"score cp\s+(-?\d+)")
_SCORE_MATE_RE = re.compile(r"score mate\s+(-?\d+)")
_TIME_RE = re.compile(r"\btime\s+(\d+)")
_NODES_RE = re.compile(r"\bnodes\s+(\d+)")
_PV_RE = re.compile(r"\bpv\s+(.+?)(?=$|info)")
_MOVE_RE = re.compile(r"^[a-h][1-8][a-h][1-8]$")


def setup_commands(*, threads: int = 4, hash_mb: int = 128) -> list[str]:
    """Options sent once the engine reported ``readyok``."""
    return [
        f"setoption name Threads value {threads}",
        f"setoption name Hash value {hash_mb}",
        "setoption name MultiPV value 1",
    ]


def search_commands(fen: str, depth: int, move_time_ms: int) -> list[str]:
    return [f"position fen {fen}", f"go depth {depth} movetime {move_time_ms}"]


def is_ready_line(line: str) -> bool:
    return "readyok" in line


def parse_engine_line(line: str) -> EngineResponse | None:
    """Turn one line of engine output into a response, if it carries one."""
    if "bestmove" in line:
        match = _BESTMOVE_RE.search(line)
        if match is None:
            return ErrorResponse("Failed to extract bestmove from engine output")
        move = match.group(1)
        if not _MOVE_RE.match(move):
            return ErrorResponse(f"Engine returned unsupported move {move!r}")
        return BestMoveResponse(move)

    if "info" in line and "depth" in line and "score" in line:
        return _parse_info(line)
    return None


def _parse_info(line: str) -> EvaluationResponse | None:
    depth_match = _DEPTH_RE.search(line)
    if depth_match is None:
        return None
    depth = int(depth_match.group(1))
    # Partial-depth and bound scores are noise for the caller.
    if depth <= 1 or "upperbound" in line or "lowerbound" in line:
        return None

    score = 0.0
    is_mate = False
    cp_match = _SCORE_CP_RE.search(line)
    mate_match = _SCORE_MATE_RE.search(line)
    if cp_match is not None:
        score = int(cp_match.group(1)) / 100
    elif mate_match is not None:
        score = float(int(mate_match.group(1)))
        is_mate = True

    time_match = _TIME_RE.search(line)
    nodes_match = _NODES_RE.search(line)
    pv_match = _PV_RE.search(line)
    return EvaluationResponse(
        depth=depth,
        score=score,
        is_mate=is_mate,
        elapsed_ms=int(time_match.group(1)) if time_match else None,
        nodes=int(nodes_match.group(1)) if nodes_match else None,
        principal_variation=pv_match.group(1).strip() if pv_match else None,
    )


class UciChannel:
    """Book-keeping for one engine process.

    A UCI engine answers every ``go`` with exactly one ``bestmove``, including
    searches interrupted by ``stop``. Only the answer to the most recent
    ``go`` is passed on; answers to superseded searches are dropped.
    """

    __slots__ = ("_searches_started", "_answers_seen", "_ready")

    def __init__(self) -> None:
        self._searches_started = 0
        self._answers_seen = 0
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def is_searching(self) -> bool:
        return self._answers_seen < self._searches_started

    def handshake(self) -> list[str]:
        return ["uci", "isready"]

    def begin_search(self, fen: str, depth: int, move_time_ms: int) -> list[str]:
        self._searches_started += 1
        return search_commands(fen, depth, move_time_ms)

    def stop(self) -> list[str]:
        return ["stop"] if self.is_searching else []

    def feed(self, line: str) -> EngineResponse | None:
        """Consume one output line; returns a response worth forwarding."""
        line = line.strip()
        if not line:
            return None
        if is_ready_line(line):
            self._ready = True
            return None

        response = parse_engine_line(line)
        if "bestmove" not in line:
            # Progress of a superseded search precedes its bestmove.
            if self._searches_started - self._answers_seen > 1:
                return None
            return response

        if not self.is_searching:
            return None
        self._answers_seen += 1
        if self.is_searching:
            return None
        return response
