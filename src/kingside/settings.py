"""User-configurable settings for games and the external engine."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class GameSettings:
    """Rules options that change observable behavior."""

    # When False a plain check is reported as PLAYING; only mate is flagged.
    report_check: bool = True
    # When False castling moves only the king.
    relocate_castling_rook: bool = False
    board_flipped: bool = False


@dataclass
class EngineSettings:
    """Settings for the external UCI engine and its retry ladder."""

    engine_path: str | None = None
    engine_depth: int = 2
    threads: int = 4
    hash_mb: int = 128
    max_attempts: int = 3
    timeout_multiplier: float = 1.5
    min_timeout_ms: int = 500
    max_timeout_ms: int = 10_000
    watchdog_grace_ms: int = 1_000
    retry_delay_ms: int = 100
    init_timeout_ms: int = 20_000
    use_opening_book: bool = True
    candidate_names: tuple[str, ...] = field(
        default=("stockfish", "stockfish.exe"),
    )

    def resolve_engine_path(self) -> Path | None:
        """Explicit ``engine_path`` or the first candidate found on PATH."""
        if self.engine_path:
            path = Path(self.engine_path)
            return path if path.is_file() else None
        for name in self.candidate_names:
            found = shutil.which(name)
            if found:
                return Path(found)
        return None
