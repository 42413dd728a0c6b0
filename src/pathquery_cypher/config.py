from __future__ import annotations

from dataclasses import dataclass
import os

from .models import OuterJoinPropagation


@dataclass(frozen=True)
class CompilerConfig:
    outer_join_propagation: OuterJoinPropagation
    log_level: str

    @classmethod
    def from_env(cls) -> "CompilerConfig":
        return cls(
            outer_join_propagation=OuterJoinPropagation.parse(
                os.environ.get("PATHQUERY_OUTER_JOIN_PROPAGATION")
            ),
            log_level=_normalize_level(os.environ.get("PATHQUERY_LOG_LEVEL", "INFO")),
        )


def _normalize_level(level: str) -> str:
    normalized = level.strip().upper()
    if normalized in {"WARN"}:
        return "WARNING"
    return normalized or "INFO"
