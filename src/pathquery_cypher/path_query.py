from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import PathQueryLoadError
from .models import OuterJoinStatus
from .paths import tokenize_path


class PathConstraint(BaseModel):
    model_config = ConfigDict(extra="allow")

    path: str
    op: str = "="
    value: str | None = None
    values: list[str] = Field(default_factory=list)
    loop_path: str | None = None
    code: str | None = None

    @field_validator("path", "loop_path")
    @classmethod
    def _check_path(cls, value: str | None) -> str | None:
        if value is None:
            return None
        tokenize_path(value)
        return value.strip()


class SortOrder(BaseModel):
    path: str
    direction: Literal["ASC", "DESC"] = "ASC"

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        tokenize_path(value)
        return value.strip()

    @field_validator("direction", mode="before")
    @classmethod
    def _upper_direction(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class PathQuery(BaseModel):
    """Tokenized form of a path query: what it selects, filters on and sorts by."""

    model_config = ConfigDict(extra="allow")

    root: str | None = None
    views: list[str] = Field(default_factory=list)
    constraints: list[PathConstraint] = Field(default_factory=list)
    sort_order: list[SortOrder] = Field(default_factory=list)
    outer_joins: dict[str, OuterJoinStatus] = Field(default_factory=dict)
    constraint_logic: str | None = None

    @field_validator("views")
    @classmethod
    def _check_views(cls, value: list[str]) -> list[str]:
        cleaned: list[str] = []
        for path in value:
            tokenize_path(path)
            cleaned.append(path.strip())
        return cleaned

    @field_validator("outer_joins", mode="before")
    @classmethod
    def _upper_statuses(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                str(path).strip(): status.strip().upper()
                if isinstance(status, str)
                else status
                for path, status in value.items()
            }
        return value

    @field_validator("outer_joins")
    @classmethod
    def _check_outer_join_paths(
        cls, value: dict[str, OuterJoinStatus]
    ) -> dict[str, OuterJoinStatus]:
        for path in value:
            tokenize_path(path)
        return value

    @model_validator(mode="after")
    def _check_single_root(self) -> "PathQuery":
        roots = {tokenize_path(path)[0] for path in self._selected_paths()}
        if self.root is not None:
            roots.add(self.root.strip())
        if len(roots) > 1:
            raise ValueError(
                "all paths must start at the same root class, found: "
                + ", ".join(sorted(roots))
            )
        return self

    def all_paths(self) -> list[str]:
        """Distinct paths referenced by the query, in first-seen order."""
        seen: dict[str, None] = {}
        if self.root is not None:
            seen[self.root.strip()] = None
        for path in self._selected_paths():
            seen.setdefault(path, None)
        return list(seen)

    def outer_join_status(self) -> dict[str, OuterJoinStatus]:
        return dict(self.outer_joins)

    def _selected_paths(self) -> list[str]:
        paths = list(self.views)
        for constraint in self.constraints:
            paths.append(constraint.path)
            if constraint.loop_path is not None:
                paths.append(constraint.loop_path)
        paths.extend(order.path for order in self.sort_order)
        return paths


def load_path_query(path: Path) -> PathQuery:
    raw = _read_payload(path)
    if not isinstance(raw, dict):
        raise PathQueryLoadError(f"Path query in {path} must be a mapping")
    try:
        return PathQuery.model_validate(raw)
    except ValidationError as exc:
        raise PathQueryLoadError(f"Invalid path query in {path}: {exc}") from exc


def _read_payload(path: Path) -> Any:
    suffix = path.suffix.lower()
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PathQueryLoadError(f"Cannot read {path}: {exc}") from exc
    if suffix in {".yaml", ".yml"}:
        import yaml

        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise PathQueryLoadError(f"Malformed YAML in {path}: {exc}") from exc
    if suffix == ".json":
        import json

        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            raise PathQueryLoadError(f"Malformed JSON in {path}: {exc}") from exc
    raise PathQueryLoadError(f"Unsupported path query format: {suffix}")
