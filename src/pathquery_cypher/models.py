from __future__ import annotations

from enum import Enum
from typing import Mapping, Sequence, TypeAlias

JsonValue: TypeAlias = (
    None | bool | int | float | str | Mapping[str, "JsonValue"] | Sequence["JsonValue"]
)
JsonObject: TypeAlias = dict[str, JsonValue]

LabelSet: TypeAlias = frozenset[str]


class TreeNodeType(str, Enum):
    GRAPH_NODE = "GRAPH_NODE"
    RELATIONSHIP = "RELATIONSHIP"


class OuterJoinStatus(str, Enum):
    INNER = "INNER"
    OUTER = "OUTER"


class OuterJoinPropagation(str, Enum):
    """How far an OUTER marker on a path reaches into the tree."""

    NODE_ONLY = "node"
    SUBTREE = "subtree"

    @classmethod
    def parse(cls, value: str | None) -> "OuterJoinPropagation":
        if value is None:
            return cls.NODE_ONLY
        normalized = value.strip().lower()
        if normalized in {"", "node", "node_only", "node-only"}:
            return cls.NODE_ONLY
        if normalized in {"subtree", "children", "cascade"}:
            return cls.SUBTREE
        raise ValueError(f"Unknown outer join propagation: {value!r}")
