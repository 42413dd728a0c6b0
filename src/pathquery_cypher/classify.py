from __future__ import annotations

import logging
import re
from typing import Iterable, Protocol

from .graph_model import GraphModel
from .models import TreeNodeType

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class SegmentClassifier(Protocol):
    def __call__(self, token: str) -> TreeNodeType:
        ...


class StaticSegmentClassifier:
    """Classify tokens against a fixed set of relationship names."""

    def __init__(self, relationships: Iterable[str] = ()) -> None:
        self._relationships = frozenset(relationships)

    def __call__(self, token: str) -> TreeNodeType:
        if token in self._relationships:
            return TreeNodeType.RELATIONSHIP
        return TreeNodeType.GRAPH_NODE


class ModelSegmentClassifier:
    """Classify tokens by looking them up as relationship types of a graph model.

    A token matches a relationship type either verbatim or in its
    upper snake case spelling (``dataSets`` -> ``DATA_SETS``).
    """

    def __init__(self, model: GraphModel) -> None:
        self._model = model
        self._logger = logging.getLogger(__name__)

    def __call__(self, token: str) -> TreeNodeType:
        if self.relationship_type_for(token) is not None:
            return TreeNodeType.RELATIONSHIP
        return TreeNodeType.GRAPH_NODE

    def relationship_type_for(self, token: str) -> str | None:
        for candidate in (token, to_relationship_type(token)):
            if self._model.has_relationship_type(candidate):
                return candidate
        self._logger.debug("token %s is not a relationship type", token)
        return None


def to_relationship_type(token: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", token).upper()
