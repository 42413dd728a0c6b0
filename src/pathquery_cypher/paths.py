"""Helpers for dot-separated query paths.

A path such as ``Gene.organism.name`` names a navigation from the query root
(``Gene``) through zero or more hops. Tokens are the dot-delimited segments in
traversal order.
"""

from __future__ import annotations

from typing import Sequence

from .errors import PathSyntaxError

PATH_SEPARATOR = "."
VARIABLE_SEPARATOR = "_"


def tokenize_path(path: str) -> list[str]:
    if not isinstance(path, str):
        raise PathSyntaxError(repr(path), "path must be a string")
    stripped = path.strip()
    if not stripped:
        raise PathSyntaxError(path, "path is empty")
    tokens = [token.strip() for token in stripped.split(PATH_SEPARATOR)]
    for index, token in enumerate(tokens):
        if not token:
            raise PathSyntaxError(path, f"segment {index} is empty")
    return tokens


def join_path(tokens: Sequence[str]) -> str:
    return PATH_SEPARATOR.join(tokens)


def variable_name(tokens: Sequence[str]) -> str:
    """Traversal binding name for a prefix: ``Gene.dataSets`` -> ``gene_datasets``."""
    return VARIABLE_SEPARATOR.join(token.lower() for token in tokens)

