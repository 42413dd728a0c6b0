"""Compile flat query paths into a traversal tree.

Every path of a query (``Gene``, ``Gene.organism``, ``Gene.organism.name`` ...)
is folded into a prefix trie rooted at the query's root class. Each tree node
carries the Cypher variable it will be bound to, whether it stands for a graph
node or a relationship, and whether the hop leading to it is an outer join
(``OPTIONAL MATCH``) or an inner one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Callable, Iterable, Iterator, Mapping, Sequence
import weakref

from .errors import DetachedTreeNodeError, EmptyPathTreeError, PathRootMismatchError
from .models import JsonObject, OuterJoinPropagation, OuterJoinStatus, TreeNodeType
from .path_query import PathQuery
from .paths import join_path, tokenize_path, variable_name

Tokenizer = Callable[[str], Sequence[str]]
Classifier = Callable[[str], TreeNodeType]


@dataclass(eq=False)
class TreeNode:
    tokens: tuple[str, ...]
    variable_name: str
    node_type: TreeNodeType
    outer_join: OuterJoinStatus = OuterJoinStatus.INNER
    children: dict[str, "TreeNode"] = field(default_factory=dict, repr=False)
    _parent: weakref.ReferenceType["TreeNode"] | None = field(
        default=None, init=False, repr=False
    )

    @property
    def name(self) -> str:
        return join_path(self.tokens)

    @property
    def token(self) -> str:
        return self.tokens[-1]

    @property
    def parent(self) -> "TreeNode" | None:
        if self._parent is None:
            return None
        parent = self._parent()
        if parent is None:
            raise DetachedTreeNodeError(self.name)
        return parent

    @property
    def is_root(self) -> bool:
        return len(self.tokens) == 1

    @property
    def is_outer(self) -> bool:
        return self.outer_join is OuterJoinStatus.OUTER

    def get_child(self, token: str) -> "TreeNode" | None:
        return self.children.get(token)

    def children_keys(self) -> list[str]:
        return sorted(self.children)

    def add_child(self, child: "TreeNode") -> "TreeNode":
        existing = self.children.get(child.token)
        if existing is not None:
            return existing
        child._parent = weakref.ref(self)
        self.children[child.token] = child
        return child

    def mark_outer(self) -> None:
        self.outer_join = OuterJoinStatus.OUTER

    def path_tokens(self) -> list[str]:
        return list(self.tokens)

    def iter_subtree(self) -> Iterator["TreeNode"]:
        stack: list[TreeNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(
                node.children[key] for key in reversed(node.children_keys())
            )

    def to_dict(self) -> JsonObject:
        return {
            "name": self.name,
            "variable_name": self.variable_name,
            "node_type": self.node_type.value,
            "outer_join": self.outer_join.value,
            "children": [self.children[key].to_dict() for key in self.children_keys()],
        }


class PathTree:
    def __init__(
        self,
        paths: Iterable[str],
        outer_joins: Mapping[str, OuterJoinStatus] | None = None,
        *,
        classify: Classifier,
        tokenize: Tokenizer = tokenize_path,
        propagation: OuterJoinPropagation = OuterJoinPropagation.NODE_ONLY,
    ) -> None:
        self._tokenize = tokenize
        self._classify = classify
        self._propagation = propagation
        self._outer_joins = {
            path: OuterJoinStatus(status)
            for path, status in (outer_joins or {}).items()
        }
        self._logger = logging.getLogger(__name__)
        self._root: TreeNode | None = None

        count = 0
        for path in paths:
            self._insert(path)
            self._apply_outer_joins()
            count += 1
        self._disambiguate_variables()

        if self._root is None:
            self._logger.debug("path tree built from zero paths")
        else:
            self._logger.info(
                "path tree built: root=%s paths=%d nodes=%d",
                self._root.name,
                count,
                sum(1 for _ in self.walk()),
            )

    @classmethod
    def from_query(
        cls,
        query: PathQuery,
        *,
        classify: Classifier,
        tokenize: Tokenizer = tokenize_path,
        propagation: OuterJoinPropagation = OuterJoinPropagation.NODE_ONLY,
    ) -> "PathTree":
        return cls(
            query.all_paths(),
            query.outer_join_status(),
            classify=classify,
            tokenize=tokenize,
            propagation=propagation,
        )

    @property
    def root(self) -> TreeNode | None:
        return self._root

    @property
    def root_path(self) -> str:
        if self._root is None:
            raise EmptyPathTreeError()
        return self._root.name

    @property
    def is_empty(self) -> bool:
        return self._root is None

    @property
    def propagation(self) -> OuterJoinPropagation:
        return self._propagation

    def resolve(self, path: str) -> TreeNode | None:
        if self._root is None:
            return None
        tokens = self._tokenize(path)
        if not tokens or tokens[0] != self._root.token:
            return None
        node: TreeNode | None = self._root
        for token in tokens[1:]:
            node = node.get_child(token)
            if node is None:
                return None
        return node

    def walk(self) -> Iterator[TreeNode]:
        if self._root is None:
            return iter(())
        return self._root.iter_subtree()

    def serialize(self) -> str:
        """Pre-order dump ``name:KIND`` with ``)`` closing every subtree."""
        if self._root is None:
            return ""
        parts: list[str] = []
        self._serialize_node(self._root, parts)
        return "".join(parts)

    def to_dict(self) -> JsonObject | None:
        if self._root is None:
            return None
        return self._root.to_dict()

    def _serialize_node(self, node: TreeNode, parts: list[str]) -> None:
        parts.append(f"{node.name}:{node.node_type.value} ")
        for key in node.children_keys():
            self._serialize_node(node.children[key], parts)
        parts.append(")")

    def _insert(self, path: str) -> None:
        tokens = list(self._tokenize(path))
        if self._root is None:
            self._root = TreeNode(
                tokens=(tokens[0],),
                variable_name=variable_name(tokens[:1]),
                node_type=TreeNodeType.GRAPH_NODE,
            )
            self._logger.debug("root created: %s", self._root.variable_name)
        elif tokens[0] != self._root.token:
            raise PathRootMismatchError(path, self._root.token)

        node = self._root
        for depth in range(1, len(tokens)):
            token = tokens[depth]
            child = node.get_child(token)
            if child is None:
                prefix = tokens[: depth + 1]
                child = node.add_child(
                    TreeNode(
                        tokens=tuple(prefix),
                        variable_name=variable_name(prefix),
                        node_type=self._classify(token),
                    )
                )
                self._logger.debug(
                    "node created: %s (%s)", child.name, child.node_type.value
                )
            node = child

    def _apply_outer_joins(self) -> None:
        for path, status in self._outer_joins.items():
            if status is not OuterJoinStatus.OUTER:
                continue
            node = self.resolve(path)
            if node is None:
                self._logger.debug("outer join path not in tree: %s", path)
                continue
            if self._propagation is OuterJoinPropagation.SUBTREE:
                for descendant in node.iter_subtree():
                    descendant.mark_outer()
            else:
                node.mark_outer()

    def _disambiguate_variables(self) -> None:
        # Distinct prefixes may lower-case to one name (Gene.dataSets, Gene.datasets).
        # The smallest prefix keeps it; the rest take the first free numeric suffix.
        by_name: dict[str, list[TreeNode]] = {}
        for node in self.walk():
            by_name.setdefault(node.variable_name, []).append(node)
        used = set(by_name)
        for base in sorted(by_name):
            clashing = sorted(by_name[base], key=lambda node: node.tokens)
            for node in clashing[1:]:
                suffix = 2
                while f"{base}_{suffix}" in used:
                    suffix += 1
                node.variable_name = f"{base}_{suffix}"
                used.add(node.variable_name)
                self._logger.debug(
                    "variable %s renamed to %s for %s",
                    base,
                    node.variable_name,
                    node.name,
                )
