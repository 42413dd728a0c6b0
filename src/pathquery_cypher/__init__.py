from .classify import ModelSegmentClassifier, SegmentClassifier, StaticSegmentClassifier
from .config import CompilerConfig
from .errors import (
    EmptyPathTreeError,
    GraphModelError,
    ModelNotInitializedError,
    PathQueryCypherError,
    PathQueryLoadError,
    PathRootMismatchError,
    PathSyntaxError,
)
from .graph_model import GraphModel, NodeDescriptor, RelationshipDescriptor
from .models import OuterJoinPropagation, OuterJoinStatus, TreeNodeType
from .path_query import PathConstraint, PathQuery, SortOrder, load_path_query
from .path_tree import PathTree, TreeNode
from .paths import tokenize_path, variable_name

__all__ = [
    "CompilerConfig",
    "EmptyPathTreeError",
    "GraphModel",
    "GraphModelError",
    "ModelNotInitializedError",
    "ModelSegmentClassifier",
    "NodeDescriptor",
    "OuterJoinPropagation",
    "OuterJoinStatus",
    "PathConstraint",
    "PathQuery",
    "PathQueryCypherError",
    "PathQueryLoadError",
    "PathRootMismatchError",
    "PathSyntaxError",
    "PathTree",
    "RelationshipDescriptor",
    "SegmentClassifier",
    "SortOrder",
    "StaticSegmentClassifier",
    "TreeNode",
    "TreeNodeType",
    "load_path_query",
    "tokenize_path",
    "variable_name",
]
