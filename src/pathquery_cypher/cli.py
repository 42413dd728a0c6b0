from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Sequence

from .classify import ModelSegmentClassifier, SegmentClassifier, StaticSegmentClassifier
from .config import CompilerConfig
from .errors import PathQueryCypherError
from .graph_model import GraphModel
from .logging_utils import configure_logging, format_exception_summary
from .models import OuterJoinPropagation
from .path_query import load_path_query
from .path_tree import PathTree

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Compile a path query into a traversal tree"
    )
    parser.add_argument("query", type=Path, help="Path query file (YAML or JSON)")
    parser.add_argument(
        "--model",
        type=Path,
        help="Graph model file used to classify path segments",
    )
    parser.add_argument(
        "--relationship",
        action="append",
        default=[],
        metavar="TOKEN",
        help="Treat TOKEN as a relationship when no graph model is given",
    )
    parser.add_argument(
        "--propagation",
        choices=[item.value for item in OuterJoinPropagation],
        help="Outer join propagation policy",
    )
    parser.add_argument("--json", action="store_true", help="Print the tree as JSON")
    parser.add_argument(
        "--describe-model",
        action="store_true",
        help="Print a summary of the graph model before the tree",
    )
    parser.add_argument("--log-level", help="Logging level")
    args = parser.parse_args(argv)

    config = CompilerConfig.from_env()
    configure_logging(args.log_level or config.log_level)
    propagation = (
        OuterJoinPropagation(args.propagation)
        if args.propagation
        else config.outer_join_propagation
    )

    try:
        query = load_path_query(args.query)
        model = GraphModel.load(args.model) if args.model else GraphModel.load_default()
        classifier: SegmentClassifier = (
            ModelSegmentClassifier(model)
            if model.is_initialized
            else StaticSegmentClassifier(args.relationship)
        )
        tree = PathTree.from_query(query, classify=classifier, propagation=propagation)
    except PathQueryCypherError as exc:
        logger.debug("%s", format_exception_summary(exc))
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(2)

    if args.describe_model and model.is_initialized:
        print(model.describe())
        print()
    if args.json:
        print(json.dumps(tree.to_dict(), indent=2, ensure_ascii=True))
    elif tree.is_empty:
        print("(empty path tree)")
    else:
        print(tree.serialize())


if __name__ == "__main__":
    main()
