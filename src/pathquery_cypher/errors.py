from __future__ import annotations

from typing import Iterable


class PathQueryCypherError(ValueError):
    pass


class PathSyntaxError(PathQueryCypherError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path {path!r}: {reason}")


class PathRootMismatchError(PathQueryCypherError):
    def __init__(self, path: str, root: str) -> None:
        self.path = path
        self.root = root
        super().__init__(
            f"Path {path!r} does not start at the query root {root!r}"
        )


class EmptyPathTreeError(PathQueryCypherError):
    def __init__(self) -> None:
        super().__init__("PathTree has no root; it was built from zero paths")


class PathQueryLoadError(PathQueryCypherError):
    pass


class GraphModelError(PathQueryCypherError):
    def __init__(self, message: str, problems: Iterable[str] = ()) -> None:
        self.problems = list(problems)
        if self.problems:
            message = message + ":\n" + "\n".join(
                f"- {problem}" for problem in self.problems
            )
        super().__init__(message)


class ModelNotInitializedError(GraphModelError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"GraphModel.{operation} called on an uninitialized model"
        )


class DetachedTreeNodeError(PathQueryCypherError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Parent of tree node {name!r} is gone; keep the PathTree alive "
            "while navigating its nodes"
        )
