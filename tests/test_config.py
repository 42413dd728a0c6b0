import os
import sys
import unittest
from unittest import mock

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from pathquery_cypher.config import CompilerConfig
from pathquery_cypher.models import OuterJoinPropagation


class TestCompilerConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            config = CompilerConfig.from_env()
        self.assertIs(config.outer_join_propagation, OuterJoinPropagation.NODE_ONLY)
        self.assertEqual(config.log_level, "INFO")

    def test_from_env(self) -> None:
        env = {
            "PATHQUERY_OUTER_JOIN_PROPAGATION": "Subtree",
            "PATHQUERY_LOG_LEVEL": "warn",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = CompilerConfig.from_env()
        self.assertIs(config.outer_join_propagation, OuterJoinPropagation.SUBTREE)
        self.assertEqual(config.log_level, "WARNING")

    def test_unknown_propagation(self) -> None:
        with mock.patch.dict(
            os.environ, {"PATHQUERY_OUTER_JOIN_PROPAGATION": "sideways"}, clear=True
        ):
            with self.assertRaises(ValueError):
                CompilerConfig.from_env()


if __name__ == "__main__":
    unittest.main()
