import os
import sys
import unittest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from pathquery_cypher.errors import PathSyntaxError
from pathquery_cypher.paths import join_path, tokenize_path, variable_name


class TestPaths(unittest.TestCase):
    def test_tokenize(self) -> None:
        self.assertEqual(tokenize_path("Gene"), ["Gene"])
        self.assertEqual(
            tokenize_path(" Gene.organism.name "), ["Gene", "organism", "name"]
        )

    def test_tokenize_rejects_empty_segments(self) -> None:
        for path in ("", "   ", "Gene..name", ".Gene", "Gene."):
            with self.assertRaises(PathSyntaxError, msg=path):
                tokenize_path(path)

    def test_variable_name(self) -> None:
        self.assertEqual(variable_name(["Gene"]), "gene")
        self.assertEqual(variable_name(["Gene", "dataSets"]), "gene_datasets")
        self.assertNotEqual(
            variable_name(["Gene", "organism"]),
            variable_name(["Gene", "organism", "name"]),
        )

    def test_join_path(self) -> None:
        self.assertEqual(join_path(["Gene", "organism"]), "Gene.organism")


if __name__ == "__main__":
    unittest.main()
