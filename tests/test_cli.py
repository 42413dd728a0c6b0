import contextlib
import io
import json
import os
from pathlib import Path
import sys
import tempfile
import unittest
from unittest import mock

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from pathquery_cypher.cli import main

QUERY_YAML = (
    "views:\n"
    "  - Gene.symbol\n"
    "  - Gene.organism.name\n"
    "  - Gene.dataSets.name\n"
    "outer_joins:\n"
    "  Gene.dataSets: OUTER\n"
)

MODEL_JSON = {
    "nodes": [
        {"label": "Gene", "properties": ["symbol"]},
        {"label": "Organism", "properties": ["name"]},
        {"label": "DataSet", "properties": ["name"]},
    ],
    "relationships": [{"type": "ORGANISM"}, {"type": "DATA_SETS"}],
    "start_nodes": {"ORGANISM": [["Gene"]], "DATA_SETS": [["Gene"]]},
    "end_nodes": {"ORGANISM": [["Organism"]], "DATA_SETS": [["DataSet"]]},
}


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.query_path = self.tmp / "query.yaml"
        self.query_path.write_text(QUERY_YAML, encoding="utf-8")
        self.model_path = self.tmp / "model.json"
        self.model_path.write_text(json.dumps(MODEL_JSON), encoding="utf-8")
        patcher = mock.patch.dict(os.environ, {}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def _run(self, *argv: str) -> str:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            main(list(argv))
        return buffer.getvalue()

    def test_serializes_tree_with_model(self) -> None:
        output = self._run(str(self.query_path), "--model", str(self.model_path))
        self.assertEqual(
            output.strip(),
            "Gene:GRAPH_NODE "
            "Gene.dataSets:RELATIONSHIP Gene.dataSets.name:GRAPH_NODE ))"
            "Gene.organism:RELATIONSHIP Gene.organism.name:GRAPH_NODE ))"
            "Gene.symbol:GRAPH_NODE ))",
        )

    def test_json_output_with_subtree_propagation(self) -> None:
        output = self._run(
            str(self.query_path),
            "--relationship",
            "dataSets",
            "--propagation",
            "subtree",
            "--json",
        )
        tree = json.loads(output)
        self.assertEqual(tree["name"], "Gene")
        data_sets = next(
            child for child in tree["children"] if child["name"] == "Gene.dataSets"
        )
        self.assertEqual(data_sets["node_type"], "RELATIONSHIP")
        self.assertEqual(data_sets["outer_join"], "OUTER")
        self.assertEqual(data_sets["children"][0]["outer_join"], "OUTER")
        self.assertEqual(data_sets["children"][0]["variable_name"], "gene_datasets_name")

    def test_model_from_environment(self) -> None:
        os.environ["PATHQUERY_GRAPH_MODEL_PATH"] = str(self.model_path)
        output = self._run(str(self.query_path), "--describe-model")
        self.assertIn("Relationships:", output)
        self.assertIn("Gene.organism:RELATIONSHIP", output)

    def test_without_model_describe_prints_tree_only(self) -> None:
        output = self._run(str(self.query_path), "--describe-model")
        self.assertNotIn("Relationships:", output)
        self.assertIn("Gene.organism:GRAPH_NODE", output)

    def test_empty_query(self) -> None:
        empty = self.tmp / "empty.json"
        empty.write_text("{}", encoding="utf-8")
        self.assertEqual(self._run(str(empty)).strip(), "(empty path tree)")

    def test_invalid_query_exits_with_usage_error(self) -> None:
        bad = self.tmp / "bad.json"
        bad.write_text('{"views": ["Gene.symbol", "Protein.name"]}', encoding="utf-8")
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            with self.assertRaises(SystemExit) as context:
                self._run(str(bad))
        self.assertEqual(context.exception.code, 2)
        self.assertIn("error:", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
