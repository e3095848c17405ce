import json
import tempfile
import unittest
from pathlib import Path

from currikit.core.config import (
    CurriculumPathsConfig,
    PipelineConfig,
    default_pipeline_config,
    load_pipeline_config,
    merge_path_overrides,
)
from currikit.core.provenance import ProvenanceEvent, ProvenanceLogger
from currikit.core.validation import (
    InputNotFoundError,
    InputParseError,
    inspect_json_file,
    load_json_file,
)


class ConfigParsingTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name).resolve()

    def _write_yaml(self, data: str) -> Path:
        path = self.root / "pipeline.yaml"
        path.write_text(data, encoding="utf-8")
        return path

    def test_default_paths_follow_curriculum_dir(self) -> None:
        paths = CurriculumPathsConfig(curriculum_dir=Path("data"))
        self.assertEqual(paths.database_path, Path("data/database.json"))
        self.assertEqual(paths.metadata_path, Path("data/metadata.json"))
        self.assertEqual(paths.graph_path, Path("data/graphs.json"))
        self.assertEqual(paths.aggregated_items_path, Path("data/aggregated-items.json"))
        self.assertEqual(paths.ordered_items_path, Path("data/ordered-items.json"))

    def test_load_pipeline_config(self) -> None:
        path = self._write_yaml(
            """
            curriculum_dir: data/curriculum
            paths:
              aggregated_items_path: clusters/aggregated-items.json
            ordering:
              default_relevance: 6
            log_level: debug
            """
        )
        config = load_pipeline_config(path)
        self.assertIsInstance(config, PipelineConfig)
        self.assertEqual(config.paths.curriculum_dir, self.root / "data" / "curriculum")
        self.assertEqual(config.paths.metadata_path, self.root / "data" / "curriculum" / "metadata.json")
        self.assertEqual(config.paths.aggregated_items_path, self.root / "clusters" / "aggregated-items.json")
        self.assertEqual(config.ordering.default_relevance, 6)
        self.assertEqual(config.ordering.default_complexity, 1)
        self.assertEqual(config.log_level, "DEBUG")

    def test_empty_config_uses_curriculum_next_to_file(self) -> None:
        config = load_pipeline_config(self._write_yaml(""))
        self.assertEqual(config.paths.curriculum_dir, self.root / "curriculum")

    def test_invalid_config_raises_value_error(self) -> None:
        with self.assertRaises(ValueError):
            load_pipeline_config(self._write_yaml("log_level: LOUD\n"))
        with self.assertRaises(ValueError):
            load_pipeline_config(self._write_yaml("ordering:\n  default_complexity: 0\n"))
        with self.assertRaises(ValueError):
            load_pipeline_config(self._write_yaml("- just\n- a list\n"))

    def test_curriculum_override_recomputes_derived_paths(self) -> None:
        config = default_pipeline_config(self.root / "a")
        updated = merge_path_overrides(config, {"curriculum_dir": self.root / "b"})
        self.assertEqual(updated.paths.metadata_path, self.root / "b" / "metadata.json")
        self.assertEqual(updated.paths.output_dir, self.root / "b")
        self.assertEqual(config.paths.metadata_path, self.root / "a" / "metadata.json")

    def test_explicit_paths_survive_curriculum_override(self) -> None:
        path = self._write_yaml("paths:\n  graph_path: shared/graphs.json\n")
        config = load_pipeline_config(path)
        updated = merge_path_overrides(
            config,
            {"curriculum_dir": self.root / "other", "output_dir": self.root / "out"},
        )
        self.assertEqual(updated.paths.graph_path, self.root / "shared" / "graphs.json")
        self.assertEqual(updated.paths.database_path, self.root / "other" / "database.json")
        self.assertEqual(updated.paths.ordered_items_path, self.root / "out" / "ordered-items.json")

    def test_unknown_override_rejected(self) -> None:
        with self.assertRaises(ValueError):
            merge_path_overrides(default_pipeline_config(self.root), {"notebook": self.root})


class ValidationTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)

    def test_load_json_file_errors_carry_stage_and_path(self) -> None:
        missing = self.root / "missing.json"
        with self.assertRaises(InputNotFoundError) as ctx:
            load_json_file(missing, stage="order")
        self.assertEqual(ctx.exception.stage, "order")
        self.assertEqual(ctx.exception.path, missing)

        wrong_root = self.root / "object.json"
        wrong_root.write_text('{"a": 1}', encoding="utf-8")
        with self.assertRaises(InputParseError) as ctx:
            load_json_file(wrong_root, stage="order", expected=list)
        self.assertIn("expected list", str(ctx.exception))

    def test_load_json_file_accepts_byte_order_mark(self) -> None:
        path = self.root / "bom.json"
        path.write_text("\ufeff[1, 2]", encoding="utf-8")
        self.assertEqual(load_json_file(path, stage="order", expected=list), [1, 2])

    def test_inspect_json_file_reports_instead_of_raising(self) -> None:
        missing = inspect_json_file(self.root / "missing.json", stage="load-graph")
        self.assertFalse(missing.valid)
        self.assertTrue(missing.has_warnings)
        self.assertEqual(missing.errors, [])

        broken = self.root / "broken.json"
        broken.write_text("{", encoding="utf-8")
        result = inspect_json_file(broken, stage="load-graph")
        self.assertFalse(result.valid)
        self.assertEqual(len(result.errors), 1)


class ProvenanceLoggerTests(unittest.TestCase):
    def test_log_appends_json_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            log_path = Path(tmp_dir) / "logs" / "provenance.jsonl"
            logger = ProvenanceLogger(log_path)
            logger.log(ProvenanceEvent(stage="extract", status="started", message="extract started"))
            logger.extend(
                [
                    {"stage": "extract", "message": "done", "payload": {"totalItems": 3}},
                    {"stage": "order", "status": "degraded", "message": "cycle"},
                ]
            )
            lines = log_path.read_text(encoding="utf-8").splitlines()
            self.assertEqual(len(lines), 3)
            self.assertEqual(json.loads(lines[1])["payload"], {"totalItems": 3})

            events = logger.read()
            self.assertEqual([event.status for event in events], ["started", "completed", "degraded"])
            self.assertEqual(events[2].stage, "order")

    def test_read_without_file_is_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            logger = ProvenanceLogger(Path(tmp_dir) / "provenance.jsonl")
            self.assertEqual(logger.read(), [])


if __name__ == "__main__":
    unittest.main()
