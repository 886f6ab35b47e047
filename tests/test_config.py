from __future__ import annotations

import json
import os
import tempfile
import unittest

from keygate.config import load_config, merge_dicts, resolve_solver_config


class TestConfig(unittest.TestCase):
    def test_load_config_expands_env_vars(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.json")
            os.environ["KEYGATE_TEST_MAX_STATES"] = "1234"
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"solver": {"max_states": "$KEYGATE_TEST_MAX_STATES"}}, f)
            loaded = load_config(path)
            self.assertEqual(loaded["solver"]["max_states"], "1234")
            self.assertEqual(resolve_solver_config(loaded).max_states, 1234)

    def test_load_config_rejects_non_object(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump([1, 2], f)
            with self.assertRaises(ValueError):
                load_config(path)

    def test_merge_dicts_nested(self) -> None:
        base = {"a": 1, "nested": {"x": 1, "y": 2}}
        override = {"nested": {"y": 3, "z": 4}}
        merged = merge_dicts(base, override)
        self.assertEqual(merged, {"a": 1, "nested": {"x": 1, "y": 3, "z": 4}})

    def test_defaults(self) -> None:
        config = resolve_solver_config()
        self.assertEqual(config.max_states, 50_000)
        self.assertEqual(config.deadlock_mode, "corner")
        self.assertIsNone(config.deadline_s)
        self.assertIsNone(config.progress)
        self.assertEqual(config.progress_refresh_s, 0.25)

    def test_flat_config_and_overrides(self) -> None:
        config = resolve_solver_config(
            {"max_states": 10, "deadlock_mode": "freeze", "unrelated": True},
            {"max_states": None, "deadline_s": 2.5, "progress": False},
        )
        self.assertEqual(config.max_states, 10)
        self.assertEqual(config.deadlock_mode, "freeze")
        self.assertEqual(config.deadline_s, 2.5)
        self.assertFalse(config.progress)

    def test_override_beats_config(self) -> None:
        config = resolve_solver_config(
            {"solver": {"max_states": 10}}, {"max_states": 99}
        )
        self.assertEqual(config.max_states, 99)

    def test_invalid_values_rejected(self) -> None:
        for overrides in (
            {"max_states": 0},
            {"max_states": "many"},
            {"max_states": True},
            {"deadlock_mode": "pattern"},
            {"deadline_s": -1},
            {"progress": "yes"},
            {"progress_refresh_s": -0.5},
        ):
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValueError):
                    resolve_solver_config({}, overrides)

    def test_solver_section_must_be_object(self) -> None:
        with self.assertRaises(ValueError):
            resolve_solver_config({"solver": [1]})


if __name__ == "__main__":
    unittest.main()
