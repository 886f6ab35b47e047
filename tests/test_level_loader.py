from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from keygate import (
    InvalidLevelError,
    level_from_dict,
    level_to_dict,
    load_level_set,
    make_level,
    parse_json_levels,
    parse_text_levels,
)

_TWO_LEVELS = """; unit:1
; Single push
#####
#@$k#
#  G#
#####

; unit:2
; Walk then push
######
#@ $k#
#G   #
######
"""


class TestTextLevels(unittest.TestCase):
    def test_parse_multiple_levels_with_titles(self) -> None:
        levels = parse_text_levels(_TWO_LEVELS, set_name="unit")
        self.assertEqual(len(levels), 2)
        self.assertEqual(levels[0].level_id, "unit:1")
        self.assertEqual(levels[0].title, "Single push")
        self.assertEqual(levels[1].level_id, "unit:2")
        self.assertEqual(levels[1].title, "Walk then push")

    def test_text_rows_map_to_xy_with_y_up(self) -> None:
        level = parse_text_levels(_TWO_LEVELS, set_name="unit")[0]
        self.assertEqual((level.width, level.height), (5, 4))
        self.assertEqual(level.player_spawn, (1, 2))
        self.assertEqual(level.boxes, ((2, 2),))
        self.assertEqual(level.keys, ((3, 2),))
        self.assertEqual(level.goal, (3, 1))
        self.assertIn((0, 0), level.walls)
        self.assertNotIn((1, 1), level.walls)

    def test_boxes_numbered_in_reading_order(self) -> None:
        level = parse_text_levels(
            """#####
#$ $#
#@$G#
#####
""",
            set_name="unit",
        )[0]
        self.assertEqual(level.boxes, ((1, 2), (3, 2), (2, 1)))

    def test_composite_symbols(self) -> None:
        level = parse_text_levels("@*g-", set_name="unit")[0]
        self.assertEqual(level.boxes, ((1, 0),))
        self.assertEqual(level.keys, ((1, 0), (2, 0)))
        self.assertEqual(level.goal, (2, 0))
        self.assertEqual(level.walls, frozenset())

    def test_short_rows_padded_with_floor(self) -> None:
        level = parse_text_levels("####\n#@G\n####", set_name="unit")[0]
        self.assertEqual(level.width, 4)
        self.assertNotIn((3, 1), level.walls)

    def test_rejects_bad_input(self) -> None:
        cases = {
            "invalid symbol": "#@x G#",
            "multiple players": "#@@G#",
            "missing player": "# $kG#",
            "missing goal": "#@$k #",
            "multiple goals": "#@GG#",
            "empty": "",
        }
        for label, text in cases.items():
            with self.subTest(label=label):
                with self.assertRaises(InvalidLevelError):
                    parse_text_levels(text, set_name="bad")

    def test_to_text_parses_back(self) -> None:
        level = parse_text_levels(_TWO_LEVELS, set_name="unit")[1]
        again = parse_text_levels(level.to_text(), set_name="unit")[0]
        self.assertEqual(again.walls, level.walls)
        self.assertEqual(again.boxes, level.boxes)
        self.assertEqual(again.keys, level.keys)
        self.assertEqual(again.player_spawn, level.player_spawn)
        self.assertEqual(again.goal, level.goal)


class TestJsonLevels(unittest.TestCase):
    def _payload(self) -> dict:
        return {
            "levelName": "Corridor",
            "levelDescription": "push once",
            "estimatedDifficulty": 2,
            "width": 5,
            "height": 1,
            "playerSpawn": {"x": 0, "y": 0},
            "playerGoal": [4, 0],
            "wallCoordinates": [],
            "boxCoordinates": [[1, 0]],
            "keyCoordinates": [{"x": 2, "y": 0}],
        }

    def test_level_from_dict_accepts_both_coordinate_shapes(self) -> None:
        level = level_from_dict(self._payload())
        self.assertEqual(level.level_id, "Corridor")
        self.assertEqual(level.title, "Corridor")
        self.assertEqual(level.player_spawn, (0, 0))
        self.assertEqual(level.goal, (4, 0))
        self.assertEqual(level.boxes, ((1, 0),))
        self.assertEqual(level.keys, ((2, 0),))
        self.assertEqual(level.difficulty, 2)
        self.assertEqual(level.description, "push once")

    def test_level_to_dict_loads_back(self) -> None:
        level = level_from_dict(self._payload())
        again = level_from_dict(level_to_dict(level))
        self.assertEqual(again, level)

    def test_level_to_dict_preserves_box_order(self) -> None:
        level = make_level(
            width=5,
            height=4,
            player_spawn=(0, 0),
            goal=(4, 3),
            boxes=[(3, 2), (1, 1)],
            description="two boxes",
            difficulty=3,
        )
        payload = level_to_dict(level)
        self.assertEqual(payload["boxCoordinates"], [[3, 2], [1, 1]])
        self.assertEqual(payload["levelDescription"], "two boxes")
        self.assertEqual(payload["estimatedDifficulty"], 3)
        self.assertEqual(level_from_dict(payload).boxes, ((3, 2), (1, 1)))

    def test_missing_field_rejected(self) -> None:
        payload = self._payload()
        del payload["playerGoal"]
        with self.assertRaises(InvalidLevelError):
            level_from_dict(payload)

    def test_bad_coordinate_rejected(self) -> None:
        payload = self._payload()
        payload["boxCoordinates"] = [[1, "0"]]
        with self.assertRaises(InvalidLevelError):
            level_from_dict(payload)

    def test_bad_difficulty_rejected(self) -> None:
        payload = self._payload()
        payload["estimatedDifficulty"] = 11
        with self.assertRaises(InvalidLevelError):
            level_from_dict(payload)

    def test_parse_levels_list_assigns_default_ids(self) -> None:
        payload = self._payload()
        del payload["levelName"]
        levels = parse_json_levels(json.dumps({"levels": [payload, payload]}), set_name="s")
        self.assertEqual([level.level_id for level in levels], ["s:1", "s:2"])

    def test_invalid_json_rejected(self) -> None:
        with self.assertRaises(InvalidLevelError):
            parse_json_levels("{not json", set_name="s")
        with self.assertRaises(InvalidLevelError):
            parse_json_levels(json.dumps({"levels": []}), set_name="s")


class TestLoadLevelSet(unittest.TestCase):
    def test_load_text_and_json_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            text_path = Path(tmp) / "starter.txt"
            text_path.write_text(_TWO_LEVELS)
            json_path = Path(tmp) / "single.json"
            json_path.write_text(
                json.dumps(
                    {
                        "width": 3,
                        "height": 1,
                        "playerSpawn": [0, 0],
                        "playerGoal": [2, 0],
                    }
                )
            )

            text_set = load_level_set(text_path)
            self.assertEqual(text_set.name, "starter")
            self.assertEqual(len(text_set.levels), 2)

            json_set = load_level_set(str(json_path))
            self.assertEqual(json_set.name, "single")
            self.assertEqual(json_set.levels[0].level_id, "single:1")
            self.assertEqual(json_set.levels[0].boxes, ())

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_level_set("/nonexistent/levels.txt")


if __name__ == "__main__":
    unittest.main()
