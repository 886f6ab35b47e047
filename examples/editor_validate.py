from __future__ import annotations

from keygate import check_level, make_level, parse_text_levels

LEVELS = """; Walk around, then push
#######
#  k  #
# $   #
#@   G#
#######

; Box trapped against the top wall
#####
# $ #
#@ k#
#G  #
#####
"""


def main() -> None:
    for level in parse_text_levels(LEVELS, set_name="demo"):
        report = check_level(level, max_states=10_000)
        print(f"{level.title}: {report.status}")
        print(level.to_text())
        print()

    editor_level = make_level(
        width=6,
        height=3,
        player_spawn=(0, 1),
        goal=(5, 1),
        boxes=[(2, 1)],
        keys=[(4, 2)],
        level_id="editor:draft",
    )
    report = check_level(editor_level, deadline_s=0.5)
    print("Editor draft:", report.to_dict())


if __name__ == "__main__":
    main()
