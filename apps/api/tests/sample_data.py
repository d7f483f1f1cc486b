"""Synthetic game data for tests.

``write_sample_data(root)`` lays out a complete, small data directory: every
class gets three 10-cell grid pages and 30 skills, with a handful of pinned
and claw skills, plus monster and act tables sized so that act remapping
results can be worked out by hand.
"""

from __future__ import annotations

import json
import struct
from pathlib import Path
from typing import Optional

from PIL import Image

CLASS_ROWS = (
    ("Amazon", "ama", "am", "Amazon"),
    ("Sorceress", "sor", "so", "Sorceress"),
    ("Necromancer", "nec", "ne", "Necro"),
    ("Paladin", "pal", "pa", "Paladin"),
    ("Barbarian", "bar", "ba", "Barbarian"),
    ("Druid", "dru", "dr", "Druid"),
    ("Assassin", "ass", "as", "Assassin"),
    ("Warlock", "war", "wa", "Warlock"),
)

# Same 10 filled cells on every page: 6 per tab-row in rows 1, 2, 4, 6 and 3 in rows 3, 5.
FILLED_CELLS = ((1, 1), (1, 2), (2, 1), (2, 3), (3, 2), (4, 1), (4, 3), (5, 2), (6, 1), (6, 3))

TIER_BY_INDEX = (1, 6, 12, 18, 24, 30)

# skill name -> (column, value) overrides
PINNED_SKILLS = {
    "barskill5": {"weapsel": "3"},
    "assskill3": {"itypeb1": "h2h"},
    "assskill4": {"weapsel": "3"},
    "druskill7": {"restrict": "2"},
    "druskill8": {"restrict": "2"},
}
CLAW_SKILLS = {
    "assskill10": {"itypea1": "h2h"},
    "assskill11": {"passiveitype": "h2h"},
}
FORMULAS = {
    "amaskill2": {"EDmgSymPerCalc": "(skill('amaskill1'.blvl)+skill('amaskill10'.blvl))*par8"},
    "sorskill5": {"DmgSymPerCalc": "skill('sorskill1'.blvl)*10+skill('sorskill1'.lvl)"},
}
DISPLAY_SYNERGIES = {
    "amaskill2": ("Skillname1001", "Skillname1010"),
    "sorskill5": ("Skillname1031",),
}

SKILL_HEADERS = [
    "skill", "Id", "charclass", "skilldesc", "weapsel", "passiveitype", "itypea1", "itypea2", "itypea3", "itypeb1",
    "restrict", "reqskill1", "reqskill2", "reqskill3", "reqlevel",
    "DmgSymPerCalc", "EDmgSymPerCalc", "ELenSymPerCalc",
]
SKILLDESC_HEADERS = [
    "skilldesc", "SkillPage", "SkillRow", "SkillColumn", "ListRow", "IconCel", "str name",
] + [f"dsc3{field}{slot}" for slot in range(1, 8) for field in ("line", "texta", "textb", "calca", "calcb")]

MONSTATS_HEADERS = [
    "Id", "TreasureClass", "TreasureClass(N)", "minHP", "maxHP", "MinHP(N)",
    "Exp", "A1MinD", "A1TH", "AC", "Level", "Level(N)",
]
MONSTATS_ROWS = [
    ["zombie", "Act 1 H2H A", "Act 1 (N) H2H A", "33", "40", "120", "10", "4", "20", "5", "2", "38"],
    ["fallen3", "Act 3 Melee B", "Act 3 (N) Melee B", "100", "120", "300", "60", "12", "80", "30", "24", "50"],
    ["sandraider", "Act 2 Melee A", "Act 2 (N) Melee A", "-1", "abc", "0", "", "8", "40", "12", "18", "44"],
    ["andariel", "Andariel", "Andariel (N)", "1000", "1100", "3000", "500", "40", "200", "60", "12", "49"],
    ["cow", "Cow", "Cow (N)", "50", "60", "150", "5", "3", "10", "8", "30", "60"],
    ["baalminion", "Act 5 Good", "Act 5 (N) Good", "400", "420", "900", "300", "30", "250", "90", "36", "70"],
]

# Waypoints per act: 3, 2, 2, 1, 2 (global indices 0..9).
WAYPOINTS_PER_ACT = {1: 3, 2: 2, 3: 2, 4: 1, 5: 2}


def skill_name(code: str, n: int) -> str:
    return f"{code}skill{n}"


def skill_tier(n: int) -> int:
    return TIER_BY_INDEX[(n - 1) // 5]


def str_name_index(class_idx: int, n: int) -> int:
    return 1000 + class_idx * 30 + n


def _write_table(path: Path, headers: list[str], rows: list[list[str]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ["\t".join(headers)] + ["\t".join(row) for row in rows]
    path.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")


def _row(headers: list[str], values: dict[str, str]) -> list[str]:
    return [values.get(h, "") for h in headers]


def sprite_bytes(frames: list[bytes], width: int, height: int) -> bytes:
    """Hand-packed SpA1 sheet, independent of the codec under test."""
    header = bytearray(40)
    header[0:4] = b"SpA1"
    struct.pack_into("<HHII", header, 4, 31, width, width * len(frames), height)
    struct.pack_into("<I", header, 20, len(frames))
    body = bytearray()
    for y in range(height):
        for frame in frames:
            body += frame[y * width * 4 : (y + 1) * width * 4]
    return bytes(header) + bytes(body)


def tree_pixel(class_idx: int, page: int, lowend: bool) -> bytes:
    return bytes((class_idx * 10 + page, page, 1 if lowend else 0, 255))


def tree_sheet_size(class_idx: int, lowend: bool) -> tuple[int, int]:
    """Donor sheet dimensions; heights differ between classes."""
    if lowend:
        return 2, 2
    return 4, 3 + class_idx % 2


def write_grid(root: Path, *, classes=CLASS_ROWS) -> None:
    lines = ["class,code,tree,row,col,status,skill"]
    for name, code, _, _ in classes:
        for page in (1, 2, 3):
            for row in range(1, 7):
                for col in range(1, 4):
                    filled = (row, col) in FILLED_CELLS
                    status = "FILLED" if filled else "EMPTY"
                    lines.append(f"{name},{code},{page},{row},{col},{status},")
    (root / "skill_tree_grid.csv").write_text("\n".join(lines) + "\n", encoding="utf-8")


def write_skills(root: Path) -> None:
    skill_rows: list[list[str]] = [_row(SKILL_HEADERS, {"skill": "Attack", "Id": "0", "reqlevel": "1"})]
    desc_rows: list[list[str]] = []
    for class_idx, (_, code, _, _) in enumerate(CLASS_ROWS):
        for n in range(1, 31):
            name = skill_name(code, n)
            values = {
                "skill": name,
                "Id": str(class_idx * 30 + n),
                "charclass": code,
                "skilldesc": f"{name}_desc",
                "reqlevel": str(skill_tier(n)),
                "reqskill1": "oldreq",
            }
            values.update(PINNED_SKILLS.get(name, {}))
            values.update(CLAW_SKILLS.get(name, {}))
            values.update(FORMULAS.get(name, {}))
            skill_rows.append(_row(SKILL_HEADERS, values))

            desc = {
                "skilldesc": f"{name}_desc",
                "SkillPage": str((n - 1) // 10 + 1),
                "SkillRow": "1",
                "SkillColumn": "1",
                "ListRow": "1",
                "IconCel": str((n - 1) * 2),
                "str name": f"Skillname{str_name_index(class_idx, n)}",
            }
            for slot, ref in enumerate(DISPLAY_SYNERGIES.get(name, ()), start=1):
                desc[f"dsc3line{slot}"] = "40" if slot == 1 else "76"
                desc[f"dsc3texta{slot}"] = "Sksyn" if slot == 1 else "Magdplev"
                desc[f"dsc3textb{slot}"] = ref
            desc_rows.append(_row(SKILLDESC_HEADERS, desc))

    _write_table(root / "txt" / "skills.txt", SKILL_HEADERS, skill_rows)
    _write_table(root / "txt" / "skilldesc.txt", SKILLDESC_HEADERS, desc_rows)


def write_act_tables(root: Path) -> None:
    txt = root / "txt"
    _write_table(txt / "monstats.txt", MONSTATS_HEADERS, MONSTATS_ROWS)

    wp_headers = ["act", "town", "start", "maxnpcitem", "waypoint1", "waypoint2", "waypoint3"]
    actinfo_rows = []
    for act in range(1, 6):
        wps = [f"Act {act} WP {i}" for i in range(1, WAYPOINTS_PER_ACT[act] + 1)]
        wps += [""] * (3 - len(wps))
        actinfo_rows.append([str(act), f"Act {act} - Town", f"Act {act} - Start", "0"] + wps)
    _write_table(txt / "actinfo.txt", wp_headers, actinfo_rows)

    level_rows = []
    waypoint = 0
    level_id = 1
    for act in range(1, 6):
        for i in range(WAYPOINTS_PER_ACT[act]):
            level_rows.append([f"Act {act} WP {i + 1}", str(level_id), str(act - 1), str(waypoint)])
            waypoint += 1
            level_id += 1
        level_rows.append([f"Act {act} Cave", str(level_id), str(act - 1), "255"])
        level_id += 1
    _write_table(txt / "levels.txt", ["Name", "Id", "Act", "Waypoint"], level_rows)

    for name in ("lvltypes.txt", "hireling.txt", "monpreset.txt", "objpreset.txt"):
        rows = [[f"{name[:-4]} act {act}", str(act)] for act in range(1, 6)]
        _write_table(txt / name, ["Name", "Act"], rows)

    _write_table(
        txt / "superuniques.txt",
        ["Superunique", "TC", "TC(N)", "TC(H)"],
        [
            ["Bishibosh", "Act 1 Super A", "Act 1 (N) Super A", "Act 1 (H) Super A"],
            ["Radament", "Act 2 Super C", "Act 2 (N) Super C", "Act 2 (H) Super C"],
            ["Ismail Vilehand", "Act 3 Super B", "Act 3 (N) Super B", "Act 3 (H) Super B"],
            ["Shenk", "Act 5 Super C", "Act 5 (N) Super C", "Act 5 (H) Super C"],
        ],
    )


def write_item_tables(root: Path) -> None:
    txt = root / "txt"
    cs_headers = ["class", "StartSkill"]
    for n in (1, 2):
        cs_headers += [f"item{n}", f"item{n}loc", f"item{n}count", f"item{n}quality"]
    cs_rows = [[name, "", "jav", "", "1", "2", "", "", "0", "2"] for name, _, _, _ in CLASS_ROWS]
    cs_rows.append(["Expansion", "", "", "", "", "", "", "", "", ""])
    _write_table(txt / "charstats.txt", cs_headers, cs_rows)

    ui_headers = ["index", "version", "disabled", "spawnable", "code", "lvl", "lvl req",
                  "rarity", "prop1", "par1", "min1", "max1"]
    _write_table(
        txt / "uniqueitems.txt",
        ui_headers,
        [
            ["The Gnasher", "0", "0", "1", "hax", "7", "5", "1", "dmg%", "", "60", "70"],
            ["Bane Ash", "0", "0", "1", "sst", "7", "5", "1", "dmg%", "", "50", "60"],
        ],
    )


def write_strings(root: Path) -> None:
    strings = root / "local" / "strings"
    strings.mkdir(parents=True, exist_ok=True)
    entries = []
    for _, _, prefix, _ in CLASS_ROWS:
        for page in (1, 2, 3):
            key = f"SkillCategory{prefix.capitalize()}{page}"
            entries.append({"id": len(entries) + 1, "Key": key, "enUS": f"Original {page}"})

    ass_idx = [code for _, code, _, _ in CLASS_ROWS].index("ass")
    for n, title in ((10, "Claw Strike"), (11, "Claw Mastery")):
        num = str_name_index(ass_idx, n)
        entries.append({"id": len(entries) + 1, "Key": f"Skillname{num}", "enUS": title})
        entries.append({"id": len(entries) + 1, "Key": f"Skillsd{num}", "enUS": "Strike with claw class weapons"})
    (strings / "skills.json").write_text("\ufeff" + json.dumps(entries, indent=2), encoding="utf-8")
    (strings / "item-names.json").write_text(
        json.dumps([{"id": 1, "Key": "The Gnasher", "enUS": "The Gnasher"}], indent=2), encoding="utf-8"
    )
    (strings / "item-modifiers.json").write_text(
        json.dumps([{"id": 1, "Key": "StrSklTabItem1", "enUS": "+%d to Bow Skills"}], indent=2), encoding="utf-8"
    )


def write_tree_sprites(root: Path, *, skip: Optional[set[str]] = None) -> None:
    out = root / "sprites" / "skill_trees"
    out.mkdir(parents=True, exist_ok=True)
    for class_idx, (_, code, prefix, _) in enumerate(CLASS_ROWS):
        if skip and code in skip:
            continue
        for lowend in (False, True):
            width, height = tree_sheet_size(class_idx, lowend)
            # Frame f holds page 3 - f.
            frames = [tree_pixel(class_idx, 3 - f, lowend) * (width * height) for f in range(3)]
            suffix = ".lowend.sprite" if lowend else ".sprite"
            (out / f"{prefix}skilltree{suffix}").write_bytes(sprite_bytes(frames, width, height))


def write_icons(root: Path) -> None:
    """Amazon icons 0 and 1 are solid colors, 3 is undersized, 2 is corrupt."""
    folder = root / "sprites" / "icons" / "Amazon"
    folder.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (132, 130), (255, 0, 0, 255)).save(folder / "Amazon_0.png")
    Image.new("RGBA", (132, 130), (0, 255, 0, 255)).save(folder / "Amazon_1.bmp", format="PNG")
    (folder / "Amazon_2.png").write_bytes(b"not an image")
    Image.new("RGB", (10, 10), (0, 0, 255)).save(folder / "Amazon_3.png")


def write_sample_data(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    write_grid(root)
    write_skills(root)
    write_act_tables(root)
    write_item_tables(root)
    write_strings(root)
    write_tree_sprites(root)
    write_icons(root)
    return root
