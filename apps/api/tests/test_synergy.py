#!/usr/bin/env python3

from __future__ import annotations

import unittest

from packages.treeshuffle_core.models import (
    GridSlot,
    LayoutPage,
    Placement,
    PrerequisiteEdge,
    SkillDefinition,
    SkillDescriptor,
    SynergyRewrite,
)
from packages.treeshuffle_core.seed import create_rng
from packages.treeshuffle_core.tables import parse_table
from packages.treeshuffle_core.trees.synergy import (
    SkillRef,
    parse_formula,
    remap_formula,
    remap_synergies,
    render_formula,
)
from packages.treeshuffle_core.trees.writers import write_skilldesc_table, write_skills_table

PAGE = LayoutPage("sor", "Sorceress", 1, tuple(GridSlot(r, 1, True) for r in range(1, 7)))


def _skill(name: str, *, formula: str = "") -> SkillDefinition:
    formulas = (("EDmgSymPerCalc", formula),) if formula else ()
    return SkillDefinition(name=name, skill_id=0, charclass="sor", skilldesc=f"{name}_desc", reqlevel=1, formulas=formulas)


def _placements(skills: list[SkillDefinition], target: str = "nec") -> list[Placement]:
    return [Placement(s, target, PAGE, 0, rank + 1, 1, rank * 2, rank) for rank, s in enumerate(skills)]


class FormulaTests(unittest.TestCase):
    def test_parse_and_render(self) -> None:
        formula = "(skill('Fire Bolt'.blvl)+skill('Meteor'.lvl))*par8"
        tokens = parse_formula(formula)
        self.assertEqual(tokens, ["(", SkillRef("Fire Bolt", "blvl"), "+", SkillRef("Meteor", "lvl"), ")*par8"])
        self.assertEqual(render_formula(tokens), formula)

    def test_formula_without_references(self) -> None:
        self.assertIsNone(remap_formula("par8*2", ["a", "b"], create_rng(1)))

    def test_prefix_sharing_names_are_replaced_independently(self) -> None:
        formula = "skill('Fire'.blvl)+skill('Fire Ball'.blvl)"
        updated = remap_formula(formula, ["Ice", "Frost Nova"], create_rng(3))
        refs = [tok for tok in parse_formula(updated) if isinstance(tok, SkillRef)]
        self.assertEqual(sorted(ref.name for ref in refs), ["Frost Nova", "Ice"])
        self.assertEqual(updated.count("+"), 1)

    def test_repeated_reference_keeps_one_replacement(self) -> None:
        updated = remap_formula("skill('A'.blvl)*10+skill('A'.lvl)", ["X", "Y", "Z"], create_rng(9))
        refs = [tok for tok in parse_formula(updated) if isinstance(tok, SkillRef)]
        self.assertEqual(len(refs), 2)
        self.assertEqual(refs[0].name, refs[1].name)
        self.assertEqual([r.attr for r in refs], ["blvl", "lvl"])

    def test_references_past_available_classmates_are_kept(self) -> None:
        updated = remap_formula("skill('A'.blvl)+skill('B'.blvl)", ["X"], create_rng(2))
        self.assertEqual(updated, "skill('X'.blvl)+skill('B'.blvl)")


class SynergyPassTests(unittest.TestCase):
    def setUp(self) -> None:
        self.skills = [
            _skill("Alpha", formula="skill('Old One'.blvl)+skill('Old Two'.blvl)"),
            _skill("Beta"),
            _skill("Gamma"),
            _skill("Delta"),
        ]
        self.placements = _placements(self.skills)
        self.descriptors = {
            f"{s.name}_desc": SkillDescriptor(f"{s.name}_desc", 1, 1, 1, 0, f"Skillname{idx}")
            for idx, s in enumerate(self.skills)
        }
        self.descriptors["Alpha_desc"] = SkillDescriptor(
            "Alpha_desc", 1, 1, 1, 0, "Skillname0", synergy_refs=("OldRef1", "OldRef2", "OldRef3", "OldRef4", "OldRef5")
        )

    def test_formula_and_display_references_point_at_classmates(self) -> None:
        rewrites = remap_synergies(self.placements, {"nec": self.placements}, self.descriptors, create_rng(11))
        rewrite = rewrites["Alpha"]

        refs = [t.name for t in parse_formula(rewrite.formulas["EDmgSymPerCalc"]) if isinstance(t, SkillRef)]
        self.assertEqual(len(set(refs)), 2)
        self.assertTrue(set(refs) <= {"Beta", "Gamma", "Delta"})

        # Five display slots but only three classmates.
        self.assertEqual(len(rewrite.display_refs), 3)
        self.assertEqual(set(rewrite.display_refs), {"Skillname1", "Skillname2", "Skillname3"})
        self.assertNotIn("Beta", rewrites)

    def test_lone_skill_keeps_display_references(self) -> None:
        solo = self.placements[:1]
        rewrites = remap_synergies(solo, {"nec": solo}, self.descriptors, create_rng(1))
        self.assertIsNone(rewrites["Alpha"].display_refs)
        self.assertEqual(rewrites["Alpha"].formulas["EDmgSymPerCalc"], "skill('Old One'.blvl)+skill('Old Two'.blvl)")


class WriterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.skills = [_skill("Alpha"), _skill("Beta")]
        self.placements = _placements(self.skills, target="bar")

    def _skills_table(self):
        return parse_table(
            "skill\tId\tcharclass\tskilldesc\treqskill1\treqskill2\treqskill3\treqlevel\tEDmgSymPerCalc\n"
            "Alpha\t1\tsor\tAlpha_desc\tx\ty\tz\t30\t\n"
            "Beta\t2\tsor\tBeta_desc\tx\t\tz\t30\t\n"
            "Attack\t0\t\t\t\t\t\t1\t\n",
            name="skills.txt",
        )

    def test_skills_rows_follow_placement(self) -> None:
        table = self._skills_table()
        edges = {"Alpha": PrerequisiteEdge("Alpha"), "Beta": PrerequisiteEdge("Beta", "Alpha")}
        rewrites = {"Alpha": SynergyRewrite("Alpha", formulas={"EDmgSymPerCalc": "skill('Beta'.blvl)"})}
        self.assertEqual(write_skills_table(table, self.placements, rewrites, edges), 2)

        alpha, beta, attack = table.rows
        self.assertEqual(alpha, ["Alpha", "1", "bar", "Alpha_desc", "", "", "", "1", "skill('Beta'.blvl)"])
        self.assertEqual(beta, ["Beta", "2", "bar", "Beta_desc", "Alpha", "", "", "6", ""])
        self.assertEqual(attack[2], "")

    def test_disabled_prerequisites_clear_requirements(self) -> None:
        table = self._skills_table()
        write_skills_table(table, self.placements, {}, None)
        for row in table.rows[:2]:
            self.assertEqual(row[4:7], ["", "", ""])

    def test_skilldesc_rows_and_synergy_slots(self) -> None:
        headers = ["skilldesc", "SkillPage", "SkillRow", "SkillColumn", "ListRow", "IconCel"] + [
            f"dsc3{f}{slot}" for slot in (1, 2, 3) for f in ("line", "texta", "textb", "calca", "calcb")
        ]
        old = ["9", "old", "OldRef", "1", "2"]
        text = "\t".join(headers) + "\n" + "Alpha_desc\t3\t5\t2\t4\t40\t" + "\t".join(old * 3) + "\n"
        table = parse_table(text, name="skilldesc.txt")
        rewrites = {"Alpha": SynergyRewrite("Alpha", display_refs=["Skillname7", "Skillname8"])}

        self.assertEqual(write_skilldesc_table(table, self.placements, rewrites), 1)
        schema = table.schema()
        row = table.rows[0]
        self.assertEqual([schema.get(row, c) for c in ("SkillPage", "SkillRow", "SkillColumn", "ListRow", "IconCel")], ["1", "1", "1", "1", "0"])
        self.assertEqual(
            [schema.get(row, f"dsc3{f}1") for f in ("line", "texta", "textb", "calca", "calcb")],
            ["40", "Sksyn", "Skillname7", "2", ""],
        )
        self.assertEqual(
            [schema.get(row, f"dsc3{f}2") for f in ("line", "texta", "textb", "calca", "calcb")],
            ["76", "Magdplev", "Skillname8", "par8", ""],
        )
        self.assertEqual([schema.get(row, f"dsc3{f}3") for f in ("line", "textb")], ["", ""])


if __name__ == "__main__":
    unittest.main()
