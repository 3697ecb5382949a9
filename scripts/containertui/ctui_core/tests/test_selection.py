from __future__ import annotations

import random
import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from ctui_core.selection import SelectionSet  # noqa: E402


class SelectionSetTests(unittest.TestCase):
    def test_toggle_inserts_then_removes(self):
        selection = SelectionSet()
        selection.toggle("a", 0)
        self.assertTrue(selection.is_selected("a"))
        selection.toggle("a", 0)
        self.assertFalse(selection.is_selected("a"))
        self.assertEqual(len(selection), 0)

    def test_size_matches_odd_toggle_counts(self):
        rng = random.Random(7)
        for _ in range(20):
            selection = SelectionSet()
            counts: dict[int, int] = {}
            for _ in range(rng.randint(0, 40)):
                identity = rng.randint(0, 9)
                selection.toggle(identity, identity)
                counts[identity] = counts.get(identity, 0) + 1
            odd = sum(1 for count in counts.values() if count % 2)
            self.assertEqual(len(selection), odd)

    def test_ids_follow_list_order(self):
        selection = SelectionSet()
        selection.select("c", 2)
        selection.select("a", 0)
        self.assertEqual(selection.ids(), ["a", "c"])
        self.assertEqual(selection.ids_in(["c", "b", "a"]), ["c", "a"])

    def test_reconcile_drops_missing_and_moves_indices(self):
        selection = SelectionSet()
        selection.select("a", 0)
        selection.select("b", 1)
        selection.reconcile({"b": 0, "c": 1})
        self.assertFalse(selection.is_selected("a"))
        self.assertEqual(selection.index_of("b"), 0)

    def test_clear(self):
        selection = SelectionSet()
        selection.select(1, 0)
        selection.select(2, 1)
        selection.clear()
        self.assertEqual(selection.ids(), [])


if __name__ == "__main__":
    unittest.main()
