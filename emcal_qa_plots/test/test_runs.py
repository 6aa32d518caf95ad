import unittest

from emcal_qa_plots.errors import BadConfig, DuplicateRun, UnknownRun
from emcal_qa_plots.runs import RunMeta, RunRegistry


class TestRunRegistry(unittest.TestCase):

    def test_insertion_order(self):
        registry = RunRegistry([("22979", "magenta", 5), ("21813", "blue", 7), ("21615", "black", 8)])
        self.assertEqual(registry.runs(), ("22979", "21813", "21615"))
        self.assertEqual(list(registry), ["22979", "21813", "21615"])
        self.assertEqual(len(registry), 3)

    def test_meta(self):
        registry = RunRegistry([("21813", "blue", 7)])
        self.assertEqual(registry.meta("21813"), RunMeta("blue", 7))
        self.assertEqual(registry.meta(21813).seb_count, 7)
        self.assertIn("21813", registry)

    def test_dict_entries_and_int_runs(self):
        registry = RunRegistry([{"run": 21813, "color": "#0000ff", "seb_count": 7}])
        self.assertEqual(registry.runs(), ("21813",))

    def test_shared_colors_allowed(self):
        registry = RunRegistry([("A", "red", 1), ("B", "red", 2)])
        self.assertEqual(registry.meta("A").color, registry.meta("B").color)

    def test_unknown_run(self):
        registry = RunRegistry([("21813", "blue", 7)])
        with self.assertRaises(UnknownRun):
            registry.meta("99999")

    def test_duplicate_run(self):
        with self.assertRaises(DuplicateRun):
            RunRegistry([("21813", "blue", 7), ("21813", "red", 8)])

    def test_bad_seb_count(self):
        for seb_count in [0, -3, 2.5, "7", True]:
            with self.assertRaises(BadConfig):
                RunRegistry([("21813", "blue", seb_count)])

    def test_bad_color(self):
        with self.assertRaises(BadConfig):
            RunRegistry([("21813", "kBlue", 7)])

    def test_bad_entry(self):
        with self.assertRaises(BadConfig):
            RunRegistry([("21813", "blue")])
        with self.assertRaises(BadConfig):
            RunRegistry([{"run": "21813", "color": "blue"}])

    def test_empty(self):
        with self.assertRaises(BadConfig):
            RunRegistry([])
