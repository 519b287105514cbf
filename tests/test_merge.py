import unittest

import numpy as np
import pandas as pd

from roster.data import drop_blank_rows, is_blank, normalize_blank, sort_by_name
from roster.merge import composite_key, fill_blank_by_key, first_by_key


class TestBlanks(unittest.TestCase):
    def test_absent_values_collapse_to_one_blank(self):
        for value in (None, "", np.nan, pd.NA, float("nan")):
            self.assertTrue(is_blank(value), value)
            self.assertEqual(normalize_blank(value), "")

    def test_other_values_pass_through(self):
        for value in (0, 0.0, " ", "n/a", False, "88"):
            self.assertFalse(is_blank(value), value)
            self.assertEqual(normalize_blank(value), value)

    def test_drop_blank_rows_needs_every_column_blank(self):
        df = pd.DataFrame({"a": ["", "x", ""], "b": ["", "", "y"], "c": [1, 2, 3]}, dtype=object)
        out = drop_blank_rows(df, ["a", "b"])
        self.assertEqual(out["c"].tolist(), [2, 3])


class TestSortByName(unittest.TestCase):
    def test_blank_names_sort_first(self):
        df = pd.DataFrame({"last_name": ["b", "", "A"], "first_name": ["x", "x", "x"], "id": [1, 2, 3]})
        self.assertEqual(sort_by_name(df)["id"].tolist(), [2, 3, 1])

    def test_numbers_compare_as_text(self):
        df = pd.DataFrame({"last_name": [10, 9], "first_name": ["", ""], "id": [1, 2]}, dtype=object)
        self.assertEqual(sort_by_name(df)["id"].tolist(), [1, 2])


class TestKeyedMerge(unittest.TestCase):
    def test_composite_key_joins_with_pipe(self):
        df = pd.DataFrame({"identifier": ["S1", 42], "subject": ["Math", ""]}, dtype=object)
        self.assertEqual(composite_key(df, ["identifier", "subject"]).tolist(), ["S1|Math", "42|"])

    def test_first_by_key_keeps_earliest_row(self):
        df = pd.DataFrame(
            {"identifier": ["S1", "S2", "S1"], "subject": ["Math", "Math", "Math"], "score": [1, 2, 3]}, dtype=object
        )
        out = first_by_key(df, ["identifier", "subject"])
        self.assertEqual(out["score"].tolist(), [1, 2])

    def test_fill_blank_by_key_takes_first_non_blank_per_column(self):
        df = pd.DataFrame(
            {
                "identifier": ["S1", "S2", "S1", "S1"],
                "subject": ["Math", "Math", "Math", "Math"],
                "last_name": ["", "Kim", "Lee", "Leigh"],
                "grade": [None, "", 5, 6],
            },
            dtype=object,
        )
        out = fill_blank_by_key(df, ["identifier", "subject"], ["last_name", "grade"])
        self.assertEqual(out["identifier"].tolist(), ["S1", "S2"])
        self.assertEqual(out["last_name"].tolist(), ["Lee", "Kim"])
        self.assertEqual(out["grade"].tolist(), [5, ""])


if __name__ == "__main__":
    unittest.main()
