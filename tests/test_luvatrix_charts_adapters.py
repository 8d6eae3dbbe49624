from __future__ import annotations

import importlib.util
import unittest

import numpy as np

from luvatrix_charts import BarMark, Chart, ChartDataError, value
from luvatrix_charts.adapters.normalize import normalize_records


class NormalizeRecordsTests(unittest.TestCase):
    def test_sequences_and_iterables(self) -> None:
        self.assertEqual(normalize_records([1, 2]), [1, 2])
        self.assertEqual(normalize_records(x * 2 for x in range(3)), [0, 2, 4])
        self.assertEqual(normalize_records(None), [])

    def test_column_mapping(self) -> None:
        rows = normalize_records({"m": ["Jan", "Feb"], "v": np.asarray([1, 2])})
        self.assertEqual(rows, [{"m": "Jan", "v": 1}, {"m": "Feb", "v": 2}])

    def test_column_lengths_must_match(self) -> None:
        with self.assertRaises(ChartDataError):
            normalize_records({"a": [1, 2], "b": [1]})
        with self.assertRaises(ChartDataError):
            normalize_records({"a": "abc"})

    def test_numpy_arrays(self) -> None:
        self.assertEqual(normalize_records(np.asarray([1.5, 2.5])), [1.5, 2.5])
        structured = np.array([("a", 1), ("b", 2)], dtype=[("k", "U1"), ("v", "i4")])
        self.assertEqual(normalize_records(structured), [{"k": "a", "v": 1}, {"k": "b", "v": 2}])
        with self.assertRaises(ChartDataError):
            normalize_records(np.zeros((2, 2)))

    def test_rejects_scalars_and_strings(self) -> None:
        with self.assertRaises(ChartDataError):
            normalize_records("abc")
        with self.assertRaises(ChartDataError):
            normalize_records(42)

    def test_pandas_dataframe_source(self) -> None:
        if importlib.util.find_spec("pandas") is None:
            self.skipTest("pandas not installed")
        import pandas as pd

        frame = pd.DataFrame({"month": ["Jan", "Feb"], "sales": [10, 20]})
        self.assertEqual(normalize_records(frame)[1], {"month": "Feb", "sales": 20})
        self.assertEqual(normalize_records(frame["sales"]), [10, 20])

        c = Chart(frame, lambda row: BarMark(x=value("Month", row["month"]), y=value("Sales", row["sales"])))
        bars = c.render().group("bar-marks")
        assert bars is not None
        self.assertEqual(len(bars.children), 2)


if __name__ == "__main__":
    unittest.main()
