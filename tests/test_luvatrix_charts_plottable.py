from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
import unittest

import numpy as np

from luvatrix_charts import PlottableValue, value
from luvatrix_charts.plottable import format_temporal, infer_type


class PlottableValueTests(unittest.TestCase):
    def test_type_inference(self) -> None:
        self.assertEqual(infer_type(3), "quantitative")
        self.assertEqual(infer_type(2.5), "quantitative")
        self.assertEqual(infer_type(np.int64(4)), "quantitative")
        self.assertEqual(infer_type(Decimal("1.5")), "quantitative")
        self.assertEqual(infer_type("Jan"), "nominal")
        self.assertEqual(infer_type(True), "nominal")
        self.assertEqual(infer_type(date(2024, 1, 1)), "temporal")
        self.assertEqual(infer_type(np.datetime64("2024-01-01")), "temporal")

    def test_value_builds_labelled_datum(self) -> None:
        pv = value("Sales", 10)
        self.assertIsInstance(pv, PlottableValue)
        self.assertEqual(pv.label, "Sales")
        self.assertEqual(pv.raw_value, 10)
        self.assertEqual(pv.numeric_value, 10.0)
        self.assertTrue(pv.is_continuous)

    def test_nominal_values_have_no_numeric_position(self) -> None:
        pv = value("Month", "Feb")
        self.assertEqual(pv.numeric_value, 0.0)
        self.assertFalse(pv.is_continuous)
        self.assertEqual(pv.display_value, "Feb")

    def test_temporal_values_are_utc_seconds(self) -> None:
        expected = datetime(2024, 1, 1, tzinfo=timezone.utc).timestamp()
        self.assertEqual(value("t", date(2024, 1, 1)).numeric_value, expected)
        self.assertEqual(value("t", datetime(2024, 1, 1)).numeric_value, expected)
        self.assertEqual(value("t", np.datetime64("2024-01-01")).numeric_value, expected)

    def test_temporal_display(self) -> None:
        self.assertEqual(value("t", date(2024, 3, 5)).display_value, "2024-03-05")
        self.assertEqual(format_temporal(datetime(2024, 3, 5, 6, 30, tzinfo=timezone.utc).timestamp()), "2024-03-05 06:30")

    def test_values_are_immutable(self) -> None:
        pv = value("x", 1)
        with self.assertRaises(Exception):
            pv.raw_value = 2  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
