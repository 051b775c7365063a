"""Tests for KPI and chart series aggregation."""

import math
import unittest

from load_data import Record, to_number
from metrics import (
    compute_class_series,
    compute_kpis,
    compute_overall_pct,
    compute_subject_series,
    compute_total_candidates,
    count_subjects,
    list_subjects,
    overall_rows,
)


def rec(subject, class_name, total=0, pct1_6=0, pct1_8=0):
    return Record(subject=subject, class_name=class_name, total=total,
                  pct1_6=pct1_6, pct1_8=pct1_8)


def year_records():
    """Two subjects with class rows and Overall rows of different sizes."""
    return [
        rec("MATHS", "10A", 30, 80, 95),
        rec("MATHS", "10B", 30, 60, 85),
        rec("MATHS", "Overall", 60, 70, 90),
        rec("ENGLISH", "10A", 20, 40, 70),
        rec("ENGLISH", "overall", 20, 40, 70),
    ]


class TestTotalCandidates(unittest.TestCase):

    def test_same_cohort_across_subjects(self):
        records = [rec(s, "Overall", 60) for s in ("MATHS", "ENGLISH", "SCIENCE")]
        self.assertEqual(compute_total_candidates(records), 60)

    def test_distinct_totals_take_max(self):
        records = [rec("MATHS", "Overall", 60), rec("ENGLISH", "Overall", 65)]
        self.assertEqual(compute_total_candidates(records), 65)

    def test_zero_totals_are_ignored(self):
        records = [rec("MATHS", "Overall", 0), rec("ENGLISH", "Overall", 58)]
        self.assertEqual(compute_total_candidates(records), 58)

    def test_no_overall_rows_sums_all_records(self):
        records = [rec("MATHS", "10A", 30), rec("MATHS", "10B", 28)]
        self.assertEqual(compute_total_candidates(records), 58)

    def test_no_positive_totals(self):
        records = [rec("MATHS", "Overall", 0), rec("MATHS", "10A", 30)]
        self.assertEqual(compute_total_candidates(records), 0)

    def test_empty(self):
        self.assertEqual(compute_total_candidates([]), 0)


class TestOverallPct(unittest.TestCase):

    def test_weighted_by_total(self):
        # (70 * 60 + 40 * 20) / 80
        self.assertAlmostEqual(compute_overall_pct(year_records(), "pct1_6"), 62.5)
        self.assertAlmostEqual(compute_overall_pct(year_records(), "pct1_8"), 85.0)

    def test_simple_mean(self):
        self.assertAlmostEqual(
            compute_overall_pct(year_records(), "pct1_6", policy="simple"), 55.0)

    def test_zero_weights_fall_back_to_mean(self):
        records = [rec("MATHS", "Overall", 0, 50), rec("ENGLISH", "Overall", 0, 70)]
        self.assertAlmostEqual(compute_overall_pct(records, "pct1_6"), 60.0)

    def test_class_rows_used_without_overall_rows(self):
        records = [rec("MATHS", "10A", 10, 50), rec("MATHS", "10B", 30, 90)]
        self.assertAlmostEqual(compute_overall_pct(records, "pct1_6"), 80.0)

    def test_empty_is_zero(self):
        self.assertEqual(compute_overall_pct([], "pct1_6"), 0.0)

    def test_huge_totals_stay_finite(self):
        records = [
            rec("MATHS", "Overall", to_number("1e308"), 50),
            rec("ENGLISH", "Overall", to_number("1e308"), 60),
        ]
        self.assertAlmostEqual(compute_overall_pct(records, "pct1_6"), 55.0)
        kpis = compute_kpis(records)
        self.assertEqual(kpis[0].display, "55.0%")
        for kpi in kpis:
            self.assertTrue(math.isfinite(kpi.value))

    def test_huge_percentages_stay_finite(self):
        records = [rec("MATHS", "Overall", 10, 1e308), rec("ENGLISH", "Overall", 30, 1e308)]
        for policy in ("weighted", "simple"):
            with self.subTest(policy=policy):
                result = compute_overall_pct(records, "pct1_6", policy=policy)
                self.assertTrue(math.isfinite(result))
                self.assertAlmostEqual(result / 1e308, 1.0)

    def test_unknown_metric_or_policy(self):
        with self.assertRaises(ValueError):
            compute_overall_pct(year_records(), "pct1_9")
        with self.assertRaises(ValueError):
            compute_overall_pct(year_records(), "pct1_6", policy="median")


class TestKPIs(unittest.TestCase):

    def test_order_and_values(self):
        kpis = compute_kpis(year_records())
        self.assertEqual([k.label for k in kpis],
                         ["Overall % 1–6", "Overall % 1–8", "Total Candidates", "No. of Subjects"])
        self.assertEqual([k.display for k in kpis], ["62.5%", "85.0%", "60", "2"])

    def test_empty_records(self):
        kpis = compute_kpis([])
        self.assertEqual(len(kpis), 4)
        for kpi in kpis:
            self.assertTrue(math.isfinite(kpi.value))
        self.assertEqual([k.display for k in kpis], ["0.0%", "0.0%", "0", "0"])

    def test_idempotent_and_pure(self):
        records = year_records()
        snapshot = list(records)
        self.assertEqual(compute_kpis(records), compute_kpis(records))
        self.assertEqual(records, snapshot)

    def test_subject_count(self):
        records = year_records() + [rec("ART", "9A", 12)]
        self.assertEqual(count_subjects(records), 2)
        self.assertEqual(count_subjects([rec("ART", "9A"), rec("ART", "9B"), rec("PE", "9A")]), 2)
        self.assertEqual(count_subjects([]), 0)


class TestSeries(unittest.TestCase):

    def test_overall_rows_case_insensitive(self):
        self.assertEqual([r.subject for r in overall_rows(year_records())], ["MATHS", "ENGLISH"])

    def test_class_series(self):
        labels, values = compute_class_series(year_records(), "MATHS", "pct1_6")
        self.assertEqual(labels, ["10A", "10B"])
        self.assertEqual(values, [80, 60])

        labels, values = compute_class_series(year_records(), "MATHS", "pct1_8")
        self.assertEqual(values, [95, 85])

    def test_class_series_unknown_subject(self):
        self.assertEqual(compute_class_series(year_records(), "LATIN", "pct1_6"), ([], []))

    def test_subject_series_prefers_overall(self):
        labels, values = compute_subject_series(year_records(), "pct1_6")
        self.assertEqual(labels, ["MATHS", "ENGLISH"])
        self.assertEqual(values, [70, 40])

    def test_subject_series_first_class_fallback(self):
        records = year_records() + [
            rec("ART", "9A", 12, 30, 60),
            rec("ART", "9B", 14, 50, 80),
        ]
        labels, values = compute_subject_series(records, "pct1_8")
        self.assertEqual(labels, ["MATHS", "ENGLISH", "ART"])
        self.assertEqual(values, [90, 70, 60])

    def test_subject_series_overall_after_class_rows(self):
        records = [rec("MATHS", "10A", 30, 80), rec("MATHS", "Overall", 60, 70)]
        self.assertEqual(compute_subject_series(records, "pct1_6"), (["MATHS"], [70]))

    def test_unknown_metric(self):
        with self.assertRaises(ValueError):
            compute_class_series(year_records(), "MATHS", "total")
        with self.assertRaises(ValueError):
            compute_subject_series([], "pct")

    def test_list_subjects_first_seen(self):
        records = [rec("B", "1"), rec("A", "1"), rec("B", "2")]
        self.assertEqual(list_subjects(records), ["B", "A"])


if __name__ == "__main__":
    unittest.main()
