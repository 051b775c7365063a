"""
Exam Results Aggregation

Reduces extracted records to cohort-level KPIs and chart-ready series.
All functions are pure: records are never modified and every call
recomputes from scratch.

"Overall" rows (class_name == "Overall", any case) are each subject's
subject-wide summary. Where a year has no Overall rows at all, the
class rows stand in for them.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from config import AVERAGING_POLICY, KPI_LABELS, METRICS, OVERALL_LABEL
from load_data import Number, Record

Series = Tuple[List[str], List[Number]]

POLICIES = ("weighted", "simple")


@dataclass(frozen=True)
class KPI:
    """A labelled summary value for display."""
    label: str
    value: Number
    display: str


# ==================== ROW SELECTION ====================

def is_overall(record: Record) -> bool:
    return record.class_name.strip().lower() == OVERALL_LABEL.lower()


def overall_rows(records: Iterable[Record]) -> List[Record]:
    """Records that summarise a whole subject."""
    return [r for r in records if is_overall(r)]


def summary_rows(records: Sequence[Record]) -> List[Record]:
    """Overall rows, or every record when the year has no Overall rows."""
    overall = overall_rows(records)
    return overall if overall else list(records)


def list_subjects(records: Iterable[Record]) -> List[str]:
    """Distinct subjects in first-seen order."""
    seen = {}
    for r in records:
        seen.setdefault(r.subject, None)
    return list(seen)


def check_metric(metric: str) -> str:
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric!r} (expected one of {list(METRICS)})")
    return metric


def metric_value(record: Record, metric: str) -> Number:
    return getattr(record, check_metric(metric))


# ==================== KPI CALCULATIONS ====================

def compute_total_candidates(records: Sequence[Record]) -> Number:
    """
    Cohort size for the year.

    Summing every subject's total would count a candidate once per
    subject taken, so the Overall totals are read as repeated measures of
    the same cohort:
    - one distinct positive total -> that total
    - several distinct positive totals -> the largest
    - no positive totals -> plain sum (Overall rows, else all records)
    """
    overall = overall_rows(records)
    distinct = sorted({r.total for r in overall if r.total > 0})

    if len(distinct) == 1:
        return distinct[0]
    if distinct:
        return max(distinct)

    basis = overall if overall else records
    return sum(r.total for r in basis)


def compute_overall_pct(records: Sequence[Record], metric: str,
                        policy: str = AVERAGING_POLICY) -> float:
    """
    Year-wide percentage for a metric.

    "weighted" weights each subject's Overall % by its candidate total;
    "simple" takes the plain mean. With no candidates to weight by, the
    weighted policy falls back to the plain mean.
    """
    if policy not in POLICIES:
        raise ValueError(f"Unknown averaging policy: {policy!r} (expected one of {list(POLICIES)})")
    check_metric(metric)

    rows = summary_rows(records)
    if not rows:
        return 0.0

    values = np.array([metric_value(r, metric) for r in rows], dtype=float)
    weights = np.array([r.total for r in rows], dtype=float)

    if policy == "weighted":
        result = _scaled_average(values, weights)
        if result is not None:
            return result
    return _scaled_average(values)


def _scaled_average(values: np.ndarray, weights: Optional[np.ndarray] = None) -> Optional[float]:
    """
    Mean of values (weighted when weights are given) that stays finite.

    Values and weights are divided by their largest magnitude first, so
    huge cell values cannot overflow the intermediate sums. Returns None
    when the weights sum to zero.
    """
    if weights is not None:
        w_scale = np.abs(weights).max()
        if w_scale == 0:
            return None
        weights = weights / w_scale
        if weights.sum() <= 0:
            return None

    v_scale = np.abs(values).max()
    if v_scale == 0:
        return 0.0

    result = float(np.average(values / v_scale, weights=weights) * v_scale)
    return result if np.isfinite(result) else 0.0


def count_subjects(records: Sequence[Record]) -> int:
    """Number of distinct subjects (among Overall rows where present)."""
    return len({r.subject for r in summary_rows(records)})


def compute_kpis(records: Sequence[Record], policy: str = AVERAGING_POLICY) -> List[KPI]:
    """
    The four headline KPIs, always in this order:
    Overall % 1–6, Overall % 1–8, Total Candidates, No. of Subjects.

    An empty record list gives 0.0% / 0.0% / 0 / 0.
    """
    pct1_6 = compute_overall_pct(records, "pct1_6", policy)
    pct1_8 = compute_overall_pct(records, "pct1_8", policy)
    total_candidates = compute_total_candidates(records)
    num_subjects = count_subjects(records)

    values = [pct1_6, pct1_8, total_candidates, num_subjects]
    displays = [
        f"{pct1_6:.1f}%",
        f"{pct1_8:.1f}%",
        str(total_candidates),
        str(num_subjects),
    ]
    return [KPI(label, value, display)
            for label, value, display in zip(KPI_LABELS, values, displays)]


# ==================== CHART SERIES ====================

def compute_class_series(records: Sequence[Record], subject: str, metric: str) -> Series:
    """Per-class values for one subject, Overall row excluded, sheet order."""
    check_metric(metric)
    rows = [r for r in records if r.subject == subject and not is_overall(r)]
    labels = [r.class_name for r in rows]
    values = [metric_value(r, metric) for r in rows]
    return labels, values


def compute_subject_series(records: Sequence[Record], metric: str) -> Series:
    """
    One value per subject, subjects in first-seen order.

    Uses the subject's Overall row; a subject without one takes its first
    class row's value as is (not an average of its classes).
    """
    check_metric(metric)
    overall = {}
    first_class = {}
    for r in records:
        target = overall if is_overall(r) else first_class
        target.setdefault(r.subject, r)

    labels = list_subjects(records)
    values = [
        metric_value(overall.get(subject) or first_class[subject], metric)
        for subject in labels
    ]
    return labels, values
