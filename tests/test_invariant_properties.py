"""Property-based tests for calculator invariants.

These tests use hypothesis to generate random deduction inputs and
time entries and verify that the invariants hold for all of them.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

from hypothesis import given, settings, strategies as st

from payroll_recon.calculators.aggregation import hours_stats, summarize_hours, weekly_summary
from payroll_recon.calculators.deductions import (
    compute_net_payable,
    quantize_deduction,
    round_to_cents,
)
from payroll_recon.calculators.types import (
    Contractor1099Compensation,
    CustomDeduction,
    DeductionInput,
    HoursEntry,
    W2Compensation,
)

money = st.decimals(min_value=Decimal("0"), max_value=Decimal("100000"), places=2)
signed_money = st.decimals(min_value=Decimal("-100000"), max_value=Decimal("100000"), places=2)
hours = st.decimals(min_value=Decimal("0"), max_value=Decimal("24"), places=2)

compensations = st.one_of(
    st.none(),
    money.map(W2Compensation),
    money.map(Contractor1099Compensation),
)

custom_deductions = st.lists(
    st.builds(CustomDeduction, name=st.text(max_size=10), amount=money),
    max_size=3,
).map(tuple)

deduction_inputs = st.builds(
    DeductionInput,
    compensation=compensations,
    processing_tax=money,
    processing_charges=money,
    custom=custom_deductions,
)

WORKERS = [uuid4() for _ in range(3)]
START = date(2024, 1, 1)

hours_entries = st.lists(
    st.builds(
        HoursEntry,
        worker_id=st.sampled_from(WORKERS),
        work_date=st.integers(min_value=0, max_value=60).map(lambda d: START + timedelta(days=d)),
        hours_worked=hours,
    ),
    max_size=40,
)


class TestNetPayableProperties:
    """Net payable invariants."""

    @given(gross=money, deduction=deduction_inputs)
    @settings(max_examples=200)
    def test_net_is_gross_minus_deductions(self, gross, deduction):
        total = sum(deduction.deduction_amounts(), Decimal("0"))
        assert compute_net_payable(gross, deduction) == round_to_cents(gross - total)

    @given(gross=money, deduction=deduction_inputs)
    def test_never_more_than_gross(self, gross, deduction):
        assert compute_net_payable(gross, deduction) <= gross

    @given(gross=money, deduction=deduction_inputs)
    def test_only_one_compensation_amount(self, gross, deduction):
        assert deduction.amount_w2 == 0 or deduction.amount_1099 == 0

    @given(gross=money, deduction=deduction_inputs, override=signed_money)
    def test_override_ignores_everything_else(self, gross, deduction, override):
        overridden = DeductionInput(
            compensation=deduction.compensation,
            processing_tax=deduction.processing_tax,
            processing_charges=deduction.processing_charges,
            custom=deduction.custom,
            is_override=True,
            override_amount=override,
        )
        assert compute_net_payable(gross, overridden) == override

    @given(gross=money, deduction=deduction_inputs)
    def test_deterministic(self, gross, deduction):
        assert compute_net_payable(gross, deduction) == compute_net_payable(gross, deduction)

    @given(gross=money, deduction=deduction_inputs)
    def test_result_has_two_places(self, gross, deduction):
        assert compute_net_payable(gross, deduction).as_tuple().exponent == -2

    @given(deduction=deduction_inputs)
    def test_quantized_input_is_stable(self, deduction):
        """Rounding stored amounts again changes nothing."""
        quantized = quantize_deduction(deduction)
        assert quantize_deduction(quantized) == quantized


class TestHoursProperties:
    """Aggregation invariants."""

    @given(entries=hours_entries)
    def test_total_is_sum(self, entries):
        summary = summarize_hours(entries)
        assert summary.total_hours == sum((e.hours_worked for e in entries), Decimal("0"))
        assert summary.entry_count == len(entries)

    @given(entries=hours_entries)
    def test_average_bounded_by_range(self, entries):
        summary = summarize_hours(entries)
        if not entries:
            assert summary.average_hours == 0
        else:
            assert Decimal("0") <= summary.average_hours <= Decimal("24")

    @given(entries=hours_entries)
    def test_weekday_hours_sum_to_total(self, entries):
        stats = hours_stats(entries)
        assert sum(stats.hours_by_day.values(), Decimal("0")) == stats.total_hours
        assert stats.unique_workers <= len(WORKERS)

    @given(entries=hours_entries, offset=st.integers(min_value=0, max_value=60))
    def test_weekly_summary_covers_week_only(self, entries, offset):
        week_start = START + timedelta(days=offset)
        weeks = weekly_summary(entries, week_start)
        in_week = [e for e in entries if week_start <= e.work_date <= week_start + timedelta(days=6)]

        assert sum((w.total_hours for w in weeks), Decimal("0")) == sum(
            (e.hours_worked for e in in_week), Decimal("0")
        )
        assert sum(len(w.entries) for w in weeks) == len(in_week)
