"""Tests for the net payable calculator."""

from decimal import Decimal

import pytest

from payroll_recon.calculators.deductions import (
    compensation_from_amounts,
    compute_net_payable,
    custom_lines,
    quantize_deduction,
    round_to_cents,
    total_deductions,
    validate_deduction,
)
from payroll_recon.calculators.types import (
    Contractor1099Compensation,
    CustomDeduction,
    DeductionInput,
    W2Compensation,
)
from payroll_recon.exceptions import ValidationError
from payroll_recon.services.deduction_service import build_deduction_input


class TestComputeNetPayable:
    """Test net payable calculation."""

    def test_tax_and_charges(self):
        """Gross 10,000 less 500 tax and 200 charges is 9,300."""
        deduction = DeductionInput(
            processing_tax=Decimal("500"),
            processing_charges=Decimal("200"),
        )
        assert compute_net_payable(Decimal("10000"), deduction) == Decimal("9300.00")

    def test_override_wins_over_deductions(self):
        """Override returns the override amount whatever else is set."""
        deduction = DeductionInput(
            compensation=W2Compensation(Decimal("1000")),
            processing_tax=Decimal("300"),
            processing_charges=Decimal("100"),
            custom=(CustomDeduction("Equipment", Decimal("50")),),
            is_override=True,
            override_amount=Decimal("1200"),
        )
        assert compute_net_payable(Decimal("5000"), deduction) == Decimal("1200.00")

    def test_override_is_not_clamped(self):
        """Override may exceed gross or be negative."""
        high = DeductionInput(is_override=True, override_amount=Decimal("9999"))
        low = DeductionInput(is_override=True, override_amount=Decimal("-10"))
        assert compute_net_payable(Decimal("100"), high) == Decimal("9999.00")
        assert compute_net_payable(Decimal("100"), low) == Decimal("-10.00")

    def test_compensation_and_custom_lines(self):
        """W2 compensation and custom lines reduce the net."""
        deduction = DeductionInput(
            compensation=W2Compensation(Decimal("3000")),
            processing_tax=Decimal("100"),
            custom=custom_lines(("Laptop", Decimal("50")), ("Advance", Decimal("25.50"))),
        )
        assert compute_net_payable(Decimal("8000"), deduction) == Decimal("4824.50")

    def test_1099_compensation(self):
        deduction = DeductionInput(compensation=Contractor1099Compensation(Decimal("750")))
        assert compute_net_payable(Decimal("2000"), deduction) == Decimal("1250.00")

    def test_over_deducted_invoice_goes_negative(self):
        """Deductions larger than gross produce a negative net."""
        deduction = DeductionInput(processing_charges=Decimal("250"))
        assert compute_net_payable(Decimal("100"), deduction) == Decimal("-150.00")

    def test_no_deductions_returns_gross(self):
        assert compute_net_payable(Decimal("1234.5"), DeductionInput()) == Decimal("1234.50")

    def test_idempotent(self):
        """Same input always gives the same result."""
        deduction = DeductionInput(
            processing_tax=Decimal("12.34"),
            custom=custom_lines(("Fee", Decimal("1.11"))),
        )
        first = compute_net_payable(Decimal("500"), deduction)
        second = compute_net_payable(Decimal("500"), deduction)
        assert first == second == Decimal("486.55")

    def test_override_without_amount_raises(self):
        with pytest.raises(ValidationError):
            compute_net_payable(Decimal("100"), DeductionInput(is_override=True))


class TestRounding:
    """Test half-even rounding to cents."""

    def test_half_even_rounds_to_even_cent(self):
        assert round_to_cents(Decimal("10.005")) == Decimal("10.00")
        assert round_to_cents(Decimal("10.015")) == Decimal("10.02")

    def test_already_rounded(self):
        assert round_to_cents(Decimal("7.10")) == Decimal("7.10")

    def test_quantize_deduction_rounds_every_amount(self):
        deduction = quantize_deduction(
            DeductionInput(
                compensation=W2Compensation(Decimal("10.125")),
                processing_tax=Decimal("0.005"),
                processing_charges=Decimal("1.999"),
                custom=custom_lines(("Laptop", Decimal("2.345"))),
                is_override=True,
                override_amount=Decimal("1200.005"),
            )
        )

        assert deduction.compensation == W2Compensation(Decimal("10.12"))
        assert deduction.processing_tax == Decimal("0.00")
        assert deduction.processing_charges == Decimal("2.00")
        assert deduction.custom[0] == CustomDeduction("Laptop", Decimal("2.34"))
        assert deduction.override_amount == Decimal("1200.00")
        assert compute_net_payable(Decimal("5000"), deduction) == Decimal("1200.00")

    def test_override_returned_unrounded(self):
        deduction = DeductionInput(is_override=True, override_amount=Decimal("10.005"))
        assert compute_net_payable(Decimal("0"), deduction) == Decimal("10.005")


class TestValidateDeduction:
    """Test deduction input validation."""

    def test_negative_tax_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_deduction(DeductionInput(processing_tax=Decimal("-1")))
        assert exc_info.value.field == "processing_tax"

    def test_negative_compensation_rejected(self):
        with pytest.raises(ValidationError):
            validate_deduction(DeductionInput(compensation=W2Compensation(Decimal("-5"))))

    def test_negative_custom_line_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_deduction(
                DeductionInput(custom=custom_lines(("A", Decimal("1")), ("B", Decimal("-1"))))
            )
        assert exc_info.value.field == "custom_deduction_2_amount"

    def test_more_than_three_custom_lines_rejected(self):
        lines = custom_lines(*[(f"Line {i}", Decimal("1")) for i in range(4)])
        with pytest.raises(ValidationError):
            validate_deduction(DeductionInput(custom=lines))

    def test_override_requires_amount(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_deduction(DeductionInput(is_override=True))
        assert exc_info.value.field == "override_amount"

    def test_negative_override_allowed(self):
        validate_deduction(DeductionInput(is_override=True, override_amount=Decimal("-1")))

    def test_total_deductions(self):
        deduction = DeductionInput(
            compensation=Contractor1099Compensation(Decimal("10")),
            processing_tax=Decimal("1"),
            processing_charges=Decimal("2"),
            custom=custom_lines(("x", Decimal("3"))),
        )
        assert total_deductions(deduction) == Decimal("16")


class TestCompensationVariant:
    """Test the W2/1099 tagged variant."""

    def test_w2_amount_only(self):
        deduction = DeductionInput(compensation=W2Compensation(Decimal("40")))
        assert deduction.amount_w2 == Decimal("40")
        assert deduction.amount_1099 == Decimal("0")

    def test_from_stored_amounts(self):
        assert compensation_from_amounts(Decimal("0"), Decimal("0")) is None
        assert compensation_from_amounts(Decimal("5"), None) == W2Compensation(Decimal("5"))
        assert compensation_from_amounts(None, Decimal("7")) == Contractor1099Compensation(
            Decimal("7")
        )

    def test_both_amounts_rejected(self):
        with pytest.raises(ValidationError):
            compensation_from_amounts(Decimal("5"), Decimal("7"))

    def test_build_input_from_request_fields(self):
        data = build_deduction_input(
            compensation_type="1099",
            compensation_amount=Decimal("300"),
            processing_tax=Decimal("10"),
            custom=[("Fee", Decimal("5"))],
        )
        assert data.amount_1099 == Decimal("300")
        assert data.amount_w2 == Decimal("0")
        assert data.custom == (CustomDeduction("Fee", Decimal("5")),)

    def test_build_input_unknown_type(self):
        with pytest.raises(ValidationError):
            build_deduction_input(compensation_type="C2C", compensation_amount=Decimal("1"))
