"""Tests for calculate_schedule() and validate_loan_config()."""

import logging
from dataclasses import replace
from datetime import date

import pytest
from loan_sim_is import (
    MAX_PERIODS,
    LoanConfiguration,
    LoanType,
    RentalIncomeConfig,
    calc_annuity_payment,
    calculate_schedule,
    validate_loan_config,
)

START = date(2025, 1, 15)


def _loan(**kwargs) -> LoanConfiguration:
    defaults = dict(
        loan_amount=10_000_000,
        annual_interest_rate=0.08,
        loan_term_years=20,
        loan_type=LoanType.NON_INDEXED_ANNUITY,
        start_date=START,
    )
    defaults.update(kwargs)
    return LoanConfiguration(**defaults)


def _no_rate_equal_principal(**kwargs) -> LoanConfiguration:
    """18M over 10 years at 0% → 150,000 required every month."""
    return _loan(
        loan_amount=18_000_000,
        annual_interest_rate=0.0,
        loan_term_years=10,
        loan_type=LoanType.EQUAL_PRINCIPAL,
        **kwargs,
    )


class TestInvalidInput:
    @pytest.mark.parametrize("amount", [0, -1, -10_000_000])
    def test_non_positive_amount(self, amount):
        assert calculate_schedule(_loan(loan_amount=amount)) is None

    def test_zero_term(self):
        assert calculate_schedule(_loan(loan_term_years=0)) is None


class TestValidateLoanConfig:
    def test_valid(self):
        assert validate_loan_config(_loan()) == []

    def test_non_positive_amount(self):
        errors = validate_loan_config(_loan(loan_amount=0))
        assert len(errors) == 1
        assert "Loan amount" in errors[0]

    def test_multiple_errors(self):
        errors = validate_loan_config(_loan(loan_term_years=0, annual_interest_rate=-0.01))
        assert any("term" in e for e in errors)
        assert any("Interest rate" in e for e in errors)

    def test_negative_extra(self):
        errors = validate_loan_config(_loan(extra_payment=-1))
        assert any("extra payments" in e for e in errors)

    def test_rental_rates(self):
        rental = RentalIncomeConfig(gross_rent=200_000, vacancy_rate=1.5)
        errors = validate_loan_config(_loan(rental_income=rental))
        assert any("Vacancy rate" in e for e in errors)


class TestNonIndexedAnnuity:
    def setup_method(self):
        self.r = calculate_schedule(_loan())

    def test_first_interest(self):
        """10M at 8% → 10,000,000 × 0.08 / 12"""
        assert round(self.r.schedule[0].interest, 2) == 66_666.67

    def test_length(self):
        assert len(self.r.schedule) == 240
        assert self.r.summary.term_months == 240
        assert self.r.summary.term_years == 20

    def test_principal_sums_to_loan(self):
        assert sum(e.principal for e in self.r.schedule) == pytest.approx(10_000_000, abs=1)

    def test_paid_off(self):
        assert self.r.schedule[-1].balance == 0

    def test_level_payment(self):
        base = calc_annuity_payment(10_000_000, 0.08 / 12, 240)
        for e in self.r.schedule:
            assert e.required_payment == pytest.approx(base)

    def test_no_inflation(self):
        assert self.r.summary.total_inflation == 0
        assert all(e.inflation_amount == 0 for e in self.r.schedule)

    def test_months_are_ordered(self):
        assert [e.month for e in self.r.schedule] == list(range(1, 241))


class TestEqualPrincipal:
    def test_constant_principal(self):
        """12M over 10 years → 100,000 principal every period."""
        r = calculate_schedule(
            _loan(loan_amount=12_000_000, loan_term_years=10, loan_type=LoanType.EQUAL_PRINCIPAL)
        )
        assert len(r.schedule) == 120
        for e in r.schedule:
            assert e.principal == pytest.approx(100_000)
        assert r.schedule[-1].balance == 0

    def test_constant_principal_legacy(self):
        r = calculate_schedule(
            _loan(
                loan_amount=12_000_000, loan_term_years=10,
                loan_type=LoanType.EQUAL_PRINCIPAL, accelerated_payoff=True,
            )
        )
        assert len(r.schedule) == 120
        for e in r.schedule:
            assert e.principal == pytest.approx(100_000)

    def test_declining_payment(self):
        r = calculate_schedule(
            _loan(loan_amount=12_000_000, loan_term_years=10, loan_type=LoanType.EQUAL_PRINCIPAL)
        )
        payments = [e.required_payment for e in r.schedule]
        assert payments == sorted(payments, reverse=True)

    def test_inflation_ignored(self):
        r = calculate_schedule(
            _loan(
                loan_amount=12_000_000, loan_term_years=10,
                loan_type=LoanType.EQUAL_PRINCIPAL, annual_inflation_rate=0.08,
            )
        )
        assert r.summary.total_inflation == 0
        assert r.schedule[0].principal == pytest.approx(100_000)


class TestIndexedAnnuity:
    def setup_method(self):
        self.config = _loan(
            loan_amount=30_000_000,
            annual_interest_rate=0.04,
            annual_inflation_rate=0.05,
            loan_term_years=40,
            loan_type=LoanType.INDEXED_ANNUITY,
        )
        self.r = calculate_schedule(self.config)

    def test_balance_indexed_before_interest(self):
        for e in self.r.schedule:
            assert e.balance_after_inflation >= e.balance_start
            assert e.interest == pytest.approx(e.balance_after_inflation * 0.04 / 12)

    def test_balance_start_is_before_indexation(self):
        first, second = self.r.schedule[0], self.r.schedule[1]
        assert first.balance_start == 30_000_000
        assert first.balance_after_inflation == pytest.approx(30_000_000 + first.inflation_amount)
        assert second.balance_start == first.balance

    def test_first_period_inflation(self):
        monthly = 1.05 ** (1 / 12) - 1
        assert self.r.schedule[0].inflation_amount == pytest.approx(30_000_000 * monthly)

    def test_full_term(self):
        assert self.r.summary.term_months == 480
        assert self.r.schedule[-1].balance == 0

    def test_principal_covers_loan_and_indexation(self):
        total = sum(e.principal for e in self.r.schedule)
        assert total == pytest.approx(30_000_000 + self.r.summary.total_inflation, abs=1)

    def test_payment_grows_with_inflation(self):
        assert self.r.schedule[120].required_payment > self.r.schedule[0].required_payment

    def test_legacy_escalates_base_payment(self):
        legacy = calculate_schedule(
            replace(self.config, accelerated_payoff=True)
        )
        base = calc_annuity_payment(30_000_000, 0.04 / 12, 480)
        assert legacy.schedule[0].required_payment == pytest.approx(base)
        assert legacy.schedule[12].required_payment == pytest.approx(base * 1.05)

    def test_legacy_runs_past_term(self):
        """Escalated payments trail the indexed balance slightly, so the loan runs a few months over."""
        legacy = calculate_schedule(
            replace(self.config, accelerated_payoff=True)
        )
        assert 480 < legacy.summary.term_months < MAX_PERIODS
        assert legacy.schedule[-1].balance == 0

    def test_indexed_extra_payment(self):
        r = calculate_schedule(
            replace(self.config, extra_payment=10_000, index_extra_payment=True)
        )
        assert r.schedule[0].manual_extra == pytest.approx(10_000)
        assert r.schedule[12].manual_extra == pytest.approx(10_500)

    def test_flat_extra_payment(self):
        r = calculate_schedule(replace(self.config, extra_payment=10_000))
        assert r.schedule[12].manual_extra == 10_000


class TestExtraPayments:
    def test_recalculating_lowers_next_payment(self):
        r = calculate_schedule(_loan(extra_payment=50_000))
        assert r.schedule[1].required_payment < r.schedule[0].required_payment

    def test_legacy_shortens_term(self):
        standard = calculate_schedule(_loan(accelerated_payoff=True))
        extra = calculate_schedule(_loan(accelerated_payoff=True, extra_payment=20_000))
        assert standard.summary.term_months == 240
        assert extra.summary.term_months < 240
        assert extra.summary.total_interest < standard.summary.total_interest
        assert extra.schedule[-1].balance == 0

    def test_legacy_keeps_payment(self):
        r = calculate_schedule(_loan(accelerated_payoff=True, extra_payment=20_000))
        assert r.schedule[100].required_payment == pytest.approx(r.schedule[0].required_payment)

    def test_total_payment(self):
        r = calculate_schedule(_loan(extra_payment=20_000))
        e = r.schedule[0]
        assert e.total_payment_to_loan == pytest.approx(e.required_payment + 20_000)
        assert e.user_out_of_pocket == pytest.approx(e.required_payment + 20_000)


class TestFixedPayment:
    def test_override_replaces_extra(self):
        r = calculate_schedule(_loan(fixed_payment=120_000, extra_payment=5_000))
        e = r.schedule[0]
        assert e.manual_extra == 0
        assert e.total_payment_to_loan == pytest.approx(120_000)
        assert e.principal == pytest.approx(120_000 - 10_000_000 * 0.08 / 12)

    def test_below_required_ignored(self):
        r = calculate_schedule(_loan(fixed_payment=50_000, extra_payment=5_000))
        e = r.schedule[0]
        assert e.manual_extra == 5_000
        assert e.total_payment_to_loan == pytest.approx(e.required_payment + 5_000)

    def test_runs_full_term_after_repayment(self):
        """1M at 5% over 10 years repaid in month 3; the ledger still covers all 120 months."""
        r = calculate_schedule(
            _loan(
                loan_amount=1_000_000, annual_interest_rate=0.05, loan_term_years=10,
                fixed_payment=500_000, monthly_fee=130,
            )
        )
        assert r.summary.term_months == 120
        assert r.summary.total_fees == pytest.approx(130 * 120)
        assert r.schedule[2].balance == 0
        for e in r.schedule[3:]:
            assert e.balance_start == 0
            assert e.principal == 0
            assert e.interest == 0
            assert e.balance == 0


class TestRentalBlending:
    def test_rent_covers_payment(self):
        """Net rent 200k vs required 150k → 150k covers, 50k extra to principal."""
        rental = RentalIncomeConfig(
            gross_rent=200_000, tax_rate=0, vacancy_rate=0, apply_to_loan=True
        )
        e = calculate_schedule(_no_rate_equal_principal(rental_income=rental)).schedule[0]
        assert e.required_payment == pytest.approx(150_000)
        assert e.rental_contribution == pytest.approx(150_000)
        assert e.rent_based_extra == pytest.approx(50_000)
        assert e.user_out_of_pocket == 0
        assert e.principal == pytest.approx(200_000)

    def test_rent_covers_user_pays_extra_only(self):
        rental = RentalIncomeConfig(
            gross_rent=200_000, tax_rate=0, vacancy_rate=0, apply_to_loan=True
        )
        r = calculate_schedule(_no_rate_equal_principal(rental_income=rental, extra_payment=20_000))
        e = r.schedule[0]
        assert e.user_out_of_pocket == pytest.approx(e.manual_extra)
        assert e.total_payment_to_loan == pytest.approx(220_000)

    def test_partial_coverage(self):
        rental = RentalIncomeConfig(
            gross_rent=100_000, tax_rate=0, vacancy_rate=0, apply_to_loan=True
        )
        e = calculate_schedule(
            _no_rate_equal_principal(rental_income=rental, extra_payment=10_000)
        ).schedule[0]
        assert e.rental_contribution == pytest.approx(100_000)
        assert e.rent_based_extra == 0
        assert e.user_out_of_pocket == pytest.approx(60_000)
        assert e.total_payment_to_loan == pytest.approx(160_000)

    def test_rental_duration(self):
        rental = RentalIncomeConfig(
            gross_rent=100_000, tax_rate=0, vacancy_rate=0,
            apply_to_loan=True, rental_duration_months=3,
        )
        r = calculate_schedule(_no_rate_equal_principal(rental_income=rental))
        assert [e.rental_contribution for e in r.schedule[:4]] == pytest.approx(
            [100_000, 100_000, 100_000, 0]
        )
        assert r.schedule[3].user_out_of_pocket == pytest.approx(150_000)
        assert r.summary.total_rental_contribution == pytest.approx(300_000)

    def test_not_applied_to_loan(self):
        rental = RentalIncomeConfig(gross_rent=200_000, tax_rate=0, vacancy_rate=0)
        r = calculate_schedule(_no_rate_equal_principal(rental_income=rental))
        assert r.summary.total_rental_contribution == 0
        assert r.schedule[0].user_out_of_pocket == pytest.approx(150_000)

    def test_surplus_rent_repays_before_term(self):
        """200k/month against 18M clears the loan after 90 of the 120 months."""
        rental = RentalIncomeConfig(
            gross_rent=200_000, tax_rate=0, vacancy_rate=0, apply_to_loan=True
        )
        r = calculate_schedule(_no_rate_equal_principal(rental_income=rental))
        assert r.summary.term_months == 120
        assert r.schedule[88].balance > 0
        assert r.schedule[89].balance == 0
        assert all(e.balance == 0 and e.principal == 0 for e in r.schedule[90:])
        assert sum(e.principal for e in r.schedule) == pytest.approx(18_000_000)
        assert r.summary.total_paid_by_user == pytest.approx(0)

    def test_indexed_rent_follows_loan_inflation(self):
        rental = RentalIncomeConfig(
            gross_rent=100_000, tax_rate=0, vacancy_rate=0, apply_to_loan=True
        )
        r = calculate_schedule(
            _loan(
                loan_amount=30_000_000, annual_interest_rate=0.04, annual_inflation_rate=0.05,
                loan_term_years=40, loan_type=LoanType.INDEXED_ANNUITY, rental_income=rental,
            )
        )
        assert r.schedule[12].rental_contribution == pytest.approx(105_000)


class TestFeesAndSummary:
    def setup_method(self):
        self.r = calculate_schedule(_loan(loan_term_years=10, monthly_fee=130))

    def test_total_fees(self):
        assert self.r.summary.total_fees == pytest.approx(130 * 120)

    def test_fee_in_entry_totals(self):
        e = self.r.schedule[0]
        assert e.fee == 130
        assert e.total_payment_to_loan == pytest.approx(e.required_payment + 130)
        assert e.user_out_of_pocket == pytest.approx(e.required_payment + 130)

    def test_fee_in_summary_totals(self):
        s = self.r.summary
        assert s.total_paid_to_loan == pytest.approx(sum(e.total_payment_to_loan for e in self.r.schedule))
        assert s.total_paid_by_user == pytest.approx(s.total_paid_to_loan)

    def test_first_last_average(self):
        s = self.r.summary
        assert s.first_payment == self.r.schedule[0].total_payment_to_loan
        assert s.first_user_payment == self.r.schedule[0].user_out_of_pocket
        assert s.last_payment == self.r.schedule[-1].total_payment_to_loan
        assert s.average_monthly_payment == pytest.approx(s.total_paid_to_loan / 120)

    def test_total_interest(self):
        assert self.r.summary.total_interest == pytest.approx(sum(e.interest for e in self.r.schedule))

    def test_original_loan(self):
        assert self.r.summary.original_loan == 10_000_000
        assert self.r.summary.loan_type is LoanType.NON_INDEXED_ANNUITY

    def test_rent_covered_user_pays_fee(self):
        rental = RentalIncomeConfig(
            gross_rent=200_000, tax_rate=0, vacancy_rate=0, apply_to_loan=True
        )
        e = calculate_schedule(
            _no_rate_equal_principal(rental_income=rental, monthly_fee=500)
        ).schedule[0]
        assert e.user_out_of_pocket == pytest.approx(e.manual_extra + 500)


class TestPaymentDates:
    def test_first_payment_next_month(self):
        r = calculate_schedule(_loan())
        assert r.schedule[0].date == date(2025, 2, 1)

    def test_year_rollover(self):
        r = calculate_schedule(_loan())
        assert r.schedule[10].date == date(2025, 12, 1)
        assert r.schedule[11].date == date(2026, 1, 1)

    def test_last_payment(self):
        r = calculate_schedule(_loan())
        assert r.schedule[-1].date == date(2045, 1, 1)


class TestSafetyCap:
    def test_long_term_truncated(self, caplog):
        with caplog.at_level(logging.WARNING, logger="loan_sim_is.simulation"):
            r = calculate_schedule(_loan(loan_term_years=60, annual_interest_rate=0.05))
        assert len(r.schedule) == MAX_PERIODS
        assert r.schedule[-1].balance > 0
        assert "truncated" in caplog.text

    def test_legacy_truncated(self):
        r = calculate_schedule(_loan(loan_term_years=60, accelerated_payoff=True))
        assert r.summary.term_months == MAX_PERIODS

    def test_full_schedule_not_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="loan_sim_is.simulation"):
            calculate_schedule(_loan())
        assert caplog.text == ""


class TestScheduleInvariants:
    @pytest.mark.parametrize("loan_type", list(LoanType))
    @pytest.mark.parametrize("accelerated", [False, True])
    @pytest.mark.parametrize(
        "extras",
        [
            {},
            {"extra_payment": 40_000, "index_extra_payment": True},
            {"fixed_payment": 250_000},
            {
                "monthly_fee": 130,
                "rental_income": RentalIncomeConfig(
                    gross_rent=180_000, operating_costs=20_000,
                    apply_to_loan=True, rental_duration_months=60,
                ),
            },
        ],
    )
    def test_invariants(self, loan_type, accelerated, extras):
        r = calculate_schedule(
            _loan(
                loan_amount=25_000_000,
                annual_interest_rate=0.055,
                annual_inflation_rate=0.06,
                loan_term_years=25,
                loan_type=loan_type,
                accelerated_payoff=accelerated,
                **extras,
            )
        )
        assert 0 < len(r.schedule) <= MAX_PERIODS
        for e in r.schedule:
            assert e.balance >= 0
            assert e.principal >= 0
            expected = max(
                0, min(e.total_payment_to_loan - e.fee - e.interest, e.balance_after_inflation)
            )
            assert e.principal == pytest.approx(expected)
            assert e.balance_after_inflation >= e.balance_start
