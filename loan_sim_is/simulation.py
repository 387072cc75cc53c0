"""Core amortization engine."""

import logging
from dataclasses import dataclass
from datetime import date

from loan_sim_is.params import LoanConfiguration, LoanType
from loan_sim_is.rental import calculate_net_rent
from loan_sim_is.strategies import PeriodState, select_strategy

logger = logging.getLogger(__name__)

# Safety cap: 50 years of monthly payments
MAX_PERIODS = 600
# Balances below this are treated as repaid (rounding guard, in krónur)
PAYOFF_THRESHOLD = 0.01


@dataclass
class ScheduleEntry:
    """Ledger line for one payment period.

    ``total_payment_to_loan`` and ``user_out_of_pocket`` include the flat
    monthly fee, matching the summary totals.
    """

    month: int
    date: date
    balance_start: float  # opening balance before this period's indexation
    balance_after_inflation: float
    inflation_amount: float
    interest: float
    principal: float
    fee: float
    required_payment: float
    manual_extra: float
    rent_based_extra: float
    rental_contribution: float
    total_payment_to_loan: float
    user_out_of_pocket: float
    balance: float


@dataclass
class ScheduleSummary:
    original_loan: float
    loan_type: LoanType
    term_months: int
    total_paid_by_user: float = 0.0
    total_paid_to_loan: float = 0.0
    total_interest: float = 0.0
    total_inflation: float = 0.0
    total_fees: float = 0.0
    total_rental_contribution: float = 0.0
    first_payment: float = 0.0
    first_user_payment: float = 0.0
    last_payment: float = 0.0
    average_monthly_payment: float = 0.0

    @property
    def term_years(self) -> float:
        return self.term_months / 12


@dataclass
class ScheduleResult:
    schedule: list[ScheduleEntry]
    summary: ScheduleSummary


def validate_loan_config(config: LoanConfiguration) -> list[str]:
    """Validate loan inputs. Returns list of error messages (empty when valid)."""
    errors = []
    if config.loan_amount <= 0:
        errors.append(f"Loan amount must be positive (got {config.loan_amount:,.0f} kr.)")
    if config.total_months <= 0:
        errors.append(f"Loan term must be positive (got {config.loan_term_years} years)")
    if config.annual_interest_rate < 0:
        errors.append(f"Interest rate must not be negative (got {config.annual_interest_rate:.2%})")
    if config.is_indexed and config.annual_inflation_rate <= -1:
        errors.append(f"Inflation must be above -100% (got {config.annual_inflation_rate:.2%})")
    if min(config.monthly_fee, config.extra_payment, config.fixed_payment) < 0:
        errors.append("Fees and extra payments must not be negative")
    rental = config.rental_income
    if rental is not None:
        if rental.gross_rent < 0:
            errors.append("Gross rent must not be negative")
        for label, rate in (("Rental tax rate", rental.tax_rate), ("Vacancy rate", rental.vacancy_rate)):
            if not 0 <= rate <= 1:
                errors.append(f"{label} must be within 0-100% (got {rate:.2%})")
        if rental.rental_duration_months is not None and rental.rental_duration_months < 0:
            errors.append("Rental duration must not be negative")
    return errors


def _payment_date(start: date, month: int) -> date:
    """First day of the month ``month`` months after ``start`` (month 1 = next month)."""
    offset = start.month - 1 + month
    return date(start.year + offset // 12, offset % 12 + 1, 1)


def calculate_schedule(config: LoanConfiguration) -> ScheduleResult | None:
    """Simulate the loan month by month.

    Each period indexes the balance first, accrues interest on the indexed
    balance, then applies the required payment, manual extra and any rental
    income. Returns None for a non-positive loan amount or term; the caller
    is expected to validate inputs (see ``validate_loan_config``).
    """
    if config.loan_amount <= 0 or config.total_months <= 0:
        logger.debug(
            "Skipping schedule: loan_amount=%s total_months=%s",
            config.loan_amount, config.total_months,
        )
        return None

    total_months = config.total_months
    monthly_rate = config.monthly_interest_rate
    monthly_inflation = config.monthly_inflation_rate
    strategy = select_strategy(
        config.loan_type, config.amortization_policy,
        config.loan_amount, monthly_rate, total_months,
    )
    rental = config.rental_income
    fee = config.monthly_fee

    summary = ScheduleSummary(
        original_loan=config.loan_amount,
        loan_type=config.loan_type,
        term_months=0,
    )
    schedule: list[ScheduleEntry] = []
    balance = config.loan_amount
    cumulative_factor = 1.0
    month = 0

    while month < MAX_PERIODS:
        if strategy.runs_until_paid:
            if balance <= PAYOFF_THRESHOLD:
                break
        elif month >= total_months:
            break
        month += 1
        remaining_months = max(1, total_months - month + 1)

        # Indexation happens before interest accrues
        inflation_amount = balance * monthly_inflation
        balance_after_inflation = balance + inflation_amount
        interest = balance_after_inflation * monthly_rate

        required = strategy.required_payment(
            PeriodState(
                month=month,
                remaining_months=remaining_months,
                balance_after_inflation=balance_after_inflation,
                interest=interest,
                cumulative_inflation_factor=cumulative_factor,
            )
        )

        manual_extra = 0.0
        if config.extra_payment > 0:
            manual_extra = config.extra_payment
            if config.index_extra_payment:
                manual_extra *= cumulative_factor

        payment = required
        if config.fixed_payment > 0 and config.fixed_payment > required:
            # Fixed payment replaces the required payment and manual extra
            payment = config.fixed_payment
            manual_extra = 0.0

        rental_contribution = 0.0
        rent_based_extra = 0.0
        out_of_pocket = payment + manual_extra
        if rental is not None and rental.apply_to_loan and rental.is_active(month):
            net_rent = calculate_net_rent(rental, cumulative_factor)
            if net_rent >= payment:
                rental_contribution = payment
                rent_based_extra = net_rent - payment
                out_of_pocket = manual_extra
            else:
                rental_contribution = net_rent
                out_of_pocket = payment - net_rent + manual_extra
            summary.total_rental_contribution += rental_contribution + rent_based_extra

        to_loan = payment + manual_extra + rent_based_extra
        principal = max(0.0, min(to_loan - interest, balance_after_inflation))

        balance_start = balance
        balance = balance_after_inflation - principal
        if balance < PAYOFF_THRESHOLD:
            balance = 0.0

        summary.total_inflation += inflation_amount
        summary.total_interest += interest
        summary.total_paid_by_user += out_of_pocket + fee
        summary.total_paid_to_loan += to_loan + fee
        summary.total_fees += fee

        schedule.append(
            ScheduleEntry(
                month=month,
                date=_payment_date(config.start_date, month),
                balance_start=balance_start,
                balance_after_inflation=balance_after_inflation,
                inflation_amount=inflation_amount,
                interest=interest,
                principal=principal,
                fee=fee,
                required_payment=required,
                manual_extra=manual_extra,
                rent_based_extra=rent_based_extra,
                rental_contribution=rental_contribution,
                total_payment_to_loan=to_loan + fee,
                user_out_of_pocket=out_of_pocket + fee,
                balance=balance,
            )
        )

        cumulative_factor *= 1 + monthly_inflation

    if month >= MAX_PERIODS and balance > 0:
        logger.warning(
            "Schedule truncated at %d periods with %.0f kr. outstanding (%s, %s)",
            MAX_PERIODS, balance, config.loan_type.value, config.amortization_policy.value,
        )

    summary.term_months = month
    if schedule:
        summary.first_payment = schedule[0].total_payment_to_loan
        summary.first_user_payment = schedule[0].user_out_of_pocket
        summary.last_payment = schedule[-1].total_payment_to_loan
        summary.average_monthly_payment = summary.total_paid_to_loan / month
    logger.debug(
        "Simulated %d periods: interest=%.0f inflation=%.0f paid_to_loan=%.0f",
        month, summary.total_interest, summary.total_inflation, summary.total_paid_to_loan,
    )
    return ScheduleResult(schedule=schedule, summary=summary)
