"""Amortization strategies: one class per loan type and payment policy."""

from dataclasses import dataclass
from typing import ClassVar

from loan_sim_is.params import AmortizationPolicy, LoanType, calc_annuity_payment


@dataclass(frozen=True)
class PeriodState:
    """Loan state at the point a period's required payment is decided."""

    month: int
    remaining_months: int
    balance_after_inflation: float
    interest: float
    # Product of (1 + monthly inflation) over all previous periods
    cumulative_inflation_factor: float = 1.0


@dataclass(frozen=True)
class AmortizationStrategy:
    """Base class for required-payment rules"""

    loan_amount: float
    monthly_rate: float
    total_months: int

    LOAN_TYPE: ClassVar[LoanType]
    POLICY: ClassVar[AmortizationPolicy]

    @property
    def runs_until_paid(self) -> bool:
        """Legacy strategies keep paying until the balance is cleared, not until the term ends."""
        return self.POLICY is AmortizationPolicy.FIXED_LEGACY

    @property
    def base_payment(self) -> float:
        """Annuity on the original loan over the full term."""
        return calc_annuity_payment(self.loan_amount, self.monthly_rate, self.total_months)

    def required_payment(self, period: PeriodState) -> float:
        raise NotImplementedError


class RecalculatingEqualPrincipal(AmortizationStrategy):
    """Remaining balance spread evenly over the remaining months, plus interest.

    Extra payments shrink later principal slices, keeping the term fixed.
    """

    LOAN_TYPE = LoanType.EQUAL_PRINCIPAL
    POLICY = AmortizationPolicy.RECALCULATING

    def required_payment(self, period: PeriodState) -> float:
        slice_ = period.balance_after_inflation / max(1, period.remaining_months)
        return slice_ + period.interest


class FixedEqualPrincipal(AmortizationStrategy):
    """Original principal slice plus interest; extra payments shorten the term."""

    LOAN_TYPE = LoanType.EQUAL_PRINCIPAL
    POLICY = AmortizationPolicy.FIXED_LEGACY

    def required_payment(self, period: PeriodState) -> float:
        return self.loan_amount / max(1, self.total_months) + period.interest


class RecalculatingIndexedAnnuity(AmortizationStrategy):
    """Annuity on the real (deflated) balance over the remaining term, re-inflated.

    The balance is expressed in origination-date krónur, re-amortized, and the
    resulting real payment is scaled back up by the cumulative inflation factor.
    """

    LOAN_TYPE = LoanType.INDEXED_ANNUITY
    POLICY = AmortizationPolicy.RECALCULATING

    def required_payment(self, period: PeriodState) -> float:
        factor = period.cumulative_inflation_factor
        real_balance = period.balance_after_inflation / factor
        real_payment = calc_annuity_payment(real_balance, self.monthly_rate, period.remaining_months)
        return real_payment * factor


class FixedIndexedAnnuity(AmortizationStrategy):
    """Original annuity escalated by the cumulative inflation factor only."""

    LOAN_TYPE = LoanType.INDEXED_ANNUITY
    POLICY = AmortizationPolicy.FIXED_LEGACY

    def required_payment(self, period: PeriodState) -> float:
        return self.base_payment * period.cumulative_inflation_factor


class RecalculatingAnnuity(AmortizationStrategy):
    """Annuity on the current balance over the remaining months."""

    LOAN_TYPE = LoanType.NON_INDEXED_ANNUITY
    POLICY = AmortizationPolicy.RECALCULATING

    def required_payment(self, period: PeriodState) -> float:
        return calc_annuity_payment(
            period.balance_after_inflation, self.monthly_rate, period.remaining_months
        )


class FixedAnnuity(AmortizationStrategy):
    """Level payment fixed at origination."""

    LOAN_TYPE = LoanType.NON_INDEXED_ANNUITY
    POLICY = AmortizationPolicy.FIXED_LEGACY

    def required_payment(self, period: PeriodState) -> float:
        return self.base_payment


STRATEGIES: dict[tuple[LoanType, AmortizationPolicy], type[AmortizationStrategy]] = {
    (cls.LOAN_TYPE, cls.POLICY): cls
    for cls in (
        RecalculatingEqualPrincipal,
        FixedEqualPrincipal,
        RecalculatingIndexedAnnuity,
        FixedIndexedAnnuity,
        RecalculatingAnnuity,
        FixedAnnuity,
    )
}


def select_strategy(
    loan_type: LoanType,
    policy: AmortizationPolicy,
    loan_amount: float,
    monthly_rate: float,
    total_months: int,
) -> AmortizationStrategy:
    """Return the strategy instance for a loan type and policy pair."""
    try:
        cls = STRATEGIES[(loan_type, policy)]
    except KeyError:
        raise ValueError(f"No amortization strategy for {loan_type!r} / {policy!r}") from None
    return cls(loan_amount=loan_amount, monthly_rate=monthly_rate, total_months=total_months)
