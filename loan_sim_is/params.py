"""Loan, rental and investment parameters plus the annuity payment helper."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from loan_sim_is.tax import CAPITAL_INCOME_TAX_RATE


class LoanType(Enum):
    """Amortization family of a loan. Values match persisted scenario files."""

    INDEXED_ANNUITY = "indexedAnnuity"          # verðtryggt jafngreiðslulán
    NON_INDEXED_ANNUITY = "nonIndexedAnnuity"   # óverðtryggt jafngreiðslulán
    EQUAL_PRINCIPAL = "nonIndexedEqualPrincipal"  # óverðtryggt jafnar afborganir


class AmortizationPolicy(Enum):
    """How the required payment reacts to extra payments.

    RECALCULATING re-amortizes the remaining balance over the remaining term
    every period, so extra payments lower future payments and the term stays
    fixed. FIXED_LEGACY keeps the payment derived from the original loan, so
    extra payments shorten the term instead.
    """

    RECALCULATING = "recalculating"
    FIXED_LEGACY = "fixedLegacy"


@dataclass
class RentalIncomeConfig:
    """Monthly rental income blended against the loan payment."""

    gross_rent: float
    tax_rate: float = CAPITAL_INCOME_TAX_RATE
    vacancy_rate: float = 0.05
    operating_costs: float = 0.0  # fasteignagjöld, tryggingar, viðhald, hússjóður
    indexed: bool = True         # rent follows the loan's inflation factor
    index_costs: bool = True
    apply_to_loan: bool = False
    # None = rent for the whole simulation
    rental_duration_months: int | None = None

    def is_active(self, month: int) -> bool:
        """Whether the rental still contributes in the given 1-based month."""
        if self.rental_duration_months is None:
            return True
        return month <= self.rental_duration_months


@dataclass
class LoanConfiguration:
    """Loan terms plus the borrower's payment choices."""

    loan_amount: float
    annual_interest_rate: float
    loan_term_years: float
    annual_inflation_rate: float = 0.0  # used only by indexed loans
    monthly_fee: float = 0.0            # seðilgjald
    loan_type: LoanType = LoanType.INDEXED_ANNUITY
    extra_payment: float = 0.0
    index_extra_payment: bool = False
    fixed_payment: float = 0.0
    rental_income: RentalIncomeConfig | None = None
    start_date: date = field(default_factory=date.today)
    # Legacy behavior: payments stay pinned to the original loan and extras shorten the term
    accelerated_payoff: bool = False

    @property
    def total_months(self) -> int:
        return int(round(self.loan_term_years * 12))

    @property
    def is_indexed(self) -> bool:
        return self.loan_type is LoanType.INDEXED_ANNUITY

    @property
    def amortization_policy(self) -> AmortizationPolicy:
        if self.accelerated_payoff:
            return AmortizationPolicy.FIXED_LEGACY
        return AmortizationPolicy.RECALCULATING

    @property
    def monthly_interest_rate(self) -> float:
        return self.annual_interest_rate / 12

    @property
    def monthly_inflation_rate(self) -> float:
        """Geometric monthly equivalent of the annual inflation rate (0 unless indexed)."""
        if not self.is_indexed:
            return 0.0
        return (1 + self.annual_inflation_rate) ** (1 / 12) - 1


@dataclass
class InvestmentConfig:
    """Property purchase assumptions evaluated against a generated schedule."""

    property_price: float
    down_payment_percent: float  # whole percent, 20 = 20 %
    loan_fee: float
    # list[ScheduleEntry] from calculate_schedule
    schedule: list | None
    holding_years: int
    appreciation_rate: float
    selling_cost_rate: float = 0.025
    rental_income: RentalIncomeConfig | None = None

    @property
    def down_payment(self) -> float:
        return self.property_price * self.down_payment_percent / 100


def calc_annuity_payment(principal: float, monthly_rate: float, months: int) -> float:
    """Calculate level monthly annuity payment (jafngreiðsla).

    Degenerates to straight-line division when the rate is zero; a
    non-positive principal needs no payment.
    """
    if principal <= 0:
        return 0.0
    n = max(1, months)
    if monthly_rate == 0:
        return principal / n
    r = monthly_rate
    factor = (1 + r) ** n
    return principal * r * factor / (factor - 1)
