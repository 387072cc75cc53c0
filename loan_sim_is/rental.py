"""Rental income model: net rent after tax, vacancy and operating costs."""

import math
from dataclasses import dataclass

from loan_sim_is.params import RentalIncomeConfig
from loan_sim_is.tax import CAPITAL_INCOME_TAX_RATE


@dataclass
class RentalBreakdown:
    """One month of rental income split into its deductions."""

    gross_rent: float
    tax: float
    vacancy_loss: float
    operating_costs: float
    net_rent: float

    @property
    def total_deductions(self) -> float:
        return self.tax + self.vacancy_loss + self.operating_costs

    @property
    def annual_net(self) -> float:
        return self.net_rent * 12


@dataclass
class RentalCashflow:
    net_rent: float
    loan_payment: float
    apply_to_loan: bool
    rent_covers_loan: bool
    surplus_towards_principal: float
    user_out_of_pocket: float
    monthly_benefit: float

    @property
    def annual_benefit(self) -> float:
        return self.monthly_benefit * 12


@dataclass
class RentalProjection:
    year: int
    monthly_gross: float
    monthly_net: float

    @property
    def annual_gross(self) -> float:
        return self.monthly_gross * 12

    @property
    def annual_net(self) -> float:
        return self.monthly_net * 12


def calculate_rental_breakdown(
    rental: RentalIncomeConfig, inflation_factor: float = 1.0
) -> RentalBreakdown:
    """Split one month of rent at the given cumulative inflation factor.

    Tax and vacancy are charged on the (possibly indexed) gross rent. The net
    figure is floored at zero; a loss-making rental never adds to payments.
    """
    gross = rental.gross_rent * inflation_factor if rental.indexed else rental.gross_rent
    costs = rental.operating_costs * inflation_factor if rental.index_costs else rental.operating_costs
    tax = gross * rental.tax_rate
    vacancy = gross * rental.vacancy_rate
    net = max(0.0, gross - tax - vacancy - costs)
    return RentalBreakdown(
        gross_rent=gross,
        tax=tax,
        vacancy_loss=vacancy,
        operating_costs=costs,
        net_rent=net,
    )


def calculate_net_rent(rental: RentalIncomeConfig, inflation_factor: float = 1.0) -> float:
    """Net monthly rental income (kr./mán) at the given cumulative inflation factor."""
    return calculate_rental_breakdown(rental, inflation_factor).net_rent


def calculate_cashflow(net_rent: float, loan_payment: float, apply_to_loan: bool) -> RentalCashflow:
    """Compare net rent with a loan payment.

    When rent is applied to the loan, any surplus goes to principal and the
    user pays only the shortfall. Otherwise rent and loan are separate flows.
    """
    covers = net_rent >= loan_payment
    if apply_to_loan:
        surplus = net_rent - loan_payment if covers else 0.0
        out_of_pocket = 0.0 if covers else loan_payment - net_rent
    else:
        surplus = 0.0
        out_of_pocket = loan_payment
    return RentalCashflow(
        net_rent=net_rent,
        loan_payment=loan_payment,
        apply_to_loan=apply_to_loan,
        rent_covers_loan=covers,
        surplus_towards_principal=surplus,
        user_out_of_pocket=out_of_pocket,
        monthly_benefit=net_rent - loan_payment,
    )


def calculate_break_even_rent(
    loan_payment: float,
    tax_rate: float = CAPITAL_INCOME_TAX_RATE,
    vacancy_rate: float = 0.05,
    operating_costs: float = 0.0,
) -> float:
    """Gross rent at which net rent exactly meets the loan payment.

    net = gross * (1 - tax - vacancy) - costs  →  gross = (payment + costs) / (1 - tax - vacancy)
    """
    effective_rate = 1 - tax_rate - vacancy_rate
    if effective_rate <= 0:
        return math.inf
    return (loan_payment + operating_costs) / effective_rate


def calculate_cap_rate(annual_noi: float, property_value: float) -> float:
    """Capitalization rate as a decimal."""
    if property_value <= 0:
        return 0.0
    return annual_noi / property_value


def calculate_gross_rent_multiplier(property_price: float, annual_gross_rent: float) -> float:
    if annual_gross_rent <= 0:
        return math.inf
    return property_price / annual_gross_rent


def project_rental_income(
    rental: RentalIncomeConfig,
    years: int,
    annual_rent_increase: float = 0.03,
    annual_cost_increase: float = 0.02,
) -> list[RentalProjection]:
    """Project monthly gross/net rent for years 1..years.

    Rent and operating costs escalate at their own annual rates, independent
    of the loan's inflation index. Year 1 uses today's figures.
    """
    projections = []
    for year in range(1, years + 1):
        rent_factor = (1 + annual_rent_increase) ** (year - 1)
        cost_factor = (1 + annual_cost_increase) ** (year - 1)
        year_rental = RentalIncomeConfig(
            gross_rent=rental.gross_rent * rent_factor,
            tax_rate=rental.tax_rate,
            vacancy_rate=rental.vacancy_rate,
            operating_costs=rental.operating_costs * cost_factor,
            indexed=False,
            index_costs=False,
        )
        breakdown = calculate_rental_breakdown(year_rental)
        projections.append(
            RentalProjection(
                year=year,
                monthly_gross=breakdown.gross_rent,
                monthly_net=breakdown.net_rent,
            )
        )
    return projections
