"""Investment returns derived from a generated loan schedule."""

import math
from dataclasses import dataclass, field

from loan_sim_is.params import InvestmentConfig
from loan_sim_is.rental import calculate_net_rent
from loan_sim_is.simulation import ScheduleEntry


@dataclass
class YearlyPoint:
    year: int
    property_value: float
    loan_balance: float
    equity: float


@dataclass
class InvestmentMetrics:
    """Equity and return figures at the end of the holding period.

    Percent fields (cash_on_cash_return, total_roi, annualized_roi) are whole
    percents, 12.5 = 12.5 %.
    """

    total_invested: float
    future_property_value: float
    loan_balance_at_sale: float
    selling_costs: float
    equity_at_sale: float
    total_profit: float
    cash_on_cash_return: float
    total_roi: float
    annualized_roi: float
    total_cash_invested: float
    total_cash_from_rent: float
    breakdown_by_year: list[YearlyPoint] = field(default_factory=list)


def _balance_after_month(schedule: list[ScheduleEntry], months: int) -> float:
    """Outstanding balance after ``months`` payments.

    Past the end of the schedule the final balance holds: 0 for a repaid
    loan, the amount still owed for one cut off at MAX_PERIODS.
    """
    if not schedule:
        return 0.0
    if months <= 0:
        return schedule[0].balance_start
    if months >= len(schedule):
        return schedule[-1].balance
    return schedule[months - 1].balance


def calculate_yearly_breakdown(
    schedule: list[ScheduleEntry], property_price: float, appreciation_rate: float
) -> list[YearlyPoint]:
    """Property value, loan balance and equity at each year boundary.

    Year 0 is the purchase date (opening balance); year boundaries past the
    end of the schedule carry its final balance.
    """
    max_years = math.ceil(len(schedule) / 12)
    points = []
    for year in range(max_years + 1):
        property_value = property_price * (1 + appreciation_rate) ** year
        balance = _balance_after_month(schedule, year * 12)
        points.append(
            YearlyPoint(
                year=year,
                property_value=property_value,
                loan_balance=balance,
                equity=property_value - balance,
            )
        )
    return points


def calculate_investment_metrics(config: InvestmentConfig) -> InvestmentMetrics | None:
    """Evaluate equity at sale, profit and ROI for a purchase financed by ``config.schedule``.

    Returns None when no schedule was generated.
    """
    schedule = config.schedule
    if schedule is None:
        return None

    total_invested = config.down_payment + config.loan_fee
    future_value = config.property_price * (1 + config.appreciation_rate) ** config.holding_years
    selling_costs = future_value * config.selling_cost_rate

    months_held = int(round(config.holding_years * 12))
    balance_at_sale = _balance_after_month(schedule, months_held)

    equity_at_sale = future_value - balance_at_sale - selling_costs
    total_profit = equity_at_sale - total_invested

    held = schedule[:max(0, months_held)]
    total_cash_invested = total_invested + sum(e.user_out_of_pocket for e in held)
    total_cash_from_rent = sum(e.rental_contribution + e.rent_based_extra for e in held)

    # Cash-on-cash (first year): year-one net rent against what the owner paid in
    first_year_paid = sum(e.user_out_of_pocket for e in schedule[:12])
    first_year_rent = 0.0
    if config.rental_income is not None:
        first_year_rent = calculate_net_rent(config.rental_income) * 12
    if total_invested > 0:
        cash_on_cash = (first_year_rent - first_year_paid) / total_invested * 100
        total_roi = total_profit / total_invested * 100
    else:
        cash_on_cash = 0.0
        total_roi = 0.0

    growth = 1 + total_roi / 100
    if config.holding_years <= 0:
        annualized_roi = 0.0
    elif growth <= 0:
        annualized_roi = -100.0
    else:
        annualized_roi = (growth ** (1 / config.holding_years) - 1) * 100

    return InvestmentMetrics(
        total_invested=total_invested,
        future_property_value=future_value,
        loan_balance_at_sale=balance_at_sale,
        selling_costs=selling_costs,
        equity_at_sale=equity_at_sale,
        total_profit=total_profit,
        cash_on_cash_return=cash_on_cash,
        total_roi=total_roi,
        annualized_roi=annualized_roi,
        total_cash_invested=total_cash_invested,
        total_cash_from_rent=total_cash_from_rent,
        breakdown_by_year=calculate_yearly_breakdown(
            schedule, config.property_price, config.appreciation_rate
        ),
    )
