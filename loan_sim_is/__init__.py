"""Icelandic Loan Amortization and Investment Simulation Package."""

from loan_sim_is.params import (
    AmortizationPolicy,
    InvestmentConfig,
    LoanConfiguration,
    LoanType,
    RentalIncomeConfig,
    calc_annuity_payment,
)
from loan_sim_is.strategies import (
    AmortizationStrategy,
    PeriodState,
    RecalculatingEqualPrincipal,
    FixedEqualPrincipal,
    RecalculatingIndexedAnnuity,
    FixedIndexedAnnuity,
    RecalculatingAnnuity,
    FixedAnnuity,
    select_strategy,
)
from loan_sim_is.rental import (
    RentalBreakdown,
    RentalCashflow,
    RentalProjection,
    calculate_net_rent,
    calculate_rental_breakdown,
    calculate_cashflow,
    calculate_break_even_rent,
    calculate_cap_rate,
    calculate_gross_rent_multiplier,
    project_rental_income,
)
from loan_sim_is.simulation import (
    MAX_PERIODS,
    ScheduleEntry,
    ScheduleSummary,
    ScheduleResult,
    calculate_schedule,
    validate_loan_config,
)
from loan_sim_is.investment import (
    InvestmentMetrics,
    YearlyPoint,
    calculate_investment_metrics,
    calculate_yearly_breakdown,
)
from loan_sim_is.scenarios import (
    NON_INDEXED_REFERENCE_RATE,
    build_comparison,
    calculate_savings,
    compare_scenarios,
)
from loan_sim_is.tax import (
    CAPITAL_INCOME_TAX_RATE,
    annual_interest_by_year,
    estimate_interest_rebate,
)
from loan_sim_is.config import (
    ConfigError,
    load_loan_config,
    loan_config_from_dict,
    loan_config_to_dict,
    dump_scenario,
    load_scenario,
)

__all__ = [
    "AmortizationPolicy",
    "InvestmentConfig",
    "LoanConfiguration",
    "LoanType",
    "RentalIncomeConfig",
    "calc_annuity_payment",
    "AmortizationStrategy",
    "PeriodState",
    "RecalculatingEqualPrincipal",
    "FixedEqualPrincipal",
    "RecalculatingIndexedAnnuity",
    "FixedIndexedAnnuity",
    "RecalculatingAnnuity",
    "FixedAnnuity",
    "select_strategy",
    "RentalBreakdown",
    "RentalCashflow",
    "RentalProjection",
    "calculate_net_rent",
    "calculate_rental_breakdown",
    "calculate_cashflow",
    "calculate_break_even_rent",
    "calculate_cap_rate",
    "calculate_gross_rent_multiplier",
    "project_rental_income",
    "MAX_PERIODS",
    "ScheduleEntry",
    "ScheduleSummary",
    "ScheduleResult",
    "calculate_schedule",
    "validate_loan_config",
    "InvestmentMetrics",
    "YearlyPoint",
    "calculate_investment_metrics",
    "calculate_yearly_breakdown",
    "NON_INDEXED_REFERENCE_RATE",
    "build_comparison",
    "calculate_savings",
    "compare_scenarios",
    "CAPITAL_INCOME_TAX_RATE",
    "annual_interest_by_year",
    "estimate_interest_rebate",
    "ConfigError",
    "load_loan_config",
    "loan_config_from_dict",
    "loan_config_to_dict",
    "dump_scenario",
    "load_scenario",
]
