"""Scenario definitions and multi-scenario execution."""

import dataclasses
import logging

from loan_sim_is.params import LoanConfiguration, LoanType
from loan_sim_is.simulation import ScheduleResult, calculate_schedule

logger = logging.getLogger(__name__)

# Typical óverðtryggt rate used as the comparison baseline for indexed loans
NON_INDEXED_REFERENCE_RATE = 0.08

BASE_SCENARIO = "base"


def compare_scenarios(
    base: LoanConfiguration,
    scenarios: dict[str, dict] | None = None,
) -> dict[str, ScheduleResult | None]:
    """Run the base configuration plus each named set of field overrides.

    scenarios: scenario name -> {LoanConfiguration field: value}
    """
    results = {BASE_SCENARIO: calculate_schedule(base)}
    for name, modifications in (scenarios or {}).items():
        config = dataclasses.replace(base, **modifications)
        results[name] = calculate_schedule(config)
        logger.debug("Scenario %s: %s", name, modifications)
    return results


def build_comparison(config: LoanConfiguration) -> dict[str, ScheduleResult | None]:
    """Standard vs. accelerated vs. non-indexed schedules for one configuration.

    standard: same loan with no extra/fixed payment and no rental income
    accelerated: the configuration as given
    non_indexed: non-indexed annuity, at the user's rate when the loan is
        already non-indexed, otherwise at NON_INDEXED_REFERENCE_RATE
    """
    standard = dataclasses.replace(
        config,
        extra_payment=0.0,
        index_extra_payment=False,
        fixed_payment=0.0,
        rental_income=None,
    )
    non_indexed_rate = (
        NON_INDEXED_REFERENCE_RATE if config.is_indexed else config.annual_interest_rate
    )
    non_indexed = dataclasses.replace(
        standard,
        loan_type=LoanType.NON_INDEXED_ANNUITY,
        annual_interest_rate=non_indexed_rate,
        annual_inflation_rate=0.0,
    )
    return {
        "standard": calculate_schedule(standard),
        "accelerated": calculate_schedule(config),
        "non_indexed": calculate_schedule(non_indexed),
    }


def calculate_savings(
    standard: ScheduleResult,
    accelerated: ScheduleResult,
    rent_applied: bool = False,
) -> tuple[int, float]:
    """Return (months_saved, money_saved) of the accelerated plan over the standard one.

    When rent is applied to the loan the owner's own outlay is what shrinks,
    so money is compared on total_paid_by_user instead of total_paid_to_loan.
    """
    months_saved = standard.summary.term_months - accelerated.summary.term_months
    if rent_applied:
        money_saved = standard.summary.total_paid_by_user - accelerated.summary.total_paid_by_user
    else:
        money_saved = standard.summary.total_paid_to_loan - accelerated.summary.total_paid_to_loan
    return months_saved, money_saved
