"""Icelandic tax figures: capital income tax and interest rebate (vaxtabætur)."""

from collections.abc import Sequence

# Fjármagnstekjuskattur on rental income
CAPITAL_INCOME_TAX_RATE = 0.11

# Vaxtabætur parameters (approximate 2024 values, kr./ár)
# household type -> (income threshold, maximum rebate)
_REBATE_BASE: dict[str, tuple[float, float]] = {
    "single": (5_500_000, 500_000),
    "couple": (8_000_000, 600_000),
    "singleParent": (8_000_000, 600_000),
}
REBATE_INTEREST_SHARE = 0.30        # rebate = 30% of interest paid
REBATE_INCOME_REDUCTION = 0.04      # minus 4% of income above threshold
REBATE_THRESHOLD_PER_CHILD = 500_000
REBATE_MAX_PER_CHILD = 50_000


def estimate_interest_rebate(
    annual_interest_paid: float,
    annual_income: float,
    household_type: str = "single",
    num_children: int = 0,
) -> int:
    """Estimate annual vaxtabætur (kr.).

    Rebate = min(30% × interest, cap), reduced by 4% of income above the
    household threshold. Both cap and threshold rise per child. Rough
    approximation; actual rules also test net wealth.
    """
    if household_type not in _REBATE_BASE:
        raise ValueError(
            f"Unknown household type {household_type!r} (expected one of {', '.join(_REBATE_BASE)})"
        )
    threshold, max_rebate = _REBATE_BASE[household_type]
    threshold += num_children * REBATE_THRESHOLD_PER_CHILD
    max_rebate += num_children * REBATE_MAX_PER_CHILD

    rebate = min(annual_interest_paid * REBATE_INTEREST_SHARE, max_rebate)
    if annual_income > threshold:
        reduction = (annual_income - threshold) * REBATE_INCOME_REDUCTION
        rebate = max(0, rebate - reduction)
    return round(rebate)


def annual_interest_by_year(schedule: Sequence) -> list[float]:
    """Sum schedule interest per loan year (12-period blocks), the basis for vaxtabætur.

    schedule: ScheduleEntry records from calculate_schedule
    """
    totals: list[float] = []
    for i, entry in enumerate(schedule):
        if i % 12 == 0:
            totals.append(0.0)
        totals[-1] += entry.interest
    return totals
