"""TOML config loader with override > config > default resolution, and JSON scenario files."""

import json
import logging
import tomllib
from datetime import date
from pathlib import Path

from loan_sim_is.params import LoanConfiguration, LoanType, RentalIncomeConfig
from loan_sim_is.tax import CAPITAL_INCOME_TAX_RATE

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("loan.toml")


class ConfigError(ValueError):
    """Raised for unreadable or inconsistent configuration files."""


DEFAULTS = {
    "loan_amount": 40_000_000.0,
    "annual_interest_rate": 0.045,
    "annual_inflation_rate": 0.035,
    "loan_term_years": 40,
    "monthly_fee": 130.0,
    "loan_type": LoanType.INDEXED_ANNUITY.value,
    "extra_payment": 0.0,
    "index_extra_payment": False,
    "fixed_payment": 0.0,
    "start_date": "",
    "accelerated_payoff": False,
}

RENTAL_DEFAULTS = {
    "gross_rent": 0.0,
    "tax_rate": CAPITAL_INCOME_TAX_RATE,
    "vacancy_rate": 0.05,
    "operating_costs": 0.0,
    "indexed": True,
    "index_costs": True,
    "apply_to_loan": False,
    "rental_duration_months": None,
}

# Persisted scenario key (camelCase) -> LoanConfiguration field
_SCENARIO_KEYS = {
    "loanAmount": "loan_amount",
    "annualInterestRate": "annual_interest_rate",
    "annualInflationRate": "annual_inflation_rate",
    "loanTermYears": "loan_term_years",
    "monthlyFee": "monthly_fee",
    "loanType": "loan_type",
    "extraPayment": "extra_payment",
    "indexExtraPayment": "index_extra_payment",
    "fixedPayment": "fixed_payment",
    "startDate": "start_date",
    "acceleratedPayoff": "accelerated_payoff",
}
_RENTAL_KEYS = {
    "grossRent": "gross_rent",
    "taxRate": "tax_rate",
    "vacancyRate": "vacancy_rate",
    "operatingCosts": "operating_costs",
    "indexed": "indexed",
    "indexCosts": "index_costs",
    "applyToLoan": "apply_to_loan",
    "rentalDurationMonths": "rental_duration_months",
}


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        logger.error("Failed to read config file %s: %s", path, e)
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    # Flatten [loan] table; [rental] stays nested
    if isinstance(raw.get("loan"), dict):
        loan = raw.pop("loan")
        for key, value in loan.items():
            raw.setdefault(key, value)
    # Normalize rental_* keys → [rental] table
    rental = dict(raw.get("rental") or {})
    for key in list(raw):
        if key.startswith("rental_") and key != "rental_duration_months":
            rental.setdefault(key.removeprefix("rental_"), raw.pop(key))
    if "rental_duration_months" in raw:
        rental.setdefault("rental_duration_months", raw.pop("rental_duration_months"))
    if rental:
        raw["rental"] = rental
    return raw


def resolve(overrides: dict, config: dict) -> dict:
    """Resolve values with priority: explicit override > config file > hardcoded default.

    None in ``overrides`` means "not given".
    """
    resolved = {}
    for key, default in DEFAULTS.items():
        value = overrides.get(key)
        resolved[key] = value if value is not None else config.get(key, default)
    rental_overrides = overrides.get("rental") or {}
    rental_config = config.get("rental")
    if rental_config or rental_overrides:
        rental = {}
        for key, default in RENTAL_DEFAULTS.items():
            value = rental_overrides.get(key)
            rental[key] = value if value is not None else (rental_config or {}).get(key, default)
        resolved["rental"] = rental
    return resolved


def parse_loan_type(value: str | LoanType) -> LoanType:
    """Accept a LoanType, its persisted value ("indexedAnnuity") or its name ("INDEXED_ANNUITY")."""
    if isinstance(value, LoanType):
        return value
    try:
        return LoanType(value)
    except ValueError:
        pass
    try:
        return LoanType[str(value).upper()]
    except KeyError:
        choices = ", ".join(t.value for t in LoanType)
        raise ConfigError(f"Unknown loan type {value!r} (expected one of {choices})") from None


def parse_start_date(value: str | date | None) -> date:
    """Parse YYYY-MM or YYYY-MM-DD. Empty means today."""
    if isinstance(value, date):
        return value
    if not value:
        return date.today()
    parts = str(value).strip()[:10].split("-")
    try:
        year, month = int(parts[0]), int(parts[1])
        day = int(parts[2]) if len(parts) > 2 else 1
        return date(year, month, day)
    except (IndexError, ValueError) as e:
        raise ConfigError(f"Invalid start date {value!r} (expected YYYY-MM or YYYY-MM-DD)") from e


def build_rental_config(r: dict) -> RentalIncomeConfig:
    duration = r.get("rental_duration_months")
    return RentalIncomeConfig(
        gross_rent=float(r["gross_rent"]),
        tax_rate=float(r["tax_rate"]),
        vacancy_rate=float(r["vacancy_rate"]),
        operating_costs=float(r["operating_costs"]),
        indexed=bool(r["indexed"]),
        index_costs=bool(r["index_costs"]),
        apply_to_loan=bool(r["apply_to_loan"]),
        rental_duration_months=int(duration) if duration is not None else None,
    )


def build_loan_config(r: dict) -> LoanConfiguration:
    """Build LoanConfiguration from resolved config dict."""
    rental = None
    if r.get("rental"):
        rental = build_rental_config(r["rental"])
    return LoanConfiguration(
        loan_amount=float(r["loan_amount"]),
        annual_interest_rate=float(r["annual_interest_rate"]),
        annual_inflation_rate=float(r["annual_inflation_rate"]),
        loan_term_years=float(r["loan_term_years"]),
        monthly_fee=float(r["monthly_fee"]),
        loan_type=parse_loan_type(r["loan_type"]),
        extra_payment=float(r["extra_payment"]),
        index_extra_payment=bool(r["index_extra_payment"]),
        fixed_payment=float(r["fixed_payment"]),
        rental_income=rental,
        start_date=parse_start_date(r["start_date"]),
        accelerated_payoff=bool(r["accelerated_payoff"]),
    )


def load_loan_config(path: Path | None = None, **overrides) -> LoanConfiguration:
    """Load a TOML file and resolve it into a LoanConfiguration."""
    return build_loan_config(resolve(overrides, load_config(path)))


def loan_config_to_dict(config: LoanConfiguration) -> dict:
    """Serialize to the persisted scenario layout (camelCase, JSON-safe values)."""
    data = {}
    for key, attr in _SCENARIO_KEYS.items():
        value = getattr(config, attr)
        if isinstance(value, LoanType):
            value = value.value
        elif isinstance(value, date):
            value = value.isoformat()
        data[key] = value
    rental = config.rental_income
    data["rentalIncome"] = (
        None if rental is None
        else {key: getattr(rental, attr) for key, attr in _RENTAL_KEYS.items()}
    )
    return data


def loan_config_from_dict(data: dict) -> LoanConfiguration:
    """Rebuild a configuration from a persisted scenario. Unknown keys are ignored."""
    r = {field_name: DEFAULTS[field_name] for field_name in _SCENARIO_KEYS.values()}
    for key, attr in _SCENARIO_KEYS.items():
        if data.get(key) is not None:
            r[attr] = data[key]
    rental = data.get("rentalIncome")
    if rental:
        r["rental"] = dict(RENTAL_DEFAULTS)
        for key, attr in _RENTAL_KEYS.items():
            if key in rental:
                r["rental"][attr] = rental[key]
    try:
        return build_loan_config(r)
    except ConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid scenario: {e}") from e


def dump_scenario(config: LoanConfiguration, path: Path, name: str | None = None) -> None:
    """Write a named scenario as JSON."""
    payload = {"name": name or path.stem, "config": loan_config_to_dict(config)}
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def load_scenario(path: Path) -> tuple[str, LoanConfiguration]:
    """Read a scenario written by dump_scenario. Returns (name, config)."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.error("Failed to read scenario %s: %s", path, e)
        raise ConfigError(f"Invalid scenario file {path}: {e}") from e
    config = payload.get("config", payload)
    return payload.get("name", path.stem), loan_config_from_dict(config)
