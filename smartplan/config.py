"""Engine policy constants, calculator defaults and app settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

# Rates at or below -100% are meaningless; clamp instead of failing.
RATE_FLOOR = -0.99

# Rate differences smaller than this are treated as equal.
RATE_EPSILON = 1e-8

# Compounding factors saturate to [1 / cap, cap] so extreme rates over long
# horizons stay finite.
GROWTH_FACTOR_CAP = 1e150

DISPLAY_PRECISION = 2


@dataclass(frozen=True)
class FundingThresholds:
    """Product policy for the funding health tiers."""

    fully_funded: float = 1.0
    partially_funded: float = 0.7


@dataclass(frozen=True)
class SolverSettings:
    upper_bound: float = 1_000_000.0
    expansion_factor: float = 1.5
    max_expansions: int = 28
    iterations: int = 48
    precision: int = DISPLAY_PRECISION


@dataclass(frozen=True)
class RetirementDefaults:
    retire_age: int = 65
    life_expectancy: int = 90
    salary_growth: float = 0.065
    contribution_escalation: float = 0.065
    inflation: float = 0.055
    pre_retirement_return: float = 0.09
    post_retirement_return: float = 0.065
    target_replacement_ratio: float = 0.75
    target_monthly_income_today: float = 35_000.0
    employer_fund_fee: float = 0.01


@dataclass(frozen=True)
class InvestmentDefaults:
    nominal_return: float = 0.08
    inflation: float = 0.055
    contribution_escalation: float = 0.10
    years: float = 1.0


DEFAULT_FUNDING_THRESHOLDS = FundingThresholds()
DEFAULT_SOLVER_SETTINGS = SolverSettings()
RETIREMENT_DEFAULTS = RetirementDefaults()
INVESTMENT_DEFAULTS = InvestmentDefaults()


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AppSettings(BaseModel):
    """Settings for the HTTP adapter."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )
    log_level: LogLevel = "INFO"

    @classmethod
    def from_env(cls) -> "AppSettings":
        values = {}
        origins = os.environ.get("SMARTPLAN_CORS_ORIGINS")
        if origins:
            values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
        level = os.environ.get("SMARTPLAN_LOG_LEVEL")
        if level:
            values["log_level"] = level.upper()
        return cls(**values)
