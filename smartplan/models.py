from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ProductType(str, Enum):
    RA = "RA"
    PENSION = "Pension/Provident"
    PRESERVATION = "Preservation"
    DISCRETIONARY = "Discretionary"


class CapitalSource(BaseModel):
    """One capital stream fed into the accumulation simulator.

    Rates are annual decimals. The engine clamps out-of-range values
    instead of rejecting them, so no bounds are declared here.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str = "Savings"
    starting_balance: float = 0.0
    monthly_contribution: float = 0.0
    contribution_escalation: float = 0.0
    growth_rate: float = 0.0
    fee_rate: float = 0.0
    employer_match: float = 0.0


class UserSource(CapitalSource):
    kind: Literal["user"] = "user"
    product_type: Optional[ProductType] = None
    provider: str = ""


class DerivedSource(CapitalSource):
    kind: Literal["derived"] = "derived"
    derivation: str
    product_type: Optional[ProductType] = None


class AccumulationResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: Optional[str] = None
    final_value: float
    yearly_series: List[float] = Field(default_factory=list)
    total_contributions: float = 0.0


class DrawdownPoint(BaseModel):
    model_config = ConfigDict(extra="forbid")

    month_index: int
    age: float
    balance: float
    withdrawal: float
    income_need: float


class DrawdownResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    monthly_series: List[DrawdownPoint] = Field(default_factory=list)
    opening_balance: float
    ending_balance: float
    # ending balance discounted at CPI from today to the end age
    ending_balance_today: float
    exhaustion_point: Optional[int] = None
    exhaustion_age: Optional[float] = None
    total_withdrawn: float = 0.0

    @computed_field
    @property
    def survived(self) -> bool:
        return self.exhaustion_point is None


class FundingTier(str, Enum):
    FUNDED = "funded"
    PARTIAL = "partial"
    UNDERFUNDED = "underfunded"


class FundingAssessment(BaseModel):
    model_config = ConfigDict(extra="forbid")

    required_capital: float
    projected_capital: float
    funded_ratio: float
    shortfall: float
    tier: FundingTier


class GoalSolution(BaseModel):
    model_config = ConfigDict(extra="forbid")

    value: float
    feasible: bool = True
    iterations: int = 0
    expansions: int = 0
    message: Optional[str] = None
