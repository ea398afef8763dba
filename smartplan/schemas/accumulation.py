"""Data contracts for accumulation calculations."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from smartplan.core.accumulation import AccumulationStrategy
from smartplan.models import CapitalSource, DerivedSource, ProductType, UserSource


class SourceInput(BaseModel):
    """One capital source as submitted by a client."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["user", "derived"] = "user"
    label: str = "Savings"
    product_type: Optional[ProductType] = None
    derivation: Optional[str] = None
    starting_balance: float = Field(0.0, ge=0, description="Balance held today.")
    monthly_contribution: float = Field(0.0, ge=0, description="First year's monthly contribution.")
    contribution_escalation: float = Field(
        0.0,
        gt=-1,
        le=1,
        description="Yearly step-up of the contribution as a decimal (e.g. 0.06 for 6%).",
    )
    growth_rate: float = Field(
        ..., gt=-1, le=1, description="Annual nominal return as a decimal."
    )
    fee_rate: float = Field(0.0, ge=0, le=1, description="Annual fees as a decimal.")
    employer_match: float = Field(0.0, ge=0, description="Employer match as a share of the contribution.")

    def to_source(self) -> CapitalSource:
        values = self.model_dump(exclude={"kind", "derivation"})
        if self.kind == "derived":
            return DerivedSource(derivation=self.derivation or "client", **values)
        return UserSource(**values)


class AccumulationRequest(BaseModel):
    """Inputs required to project one or more sources."""

    model_config = ConfigDict(extra="forbid")

    sources: List[SourceInput] = Field(..., min_length=1)
    horizon_years: float = Field(..., ge=0, le=100, description="Years to project.")
    inflation_rate: float = Field(0.0, gt=-1, le=1, description="Used for the today's-money totals.")
    strategy: AccumulationStrategy = AccumulationStrategy.CLOSED_FORM


class ContributionGoalRequest(BaseModel):
    """Solve the monthly contribution that grows a source to a target."""

    model_config = ConfigDict(extra="forbid")

    source: SourceInput
    horizon_years: float = Field(..., ge=0, le=100)
    target_value: float = Field(..., ge=0)
