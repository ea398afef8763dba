"""Data contracts for drawdown and capital-goal calculations."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DrawdownAssumptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    current_age: float = Field(..., ge=0, le=120)
    retire_age: float = Field(..., ge=0, le=120)
    end_age: float = Field(..., ge=0, le=130)
    post_retirement_rate: float = Field(..., gt=-1, le=1)
    cpi_rate: float = Field(..., gt=-1, le=1)
    monthly_income_today: float = Field(..., ge=0, description="Income need in today's money.")
    once_off_capital_need: float = Field(0.0, ge=0)

    @model_validator(mode="after")
    def ensure_age_order(self) -> "DrawdownAssumptions":
        if self.retire_age < self.current_age:
            raise ValueError("retire_age must not be before current_age")
        if self.end_age < self.retire_age:
            raise ValueError("end_age must not be before retire_age")
        return self


class DrawdownRequest(DrawdownAssumptions):
    start_capital: float = Field(..., ge=0, description="Capital available at retirement.")


class CapitalGoalRequest(DrawdownAssumptions):
    """Solve the capital needed at retirement for the income to last."""
