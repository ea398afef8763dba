from pydantic import BaseModel, ConfigDict, Field


class FundingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    projected_capital: float = Field(..., description="Projected capital in today's money.")
    target_annual_income_today: float = Field(..., ge=0)
    real_discount_rate: float = Field(..., gt=-1, le=1)
    periods_in_retirement: float = Field(..., ge=0, le=100)
