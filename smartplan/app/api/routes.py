"""HTTP routes for the Flask API."""

from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from pydantic import BaseModel, ValidationError
from werkzeug.exceptions import BadRequest

from smartplan.core.drawdown import simulate_drawdown
from smartplan.core.projection import assess_funding, project_sources
from smartplan.core.solver import solve_capital_for_drawdown, solve_contribution_for_target
from smartplan.domain.investment import InvestmentPlan, recompute_investment_projection
from smartplan.domain.retirement import RetirementPlan, recompute_retirement_projection
from smartplan.schemas.accumulation import AccumulationRequest, ContributionGoalRequest
from smartplan.schemas.drawdown import CapitalGoalRequest, DrawdownRequest
from smartplan.schemas.funding import FundingRequest
from smartplan.schemas.health import HealthResponse

api_bp = Blueprint("api", __name__)


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    current_app.logger.info("rejected payload on %s: %d error(s)", request.path, exc.error_count())
    errors = exc.errors(include_url=False, include_context=False)
    return jsonify({"detail": errors}), HTTPStatus.UNPROCESSABLE_ENTITY


@api_bp.errorhandler(BadRequest)
def _handle_bad_request(exc: BadRequest):
    return jsonify({"detail": exc.description}), HTTPStatus.BAD_REQUEST


def _payload() -> Dict[str, Any]:
    raw_payload = request.get_json(force=True, silent=False)
    if not isinstance(raw_payload, dict):
        raise BadRequest("request body must be a JSON object")
    return raw_payload


def _respond(model: BaseModel) -> Any:
    return jsonify(model.model_dump(mode="json"))


@api_bp.get("/health")
def health() -> Any:
    """Health-check endpoint."""
    return _respond(HealthResponse(status="ok"))


@api_bp.post("/calc/accumulation")
def accumulation() -> Any:
    """Project one or more capital sources to the horizon."""
    payload = AccumulationRequest.model_validate(_payload())
    projection = project_sources(
        [source.to_source() for source in payload.sources],
        payload.horizon_years,
        payload.inflation_rate,
        payload.strategy,
    )
    return _respond(projection)


@api_bp.post("/calc/drawdown")
def drawdown() -> Any:
    """Month-by-month drawdown of retirement capital."""
    payload = DrawdownRequest.model_validate(_payload())
    result = simulate_drawdown(
        start_capital=payload.start_capital,
        current_age=payload.current_age,
        retire_age=payload.retire_age,
        end_age=payload.end_age,
        post_retirement_rate=payload.post_retirement_rate,
        cpi_rate=payload.cpi_rate,
        monthly_income_today=payload.monthly_income_today,
        once_off_capital_need=payload.once_off_capital_need,
    )
    return _respond(result)


@api_bp.post("/calc/funding")
def funding() -> Any:
    payload = FundingRequest.model_validate(_payload())
    assessment = assess_funding(
        projected_capital=payload.projected_capital,
        target_income_today=payload.target_annual_income_today,
        real_discount_rate=payload.real_discount_rate,
        periods_in_retirement=payload.periods_in_retirement,
    )
    return _respond(assessment)


@api_bp.post("/calc/solve/contribution")
def solve_contribution() -> Any:
    """Monthly contribution needed for a source to reach a target value."""
    payload = ContributionGoalRequest.model_validate(_payload())
    solution = solve_contribution_for_target(
        payload.source.to_source(), payload.horizon_years, payload.target_value
    )
    if not solution.feasible:
        current_app.logger.warning("contribution goal not bracketed: %s", solution.message)
    return _respond(solution)


@api_bp.post("/calc/solve/capital")
def solve_capital() -> Any:
    """Capital needed at retirement for the income need to last."""
    payload = CapitalGoalRequest.model_validate(_payload())
    solution = solve_capital_for_drawdown(**payload.model_dump())
    if not solution.feasible:
        current_app.logger.warning("capital goal not bracketed: %s", solution.message)
    return _respond(solution)


@api_bp.post("/calc/retirement")
def retirement() -> Any:
    """Recompute the full retirement projection for one input snapshot."""
    plan = RetirementPlan.model_validate(_payload())
    return _respond(recompute_retirement_projection(plan))


@api_bp.post("/calc/investment")
def investment() -> Any:
    plan = InvestmentPlan.model_validate(_payload())
    return _respond(recompute_investment_projection(plan))
