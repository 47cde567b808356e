"""HTTP routes for the Flask API."""

import math
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Dict, Optional

from flask import Blueprint, Response, current_app, jsonify, request
from pydantic import ValidationError

from backend.core.export import export_filename, projection_to_csv
from backend.core.projection import FireCalculationResult, FireInputs, calculate_fire
from backend.core.storage import ScenarioNotFoundError, ScenarioStore
from backend.domain.fire import prepare_inputs
from backend.log import get_logger
from backend.schemas.fire import FireRequest, ScenarioCreate, ScenarioUpdate

logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)


class InvalidYearError(ValueError):
    """Raised when the ?year= query parameter is not an integer."""


class NonFiniteResultError(ValueError):
    """Raised when the inputs compound past what a float can hold."""


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return (
        jsonify(
            {
                "message": "Invalid input data",
                "errors": exc.errors(include_url=False, include_context=False, include_input=False),
            }
        ),
        HTTPStatus.BAD_REQUEST,
    )


@api_bp.errorhandler(InvalidYearError)
def _handle_invalid_year(exc: InvalidYearError):
    return jsonify({"message": str(exc)}), HTTPStatus.BAD_REQUEST


@api_bp.errorhandler(NonFiniteResultError)
def _handle_non_finite(exc: NonFiniteResultError):
    return jsonify({"message": str(exc)}), HTTPStatus.BAD_REQUEST


@api_bp.errorhandler(ScenarioNotFoundError)
def _handle_not_found(exc: ScenarioNotFoundError):
    return jsonify({"message": "Scenario not found"}), HTTPStatus.NOT_FOUND


def _store() -> ScenarioStore:
    return current_app.extensions["scenario_store"]


def _json_body() -> Any:
    # None (missing or malformed body) fails model validation with a 400
    return request.get_json(force=True, silent=True)


def _start_year() -> int:
    """Calendar year of the first projection row; read from the clock only here."""
    raw: Optional[str] = request.args.get("year")
    if raw is None:
        return datetime.now(timezone.utc).year
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidYearError(f"year must be an integer, got {raw!r}") from exc


def _require_finite(result: FireCalculationResult) -> FireCalculationResult:
    """JSON has no Infinity or NaN, so such projections are refused."""
    values = [result.realFireNumber, result.nominalFireNumber]
    for row in result.projectionData:
        values.extend(
            [
                row.investmentValue,
                row.annualContribution,
                row.potentialWithdrawalNominal,
                row.potentialWithdrawalReal,
                row.fireTarget,
                row.investmentGrowth,
            ]
        )
        if row.windfallAmount is not None:
            values.append(row.windfallAmount)
    if not all(math.isfinite(value) for value in values):
        raise NonFiniteResultError("projection overflows: inputs are too large to simulate")
    return result


def _result_payload(result: FireCalculationResult) -> Dict[str, Any]:
    # windfallAmount is omitted on rows without a windfall
    return result.model_dump(exclude_none=True)


def _run_projection(fire_request: FireRequest) -> Dict[str, Any]:
    preparation = prepare_inputs(fire_request)
    result = _require_finite(calculate_fire(preparation.inputs, start_year=_start_year()))
    logger.debug(
        "projection: achievableAge=%s yearsToRetirement=%s rows=%d",
        result.achievableAge,
        result.yearsToRetirement,
        len(result.projectionData),
    )
    payload = _result_payload(result)
    payload["warnings"] = preparation.warnings
    return payload


@api_bp.post("/fire")
def fire_projection() -> Any:
    """Run the projection for the posted inputs."""
    fire_request = FireRequest.model_validate(_json_body())
    return jsonify(_run_projection(fire_request)), HTTPStatus.OK


@api_bp.post("/fire/export")
def fire_export() -> Any:
    """Same projection, rendered as a CSV attachment."""
    fire_request = FireRequest.model_validate(_json_body())
    inputs: FireInputs = fire_request.to_inputs()
    result = _require_finite(calculate_fire(inputs, start_year=_start_year()))
    filename = export_filename(datetime.now(timezone.utc).date())
    logger.info("CSV export %s (%d rows)", filename, len(result.projectionData))
    return Response(
        projection_to_csv(inputs, result),
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@api_bp.get("/scenarios")
def list_scenarios() -> Any:
    return jsonify([scenario.model_dump() for scenario in _store().list()])


@api_bp.post("/scenarios")
def create_scenario() -> Any:
    scenario_in = ScenarioCreate.model_validate(_json_body())
    scenario = _store().create(scenario_in)
    logger.info("Created scenario %s (%s)", scenario.id, scenario.name)
    return jsonify(scenario.model_dump()), HTTPStatus.CREATED


@api_bp.get("/scenarios/<scenario_id>")
def get_scenario(scenario_id: str) -> Any:
    return jsonify(_store().get(scenario_id).model_dump())


@api_bp.patch("/scenarios/<scenario_id>")
def update_scenario(scenario_id: str) -> Any:
    update_in = ScenarioUpdate.model_validate(_json_body())
    scenario = _store().update(scenario_id, update_in)
    logger.info("Updated scenario %s", scenario_id)
    return jsonify(scenario.model_dump())


@api_bp.delete("/scenarios/<scenario_id>")
def delete_scenario(scenario_id: str) -> Any:
    _store().delete(scenario_id)
    logger.info("Deleted scenario %s", scenario_id)
    return "", HTTPStatus.NO_CONTENT


@api_bp.get("/scenarios/<scenario_id>/projection")
def scenario_projection(scenario_id: str) -> Any:
    """Run the projection on a stored scenario's inputs."""
    scenario = _store().get(scenario_id)
    fire_request = FireRequest.model_validate(
        scenario.model_dump(exclude={"id", "createdAt", "name"})
    )
    return jsonify(_run_projection(fire_request)), HTTPStatus.OK
