"""
API routes exposing the delivery-date scheduling engine.

Every endpoint takes the full input (people, projects, assignments, optional
calendar) in the request body; nothing is read from or written to storage.
"""
from flask import current_app, jsonify, request
from planner.api import scheduling_bp
from planner.logging_config import get_logger
from planner.scheduling.errors import InvalidInput, SchedulingDivergence
from planner.scheduling.service import SchedulingService, calendar_config_from_settings

logger = get_logger(__name__)


def _default_calendar():
    return calendar_config_from_settings(current_app.config)


def _request_json():
    data = request.get_json(silent=True)
    if data is None:
        raise InvalidInput("Request body must be a JSON object")
    return data


def _error_response(exc):
    if isinstance(exc, InvalidInput):
        logger.warning("Invalid scheduling input", error=str(exc), field=exc.field)
        return jsonify(exc.to_dict()), 400
    logger.error("Scheduling diverged", error=str(exc), project_id=exc.project_id, role=exc.role)
    return jsonify(exc.to_dict()), 422


@scheduling_bp.route("/schedule", methods=["POST"])
def schedule_projects():
    """Chain all active projects by priority and return their delivery info and slip summary."""
    try:
        result = SchedulingService.run_priority_schedule(_request_json(), _default_calendar())
        return jsonify(result), 200
    except (InvalidInput, SchedulingDivergence) as exc:
        return _error_response(exc)


@scheduling_bp.route("/delivery/<project_id>", methods=["POST"])
def project_delivery(project_id):
    """Delivery info for a single project scheduled on its own."""
    try:
        result = SchedulingService.run_project_delivery(project_id, _request_json(), _default_calendar())
        return jsonify(result), 200
    except (InvalidInput, SchedulingDivergence) as exc:
        return _error_response(exc)


@scheduling_bp.route("/availability", methods=["POST"])
def availability():
    """Per-person, per-day availability for a date range or a month."""
    try:
        result = SchedulingService.run_availability(_request_json(), _default_calendar())
        return jsonify(result), 200
    except InvalidInput as exc:
        return _error_response(exc)


@scheduling_bp.route("/working-days", methods=["GET"])
def working_days():
    """Working days between ?from= and ?to= under the configured calendar."""
    try:
        result = SchedulingService.list_working_days(
            request.args.get('from'),
            request.args.get('to'),
            _default_calendar(),
        )
        return jsonify(result), 200
    except InvalidInput as exc:
        return _error_response(exc)
