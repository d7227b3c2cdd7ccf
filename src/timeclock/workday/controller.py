from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    svc = container.workday_service

    def _check_date(value: str) -> str:
        try:
            parse_iso_date(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Fecha inválida: {value}") from None
        return value

    def _break_minutes(data: dict) -> int:
        try:
            return int(data.get("breakMinutes") or 0)
        except (TypeError, ValueError):
            raise ValidationError("breakMinutes debe ser un número") from None

    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return jsonify({"message": str(e)}), 400

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"message": str(e)}), 404

    @app.route("/api/daily-workday", methods=["GET"], endpoint="get_daily_workday")
    def get_daily_workday():
        employee_id = request.args.get("employeeId")
        date = request.args.get("date")
        if not employee_id or not date:
            return jsonify({"message": "employeeId y date son requeridos"}), 400

        date = _check_date(date)
        workday = svc.get_summary(employee_id, date)
        has_clock_entries = svc.has_clock_entries(employee_id, date)
        return jsonify(
            {
                "workday": workday.to_dict() if workday else None,
                "hasClockEntries": has_clock_entries,
                "canEdit": not has_clock_entries,
            }
        )

    @app.route("/api/daily-workday/history", methods=["GET"], endpoint="daily_workday_history")
    def daily_workday_history():
        employee_id = request.args.get("employeeId")
        start = request.args.get("startDate")
        end = request.args.get("endDate")
        if not employee_id or not start or not end:
            return jsonify({"message": "employeeId, startDate y endDate son requeridos"}), 400

        workdays = svc.history(employee_id, _check_date(start), _check_date(end))
        return jsonify([w.to_dict() for w in workdays])

    @app.route("/api/daily-workday/totals", methods=["GET"], endpoint="daily_workday_totals")
    def daily_workday_totals():
        employee_id = request.args.get("employeeId")
        start = request.args.get("startDate")
        end = request.args.get("endDate")
        if not employee_id or not start or not end:
            return jsonify({"message": "employeeId, startDate y endDate son requeridos"}), 400

        return jsonify(svc.period_totals(employee_id, _check_date(start), _check_date(end)).to_dict())

    @app.route("/api/daily-workday/compare", methods=["GET"], endpoint="daily_workday_compare")
    def daily_workday_compare():
        employee_id = request.args.get("employeeId")
        date = request.args.get("date")
        if not employee_id or not date:
            return jsonify({"message": "employeeId y date son requeridos"}), 400

        return jsonify(svc.compare(employee_id, _check_date(date)).to_dict())

    @app.route("/api/daily-workday", methods=["POST"], endpoint="create_daily_workday")
    def create_daily_workday():
        data = request.get_json(silent=True) or {}
        employee_id = data.get("employeeId")
        date = data.get("date")
        if not employee_id or not date:
            return jsonify({"message": "employeeId y date son requeridos"}), 400

        workday = svc.create_manual(
            str(employee_id),
            _check_date(date),
            data.get("startTime"),
            data.get("endTime"),
            _break_minutes(data),
        )
        return jsonify(workday.to_dict()), 201

    @app.route("/api/daily-workday/<workday_id>", methods=["PUT"], endpoint="update_daily_workday")
    def update_daily_workday(workday_id: str):
        data = request.get_json(silent=True) or {}
        workday = svc.update_manual(workday_id, data.get("startTime"), data.get("endTime"), _break_minutes(data))
        return jsonify(workday.to_dict())

    @app.route("/api/daily-workday/<workday_id>", methods=["DELETE"], endpoint="delete_daily_workday")
    def delete_daily_workday(workday_id: str):
        svc.delete_manual(workday_id)
        return "", 204
