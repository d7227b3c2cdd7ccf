from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import require_entry_type, require_non_empty
from ..container import Container
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/clock-entry", methods=["POST"], endpoint="create_clock_entry")
    def create_clock_entry():
        data = request.get_json(silent=True) or {}
        try:
            employee_id = require_non_empty(data.get("employeeId"), "employeeId")
            entry_type = require_entry_type(data.get("entryType"))
            timestamp = data.get("timestamp")
            try:
                timestamp = parse_iso_datetime(timestamp) if timestamp else None
            except (TypeError, ValueError):
                raise ValidationError("timestamp inválido") from None

            event, summary = container.clock_service.record(
                employee_id,
                entry_type,
                timestamp=timestamp,
                source=data.get("source"),
            )
        except ValidationError as e:
            return jsonify({"message": str(e)}), 400
        except Exception:
            logger.exception("clock entry failed")
            return jsonify({"message": "Error al registrar el clock entry."}), 500

        return (
            jsonify(
                {
                    "message": "Clock entry registrado correctamente",
                    "clockEntry": event.to_dict(),
                    "workday": summary.to_dict(),
                }
            ),
            201,
        )

    @app.route("/api/clock-entry/status", methods=["GET"], endpoint="clock_status")
    def clock_status():
        employee_id = request.args.get("employeeId")
        if not employee_id:
            return jsonify({"message": "employeeId es requerido"}), 400

        status = container.clock_service.current_status(employee_id)
        return jsonify({"employeeId": employee_id, "status": status.value})
