from flask import Blueprint, jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from pos_api.services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/report")


@reports_bp.get("/today")
def daily_report():
    try:
        report = reporting_service.daily_report()
        return jsonify(report), 200
    except SQLAlchemyError:
        current_app.logger.exception("Failed to build daily report")
        return jsonify({"error": "Failed to get daily report"}), 500


@reports_bp.get("")
def range_report():
    start_date = request.args.get("start_date")
    end_date = request.args.get("end_date")

    try:
        report = reporting_service.range_report(start_date, end_date)
        return jsonify(report), 200
    except reporting_service.InvalidRange as exc:
        return jsonify({"error": str(exc)}), 400
    except SQLAlchemyError:
        current_app.logger.exception("Failed to build range report")
        return jsonify({"error": "Failed to get report"}), 500
