from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.responses import date_arg, json_body, json_endpoint, to_jsonable
from ..core.constants import DEFAULT_PERIOD_LIST_LIMIT
from ..container import Container
from .model import PayrollPeriod


def period_to_json(period: PayrollPeriod) -> dict:
    return {
        "period_id": period.period_id,
        "week_id": period.week_id,
        "period_start": to_jsonable(period.period_start),
        "period_end": to_jsonable(period.period_end),
        "payment_date": to_jsonable(period.payment_date),
        "status": period.status.value,
    }


def register(app: Flask, container: Container) -> None:
    service = container.period_service

    @app.route("/api/periods", methods=["GET"], endpoint="periods_list")
    @json_endpoint
    def periods_list():
        limit = int(request.args.get("limit", DEFAULT_PERIOD_LIST_LIMIT))
        return jsonify({"success": True, "periods": [period_to_json(p) for p in service.list_periods(limit=limit)]})

    @app.route("/api/periods/<int:period_id>", methods=["GET"], endpoint="periods_show")
    @json_endpoint
    def periods_show(period_id: int):
        return jsonify({"success": True, "period": period_to_json(service.get_period(period_id))})

    @app.route("/api/periods", methods=["POST"], endpoint="periods_store")
    @json_endpoint
    def periods_store():
        data = json_body()
        period_id = service.create_period(
            week_id=int(data["week_id"]),
            period_start=date_arg(data, "period_start"),
            period_end=date_arg(data, "period_end"),
            payment_date=date_arg(data, "payment_date"),
            status=data.get("status", "pending"),
            overwrite_existing=bool(data.get("overwrite_existing", False)),
            align_to_week=bool(data.get("align_to_week", False)),
        )
        return jsonify({"success": True, "period_id": period_id, "message": "Payroll period created"}), 201

    @app.route("/api/periods/<int:period_id>/status", methods=["PUT"], endpoint="periods_update_status")
    @json_endpoint
    def periods_update_status(period_id: int):
        service.update_status(period_id, json_body()["status"])
        return jsonify({"success": True, "message": "Payroll period updated"})

    @app.route("/api/periods/<int:period_id>", methods=["DELETE"], endpoint="periods_destroy")
    @json_endpoint
    def periods_destroy(period_id: int):
        service.delete_period(period_id)
        return jsonify({"success": True, "message": "Payroll period deleted"})
