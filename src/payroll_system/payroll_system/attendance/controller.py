from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.responses import date_arg, json_body, json_endpoint, to_jsonable
from ..container import Container
from .model import AttendanceRecord


def record_to_json(record: AttendanceRecord) -> dict:
    return {
        "attendance_id": record.attendance_id,
        "employee_id": record.employee_id,
        "work_date": to_jsonable(record.work_date),
        "status": record.status.value,
        "daily_rate": to_jsonable(record.daily_rate),
        "adjustment": to_jsonable(record.adjustment),
        "holiday_type": record.holiday_type.value if record.holiday_type else None,
    }


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @json_endpoint
    def attendance_list():
        args = request.args.to_dict()
        records = service.list_for_period(
            int(args["employee_id"]),
            start=date_arg(args, "start"),
            end=date_arg(args, "end"),
        )
        return jsonify({"success": True, "attendances": [record_to_json(r) for r in records]})

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_store")
    @json_endpoint
    def attendance_store():
        data = json_body()
        attendance_id = service.record_attendance(
            employee_id=int(data["employee_id"]),
            work_date=date_arg(data, "work_date"),
            status=data.get("status", "Present"),
            adjustment=data.get("adjustment", 0),
            daily_rate=data.get("daily_rate"),
            holiday_type=data.get("holiday_type"),
        )
        return jsonify({"success": True, "attendance_id": attendance_id, "message": "Attendance recorded"}), 201

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="attendance_bulk_store")
    @json_endpoint
    def attendance_bulk_store():
        data = json_body()
        result = service.bulk_record(
            work_date=date_arg(data, "work_date"),
            employee_ids=data.get("employee_ids") or [],
            status=data.get("status", "Present"),
            holiday_type=data.get("holiday_type"),
        )
        return jsonify(
            {
                "success": True,
                "created": result.created,
                "skipped": result.skipped,
                "message": f"Created {len(result.created)}, skipped {len(result.skipped)}",
            }
        ), 201

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @json_endpoint
    def attendance_update(attendance_id: int):
        data = json_body()
        service.update_attendance(
            attendance_id=attendance_id,
            status=data["status"],
            adjustment=data.get("adjustment", 0),
            daily_rate=data.get("daily_rate"),
            holiday_type=data.get("holiday_type"),
        )
        return jsonify({"success": True, "message": "Attendance updated"})

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_destroy")
    @json_endpoint
    def attendance_destroy(attendance_id: int):
        service.delete_attendance(attendance_id)
        return jsonify({"success": True, "message": "Attendance deleted"})

    @app.route("/api/attendance/bulk-delete", methods=["POST"], endpoint="attendance_bulk_delete")
    @json_endpoint
    def attendance_bulk_delete():
        deleted = service.bulk_delete(json_body().get("ids") or [])
        return jsonify({"success": True, "deleted": deleted})
