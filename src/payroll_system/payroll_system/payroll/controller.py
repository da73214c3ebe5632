from __future__ import annotations

import csv
import io

from flask import Flask, current_app, jsonify, request

from ..common.responses import json_body, json_endpoint, to_jsonable
from ..container import Container
from ..core.enums import DuplicatePolicy, EntryOutcome
from ..core.exceptions import PayrollBatchError
from ..periods.controller import period_to_json
from .model import DailyPayLine, EmployeeOutcome, GrossPay, PayrollEntry

OUTCOME_HTTP_STATUS = {
    EntryOutcome.CREATED: 201,
    EntryOutcome.OVERWRITTEN: 200,
    EntryOutcome.SKIPPED: 200,
    EntryOutcome.DUPLICATE: 409,
    EntryOutcome.FAILED: 400,
}

REGISTER_FIELDS = [
    "employee_number",
    "full_name",
    "department",
    "gross_pay",
    "sss",
    "philhealth",
    "pagibig",
    "tax",
    "cash_advance",
    "loan",
    "vat",
    "other_deductions",
    "short",
    "total_deductions",
    "net_pay",
    "status",
]


def line_to_json(line: DailyPayLine) -> dict:
    return {
        "date": to_jsonable(line.work_date),
        "status": line.status.value,
        "rate": to_jsonable(line.rate),
        "amount": to_jsonable(line.amount),
        "adjustment": to_jsonable(line.adjustment),
        "pay": to_jsonable(line.pay),
        "synthesized": line.synthesized,
    }


def entry_to_json(entry: PayrollEntry) -> dict:
    return {
        "entry_id": entry.entry_id,
        "employee_id": entry.employee_id,
        "period_id": entry.period_id,
        "daily_rate": to_jsonable(entry.daily_rate),
        "gross_pay": to_jsonable(entry.gross_pay),
        "sss_deduction": to_jsonable(entry.social_insurance),
        "philhealth_deduction": to_jsonable(entry.health_insurance),
        "pagibig_deduction": to_jsonable(entry.housing_fund),
        "tax_deduction": to_jsonable(entry.income_tax),
        "cash_advance": to_jsonable(entry.manual.cash_advance),
        "loan": to_jsonable(entry.manual.loan),
        "vat": to_jsonable(entry.manual.vat),
        "other_deductions": to_jsonable(entry.manual.other_deductions),
        "short": to_jsonable(entry.manual.short),
        "total_deductions": to_jsonable(entry.total_deductions),
        "net_pay": to_jsonable(entry.net_pay),
        "net_shortfall": to_jsonable(entry.net_shortfall),
        "status": entry.status.value,
    }


def outcome_to_json(outcome: EmployeeOutcome) -> dict:
    return {
        "employee_id": outcome.employee_id,
        "outcome": outcome.outcome.value,
        "reason": outcome.reason,
        "entry": entry_to_json(outcome.entry) if outcome.entry else None,
    }


def gross_to_json(gross: GrossPay) -> dict:
    return {
        "employee_id": gross.employee_id,
        "period_start": to_jsonable(gross.period_start),
        "period_end": to_jsonable(gross.period_end),
        "gross_pay": to_jsonable(gross.gross_pay),
        "daily_rates": [line_to_json(line) for line in gross.lines],
        "missing_rate_dates": [to_jsonable(d) for d in gross.missing_rate_dates],
    }


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    def _default_policy() -> str:
        return current_app.config.get("PAYROLL_DUPLICATE_POLICY", "skip_existing")

    @app.route("/api/payroll/periods/<int:period_id>/generate", methods=["POST"], endpoint="payroll_generate")
    @json_endpoint
    def payroll_generate(period_id: int):
        data = json_body()
        try:
            result = service.generate_for_period(
                period_id,
                policy=data.get("policy") or _default_policy(),
                abort_on_failure=bool(data.get("abort_on_failure", False)),
            )
        except PayrollBatchError as e:
            return jsonify({"success": False, "message": str(e), "summary": e.result.summary()}), 409

        summary = result.summary()
        return jsonify(
            {
                "success": result.failed_count == 0,
                "message": f"Created: {summary['created']}, Overwritten: {summary['overwritten']}, "
                f"Skipped: {summary['skipped']}, Failed: {summary['failed']}",
                "summary": summary,
            }
        )

    @app.route("/api/payroll/entries", methods=["POST"], endpoint="payroll_generate_one")
    @json_endpoint
    def payroll_generate_one():
        data = json_body()
        outcome = service.generate_for_employee(
            employee_id=int(data["employee_id"]),
            period_id=int(data["period_id"]),
            policy=data.get("policy") or DuplicatePolicy.REJECT_EXISTING.value,
        )
        return jsonify({"success": outcome.ok, "result": outcome_to_json(outcome)}), OUTCOME_HTTP_STATUS[outcome.outcome]

    @app.route("/api/payroll/periods/<int:period_id>/entries", methods=["GET"], endpoint="payroll_entries")
    @json_endpoint
    def payroll_entries(period_id: int):
        return jsonify({"success": True, "entries": [entry_to_json(e) for e in service.list_entries(period_id)]})

    @app.route("/api/payroll/preview", methods=["GET"], endpoint="payroll_preview")
    @json_endpoint
    def payroll_preview():
        gross = service.preview_gross(
            employee_id=int(request.args["employee_id"]),
            period_id=int(request.args["period_id"]),
        )
        return jsonify({"success": True, "preview": gross_to_json(gross)})

    @app.route("/api/payroll/entries/<int:entry_id>/recalculate", methods=["POST"], endpoint="payroll_recalculate")
    @json_endpoint
    def payroll_recalculate(entry_id: int):
        entry = service.recalculate_entry(entry_id)
        return jsonify({"success": True, "message": "Gross pay updated successfully", "payroll": entry_to_json(entry)})

    @app.route("/api/payroll/entries/<int:entry_id>/deductions", methods=["PUT"], endpoint="payroll_deductions")
    @json_endpoint
    def payroll_deductions(entry_id: int):
        data = json_body()
        entry = service.update_manual_deductions(
            entry_id,
            cash_advance=data.get("cash_advance", 0),
            loan=data.get("loan", 0),
            vat=data.get("vat", 0),
            other_deductions=data.get("other_deductions", 0),
            short=data.get("short", 0),
        )
        return jsonify({"success": True, "payroll": entry_to_json(entry)})

    @app.route("/api/payroll/entries/<int:entry_id>/status", methods=["PUT"], endpoint="payroll_status")
    @json_endpoint
    def payroll_status(entry_id: int):
        entry = service.set_status(entry_id, json_body()["status"])
        return jsonify({"success": True, "payroll": entry_to_json(entry)})

    @app.route("/api/payroll/entries/<int:entry_id>", methods=["DELETE"], endpoint="payroll_destroy")
    @json_endpoint
    def payroll_destroy(entry_id: int):
        service.delete_entry(entry_id)
        return jsonify({"success": True, "message": "Payroll entry deleted"})

    @app.route("/api/payroll/entries/<int:entry_id>/payslip", methods=["GET"], endpoint="payroll_payslip")
    @json_endpoint
    def payroll_payslip(entry_id: int):
        slip = service.build_payslip(entry_id)
        return jsonify(
            {
                "success": True,
                "employee": {
                    "employee_id": slip.employee.employee_id,
                    "employee_number": slip.employee.employee_number,
                    "full_name": slip.employee.full_name,
                    "department": slip.employee.department,
                    "position": slip.employee.position,
                },
                "period": period_to_json(slip.period),
                "payroll": entry_to_json(slip.entry),
                "daily_rates": [line_to_json(line) for line in slip.lines],
            }
        )

    @app.route("/payroll/periods/<int:period_id>/register.csv", methods=["GET"], endpoint="payroll_register_csv")
    @json_endpoint
    def payroll_register_csv(period_id: int):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REGISTER_FIELDS)
        writer.writeheader()
        for row in service.register_rows(period_id):
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=payroll_register_{period_id}.csv"},
        )
