from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

import click
from flask import Flask

from ..common.datetime_utils import today_local
from ..container import Container
from ..core.exceptions import DomainError, PayrollBatchError
from ..periods.service import PeriodService
from .model import BatchResult
from .service import PayrollService

logger = logging.getLogger(__name__)


def run_scheduled_generation(
    periods: PeriodService,
    payroll: PayrollService,
    *,
    period_id: Optional[int] = None,
    policy: Any = "skip_existing",
    abort_on_failure: bool = False,
    today: Optional[date] = None,
) -> list[BatchResult]:
    """Generate one period, or every non-completed period ending today.

    A period that aborts is logged and the remaining periods still run.
    """
    if period_id is not None:
        targets = [periods.get_period(period_id)]
    else:
        day = today or today_local()
        targets = list(periods.ending_on(day))
        if not targets:
            logger.info("No payroll periods ending on %s", day)

    results: list[BatchResult] = []
    for period in targets:
        try:
            results.append(
                payroll.generate_for_period(period.period_id, policy=policy, abort_on_failure=abort_on_failure)
            )
        except PayrollBatchError as e:
            logger.error("%s", e)
        except DomainError as e:
            logger.error("Payroll generation failed for period %s: %s", period.period_id, e)
    return results


def register(app: Flask, container: Container) -> None:
    @app.cli.command("generate-payroll")
    @click.option("--period-id", type=int, default=None, help="Generate a single period instead of those ending today.")
    @click.option(
        "--policy",
        type=click.Choice(["skip_existing", "reject_existing", "overwrite_existing"]),
        default=None,
        help="How to treat employees that already have an entry.",
    )
    @click.option("--abort-on-failure", is_flag=True, help="Write nothing if any employee fails.")
    def generate_payroll(period_id: Optional[int], policy: Optional[str], abort_on_failure: bool) -> None:
        """Generate payroll entries from attendance."""
        results = run_scheduled_generation(
            container.period_service,
            container.payroll_service,
            period_id=period_id,
            policy=policy or app.config.get("PAYROLL_DUPLICATE_POLICY", "skip_existing"),
            abort_on_failure=abort_on_failure,
        )
        for result in results:
            summary = result.summary()
            click.echo(
                f"Period {summary['period_id']}: created={summary['created']} "
                f"overwritten={summary['overwritten']} skipped={summary['skipped']} failed={summary['failed']}"
            )
            for failure in summary["failures"]:
                click.echo(f"  employee {failure['employee_id']}: {failure['reason']}", err=True)
