from __future__ import annotations

from dataclasses import dataclass

from .clock.mysql_clock_repository import MySQLClockEventRepository
from .clock.service import ClockService, DayLocks
from .clock.validator import ClockEventValidator
from .database.connection import DBConfig, DatabaseConnection
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .workday.consolidator import WorkdayConsolidator
from .workday.mysql_workday_repository import MySQLWorkdayRepository
from .workday.service import WorkdayService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    events_repo: MySQLClockEventRepository
    workdays_repo: MySQLWorkdayRepository
    schedules_repo: MySQLScheduleRepository

    clock_service: ClockService
    workday_service: WorkdayService


def build_container(
    *,
    db_config: dict,
    day_boundary_timezone: str = "UTC",
    max_backdate_days: int = 7,
    tolerance_minutes: int = 15,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    events_repo = MySQLClockEventRepository(conn)
    workdays_repo = MySQLWorkdayRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)

    validator = ClockEventValidator(day_boundary_timezone=day_boundary_timezone, max_backdate_days=max_backdate_days)
    consolidator = WorkdayConsolidator(day_boundary_timezone=validator.timezone, tolerance_minutes=tolerance_minutes)
    # Both services write the same days, so they share one lock registry.
    locks = DayLocks()

    clock_service = ClockService(
        events_repo,
        workdays_repo,
        schedules_repo,
        validator=validator,
        consolidator=consolidator,
        locks=locks,
    )
    workday_service = WorkdayService(
        workdays_repo,
        events_repo,
        schedules_repo,
        validator=validator,
        consolidator=consolidator,
        locks=locks,
    )

    return Container(
        conn=conn,
        events_repo=events_repo,
        workdays_repo=workdays_repo,
        schedules_repo=schedules_repo,
        clock_service=clock_service,
        workday_service=workday_service,
    )
