from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .business_day.model import BusinessDayConfig
from .business_day.mysql_business_hours_repository import MySQLBusinessHoursRepository
from .business_day.service import BusinessDayService
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import ScheduleReportService
from .roles.mysql_role_repository import MySQLRoleRepository
from .roles.service import RoleService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.service import ShiftLifecycleService
from .templates.mysql_template_repository import MySQLTemplateRepository
from .templates.service import TemplateService
from .users.mysql_worker_repository import MySQLWorkerRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    workers_repo: MySQLWorkerRepository
    business_hours_repo: MySQLBusinessHoursRepository
    shifts_repo: MySQLShiftRepository
    templates_repo: MySQLTemplateRepository
    roles_repo: MySQLRoleRepository

    business_day_service: BusinessDayService
    shift_service: ShiftLifecycleService
    template_service: TemplateService
    role_service: RoleService
    report_service: ScheduleReportService


def build_container(*, db_config: dict, business_day: Optional[BusinessDayConfig] = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    workers_repo = MySQLWorkerRepository(conn)
    business_hours_repo = MySQLBusinessHoursRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    templates_repo = MySQLTemplateRepository(conn)
    roles_repo = MySQLRoleRepository(conn)

    business_day_service = BusinessDayService(business_hours_repo, workers_repo, default=business_day)
    shift_service = ShiftLifecycleService(shifts_repo, business_day_service)
    template_service = TemplateService(templates_repo)
    role_service = RoleService(roles_repo, shifts_repo)
    report_service = ScheduleReportService(shifts_repo, workers_repo, business_day_service)

    return Container(
        conn=conn,
        workers_repo=workers_repo,
        business_hours_repo=business_hours_repo,
        shifts_repo=shifts_repo,
        templates_repo=templates_repo,
        roles_repo=roles_repo,
        business_day_service=business_day_service,
        shift_service=shift_service,
        template_service=template_service,
        role_service=role_service,
        report_service=report_service,
    )
