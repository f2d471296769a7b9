"""Example: drive the service layer directly, without Flask.

Creates a 9-hour shift as an admin; it is split into two approved sessions
around a 30-minute meal break.
"""

import importlib
from datetime import date, timedelta

from config import get_settings_module

from src.shift_scheduler.shift_scheduler.business_day.model import BusinessDayConfig, WallClockTime
from src.shift_scheduler.shift_scheduler.container import build_container
from src.shift_scheduler.shift_scheduler.core.enums import Position
from src.shift_scheduler.shift_scheduler.users.model import Identity


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        business_day=BusinessDayConfig.from_raw(settings.BUSINESS_DAY_START_HOUR, settings.BUSINESS_DAY_END_HOUR),
    )
    admin = Identity(user_id=2, position=Position.ADMIN)
    work_date = date.today() + timedelta(days=1)

    created = container.shift_service.create(
        admin, user_id=1, work_date=work_date, start=WallClockTime(9, 0), end=WallClockTime(18, 0)
    )
    for s in created:
        print(s.shift_id, s.start, s.end, s.status.value)

    board = container.report_service.weekly_board(work_date)
    print(board.title, len(board.rows))


if __name__ == "__main__":
    main()
