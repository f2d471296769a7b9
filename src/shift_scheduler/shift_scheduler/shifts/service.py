from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Protocol, Sequence

from ..business_day.clock import BusinessDayClock
from ..business_day.model import BusinessDayConfig, NormalizedRange, WallClockTime
from ..common.datetime_utils import now_local
from ..common.validators import require_positive_id
from ..core.constants import DEFAULT_USER_TYPE, SLOT_STEP_MINUTES
from ..core.enums import Granularity, TimeBoundary
from ..core.exceptions import (
    ConflictError,
    NotFoundError,
    PartialCompletionError,
    PersistenceError,
    ValidationError,
)
from ..templates.model import ScheduleTemplate
from ..users.model import Identity
from .conflicts import ConflictDetector
from .locks import DayLockRegistry
from .model import NewShift, Shift, ShiftChanges, SplitPlan, WorkSession
from .permissions import PermissionGate
from .repository import ShiftRepository
from .splitter import SessionSplitter

logger = logging.getLogger(__name__)


class BusinessDayProvider(Protocol):
    def for_user(self, user_id: int) -> BusinessDayConfig:
        raise NotImplementedError


class ShiftLifecycleService:
    """Use cases: create, edit, approve, reset, split/combine and delete shifts.

    Every mutation is authorized, then validated (business hours, conflicts,
    split) before the first storage call, and runs under the (user, date) lock.
    Compound replaces (split, combine) undo their own writes when a storage call
    fails part way.

    ``split`` on create/edit/approve: None splits automatically once the range
    reaches the meal-break threshold, True forces a split, False keeps one record.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        business_days: BusinessDayProvider,
        *,
        gate: Optional[PermissionGate] = None,
        splitter: Optional[SessionSplitter] = None,
        locks: Optional[DayLockRegistry] = None,
        now: Callable[[], datetime] = now_local,
    ):
        self._shifts = shifts
        self._business_days = business_days
        self._gate = gate or PermissionGate()
        self._splitter = splitter or SessionSplitter()
        self._locks = locks or DayLockRegistry()
        self._now = now

    # ---- queries -------------------------------------------------------

    def clock_for(self, user_id: int) -> BusinessDayClock:
        return BusinessDayClock(self._business_days.for_user(int(user_id)))

    def validate_and_normalize_range(
        self, *, user_id: int, work_date: date, start: WallClockTime, end: WallClockTime
    ) -> NormalizedRange:
        return self.clock_for(user_id).validate_range(work_date, start, end)

    def _detector(
        self, clock: BusinessDayClock, user_id: int, work_date: date, exclude_ids: Sequence[int] = ()
    ) -> ConflictDetector:
        existing = self._shifts.list_shifts(user_id=int(user_id), work_date=work_date)
        return ConflictDetector(clock, work_date, existing, exclude_ids=exclude_ids)

    def is_slot_disabled(
        self,
        identity: Identity,
        *,
        user_id: int,
        work_date: date,
        time: WallClockTime,
        boundary: TimeBoundary,
        granularity: Granularity = Granularity.MINUTES,
        exclude_ids: Sequence[int] = (),
    ) -> bool:
        self._gate.require_view(identity, user_id)
        clock = self.clock_for(user_id)
        detector = self._detector(clock, user_id, work_date, exclude_ids)
        return detector.is_slot_disabled(time, granularity, boundary)

    def disabled_slots(
        self,
        identity: Identity,
        *,
        user_id: int,
        work_date: date,
        boundary: TimeBoundary,
        exclude_ids: Sequence[int] = (),
    ) -> dict:
        """Disabled hours and quarter-hour slots of a whole day, from one read."""
        self._gate.require_view(identity, user_id)
        clock = self.clock_for(user_id)
        detector = self._detector(clock, user_id, work_date, exclude_ids)

        hours = [h for h in range(24) if detector.is_hour_disabled(h, boundary)]
        minutes = [
            WallClockTime(h, m).format()
            for h in range(24)
            for m in range(0, 60, SLOT_STEP_MINUTES)
            if detector.is_minute_disabled(WallClockTime(h, m), boundary)
        ]
        return {"hours": hours, "minutes": minutes, "business_hours": clock.config.label()}

    def needs_split(self, rng: NormalizedRange) -> bool:
        return self._splitter.needs_split(rng.start_at, rng.end_at)

    def compute_split(
        self, *, user_id: int, work_date: date, start: WallClockTime, end: WallClockTime
    ) -> Optional[SplitPlan]:
        rng = self.validate_and_normalize_range(user_id=user_id, work_date=work_date, start=start, end=end)
        return self._splitter.split(rng.start_at, rng.end_at)

    def list_for_day(self, identity: Identity, *, user_id: int, work_date: date) -> Sequence[Shift]:
        self._gate.require_view(identity, user_id)
        return self._shifts.list_shifts(user_id=int(user_id), work_date=work_date)

    # ---- mutations -----------------------------------------------------

    def create(
        self,
        identity: Identity,
        *,
        user_id: int,
        work_date: date,
        start: WallClockTime,
        end: WallClockTime,
        user_type: Optional[str] = None,
        split: Optional[bool] = None,
    ) -> list[Shift]:
        user_id = require_positive_id(user_id, "User")
        if work_date is None or start is None or end is None:
            raise ValidationError("Missing required fields: user, date, start, end")
        self._gate.require_add_or_edit(identity, user_id)

        user_type = (user_type or "").strip() or DEFAULT_USER_TYPE
        approved_by, approved_at = (identity.user_id, self._now()) if identity.is_admin else (None, None)

        with self._locks.hold(user_id, work_date):
            clock = self.clock_for(user_id)
            rng = clock.validate_range(work_date, start, end)
            pieces = self._plan(clock, self._detector(clock, user_id, work_date), rng, split)

            created = self._create_all(
                [
                    NewShift(
                        user_id=user_id,
                        user_type=user_type,
                        work_date=work_date,
                        start=p.start,
                        end=p.end,
                        approved=identity.is_admin,
                        approved_by=approved_by,
                        approved_at=approved_at,
                    )
                    for p in pieces
                ]
            )

        logger.info(
            "Shift(s) %s created for user %s on %s by %s",
            [s.shift_id for s in created], user_id, work_date, identity.user_id,
        )
        return created

    def apply_template(
        self,
        identity: Identity,
        template: ScheduleTemplate,
        *,
        user_id: int,
        work_date: date,
        user_type: Optional[str] = None,
        split: Optional[bool] = None,
    ) -> list[Shift]:
        """Create a shift pre-filled from a template (approved when an admin applies it)."""
        if not template.is_active:
            raise ValidationError(f"Template {template.display_name} is not active")
        return self.create(
            identity,
            user_id=user_id,
            work_date=work_date,
            start=template.start_time,
            end=template.end_time,
            user_type=user_type,
            split=split,
        )

    def edit(
        self,
        identity: Identity,
        shift_id: int,
        *,
        start: WallClockTime,
        end: WallClockTime,
        user_type: Optional[str] = None,
        split: Optional[bool] = None,
    ) -> list[Shift]:
        shift = self._get(shift_id)
        self._gate.require_add_or_edit(identity, shift.user_id)

        with self._locks.hold(shift.user_id, shift.work_date):
            shift = self._get(shift_id)
            clock = self.clock_for(shift.user_id)
            rng = clock.validate_range(shift.work_date, start, end)
            detector = self._detector(clock, shift.user_id, shift.work_date, [shift.shift_id])
            pieces = self._plan(clock, detector, rng, split)
            user_type = (user_type or "").strip() or shift.user_type

            if len(pieces) == 1:
                updated = self._shifts.update(
                    shift.shift_id, ShiftChanges(start=rng.start, end=rng.end, user_type=user_type)
                )
                if updated is None:
                    raise NotFoundError("Schedule not found")
                logger.info("Shift %s edited by %s", shift.shift_id, identity.user_id)
                return [updated]

            replacements = [
                NewShift(
                    user_id=shift.user_id,
                    user_type=user_type,
                    work_date=shift.work_date,
                    start=p.start,
                    end=p.end,
                    approved=shift.approved,
                    approved_by=shift.approved_by,
                    approved_at=shift.approved_at,
                )
                for p in pieces
            ]
            created = self._replace([shift], replacements)

        logger.info("Shift %s split into %s by %s", shift.shift_id, [s.shift_id for s in created], identity.user_id)
        return created

    def approve(
        self,
        identity: Identity,
        shift_id: int,
        *,
        start: Optional[WallClockTime] = None,
        end: Optional[WallClockTime] = None,
        split: Optional[bool] = None,
    ) -> list[Shift]:
        shift = self._get(shift_id)
        self._gate.require_approve(identity, shift.user_id)

        with self._locks.hold(shift.user_id, shift.work_date):
            shift = self._get(shift_id)
            if shift.approved:
                raise ValidationError("Schedule is already approved.")

            clock = self.clock_for(shift.user_id)
            rng = clock.validate_range(shift.work_date, start or shift.start, end or shift.end)
            detector = self._detector(clock, shift.user_id, shift.work_date, [shift.shift_id])
            pieces = self._plan(clock, detector, rng, split)
            approved_at = self._now()

            if len(pieces) == 1:
                updated = self._shifts.update(
                    shift.shift_id,
                    ShiftChanges(
                        start=rng.start,
                        end=rng.end,
                        approved=True,
                        approved_by=identity.user_id,
                        approved_at=approved_at,
                    ),
                )
                if updated is None:
                    raise NotFoundError("Schedule not found")
                result = [updated]
            else:
                result = self._replace(
                    [shift],
                    [
                        NewShift(
                            user_id=shift.user_id,
                            user_type=shift.user_type,
                            work_date=shift.work_date,
                            start=p.start,
                            end=p.end,
                            approved=True,
                            approved_by=identity.user_id,
                            approved_at=approved_at,
                        )
                        for p in pieces
                    ],
                )

        logger.info("Shift %s approved by %s as %s", shift.shift_id, identity.user_id, [s.shift_id for s in result])
        return result

    def reset_to_pending(self, identity: Identity, shift_id: int) -> Shift:
        self._gate.require_reset(identity)
        shift = self._get(shift_id)

        with self._locks.hold(shift.user_id, shift.work_date):
            shift = self._get(shift_id)
            if not shift.approved:
                raise ValidationError("Schedule is already pending.")
            updated = self._shifts.update(shift.shift_id, ShiftChanges(approved=False))
            if updated is None:
                raise NotFoundError("Schedule not found")

        logger.info("Shift %s reset to pending by %s", shift.shift_id, identity.user_id)
        return updated

    def combine(self, identity: Identity, first_id: int, second_id: int) -> Shift:
        """Replace the two sessions of a split shift with one spanning record."""
        first = self._get(first_id)
        second = self._get(second_id)
        if first.shift_id == second.shift_id:
            raise ValidationError("Pick two different sessions to combine.")
        if first.user_id != second.user_id or first.work_date != second.work_date:
            raise ValidationError("Only sessions of the same worker and date can be combined.")
        self._gate.require_add_or_edit(identity, first.user_id)

        with self._locks.hold(first.user_id, first.work_date):
            first = self._get(first_id)
            second = self._get(second_id)
            clock = self.clock_for(first.user_id)
            earlier, later = sorted((first, second), key=lambda s: clock.to_business_minute(s.start))

            rng = clock.validate_range(earlier.work_date, earlier.start, later.end)
            detector = self._detector(clock, earlier.user_id, earlier.work_date, [first.shift_id, second.shift_id])
            self._plan(clock, detector, rng, split=False)

            approved = earlier.approved and later.approved
            (created,) = self._replace(
                [earlier, later],
                [
                    NewShift(
                        user_id=earlier.user_id,
                        user_type=earlier.user_type,
                        work_date=earlier.work_date,
                        start=rng.start,
                        end=rng.end,
                        approved=approved,
                        approved_by=earlier.approved_by if approved else None,
                        approved_at=earlier.approved_at if approved else None,
                    )
                ],
            )

        logger.info("Shifts %s and %s combined into %s by %s", first_id, second_id, created.shift_id, identity.user_id)
        return created

    def delete(self, identity: Identity, shift_id: int) -> None:
        shift = self._get(shift_id)
        self._gate.require_add_or_edit(identity, shift.user_id)

        with self._locks.hold(shift.user_id, shift.work_date):
            if not self._shifts.delete(shift.shift_id):
                raise NotFoundError("Schedule not found")

        logger.info("Shift %s deleted by %s", shift.shift_id, identity.user_id)

    def delete_all_for_day(self, identity: Identity, *, user_id: int, work_date: date) -> int:
        """Make the day OFF: remove every shift of the worker on that date."""
        user_id = require_positive_id(user_id, "User")
        self._gate.require_add_or_edit(identity, user_id)

        with self._locks.hold(user_id, work_date):
            count = self._shifts.delete_all_for_day(user_id=user_id, work_date=work_date)

        logger.info("Deleted %s shift(s) of user %s on %s by %s", count, user_id, work_date, identity.user_id)
        return count

    # ---- helpers -------------------------------------------------------

    def _get(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Schedule not found")
        return shift

    def _plan(
        self,
        clock: BusinessDayClock,
        detector: ConflictDetector,
        rng: NormalizedRange,
        split: Optional[bool],
    ) -> list[NormalizedRange]:
        """Conflict-check ``rng`` and cut it into the range(s) to persist."""
        conflicting = detector.find_overlap(rng)
        if conflicting:
            raise ConflictError(
                f"Time {rng.start}-{rng.end} overlaps with existing schedule {conflicting.start}-{conflicting.end}",
                conflicting=conflicting,
            )

        do_split = self.needs_split(rng) if split is None else bool(split)
        if not do_split:
            return [rng]

        plan = self._splitter.split(rng.start_at, rng.end_at)
        return [self._session_range(clock, rng.work_date, s) for s in (plan.first, plan.second)]

    @staticmethod
    def _session_range(clock: BusinessDayClock, work_date: date, session: WorkSession) -> NormalizedRange:
        return clock.validate_range(
            work_date,
            WallClockTime(session.start.hour, session.start.minute),
            WallClockTime(session.end.hour, session.end.minute),
        )

    def _replace(self, originals: Sequence[Shift], replacements: Sequence[NewShift]) -> list[Shift]:
        """Delete ``originals`` then create ``replacements``, in that order.

        On failure the step is compensated: replacements already written are
        removed and the deleted originals re-created. Only when that also fails
        does PartialCompletionError report what is left.
        """
        deleted: list[Shift] = []
        created: list[Shift] = []
        try:
            for original in originals:
                if not self._shifts.delete(original.shift_id):
                    if not deleted:
                        raise NotFoundError("Schedule not found")
                    raise PersistenceError(f"Schedule {original.shift_id} disappeared during replace")
                deleted.append(original)

            for new in replacements:
                created.append(self._shifts.create(new))
        except PersistenceError as e:
            if not deleted:
                raise
            logger.warning("Schedule replace failed after deleting %s, compensating: %s", [s.shift_id for s in deleted], e)
            self._compensate(deleted, created, len(replacements), cause=e)
            raise PersistenceError(
                "Schedule update failed; the original schedule was restored. Please try again."
            ) from e
        return created

    def _compensate(self, deleted: Sequence[Shift], created: list[Shift], expected: int, *, cause: Exception) -> None:
        restored: list[Shift] = []
        try:
            while created:
                if not self._shifts.delete(created[-1].shift_id):
                    raise PersistenceError(f"Replacement {created[-1].shift_id} could not be removed")
                created.pop()
            for original in deleted:
                restored.append(self._shifts.create(self._as_new(original)))
        except PersistenceError:
            missing = [s.shift_id for s in deleted[len(restored):]]
            raise self._partial(
                missing, [s.shift_id for s in created], expected, restored_ids=[s.shift_id for s in restored]
            ) from cause
        logger.info("Restored %s as %s", [s.shift_id for s in deleted], [s.shift_id for s in restored])

    @staticmethod
    def _as_new(shift: Shift) -> NewShift:
        return NewShift(
            user_id=shift.user_id,
            user_type=shift.user_type,
            work_date=shift.work_date,
            start=shift.start,
            end=shift.end,
            approved=shift.approved,
            approved_by=shift.approved_by,
            approved_at=shift.approved_at,
        )

    def _create_all(self, new_shifts: Sequence[NewShift]) -> list[Shift]:
        created: list[Shift] = []
        for new in new_shifts:
            try:
                created.append(self._shifts.create(new))
            except PersistenceError:
                if not created:
                    raise
                # second session failed: drop the first so no half of the split is left behind
                try:
                    for s in created:
                        self._shifts.delete(s.shift_id)
                except PersistenceError as e:
                    raise self._partial([], [s.shift_id for s in created], len(new_shifts)) from e
                raise
        return created

    @staticmethod
    def _partial(
        deleted_ids: Sequence[int],
        created_ids: Sequence[int],
        expected: int,
        *,
        restored_ids: Sequence[int] = (),
    ) -> PartialCompletionError:
        logger.error(
            "Partial schedule replace: deleted %s, created %s of %s replacement(s), restored %s",
            list(deleted_ids), list(created_ids), expected, list(restored_ids),
        )
        message = (
            f"Schedule update stopped half way: {len(created_ids)} of {expected} new session(s) are saved "
            f"and {len(deleted_ids)} original record(s) are gone."
        )
        if restored_ids:
            message += f" {len(restored_ids)} original record(s) were put back and must not be re-added."
        return PartialCompletionError(
            message + " Please re-add only the missing time manually.",
            deleted_ids=deleted_ids,
            created_ids=created_ids,
            restored_ids=restored_ids,
        )
