from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ScheduleTemplate


class TemplateRepository(Protocol):
    def list_templates(self) -> Sequence[ScheduleTemplate]:
        raise NotImplementedError

    def get_by_id(self, template_id: int) -> Optional[ScheduleTemplate]:
        raise NotImplementedError
