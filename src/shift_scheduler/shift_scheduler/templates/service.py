from __future__ import annotations

import logging
from typing import Sequence

from ..core.exceptions import NotFoundError, ValidationError
from .model import ScheduleTemplate
from .repository import TemplateRepository

logger = logging.getLogger(__name__)


class TemplateService:
    def __init__(self, templates: TemplateRepository):
        self._templates = templates

    def list_active(self) -> Sequence[ScheduleTemplate]:
        out = []
        for t in self._templates.list_templates():
            if not t.is_active:
                continue
            if t.start_time.minutes_of_day >= t.end_time.minutes_of_day:
                logger.warning("Skipping template %s: start %s is not before end %s", t.name, t.start_time, t.end_time)
                continue
            out.append(t)
        out.sort(key=lambda t: (t.order, t.name))
        return out

    def get_active(self, template_id: int) -> ScheduleTemplate:
        template = self._templates.get_by_id(int(template_id))
        if not template:
            raise NotFoundError("Template not found")
        if not template.is_active:
            raise ValidationError(f"Template {template.display_name} is not active")
        return template
