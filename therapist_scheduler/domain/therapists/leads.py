"""Lead supervisor directory, loaded from a JSON data file"""

import json
import logging
from pathlib import Path
from typing import Optional

from ...models import UNASSIGNED_LEAD

logger = logging.getLogger(__name__)


class LeadDirectory:
    def __init__(self, leads: list[str], assignments: dict[int, str]):
        self.leads = list(leads)
        self.assignments = dict(assignments)

    @classmethod
    def load(cls, path: Optional[str]) -> "LeadDirectory":
        if not path or not Path(path).exists():
            logger.warning(f"Lead assignments file not found: {path} - all therapists Unassigned")
            return cls([], {})

        with open(path, encoding="utf-8") as f:
            raw = json.load(f)

        leads = raw.get("leads", [])
        assignments = {}
        for therapist_id, lead in raw.get("assignments", {}).items():
            if lead not in leads:
                logger.warning(f"Ignoring unknown lead {lead!r} for therapist {therapist_id}")
                continue
            assignments[int(therapist_id)] = lead

        logger.info(f"Loaded {len(assignments)} lead assignments across {len(leads)} leads")
        return cls(leads, assignments)

    def lead_for(self, therapist_id: int) -> str:
        return self.assignments.get(therapist_id, UNASSIGNED_LEAD)

    def is_valid(self, lead: str) -> bool:
        return lead == UNASSIGNED_LEAD or lead in self.leads
