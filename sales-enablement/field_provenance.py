# sales-enablement/field_provenance.py
import logging
from typing import Dict, Iterable, Optional

log = logging.getLogger(__name__)


def _is_empty(value) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


class FieldProvenance:
    """
    Tracks which form fields currently hold machine-populated values.

    A field is in the set while its value came from an auto-populate pass; the
    moment a person edits it the field leaves the set and auto-population will
    not touch it again.
    """

    def __init__(self, system_fields: Optional[Iterable[str]] = None):
        self._system = set(system_fields or ())

    def mark_system(self, field: str) -> None:
        self._system.add(field)

    def mark_user(self, field: str) -> None:
        self._system.discard(field)

    def is_system_populated(self, field: str) -> bool:
        return field in self._system

    def clear(self) -> None:
        self._system.clear()

    @property
    def system_fields(self) -> list:
        return sorted(self._system)

    def can_populate(self, form: dict, field: str) -> bool:
        return _is_empty(form.get(field)) or field in self._system

    def auto_populate(self, form: dict, derived: Dict[str, object]) -> dict:
        """Returns a copy of `form` with derived values written where provenance allows."""
        updated = dict(form)
        for field, value in derived.items():
            if _is_empty(value):
                continue
            if not self.can_populate(updated, field):
                log.debug("Keeping user value for '%s'", field)
                continue
            updated[field] = value
            self.mark_system(field)
        return updated

    def edit(self, form: dict, field: str, value) -> dict:
        updated = dict(form)
        updated[field] = value
        self.mark_user(field)
        return updated
