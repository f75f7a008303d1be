"""
Data model for extracted business card contacts.

An ExtractedContact is produced per OCR side or QR payload, merged into one
record, and projected into a NormalizedContact for list/search display.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)


class ContactValidationError(ValueError):
    """Raised when a contact payload has the wrong shape."""


# =========================
# VALUES
# =========================

@dataclass(frozen=True)
class LabeledValue:
    """A contact channel value with an optional context label (e.g. "office-hcm", "T")."""
    value: str
    label: Optional[str] = None

    def key(self) -> str:
        return f"{self.label or ''}:{self.value}".lower()

    def to_dict(self) -> Dict[str, str]:
        data = {"value": self.value}
        if self.label:
            data["label"] = self.label
        return data


ContactValue = Union[str, LabeledValue]


def _labeled_from_entry(entry: Any) -> LabeledValue:
    if isinstance(entry, LabeledValue):
        return entry
    if isinstance(entry, str):
        return LabeledValue(value=entry)
    if isinstance(entry, dict):
        value = entry.get("value")
        label = entry.get("label")
        if not isinstance(value, str):
            raise ContactValidationError("Labeled value requires a string 'value'")
        if label is not None and not isinstance(label, str):
            raise ContactValidationError("Label must be a string")
        return LabeledValue(value=value, label=label or None)
    raise ContactValidationError(f"Unsupported contact value: {entry!r}")


def to_labeled_list(values: Union[Iterable[Any], str, None]) -> List[LabeledValue]:
    """Adapt a legacy-shaped contact field to a list of LabeledValue.

    Args:
        values: None, a bare string, or a sequence of strings, LabeledValue
            instances or {"label", "value"} dicts

    Returns:
        List of LabeledValue (empty for missing input)
    """
    if not values:
        return []
    if isinstance(values, str):
        return [LabeledValue(value=values)]
    return [_labeled_from_entry(entry) for entry in values]


# =========================
# CONTACT RECORDS
# =========================

@dataclass
class ExtractedContact:
    name: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    emails: Optional[List[str]] = None
    phones: Optional[List[LabeledValue]] = None
    faxes: Optional[List[LabeledValue]] = None
    websites: Optional[List[str]] = None
    address: Optional[List[LabeledValue]] = None
    notes: Optional[str] = None
    raw_text: Optional[str] = None

    SCALAR_FIELDS = ("name", "company", "title", "notes", "raw_text")
    STRING_LIST_FIELDS = ("emails", "websites")
    LABELED_FIELDS = ("phones", "faxes", "address")

    def is_empty(self) -> bool:
        """True when nothing but raw_text is set."""
        return not any(
            getattr(self, f.name) for f in fields(self) if f.name != "raw_text"
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict containing only the fields that are present."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name in self.LABELED_FIELDS:
                data[f.name] = [entry.to_dict() for entry in value]
            elif f.name in self.STRING_LIST_FIELDS:
                data[f.name] = list(value)
            else:
                data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractedContact":
        """Build a contact from a loosely-shaped dict (user edits, stored JSON).

        Accepts the legacy shapes still found at the boundaries: a bare
        string address, bare-string phones, single strings for list fields.
        Unknown keys are ignored.

        Raises:
            ContactValidationError: if a field has an unsupported type
        """
        if not isinstance(data, dict):
            raise ContactValidationError("Contact must be a JSON object")

        kwargs: Dict[str, Any] = {}
        for name in cls.SCALAR_FIELDS:
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise ContactValidationError(f"Field '{name}' must be a string")
            kwargs[name] = value

        for name in cls.STRING_LIST_FIELDS:
            value = data.get(name)
            if isinstance(value, str):
                value = [value]
            if value is not None:
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ContactValidationError(f"Field '{name}' must be a list of strings")
            kwargs[name] = value or None

        for name in cls.LABELED_FIELDS:
            value = data.get(name)
            if value is not None and not isinstance(value, (str, list)):
                raise ContactValidationError(f"Field '{name}' must be a string or a list")
            kwargs[name] = to_labeled_list(value) or None

        return cls(**kwargs)


@dataclass
class NormalizedContact:
    """Flat primary-field view used for list and search display."""
    full_name: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    primary_email: Optional[str] = None
    primary_phone: Optional[str] = None
    primary_website: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass
class TextBlock:
    """Cleaned OCR text plus the line sequence derived from it."""
    text: str = ""
    lines: List[str] = field(default_factory=list)
