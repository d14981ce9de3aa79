"""
Client shape as consumed by the ledger core.

Only the fields bulk ingestion and history reconciliation touch are
modelled; anything else a view stores on a client is carried through
``extra`` untouched.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

_KNOWN_KEYS = frozenset({
    "id", "name", "nit", "taxId", "email", "contactName", "phone", "address",
    "photoUrl", "initials", "status", "totalVisits", "lastVisitDate", "colorClass",
})


class ClientStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


@dataclass(frozen=True)
class Client:
    """A serviced client; ``id`` never changes once assigned."""

    id: str
    name: str
    tax_id: str = ""
    email: str = ""
    contact_name: str = ""
    phone: str = ""
    address: str = ""
    photo_url: str = ""
    initials: str = ""
    status: ClientStatus = ClientStatus.ACTIVE
    total_visits: int = 0
    last_visit_date: str = "-"
    color_class: str = ""
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "name": self.name,
            "nit": self.tax_id,
            "email": self.email,
            "contactName": self.contact_name,
            "phone": self.phone,
            "address": self.address,
            "photoUrl": self.photo_url,
            "initials": self.initials,
            "status": self.status.value,
            "totalVisits": self.total_visits,
            "lastVisitDate": self.last_visit_date,
            "colorClass": self.color_class,
        })
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Client":
        try:
            status = ClientStatus(data.get("status") or ClientStatus.ACTIVE.value)
        except ValueError:
            status = ClientStatus.ACTIVE
        try:
            total_visits = int(data.get("totalVisits") or 0)
        except (TypeError, ValueError):
            total_visits = 0
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            tax_id=str(data.get("nit") or data.get("taxId") or ""),
            email=str(data.get("email") or ""),
            contact_name=str(data.get("contactName") or ""),
            phone=str(data.get("phone") or ""),
            address=str(data.get("address") or ""),
            photo_url=str(data.get("photoUrl") or ""),
            initials=str(data.get("initials") or ""),
            status=status,
            total_visits=total_visits,
            last_visit_date=str(data.get("lastVisitDate") or "-"),
            color_class=str(data.get("colorClass") or ""),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )


def compute_initials(name: str | None) -> str:
    """First letters of the first two words, upper-cased; ``XX`` without a name."""
    words = (name or "").split()
    if not words:
        return "XX"
    return "".join(word[0] for word in words)[:2].upper()


def client_id_number(client_id: str, prefix: str) -> int | None:
    """Numeric suffix of a ``{prefix}NNN`` id, or None for foreign ids."""
    if not client_id.startswith(prefix):
        return None
    try:
        return int(client_id[len(prefix):])
    except ValueError:
        return None


def next_client_id(client_ids: Iterable[str], prefix: str = "CL-", width: int = 3) -> str:
    """One greater than the largest numeric id carrying ``prefix``, zero padded."""
    highest = 0
    for client_id in client_ids:
        number = client_id_number(client_id, prefix)
        if number is not None and number > highest:
            highest = number
    return f"{prefix}{highest + 1:0{width}d}"
