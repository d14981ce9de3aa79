"""
Client key strategy: natural key = tax id, then email.

A match updates the client in place.  Every field the row supplied
overwrites the stored one, except the system id, visit statistics and
display colour, which are always preserved.  Initials are recomputed only
when the row supplied a name.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from fieldops_ingestion.domain.types import ClientCandidate
from fieldops_ingestion.domain.validators import validate_client_candidate
from fieldops_kernel.domain.client import (
    Client,
    ClientStatus,
    compute_initials,
    next_client_id,
)
from fieldops_kernel.domain.dtos import ValidationError
from fieldops_kernel.domain.identity import RandomSource
from fieldops_kernel.db.store import CLIENT_COLLECTION
from fieldops_kernel.logging_config import get_logger

logger = get_logger("ingestion.promoters.client")


class ClientKeyStrategy:
    """Upserts clients; new ones get the next sequential ``CL-NNN`` id."""

    collection_name: str = CLIENT_COLLECTION

    def __init__(
        self,
        random_source: RandomSource,
        palette: Sequence[str],
        *,
        id_prefix: str = "CL-",
        id_width: int = 3,
        unnamed_client: str = "Sin Nombre",
        last_visit_placeholder: str = "-",
    ):
        if not palette:
            raise ValueError("palette must not be empty")
        self._random = random_source
        self._palette = tuple(palette)
        self._id_prefix = id_prefix
        self._id_width = id_width
        self._unnamed_client = unnamed_client
        self._last_visit_placeholder = last_visit_placeholder

    def validate(self, candidate: ClientCandidate) -> list[ValidationError]:
        return validate_client_candidate(candidate)

    def _find_by(self, collection: Sequence[Client], attr: str, value: str | None) -> int | None:
        if not value:
            return None
        matches = [i for i, client in enumerate(collection) if getattr(client, attr) == value]
        if len(matches) > 1:
            logger.warning(
                "ambiguous_client_key",
                extra={
                    "key_name": attr,
                    "key_value": value,
                    "client_ids": [collection[i].id for i in matches],
                },
            )
        return matches[0] if matches else None

    def find_match(self, collection: Sequence[Client], candidate: ClientCandidate) -> int | None:
        index = self._find_by(collection, "tax_id", candidate.tax_id)
        if index is None:
            index = self._find_by(collection, "email", candidate.email)
        return index

    def on_match(self, existing: Client, candidate: ClientCandidate) -> Client:
        fields = candidate.present_fields()
        if "name" in fields:
            fields["initials"] = compute_initials(candidate.name)
        return replace(
            existing,
            **fields,
            color_class=existing.color_class or self._palette[0],
        )

    def create(self, collection: Sequence[Client], candidate: ClientCandidate) -> Client:
        return Client(
            id=next_client_id(
                (client.id for client in collection),
                prefix=self._id_prefix,
                width=self._id_width,
            ),
            name=candidate.name or self._unnamed_client,
            tax_id=candidate.tax_id or "",
            contact_name=candidate.contact_name or "",
            email=candidate.email or "",
            phone=candidate.phone or "",
            address=candidate.address or "",
            photo_url=candidate.photo_url or "",
            initials=compute_initials(candidate.name),
            status=ClientStatus.ACTIVE,
            total_visits=0,
            last_visit_date=self._last_visit_placeholder,
            color_class=self._random.choice(self._palette),
        )

    def entity_id(self, entity: Client) -> str:
        return entity.id
