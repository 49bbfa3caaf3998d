from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Institution:
    """Accreditation profile of a user whose role is ``institution``.

    One-to-one with the user. ``is_accredited`` starts False and is only
    flipped by an administrative action outside the issuance workflow.
    """

    id: UUID
    user_id: UUID
    institution_name: str
    institution_type: str
    country: str
    accreditation_number: str | None
    is_accredited: bool
    created_at: datetime

    @staticmethod
    def new(
        *,
        user_id: UUID,
        institution_name: str,
        institution_type: str,
        country: str,
        accreditation_number: str | None = None,
    ) -> Institution:
        return Institution(
            id=uuid4(),
            user_id=user_id,
            institution_name=institution_name,
            institution_type=institution_type,
            country=country,
            accreditation_number=accreditation_number,
            is_accredited=False,
            created_at=datetime.now(UTC),
        )
