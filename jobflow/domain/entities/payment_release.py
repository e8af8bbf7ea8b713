"""
Payment release domain entity.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from jobflow.domain.value_objects.warranty_hold_status import PaymentReleaseKind


@dataclass
class PaymentRelease:
    """Ledger entry for money paid out to a technician.

    A job has at most one release per kind.
    """

    job_id: UUID
    technician_id: UUID
    kind: PaymentReleaseKind
    amount: Decimal
    id: UUID = field(default_factory=uuid4)
    released_at: Optional[datetime] = None

    def __post_init__(self):
        self.kind = PaymentReleaseKind(self.kind)
        if not self.released_at:
            self.released_at = datetime.now(timezone.utc)
