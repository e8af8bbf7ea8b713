"""
Payment split domain entity.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple
from uuid import UUID, uuid4

DEFAULT_IMMEDIATE_PERCENT = 80
WHOLE_UNITS = Decimal("1")


def calculate_split(
    total: Decimal, immediate_percent: int = DEFAULT_IMMEDIATE_PERCENT
) -> Tuple[Decimal, Decimal]:
    """Split ``total`` into (immediate release, warranty hold).

    The immediate part is rounded half-up to whole currency units and the hold
    is whatever remains, so the two always add back to ``total``.
    """
    total = Decimal(str(total)) if not isinstance(total, Decimal) else total
    if total < 0:
        raise ValueError("Split total cannot be negative")

    immediate = (total * Decimal(immediate_percent) / Decimal(100)).quantize(
        WHOLE_UNITS, rounding=ROUND_HALF_UP
    )
    immediate = min(immediate, total)
    return immediate, total - immediate


@dataclass
class PaymentSplit:
    """How a completed job's agreed price is paid out to the technician."""

    job_id: UUID
    technician_id: UUID
    total_amount: Decimal
    immediate_release: Decimal
    warranty_hold: Decimal
    id: UUID = field(default_factory=uuid4)
    immediate_released_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.immediate_release + self.warranty_hold != self.total_amount:
            raise ValueError(
                f"Split parts {self.immediate_release} + {self.warranty_hold} "
                f"do not add up to {self.total_amount}"
            )
        if self.immediate_release < 0 or self.warranty_hold < 0:
            raise ValueError("Split parts cannot be negative")
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)

    @classmethod
    def compute(
        cls,
        job_id: UUID,
        technician_id: UUID,
        total_amount: Decimal,
        immediate_percent: int = DEFAULT_IMMEDIATE_PERCENT,
    ) -> "PaymentSplit":
        immediate, hold = calculate_split(total_amount, immediate_percent)
        return cls(
            job_id=job_id,
            technician_id=technician_id,
            total_amount=immediate + hold,
            immediate_release=immediate,
            warranty_hold=hold,
        )

    @property
    def has_hold(self) -> bool:
        return self.warranty_hold > 0

    def mark_immediate_released(self, released_at: Optional[datetime] = None) -> bool:
        """Record the immediate payout. Returns ``False`` if already recorded."""
        if self.immediate_released_at is not None:
            return False
        self.immediate_released_at = released_at or datetime.now(timezone.utc)
        return True
