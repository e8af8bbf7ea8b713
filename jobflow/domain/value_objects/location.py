"""
Job location value object.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class JobLocation:
    """Where the work happens.

    ``place_name``/``city``/``state`` and the coordinates are always public;
    ``address`` and ``pincode`` are only shown once payment is locked.
    """

    city: str
    state: str
    place_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    pincode: Optional[str] = None

    def __post_init__(self):
        """Validate location fields."""
        if not self.city or not self.city.strip():
            raise ValueError("City is required")
        if not self.state or not self.state.strip():
            raise ValueError("State is required")
        if self.latitude is not None and not -90 <= self.latitude <= 90:
            raise ValueError("Latitude must be between -90 and 90")
        if self.longitude is not None and not -180 <= self.longitude <= 180:
            raise ValueError("Longitude must be between -180 and 180")

    @property
    def coarse_label(self) -> str:
        """Get the public, non-identifying location label."""
        return self.place_name or f"{self.city}, {self.state}"

    @property
    def full_address(self) -> str:
        """Get formatted full address."""
        parts = [self.address, self.city, self.state, self.pincode]
        return ", ".join(part for part in parts if part)
