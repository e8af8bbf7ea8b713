"""
Technician SQLAlchemy model.
"""

from sqlalchemy import Column, Integer, Numeric, String

from . import BaseModel


class TechnicianModel(BaseModel):
    """Technician database model. ``id`` is the technician's user id."""

    __tablename__ = "technicians"

    full_name = Column(String(255), nullable=False)
    mobile = Column(String(20))
    email = Column(String(255))
    place_name = Column(String(255))
    service_radius_km = Column(Integer)
    rating = Column(Numeric(precision=3, scale=2))
    trust_score = Column(Numeric(precision=5, scale=2))

    def __repr__(self) -> str:
        return f"<Technician(id={self.id}, full_name={self.full_name})>"
