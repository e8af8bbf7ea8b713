"""
Dealer profile SQLAlchemy model.
"""

from sqlalchemy import Column, Numeric, String

from . import BaseModel


class DealerProfileModel(BaseModel):
    """Dealer profile database model. ``id`` is the dealer's user id."""

    __tablename__ = "dealer_profiles"

    business_name = Column(String(255), nullable=False)
    full_name = Column(String(255))
    email = Column(String(255))
    phone = Column(String(20))
    trust_score = Column(Numeric(precision=5, scale=2))
    rating = Column(Numeric(precision=3, scale=2))

    def __repr__(self) -> str:
        return f"<DealerProfile(id={self.id}, business_name={self.business_name})>"
