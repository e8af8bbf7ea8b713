"""
Unit tests for value objects.
"""

from uuid import uuid4

import pytest

from jobflow.domain.value_objects.actor import Actor, Role
from jobflow.domain.value_objects.bid_status import BidStatus
from jobflow.domain.value_objects.customer_contact import CustomerContact
from jobflow.domain.value_objects.dispute_status import DisputeStatus
from jobflow.domain.value_objects.job_status import JobStatus
from jobflow.domain.value_objects.location import JobLocation
from jobflow.domain.value_objects.warranty_hold_status import (
    ReleaseOutcome,
    WarrantyHoldStatus,
)


class TestJobStatus:
    """Test JobStatus value object."""

    def test_enum_values(self):
        """Test that all expected enum values exist."""
        expected_values = [
            "PENDING",
            "WAITING_FOR_PAYMENT",
            "ASSIGNED",
            "IN_PROGRESS",
            "COMPLETION_PENDING_APPROVAL",
            "COMPLETED",
            "CANCELLED",
        ]
        assert [status.value for status in JobStatus] == expected_values

    def test_is_terminal(self):
        """Test is_terminal method for all statuses."""
        assert JobStatus.COMPLETED.is_terminal() is True
        assert JobStatus.CANCELLED.is_terminal() is True

        assert JobStatus.PENDING.is_terminal() is False
        assert JobStatus.ASSIGNED.is_terminal() is False
        assert JobStatus.COMPLETION_PENDING_APPROVAL.is_terminal() is False

    def test_requires_assignee(self):
        """Only unassigned statuses may lack a technician."""
        assert JobStatus.PENDING.requires_assignee() is False
        assert JobStatus.CANCELLED.requires_assignee() is False

        assert JobStatus.WAITING_FOR_PAYMENT.requires_assignee() is True
        assert JobStatus.IN_PROGRESS.requires_assignee() is True
        assert JobStatus.COMPLETED.requires_assignee() is True

    def test_is_cancellable(self):
        assert JobStatus.PENDING.is_cancellable() is True
        assert JobStatus.WAITING_FOR_PAYMENT.is_cancellable() is True
        assert JobStatus.ASSIGNED.is_cancellable() is True
        assert JobStatus.IN_PROGRESS.is_cancellable() is False

    def test_string_comparison(self):
        assert JobStatus("PENDING") is JobStatus.PENDING
        assert JobStatus.PENDING == "PENDING"


class TestBidStatus:
    """Test BidStatus value object."""

    def test_active_statuses(self):
        assert BidStatus.PENDING.is_active() is True
        assert BidStatus.COUNTERED.is_active() is True
        assert BidStatus.ACCEPTED.is_active() is False
        assert BidStatus.REJECTED.is_active() is False
        assert BidStatus.EXPIRED.is_active() is False

    def test_terminal_statuses(self):
        assert BidStatus.ACCEPTED.is_terminal() is True
        assert BidStatus.REJECTED.is_terminal() is True
        assert BidStatus.EXPIRED.is_terminal() is True
        assert BidStatus.PENDING.is_terminal() is False


class TestWarrantyHoldStatus:
    """Test warranty hold and release outcome enums."""

    def test_is_final(self):
        assert WarrantyHoldStatus.RELEASED.is_final() is True
        assert WarrantyHoldStatus.FORFEITED.is_final() is True
        assert WarrantyHoldStatus.LOCKED.is_final() is False
        assert WarrantyHoldStatus.FROZEN.is_final() is False

    def test_only_released_moves_funds(self):
        moved = [outcome for outcome in ReleaseOutcome if outcome.moved_funds]
        assert moved == [ReleaseOutcome.RELEASED]

    def test_dispute_open(self):
        assert DisputeStatus.OPEN.is_open() is True
        assert DisputeStatus.RESOLVED_FOR_DEALER.is_open() is False


class TestJobLocation:
    """Test JobLocation value object."""

    def test_valid_location(self):
        location = JobLocation(
            city="Pune",
            state="Maharashtra",
            place_name="Baner",
            address="4 Baner Road",
            pincode="411045",
        )

        assert location.coarse_label == "Baner"
        assert location.full_address == "4 Baner Road, Pune, Maharashtra, 411045"

    def test_coarse_label_falls_back_to_city(self):
        location = JobLocation(city="Pune", state="Maharashtra")
        assert location.coarse_label == "Pune, Maharashtra"

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"city": "", "state": "Goa"}, "City is required"),
            ({"city": "Panaji", "state": "  "}, "State is required"),
            ({"city": "Panaji", "state": "Goa", "latitude": 91.0}, "Latitude"),
            ({"city": "Panaji", "state": "Goa", "longitude": -181.0}, "Longitude"),
        ],
    )
    def test_invalid_location(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            JobLocation(**kwargs)

    def test_immutability(self):
        location = JobLocation(city="Pune", state="Maharashtra")
        with pytest.raises(AttributeError):
            location.city = "Mumbai"


class TestCustomerContact:
    """Test CustomerContact value object."""

    def test_name_required(self):
        with pytest.raises(ValueError, match="Customer name is required"):
            CustomerContact(name=" ")

    def test_to_dict(self):
        contact = CustomerContact(name="Priya Nair", phone="+919811111111")
        assert contact.to_dict() == {
            "name": "Priya Nair",
            "phone": "+919811111111",
            "email": None,
        }


class TestActor:
    """Test Actor value object."""

    def test_owner_check(self):
        owner_id = uuid4()
        dealer = Actor(user_id=owner_id, role=Role.DEALER)
        stranger = Actor(user_id=uuid4(), role=Role.DEALER)

        assert dealer.owns(owner_id) is True
        assert stranger.owns(owner_id) is False

    def test_admin_owns_everything(self):
        admin = Actor(user_id=uuid4(), role=Role.ADMIN)
        assert admin.owns(uuid4()) is True
        assert admin.is_admin is True
        assert admin.is_dealer is False
