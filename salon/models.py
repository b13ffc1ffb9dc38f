from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .shared.timezone import utcnow

# Booking statuses: scheduled → confirmed → done, scheduled/confirmed → canceled
BOOKING_STATUSES = ("scheduled", "confirmed", "done", "canceled")
# Assignment statuses: pending → accepted | declined | expired
ASSIGNMENT_STATUSES = ("pending", "accepted", "declined", "expired")
PAYMENT_METHODS = ("cash", "transfer")


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    description = Column(Text, nullable=True)
    highlights = Column(JSON, nullable=True)  # list of short selling points

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    bookings = relationship("Booking", back_populates="service")


class Booking(Base):
    """A client appointment; status changes only through the booking engine"""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    # Client details are denormalized - clients have no account
    client_name = Column(String(255), nullable=False)
    client_email = Column(String(255), nullable=True)
    client_phone = Column(String(50), nullable=True)

    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False, index=True)  # naive UTC
    end_time = Column(DateTime, nullable=False)

    status = Column(String(20), default="scheduled", nullable=False, index=True)
    amount_override = Column(Numeric(10, 2), nullable=True)  # supersedes service.price

    # Assignment (denormalized from the accepted Assignment row)
    assigned_email = Column(String(255), nullable=True, index=True)
    assigned_at = Column(DateTime, nullable=True)
    invited_emails = Column(JSON, nullable=False, default=list)  # append-only history
    confirmed_email = Column(String(255), nullable=True)

    # Audit trail
    completed_by = Column(String(255), nullable=True)
    completed_at = Column(DateTime, nullable=True)
    canceled_at = Column(DateTime, nullable=True)

    notes = Column(Text, nullable=True)

    # naive UTC, like every other instant on the booking
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    service = relationship("Service", back_populates="bookings")
    assignments = relationship(
        "Assignment",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Assignment.id",
    )
    payments = relationship(
        "Payment",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Payment.id",
    )
    commissions = relationship(
        "Commission",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Commission.id",
    )

    @property
    def effective_price(self):
        if self.amount_override is not None:
            return self.amount_override
        return self.service.price if self.service else None


class Assignment(Base):
    """Time-bounded email invitation for a collaborator to take a booking"""

    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email = Column(String(255), nullable=False, index=True)
    status = Column(String(20), default="pending", nullable=False, index=True)
    # Capability credential used in the accept link
    token = Column(String(128), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    responded_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    booking = relationship("Booking", back_populates="assignments")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String(20), nullable=False)  # cash, transfer
    created_at = Column(DateTime, server_default=func.now())

    booking = relationship("Booking", back_populates="payments")


class Commission(Base):
    __tablename__ = "commissions"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    percentage = Column(Numeric(5, 2), nullable=False)  # 0-100
    amount = Column(Numeric(10, 2), nullable=False)  # persisted, never recomputed
    assignee_email = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())

    booking = relationship("Booking", back_populates="commissions")
