from datetime import datetime

from sqlalchemy import Boolean, Column, Integer, String, DateTime, Float, ForeignKey, Text
from sqlalchemy.orm import relationship

from restohire.db.base import Base


class Restaurant(Base):
    """Business profile owned by a RESTAURANT_OWNER user (one-to-one)."""

    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    website_url = Column(String, nullable=True)

    # Address
    address = Column(String, default="")
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)

    business_type = Column(String, nullable=True)  # "Fine Dining", "Cafe", ...
    cuisine_type = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="restaurant")
    jobs = relationship("Job", back_populates="restaurant")
    address_info = relationship("Address", back_populates="restaurant", uselist=False)
    payment_info = relationship("PaymentInfo", back_populates="restaurant", uselist=False)
    locations = relationship(
        "Location",
        back_populates="restaurant",
        order_by=lambda: [Location.is_main_location.desc(), Location.id],
    )


class Address(Base):
    """Structured street address of a restaurant (optional, one-to-one)."""

    __tablename__ = "restaurant_addresses"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), unique=True, nullable=False)

    street = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    zip_code = Column(String, nullable=False)
    country = Column(String, default="United States")
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    restaurant = relationship("Restaurant", back_populates="address_info")


class PaymentInfo(Base):
    """Payout details for a restaurant. Only card/bank suffixes are kept."""

    __tablename__ = "restaurant_payment_info"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), unique=True, nullable=False)

    stripe_customer_id = Column(String, nullable=True)
    stripe_account_id = Column(String, nullable=True)
    bank_account_last4 = Column(String(4), nullable=True)
    card_last4 = Column(String(4), nullable=True)
    is_verified = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    restaurant = relationship("Restaurant", back_populates="payment_info")


class Location(Base):
    """Additional branch of a restaurant. At most one is the main location."""

    __tablename__ = "restaurant_locations"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), index=True, nullable=False)

    name = Column(String, nullable=False)
    street = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    zip_code = Column(String, nullable=False)
    country = Column(String, default="United States")
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    is_main_location = Column(Boolean, default=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    restaurant = relationship("Restaurant", back_populates="locations")
