"""
Restaurant profile endpoints (restaurant owners only).

The flat profile plus its structured address, payment details and branch
locations.
"""

from datetime import datetime
from typing import Optional, Union

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from restohire.api.v1.auth import ensure_role, get_current_user
from restohire.core.errors import ForbiddenError, InvalidStateError, NotFoundError
from restohire.db.session import get_db
from restohire.models import Address, Location, PaymentInfo, Restaurant, Role, User
from restohire.services.accounts import get_restaurant_for_owner

router = APIRouter()

OWNER_ONLY = "Only restaurant owners can access this resource"


# ============== Pydantic Schemas ==============


class RestaurantProfileUpdate(BaseModel):
    """Schema for restaurant profile update."""

    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = None
    website_url: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    business_type: Optional[str] = Field(default=None, max_length=50)
    cuisine_type: Optional[str] = Field(default=None, max_length=50)


class RestaurantProfileResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website_url: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    business_type: Optional[str] = None
    cuisine_type: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AddressUpdate(BaseModel):
    street: str = Field(min_length=2, max_length=100)
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2, max_length=100)
    zip_code: str = Field(min_length=2, max_length=20)
    country: str = Field(default="United States", max_length=100)
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class AddressResponse(AddressUpdate):
    id: int
    restaurant_id: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaymentInfoUpdate(BaseModel):
    """Only the last four digits of a card or bank account are accepted."""

    stripe_customer_id: Optional[str] = Field(default=None, max_length=100)
    stripe_account_id: Optional[str] = Field(default=None, max_length=100)
    bank_account_last4: Optional[str] = Field(default=None, max_length=4)
    card_last4: Optional[str] = Field(default=None, max_length=4)
    is_verified: bool = False


class PaymentInfoResponse(PaymentInfoUpdate):
    id: int
    restaurant_id: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MissingPaymentInfo(BaseModel):
    exists: bool = False


class LocationUpdate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    street: str = Field(min_length=2, max_length=100)
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2, max_length=100)
    zip_code: str = Field(min_length=2, max_length=20)
    country: str = Field(default="United States", max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = None
    is_main_location: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class LocationResponse(LocationUpdate):
    id: int
    restaurant_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


def _owned_location(db: Session, restaurant: Restaurant, location_id: int) -> Location:
    location = db.query(Location).filter(Location.id == location_id).first()
    if not location:
        raise NotFoundError("Location not found")
    if location.restaurant_id != restaurant.id:
        raise ForbiddenError("Access denied. This location does not belong to your restaurant.")
    return location


def _clear_main_location(db: Session, restaurant: Restaurant, keep_id: Optional[int] = None):
    query = db.query(Location).filter(
        Location.restaurant_id == restaurant.id,
        Location.is_main_location.is_(True),
    )
    if keep_id is not None:
        query = query.filter(Location.id != keep_id)
    query.update({Location.is_main_location: False}, synchronize_session="fetch")


# ============== API Endpoints ==============


@router.get("/profile", response_model=RestaurantProfileResponse)
async def get_restaurant_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_role(current_user, Role.RESTAURANT_OWNER, OWNER_ONLY)
    return get_restaurant_for_owner(db, current_user)


@router.put("/profile", response_model=RestaurantProfileResponse)
async def update_restaurant_profile(
    request: RestaurantProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Replace the editable restaurant fields."""
    ensure_role(current_user, Role.RESTAURANT_OWNER, "Only restaurant owners can update this resource")
    restaurant = get_restaurant_for_owner(db, current_user)

    for field_name, value in request.model_dump().items():
        setattr(restaurant, field_name, value)
    if restaurant.address is None:
        restaurant.address = ""

    db.commit()
    db.refresh(restaurant)
    return restaurant


@router.get("/address", response_model=Optional[AddressResponse])
async def get_restaurant_address(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The structured address, or ``null`` when none has been saved."""
    ensure_role(current_user, Role.RESTAURANT_OWNER, OWNER_ONLY)
    return get_restaurant_for_owner(db, current_user).address_info


@router.put("/address", response_model=AddressResponse)
async def update_restaurant_address(
    request: AddressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create the address on first save, update it afterwards."""
    ensure_role(current_user, Role.RESTAURANT_OWNER, OWNER_ONLY)
    restaurant = get_restaurant_for_owner(db, current_user)

    address = restaurant.address_info
    if address is None:
        address = Address(restaurant_id=restaurant.id)
        db.add(address)
    for field_name, value in request.model_dump().items():
        setattr(address, field_name, value)

    db.commit()
    db.refresh(address)
    return address


@router.get("/payment", response_model=Union[PaymentInfoResponse, MissingPaymentInfo])
async def get_payment_info(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_role(current_user, Role.RESTAURANT_OWNER, OWNER_ONLY)
    payment_info = get_restaurant_for_owner(db, current_user).payment_info
    if payment_info is None:
        return MissingPaymentInfo()
    return PaymentInfoResponse.model_validate(payment_info)


@router.put("/payment", response_model=PaymentInfoResponse)
async def update_payment_info(
    request: PaymentInfoUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_role(current_user, Role.RESTAURANT_OWNER, OWNER_ONLY)
    restaurant = get_restaurant_for_owner(db, current_user)

    payment_info = restaurant.payment_info
    if payment_info is None:
        payment_info = PaymentInfo(restaurant_id=restaurant.id)
        db.add(payment_info)
    for field_name, value in request.model_dump().items():
        setattr(payment_info, field_name, value)

    db.commit()
    db.refresh(payment_info)
    return payment_info


@router.get("/locations", response_model=list[LocationResponse])
async def list_locations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All branches, main location first."""
    ensure_role(current_user, Role.RESTAURANT_OWNER, OWNER_ONLY)
    return get_restaurant_for_owner(db, current_user).locations


@router.post("/locations", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
async def create_location(
    request: LocationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Add a branch. Marking it main demotes the current main location."""
    ensure_role(current_user, Role.RESTAURANT_OWNER, OWNER_ONLY)
    restaurant = get_restaurant_for_owner(db, current_user)

    if request.is_main_location:
        _clear_main_location(db, restaurant)

    location = Location(restaurant_id=restaurant.id, **request.model_dump())
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


@router.get("/locations/{location_id}", response_model=LocationResponse)
async def get_location(
    location_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_role(current_user, Role.RESTAURANT_OWNER, OWNER_ONLY)
    restaurant = get_restaurant_for_owner(db, current_user)
    return _owned_location(db, restaurant, location_id)


@router.put("/locations/{location_id}", response_model=LocationResponse)
async def update_location(
    location_id: int,
    request: LocationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_role(current_user, Role.RESTAURANT_OWNER, OWNER_ONLY)
    restaurant = get_restaurant_for_owner(db, current_user)
    location = _owned_location(db, restaurant, location_id)

    if request.is_main_location and not location.is_main_location:
        _clear_main_location(db, restaurant, keep_id=location.id)
    for field_name, value in request.model_dump().items():
        setattr(location, field_name, value)

    db.commit()
    db.refresh(location)
    return location


@router.delete("/locations/{location_id}")
async def delete_location(
    location_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Remove a branch.

    The only location cannot be removed, nor can the main location while
    other branches exist.
    """
    ensure_role(current_user, Role.RESTAURANT_OWNER, OWNER_ONLY)
    restaurant = get_restaurant_for_owner(db, current_user)
    location = _owned_location(db, restaurant, location_id)

    location_count = db.query(Location).filter(Location.restaurant_id == restaurant.id).count()
    if location_count <= 1:
        raise InvalidStateError(
            "Cannot delete the only location. Restaurants must have at least one location."
        )
    if location.is_main_location:
        raise InvalidStateError(
            "Cannot delete the main location. Please set another location as main first."
        )

    db.delete(location)
    db.commit()
    return {"success": True}
