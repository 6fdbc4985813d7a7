from .listing import Listing
from .rental_request import RentalRequest
from .delivery_event import DeliveryEvent
from .delivery_rating import DeliveryRating
from .user_rating import UserRating

__all__ = [
    "Listing",
    "RentalRequest",
    "DeliveryEvent",
    "DeliveryRating",
    "UserRating",
]
