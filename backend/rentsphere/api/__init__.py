from .listing_routes import bp as listings_bp
from .rental_request_routes import bp as rental_requests_bp
from .user_routes import bp as users_bp

__all__ = [
    "listings_bp",
    "rental_requests_bp",
    "users_bp",
]
