# backend/seed_listings.py
from rentsphere import create_app
from rentsphere.extensions import db
from rentsphere.models import Listing
from rentsphere.utils.user_ref import UserRef

app = create_app()

with app.app_context():
    # Listings belong to google user 1 (any existing account works)
    owner = UserRef("google", 1)

    listings = [
        Listing(
            owner=owner,
            title="Sony A7 III mirrorless camera",
            description="Body + 28-70mm kit lens, two batteries and charger.",
            category="cameras",
            price_per_day=900,
            latitude=12.9716,
            longitude=77.5946,
            address="MG Road, Bengaluru",
        ),
        Listing(
            owner=owner,
            title="Samsung 55\" 4K TV",
            description="Smart TV with wall mount, ideal for events.",
            category="tvs",
            price_per_day=1200,
            latitude=12.9352,
            longitude=77.6245,
            address="Koramangala, Bengaluru",
        ),
        Listing(
            owner=owner,
            title="DJI Mini 3 Pro",
            description="Drone with RC controller and three batteries.",
            category="drones",
            price_per_day=1500,
            latitude=12.9784,
            longitude=77.6408,
            address="Indiranagar, Bengaluru",
        ),
    ]

    db.session.add_all(listings)
    db.session.commit()

    print(f"Listings created: {[l.id for l in listings]}")
