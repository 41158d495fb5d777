"""Mock venue inventory — deterministic demo data when no provider key is configured."""

import hashlib
import logging
import random

from pickforme.schemas.venue import Coordinates, Venue

logger = logging.getLogger(__name__)

# Search category aliases → booking category
CATEGORY_ALIASES: dict[str, str] = {
    "restaurants": "dining",
    "food": "dining",
    "dining": "dining",
    "hotels": "accommodation",
    "hotelstravel": "accommodation",
    "bedandbreakfast": "accommodation",
    "hostels": "accommodation",
    "accommodation": "accommodation",
    "museums": "attraction",
    "tours": "attraction",
    "amusementparks": "attraction",
    "zoos": "attraction",
    "attraction": "attraction",
    "transport": "transportation",
    "carrental": "transportation",
    "taxis": "transportation",
    "transportation": "transportation",
    "theaters": "entertainment",
    "musicvenues": "entertainment",
    "comedyclubs": "entertainment",
    "entertainment": "entertainment",
}

# (name, [(alias, title)], base rating, price tier)
TEMPLATES: dict[str, list[tuple[str, list[tuple[str, str]], float, int]]] = {
    "dining": [
        ("Trattoria Roma", [("italian", "Italian")], 4.5, 2),
        ("Golden Lotus", [("chinese", "Chinese"), ("dimsum", "Dim Sum")], 4.2, 2),
        ("Le Petit Jardin", [("french", "French")], 4.7, 4),
        ("Taqueria El Sol", [("mexican", "Mexican"), ("hotdogs", "Fast Food")], 4.0, 1),
        ("Sakura House", [("japanese", "Japanese"), ("sushi", "Sushi Bars")], 4.6, 3),
        ("Green Table", [("vegan", "Vegan"), ("salad", "Salad")], 4.3, 2),
        ("Smokehouse 21", [("bbq", "Barbeque"), ("tradamerican", "American (Traditional)")], 4.1, 2),
        ("Spice Route", [("indpak", "Indian")], 4.4, 2),
    ],
    "accommodation": [
        ("Harborview Hotel", [("hotels", "Hotels")], 4.3, 3),
        ("The Parkside Inn", [("hotels", "Hotels")], 4.0, 2),
        ("Maple Street B&B", [("bedandbreakfast", "Bed & Breakfast")], 4.6, 2),
        ("Backpackers Hostel", [("hostels", "Hostels")], 3.8, 1),
        ("Grand Meridian", [("hotels", "Hotels"), ("resorts", "Resorts")], 4.7, 4),
    ],
    "attraction": [
        ("City Art Museum", [("museums", "Museums")], 4.7, 2),
        ("Harbor Walking Tours", [("tours", "Tours")], 4.5, 2),
        ("Wild Kingdom Zoo", [("zoos", "Zoos")], 4.4, 2),
        ("Thrill Park", [("amusementparks", "Amusement Parks")], 4.1, 3),
    ],
    "transportation": [
        ("Metro Car Rental", [("carrental", "Car Rental")], 3.9, 2),
        ("Yellow Cab Co.", [("taxis", "Taxis")], 3.6, 2),
        ("Coastline Rail", [("trainstations", "Train Stations")], 4.2, 2),
    ],
    "entertainment": [
        ("Orpheum Theatre", [("theaters", "Performing Arts")], 4.8, 3),
        ("Blue Note Club", [("musicvenues", "Music Venues"), ("jazzandblues", "Jazz & Blues")], 4.5, 2),
        ("Laugh Factory", [("comedyclubs", "Comedy Clubs")], 4.3, 2),
    ],
}

# Capability flag per category and the share of venues that advertise it
CAPABILITIES: dict[str, tuple[str, float]] = {
    "dining": ("restaurant_reservation", 0.7),
    "accommodation": ("hotel_reservation", 0.8),
    "attraction": ("ticket_sales", 0.75),
    "transportation": ("transportation_booking", 0.5),
    "entertainment": ("event_tickets", 0.8),
}

EXTRA_TRANSACTIONS = ["delivery", "pickup"]
STREETS = ["Market St", "Main St", "Broadway", "Harbor Blvd", "Oak Ave", "2nd St"]


def _slug(text: str) -> str:
    return "".join(ch for ch in text.lower() if ch.isalnum()) or "anywhere"


def _rng(*parts: str) -> random.Random:
    seed_str = "_".join(parts)
    seed = int(hashlib.md5(seed_str.encode()).hexdigest()[:8], 16)
    return random.Random(seed)


class MockVenueInventory:
    """Generates the same venues for the same city and category every time."""

    def resolve_category(self, categories: str | None, term: str | None = None) -> str:
        for raw in [*(categories or "").split(","), *(term or "").split()]:
            category = CATEGORY_ALIASES.get(raw.strip().lower())
            if category:
                return category
        return "dining"

    def venues_for(self, city: str, category: str) -> list[Venue]:
        city_slug = _slug(city)
        rng = _rng("venues", city_slug, category)
        capability, share = CAPABILITIES[category]

        venues = []
        for i, (name, cats, base_rating, tier) in enumerate(TEMPLATES[category]):
            transactions = [capability] if rng.random() < share else []
            if category == "dining":
                transactions += rng.sample(EXTRA_TRANSACTIONS, rng.randint(0, 2))
            area = rng.randint(200, 999)
            venues.append(Venue(
                id=f"mock-{category}-{city_slug}-{i}",
                name=name,
                rating=round(min(5.0, max(1.0, base_rating + rng.uniform(-0.3, 0.2))), 1),
                review_count=rng.choice([8, 35, 120, 480, 1500]) + rng.randint(0, 20),
                price=tier,
                categories=[{"alias": a, "title": t} for a, t in cats],
                distance=round(rng.uniform(0.2, 8.0), 1),
                coordinates=Coordinates(
                    latitude=round(37.77 + rng.uniform(-0.05, 0.05), 5),
                    longitude=round(-122.42 + rng.uniform(-0.05, 0.05), 5),
                ),
                address=f"{rng.randint(10, 2999)} {rng.choice(STREETS)}",
                transactions=transactions,
                phone=f"+1415555{area}{i}",
                display_phone=f"(415) 555-{area}{i}",
                url=f"https://www.yelp.com/biz/{_slug(name)}-{city_slug}",
            ))
        return venues

    def search(
        self,
        location: str | None,
        term: str | None = None,
        categories: str | None = None,
        price: str | None = None,
        limit: int = 20,
    ) -> list[Venue]:
        category = self.resolve_category(categories, term)
        venues = self.venues_for(location or "San Francisco", category)

        if price:
            tokens = [p.strip() for p in price.split(",") if p.strip()]
            tiers = {int(t) if t.isdigit() else len(t) for t in tokens}
            venues = [v for v in venues if v.price in tiers]
        if term:
            needle = term.lower()
            matching = [
                v for v in venues
                if needle in v.name.lower() or any(needle in c.title.lower() for c in v.categories)
            ]
            venues = matching or venues

        logger.debug(f"Mock {category} search in {location or 'San Francisco'}: {len(venues)} venues")
        return sorted(venues, key=lambda v: v.distance or 0)[:limit]

    def get(self, venue_id: str) -> Venue | None:
        """Rebuild a mock venue from its id (mock-<category>-<city>-<n>)."""
        parts = venue_id.split("-")
        if len(parts) != 4 or parts[0] != "mock" or parts[1] not in TEMPLATES:
            return None
        _, category, city_slug, _ = parts
        return next((v for v in self.venues_for(city_slug, category) if v.id == venue_id), None)
