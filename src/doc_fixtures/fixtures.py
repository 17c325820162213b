"""Reference fixture set: five documents each in the "red" and "blue" collections."""

from loguru import logger

from doc_fixtures.loader import load_all
from doc_fixtures.models import Document, LoadSummary
from doc_fixtures.store import FixtureStore

_RUSH_SONGWRITERS = ["Geddy Lee", "Alex Lifeson", "Neil Peart"]

RED_DOCUMENTS: list[Document] = [
    Document(
        uri="/test-data/red/song1.json",
        content={
            "id": "red-001",
            "title": "Tom Sawyer",
            "artist": "Rush",
            "album": "Moving Pictures",
            "year": 1981,
            "genre": "Progressive Rock",
            "duration": 285,
            "lyrics_sample": "A modern day warrior, mean mean stride",
            "rating": 5,
            "instruments": ["guitar", "bass", "drums", "keyboards"],
            "collections": ["red"],
            "metadata": {
                "songwriter": list(_RUSH_SONGWRITERS),
                "producer": "Terry Brown",
                "studio": "Le Studio",
                "country": "Canada",
            },
        },
    ),
    Document(
        uri="/test-data/red/song2.json",
        content={
            "id": "red-002",
            "title": "Limelight",
            "artist": "Rush",
            "album": "Moving Pictures",
            "year": 1981,
            "genre": "Progressive Rock",
            "duration": 263,
            "lyrics_sample": "Living on a lighted stage approaches the unreal",
            "rating": 5,
            "instruments": ["guitar", "bass", "drums"],
            "collections": ["red"],
            "metadata": {
                "songwriter": list(_RUSH_SONGWRITERS),
                "producer": "Terry Brown",
                "studio": "Le Studio",
                "country": "Canada",
            },
        },
    ),
    Document(
        uri="/test-data/red/product1.json",
        content={
            "id": "red-003",
            "name": "Epic Guitar Amplifier",
            "category": "Musical Equipment",
            "price": 1299.99,
            "brand": "RushTone",
            "model": "2112-Pro",
            "year": 2024,
            "specifications": {
                "watts": 100,
                "tubes": ["12AX7", "EL34"],
                "channels": 3,
                "reverb": True,
            },
            "collections": ["red"],
            "metadata": {
                "manufacturer": "Progressive Audio",
                "warranty": "5 years",
                "country": "USA",
            },
        },
    ),
    Document(
        uri="/test-data/red/customer1.json",
        content={
            "id": "red-004",
            "name": "Neil Percussion",
            "email": "neil.drums@rush.com",
            "age": 45,
            "location": "Toronto, Canada",
            "preferences": [
                "progressive rock",
                "complex rhythms",
                "philosophical lyrics",
            ],
            "purchase_history": [
                {"item": "Drum Kit", "price": 3500.00, "date": "2024-01-15"},
                {"item": "Cymbals Set", "price": 850.00, "date": "2024-02-20"},
            ],
            "collections": ["red"],
            "metadata": {
                "customer_since": "2020-03-15",
                "loyalty_tier": "Platinum",
                "total_spent": 4350.00,
            },
        },
    ),
    Document(
        uri="/test-data/red/article1.json",
        content={
            "id": "red-005",
            "title": "The Evolution of Progressive Rock",
            "author": "Music Historian",
            "publication_date": "2024-06-01",
            "category": "Music Analysis",
            "content": (
                "Progressive rock emerged in the late 1960s and reached its "
                "pinnacle with bands like Rush, Yes, and Genesis. The genre is "
                "characterized by complex compositions, virtuosic musicianship, "
                "and conceptual themes."
            ),
            "tags": [
                "progressive rock",
                "music history",
                "Rush",
                "complex compositions",
            ],
            "word_count": 2500,
            "collections": ["red"],
            "metadata": {
                "publisher": "Rock Chronicles",
                "language": "English",
                "views": 15420,
            },
        },
    ),
]

BLUE_DOCUMENTS: list[Document] = [
    Document(
        uri="/test-data/blue/song3.json",
        content={
            "id": "blue-001",
            "title": "Freewill",
            "artist": "Rush",
            "album": "Permanent Waves",
            "year": 1980,
            "genre": "Progressive Rock",
            "duration": 320,
            "lyrics_sample": "You can choose a ready guide in some celestial voice",
            "rating": 5,
            "instruments": ["guitar", "bass", "drums"],
            "collections": ["blue"],
            "metadata": {
                "songwriter": list(_RUSH_SONGWRITERS),
                "producer": "Terry Brown",
                "studio": "Advision Studios",
                "country": "Canada",
            },
        },
    ),
    Document(
        uri="/test-data/blue/song4.json",
        content={
            "id": "blue-002",
            "title": "The Spirit of Radio",
            "artist": "Rush",
            "album": "Permanent Waves",
            "year": 1980,
            "genre": "Progressive Rock",
            "duration": 297,
            "lyrics_sample": "Begin the day with a friendly voice",
            "rating": 4,
            "instruments": ["guitar", "bass", "drums"],
            "collections": ["blue"],
            "metadata": {
                "songwriter": list(_RUSH_SONGWRITERS),
                "producer": "Terry Brown",
                "studio": "Advision Studios",
                "country": "Canada",
            },
        },
    ),
    Document(
        uri="/test-data/blue/product2.json",
        content={
            "id": "blue-003",
            "name": "Synthesizer Workstation",
            "category": "Musical Equipment",
            "price": 2499.99,
            "brand": "ProgreSynth",
            "model": "Geddy-2112",
            "year": 2024,
            "specifications": {
                "keys": 88,
                "voices": 256,
                "presets": 1000,
                "sequencer": True,
            },
            "collections": ["blue"],
            "metadata": {
                "manufacturer": "Electronic Music Co",
                "warranty": "3 years",
                "country": "Japan",
            },
        },
    ),
    Document(
        uri="/test-data/blue/customer2.json",
        content={
            "id": "blue-004",
            "name": "Alex Strings",
            "email": "alex.guitar@rush.com",
            "age": 38,
            "location": "Vancouver, Canada",
            "preferences": [
                "guitar solos",
                "intricate compositions",
                "vintage gear",
            ],
            "purchase_history": [
                {"item": "Electric Guitar", "price": 2200.00, "date": "2024-03-10"},
                {"item": "Effects Pedals", "price": 450.00, "date": "2024-04-15"},
            ],
            "collections": ["blue"],
            "metadata": {
                "customer_since": "2021-07-20",
                "loyalty_tier": "Gold",
                "total_spent": 2650.00,
            },
        },
    ),
    Document(
        uri="/test-data/blue/event1.json",
        content={
            "id": "blue-005",
            "title": "Progressive Rock Festival 2024",
            "location": "Toronto Music Centre",
            "date": "2024-08-15",
            "time": "19:00",
            "category": "Music Event",
            "description": (
                "A celebration of progressive rock featuring tribute bands and "
                "original compositions inspired by the greatest prog rock legends."
            ),
            "ticket_price": 75.00,
            "capacity": 5000,
            "featured_bands": ["Rush Tribute", "Genesis Revival", "Yes Reimagined"],
            "collections": ["blue"],
            "metadata": {
                "organizer": "Prog Rock Productions",
                "venue_type": "Indoor Arena",
                "age_restriction": "All Ages",
            },
        },
    ),
]

REFERENCE_BATCHES: list[tuple[list[Document], str]] = [
    (RED_DOCUMENTS, "red"),
    (BLUE_DOCUMENTS, "blue"),
]

EXPECTED_COUNTS: dict[str, int] = {"red": 5, "blue": 5}

# Follow-up queries to try once the fixtures are loaded: (description, search kwargs)
SAMPLE_QUERIES: list[tuple[str, dict]] = [
    ("Count red documents", {"collections": ["red"]}),
    ("Count blue documents", {"collections": ["blue"]}),
    ("Search for Rush songs", {"collections": ["red", "blue"], "word": "Rush"}),
    ("Find documents by year", {"properties": {"year": 1981}}),
    ("Search in red collection only", {"collections": ["red"], "word": "guitar"}),
]


def load_reference_fixtures(
    store: FixtureStore, overwrite: bool = False, clear: bool = False
) -> LoadSummary:
    """Load the red and blue reference documents into ``store``."""
    summary = load_all(store, REFERENCE_BATCHES, overwrite=overwrite, clear=clear)
    logger.info("Test data loading complete")
    return summary
