# Supported filter values and the sentinels that mean "no constraint".

# Upper price bound for "$N+" ranges. 2**53 - 1 is the largest integer a JSON
# consumer on the other end can hold exactly, so it survives serialization.
UNBOUNDED_PRICE = 2**53 - 1

DEFAULT_SORT = "newest"
SORT_OPTIONS = ("newest", "price_low", "price_high")

ANY_NEIGHBORHOOD = "Any"
ANY_COUNT = "0"  # bedrooms / bathrooms

CATEGORY_SENTINELS = {"all", "Any Category"}
ROOM_TYPE_SENTINELS = {"all", "Any Type"}
RENT_RANGE_SENTINELS = {"any", "Any Price"}
ANY_PRICE_LABEL = "any price"  # compared case-insensitively by the parser

CATEGORIES = ("Single Room", "Apartment")
ROOM_TYPES = ("Shared Room", "Single Room")

NEIGHBORHOODS = (
    "Allston", "Back Bay", "Beacon Hill", "Brighton", "Charlestown", "Chinatown",
    "Dorchester", "Fenway", "Hyde Park", "Jamaica Plain", "Mattapan", "Mission Hill",
    "North End", "Roslindale", "Roxbury", "South Boston", "South End", "West End",
    "West Roxbury", "Wharf District",
)

RENT_RANGES = (
    "$500 - $1000",
    "$1000 - $1500",
    "$1500 - $2000",
    "$2000 - $2500",
    "$3000+",
)

# Map legend buckets for a page of results (upper bounds, inclusive).
AFFORDABLE_MAX_RENT = 2000
MID_RANGE_MAX_RENT = 3000


def normalize_sentinel(value: str | None, sentinels: set[str]) -> str | None:
    if value is None or value in sentinels:
        return None
    return value
