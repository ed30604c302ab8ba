"""Static Delaware county → city lookup used by the county filter.

Cities that straddle a county line (Milford, Smyrna, Clayton) are listed
once, under Kent, so every city maps to exactly one county.
"""

from types import MappingProxyType

from insightbites.core.types import County

_COUNTY_CITIES: dict[County, tuple[str, ...]] = {
    County.SUSSEX: (
        "Seaford", "Georgetown", "Millsboro", "Laurel", "Milton", "Lewes",
        "Selbyville", "Ocean View", "Long Neck", "Bridgeville", "Delmar",
        "Millville", "Blades", "Rehoboth Beach", "Greenwood", "Bethany Beach",
        "Dagsboro", "Frankford",
    ),
    County.KENT: (
        "Dover", "Milford", "Smyrna", "Clayton", "Camden", "Rising Sun-Lebanon",
        "Highland Acres", "Harrington", "Dover Base Housing", "Riverview",
        "Kent Acres", "Cheswold", "Wyoming", "Woodside East", "Felton",
        "Rodney Village", "Frederica", "Houston", "Bowers", "Magnolia", "Kenton",
        "Little Creek", "Woodside", "Leipsic", "Viola", "Farmington", "Hartly",
    ),
    County.NEW_CASTLE: (
        "Wilmington", "Newark", "Middletown", "Bear", "Glasgow", "Brookside",
        "Hockessin", "Pike Creek Valley", "Claymont", "North Star",
        "Wilmington Manor", "Pike Creek", "Edgemoor", "Elsmere", "New Castle",
        "Greenville", "Townsend", "Delaware City", "Bellefonte", "Newport",
        "Arden", "Odessa", "Ardentown", "Ardencroft",
    ),
}


def validate_county_map(county_map) -> None:
    """Raise ValueError if any city is assigned to more than one county."""
    seen: dict[str, County] = {}
    for county, cities in county_map.items():
        for city in cities:
            owner = seen.get(city)
            if owner is not None and owner != county:
                raise ValueError(
                    f"City {city!r} appears in both {owner.value} and {county.value}"
                )
            seen[city] = county


validate_county_map(_COUNTY_CITIES)

COUNTY_MAP = MappingProxyType(_COUNTY_CITIES)


def parse_county(name: str) -> County:
    """Resolve a county by display name, case-insensitively.

    'kent' → County.KENT, 'new castle' → County.NEW_CASTLE
    """
    key = " ".join(name.split()).lower()
    for county in County:
        if county.value.lower() == key:
            return county
    raise ValueError(f"Unknown county: {name!r}. Available: {[c.value for c in County]}")


def county_for_city(city: str) -> County | None:
    """Reverse lookup: which county a city belongs to, if any."""
    for county, cities in COUNTY_MAP.items():
        if city in cities:
            return county
    return None
