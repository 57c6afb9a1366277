from types import MappingProxyType

# Cities without their own rows in the PSF table, mapped to the market that prices them.
CITY_ALIASES = MappingProxyType({
    "Etobicoke": "Toronto",    # part of Toronto proper
    "North York": "Toronto",
    "Oakville": "Markham",     # high-value 905 market, tracks Markham/Richmond Hill
})

# Offered in the valuation form
SUPPORTED_CITIES = (
    "Toronto",
    "Mississauga",
    "Vaughan",
    "Markham",
    "Richmond Hill",
    "Oakville",
    "Brampton",
    "Etobicoke",
    "North York",
    "Scarborough",
    "Ajax",
    "Pickering",
)

SUPPORTED_YEARS = (2019, 2020, 2021, 2022, 2023, 2024)

def normalize_city(city: str) -> str:
    """Map a city to the key its market data is stored under; unknown cities pass through."""
    return CITY_ALIASES.get(city, city)
