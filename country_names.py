"""
Country-name normalization.

The world geometry used by the maps is keyed by English country names
("United States", "Korea", "Czech Rep.", ...). Both data sources spell some
countries differently, so every record passes through here before it is
matched against the geometry.
"""

# Source A: the area snapshot ships a local (Chinese) name and an English name.
# A few records carry a missing or wrong English name.
LOCAL_NAME_OVERRIDES = {
    "阿联酋": "United Arab Emirates",
    "钻石公主号邮轮": "Diamond Princess Cruise",
}

ENGLISH_NAME_OVERRIDES = {
    "United States of America": "United States",
}

# Source B: worldometers-style names -> geometry names.
# Note: The list is not complete! Add to it as needed
SNAPSHOT_NAME_OVERRIDES = {
    "USA": "United States",
    "UK": "United Kingdom",
    "S. Korea": "Korea",
    "North Korea": "Dem. Rep. Korea",
    "UAE": "United Arab Emirates",
    "Czechia": "Czech Rep.",
    "DRC": "Dem. Rep. Congo",
    "CAR": "Central African Rep.",
    "Dominican Republic": "Dominican Rep.",
    "Bosnia and Herzegovina": "Bosnia and Herz.",
    "North Macedonia": "Macedonia",
    "South Sudan": "S. Sudan",
    "Laos": "Lao PDR",
    "Ivory Coast": "Côte d'Ivoire",
    "Equatorial Guinea": "Eq. Guinea",
    "Western Sahara": "W. Sahara",
    "Faeroe Islands": "Faeroe Is.",
    "Falkland Islands": "Falkland Is.",
    "Solomon Islands": "Solomon Is.",
    "Eswatini": "Swaziland",
    "Diamond Princess": "Diamond Princess Cruise",
}


def _clean(name):
    if not isinstance(name, str):
        return ""
    return name.strip()


def canonical_name(local_name=None, english_name=None):
    """Canonical geometry name for an area-snapshot record.

    Local-name overrides win over the English name, then the English-name
    table applies. Anything unmapped passes through (stripped); a record with
    neither name yields "" and is dropped later by the view builders.
    """
    local = _clean(local_name)
    if local in LOCAL_NAME_OVERRIDES:
        return LOCAL_NAME_OVERRIDES[local]

    english = _clean(english_name)
    return ENGLISH_NAME_OVERRIDES.get(english, english)


def convert_name_to_map(name):
    """Geometry name for a countries-snapshot record."""
    name = _clean(name)
    name = SNAPSHOT_NAME_OVERRIDES.get(name, name)
    return ENGLISH_NAME_OVERRIDES.get(name, name)
