import os

os.environ["DC_STATEHOOD"] = "1"

import us  # type: ignore

from cdelectmap.errors import UnknownStateError

fips_to_abbr: dict[str, str] = us.states.mapping("fips", "abbr")
abbr_to_fips: dict[str, str] = us.states.mapping("abbr", "fips")
abbr_to_name: dict[str, str] = us.states.mapping("abbr", "name")
name_to_abbr: dict[str, str] = us.states.mapping("name", "abbr")
ucname_to_abbr: dict[str, str] = {
    name.upper(): abbr for name, abbr in name_to_abbr.items()
}


def state_abbr(value: str) -> str:
    """Postal abbreviation for an abbreviation, name or upper-case name."""
    key = value.strip()
    if key.upper() in abbr_to_name:
        return key.upper()
    if key in name_to_abbr:
        return name_to_abbr[key]
    if key.upper() in ucname_to_abbr:
        return ucname_to_abbr[key.upper()]
    raise UnknownStateError(value)


def state_name(value: str) -> str:
    return abbr_to_name[state_abbr(value)]


if __name__ == "__main__":
    print(f"{state_abbr('north carolina')=}")
