# Page-number parsing and ordered tier selection shared by the feed and recommendations
import logging
from collections import namedtuple

from errors import ValidationError

# fetch is called with the arguments the caller supplies for that tier
Tier = namedtuple('Tier', ['name', 'fetch'])

# Largest accepted page; offsets stay within a signed 64-bit integer
MAX_PAGE = 2 ** 31 - 1


def parse_page(value, property_name):
    """Turn a 1-based page number (int or query-string text) into an int."""
    if isinstance(value, bool):
        raise ValidationError([property_name])
    if isinstance(value, str):
        value = value.strip()
        if not value.isdecimal() or len(value) > len(str(MAX_PAGE)):
            raise ValidationError([property_name])
        value = int(value)
    if not isinstance(value, int) or not 1 <= value <= MAX_PAGE:
        raise ValidationError([property_name])
    return value


def parse_pages(**pages):
    """Parse several page numbers at once, naming every invalid one."""
    parsed, invalid = {}, []
    for property_name, value in pages.items():
        try:
            parsed[property_name] = parse_page(value, property_name)
        except ValidationError:
            invalid.append(property_name)
    if invalid:
        raise ValidationError(invalid)
    return parsed


def page_offset(page, page_size):
    return (page - 1) * page_size


def first_non_empty(tiers, run):
    """Try tiers in order and return ``(tier, result)`` for the first non-empty result.

    ``run`` receives the tier and returns its result. If every tier comes up
    empty the last tier is returned with its (empty) result.
    """
    chosen, result = None, []
    for chosen in tiers:
        result = run(chosen)
        if result:
            break
    if chosen is not None:
        logging.debug(f"Tier '{chosen.name}' selected with {len(result)} result(s)")
    return chosen, result
