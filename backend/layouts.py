import logging
from string import ascii_uppercase

logger = logging.getLogger(__name__)


def columns_for(capacity):
    """Seats per row, kept small so labels stay readable."""
    if capacity <= 30:
        return 5
    if capacity <= 60:
        return 10
    if capacity <= 100:
        return 10
    return 12


def row_label(row):
    # A..Z, then AA..AZ, BA.. like spreadsheet columns
    if row < 26:
        return ascii_uppercase[row]
    return row_label(row // 26 - 1) + ascii_uppercase[row % 26]


def seat_label(filled, columns):
    row, col = divmod(filled, columns)
    return f"{row_label(row)}{col + 1}"


def generate_layout(capacity):
    columns = columns_for(capacity)
    return [seat_label(filled, columns) for filled in range(capacity)]


def sort_venues(venues):
    usable = []
    for venue in venues:
        if venue.capacity is None or venue.capacity <= 0:
            logger.warning("Skipping venue %s with capacity %s", venue.name, venue.capacity)
            continue
        usable.append(venue)

    return sorted(usable, key=lambda v: v.capacity, reverse=True)
