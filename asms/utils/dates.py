from datetime import date, datetime

# Formats sent by the web form, the JSON API and the mobile client
DATE_OF_BIRTH_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


def parse_date_of_birth(value: str | date | datetime | None) -> date | None:
    """
    Normalize a date of birth to a date.

    Accepts date/datetime objects, ``YYYY-MM-DD``, ``MM/DD/YYYY`` and ISO date-times
    (``2001-04-09T00:00:00``, optionally with ``Z`` or an offset).

    Returns None when the value cannot be parsed; callers decide how to report it.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    for fmt in DATE_OF_BIRTH_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    if "T" in text:
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            return None

    return None
