import re

ACADEMIC_YEAR_REGEX = re.compile(r"^\d{4}-\d{4}$")


def validate_academic_year(value: str) -> str:
    """
    Check an academic year of the form YYYY-YYYY spanning consecutive years.

    Examples:
        >>> validate_academic_year("2024-2025")
        '2024-2025'
        >>> validate_academic_year("2024-2026")
        Traceback (most recent call last):
        ...
        ValueError: Academic year range must be consecutive (e.g., 2024-2025).
    """
    value = value.strip()
    if not ACADEMIC_YEAR_REGEX.match(value):
        raise ValueError("Academic year format must be YYYY-YYYY (e.g., 2024-2025).")
    start, end = (int(part) for part in value.split("-"))
    if start + 1 != end:
        raise ValueError("Academic year range must be consecutive (e.g., 2024-2025).")
    return value
