from collections.abc import Iterable, Sequence

LEARNER_FIELDS = ("name", "email", "phone")

# Header spellings seen in spreadsheets exported from other tools
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "full name", "learner name", "student name"),
    "email": ("email", "email address", "e-mail", "mail"),
    "phone": ("phone", "phone number", "mobile", "mobile number", "whatsapp"),
}


def _score(header: str, alias: str, threshold: float) -> float:
    h = header.strip().lower()
    a = alias.strip().lower()

    if not h or not a:
        return 0.0

    if h == a:
        return 1.0

    if h in a or a in h:
        shorter, longer = sorted((h, a), key=len)
        ratio = len(shorter) / len(longer)
        if ratio >= threshold:
            return ratio

    words = set(h.split())
    if words & set(a.split()):
        return 0.5

    return 0.0


def match_column(
    field_name: str,
    headers: Iterable[str],
    threshold: float = 0.8,
) -> str | None:
    """Best matching header for ``field_name`` or None"""
    aliases = FIELD_ALIASES.get(field_name, (field_name,))
    best_header = None
    best_score = 0.0

    for header in headers:
        score = max(_score(header, alias, threshold) for alias in aliases)
        if score > best_score:
            best_header, best_score = header, score

    return best_header


def match_columns(
    headers: Sequence[str],
    fields: Sequence[str] = LEARNER_FIELDS,
) -> dict[str, str | None]:
    """
    Map each learner field to a spreadsheet header.

    A header is used for at most one field. Fields without a good match map
    to None and must be mapped by hand.
    """
    mapping: dict[str, str | None] = {}
    remaining = list(headers)

    for field_name in fields:
        header = match_column(field_name, remaining)
        mapping[field_name] = header
        if header is not None:
            remaining.remove(header)

    return mapping
