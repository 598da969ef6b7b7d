import re
from typing import List, Optional, Sequence, TypeVar

import bleach

T = TypeVar("T")


def sanitize_input(value: Optional[str]) -> str:
    """Normalise a free-text search needle before it is matched against the catalog.

    Markup is stripped with bleach, statement separators (``;`` and ``--``)
    and NUL bytes are dropped, and the result is trimmed. ``None`` becomes the
    empty needle, which matches everything.
    """
    if value is None:
        return ""
    # remove NULL bytes
    val = value.replace("\x00", "")
    # strip tags
    val = bleach.clean(val, strip=True)
    # remove common SQL comment and statement separators
    val = re.sub(r"(--|;)", "", val)
    return val.strip()


def paginate(items: Sequence[T], page: int, limit: int) -> List[T]:
    start = (page - 1) * limit
    return list(items[start:start + limit])
