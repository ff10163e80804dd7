import html
from typing import Optional
import bleach


def sanitize_input(value: Optional[str]) -> str:
    """Sanitize free text (delivery addresses) before it is stored and displayed.

    - Removes NULL bytes
    - Strips HTML tags using bleach.clean(..., strip=True)
    - Undoes bleach's entity escaping so plain "&", "<" and ">" survive as text
    - Collapses runs of whitespace and trims
    """
    if value is None:
        return ""
    val = value.replace("\x00", "")
    val = html.unescape(bleach.clean(val, tags=set(), strip=True))
    return " ".join(val.split())
