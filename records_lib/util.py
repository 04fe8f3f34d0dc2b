import re
import uuid


def slugify(text, prefix: str = "") -> str:
    """Create a URL-safe slug optionally prefixed.

    Non-alphanumeric runs collapse to a single dash; accented letters are
    dropped rather than transliterated.
    """
    text = str(text).lower()
    text = re.sub(r'[^a-z0-9]+', '-', text)
    base = text.strip('-')
    return (prefix + base) if prefix else base


def new_record_id(label: str = "", max_slug: int = 48) -> str:
    """Return a fresh record id, readable when a label is given.

    `new_record_id("Town hall meeting")` -> `town-hall-meeting-1f3a9c2e`.
    """
    suffix = uuid.uuid4().hex[:8]
    slug = slugify(label)[:max_slug].strip('-')
    return f"{slug}-{suffix}" if slug else uuid.uuid4().hex
