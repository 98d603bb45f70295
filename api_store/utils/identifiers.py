import uuid

from slugify import slugify


def generate_uuid() -> str:
    return str(uuid.uuid4())


def generate_id_from_text(text: str) -> str:
    """
    Slug of the text plus an 8-character random suffix, e.g. ``get-forecast-1a2b3c4d``.
    Falls back to a plain UUID when the text has no sluggable characters.
    """
    slug = slugify(text or "")
    if not slug:
        return generate_uuid()
    return f"{slug}-{uuid.uuid4().hex[:8]}"
