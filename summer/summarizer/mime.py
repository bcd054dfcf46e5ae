"""Extension-based MIME category lookup.

Categories are the top-level media types (``audio``, ``image``, ``text``, ...).
The lookup uses a small static table of common extensions first, then the
builtin table shipped with :mod:`mimetypes`. System ``mime.types`` files are
not consulted so results do not depend on the host.
"""

from __future__ import annotations

import mimetypes
import os
from functools import lru_cache

MIME_CATEGORIES = frozenset(
    {
        "application",
        "audio",
        "font",
        "image",
        "inode",
        "message",
        "model",
        "multipart",
        "text",
        "video",
        "x-content",
        "x-epoc",
    }
)

_EXTRA_CATEGORIES: dict[str, str] = {
    # audio
    "aac": "audio",
    "flac": "audio",
    "m4a": "audio",
    "mka": "audio",
    "oga": "audio",
    "ogg": "audio",
    "opus": "audio",
    "wma": "audio",
    # video
    "flv": "video",
    "m4v": "video",
    "mkv": "video",
    "ogv": "video",
    "webm": "video",
    "wmv": "video",
    # image
    "avif": "image",
    "heic": "image",
    "jxl": "image",
    "psd": "image",
    "webp": "image",
    "xcf": "image",
    # text
    "adoc": "text",
    "go": "text",
    "log": "text",
    "markdown": "text",
    "md": "text",
    "org": "text",
    "rs": "text",
    "rst": "text",
    "scss": "text",
    "tex": "text",
    # fonts
    "otf": "font",
    "ttf": "font",
    "woff": "font",
    "woff2": "font",
    # application
    "gz": "application",
    "toml": "application",
    "xz": "application",
    "yaml": "application",
    "yml": "application",
    "zst": "application",
}


@lru_cache(maxsize=1)
def _builtin_types() -> mimetypes.MimeTypes:
    return mimetypes.MimeTypes()


def extension_of(name: str) -> str | None:
    """Return the lower-cased extension of ``name`` without the dot."""
    _stem, ext = os.path.splitext(name)
    if not ext or ext == ".":
        return None
    return ext[1:].lower()


@lru_cache(maxsize=4096)
def category_for_extension(ext: str) -> str | None:
    category = _EXTRA_CATEGORIES.get(ext)
    if category is not None:
        return category
    db = _builtin_types()
    mime_type = db.types_map[True].get(f".{ext}") or db.types_map[False].get(f".{ext}")
    if mime_type is None:
        return None
    return mime_type.split("/", 1)[0]


def mime_category(name: str) -> str | None:
    """Return the MIME category for a file name, ``None`` when unknown."""
    ext = extension_of(name)
    if ext is None:
        return None
    return category_for_extension(ext)


__all__ = [
    "MIME_CATEGORIES",
    "extension_of",
    "category_for_extension",
    "mime_category",
]
