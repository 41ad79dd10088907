"""File name helpers — extensions, mime types, image detection."""

IMAGE_EXTS = ("gif", "jpg", "jpeg", "png", "svg", "webp", "bmp")
VECTOR_MIME_TYPES = ("image/svg+xml",)

_MIME_TYPES = {
    "png": "image/png",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "svg": "image/svg+xml",
}


def get_ext(name: str) -> str:
    """Extension without the dot, "" if none."""
    i = name.rfind(".")
    return name[i + 1:] if i > -1 else ""


def name_without_ext(name: str) -> str:
    i = name.rfind(".")
    return name[:i] if i > -1 else name


def basename(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1]


def dirname(path: str) -> str:
    head = path.rstrip("/").rsplit("/", 1)[0]
    return head if head else "/"


def is_image(name: str) -> bool:
    return get_ext(name).lower() in IMAGE_EXTS


def get_mime_type(name: str) -> str | None:
    return _MIME_TYPES.get(get_ext(name).lower())


def is_vector(name: str) -> bool:
    """Formats the raster codec cannot render; served as-is."""
    return get_mime_type(name) in VECTOR_MIME_TYPES
