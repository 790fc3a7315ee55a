"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions found in SPA bundles to Content-Type values.

A typical build output (Vite, webpack, Angular CLI, ...) looks like:

    dist/
    ├── index.html              text/html; charset=utf-8
    ├── favicon.ico             image/x-icon
    ├── manifest.webmanifest    application/manifest+json; charset=utf-8
    └── static/
        ├── js/main.4f1c.js     text/javascript; charset=utf-8
        ├── js/main.4f1c.js.map application/json; charset=utf-8
        ├── css/main.9ab0.css   text/css; charset=utf-8
        ├── media/logo.svg      image/svg+xml; charset=utf-8
        └── fonts/inter.woff2   font/woff2

Serving JavaScript with the wrong type breaks the app: browsers refuse to
execute module scripts whose Content-Type is not a JavaScript type.

Unknown extensions fall back to application/octet-stream.

=============================================================================
"""

from pathlib import Path
from typing import Optional


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # DOCUMENTS, SCRIPTS, STYLES
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",     # ES modules
    ".json": "application/json",
    ".map": "application/json",    # Source maps
    ".webmanifest": "application/manifest+json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".wasm": "application/wasm",

    # -------------------------------------------------------------------------
    # IMAGES
    # -------------------------------------------------------------------------
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",

    # -------------------------------------------------------------------------
    # FONTS
    # -------------------------------------------------------------------------
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",

    # -------------------------------------------------------------------------
    # MEDIA
    # -------------------------------------------------------------------------
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".pdf": "application/pdf",
}

DEFAULT_MIME_TYPE = "application/octet-stream"

_TEXT_APPLICATION_TYPES = {
    "application/json",
    "application/manifest+json",
    "application/xml",
    "image/svg+xml",
}


# =============================================================================
# PUBLIC FUNCTIONS
# =============================================================================

def get_mime_type(path: str | Path, default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    Examples:
        >>> get_mime_type("static/js/app.js")
        'text/javascript'

        >>> get_mime_type("LOGO.PNG")
        'image/png'

        >>> get_mime_type("blob.xyz")
        'application/octet-stream'
    """
    if isinstance(path, str):
        path = Path(path)

    extension = path.suffix.lower()
    return MIME_TYPES.get(extension, default or DEFAULT_MIME_TYPE)


def is_text_type(mime_type: str) -> bool:
    """Check if a MIME type represents text content (and so takes a charset)."""
    if mime_type.startswith("text/"):
        return True
    return mime_type in _TEXT_APPLICATION_TYPES


def get_content_type(path: str | Path, charset: str = "utf-8") -> str:
    """
    Get the full Content-Type header value for a file.

    Examples:
        >>> get_content_type("index.html")
        'text/html; charset=utf-8'

        >>> get_content_type("icon.png")
        'image/png'
    """
    mime_type = get_mime_type(path)

    if is_text_type(mime_type):
        return f"{mime_type}; charset={charset}"

    return mime_type
