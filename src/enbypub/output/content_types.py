"""Content types guessed from file extensions."""

from __future__ import annotations

from collections.abc import Mapping

# Common web types; see MDN "Common MIME types"
CONTENT_TYPES: dict[str, str] = {
    # the web, in general
    "htm": "text/html",
    "html": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "mjs": "text/javascript",
    "json": "application/json",
    "jsonld": "application/ld+json",
    "xml": "application/xml",
    # documents
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",
    "tab": "text/tab-separated-values",
    "tsv": "text/tab-separated-values",
    "rtf": "application/rtf",
    "epub": "application/epub+zip",
    "pdf": "application/pdf",
    "odp": "application/vnd.oasis.opendocument.presentation",
    "fodp": "application/vnd.oasis.opendocument.presentation",
    "ods": "application/vnd.oasis.opendocument.spreadsheet",
    "fods": "application/vnd.oasis.opendocument.spreadsheet",
    "odt": "application/vnd.oasis.opendocument.text",
    "fodt": "application/vnd.oasis.opendocument.text",
    "odg": "application/vnd.oasis.opendocument.graphics",
    "fodg": "application/vnd.oasis.opendocument.graphics",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "vsd": "application/vnd.visio",
    "vsdx": "application/vnd.visio2013",
    # fonts
    "ttf": "font/ttf",
    "otf": "font/otf",
    "eot": "application/vnd.ms-fontobject",
    "woff": "font/woff",
    "woff2": "font/woff2",
    # images
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "png": "image/png",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "ico": "image/vnd.microsoft.icon",
    # audio
    "aac": "audio/aac",
    "m4a": "audio/mp4",
    "mp3": "audio/mpeg",
    "oga": "audio/ogg",
    "ogg": "audio/ogg",
    "opus": "audio/opus",
    "wav": "audio/wav",
    "weba": "audio/webm",
    # video
    "mp4": "video/mp4",
    "m4v": "video/mp4",
    "mkv": "video/x-matroska",
    "ogv": "video/ogg",
    "webm": "video/webm",
    "ogx": "application/ogg",
    # archives
    "gz": "application/gzip",
    "zip": "application/zip",
    "bz2": "application/x-bzip2",
    "7z": "application/x-7z-compressed",
    "xz": "application/x-xz",
    "tar": "application/x-tar",
    "jar": "application/java-archive",
}


def content_type_for(extension: str, overrides: Mapping[str, str] | None = None) -> str | None:
    """Return the content type for ``extension`` (with or without leading dots), or None.

    ``overrides`` is consulted first.

    Examples:
        >>> content_type_for(".HTML")
        'text/html'
        >>> content_type_for("md", {"md": "text/x-markdown"})
        'text/x-markdown'

    """
    ext = extension.lstrip(".").lower()
    if overrides and overrides.get(ext):
        return overrides[ext]
    return CONTENT_TYPES.get(ext)


def content_type_for_path(path: str, overrides: Mapping[str, str] | None = None) -> str | None:
    name = path.rsplit("/", 1)[-1]
    idx = name.rfind(".")
    if idx < 0:
        return None
    return content_type_for(name[idx:], overrides)
