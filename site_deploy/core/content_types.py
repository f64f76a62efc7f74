"""Extension to media type lookup"""

import mimetypes
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from ..constants import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_CONTENT_TYPES,
    GZIP_SUFFIX,
    HTML_EXTENSIONS,
)


class ContentTypeTable:
    """Static extension table with ``mimetypes`` as a fallback

    Compression intermediates (``app.js.gz``) resolve to the media type
    of the file they were made from.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        self._types: Dict[str, str] = dict(DEFAULT_CONTENT_TYPES)
        for ext, media_type in (overrides or {}).items():
            self._types[str(ext).lstrip('.').lower()] = media_type

    @property
    def types(self) -> Dict[str, str]:
        return dict(self._types)

    def lookup(self, extension: str) -> str:
        """Media type for a bare extension such as ``js``"""
        ext = extension.lstrip('.').lower()
        if ext in self._types:
            return self._types[ext]
        guessed, _ = mimetypes.guess_type(f"file.{ext}", strict=False)
        return guessed or DEFAULT_CONTENT_TYPE

    def for_path(self, path: Union[str, Path]) -> str:
        """Media type for a file, looking through a ``.gz`` suffix"""
        return self.lookup(logical_extension(path))

    def for_file(self, path: Union[str, Path]) -> str:
        """Media type for a file served as is"""
        return self.lookup(Path(path).suffix)

    def is_html(self, path: Union[str, Path]) -> bool:
        return logical_extension(path) in HTML_EXTENSIONS


def strip_gzip_suffix(name: str) -> str:
    """``app.js.gz`` -> ``app.js``"""
    return name[:-len(GZIP_SUFFIX)] if name.endswith(GZIP_SUFFIX) else name


def logical_extension(path: Union[str, Path]) -> str:
    """Extension of the served file, ignoring a trailing ``.gz``"""
    name = strip_gzip_suffix(Path(path).name)
    return Path(name).suffix.lstrip('.').lower()
