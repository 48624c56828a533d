"""pet4bnd: package export version tracking.

Parses `.pet` package export descriptions, resolves the target versions of the
bundle and its exported packages, validates version constraints and writes the
results back (into the source, a bnd fragment or a properties file).
"""

from __future__ import annotations

from pet4bnd.codecs.pet import parse_pet_text, read_pet, write_pet
from pet4bnd.core import Document, LoggingResolver, Version, VersionResolver, VersionVariance

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Document",
    "LoggingResolver",
    "Version",
    "VersionResolver",
    "VersionVariance",
    "parse_pet_text",
    "read_pet",
    "write_pet",
]
