"""Codecs for the `.pet` source format and the generated outputs.

- `.pet` import/export with lossless write-back (`pet.py`)
- bnd `Export-Package` fragment (`bnd.py`)
- Java properties dump (`properties.py`)
"""

from __future__ import annotations

__all__: list[str] = []
