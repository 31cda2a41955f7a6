"""hitcounter — core internal data models.

Plain dataclasses with no framework dependencies.
Database rows are converted to these at the storage boundary.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HitRecord:
    """One row of the ``hits`` table.

    ``target`` is taken verbatim from the request path (case-sensitive,
    may be empty). ``count`` is >= 1 once the row exists.
    """
    target: str
    count: int
