"""Exception hierarchy for chordfinder.

Musical input that cannot be understood is never an exception: analysis
functions return ``None`` and the facade reports an ``invalid`` status.
The exceptions below cover programming and environment faults only.
"""


class ChordFinderError(Exception):
    """Base class for all chordfinder errors."""


class KeyCatalogError(ChordFinderError, ValueError):
    """A key definition violates the catalog invariants (raised at construction)."""


class HistoryError(ChordFinderError, OSError):
    """The history file could not be written."""
