"""Expose the ORM models at package level.

These re-exports are intentional so callers can import from
``models`` (e.g. `from models import Seed`) and so `Base.metadata` knows
every table. The `F401` noqa suppresses unused-import warnings.
"""

from .base import Base  # noqa: F401
from .clones import Clone  # noqa: F401
from .seeds import Seed  # noqa: F401
