"""SQLAlchemy models for the console's external collaborators.

All models are imported here so ``Base.metadata`` knows every table.
"""

from mallconsole.models.base import Base, StringIdMixin, TimestampMixin
from mallconsole.models.document import Document
from mallconsole.models.credential import Credential

__all__ = [
    "Base",
    "StringIdMixin",
    "TimestampMixin",
    "Document",
    "Credential",
]
