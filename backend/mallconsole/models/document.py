"""Generic document row backing every remote collection."""

from sqlalchemy import JSON, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mallconsole.models.base import Base, StringIdMixin, TimestampMixin


class Document(StringIdMixin, TimestampMixin, Base):
    """One schemaless document in a named collection.

    ``seq`` preserves storage order so list operations come back in the order
    documents were written. Field values live in ``data`` exactly as the
    console wrote them (camelCase keys, timestamps as ISO strings).
    """

    __tablename__ = "documents"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Collection name (e.g., 'shops', 'products', 'users')"
    )
    data: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Document fields"
    )

    __table_args__ = (
        Index("idx_documents_collection_seq", "collection", "seq"),
    )

    def __repr__(self) -> str:
        return f"<Document(collection='{self.collection}', id='{self.id}')>"
