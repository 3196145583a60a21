from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from shortlink_app.database.connection import Base
from shortlink_app.utils.time import utcnow


class Link(Base):
    """
    Short code -> original URL mapping.

    short_code is unique and never changes after creation.
    click_count is a denormalized counter; visit rows are the source of truth.
    """
    __tablename__ = "links"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    original_url = Column(Text, nullable=False)
    # Note: unique=True automatically creates an index
    short_code = Column(String(20), unique=True, nullable=False, index=True)
    alias = Column(String(20), unique=True, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=True)
    click_count = Column(Integer, nullable=False, default=0)

    # DB-level cascade removes visits; passive_deletes skips loading them
    visits = relationship(
        "Visit",
        back_populates="link",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Link {self.short_code} -> {self.original_url}>"
