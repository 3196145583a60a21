from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from shortlink_app.database.connection import Base
from shortlink_app.utils.time import utcnow


class Visit(Base):
    """One recorded redirect. Created once, never updated."""
    __tablename__ = "visits"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    link_id = Column(Integer, ForeignKey("links.id", ondelete="CASCADE"), nullable=False)
    visitor_ip = Column(String(45), nullable=False)  # IPv4 or IPv6
    visited_at = Column(DateTime, nullable=False, default=utcnow)

    link = relationship("Link", back_populates="visits")

    __table_args__ = (
        Index("idx_visits_link_visited_at", "link_id", "visited_at"),
    )

    def __repr__(self):
        return f"<Visit {self.id} for link {self.link_id}>"
