"""
Box office enrichment attached to a movie at creation time
"""
from sqlalchemy import Column, String, BigInteger, ForeignKey
from sqlalchemy.orm import relationship
from catalog_api.database import Base


class BoxOffice(Base):
    """
    One row per movie that matched the upstream box office source.

    Attributes:
        movie_id: Owning movie (primary key, cascades on delete)
        currency: Upstream currency code, stored as given
        source: Upstream data source name
        last_updated: Upstream timestamp string, not re-validated
        revenue_worldwide: Worldwide gross (0 when upstream had no figure)
        revenue_opening_weekend_usa: Opening weekend gross, NULL when unknown
    """
    __tablename__ = "box_office"

    movie_id = Column(String, ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True)
    currency = Column(String, nullable=False)
    source = Column(String, nullable=False)
    last_updated = Column(String, nullable=False)
    revenue_worldwide = Column(BigInteger, nullable=False)
    revenue_opening_weekend_usa = Column(BigInteger)

    movie = relationship("Movie", back_populates="box_office")

    def __repr__(self):
        return f"<BoxOffice(movie_id={self.movie_id}, worldwide={self.revenue_worldwide})>"
