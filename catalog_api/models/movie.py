from sqlalchemy import Column, String, BigInteger, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from catalog_api.database import Base


class Movie(Base):
    __tablename__ = "movies"

    id = Column(String, primary_key=True)  # time-derived, see utils.ids
    title = Column(String, nullable=False, unique=True)
    release_date = Column(String, nullable=False, index=True)  # YYYY-MM-DD
    genre = Column(String, nullable=False, index=True)
    distributor = Column(String)
    budget = Column(BigInteger)
    mpa_rating = Column(String)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships (rows are removed by ON DELETE CASCADE in the database)
    box_office = relationship("BoxOffice", uselist=False, back_populates="movie", passive_deletes=True)
    ratings = relationship("Rating", back_populates="movie", passive_deletes=True)

    def __repr__(self):
        return f"<Movie(id={self.id}, title='{self.title}')>"
