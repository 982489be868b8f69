from sqlalchemy import Column, String, Float, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from catalog_api.database import Base


class Rating(Base):
    __tablename__ = "ratings"

    movie_id = Column(String, ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True, index=True)
    rater_id = Column(String, primary_key=True)
    rating = Column(Float, nullable=False)  # 0.5 - 5.0 in half steps
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    movie = relationship("Movie", back_populates="ratings")

    # One rating per rater per movie comes from the composite primary key
    __table_args__ = (
        CheckConstraint("rating >= 0.5 AND rating <= 5.0", name="rating_range"),
    )
