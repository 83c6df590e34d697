"""Event model definition."""

from typing import Dict, Any, Optional

from sqlalchemy import Column, String, Text, DateTime, Float, Boolean, Index
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow, isoformat_utc

CATEGORIES = (
    'Music',
    'Sports',
    'Business',
    'Arts',
    'Food',
    'Health',
    'Technology',
    'Education',
    'Entertainment',
    'Other',
)


class Event(Base):
    """
    Community event created by a user.

    Fields:
        id: Unique identifier (UUID string)
        title: Event title
        description: Event description
        date: When the event takes place (naive UTC)
        time: Free-text start time in HH:MM form
        location_address: Street address
        location_lat / location_lng: Optional coordinates (stored, unused)
        category: One of CATEGORIES
        image: Image URL
        price: Ticket price, 0 for free events
        organizer_id: User who created the event, set once at creation
        is_active: False once the organizer's account is removed
        created_at / updated_at: Bookkeeping timestamps
    """
    __tablename__ = 'events'
    __table_args__ = (
        Index('ix_events_date_active', 'date', 'is_active'),
        Index('ix_events_category_active', 'category', 'is_active'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(DateTime, nullable=False)
    time = Column(String(5), nullable=False)
    location_address = Column(String(500), nullable=False)
    location_lat = Column(Float, nullable=True)
    location_lng = Column(Float, nullable=True)
    category = Column(String(20), nullable=False)
    image = Column(String(500), nullable=False)
    price = Column(Float, nullable=False, default=0)
    organizer_id = Column(String(36), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    organizer = relationship(
        'User',
        primaryjoin='foreign(Event.organizer_id) == User.id',
        viewonly=True,
    )

    @property
    def location(self) -> Dict[str, Any]:
        """Location as a nested address/coordinates mapping."""
        location = {'address': self.location_address}
        if self.location_lat is not None or self.location_lng is not None:
            location['coordinates'] = {'lat': self.location_lat, 'lng': self.location_lng}
        return location

    def to_dict(self, is_saved: Optional[bool] = None) -> Dict[str, Any]:
        """Convert to dictionary, optionally annotated with the caller's isSaved flag."""
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'date': isoformat_utc(self.date),
            'time': self.time,
            'location': self.location,
            'category': self.category,
            'image': self.image,
            'price': self.price,
            'organizer': {
                'id': self.organizer_id,
                'name': self.organizer.name if self.organizer else None,
            },
            'isActive': self.is_active,
            'createdAt': isoformat_utc(self.created_at),
            'updatedAt': isoformat_utc(self.updated_at),
        }
        if is_saved is not None:
            data['isSaved'] = is_saved
        return data

    def __str__(self) -> str:
        """String representation."""
        return f"Event(id={self.id}, title={self.title}, date={self.date})"
