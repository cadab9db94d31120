from sqlalchemy import Column, String, Text, DateTime, Uuid
from datetime import datetime
import uuid
from db.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)  # Owner, never reassigned
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Public URLs
    thumbnail_url = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Video(id={self.id}, title={self.title})>"
