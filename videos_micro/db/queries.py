"""Query helpers for the videos table."""

import uuid
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from models.video_models import Video


def create_video(db: Session, *, user_id: uuid.UUID, title: str, description: Optional[str] = None) -> Video:
    video = Video(user_id=user_id, title=title, description=description)
    db.add(video)
    db.commit()
    db.refresh(video)
    return video


def get_video(db: Session, video_id: uuid.UUID) -> Optional[Video]:
    return db.query(Video).filter(Video.id == video_id).first()


def list_videos_for_user(db: Session, user_id: uuid.UUID) -> List[Video]:
    return (
        db.query(Video)
        .filter(Video.user_id == user_id)
        .order_by(desc(Video.created_at))
        .all()
    )


def update_video(db: Session, video: Video) -> None:
    """Persist pending changes on ``video``. Rolls back and re-raises on failure."""
    try:
        db.add(video)
        db.commit()
    except Exception:
        db.rollback()
        raise
