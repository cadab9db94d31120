"""
Video Metadata & Thumbnail API

POST /api/videos                      - Create a video record for the caller
GET  /api/videos                      - List the caller's videos
GET  /api/videos/{videoID}            - Get one of the caller's videos
POST /api/videos/{videoID}/thumbnail  - Upload a thumbnail (multipart field "thumbnail")

Thumbnails are persisted by whichever ThumbnailStore the app was started
with, and the video's thumbnail_url is rewritten to point at it.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException
from typing import List
import logging
import uuid

from db.connection import db_dependency
from db.queries import create_video, get_video, list_videos_for_user, update_video
from Endpoints import auth
from Endpoints.auth import get_current_user
from schemas.video_schemas import VideoCreate, VideoResponse
from utils.thumbnail_store import (
    ThumbnailStore, ThumbnailStoreError, UnsupportedThumbnailType, get_thumbnail_store
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/videos", tags=["Videos"])

MAX_MEMORY = 10 << 20  # 10 MB of form data held in memory
THUMBNAIL_FIELD = "thumbnail"


def parse_video_id(video_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(video_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid ID")


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
async def create_video_record(
    video_request: VideoCreate,
    db: db_dependency,
    user_id: uuid.UUID = Depends(get_current_user)
):
    """
    Create a new video record owned by the current user
    """
    try:
        video = create_video(
            db,
            user_id=user_id,
            title=video_request.title.strip(),
            description=video_request.description
        )
        logger.info(f"🎬 Created video {video.id} for user {user_id}")
        return VideoResponse.model_validate(video)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to create video: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to create video"
        )


@router.get("", response_model=List[VideoResponse])
async def list_my_videos(
    db: db_dependency,
    user_id: uuid.UUID = Depends(get_current_user)
):
    """List the current user's videos, newest first"""
    videos = list_videos_for_user(db, user_id)
    return [VideoResponse.model_validate(video) for video in videos]


@router.get("/{videoID}", response_model=VideoResponse)
async def get_video_record(
    videoID: str,
    db: db_dependency,
    user_id: uuid.UUID = Depends(get_current_user)
):
    video_id = parse_video_id(videoID)
    video = get_video(db, video_id)
    if not video:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    if video.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only view your own videos")
    return VideoResponse.model_validate(video)


@router.post("/{videoID}/thumbnail", response_model=VideoResponse)
async def upload_thumbnail(
    videoID: str,
    request: Request,
    db: db_dependency,
    store: ThumbnailStore = Depends(get_thumbnail_store)
):
    """
    Upload a thumbnail image for one of the caller's videos.

    The id, token and form are checked in that order before anything is
    read from the body, and the form is closed on every path.
    """
    video_id = parse_video_id(videoID)

    token = auth.get_bearer_token(await auth.bearer_scheme(request))
    user_id = auth.validate_jwt(token, auth.SECRET_KEY)

    try:
        form = await request.form(max_part_size=MAX_MEMORY)
    except (MultiPartException, StarletteHTTPException, ValueError) as e:
        logger.warning(f"⚠️ Unable to parse thumbnail form for video {video_id}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unable to parse form")

    try:
        thumbnail = form.get(THUMBNAIL_FIELD)
        if not isinstance(thumbnail, StarletteUploadFile):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unable to get file from form")

        video = get_video(db, video_id)
        if not video:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")

        if video.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only upload thumbnails for your own videos"
            )

        try:
            thumbnail_url = await store.save(video_id, thumbnail)
        except UnsupportedThumbnailType as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except ThumbnailStoreError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

        video.thumbnail_url = thumbnail_url
        try:
            update_video(db, video)
        except SQLAlchemyError as e:
            logger.error(f"❌ Unable to update video {video_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to update video")

        # Reload so the response carries the committed updated_at
        try:
            db.refresh(video)
        except SQLAlchemyError as e:
            logger.error(f"❌ Unable to reload video {video_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to get updated video")

        logger.info(f"✅ Thumbnail for video {video_id} stored at {thumbnail_url}")
        return VideoResponse.model_validate(video)
    finally:
        await form.close()
