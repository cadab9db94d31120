from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from Endpoints.videos import parse_video_id
from utils.thumbnail_store import ThumbnailStore, get_thumbnail_store

router = APIRouter(prefix="/api/thumbnails", tags=["Thumbnails"])


@router.get("/{videoID}")
async def serve_video_thumbnail(
    videoID: str,
    store: ThumbnailStore = Depends(get_thumbnail_store)
):
    """Serve a stored video thumbnail with its original media type"""
    video_id = parse_video_id(videoID)

    thumbnail = store.get(video_id)
    if thumbnail is None:
        raise HTTPException(status_code=404, detail="Thumbnail not found")

    return Response(
        content=thumbnail.data,
        media_type=thumbnail.media_type,
        headers={
            "Cache-Control": "public, max-age=3600",
            "Content-Length": str(len(thumbnail.data))
        }
    )
