import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from vidclips.core.workflow import (
    delete_video,
    manual_analyze,
    process_video,
    submit_video,
    video_status,
)
from vidclips.core.workflow.context import PipelineContext
from vidclips.dependencies import get_pipeline, http_error, run_in_background
from vidclips.schemas import (
    AnalyzeRequest,
    ClipListResponse,
    ClipResponse,
    DeleteVideoResponse,
    SubmitVideoRequest,
    VideoResponse,
    VideoStatusResponse,
    validate_video_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/videos", tags=["Videos"])


def _checked_video_id(video_id: str) -> str:
    try:
        return validate_video_id(video_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("", response_model=VideoResponse, status_code=status.HTTP_202_ACCEPTED)
async def submit(
    body: SubmitVideoRequest,
    request: Request,
    ctx: PipelineContext = Depends(get_pipeline),
) -> VideoResponse:
    """Register a video and start the pipeline in the background."""
    try:
        video = await submit_video(ctx, body.video_id)
    except Exception as e:
        logger.warning(f"Submission of {body.video_id} rejected: {e}")
        raise http_error(e)

    run_in_background(request.app, process_video(ctx, video.video_id), name=f"process:{video.video_id}")
    return VideoResponse(
        video_id=video.video_id,
        title=video.title,
        channel_name=video.channel_name,
        status=video.status,
        error_message=video.error_message,
    )


@router.get("/{video_id}/status", response_model=VideoStatusResponse)
async def get_status(
    video_id: str,
    ctx: PipelineContext = Depends(get_pipeline),
) -> VideoStatusResponse:
    video_id = _checked_video_id(video_id)
    try:
        return VideoStatusResponse(**video_status(ctx, video_id))
    except Exception as e:
        raise http_error(e)


@router.delete("/{video_id}", response_model=DeleteVideoResponse)
async def remove_video(
    video_id: str,
    ctx: PipelineContext = Depends(get_pipeline),
) -> DeleteVideoResponse:
    """Delete a video with its clips and their files."""
    video_id = _checked_video_id(video_id)
    try:
        deleted = delete_video(ctx, video_id)
    except Exception as e:
        raise http_error(e)
    return DeleteVideoResponse(video_id=video_id, deleted_clips=deleted)


@router.post("/{video_id}/analyze", response_model=ClipListResponse)
async def analyze_video(
    video_id: str,
    body: AnalyzeRequest,
    ctx: PipelineContext = Depends(get_pipeline),
) -> ClipListResponse:
    """Find new clips in a video, transcribing it first if needed."""
    video_id = _checked_video_id(video_id)
    try:
        clips = await manual_analyze(
            ctx,
            video_id,
            prompt_type=body.prompt_type,
            custom_criteria=body.custom_criteria,
            existing_clips=body.existing_clips,
        )
    except Exception as e:
        raise http_error(e)
    return ClipListResponse(clips=[ClipResponse.model_validate(c.model_dump()) for c in clips])
