from typing import Optional

from fastapi import APIRouter, Depends, Query

from vidclips.core.repositories.models import ClipStatus
from vidclips.core.workflow import delete_clip, produce_clips, regenerate_summary, update_summary
from vidclips.core.workflow.context import PipelineContext
from vidclips.dependencies import get_pipeline, http_error
from vidclips.schemas import (
    ClipListResponse,
    ClipResponse,
    DeleteClipResponse,
    ProduceClipsRequest,
    ProduceClipsResponse,
    SummaryResponse,
    UpdateSummaryRequest,
)

router = APIRouter(prefix="/api/clips", tags=["Clips"])


@router.get("", response_model=ClipListResponse)
async def list_clips(
    video_id: Optional[str] = Query(default=None),
    status: Optional[ClipStatus] = Query(default=None),
    ctx: PipelineContext = Depends(get_pipeline),
) -> ClipListResponse:
    try:
        clips = ctx.clips.list_clips(video_id=video_id, status=status)
    except Exception as e:
        raise http_error(e)
    return ClipListResponse(clips=[ClipResponse.model_validate(c.model_dump()) for c in clips])


@router.post("/produce", response_model=ProduceClipsResponse)
async def produce(
    body: ProduceClipsRequest,
    ctx: PipelineContext = Depends(get_pipeline),
) -> ProduceClipsResponse:
    """Apply new boundaries and produce every listed clip; partial failure is reported, not raised."""
    try:
        result = await produce_clips(ctx, body.clips)
    except Exception as e:
        raise http_error(e)
    return ProduceClipsResponse(
        succeeded=result.succeeded,
        failed=[{"clip_id": clip_id, "error": error} for clip_id, error in result.failed],
        success_count=result.success_count,
        failure_count=result.failure_count,
    )


@router.delete("/{clip_id}", response_model=DeleteClipResponse)
async def remove_clip(
    clip_id: str,
    ctx: PipelineContext = Depends(get_pipeline),
) -> DeleteClipResponse:
    try:
        delete_clip(ctx, clip_id)
    except Exception as e:
        raise http_error(e)
    return DeleteClipResponse(clip_id=clip_id)


@router.post("/{clip_id}/summary/regenerate", response_model=SummaryResponse)
async def regenerate(
    clip_id: str,
    ctx: PipelineContext = Depends(get_pipeline),
) -> SummaryResponse:
    try:
        summary = await regenerate_summary(ctx, clip_id)
    except Exception as e:
        raise http_error(e)
    return SummaryResponse(clip_id=clip_id, summary=summary)


@router.put("/{clip_id}/summary", response_model=SummaryResponse)
async def edit_summary(
    clip_id: str,
    body: UpdateSummaryRequest,
    ctx: PipelineContext = Depends(get_pipeline),
) -> SummaryResponse:
    try:
        summary = update_summary(ctx, clip_id, body.summary)
    except Exception as e:
        raise http_error(e)
    return SummaryResponse(clip_id=clip_id, summary=summary)
