"""
Clip pipeline workflow package.

Module Structure:
- context.py: Injectable pipeline context and batch results
- prompt.py: Prompt templates and builders
- data_processor.py: Model response parsing and proposal validation
- transcription.py: Whole-video transcription
- analysis.py: Clip discovery
- captions.py: SRT generation from word timings
- clip_processor.py: Single clip production
- summary.py: Summary regeneration and editing
- library.py: Status queries and deletion
- processor.py: Lifecycle orchestration and batch entry points
"""

from vidclips.core.workflow.context import BatchResult, PipelineContext

from vidclips.core.workflow.prompt import (
    PROMPT_TEMPLATES,
    build_clip_prompt,
    build_summary_prompt,
    resolve_criteria,
)

from vidclips.core.workflow.data_processor import (
    extract_json_array,
    parse_clip_proposals,
    validate_proposal,
)

from vidclips.core.workflow.transcription import ensure_transcript
from vidclips.core.workflow.analysis import analyze
from vidclips.core.workflow.captions import build_srt, caption_cues
from vidclips.core.workflow.clip_processor import produce_clip
from vidclips.core.workflow.summary import regenerate_summary, update_summary
from vidclips.core.workflow.library import delete_clip, delete_video, video_status

from vidclips.core.workflow.processor import (
    manual_analyze,
    process_video,
    produce_clips,
    submit_video,
)

__all__ = [
    # Data structures
    "BatchResult",
    "PipelineContext",
    # Prompt
    "PROMPT_TEMPLATES",
    "build_clip_prompt",
    "build_summary_prompt",
    "resolve_criteria",
    # Parsing
    "extract_json_array",
    "parse_clip_proposals",
    "validate_proposal",
    # Stages
    "ensure_transcript",
    "analyze",
    "build_srt",
    "caption_cues",
    "produce_clip",
    # Clip maintenance
    "regenerate_summary",
    "update_summary",
    "delete_clip",
    "delete_video",
    "video_status",
    # Orchestration
    "manual_analyze",
    "process_video",
    "produce_clips",
    "submit_video",
]
