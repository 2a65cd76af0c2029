"""
Prompt construction for clip discovery and summary regeneration.
"""

import textwrap
from typing import List, Optional, Sequence

from vidclips.config import SUMMARY_CONTEXT_SECONDS, SUMMARY_MAX_CHARS
from vidclips.core.repositories.models import ExistingClip, TranscriptSegment
from vidclips.core.utils.timecodes import format_offset, parse_timestamp

PROMPT_TEMPLATES = {
    "default": """
- Emotional peaks (excitement, revelation, dramatic moments)
- Educational insights or "aha" moments
- Controversial or thought-provoking statements
- Memorable quotes or soundbites
- Story climaxes or plot twists
""",
    "funny": """
- Jokes and punchlines
- Ironic or absurd moments
- Funny reactions or interactions
- Unexpected or silly situations
- Witty commentary
""",
    "educational": """
- Key learning points
- Clear explanations of complex topics
- Actionable advice or tips
- Demonstrations or tutorials
- Surprising facts or data points
""",
}

CUSTOM_PROMPT_TYPE = "custom"


def resolve_criteria(prompt_type: str, custom_criteria: Optional[str] = None) -> str:
    """
    Resolve what the model should look for.

    ``custom`` uses the caller's free text; unknown types fall back to the
    default template.
    """
    if prompt_type == CUSTOM_PROMPT_TYPE:
        return (custom_criteria or "").strip()
    return PROMPT_TEMPLATES.get(prompt_type, PROMPT_TEMPLATES["default"]).strip("\n")


def format_transcript(transcript: Sequence[TranscriptSegment]) -> str:
    """Render segments as ``[<offset>s] text`` lines."""
    return "\n".join(
        f"[{format_offset(parse_timestamp(segment.start))}s] {segment.text}"
        for segment in transcript
    )


def transcript_duration(transcript: Sequence[TranscriptSegment]) -> float:
    if not transcript:
        return 0.0
    return parse_timestamp(transcript[-1].end)


def _existing_clips_block(existing_clips: List[ExistingClip]) -> str:
    lines = []
    for clip in existing_clips:
        line = f'- {format_offset(clip.start_time)} to {format_offset(clip.end_time)}: "{clip.proposed_title}"'
        if clip.summary:
            line += f" ({clip.summary})"
        lines.append(line)

    return (
        "\n\nEXISTING CLIPS TO AVOID:\n"
        "The following segments have already been identified as clips. Please avoid "
        "these time ranges and find DIFFERENT interesting moments:\n"
        + "\n".join(lines)
        + "\n\nFocus on finding clips in different parts of the video that don't "
        "overlap with these existing segments."
    )


def build_clip_prompt(
    transcript: Sequence[TranscriptSegment],
    criteria: str,
    context: str,
    existing_clips: Optional[List[ExistingClip]] = None,
) -> str:
    avoid_rule = (
        "\n- AVOID the existing clips listed below - find NEW and DIFFERENT segments."
        if existing_clips
        else ""
    )
    existing_block = _existing_clips_block(existing_clips) if existing_clips else ""

    return (
        "You are an expert video content analyst specializing in identifying the most "
        "engaging and viral-worthy moments in video content.\n"
        "Analyze this video transcript and identify 5 of the most interesting, engaging, "
        "or entertaining segments that would make great short clips.\n\n"
        "The clips must respect these constraints:\n"
        "- MINIMAL DURATION: 50 SECONDS.\n"
        "- MAXIMAL DURATION: 180 SECONDS.\n"
        f"- The clips should not overlap with each other.{avoid_rule}\n\n"
        "Look for the following types of content:\n"
        f"{criteria}\n\n"
        f"Video Duration: {format_offset(transcript_duration(transcript))} seconds\n"
        f"Video Context: {context}{existing_block}\n\n"
        "Transcript:\n"
        "----------\n"
        f"{format_transcript(transcript)}\n"
        "----------\n\n"
        + textwrap.dedent(
            """\
            Respond with a JSON array of clips, and nothing else. Your response will be parsed by a machine. Do not include any text before or after the array, no code blocks, and no explanations.

            Each clip in the JSON array must have the following structure:
            - startTime: number (seconds from start of the video)
            - endTime: number (seconds from start of the video)
            - proposedTitle: string (engaging 5-8 word title)
            - llmReason: string (why this moment is interesting/engaging)
            - summary: string (a summary which should ENTICE the viewer to watch the clip)

            Example format:
            [
              {
                "startTime": 45,
                "endTime": 150,
                "proposedTitle": "Mind-blowing Revelation About AI",
                "llmReason": "Contains a surprising insight that challenges common assumptions about AI development",
                "summary": "A summary of the clip which will be used as a description to the clip"
              }
            ]

            Ensure you only respond with the JSON array."""
        )
    )


def segments_near(
    transcript: Sequence[TranscriptSegment],
    start_time: float,
    end_time: float,
    margin: float = SUMMARY_CONTEXT_SECONDS,
) -> List[TranscriptSegment]:
    """Segments overlapping ``[start_time - margin, end_time + margin]``."""
    return [
        segment
        for segment in transcript
        if parse_timestamp(segment.start) < end_time + margin
        and parse_timestamp(segment.end) > start_time - margin
    ]


def build_summary_prompt(
    transcript: Sequence[TranscriptSegment],
    start_time: float,
    end_time: float,
    proposed_title: str,
    current_summary: str,
) -> str:
    relevant = segments_near(transcript, start_time, end_time)
    return "\n".join(
        [
            "You are an expert content analyst. Generate a new, engaging summary for this video clip.",
            "",
            "CLIP DETAILS:",
            f'Title: "{proposed_title}"',
            f"Duration: {format_offset(start_time)}s to {format_offset(end_time)}s "
            f"({round(end_time - start_time)}s long)",
            "",
            "CURRENT SUMMARY:",
            f'"{current_summary}"',
            "",
            "TRANSCRIPT SEGMENT:",
            format_transcript(relevant),
            "",
            "Generate a NEW, different summary that:",
            "- Is engaging and entices viewers to watch the clip",
            "- Captures the key moments and value of this segment",
            "- Is different from the current summary",
            "- Uses exciting, clickable language",
            f"- MAXIMUM is {SUMMARY_MAX_CHARS} characters",
            "- It should not be cringe or too long",
            "- Do not use too many emojis or hashtags",
            "- It should sound wise",
            "",
            "Respond with ONLY the new summary text, no additional formatting or explanation.",
        ]
    )
