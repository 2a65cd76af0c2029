"""
Shared fixtures: in-memory repositories, fake model/STT clients and a
recording stand-in for external processes.
"""

import json
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from vidclips.config import FFMPEG_PATH, YT_DLP_PATH
from vidclips.core import media
from vidclips.core.exceptions import ProcessError
from vidclips.core.progress import ProgressHub
from vidclips.core.repositories.exceptions import ConflictError, NotFoundError
from vidclips.core.repositories.models import Clip, ClipTiming, Video, utcnow
from vidclips.core.workflow.context import PipelineContext


class FakeVideoRepository:
    def __init__(self):
        self.videos: Dict[str, Video] = {}

    def get_video(self, video_id: str) -> Optional[Video]:
        return self.videos.get(video_id)

    def create_video(self, video: Video) -> Video:
        if video.video_id in self.videos:
            raise ConflictError(f"Video {video.video_id} already exists")
        self.videos[video.video_id] = video
        return video

    def update_video(self, video_id: str, **fields: Any) -> None:
        current = self.videos[video_id]
        self.videos[video_id] = Video.model_validate(
            {**current.model_dump(), **fields, "updated_at": utcnow()}
        )

    def set_status(self, video_id: str, status: str, error_message: Optional[str] = None) -> None:
        self.update_video(video_id, status=status, error_message=error_message)

    def delete_video(self, video_id: str, clips: "FakeClipRepository") -> List[str]:
        deleted = clips.delete_clips_for_video(video_id)
        self.videos.pop(video_id, None)
        return deleted


class FakeClipRepository:
    def __init__(self):
        self.clips: Dict[str, Clip] = {}
        self.timing_updates: List[List[ClipTiming]] = []

    def create_clips_batch(self, clips: List[Clip]) -> List[Clip]:
        for clip in clips:
            self.clips[clip.id] = clip
        return clips

    def get_clip(self, clip_id: str) -> Optional[Clip]:
        return self.clips.get(clip_id)

    def list_clips(self, video_id=None, status=None, order_by="created_at", descending=True) -> List[Clip]:
        return [
            clip for clip in self.clips.values()
            if (video_id is None or clip.video_id == video_id)
            and (status is None or clip.status == status)
        ]

    def update_clip(self, clip_id: str, **fields: Any) -> None:
        current = self.clips[clip_id]
        self.clips[clip_id] = Clip.model_validate({**current.model_dump(), **fields, "updated_at": utcnow()})

    def update_timings(self, timings: List[ClipTiming]) -> List[Clip]:
        self.timing_updates.append(list(timings))
        missing = [t.id for t in timings if t.id not in self.clips]
        if missing:
            raise NotFoundError(f"Clips not found: {', '.join(missing)}")
        for t in timings:
            self.update_clip(t.id, start_time=t.start_time, end_time=t.end_time)
        return [self.clips[t.id] for t in timings]

    def delete_clip(self, clip_id: str) -> bool:
        return self.clips.pop(clip_id, None) is not None

    def delete_clips_for_video(self, video_id: str) -> List[str]:
        ids = [c.id for c in self.clips.values() if c.video_id == video_id]
        for clip_id in ids:
            del self.clips[clip_id]
        return ids


class FakeGemini:
    """Returns queued responses; records every prompt."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.prompts: List[str] = []

    def generate_with_fallback(self, prompt: str) -> str:
        self.prompts.append(prompt)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeDeepgram:
    """
    Returns ``response`` for every file, or raises for files whose name
    contains one of ``fail_for``.
    """

    def __init__(self, response: Optional[Dict[str, Any]] = None, fail_for: tuple = ()):
        self.response = response if response is not None else deepgram_response([12])
        self.fail_for = fail_for
        self.files: List[Path] = []

    async def transcribe_file(self, audio_path: Path) -> Dict[str, Any]:
        audio_path = Path(audio_path)
        assert audio_path.exists(), f"{audio_path} was not created before transcription"
        self.files.append(audio_path)
        if any(marker in audio_path.name for marker in self.fail_for):
            raise RuntimeError(f"Deepgram rejected {audio_path.name}")
        return self.response


class FakeWhisper:
    """
    Returns ``segments`` for every file and reports ``progress_steps``; raises
    for files whose name contains one of ``fail_for``.
    """

    def __init__(
        self,
        segments: Optional[List[Dict[str, str]]] = None,
        progress_steps: tuple = (50.0, 100.0),
        fail_for: tuple = (),
    ):
        self.segments = segments if segments is not None else list(WHISPER_SEGMENTS)
        self.progress_steps = progress_steps
        self.fail_for = fail_for
        self.files: List[Path] = []

    def transcribe(self, audio_path: Path, on_progress=None) -> List[Dict[str, str]]:
        audio_path = Path(audio_path)
        assert audio_path.exists(), f"{audio_path} was not created before transcription"
        self.files.append(audio_path)
        if any(marker in audio_path.name for marker in self.fail_for):
            raise RuntimeError(f"Whisper could not decode {audio_path.name}")
        for percent in self.progress_steps:
            if on_progress is not None:
                on_progress(percent)
        return self.segments


WHISPER_SEGMENTS = [
    {"text": "Welcome back to the show.", "start": "0:00:00,000", "end": "0:00:03,200"},
    {"text": "Today we talk about clips.", "start": "0:00:03,200", "end": "0:01:05,500"},
]


def deepgram_response(words_per_utterance: List[int], word_seconds: float = 0.5) -> Dict[str, Any]:
    """Build a Deepgram-shaped response with evenly timed words."""
    utterances = []
    t = 0.0
    for count in words_per_utterance:
        words = []
        for i in range(count):
            words.append({
                "word": f"word{i}",
                "punctuated_word": f"Word{i}.",
                "start": t,
                "end": t + word_seconds,
            })
            t += word_seconds
        utterances.append({
            "transcript": " ".join(w["punctuated_word"] for w in words),
            "start": words[0]["start"] if words else t,
            "end": words[-1]["end"] if words else t,
            "words": words,
        })
    return {"results": {"utterances": utterances}}


VIDEO_METADATA = {
    "_type": "video",
    "id": "kOyIjt6FUrw",
    "title": "A talk about clips",
    "channel": "Clip Channel",
    "channel_id": "UC123",
    "description": "A long conversation.",
    "duration": 3600,
    "upload_date": "20240105",
}


class FakeProcessRunner:
    """
    Stands in for ``run_process``: records commands and creates the files the
    real binaries would write. ``fail_when`` decides which commands exit 1.
    """

    def __init__(self, metadata: Optional[Dict[str, Any]] = None):
        self.calls: List[List[str]] = []
        self.metadata = metadata if metadata is not None else dict(VIDEO_METADATA)
        self.fail_when: Callable[[List[str]], bool] = lambda cmd: False

    def __call__(self, cmd: List[str], log_level: Optional[str] = None) -> subprocess.CompletedProcess:
        self.calls.append(list(cmd))
        if self.fail_when(cmd):
            raise ProcessError(Path(cmd[0]).name, 1, "simulated failure")

        stdout = ""
        if cmd[0] == YT_DLP_PATH and "-J" in cmd:
            stdout = json.dumps(self.metadata)
        elif cmd[0] == YT_DLP_PATH:
            output = cmd[cmd.index("-o") + 1].replace("%(ext)s", "wav")
            Path(output).parent.mkdir(parents=True, exist_ok=True)
            Path(output).write_bytes(b"media")
        elif cmd[0] == FFMPEG_PATH:
            Path(cmd[-1]).write_bytes(b"media")
        return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr="")


@pytest.fixture
def runner(monkeypatch) -> FakeProcessRunner:
    fake = FakeProcessRunner()
    monkeypatch.setattr(media, "run_process", fake)
    return fake


@pytest.fixture
def ctx(tmp_path) -> PipelineContext:
    clips_dir = tmp_path / "clips"
    audio_dir = tmp_path / "audio"
    clips_dir.mkdir()
    audio_dir.mkdir()
    return PipelineContext(
        videos=FakeVideoRepository(),
        clips=FakeClipRepository(),
        progress=ProgressHub(),
        gemini=FakeGemini(),
        deepgram=FakeDeepgram(),
        whisper=FakeWhisper(),
        clips_dir=clips_dir,
        audio_dir=audio_dir,
    )


def make_video(video_id: str = "kOyIjt6FUrw", **overrides: Any) -> Video:
    data = {
        "video_id": video_id,
        "title": "A talk about clips",
        "channel_name": "Clip Channel",
        "transcript": [
            {"text": "hello world", "start": "0:00:00,000", "end": "0:00:02,000"},
            {"text": "this is the middle", "start": "0:01:00,000", "end": "0:01:05,000"},
            {"text": "and the end", "start": "0:10:00,000", "end": "0:10:04,500"},
        ],
        "status": "transcribed",
    }
    data.update(overrides)
    return Video.model_validate(data)


def make_clip(clip_id: str = "clip-1", video_id: str = "kOyIjt6FUrw", **overrides: Any) -> Clip:
    data = {
        "id": clip_id,
        "video_id": video_id,
        "start_time": 60.0,
        "end_time": 120.0,
        "llm_reason": "Strong hook",
        "proposed_title": "The big reveal",
        "summary": "Watch the reveal",
    }
    data.update(overrides)
    return Clip.model_validate(data)


def proposals_json(*ranges, **fields) -> str:
    items = [
        {
            "startTime": start,
            "endTime": end,
            "proposedTitle": fields.get("title", f"Clip at {start}"),
            "llmReason": "Engaging",
            "summary": "You will not believe it",
        }
        for start, end in ranges
    ]
    return json.dumps(items)
