"""
Tests for lifecycle orchestration and the batch entry points.

Run with: pytest tests/test_processor.py -v
"""

import asyncio

import pytest

from conftest import FakeGemini, make_clip, make_video, proposals_json
from vidclips.config import FFMPEG_PATH
from vidclips.core.exceptions import InputValidationError
from vidclips.core.repositories.exceptions import NotFoundError
from vidclips.core.repositories.models import ClipTiming, ExistingClip
from vidclips.core.workflow.processor import (
    manual_analyze,
    process_video,
    produce_clips,
    submit_video,
)

VIDEO_ID = "kOyIjt6FUrw"


class TestProcessVideo:
    def test_end_to_end(self, ctx, runner):
        ctx.videos.create_video(make_video())
        ctx.gemini = FakeGemini([proposals_json((60, 120), title="One minute of wisdom")])
        reports = []
        ctx.progress.on_change(reports.append)

        clips = asyncio.run(process_video(ctx, VIDEO_ID))

        assert len(clips) == 1
        assert len(ctx.clips.clips) == 1
        stored = ctx.clips.get_clip(clips[0].id)
        assert stored.status == "produced"
        assert stored.srt
        assert stored.end_time - stored.start_time == 60
        assert ctx.clip_path(stored.id).exists()

        assert reports[-1].stage == "complete"
        assert reports[-1].progress == 100
        assert ctx.progress.get(VIDEO_ID) is None

    def test_phase_reports(self, ctx, runner):
        ctx.videos.create_video(make_video())
        ctx.gemini = FakeGemini([proposals_json((0, 60), (100, 200))])
        reports = []
        ctx.progress.on_change(lambda d: reports.append((d.stage, d.progress)))

        asyncio.run(process_video(ctx, VIDEO_ID))

        production = [p for stage, p in reports if stage == "production"]
        assert production[0] == 0
        assert 50 in production
        assert production[-1] == 100
        assert ("analysis", 100) in reports

    def test_analysis_complete_lists_clip_ids(self, ctx, runner):
        ctx.videos.create_video(make_video())
        ctx.gemini = FakeGemini([proposals_json((0, 60))])
        analysis = []
        ctx.progress.on_stage("analysis", analysis.append)

        clips = asyncio.run(process_video(ctx, VIDEO_ID))

        assert analysis[-1].clip_ids == [clips[0].id]
        assert [c.clip_id for c in analysis[-1].clips] == [clips[0].id]

    def test_existing_clips_sent_as_avoid_context(self, ctx, runner):
        ctx.videos.create_video(make_video())
        ctx.clips.create_clips_batch([make_clip("old", start_time=300, end_time=400, status="produced")])
        ctx.gemini = FakeGemini(["[]"])

        asyncio.run(process_video(ctx, VIDEO_ID))

        assert "EXISTING CLIPS TO AVOID" in ctx.gemini.prompts[0]
        assert "300 to 400" in ctx.gemini.prompts[0]

    def test_clip_failure_does_not_stop_run(self, ctx, runner):
        ctx.videos.create_video(make_video())
        ctx.gemini = FakeGemini([proposals_json((0, 60), (100, 200))])
        failing = {"count": 0}

        def fail_first_extract(cmd):
            if cmd[0] == FFMPEG_PATH and "-vn" in cmd and failing["count"] == 0:
                failing["count"] += 1
                return True
            return False

        runner.fail_when = fail_first_extract
        asyncio.run(process_video(ctx, VIDEO_ID))

        statuses = sorted(c.status for c in ctx.clips.clips.values())
        assert statuses == ["error", "produced"]
        assert ctx.videos.get_video(VIDEO_ID).status == "transcribed"

    def test_unhandled_error_marks_video(self, ctx, runner):
        ctx.videos.create_video(make_video())
        ctx.gemini = FakeGemini(["no json here"])

        with pytest.raises(Exception):
            asyncio.run(process_video(ctx, VIDEO_ID))

        video = ctx.videos.get_video(VIDEO_ID)
        assert video.status == "error"
        assert "Could not parse JSON" in video.error_message
        assert ctx.progress.get(VIDEO_ID) is None


class TestSubmitVideo:
    def test_creates_pending_video(self, ctx, runner):
        stages = []
        ctx.progress.on_stage("download", lambda d: stages.append(d.progress))

        video = asyncio.run(submit_video(ctx, VIDEO_ID))

        assert video.status == "pending"
        assert ctx.videos.get_video(VIDEO_ID).channel_name == "Clip Channel"
        assert stages == [20]

    def test_resets_existing_video(self, ctx, runner):
        ctx.videos.create_video(make_video(status="error", error_message="old failure"))
        video = asyncio.run(submit_video(ctx, VIDEO_ID))
        stored = ctx.videos.get_video(VIDEO_ID)
        assert video.status == stored.status == "pending"
        assert stored.error_message is None

    def test_rejects_missing_channel(self, ctx, runner):
        runner.metadata = {"_type": "video", "id": VIDEO_ID, "title": "No channel"}
        with pytest.raises(InputValidationError, match="Channel name"):
            asyncio.run(submit_video(ctx, VIDEO_ID))
        assert ctx.videos.get_video(VIDEO_ID) is None
        assert ctx.progress.get(VIDEO_ID) is None

    def test_rejects_playlists(self, ctx, runner):
        runner.metadata = {"_type": "playlist", "id": "PL1"}
        with pytest.raises(InputValidationError):
            asyncio.run(submit_video(ctx, VIDEO_ID))


class TestProduceClips:
    def test_partial_failure(self, ctx, runner):
        clips = [make_clip(f"clip-{i}") for i in range(5)]
        ctx.clips.create_clips_batch(clips)
        failing = {"clip-1", "clip-3"}
        runner.fail_when = lambda cmd: cmd[0] == FFMPEG_PATH and any(
            f"{clip_id}.wav" in cmd[-1] for clip_id in failing
        )
        timings = [ClipTiming(id=c.id, start_time=10, end_time=70) for c in clips]

        result = asyncio.run(produce_clips(ctx, timings))

        assert result.success_count == 3
        assert result.failure_count == 2
        assert sorted(clip_id for clip_id, _ in result.failed) == sorted(failing)
        for clip in clips:
            assert not ctx.clip_audio_path(clip.id).exists()
        assert ctx.progress.get(VIDEO_ID) is None

    def test_timings_written_before_production(self, ctx, runner):
        ctx.clips.create_clips_batch([make_clip("a"), make_clip("b")])
        timings = [
            ClipTiming(id="a", start_time=5, end_time=45),
            ClipTiming(id="b", start_time=50, end_time=95),
        ]

        asyncio.run(produce_clips(ctx, timings))

        assert len(ctx.clips.timing_updates) == 1
        assert (ctx.clips.get_clip("a").start_time, ctx.clips.get_clip("a").end_time) == (5, 45)
        downloads = [c for c in runner.calls if "--download-sections" in c]
        assert sorted(c[c.index("--download-sections") + 1] for c in downloads) == ["*5.0-45.0", "*50.0-95.0"]

    def test_duplicate_clip_ids_produced_once(self, ctx, runner):
        ctx.clips.create_clips_batch([make_clip("a")])
        timings = [
            ClipTiming(id="a", start_time=5, end_time=45),
            ClipTiming(id="a", start_time=10, end_time=70),
        ]

        result = asyncio.run(produce_clips(ctx, timings))

        downloads = [c for c in runner.calls if "--download-sections" in c]
        assert len(downloads) == 1
        assert downloads[0][downloads[0].index("--download-sections") + 1] == "*10.0-70.0"
        assert result.succeeded == ["a"]
        assert result.failure_count == 0
        assert [t.id for t in ctx.clips.timing_updates[0]] == ["a"]

    def test_unknown_clip(self, ctx, runner):
        with pytest.raises(NotFoundError):
            asyncio.run(produce_clips(ctx, [ClipTiming(id="ghost", start_time=0, end_time=40)]))
        assert runner.calls == []


class TestManualAnalyze:
    def test_transcribes_then_analyzes(self, ctx, runner):
        ctx.videos.create_video(make_video(transcript=None, status="pending"))
        ctx.gemini = FakeGemini([proposals_json((0, 60))])
        existing = [ExistingClip(id="x", start_time=300, end_time=400, proposed_title="Old")]

        clips = asyncio.run(manual_analyze(ctx, VIDEO_ID, "funny", "", existing))

        assert len(clips) == 1
        assert "Jokes and punchlines" in ctx.gemini.prompts[0]
        assert ctx.videos.get_video(VIDEO_ID).status == "transcribed"
        assert ctx.progress.get(VIDEO_ID) is None
