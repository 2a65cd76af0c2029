"""
Tests for yt-dlp and FFmpeg command construction.

Run with: pytest tests/test_media.py -v
"""

import pytest

from vidclips.config import FFMPEG_PATH, YT_DLP_PATH
from vidclips.core import media
from vidclips.core.exceptions import InputValidationError, ProcessError


class TestFetchVideoMetadata:
    def test_parses_metadata(self, runner):
        details = media.fetch_video_metadata("kOyIjt6FUrw")
        assert details.title == "A talk about clips"
        assert details.channel_name == "Clip Channel"
        assert details.published_at.year == 2024
        assert runner.calls[0] == [YT_DLP_PATH, "-J", "--no-warnings", media.video_url("kOyIjt6FUrw")]

    def test_uploader_used_when_channel_missing(self, runner):
        runner.metadata = {"_type": "video", "id": "x", "title": "t", "uploader": "Someone"}
        assert media.fetch_video_metadata("x").channel_name == "Someone"

    def test_bad_upload_date_is_ignored(self, runner):
        runner.metadata = {**runner.metadata, "upload_date": "yesterday"}
        assert media.fetch_video_metadata("kOyIjt6FUrw").published_at is None

    def test_rejects_non_video(self, runner):
        runner.metadata = {"_type": "playlist"}
        with pytest.raises(InputValidationError):
            media.fetch_video_metadata("x")


class TestDownloads:
    def test_download_audio_template(self, runner, tmp_path):
        target = tmp_path / "audio" / "vid.wav"
        assert media.download_audio("vid", target) == target
        cmd = runner.calls[0]
        assert cmd[cmd.index("-o") + 1] == str(tmp_path / "audio" / "vid") + ".%(ext)s"
        assert "--extract-audio" in cmd

    def test_download_audio_missing_output(self, tmp_path, monkeypatch):
        monkeypatch.setattr(media, "run_process", lambda cmd, log_level=None: None)
        with pytest.raises(FileNotFoundError):
            media.download_audio("vid", tmp_path / "vid.wav")

    def test_download_clip_range(self, runner, tmp_path):
        out = tmp_path / "clips" / "c.mp4"
        media.download_clip_range("vid", 12.5, 80, out)
        cmd = runner.calls[0]
        assert cmd[cmd.index("-S") + 1] == "proto:https"
        assert cmd[cmd.index("--download-sections") + 1] == "*12.5-80"
        assert cmd[-2:] == [str(out), media.video_url("vid")]
        assert out.exists()


class TestFfmpeg:
    def test_extract_audio(self, runner, tmp_path):
        media.extract_audio(tmp_path / "c.mp4", tmp_path / "c.wav")
        cmd = runner.calls[0]
        assert cmd[0] == FFMPEG_PATH
        assert cmd[cmd.index("-ar") + 1] == "16000"
        assert cmd[cmd.index("-ac") + 1] == "1"
        assert cmd[cmd.index("-acodec") + 1] == "pcm_s16le"

    def test_burn_subtitles_replaces_clip(self, runner, tmp_path):
        video = tmp_path / "c.mp4"
        video.write_bytes(b"original")
        srt = tmp_path / "c.srt"
        srt.write_text("1\n00:00:00,000 --> 00:00:01,000\nHi\n")

        media.burn_subtitles(video, srt)

        assert video.read_bytes() == b"media"
        assert not srt.exists()
        assert not (tmp_path / "c_with_subs.mp4").exists()
        assert "force_style=" in " ".join(runner.calls[0])

    def test_burn_subtitles_failure_keeps_original(self, runner, tmp_path):
        runner.fail_when = lambda cmd: True
        video = tmp_path / "c.mp4"
        video.write_bytes(b"original")
        srt = tmp_path / "c.srt"
        srt.write_text("x")

        with pytest.raises(ProcessError):
            media.burn_subtitles(video, srt)

        assert video.read_bytes() == b"original"
        assert not srt.exists()
