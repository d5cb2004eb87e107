"""Tests for the object store and speech-to-text adapters with mocked cloud clients."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as gexc

from app.exceptions import TranscriptionError
from app.services.storage import GCSObjectStore, LocalObjectStore
from app.services.transcription import GoogleSpeechTranscriber, join_confident_segments


def _speech_response(*results: tuple[str, float]) -> SimpleNamespace:
    return SimpleNamespace(
        results=[
            SimpleNamespace(alternatives=[SimpleNamespace(transcript=text, confidence=confidence)])
            for text, confidence in results
        ]
    )


class TestLocalObjectStore:
    """Tests for the local directory store."""

    def test_save_writes_file(self, tmp_path):
        store = LocalObjectStore(str(tmp_path))
        stored = store.save("voice-messages/abc.webm", b"audio-bytes", "audio/webm")
        path = tmp_path / "voice-messages" / "abc.webm"
        assert path.read_bytes() == b"audio-bytes"
        assert stored.key == "voice-messages/abc.webm"
        assert stored.uri == str(path.resolve())
        assert stored.url.startswith("file://")


class TestGCSObjectStore:
    """Tests for the Cloud Storage store."""

    def test_save_uploads_and_signs(self):
        bucket = MagicMock()
        blob = bucket.blob.return_value
        blob.generate_signed_url.return_value = "https://signed.example/abc"
        store = GCSObjectStore("signage-audio", url_ttl_hours=24)

        with patch.object(GCSObjectStore, "_get_bucket", return_value=bucket):
            stored = store.save("voice-messages/abc.webm", b"data", "audio/webm")

        bucket.blob.assert_called_once_with("voice-messages/abc.webm")
        blob.upload_from_string.assert_called_once_with(b"data", content_type="audio/webm")
        assert blob.generate_signed_url.call_args.kwargs["method"] == "GET"
        assert blob.generate_signed_url.call_args.kwargs["expiration"].total_seconds() == 24 * 3600
        assert stored.url == "https://signed.example/abc"
        assert stored.uri == "gs://signage-audio/voice-messages/abc.webm"

    def test_save_propagates_store_errors(self):
        bucket = MagicMock()
        bucket.blob.return_value.upload_from_string.side_effect = gexc.Forbidden("no access")
        store = GCSObjectStore("signage-audio")

        with patch.object(GCSObjectStore, "_get_bucket", return_value=bucket):
            with pytest.raises(gexc.Forbidden):
                store.save("voice-messages/abc.webm", b"data", None)


class TestJoinSegments:
    """Tests for confidence filtering."""

    def test_keeps_confident_segments(self):
        segments = [("hello", 0.9), ("mumble", 0.3), (" world ", 0.8)]
        assert join_confident_segments(segments, 0.5) == "hello world"

    def test_threshold_is_exclusive(self):
        assert join_confident_segments([("edge", 0.5)], 0.5) == ""

    def test_no_segments(self):
        assert join_confident_segments([], 0.5) == ""


class TestGoogleSpeechTranscriber:
    """Tests for the Cloud Speech adapter."""

    def _transcriber(self, client: MagicMock) -> GoogleSpeechTranscriber:
        transcriber = GoogleSpeechTranscriber()
        transcriber._client = client
        return transcriber

    def test_transcribe_joins_confident_results(self):
        client = MagicMock()
        client.long_running_recognize.return_value.result.return_value = _speech_response(
            ("안녕하세요", 0.92), ("잡음", 0.2), ("반갑습니다", 0.81)
        )

        text = self._transcriber(client).transcribe("gs://signage-audio/voice-messages/a.webm")

        assert text == "안녕하세요 반갑습니다"
        kwargs = client.long_running_recognize.call_args.kwargs
        assert kwargs["audio"].uri == "gs://signage-audio/voice-messages/a.webm"
        assert kwargs["config"].language_code == "ko-KR"
        assert kwargs["config"].sample_rate_hertz == 48000

    def test_empty_results(self):
        client = MagicMock()
        client.long_running_recognize.return_value.result.return_value = _speech_response()
        assert self._transcriber(client).transcribe("gs://b/k.webm") == ""

    def test_missing_audio(self):
        client = MagicMock()
        client.long_running_recognize.side_effect = gexc.NotFound("no such object")
        with pytest.raises(TranscriptionError, match="gs://b/missing.webm"):
            self._transcriber(client).transcribe("gs://b/missing.webm")

    def test_service_failure(self):
        client = MagicMock()
        client.long_running_recognize.return_value.result.side_effect = gexc.DeadlineExceeded("timeout")
        with pytest.raises(TranscriptionError):
            self._transcriber(client).transcribe("gs://b/k.webm")


def test_whisper_reads_local_path(tmp_path, whisper_model: MagicMock):
    """The whisper backend transcribes the local file path handed over by the store."""
    from app.services.transcription import WhisperTranscriber

    audio = Path(tmp_path) / "a.webm"
    audio.write_bytes(b"\x00")
    whisper_model.transcribe.return_value = (
        iter([SimpleNamespace(text=" 안녕 ", no_speech_prob=0.1)]),
        SimpleNamespace(language="ko"),
    )

    assert WhisperTranscriber().transcribe(str(audio)) == "안녕"
    assert whisper_model.transcribe.call_args.args[0] == str(audio)
    assert whisper_model.transcribe.call_args.kwargs["language"] == "ko"
