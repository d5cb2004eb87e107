"""Speech-to-text adapters: Google Cloud Speech-to-Text and local faster-whisper."""

import logging
import time
from typing import Protocol

from app.config import get_settings
from app.exceptions import TranscriptionError
from app.services.storage import load_gcp_credentials

logger = logging.getLogger("voice_signage")


class Transcriber(Protocol):
    def transcribe(self, uri: str) -> str: ...


def join_confident_segments(segments: list[tuple[str, float]], min_confidence: float) -> str:
    """Concatenate the text of segments whose confidence exceeds min_confidence."""
    return " ".join(text.strip() for text, confidence in segments if confidence > min_confidence and text).strip()


class GoogleSpeechTranscriber:
    """Long-running recognition of an audio object already in Cloud Storage."""

    def __init__(self) -> None:
        self._client = None

    def _get_client(self):
        """Lazy-create the speech client."""
        if self._client is None:
            from google.cloud import speech

            self._client = speech.SpeechClient(credentials=load_gcp_credentials())
        return self._client

    def _build_config(self):
        from google.cloud import speech

        settings = get_settings()
        # Browser MediaRecorder output.
        return speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.WEBM_OPUS,
            sample_rate_hertz=48000,
            language_code=settings.SPEECH_LANGUAGE_CODE,
            alternative_language_codes=settings.SPEECH_ALTERNATIVE_LANGUAGES,
            enable_automatic_punctuation=True,
            enable_word_time_offsets=False,
            enable_word_confidence=True,
            model="latest_long",
            use_enhanced=True,
        )

    def transcribe(self, uri: str) -> str:
        from google.api_core import exceptions as gexc
        from google.cloud import speech

        settings = get_settings()
        client = self._get_client()
        audio = speech.RecognitionAudio(uri=uri)

        try:
            start_time = time.time()
            operation = client.long_running_recognize(config=self._build_config(), audio=audio)
            response = operation.result(timeout=settings.SPEECH_TIMEOUT_SECONDS)
        except gexc.NotFound as e:
            raise TranscriptionError(f"Audio file not found: {uri}") from e
        except Exception as e:
            raise TranscriptionError() from e

        segments = [
            (result.alternatives[0].transcript, result.alternatives[0].confidence)
            for result in response.results
            if result.alternatives
        ]
        text = join_confident_segments(segments, settings.SPEECH_MIN_CONFIDENCE)
        logger.info(
            "Transcribed %s: %d/%d segments kept (%.1fs)",
            uri,
            sum(1 for _, c in segments if c > settings.SPEECH_MIN_CONFIDENCE),
            len(segments),
            time.time() - start_time,
        )
        return text


class WhisperTranscriber:
    """Handles audio transcription of local files using faster-whisper."""

    def __init__(self) -> None:
        self._model = None

    def _get_model(self):
        """Lazy-load the whisper model."""
        if self._model is None:
            from faster_whisper import WhisperModel

            settings = get_settings()
            self._model = WhisperModel(settings.WHISPER_MODEL_SIZE, device="cpu", compute_type="int8")
        return self._model

    def transcribe(self, uri: str) -> str:
        settings = get_settings()
        language = settings.SPEECH_LANGUAGE_CODE.split("-")[0] or None

        try:
            model = self._get_model()
            segments_iter, _info = model.transcribe(uri, beam_size=5, language=language)
            # Whisper reports the probability that a segment is silence; its complement stands in for confidence.
            segments = [(seg.text, 1.0 - seg.no_speech_prob) for seg in segments_iter]
        except Exception as e:
            raise TranscriptionError(f"Transcription failed: {e}") from e

        return join_confident_segments(segments, settings.SPEECH_MIN_CONFIDENCE)


_transcriber: Transcriber | None = None


def get_transcriber() -> Transcriber:
    """Get singleton transcriber for the configured backend."""
    global _transcriber
    if _transcriber is None:
        if get_settings().TRANSCRIPTION_BACKEND == "whisper":
            _transcriber = WhisperTranscriber()
        else:
            _transcriber = GoogleSpeechTranscriber()
    return _transcriber
