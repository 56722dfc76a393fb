import logging
import os
import tempfile
import threading

import httpx
from fastapi.concurrency import run_in_threadpool

from budget_bot.config import Settings

logger = logging.getLogger(__name__)

# Twilio sends WhatsApp voice notes as audio/ogg; other audio types work the same.
SUFFIXES = {
    "audio/ogg": ".ogg",
    "audio/mpeg": ".mp3",
    "audio/mp4": ".m4a",
    "audio/amr": ".amr",
    "audio/wav": ".wav",
}


def is_audio(content_type: str | None) -> bool:
    return bool(content_type) and content_type.lower().startswith("audio/")


class VoiceTranscriber:
    """Downloads Twilio media and turns speech into text with faster-whisper."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._model = None
        self._model_lock = threading.Lock()

    def _get_model(self):
        with self._model_lock:
            if self._model is None:
                from faster_whisper import WhisperModel

                logger.info(f"Loading Whisper model '{self.settings.whisper_model}'...")
                self._model = WhisperModel(
                    self.settings.whisper_model,
                    device=self.settings.whisper_device,
                    compute_type=self.settings.whisper_compute_type,
                )
                logger.info("Whisper model loaded.")
            return self._model

    def _auth(self):
        if self.settings.twilio_account_sid and self.settings.twilio_auth_token:
            return (self.settings.twilio_account_sid, self.settings.twilio_auth_token)
        return None

    async def download(self, media_url: str) -> bytes:
        async with httpx.AsyncClient(follow_redirects=True) as client:
            resp = await client.get(media_url, auth=self._auth(), timeout=30)
        resp.raise_for_status()
        return resp.content

    def transcribe_file(self, path: str) -> str:
        segments, _ = self._get_model().transcribe(path)
        return " ".join(seg.text for seg in segments).strip()

    async def transcribe_url(self, media_url: str, content_type: str | None = None) -> str:
        audio = await self.download(media_url)
        suffix = SUFFIXES.get((content_type or "").split(";")[0].strip().lower(), ".ogg")

        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            tmp_path = tmp.name
            tmp.write(audio)

        try:
            logger.info(f"Transcribing {len(audio)} bytes of {content_type or 'audio'}")
            transcript = await run_in_threadpool(self.transcribe_file, tmp_path)
            logger.info(f"Transcript: {transcript}")
            return transcript
        finally:
            os.unlink(tmp_path)
