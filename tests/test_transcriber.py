import asyncio
import os

import pytest

from budget_bot.config import Settings
from budget_bot.transcriber import VoiceTranscriber, is_audio


@pytest.mark.parametrize("content_type,expected", [
    ("audio/ogg", True),
    ("audio/ogg; codecs=opus", True),
    ("AUDIO/MPEG", True),
    ("image/jpeg", False),
    ("", False),
    (None, False),
])
def test_is_audio(content_type, expected):
    assert is_audio(content_type) is expected


def test_transcribe_url_cleans_up_temp_file(monkeypatch):
    transcriber = VoiceTranscriber(Settings(twilio_account_sid="AC1", twilio_auth_token="tok"))
    seen = {}

    async def fake_download(media_url):
        return b"OggS fake audio"

    def fake_transcribe_file(path):
        seen["path"] = path
        with open(path, "rb") as f:
            seen["data"] = f.read()
        return "spent 4 on coffee"

    monkeypatch.setattr(transcriber, "download", fake_download)
    monkeypatch.setattr(transcriber, "transcribe_file", fake_transcribe_file)

    transcript = asyncio.run(transcriber.transcribe_url("https://x/1", "audio/mpeg"))

    assert transcript == "spent 4 on coffee"
    assert seen["data"] == b"OggS fake audio"
    assert seen["path"].endswith(".mp3")
    assert not os.path.exists(seen["path"])


def test_auth_uses_twilio_credentials():
    assert VoiceTranscriber(Settings(twilio_account_sid="AC1", twilio_auth_token="tok"))._auth() == ("AC1", "tok")
    assert VoiceTranscriber(Settings(twilio_account_sid="", twilio_auth_token=""))._auth() is None
