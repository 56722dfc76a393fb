import httpx
import pytest
from fastapi.testclient import TestClient

from budget_bot import main, replies
from budget_bot.service import BudgetService
from budget_bot.store import BudgetStore

USER = "whatsapp:+15551234567"


class RecordingSink:
    def __init__(self):
        self.rows = []

    def emit(self, row):
        self.rows.append(row)


class FakeTranscriber:
    def __init__(self, transcript="", error=None):
        self.transcript = transcript
        self.error = error
        self.calls = []

    async def transcribe_url(self, media_url, content_type=None):
        self.calls.append((media_url, content_type))
        if self.error:
            raise self.error
        return self.transcript


class FakeAssistant:
    def __init__(self, answer=None):
        self.answer = answer

    async def small_talk(self, text):
        return self.answer


@pytest.fixture
def sink(monkeypatch):
    recording = RecordingSink()
    monkeypatch.setattr(main, "log_sink", recording)
    return recording


@pytest.fixture
def client(monkeypatch, sink):
    monkeypatch.setattr(main, "budget_service", BudgetService(BudgetStore()))
    monkeypatch.setattr(main, "assistant", FakeAssistant())
    monkeypatch.setattr(main.settings, "validate_twilio_signature", False)
    return TestClient(main.app)


def post_message(client, body="", **extra):
    return client.post("/webhook", data={"From": USER, "Body": body, "NumMedia": "0", **extra})


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "OK - bot is running"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_text_expense(client, sink):
    resp = post_message(client, "Spent 12 on lunch")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/xml")
    assert "<Response><Message>" in resp.text
    assert "$12" in resp.text
    assert "Food" in resp.text

    assert len(sink.rows) == 1
    assert sink.rows[0].type == "expense"
    assert sink.rows[0].user_id == USER


def test_empty_body_gets_onboarding(client, sink):
    resp = post_message(client, "")
    assert "I help you organize your money." in resp.text
    assert sink.rows[0].type == "unrecognized"


def test_limit_then_expenses(client):
    post_message(client, "Daily limit 60")
    post_message(client, "Spent 50 on groceries")
    resp = post_message(client, "Spent 20 on uber")
    assert replies.LIMIT_REACHED_WARNING in resp.text


def test_missing_sender_is_rejected(client):
    resp = client.post("/webhook", data={"Body": "Spent 12 on lunch"})
    assert resp.status_code == 400


def test_voice_message_is_transcribed(client, monkeypatch, sink):
    fake = FakeTranscriber("Spent 5 on coffee")
    monkeypatch.setattr(main, "transcriber", fake)

    resp = post_message(
        client,
        NumMedia="1",
        MediaUrl0="https://api.twilio.com/media/ME1",
        MediaContentType0="audio/ogg",
    )

    assert fake.calls == [("https://api.twilio.com/media/ME1", "audio/ogg")]
    assert "Heard:" in resp.text
    assert "Spent 5 on coffee" in resp.text
    assert "Saved: $5" in resp.text
    assert sink.rows[0].category == "Food"


def test_empty_transcript(client, monkeypatch, sink):
    monkeypatch.setattr(main, "transcriber", FakeTranscriber(""))
    resp = post_message(client, NumMedia="1", MediaUrl0="https://x/1", MediaContentType0="audio/ogg")
    assert "Couldn't understand the audio." in resp.text
    assert sink.rows == []


def test_transcription_failure_still_replies_and_logs(client, monkeypatch, sink):
    error = httpx.ConnectError("media host unreachable")
    monkeypatch.setattr(main, "transcriber", FakeTranscriber(error=error))

    resp = post_message(client, NumMedia="1", MediaUrl0="https://x/1", MediaContentType0="audio/ogg")

    assert resp.status_code == 200
    assert "Sorry, something went wrong" in resp.text
    assert [row.type for row in sink.rows] == ["error"]
    assert sink.rows[0].note.startswith("ConnectError")


def test_non_audio_media_uses_body(client, monkeypatch):
    fake = FakeTranscriber("ignored")
    monkeypatch.setattr(main, "transcriber", fake)
    resp = post_message(client, "Spent 30 on shoes", NumMedia="1", MediaUrl0="https://x/1", MediaContentType0="image/jpeg")
    assert fake.calls == []
    assert "Shopping" in resp.text


def test_sink_failure_does_not_break_reply(client, monkeypatch):
    from budget_bot.log_sink import SheetsLogSink

    def broken_factory():
        raise OSError("sheets down")

    monkeypatch.setattr(main, "log_sink", SheetsLogSink(broken_factory))
    resp = post_message(client, "Spent 12 on lunch")
    assert resp.status_code == 200
    assert "Food" in resp.text


def test_small_talk_is_prepended_to_onboarding(client, monkeypatch):
    monkeypatch.setattr(main, "assistant", FakeAssistant("Hello! Happy to help."))
    resp = post_message(client, "hi there")
    assert "Hello! Happy to help." in resp.text
    assert "I help you organize your money." in resp.text


def test_small_talk_not_used_for_empty_message(client, monkeypatch):
    monkeypatch.setattr(main, "assistant", FakeAssistant("should not appear"))
    resp = post_message(client, "")
    assert "should not appear" not in resp.text


def test_invalid_signature_is_rejected(client, monkeypatch):
    monkeypatch.setattr(main.settings, "validate_twilio_signature", True)
    monkeypatch.setattr(main.settings, "twilio_auth_token", "secret")
    resp = client.post(
        "/webhook",
        data={"From": USER, "Body": "Spent 12 on lunch"},
        headers={"X-Twilio-Signature": "bogus"},
    )
    assert resp.status_code == 403


def test_valid_signature_is_accepted(client, monkeypatch):
    from twilio.request_validator import RequestValidator

    url = "https://bot.example.com/webhook"
    params = {"From": USER, "Body": "Spent 12 on lunch"}
    monkeypatch.setattr(main.settings, "validate_twilio_signature", True)
    monkeypatch.setattr(main.settings, "twilio_auth_token", "secret")
    monkeypatch.setattr(main.settings, "public_webhook_url", url)

    signature = RequestValidator("secret").compute_signature(url, params)
    resp = client.post("/webhook", data=params, headers={"X-Twilio-Signature": signature})
    assert resp.status_code == 200
    assert "Food" in resp.text


def test_malformed_media_count_is_treated_as_text(client, monkeypatch):
    fake = FakeTranscriber("ignored")
    monkeypatch.setattr(main, "transcriber", fake)
    resp = post_message(client, "Spent 12 on lunch", NumMedia="abc", MediaUrl0="https://x/1", MediaContentType0="audio/ogg")

    assert resp.status_code == 200
    assert fake.calls == []
    assert "Food" in resp.text


def test_overflowing_amount_still_gets_a_reply(client):
    resp = post_message(client, "Spent " + "9" * 400 + " on lunch")
    assert resp.status_code == 200
    assert "Couldn't catch the amount." in resp.text
