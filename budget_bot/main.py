import logging

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request, Response
from fastapi.responses import PlainTextResponse
from twilio.request_validator import RequestValidator
from twilio.twiml.messaging_response import MessagingResponse

from budget_bot import replies
from budget_bot.assistant import ReplyAssistant
from budget_bot.config import settings
from budget_bot.log_sink import build_log_sink
from budget_bot.models import Intent
from budget_bot.service import BudgetService
from budget_bot.store import BudgetStore
from budget_bot.transcriber import VoiceTranscriber, is_audio

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="WhatsApp Budget Bot", version="1.0.0")

budget_store = BudgetStore()
budget_service = BudgetService(budget_store)
log_sink = build_log_sink(settings)
transcriber = VoiceTranscriber(settings)
assistant = ReplyAssistant(settings)


def twiml(text: str) -> Response:
    resp = MessagingResponse()
    resp.message(text)
    return Response(content=str(resp), media_type="text/xml")


def verify_signature(request: Request, params: dict):
    """Reject requests that were not signed by Twilio with our auth token."""
    validator = RequestValidator(settings.twilio_auth_token)
    url = settings.public_webhook_url or str(request.url)
    signature = request.headers.get("X-Twilio-Signature", "")
    if not validator.validate(url, params, signature):
        logger.warning(f"Rejected webhook call with invalid signature for {url}")
        raise HTTPException(status_code=403, detail="Invalid Twilio signature")


@app.get("/", response_class=PlainTextResponse)
def root():
    return "OK - bot is running"


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/webhook")
async def webhook(request: Request, background_tasks: BackgroundTasks):
    """Twilio calls this for every inbound WhatsApp message."""
    form = await request.form()
    params = {key: value for key, value in form.items() if isinstance(value, str)}

    if settings.validate_twilio_signature:
        verify_signature(request, params)

    user_id = params.get("From")
    if not user_id:
        raise HTTPException(status_code=400, detail="Missing From")

    text = params.get("Body", "").strip()
    media_url = params.get("MediaUrl0")
    content_type = params.get("MediaContentType0")
    num_media = params.get("NumMedia", "").strip()
    has_media = num_media.isdigit() and int(num_media) > 0

    transcript = None
    if has_media and media_url and is_audio(content_type):
        try:
            transcript = await transcriber.transcribe_url(media_url, content_type)
        except Exception as e:
            logger.exception(f"Voice message from {user_id} could not be transcribed")
            background_tasks.add_task(log_sink.emit, budget_service.failure_row(user_id, media_url, e))
            return twiml(replies.FAILURE_MESSAGE)

        if not transcript:
            return twiml(replies.EMPTY_TRANSCRIPT_MESSAGE)
        text = transcript

    reply = budget_service.handle(user_id, text)
    reply_text = reply.text

    if reply.message.intent == Intent.UNRECOGNIZED and reply.message.raw_text:
        small_talk = await assistant.small_talk(reply.message.raw_text)
        if small_talk:
            reply_text = f"{small_talk}\n\n{reply_text}"

    if transcript:
        reply_text = replies.heard_prefix(transcript, reply_text)

    background_tasks.add_task(log_sink.emit, reply.log_row)
    return twiml(reply_text)
