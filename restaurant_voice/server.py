"""FastAPI server handling Twilio voice webhooks and the operator read surface."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from agents import set_tracing_disabled
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from twilio.request_validator import RequestValidator

from restaurant_voice.agents import ReplyAgent, UnderstandingAgent, build_openai_client
from restaurant_voice.config import get_config, setup_logging
from restaurant_voice.models import CallTurn
from restaurant_voice.services import DialogOrchestrator, RecordStore, render_twiml

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application lifespan manager."""
    config = get_config()
    logger.info(
        f"Starting restaurant voice agent on {config.server_host}:{config.server_port}"
    )

    set_tracing_disabled(not config.agent_tracing_enabled)

    record_store = RecordStore(config.db_path)
    record_store.initialize()

    openai_client = build_openai_client(config)
    orchestrator = DialogOrchestrator(
        understanding=UnderstandingAgent(openai_client, config),
        reply_generator=ReplyAgent(openai_client, config),
        record_store=record_store,
        config=config,
    )
    logger.info(
        f"Operator transfer: {config.agent_phone or 'NOT CONFIGURED (hang up)'}"
    )

    # Store dependencies in app state for dependency injection
    _app.state.record_store = record_store
    _app.state.orchestrator = orchestrator

    yield

    logger.info("Shutting down restaurant voice agent")
    if openai_client is not None:
        await openai_client.close()
    record_store.close()


app = FastAPI(
    title="Restaurant Voice Agent",
    description="Telephone voice agent for table reservations and takeaway orders",
    version="0.1.0",
    lifespan=lifespan,
)


def get_orchestrator(request: Request) -> DialogOrchestrator:
    """Dependency to get the dialog orchestrator from app state.

    Raises:
        HTTPException: If the orchestrator is not initialized
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Orchestrator not initialized yet")
    return orchestrator


def get_record_store(request: Request) -> RecordStore:
    """Dependency to get the record store from app state.

    Raises:
        HTTPException: If the store is not initialized
    """
    record_store = getattr(request.app.state, "record_store", None)
    if record_store is None:
        raise HTTPException(status_code=503, detail="Record store not initialized yet")
    return record_store


def verify_twilio_signature(request: Request, form: dict) -> bool:
    """Verify that a webhook was sent by Twilio.

    Skipped when verification is disabled or no auth token is configured.
    """
    config = get_config()
    if not config.twilio_validate_signature or not config.twilio_auth_token:
        return True

    if config.public_base_url:
        url = config.public_base_url.rstrip("/") + request.url.path
    else:
        # Reconstruct the URL Twilio used when running behind a proxy
        proto = request.headers.get("x-forwarded-proto", request.url.scheme)
        host = request.headers.get("x-forwarded-host") or request.headers.get(
            "host", "localhost"
        )
        url = f"{proto}://{host}{request.url.path}"

    signature = request.headers.get("X-Twilio-Signature", "")
    validator = RequestValidator(config.twilio_auth_token)
    return validator.validate(url, form, signature)


async def read_twilio_form(request: Request) -> dict | None:
    """Read and authenticate a Twilio webhook form body.

    Returns:
        The form fields, or None if the signature is invalid
    """
    form_data = await request.form()
    data = {key: str(value) for key, value in form_data.items()}

    if not verify_twilio_signature(request, data):
        logger.warning(f"Rejected webhook with invalid signature on {request.url.path}")
        return None

    return data


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    config = get_config()
    return {
        "status": "healthy",
        "service": "restaurant-voice",
        "language_service": config.has_openai_config(),
        "operator_transfer": bool(config.agent_phone),
    }


@app.post("/voice")
async def voice(
    request: Request,
    orchestrator: DialogOrchestrator = Depends(get_orchestrator),
):
    """Handle one call turn and answer with TwiML.

    Twilio sends ``SpeechResult`` once the caller has spoken; the first
    request of a call carries none and is answered with the greeting.
    """
    data = await read_twilio_form(request)
    if data is None:
        return Response(status_code=403)

    turn_fields = {
        "speech_text": data.get("SpeechResult", "").strip(),
        "caller": data.get("From") or None,
    }
    # Calls without a SID get a fresh id on every turn
    if data.get("CallSid"):
        turn_fields["call_id"] = data["CallSid"]
    turn = CallTurn(**turn_fields)

    directive = await orchestrator.handle_turn(turn)
    logger.info(f"Call {turn.call_id}: responding with {directive.action.value}")

    config = get_config()
    twiml = render_twiml(directive, voice=config.tts_voice, language=config.tts_language)
    return Response(content=twiml, media_type="text/xml")


@app.post("/transcribe")
async def transcribe_callback(request: Request):
    """Accept Twilio transcription callbacks.

    Transcripts are logged only; they are not processed yet.
    """
    data = await read_twilio_form(request)
    if data is None:
        return Response(status_code=403)
    logger.info(
        f"Transcription callback for call {data.get('CallSid')}: "
        f"{data.get('TranscriptionText', '')!r}"
    )
    return Response(content="", status_code=200)


@app.post("/transcribe-sms")
async def transcribe_sms_callback(request: Request):
    """Accept the caller's answer to the SMS confirmation question.

    Logged only; no SMS is sent yet.
    """
    data = await read_twilio_form(request)
    if data is None:
        return Response(status_code=403)
    logger.info(
        f"SMS confirmation answer for call {data.get('CallSid')}: "
        f"{data.get('TranscriptionText', '')!r}"
    )
    return Response(content="", status_code=200)


@app.get("/admin/reservations")
def list_reservations(
    limit: int = Query(200, ge=1, le=1000, description="Maximum rows to return"),
    record_store: RecordStore = Depends(get_record_store),
):
    """List the most recent reservations, newest first."""
    reservations = record_store.list_recent_reservations(limit)
    return [reservation.model_dump(mode="json") for reservation in reservations]


@app.get("/admin/orders")
def list_orders(
    limit: int = Query(200, ge=1, le=1000, description="Maximum rows to return"),
    record_store: RecordStore = Depends(get_record_store),
):
    """List the most recent takeaway orders, newest first."""
    orders = record_store.list_recent_orders(limit)
    return [order.model_dump(mode="json") for order in orders]


def run_server():
    """Run the FastAPI server using uvicorn.

    This is the main entry point for the server.
    """
    setup_logging()
    config = get_config()

    uvicorn.run(
        "restaurant_voice.server:app",
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    run_server()
