"""Event ingestion API routes."""

from fastapi import APIRouter, Depends, status

from api.v1.dependencies import get_event_emitter, get_notification_engine
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.event import DispatchResponse, EmitResponse, EventCreate
from core.exceptions import EventNotStoredError
from domain.services.event_emitter import EventEmitter
from domain.services.notification_engine import NotificationEngine

router = APIRouter(prefix="/events", tags=["events"])


@router.post(
    "",
    response_model=DispatchResponse,
    summary="Process an activity event",
    responses={
        200: {"description": "Event processed; per-channel outcomes returned"},
        400: {"model": ErrorResponse, "description": "Event is missing metadata its kind requires"},
        422: {"model": ErrorResponse, "description": "Malformed event body"},
    },
)
async def process_event(
    body: EventCreate,
    engine: NotificationEngine = Depends(get_notification_engine),
) -> DispatchResponse:
    """Resolve recipients and deliver notifications for one event.

    Delivery failures for individual recipients are reported in
    ``outcomes`` rather than failing the request.
    """
    event = body.to_domain()
    result = await engine.dispatch(event)
    return DispatchResponse.from_result(event, result)


@router.post(
    "/emit",
    response_model=EmitResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Record and process an activity event",
    responses={
        202: {"description": "Event stored and handed to the engine"},
        400: {"model": ErrorResponse, "description": "Event is missing metadata its kind requires"},
        500: {"model": ErrorResponse, "description": "Event could not be stored"},
    },
)
async def emit_event(
    body: EventCreate,
    emitter: EventEmitter = Depends(get_event_emitter),
) -> EmitResponse:
    """Store the event in the activity log, then process it.

    Processing failures are logged and never fail the request; only a
    failure to store the event does.
    """
    event = body.to_domain()
    stored = await emitter.emit(event)
    if stored is None:
        raise EventNotStoredError(event.event_type.value)
    return EmitResponse(event_id=stored.id, event_type=stored.event_type)
