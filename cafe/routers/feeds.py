"""
Live dashboard feeds.

Each socket loads its view once on connect, then keeps it fresh through
an AdaptivePoller and pushes every refreshed snapshot to the client:

    {"type": "snapshot", "data": ...}

Clients report tab visibility so hidden dashboards stop polling:

    {"type": "visibility", "visible": false}
    {"type": "refresh"}
"""

import logging
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from cafe.core.auth import decode_staff_token
from cafe.core.config import get_settings
from cafe.core.polling import AdaptivePoller, VisibilitySignal
from cafe.database import get_session_factory
from cafe.repositories.menu_repo import MenuRepository
from cafe.repositories.order_repo import OrderRepository
from cafe.schemas.feeds import FeedMessage
from cafe.services.order_service import FINAL_STATUSES, OrderService

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/ws", tags=["Live feeds"])

order_repo = OrderRepository()
service = OrderService(order_repo, MenuRepository())


async def _authorize(websocket: WebSocket, token: str | None) -> bool:
    """Close the socket with 1008 unless `token` is a valid staff token."""
    try:
        if not token:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        decode_staff_token(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return False
    return True


async def run_feed(
    websocket: WebSocket,
    load: Callable[[], Any],
    *,
    name: str,
    fast_interval: float,
    slow_interval: float,
    has_activity: Callable[[Any], bool] = lambda data: False,
    enabled: Callable[[Any], bool] = lambda data: True,
) -> None:
    """
    Serve one accepted socket until the client disconnects.

    `load` runs in the threadpool (it does blocking DB work). After each
    load, `has_activity` and `enabled` are re-evaluated on the fresh data
    to pick the next polling interval.
    """
    visibility = VisibilitySignal()

    async def refresh() -> None:
        try:
            data = await run_in_threadpool(load)
        except Exception:
            logger.exception("Error loading %s feed", name)
            return
        poller.update(enabled=enabled(data), has_activity=has_activity(data))
        await websocket.send_json({"type": "snapshot", "data": jsonable_encoder(data)})

    poller = AdaptivePoller(
        refresh,
        fast_interval=fast_interval,
        slow_interval=slow_interval,
        visibility=visibility,
    )

    try:
        await refresh()
        poller.start()
        while True:
            try:
                message = FeedMessage.model_validate(await websocket.receive_json())
            except ValueError:
                # bad JSON or an unknown / ill-typed message
                logger.debug("Ignoring malformed %s feed message", name)
                continue

            if message.type == "visibility":
                visibility.set(message.visible)
            else:
                await refresh()
    except WebSocketDisconnect:
        logger.info("%s feed disconnected", name)
    finally:
        # Refreshes still running would write to a closed socket.
        await poller.stop(cancel_in_flight=True)


@router.websocket("/cashier")
async def cashier_feed(
    websocket: WebSocket,
    token: str | None = None,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """
    Pending orders; polls fast while any order is waiting.
    """
    if not await _authorize(websocket, token):
        return
    await websocket.accept()

    def load():
        with session_factory() as session:
            return service.cashier_queue(session)

    await run_feed(
        websocket,
        load,
        name="cashier",
        fast_interval=settings.CASHIER_FAST_INTERVAL,
        slow_interval=settings.CASHIER_SLOW_INTERVAL,
        has_activity=lambda orders: len(orders) > 0,
    )


@router.websocket("/barista")
async def barista_feed(
    websocket: WebSocket,
    token: str | None = None,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """
    Barista board; polls fast while drinks are being prepared.
    """
    if not await _authorize(websocket, token):
        return
    await websocket.accept()

    def load():
        with session_factory() as session:
            return service.barista_board(session)

    await run_feed(
        websocket,
        load,
        name="barista",
        fast_interval=settings.BARISTA_FAST_INTERVAL,
        slow_interval=settings.BARISTA_SLOW_INTERVAL,
        has_activity=lambda board: len(board.preparing) > 0,
    )


@router.websocket("/orders/{order_id}")
async def tracking_feed(
    websocket: WebSocket,
    order_id: uuid.UUID,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """
    Customer tracking page. Sends `data: null` while the order does not
    exist; stops polling once it is served or cancelled.
    """
    await websocket.accept()

    def load():
        with session_factory() as session:
            try:
                return service.track_order(session, order_id)
            except HTTPException as e:
                if e.status_code == status.HTTP_404_NOT_FOUND:
                    return None
                raise

    await run_feed(
        websocket,
        load,
        name="tracking",
        fast_interval=settings.TRACKING_FAST_INTERVAL,
        slow_interval=settings.TRACKING_SLOW_INTERVAL,
        enabled=lambda order: order is not None and order.status not in FINAL_STATUSES,
    )
