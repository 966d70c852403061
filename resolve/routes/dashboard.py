"""
Dashboard snapshot, analytics and the realtime dashboard socket
"""
import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect

from resolve.errors import EmailNotVerifiedError, ResolveError
from resolve.logging_config import logger
from resolve.models import DashboardView
from resolve.realtime import DashboardPipeline, Notification
from resolve.services import DashboardService
from resolve.session import SessionContext, get_verified_session, open_session, require_admin

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

CLOSE_INTERNAL_ERROR = 1011
CLOSE_CODES = {401: 4401, 403: 4403}


class WebSocketSink:
    """Delivers pipeline output to one dashboard socket"""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._lock = asyncio.Lock()

    async def _send(self, message: dict) -> None:
        async with self._lock:
            await self.websocket.send_json(message)

    async def deliver(self, notification: Notification) -> None:
        await self._send(
            {
                "type": "notification",
                "kind": notification.kind.value,
                "text": notification.text,
                "sound": notification.sound.value,
                "complaint_id": notification.complaint_id,
            }
        )

    async def publish_view(self, view: DashboardView) -> None:
        await self._send({"type": "view", **view.model_dump(mode="json")})

    async def celebrate(self, complaint_id: str) -> None:
        await self._send({"type": "celebrate", "complaint_id": complaint_id})

    async def report_error(self, message: str) -> None:
        await self._send({"type": "error", "message": message})


@router.get("/")
async def get_dashboard(session: SessionContext = Depends(get_verified_session)):
    """One-shot snapshot of the caller's dashboard"""
    try:
        return await DashboardService(session.store).load_view(session.user_id, session.role)

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error loading dashboard: {str(e)}", extra={"user_id": session.user_id})
        raise HTTPException(status_code=500, detail="Failed to load data")


@router.get("/analytics")
async def get_analytics(session: SessionContext = Depends(require_admin)):
    try:
        return await DashboardService(session.store).load_analytics()

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error computing analytics: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load data")


@router.websocket("/ws")
async def dashboard_socket(
    websocket: WebSocket,
    token: str = Query(default=""),
    sound: Optional[bool] = Query(default=None),
    complaint_id: Optional[str] = Query(default=None),
):
    """Mounted dashboard view.

    The view lives as long as the socket: its subscriptions are opened on
    connect and released on disconnect.
    """
    await websocket.accept()
    sink = WebSocketSink(websocket)

    try:
        async with open_session(token, sound) as session:
            if not session.email_confirmed:
                raise EmailNotVerifiedError()

            service = DashboardService(session.store)

            async def fetch_view() -> DashboardView:
                return await service.load_view(session.user_id, session.role)

            pipeline = DashboardPipeline(
                session.user_id,
                session.role,
                session.store,
                sink,
                fetch_view,
                sound_enabled=session.sound_enabled,
                focus_complaint_id=complaint_id,
            )
            async with pipeline:
                logger.info("Dashboard mounted", extra={"user_id": session.user_id})
                while True:
                    message = await websocket.receive_text()
                    if message.strip() == "refresh":
                        await pipeline.refresh()

    except WebSocketDisconnect:
        logger.info("Dashboard unmounted")

    except ResolveError as e:
        code = CLOSE_CODES.get(e.status_code, CLOSE_INTERNAL_ERROR)
        await sink.report_error(e.message)
        await websocket.close(code=code)
