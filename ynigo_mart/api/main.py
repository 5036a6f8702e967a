"""FastAPI entrypoint and HTTP routes."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel

from ynigo_mart.api import pages
from ynigo_mart.config.settings import Settings, get_settings
from ynigo_mart.errors import (
    DecodeError,
    SessionStateError,
    SubmissionInProgressError,
    TransportError,
    ValidationError,
)
from ynigo_mart.imgproc.normalize import ImageNormalizer
from ynigo_mart.services.profiles import ProfileCreator
from ynigo_mart.services.session import SessionController
from ynigo_mart.store.client import RowStoreClient
from ynigo_mart.store.repository import ProfileStore

logger = logging.getLogger(__name__)

LOAD_FAILED = "Could not load profiles. Please try again."
UPDATE_FAILED = "Could not update balance. Please try again."
UNVERIFIED = "Balance saved, but the latest value could not be loaded. Refresh to check it."
CREATE_FAILED = "Something went wrong adding the profile. Please try again."


class ProfileOut(BaseModel):
    """Public JSON shape of a profile."""

    id: str
    name: str
    image: str
    balance: str


def create_app(settings: Optional[Settings] = None, client: Optional[RowStoreClient] = None) -> FastAPI:
    """Initialise the FastAPI application and its kiosk services."""

    settings = settings or get_settings()
    client = client or RowStoreClient(settings)
    store = ProfileStore(client, id_start=settings.id_start)
    session = SessionController(store)
    creator = ProfileCreator(
        store,
        ImageNormalizer(
            size=settings.thumbnail_size,
            image_format=settings.thumbnail_format,
            quality=settings.thumbnail_quality,
        ),
        max_upload_bytes=settings.max_upload_bytes,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await client.close()

    app = FastAPI(
        title="Ynigo Mart",
        version="0.1.0",
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.session = session
    app.state.creator = creator

    def home(
        *,
        status_code: int = 200,
        error: Optional[str] = None,
        notice: Optional[str] = None,
        modal_error: Optional[str] = None,
    ) -> HTMLResponse:
        html = pages.render_home(
            store.records,
            session=session,
            profile_key=store.key_for,
            error=error,
            notice=notice,
            modal_error=modal_error,
        )
        return HTMLResponse(html, status_code=status_code)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    @app.get("/metrics", tags=["system"])
    async def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/", response_class=HTMLResponse)
    async def listing() -> HTMLResponse:
        try:
            await store.refresh()
        except TransportError as exc:
            logger.error("Failed to load row store data: %s", exc)
            return home(status_code=502, error=LOAD_FAILED)
        return home()

    @app.get("/api/profiles", response_model=list[ProfileOut], tags=["profiles"])
    async def list_profiles() -> list[ProfileOut]:
        try:
            records = await store.refresh()
        except TransportError as exc:
            logger.error("Failed to load row store data: %s", exc)
            raise HTTPException(status_code=502, detail=LOAD_FAILED) from exc
        return [
            ProfileOut(id=record.id, name=record.name, image=record.image, balance=record.balance)
            for record in records
        ]

    @app.get("/profiles/new", response_class=HTMLResponse)
    async def new_profile_form() -> HTMLResponse:
        return HTMLResponse(pages.render_add_profile())

    @app.post("/profiles", response_class=HTMLResponse)
    async def submit_profile(
        name: str = Form(""),
        image: Optional[UploadFile] = File(None),
    ) -> HTMLResponse:
        # One byte past the limit is enough for the size check to reject the upload.
        image_bytes = await image.read(settings.max_upload_bytes + 1) if image is not None else b""
        try:
            record = await creator.create(name, image_bytes)
        except SubmissionInProgressError as exc:
            return HTMLResponse(pages.render_add_profile(name=name, error=str(exc)), status_code=409)
        except (ValidationError, DecodeError) as exc:
            return HTMLResponse(pages.render_add_profile(name=name, error=str(exc)), status_code=400)
        except TransportError as exc:
            logger.error("Failed to add profile: %s", exc)
            return HTMLResponse(pages.render_add_profile(name=name, error=CREATE_FAILED), status_code=502)
        return home(notice=f"{record.name} added!")

    @app.get("/profiles/{key}", response_class=HTMLResponse)
    async def open_profile(key: str) -> HTMLResponse:
        try:
            await store.ensure_loaded()
        except TransportError as exc:
            logger.error("Failed to load row store data: %s", exc)
            return home(status_code=502, error=LOAD_FAILED)
        record = store.lookup(key)
        if record is None:
            return home(status_code=404, error="Profile not found.")
        session.open(record)
        return home()

    @app.post("/session/confirm", response_class=HTMLResponse)
    async def confirm_session(amount: str = Form("")) -> HTMLResponse:
        try:
            await session.confirm(amount)
        except SessionStateError as exc:
            return home(status_code=409, error=str(exc))
        except ValidationError as exc:
            return home(status_code=400, modal_error=str(exc))
        except TransportError as exc:
            logger.error("Failed to update balance: %s", exc)
            return home(status_code=502, modal_error=UPDATE_FAILED)
        if not session.verified:
            return home(modal_error=UNVERIFIED)
        return home()

    @app.post("/session/close")
    async def close_session() -> RedirectResponse:
        session.close()
        return RedirectResponse("/", status_code=303)

    return app


def run() -> None:
    """Serve the kiosk with uvicorn."""

    import uvicorn

    from ynigo_mart.monitoring.logging import configure_logging

    configure_logging()
    uvicorn.run(create_app, factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
