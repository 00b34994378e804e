import json
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from guestbook.config import GUESTBOOK_PORT, RECENT_LIMIT, Settings
from guestbook.database import (
    STORE_ERRORS,
    MessageStore,
    RetryPolicy,
    SchemaInitializer,
    create_engine_from_settings,
)
from guestbook.log import get_logger
from guestbook.schemas import GuestbookPage
from guestbook.views import STATIC_DIR, render_guestbook

logger = get_logger(__name__)

MISSING_FIELDS = "Name and message are required"


async def read_submission(request: Request) -> dict:
    """Form fields or a JSON object from the request body; {} if unreadable."""
    media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if media_type == "application/json":
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return {}
        return data if isinstance(data, dict) else {}
    try:
        form = await request.form()
    except (MultiPartException, StarletteHTTPException):
        return {}
    return dict(form)


def _field(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    if not value:
        return None
    return str(value)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    store = MessageStore(create_engine_from_settings(settings))
    schema = SchemaInitializer(store, RetryPolicy.from_settings(settings))

    app = FastAPI(title="Guestbook")
    app.state.store = store
    app.state.schema = schema

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.on_event("startup")
    async def on_startup():
        # requests are served while this is still retrying
        schema.start()

    @app.on_event("shutdown")
    async def on_shutdown():
        await schema.stop()
        await store.dispose()

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        try:
            messages = await store.list_recent(RECENT_LIMIT)
        except STORE_ERRORS:
            logger.exception("Error fetching messages")
            return PlainTextResponse("Error fetching messages", status_code=500)
        return render_guestbook(request, GuestbookPage(messages=messages))

    @app.post("/message")
    async def post_message(request: Request):
        data = await read_submission(request)
        name = _field(data, "name")
        message = _field(data, "message")

        if not name or not message:
            return PlainTextResponse(MISSING_FIELDS, status_code=400)

        try:
            await store.insert(name, message)
        except STORE_ERRORS:
            logger.exception("Error saving message")
            return PlainTextResponse("Error saving message", status_code=500)
        return RedirectResponse("/", status_code=302)

    # Liveness probe for orchestration; never touches the store.
    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()


def run():
    import uvicorn
    logger.info("Server running on http://0.0.0.0:%d", GUESTBOOK_PORT)
    uvicorn.run(app, host="0.0.0.0", port=GUESTBOOK_PORT)


if __name__ == "__main__":
    run()
