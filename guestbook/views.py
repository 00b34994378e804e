"""Template rendering; handlers pass typed page data, never raw rows."""
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from guestbook.schemas import GuestbookPage, QuotePage

PACKAGE_DIR = Path(__file__).resolve().parent
STATIC_DIR = PACKAGE_DIR / "static"

templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))


def render_guestbook(request: Request, page: GuestbookPage):
    return templates.TemplateResponse(
        request, "index.html", {"messages": page.messages}
    )


def render_quote(request: Request, page: QuotePage):
    return templates.TemplateResponse(
        request,
        "quote.html",
        {"quote": page.quote, "visits": page.visits, "hostname": page.hostname},
    )
