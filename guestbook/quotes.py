"""Random Parks & Rec quote page, the stateless sibling of the guestbook."""
import random
import socket
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from guestbook.config import Settings
from guestbook.log import get_logger
from guestbook.schemas import Quote, QuotePage
from guestbook.views import STATIC_DIR, render_quote

logger = get_logger(__name__)

QUOTES: List[Quote] = [
    Quote(text="Treat yo self!", character="Tom Haverford & Donna Meagle"),
    Quote(text="I have no idea what I'm doing, but I know I'm doing it really, really well.", character="Andy Dwyer"),
    Quote(text="We need to remember what's important in life: friends, waffles, work. Or waffles, friends, work. Doesn't matter, but work is third.", character="Leslie Knope"),
    Quote(text="I'm not interested in caring about people.", character="April Ludgate"),
    Quote(text="There's nothing we can't do if we work hard, never sleep, and shirk all other responsibilities in our lives.", character="Leslie Knope"),
    Quote(text="Everything hurts and I'm dying.", character="Chris Traeger"),
    Quote(text="I call this turf 'n' turf. It's a 16 oz T-bone and a 24 oz porterhouse.", character="Ron Swanson"),
    Quote(text="Capitalism: God's way of determining who is smart and who is poor.", character="Ron Swanson"),
    Quote(text="I'm allergic to sushi. Every time I eat more than 80 sushis, I barf.", character="Andy Dwyer"),
    Quote(text="Time is money, money is power, power is pizza, and pizza is knowledge.", character="April Ludgate"),
    Quote(text="I am big enough to admit that I am often inspired by myself.", character="Leslie Knope"),
    Quote(text="I don't even have time to tell you how wrong you are. Actually, it's gonna bug me if I don't.", character="April Ludgate"),
    Quote(text="I tried to make ramen in the coffee pot and I broke everything.", character="Andy Dwyer"),
    Quote(text="Fish meat is practically a vegetable.", character="Ron Swanson"),
]


class VisitCounter:
    """Page visit count, owned by the app and only bumped by the page handler."""

    def __init__(self):
        self._count = 0

    def increment(self) -> int:
        self._count += 1
        return self._count

    @property
    def count(self) -> int:
        return self._count


def create_quotes_app(rng: Optional[random.Random] = None) -> FastAPI:
    rng = rng or random.Random()

    app = FastAPI(title="Parks & Rec Quote Generator")
    app.state.visits = VisitCounter()
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.get("/", response_class=HTMLResponse)
    async def random_quote(request: Request):
        visits = app.state.visits.increment()
        page = QuotePage(
            quote=rng.choice(QUOTES),
            visits=visits,
            hostname=socket.gethostname(),
        )
        return render_quote(request, page)

    return app


app = create_quotes_app()


def run():
    import uvicorn
    port = Settings.from_env().port
    logger.info("Parks & Rec Quote Generator running on port %d", port)
    logger.info("Visit http://localhost:%d", port)
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()
