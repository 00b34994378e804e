import random

from fastapi.testclient import TestClient

from guestbook.quotes import QUOTES, VisitCounter, create_quotes_app


class FirstChoice(random.Random):
    def choice(self, seq):
        return seq[0]


def test_quote_page_renders_chosen_quote():
    client = TestClient(create_quotes_app(rng=FirstChoice()))
    resp = client.get("/")
    assert resp.status_code == 200
    assert "Treat yo self!" in resp.text
    assert "Tom Haverford &amp; Donna Meagle" in resp.text
    assert "Get Another Quote" in resp.text


def test_visits_counted_per_app():
    app = create_quotes_app(rng=random.Random(7))
    client = TestClient(app)
    for _ in range(3):
        resp = client.get("/")
    assert "Total Visits: 3" in resp.text
    assert app.state.visits.count == 3

    other = TestClient(create_quotes_app())
    assert "Total Visits: 1" in other.get("/").text


def test_random_quote_comes_from_the_list():
    client = TestClient(create_quotes_app(rng=random.Random(42)))
    html = client.get("/").text
    assert any(q.character.replace("&", "&amp;") in html for q in QUOTES)


def test_visit_counter():
    counter = VisitCounter()
    assert counter.count == 0
    assert counter.increment() == 1
    assert counter.increment() == 2
    assert counter.count == 2
