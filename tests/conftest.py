import os
from html.parser import HTMLParser

import pytest
from fastapi.testclient import TestClient

# Set environment variables BEFORE importing any app modules
os.environ.update({
    "DATABASE_URL": "sqlite://",
    "AUTO_CREATE_TABLES": "0",
    "LOG_LEVEL": "WARNING",
})

from app.db.database import Base, SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models.business import Business  # noqa: E402


class ParsedPage(HTMLParser):
    """Collects every element with its attributes and direct text."""

    def __init__(self, html):
        super().__init__()
        self.elements = []
        self._open = []
        self.feed(html)

    def handle_starttag(self, tag, attrs):
        element = {"tag": tag, "attrs": dict(attrs), "text": ""}
        self.elements.append(element)
        if tag not in ("input", "meta", "br", "img"):
            self._open.append(element)

    def handle_endtag(self, tag):
        for index in range(len(self._open) - 1, -1, -1):
            if self._open[index]["tag"] == tag:
                del self._open[index:]
                break

    def handle_data(self, data):
        if self._open:
            self._open[-1]["text"] += data

    def find_all(self, tag, **attrs):
        return [
            element for element in self.elements
            if element["tag"] == tag
            and all(element["attrs"].get(key) == value for key, value in attrs.items())
        ]

    def texts(self, tag):
        return [element["text"].strip() for element in self.find_all(tag)]


@pytest.fixture(autouse=True)
def _tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def make_business(db):
    def _make(**fields):
        business = Business(**fields)
        db.add(business)
        db.commit()
        db.refresh(business)
        return business
    return _make


@pytest.fixture()
def parse():
    return ParsedPage
