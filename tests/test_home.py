def test_home_renders_inside_layout(client, parse):
    r = client.get("/")
    assert r.status_code == 200, r.text
    assert r.headers["content-type"].startswith("text/html")

    page = parse(r.text)
    assert page.find_all("header")
    assert page.find_all("footer")
    assert page.texts("title") == ["Business Map"]


def test_home_has_single_map_and_list_headings(client, parse):
    page = parse(client.get("/").text)

    assert page.texts("h1") == ["Map"]
    assert page.texts("h2") == ["Business List"]


def test_home_links_to_business_creation(client, parse):
    page = parse(client.get("/").text)

    links = [a for a in page.find_all("a") if a["text"].strip() == "Create a new business"]
    assert len(links) == 1
    assert links[0]["attrs"]["href"] == "/businesses/create"


def test_home_mount_points_are_empty(client, parse, make_business):
    make_business(name="Corner Shop", latitude=51.5, longitude=-0.12)
    page = parse(client.get("/").text)

    maps = page.find_all("map")
    assert len(maps) == 1
    assert maps[0]["text"].strip() == ""
    assert maps[0]["attrs"]["data-markers-url"] == "/api/v1/businesses/markers"
    assert maps[0]["attrs"]["data-zoom"] == "2"

    listing = page.find_all("div", id="example")
    assert len(listing) == 1
    assert listing[0]["text"].strip() == ""
    assert listing[0]["attrs"]["data-source"] == "/api/v1/businesses"
    assert "Corner Shop" not in client.get("/").text


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy"}


def test_tracebacks_not_exposed_by_default():
    from app.core.config import Settings
    from app.main import app

    assert Settings(_env_file=None).DEBUG is False
    assert app.debug is False
