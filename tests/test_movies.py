import pytest
from sqlalchemy.exc import SQLAlchemyError

from catalog_api.models.movie import Movie
from catalog_api.models.box_office import BoxOffice
from catalog_api.services.boxoffice_service import BoxOfficeError
from catalog_api.services.movie_service import MAX_LIMIT, MovieService, parse_limit


def create_movie(client, headers, title="Inception", genre="Sci-Fi", release_date="2010-07-16", **extra):
    payload = {"title": title, "genre": genre, "releaseDate": release_date, **extra}
    return client.post("/movies", json=payload, headers=headers)


def list_all(client, **params):
    """Follow nextCursor until the last page, collecting every item."""
    items = []
    cursor = None
    while True:
        query = dict(params)
        if cursor:
            query["cursor"] = cursor
        body = client.get("/movies", params=query).json()
        items.extend(body["items"])
        cursor = body.get("nextCursor")
        if cursor is None:
            return items


UPSTREAM_INCEPTION = {
    "title": "Inception",
    "distributor": "Warner Bros.",
    "releaseDate": "2010-07-16",
    "budget": 160000000,
    "revenue": {"worldwide": 836800000, "openingWeekendUSA": 62785337},
    "mpaRating": "PG-13",
    "currency": "USD",
    "source": "BoxOfficeMojo",
    "lastUpdated": "2024-01-01T00:00:00Z",
}


# ============================================
# Creation
# ============================================

def test_create_movie_with_box_office(client, auth_headers, box_office):
    box_office.records["Inception"] = UPSTREAM_INCEPTION

    response = create_movie(client, auth_headers, distributor="Warner Bros.", budget=160000000, mpaRating="PG-13")

    assert response.status_code == 201
    assert response.headers["Location"] == "/movies/Inception"
    body = response.json()
    assert body["id"]
    assert body["title"] == "Inception"
    assert body["releaseDate"] == "2010-07-16"
    assert body["budget"] == 160000000
    assert body["mpaRating"] == "PG-13"
    assert body["boxOffice"] == {
        "revenue": {"worldwide": 836800000, "openingWeekendUSA": 62785337},
        "currency": "USD",
        "source": "BoxOfficeMojo",
        "lastUpdated": "2024-01-01T00:00:00Z",
    }
    assert box_office.calls == ["Inception"]


def test_create_movie_without_upstream_match_omits_box_office(client, auth_headers):
    response = create_movie(client, auth_headers, title="Obscure Film")

    assert response.status_code == 201
    assert "boxOffice" not in response.json()

    items = client.get("/movies").json()["items"]
    assert len(items) == 1
    assert "boxOffice" not in items[0]


def test_upstream_failure_does_not_block_creation(client, auth_headers, box_office, db_session):
    box_office.records["Inception"] = BoxOfficeError("boxoffice: upstream 503", 503)

    response = create_movie(client, auth_headers)

    assert response.status_code == 201
    assert "boxOffice" not in response.json()
    assert db_session.query(BoxOffice).count() == 0
    assert db_session.query(Movie).count() == 1


def test_missing_opening_weekend_is_stored_as_null(client, auth_headers, box_office, db_session):
    box_office.records["Inception"] = {
        **UPSTREAM_INCEPTION,
        "revenue": {"worldwide": 1000},
    }

    body = create_movie(client, auth_headers).json()

    assert body["boxOffice"]["revenue"] == {"worldwide": 1000}
    row = db_session.query(BoxOffice).one()
    assert row.revenue_opening_weekend_usa is None
    assert row.revenue_worldwide == 1000


def test_missing_worldwide_defaults_to_zero(client, auth_headers, box_office):
    box_office.records["Inception"] = {**UPSTREAM_INCEPTION, "revenue": {}}

    body = create_movie(client, auth_headers).json()

    assert body["boxOffice"]["revenue"] == {"worldwide": 0}


def test_null_revenue_still_enriches(client, auth_headers, box_office, db_session):
    box_office.records["Inception"] = {**UPSTREAM_INCEPTION, "revenue": None}

    response = create_movie(client, auth_headers)

    assert response.status_code == 201
    assert response.json()["boxOffice"]["revenue"] == {"worldwide": 0}
    assert response.json()["boxOffice"]["currency"] == "USD"
    assert db_session.query(BoxOffice).one().revenue_worldwide == 0


def test_duplicate_title_keeps_single_row(client, auth_headers, db_session):
    first = create_movie(client, auth_headers, genre="Sci-Fi")
    second = create_movie(client, auth_headers, genre="Drama")

    assert first.status_code == 201
    assert second.status_code == 201
    # The stored movie comes back unchanged
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["genre"] == "Sci-Fi"

    assert db_session.query(Movie).filter(Movie.title == "Inception").count() == 1


def test_duplicate_title_with_upstream_match_keeps_original_enrichment(client, auth_headers, box_office, db_session):
    first = create_movie(client, auth_headers)
    assert "boxOffice" not in first.json()

    box_office.records["Inception"] = UPSTREAM_INCEPTION
    second = create_movie(client, auth_headers)

    assert second.status_code == 201
    assert "boxOffice" not in second.json()
    assert db_session.query(BoxOffice).count() == 0


def test_failed_box_office_insert_rolls_back_movie(client, auth_headers, box_office, monkeypatch, db_session):
    box_office.records["Inception"] = UPSTREAM_INCEPTION

    def failing_upsert(db, movie_id, info):
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(MovieService, "_upsert_box_office", staticmethod(failing_upsert))

    response = create_movie(client, auth_headers)

    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL"
    assert client.get("/movies").json()["items"] == []
    assert db_session.query(Movie).count() == 0


@pytest.mark.parametrize("payload, message", [
    ({"title": "  ", "genre": "Drama", "releaseDate": "2010-07-16"}, "required"),
    ({"title": "X", "genre": "", "releaseDate": "2010-07-16"}, "required"),
    ({"title": "X", "genre": "Drama", "releaseDate": "   "}, "required"),
    ({"title": "X", "genre": "Drama", "releaseDate": "2010/07/16"}, "releaseDate"),
    ({"title": "X", "genre": "Drama", "releaseDate": "2010-7-16"}, "releaseDate"),
])
def test_create_movie_validation(client, auth_headers, box_office, payload, message):
    response = client.post("/movies", json=payload, headers=auth_headers)

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert message in response.json()["message"]
    # Invalid candidates never reach the upstream
    assert box_office.calls == []


def test_release_date_shape_only(client, auth_headers):
    response = create_movie(client, auth_headers, release_date="2010-13-45")

    assert response.status_code == 201


def test_create_movie_invalid_body(client, auth_headers):
    response = client.post("/movies", content="not json", headers={**auth_headers, "Content-Type": "application/json"})

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


# ============================================
# Authentication
# ============================================

@pytest.mark.parametrize("headers", [
    {},
    {"Authorization": "Bearer wrong-token"},
    {"Authorization": "Token test-token"},
    {"Authorization": "Bearer "},
])
def test_create_movie_requires_bearer_token(client, headers, db_session):
    response = client.post(
        "/movies",
        json={"title": "Inception", "genre": "Sci-Fi", "releaseDate": "2010-07-16"},
        headers=headers,
    )

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"
    assert db_session.query(Movie).count() == 0


def test_listing_is_public(client):
    assert client.get("/movies").status_code == 200


# ============================================
# Listing
# ============================================

def test_empty_listing(client):
    response = client.get("/movies")

    assert response.status_code == 200
    assert response.json() == {"items": []}


def test_listing_is_ordered_by_id(client, auth_headers):
    for title in ["Zodiac", "Alien", "Memento"]:
        create_movie(client, auth_headers, title=title)

    items = client.get("/movies").json()["items"]

    assert [m["title"] for m in items] == ["Zodiac", "Alien", "Memento"]
    ids = [m["id"] for m in items]
    assert ids == sorted(ids)


def test_pagination_walks_every_movie_once(client, auth_headers):
    titles = [f"Movie {i}" for i in range(7)]
    for title in titles:
        create_movie(client, auth_headers, title=title)

    first = client.get("/movies", params={"limit": 3}).json()
    assert len(first["items"]) == 3
    assert first["nextCursor"] == first["items"][-1]["id"]

    items = list_all(client, limit=3)

    assert [m["title"] for m in items] == titles
    assert len({m["id"] for m in items}) == 7


def test_last_page_has_no_cursor(client, auth_headers):
    for i in range(4):
        create_movie(client, auth_headers, title=f"Movie {i}")

    # Exactly limit rows left: no further page
    body = client.get("/movies", params={"limit": 4}).json()

    assert len(body["items"]) == 4
    assert "nextCursor" not in body


def test_pagination_with_filters(client, auth_headers):
    for i in range(6):
        genre = "Drama" if i % 2 == 0 else "Comedy"
        create_movie(client, auth_headers, title=f"Movie {i}", genre=genre)

    items = list_all(client, genre="Drama", limit=1)

    assert [m["title"] for m in items] == ["Movie 0", "Movie 2", "Movie 4"]


def test_filter_by_title_substring_is_case_sensitive(client, auth_headers):
    create_movie(client, auth_headers, title="Star Wars")
    create_movie(client, auth_headers, title="A Star Is Born")
    create_movie(client, auth_headers, title="Lone star")

    assert [m["title"] for m in client.get("/movies", params={"q": "Star"}).json()["items"]] == [
        "Star Wars",
        "A Star Is Born",
    ]
    assert [m["title"] for m in client.get("/movies", params={"q": "star"}).json()["items"]] == ["Lone star"]


def test_filter_by_year_and_genre(client, auth_headers):
    create_movie(client, auth_headers, title="Heat", genre="Crime", release_date="1995-12-15")
    create_movie(client, auth_headers, title="Se7en", genre="Thriller", release_date="1995-09-22")
    create_movie(client, auth_headers, title="The Departed", genre="Crime", release_date="2006-10-06")

    by_year = client.get("/movies", params={"year": "1995"}).json()["items"]
    assert [m["title"] for m in by_year] == ["Heat", "Se7en"]

    both = client.get("/movies", params={"year": "1995", "genre": "Crime"}).json()["items"]
    assert [m["title"] for m in both] == ["Heat"]

    assert client.get("/movies", params={"genre": "crime"}).json()["items"] == []


@pytest.mark.parametrize("limit", ["abc", "0", "-5", ""])
def test_invalid_limit_uses_default(client, auth_headers, limit):
    for i in range(21):
        create_movie(client, auth_headers, title=f"Movie {i:02d}")

    body = client.get("/movies", params={"limit": limit}).json()

    assert len(body["items"]) == 20
    assert body["nextCursor"] == body["items"][-1]["id"]


def test_parse_limit():
    assert parse_limit(None) == 20
    assert parse_limit("5") == 5
    assert parse_limit(7) == 7
    assert parse_limit("1.5") == 20
    assert parse_limit("0") == 20
    assert parse_limit("99999999999999999999") == 20
    assert parse_limit(str(2**63 - 1)) == MAX_LIMIT
    assert parse_limit(MAX_LIMIT) == MAX_LIMIT


def test_huge_limit_beyond_int64_uses_default(client, auth_headers):
    for i in range(21):
        create_movie(client, auth_headers, title=f"Movie {i:02d}")

    response = client.get("/movies", params={"limit": "99999999999999999999"})

    assert response.status_code == 200
    assert len(response.json()["items"]) == 20
    assert "nextCursor" in response.json()


def test_largest_int64_limit_returns_everything(client, auth_headers):
    for i in range(3):
        create_movie(client, auth_headers, title=f"Movie {i}")

    response = client.get("/movies", params={"limit": str(2**63 - 1)})

    assert response.status_code == 200
    assert len(response.json()["items"]) == 3
    assert "nextCursor" not in response.json()


def test_box_office_reconstructed_when_any_column_set(db_session):
    db_session.add(Movie(id="2024-01-01T00:00:00.000000Z", title="Partial", release_date="2024-01-01", genre="Drama"))
    db_session.add(BoxOffice(
        movie_id="2024-01-01T00:00:00.000000Z",
        currency="EUR",
        source="",
        last_updated="",
        revenue_worldwide=0,
    ))
    db_session.commit()

    movies, next_cursor = MovieService.list_movies(db_session)

    assert next_cursor is None
    assert movies[0].box_office is not None
    assert movies[0].box_office.currency == "EUR"
    assert movies[0].box_office.revenue.worldwide == 0
    assert movies[0].box_office.revenue.opening_weekend_usa is None


def test_deleting_movie_cascades_to_box_office(client, auth_headers, box_office, db_session):
    box_office.records["Inception"] = UPSTREAM_INCEPTION
    create_movie(client, auth_headers)

    db_session.query(Movie).delete()
    db_session.commit()

    assert db_session.query(BoxOffice).count() == 0
