"""Integration tests for article listing, authoring and moderation endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from infrastructure.database.models import Article

pytestmark = pytest.mark.asyncio


def _article_payload(publisher_id: str, title: str = "Fresh Take") -> dict:
    return {
        "title": title,
        "image": "https://img.example.com/fresh.png",
        "publisher": publisher_id,
        "tags": [{"value": "politics", "label": "Politics"}],
        "description": "What happened today",
        "content": "The long version.",
    }


class TestListArticles:
    """Tests for GET /articles endpoint."""

    async def test_second_page_newest_first(self, async_client: AsyncClient, article_factory):
        for i in range(12):
            await article_factory(title=f"Article {i}", minutes_ago=i)

        response = await async_client.get("/articles?page=2&limit=5")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total"] == 12
        assert data["page"] == 2
        assert data["limit"] == 5
        assert data["totalPages"] == 3
        assert [a["title"] for a in data["data"]] == [f"Article {i}" for i in range(5, 10)]

    async def test_search_matches_title_or_content(self, async_client: AsyncClient, article_factory):
        await article_factory(title="Election night", minutes_ago=1)
        await article_factory(title="Weather", content="An ELECTION-free forecast", minutes_ago=2)
        await article_factory(title="Sports", minutes_ago=3)

        response = await async_client.get("/articles?search=election")

        titles = [a["title"] for a in response.json()["data"]]
        assert titles == ["Election night", "Weather"]

    async def test_search_escapes_wildcards(self, async_client: AsyncClient, article_factory):
        await article_factory(title="100% accurate")
        await article_factory(title="1000 reasons")

        response = await async_client.get("/articles", params={"search": "0%"})

        assert [a["title"] for a in response.json()["data"]] == ["100% accurate"]

    async def test_tag_filter_matches_any(self, async_client: AsyncClient, article_factory):
        await article_factory(title="Tech", tags=("tech",), minutes_ago=1)
        await article_factory(title="Money", tags=("finance", "markets"), minutes_ago=2)
        await article_factory(title="Food", tags=("food",), minutes_ago=3)

        response = await async_client.get("/articles?tags=tech,markets")

        assert [a["title"] for a in response.json()["data"]] == ["Tech", "Money"]

    async def test_status_filter_repeatable(self, async_client: AsyncClient, article_factory):
        await article_factory(title="Live", status="approved", minutes_ago=1)
        await article_factory(title="Waiting", status="pending", minutes_ago=2)
        await article_factory(title="Rejected", status="declined", minutes_ago=3)

        response = await async_client.get("/articles?status=pending&status=declined")

        assert [a["title"] for a in response.json()["data"]] == ["Waiting", "Rejected"]

    async def test_publisher_filter(self, async_client: AsyncClient, article_factory, publisher):
        await article_factory(title="Filed")

        matching = await async_client.get(f"/articles?publisher={publisher.id}")
        other = await async_client.get("/articles?publisher=00000000-0000-0000-0000-000000000000")

        assert matching.json()["total"] == 1
        assert matching.json()["data"][0]["publisher"]["name"] == "Daily Planet"
        assert other.json()["total"] == 0

    async def test_trending_orders_by_views(self, async_client: AsyncClient, article_factory):
        for views in (5, 50, 0, 20, 10, 40, 30):
            await article_factory(title=f"Views {views}", views=views)
        await article_factory(title="Hidden", views=999, status="pending")

        response = await async_client.get("/articles/trending")

        titles = [a["title"] for a in response.json()["data"]]
        assert titles == ["Views 50", "Views 40", "Views 30", "Views 20", "Views 10", "Views 5"]


class TestPremiumArticles:
    """Tests for GET /articles/premium and premium single-article access."""

    async def test_premium_list_for_subscriber(
        self, async_client: AsyncClient, article_factory, subscribed_headers
    ):
        await article_factory(title="Gold", is_premium=True, minutes_ago=1)
        await article_factory(title="Free", minutes_ago=2)
        await article_factory(title="Gold draft", is_premium=True, status="pending", minutes_ago=3)

        response = await async_client.get("/articles/premium", headers=subscribed_headers)

        assert response.status_code == 200
        assert [a["title"] for a in response.json()["data"]] == ["Gold"]

    async def test_premium_list_requires_subscription(self, async_client: AsyncClient, auth_headers):
        response = await async_client.get("/articles/premium", headers=auth_headers)

        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "message": "This content requires an active subscription",
        }

    async def test_lapsed_subscriber_denied_and_healed(
        self, async_client: AsyncClient, db_session, expired_user, expired_headers
    ):
        response = await async_client.get("/articles/premium", headers=expired_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Your subscription has expired"

        await db_session.refresh(expired_user)
        assert expired_user.has_subscription is False
        assert expired_user.subscription_end is None

        again = await async_client.get("/articles/premium", headers=expired_headers)
        assert again.json()["message"] == "This content requires an active subscription"

    async def test_single_premium_article_access(
        self,
        async_client: AsyncClient,
        article_factory,
        test_user,
        auth_headers,
        subscribed_headers,
        admin_headers,
        headers_for,
    ):
        article = await article_factory(is_premium=True, author_email="writer@example.com")
        url = f"/articles/{article.id}"

        assert (await async_client.get(url, headers=auth_headers)).status_code == 403
        assert (await async_client.get(url, headers=subscribed_headers)).status_code == 200
        assert (await async_client.get(url, headers=admin_headers)).status_code == 200
        assert (await async_client.get(url, headers=headers_for("writer@example.com"))).status_code == 200

    async def test_single_free_article(self, async_client: AsyncClient, article_factory, auth_headers):
        article = await article_factory(title="Open")

        response = await async_client.get(f"/articles/{article.id}", headers=auth_headers)

        data = response.json()["data"]
        assert data["title"] == "Open"
        assert data["tags"] == [{"value": "news", "label": "News"}]
        assert data["isPremium"] is False

    async def test_single_article_not_found(self, async_client: AsyncClient, auth_headers):
        for article_id in ("00000000-0000-0000-0000-000000000000", "not-a-uuid"):
            response = await async_client.get(f"/articles/{article_id}", headers=auth_headers)
            assert response.status_code == 404
            assert response.json()["message"] == "Article not found"


class TestAuthoring:
    """Tests for article creation, editing and deletion."""

    async def test_free_user_limited_to_one_article(
        self, async_client: AsyncClient, test_user, auth_headers, publisher
    ):
        first = await async_client.post(
            "/articles", json=_article_payload(publisher.id), headers=auth_headers
        )

        assert first.status_code == 201
        body = first.json()
        assert body["message"] == "Article added successfully"
        assert body["data"]["status"] == "pending"
        assert body["data"]["authorName"] == "Test User"
        assert body["data"]["publisherId"] == publisher.id

        second = await async_client.post(
            "/articles", json=_article_payload(publisher.id, "Another"), headers=auth_headers
        )

        assert second.status_code == 403
        assert second.json() == {
            "success": False,
            "message": "Subscribe to post more than one article",
        }

    async def test_subscriber_may_author_many(
        self, async_client: AsyncClient, db_session, subscribed_headers, publisher
    ):
        for i in range(3):
            response = await async_client.post(
                "/articles",
                json=_article_payload(publisher.id, f"Piece {i}"),
                headers=subscribed_headers,
            )
            assert response.status_code == 201

        count = await db_session.execute(select(func.count()).select_from(Article))
        assert count.scalar() == 3

    async def test_unknown_publisher(self, async_client: AsyncClient, test_user, auth_headers):
        response = await async_client.post(
            "/articles",
            json=_article_payload("00000000-0000-0000-0000-000000000000"),
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Publisher not found"

    async def test_tags_required(self, async_client: AsyncClient, test_user, auth_headers, publisher):
        payload = _article_payload(publisher.id)
        payload["tags"] = []

        response = await async_client.post("/articles", json=payload, headers=auth_headers)

        assert response.status_code == 400

    async def test_author_updates_article(
        self, async_client: AsyncClient, db_session, article_factory, test_user, auth_headers
    ):
        article = await article_factory(author_email=test_user.email)

        response = await async_client.patch(
            f"/articles/{article.id}",
            json={"title": "Edited", "tags": [{"value": "tech", "label": "Tech"}]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        await db_session.refresh(article)
        assert article.title == "Edited"
        assert [t.value for t in article.tags] == ["tech"]

    async def test_non_author_cannot_update(
        self, async_client: AsyncClient, article_factory, auth_headers
    ):
        article = await article_factory(author_email="someone@example.com")

        response = await async_client.patch(
            f"/articles/{article.id}", json={"title": "Hijacked"}, headers=auth_headers
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Unauthorized access"

    async def test_empty_update_rejected(
        self, async_client: AsyncClient, article_factory, test_user, auth_headers
    ):
        article = await article_factory(author_email=test_user.email)

        response = await async_client.patch(f"/articles/{article.id}", json={}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Failed to update article"

    async def test_delete_by_admin(
        self, async_client: AsyncClient, db_session, article_factory, admin_headers
    ):
        article = await article_factory()
        article_id = article.id

        response = await async_client.delete(f"/articles/{article_id}", headers=admin_headers)

        assert response.status_code == 200
        result = await db_session.execute(select(Article).where(Article.id == article_id))
        assert result.scalar_one_or_none() is None

    async def test_delete_by_stranger_forbidden(
        self, async_client: AsyncClient, article_factory, auth_headers
    ):
        article = await article_factory(author_email="someone@example.com")

        response = await async_client.delete(f"/articles/{article.id}", headers=auth_headers)

        assert response.status_code == 403


class TestViewsAndModeration:
    """Tests for view counting and admin moderation."""

    async def test_view_increments(self, async_client: AsyncClient, db_session, article_factory):
        article = await article_factory(views=3)

        for _ in range(2):
            response = await async_client.post(f"/articles/{article.id}/view")
            assert response.status_code == 200

        await db_session.refresh(article)
        assert article.views == 5

    async def test_view_unknown_article(self, async_client: AsyncClient):
        response = await async_client.post("/articles/00000000-0000-0000-0000-000000000000/view")

        assert response.status_code == 404

    async def test_make_premium(
        self, async_client: AsyncClient, db_session, article_factory, admin_headers
    ):
        article = await article_factory()

        response = await async_client.patch(f"/articles/{article.id}/premium", headers=admin_headers)

        assert response.status_code == 200
        await db_session.refresh(article)
        assert article.is_premium is True

    async def test_make_premium_requires_admin(
        self, async_client: AsyncClient, article_factory, auth_headers
    ):
        article = await article_factory()

        response = await async_client.patch(f"/articles/{article.id}/premium", headers=auth_headers)

        assert response.status_code == 403

    async def test_decline_with_reason(
        self, async_client: AsyncClient, db_session, article_factory, admin_headers
    ):
        article = await article_factory(status="pending")

        response = await async_client.patch(
            f"/admin/articles/{article.id}",
            json={"status": "declined", "declinedReason": "Needs sources"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Article declined successfully"
        await db_session.refresh(article)
        assert article.status == "declined"
        assert article.declined_reason == "Needs sources"

    async def test_invalid_status(self, async_client: AsyncClient, article_factory, admin_headers):
        article = await article_factory()

        response = await async_client.patch(
            f"/admin/articles/{article.id}",
            json={"status": "published"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid status"


class TestAuthorListings:
    """Tests for the per-author listings."""

    async def test_my_articles_all_statuses(
        self, async_client: AsyncClient, article_factory, test_user, auth_headers
    ):
        await article_factory(title="Mine live", author_email=test_user.email, minutes_ago=1)
        await article_factory(
            title="Mine pending", author_email=test_user.email, status="pending", minutes_ago=2
        )
        await article_factory(title="Not mine", author_email="other@example.com")

        response = await async_client.get(
            f"/articles/my-articles/{test_user.email}?limit=1", headers=auth_headers
        )

        data = response.json()["data"]
        assert data["total"] == 2
        assert data["totalPages"] == 2
        assert [a["title"] for a in data["articles"]] == ["Mine live"]

    async def test_my_articles_other_email_forbidden(self, async_client: AsyncClient, auth_headers):
        response = await async_client.get(
            "/articles/my-articles/other@example.com", headers=auth_headers
        )

        assert response.status_code == 403

    async def test_user_articles_summary(
        self, async_client: AsyncClient, article_factory, test_user, auth_headers
    ):
        await article_factory(title="Only one", author_email=test_user.email)

        response = await async_client.get(f"/articles/user/{test_user.email}", headers=auth_headers)

        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["title"] == "Only one"
        assert set(data[0]) == {"id", "title", "status", "isPremium", "createdAt"}
