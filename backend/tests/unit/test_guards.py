"""Unit tests for the guard pipeline and the authoring gate."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from core.security.tokens import TokenPayload
from infrastructure.database.models import User
from services.articles import ARTICLE_LIMIT_REACHED, check_authoring_allowed
from services.guards import (
    FORBIDDEN,
    SUBSCRIPTION_EXPIRED,
    SUBSCRIPTION_REQUIRED,
    GuardContext,
    GuardDecision,
    active_subscription,
    admin_role,
    expire_subscription,
    run_guards,
)


def _ctx(db: AsyncSession, email: str) -> GuardContext:
    now = datetime.now(UTC)
    claims = TokenPayload(
        sub=email,
        exp=now + timedelta(hours=1),
        iat=now,
        type="access",
        email=email,
    )
    return GuardContext(claims=claims, db=db)


class TestRunGuards:
    async def test_empty_pipeline_allows(self, db_session):
        decision = await run_guards(_ctx(db_session, "x@example.com"), [])

        assert decision.allowed

    async def test_first_denial_wins_and_stops(self, db_session):
        calls = []

        async def deny_first(ctx):
            calls.append("first")
            return GuardDecision.deny(403, "first")

        async def never_runs(ctx):
            calls.append("second")
            return GuardDecision.deny(401, "second")

        decision = await run_guards(_ctx(db_session, "x@example.com"), [deny_first, never_runs])

        assert not decision.allowed
        assert decision.status_code == 403
        assert decision.reason == "first"
        assert calls == ["first"]


class TestAdminRole:
    async def test_admin_allowed(self, db_session, admin_user: User):
        assert (await admin_role(_ctx(db_session, admin_user.email))).allowed

    async def test_regular_user_denied(self, db_session, test_user: User):
        decision = await admin_role(_ctx(db_session, test_user.email))

        assert not decision.allowed
        assert decision.status_code == 403
        assert decision.reason == FORBIDDEN

    async def test_unknown_user_denied(self, db_session):
        assert not (await admin_role(_ctx(db_session, "ghost@example.com"))).allowed


class TestActiveSubscription:
    async def test_live_subscription_allowed(self, db_session, subscribed_user: User):
        assert (await active_subscription(_ctx(db_session, subscribed_user.email))).allowed

    async def test_unsubscribed_denied(self, db_session, test_user: User):
        decision = await active_subscription(_ctx(db_session, test_user.email))

        assert not decision.allowed
        assert decision.reason == SUBSCRIPTION_REQUIRED

    async def test_expired_is_denied_and_healed(self, db_session, expired_user: User):
        decision = await active_subscription(_ctx(db_session, expired_user.email))

        assert not decision.allowed
        assert decision.status_code == 403
        assert decision.reason == SUBSCRIPTION_EXPIRED

        await db_session.refresh(expired_user)
        assert expired_user.has_subscription is False
        assert expired_user.subscription_end is None

        # Next request sees the corrected state
        decision = await active_subscription(_ctx(db_session, expired_user.email))
        assert decision.reason == SUBSCRIPTION_REQUIRED

    async def test_flag_without_expiry_is_allowed(self, db_session, test_user: User):
        test_user.has_subscription = True
        test_user.subscription_end = None
        await db_session.commit()

        assert (await active_subscription(_ctx(db_session, test_user.email))).allowed


class TestExpireSubscription:
    async def test_no_write_for_live_window(self, db_session, subscribed_user: User):
        assert await expire_subscription(db_session, subscribed_user) is False
        assert subscribed_user.has_subscription is True

    async def test_idempotent(self, db_session, expired_user: User):
        assert await expire_subscription(db_session, expired_user) is True
        assert await expire_subscription(db_session, expired_user) is False


class TestAuthoringGate:
    async def test_first_article_allowed(self, db_session, test_user: User):
        assert (await check_authoring_allowed(_ctx(db_session, test_user.email))).allowed

    async def test_second_article_denied_without_subscription(
        self, db_session, test_user: User, article_factory
    ):
        await article_factory(author_email=test_user.email)

        decision = await check_authoring_allowed(_ctx(db_session, test_user.email))

        assert not decision.allowed
        assert decision.status_code == 403
        assert decision.reason == ARTICLE_LIMIT_REACHED

    async def test_subscriber_is_unlimited(self, db_session, subscribed_user: User, article_factory):
        for i in range(3):
            await article_factory(title=f"Post {i}", author_email=subscribed_user.email)

        assert (await check_authoring_allowed(_ctx(db_session, subscribed_user.email))).allowed

    async def test_expired_subscriber_is_healed_then_limited(
        self, db_session, expired_user: User, article_factory
    ):
        await article_factory(author_email=expired_user.email)

        decision = await check_authoring_allowed(_ctx(db_session, expired_user.email))

        assert not decision.allowed
        await db_session.refresh(expired_user)
        assert expired_user.has_subscription is False

    async def test_unknown_user_is_not_found(self, db_session):
        decision = await check_authoring_allowed(_ctx(db_session, "ghost@example.com"))

        assert not decision.allowed
        assert decision.status_code == 404


@pytest.mark.parametrize("status_code", [401, 403, 404])
def test_deny_carries_status(status_code):
    decision = GuardDecision.deny(status_code, "nope")

    assert decision == GuardDecision(allowed=False, status_code=status_code, reason="nope")
