"""Tests for subscription project and user operations."""

import pytest

from kontent_management import ManagementClient
from kontent_management.core.client import Request
from kontent_management.core.errors import InvalidArgumentError, MalformedResponseError, TransientTransportError
from kontent_management.core.identifiers import ContentItemIdentifier, UserIdentifier
from kontent_management.core.types import SubscriptionProject, SubscriptionUser
from tests.conftest import SUBSCRIPTION_ENDPOINT, load_fixture, load_fixture_json

# =============================================================================
# Listing
# =============================================================================


@pytest.mark.asyncio
async def test_list_subscription_projects(client, transport):
    transport.queue(200, load_fixture("subscription/Projects.json"))
    expected = [SubscriptionProject.from_dict(p) for p in load_fixture_json("subscription/Projects.json")["projects"]]

    projects = await client.subscription.list_projects().to_list()

    assert projects == expected
    assert transport.calls[0].method == "GET"
    assert transport.calls[0].url == f"{SUBSCRIPTION_ENDPOINT}/projects"


@pytest.mark.asyncio
async def test_list_subscription_users(client, transport):
    transport.queue(200, load_fixture("subscription/Users.json"))
    expected = [SubscriptionUser.from_dict(u) for u in load_fixture_json("subscription/Users.json")["users"]]

    users = await client.subscription.list_users().to_list()

    assert users == expected
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_list_users_follows_continuation_token(client, transport):
    user = load_fixture_json("subscription/User.json")
    other = {**user, "id": "U2", "email": "b@x.com"}
    transport.queue(200, {"users": [user], "pagination": {"continuation_token": "page-2"}})
    transport.queue(200, {"users": [other], "pagination": {"continuation_token": None}})

    emails = [u.email async for u in client.subscription.list_users()]

    assert emails == [user["email"], "b@x.com"]
    assert len(transport.calls) == 2
    assert "x-continuation" not in transport.calls[0].headers
    assert transport.calls[1].headers["x-continuation"] == "page-2"


@pytest.mark.asyncio
async def test_list_users_is_lazy_and_relistable(client, transport):
    transport.queue(200, load_fixture("subscription/Users.json"))

    listing = client.subscription.list_users()
    assert transport.calls == []

    first = await listing.to_list()
    second = await client.subscription.list_users().to_list()

    assert first == second
    assert len(transport.calls) == 2


@pytest.mark.asyncio
async def test_get_subscription_project(client, transport):
    raw = load_fixture_json("subscription/Projects.json")["projects"][0]
    transport.queue(200, raw)

    project = await client.subscription.get_project(raw["id"])

    assert project.to_dict() == raw
    assert transport.calls[0].url == f"{SUBSCRIPTION_ENDPOINT}/projects/{raw['id']}"


@pytest.mark.asyncio
async def test_get_subscription_project_requires_id(client, transport):
    with pytest.raises(InvalidArgumentError):
        await client.subscription.get_project(None)

    assert transport.calls == []


# =============================================================================
# Get user
# =============================================================================


@pytest.mark.asyncio
async def test_get_user_by_id(client, transport):
    expected = SubscriptionUser.from_dict(load_fixture_json("subscription/User.json"))
    transport.queue(200, load_fixture("subscription/User.json"))

    user = await client.subscription.get_user(UserIdentifier.by_id(expected.id))

    assert user == expected
    assert transport.calls[0].url == f"{SUBSCRIPTION_ENDPOINT}/users/{expected.id}"


@pytest.mark.asyncio
async def test_get_user_by_email(client, transport):
    expected = SubscriptionUser.from_dict(load_fixture_json("subscription/User.json"))
    transport.queue(200, load_fixture("subscription/User.json"))

    user = await client.subscription.get_user(UserIdentifier.by_email(expected.email))

    assert user == expected
    assert transport.calls[0].url == f"{SUBSCRIPTION_ENDPOINT}/users/email/{expected.email}"


@pytest.mark.asyncio
async def test_user_round_trips_to_fixture(client, transport):
    raw = load_fixture_json("subscription/User.json")
    transport.queue(200, raw)

    user = await client.subscription.get_user(UserIdentifier.by_id(raw["id"]))

    assert user.to_dict() == raw
    assert user.full_name == "John Snow"


@pytest.mark.asyncio
async def test_get_user_by_none_raises(client, transport):
    with pytest.raises(InvalidArgumentError):
        await client.subscription.get_user(None)

    assert transport.calls == []


@pytest.mark.asyncio
async def test_get_user_with_wrong_identifier_type_raises(client, transport):
    with pytest.raises(InvalidArgumentError):
        await client.subscription.get_user(ContentItemIdentifier.by_id("x"))

    assert transport.calls == []


@pytest.mark.asyncio
async def test_get_user_with_directly_built_empty_identifier_raises(client, transport):
    with pytest.raises(InvalidArgumentError):
        await client.subscription.get_user(UserIdentifier("email", ""))

    assert transport.calls == []


@pytest.mark.asyncio
async def test_get_user_with_empty_body_is_malformed(client, transport):
    transport.queue(200)

    with pytest.raises(MalformedResponseError) as exc_info:
        await client.subscription.get_user(UserIdentifier.by_id("U1"))

    assert exc_info.value.status == 200
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_get_project_with_empty_body_is_malformed(client, transport):
    transport.queue(200, "")

    with pytest.raises(MalformedResponseError):
        await client.subscription.get_project("P1")


# =============================================================================
# Activate / deactivate
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("identifier", "fragment"),
    [
        (UserIdentifier.by_id("d94bc87a-c066-48a1-a910-4f991ccc1fb5"), "/d94bc87a-c066-48a1-a910-4f991ccc1fb5"),
        (UserIdentifier.by_email("john.snow@example.com"), "/email/john.snow@example.com"),
    ],
)
@pytest.mark.parametrize("action", ["activate", "deactivate"])
async def test_user_commands_hit_expected_url(client, transport, identifier, fragment, action):
    transport.queue(204)

    result = await getattr(client.subscription, f"{action}_user")(identifier)

    assert result is None
    assert len(transport.calls) == 1
    assert transport.calls[0].method == "PUT"
    assert transport.calls[0].url == f"{SUBSCRIPTION_ENDPOINT}/users{fragment}/{action}"


@pytest.mark.asyncio
@pytest.mark.parametrize("action", ["activate_user", "deactivate_user"])
async def test_user_commands_by_none_raise(client, transport, action):
    with pytest.raises(InvalidArgumentError):
        await getattr(client.subscription, action)(None)

    assert transport.calls == []


@pytest.mark.asyncio
async def test_activate_is_not_retried_by_default(client, transport):
    transport.queue(503)

    with pytest.raises(TransientTransportError):
        await client.subscription.activate_user(UserIdentifier.by_id("U1"))

    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_activate_retried_when_opted_in(client, transport):
    transport.queue(503).queue(204)

    await client.subscription.activate_user(UserIdentifier.by_id("U1"), retry=True)

    assert len(transport.calls) == 2


# =============================================================================
# Configuration
# =============================================================================


@pytest.mark.asyncio
async def test_missing_subscription_id_fails_before_io(transport, monkeypatch):
    monkeypatch.delenv("KONTENT_SUBSCRIPTION_ID", raising=False)
    client = ManagementClient(api_key="key", base_url="https://manage.test/v2", transport=transport)

    with pytest.raises(InvalidArgumentError):
        await client.subscription.get_user(UserIdentifier.by_id("U1"))

    assert transport.calls == []


def test_ids_read_from_environment(transport, monkeypatch):
    monkeypatch.setenv("KONTENT_SUBSCRIPTION_ID", "sub-env")
    monkeypatch.setenv("KONTENT_ENVIRONMENT_ID", "env-env")

    client = ManagementClient(api_key="key", transport=transport)

    assert client.subscription_path() == "/subscriptions/sub-env"
    assert client.environment_path() == "/projects/env-env"


@pytest.mark.asyncio
async def test_aclose_leaves_injected_transport_usable(client, transport):
    await client.aclose()
    transport.queue(204)

    await client.api.execute(Request("DELETE", "/anything"))

    assert client.api.transport is transport
    assert len(transport.calls) == 1
