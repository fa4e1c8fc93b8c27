"""Tests for TimelineServiceClient against an in-memory record store."""

import json

import httpx
import pytest
from pydantic import ValidationError

from tracker_core_lib.clients import TimelineServiceClient
from tracker_core_lib.config import TrackerSettings
from tracker_core_lib.exceptions import (
    ClaimRejectedError,
    CommentValidationError,
    NotAuthorizedError,
    RecordNotFoundError,
    RecordStoreError,
    ValidationFailure,
)

from conftest import FakeRecordStore


def timeline_row(id, **fields):
    row = {
        "id": id,
        "username": f"user{id}",
        "email": None,
        "email_verified": False,
        "created_at": f"2024-01-{id:02d}T00:00:00Z",
    }
    row.update(fields)
    return row


def comment_row(id, timeline_id=1, parent=None, **fields):
    row = {
        "id": id,
        "timeline_id": timeline_id,
        "commenter_email": "a@example.com",
        "commenter_username": "a",
        "comment_text": f"comment {id}",
        "parent_comment_id": parent,
        "is_timeline_owner": False,
        "is_deleted": False,
        "created_at": f"2024-02-{id:02d}T00:00:00Z",
    }
    row.update(fields)
    return row


@pytest.mark.asyncio
async def test_get_timelines_newest_first(client_for):
    store = FakeRecordStore(timelines=[timeline_row(1), timeline_row(3), timeline_row(2)])
    client = client_for(store)

    timelines = await client.get_timelines()

    assert [t.id for t in timelines] == [3, 2, 1]
    request = store.requests[0]
    assert request.url.path == "/rest/v1/timelines"
    assert request.url.params["order"] == "created_at.desc"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["Authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_get_timeline_not_found(client_for):
    client = client_for(FakeRecordStore(timelines=[timeline_row(1)]))
    with pytest.raises(RecordNotFoundError):
        await client.get_timeline(99)


@pytest.mark.asyncio
async def test_http_errors_become_record_store_errors(client_for):
    store = FakeRecordStore()
    store.fail_with_status = 500
    client = client_for(store)

    with pytest.raises(RecordStoreError) as exc_info:
        await client.get_timelines()
    assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_transport_errors_become_record_store_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = TimelineServiceClient("http://store.test", transport=httpx.MockTransport(handler))
    with pytest.raises(RecordStoreError, match="unreachable"):
        await client.get_timelines()


@pytest.mark.asyncio
async def test_claim_sets_verified_email(client_for):
    store = FakeRecordStore(timelines=[timeline_row(1, username="maple")])
    client = client_for(store)

    result = await client.claim_timeline(1, "me@example.com")

    assert result.timeline_id == 1
    assert result.username == "maple"
    assert "maple" in result.message

    patch = json.loads(store.requests_with_method("PATCH")[0].content)
    assert patch == {
        "email": "me@example.com",
        "email_verified": True,
        "verification_token": None,
        "verification_token_expires": None,
    }
    claimed = await client.get_timeline(1)
    assert claimed.email_verified and claimed.email == "me@example.com"


@pytest.mark.asyncio
async def test_second_claim_fails(client_for):
    store = FakeRecordStore(timelines=[timeline_row(1, username="maple")])
    client = client_for(store)

    await client.claim_timeline(1, "me@example.com")
    with pytest.raises(ClaimRejectedError, match="already been claimed"):
        await client.claim_timeline(1, "someone@example.com")

    assert len(store.requests_with_method("PATCH")) == 1
    assert (await client.get_timeline(1)).email == "me@example.com"


@pytest.mark.asyncio
async def test_claim_rejects_email_used_by_another_username(client_for):
    store = FakeRecordStore(timelines=[
        timeline_row(1, username="maple"),
        timeline_row(2, username="birch", email="me@example.com", email_verified=True),
    ])
    client = client_for(store)

    with pytest.raises(ClaimRejectedError, match="already in use"):
        await client.claim_timeline(1, "me@example.com")
    assert store.requests_with_method("PATCH") == []


@pytest.mark.asyncio
async def test_claim_missing_timeline(client_for):
    with pytest.raises(RecordNotFoundError):
        await client_for(FakeRecordStore()).claim_timeline(5, "me@example.com")


@pytest.mark.asyncio
async def test_create_timeline_marks_user_submission(client_for):
    store = FakeRecordStore()
    client = client_for(store)

    timeline = await client.create_timeline(
        {"id": 500, "email": "me@example.com", "username": "maple", "stream": "CEC"}
    )

    assert timeline.id == 1
    assert timeline.email_verified is True
    assert timeline.data_source == "user_submission"
    body = json.loads(store.requests_with_method("POST")[0].content)
    assert "id" not in body
    assert body["created_at"] == body["updated_at"]
    assert store.requests[0].headers["Prefer"] == "return=representation"


@pytest.mark.asyncio
async def test_create_timeline_requires_email(client_for):
    store = FakeRecordStore()
    with pytest.raises(ValidationFailure):
        await client_for(store).create_timeline({"username": "maple"})
    assert store.requests == []


@pytest.mark.asyncio
async def test_update_rejects_non_owner(client_for):
    store = FakeRecordStore(timelines=[
        timeline_row(1, email="owner@example.com", email_verified=True),
    ])
    with pytest.raises(NotAuthorizedError):
        await client_for(store).update_timeline(1, "me@example.com", {"aor_date": "2024-01-01"})
    assert store.requests_with_method("PATCH") == []


@pytest.mark.asyncio
async def test_update_rejects_unverified_owner(client_for):
    store = FakeRecordStore(timelines=[
        timeline_row(1, email="me@example.com", email_verified=False),
    ])
    with pytest.raises(NotAuthorizedError):
        await client_for(store).update_timeline(1, "me@example.com", {"aor_date": "2024-01-01"})


@pytest.mark.asyncio
async def test_update_sends_only_editable_fields(client_for):
    store = FakeRecordStore(timelines=[
        timeline_row(1, email="me@example.com", email_verified=True),
    ])
    client = client_for(store)

    message = await client.update_timeline(
        1, "me@example.com", {"aor_date": "2024-01-01", "email": "evil@example.com", "id": 9}
    )

    assert message == "Timeline updated successfully"
    patch = json.loads(store.requests_with_method("PATCH")[0].content)
    assert set(patch) == {"aor_date", "last_updated_by_user"}
    assert (await client.get_timeline(1)).aor_date == "2024-01-01"


@pytest.mark.asyncio
async def test_get_timeline_comments_threaded(client_for):
    store = FakeRecordStore(comments=[
        comment_row(1),
        comment_row(2, parent=1),
        comment_row(3, is_deleted=True),
        comment_row(4, parent=3),
        comment_row(5, timeline_id=2),
    ])
    comments = await client_for(store).get_timeline_comments(1)

    assert [c.id for c in comments] == [1]
    assert [r.id for r in comments[0].replies] == [2]
    params = store.requests[0].url.params
    assert params["is_deleted"] == "is.false"
    assert params["order"] == "created_at.asc"


@pytest.mark.asyncio
async def test_post_comment_validation_happens_before_any_request(client_for):
    store = FakeRecordStore(timelines=[timeline_row(1)])
    client = client_for(store)

    with pytest.raises(CommentValidationError, match="Comment cannot be empty"):
        await client.post_comment(1, "me@example.com", "   ")
    with pytest.raises(CommentValidationError, match="less than 2000"):
        await client.post_comment(1, "me@example.com", "a" * 2001)
    with pytest.raises(CommentValidationError, match="Valid email"):
        await client.post_comment(1, "nope", "hello")

    assert store.requests == []


@pytest.mark.asyncio
async def test_post_comment_by_owner(client_for):
    store = FakeRecordStore(timelines=[
        timeline_row(1, username="maple", email="me@example.com", email_verified=True),
    ])
    comment = await client_for(store).post_comment(1, "me@example.com", "  Got my eCOPR!  ")

    assert comment.comment_text == "Got my eCOPR!"
    assert comment.commenter_username == "maple"
    assert comment.is_timeline_owner is True
    assert comment.parent_comment_id is None


@pytest.mark.asyncio
async def test_post_reply_by_visitor(client_for):
    store = FakeRecordStore(
        timelines=[timeline_row(1, email="owner@example.com", email_verified=True)],
        comments=[comment_row(1)],
    )
    comment = await client_for(store).post_comment(1, "guest@example.com", "Congrats", parent_comment_id=1)

    assert comment.commenter_username == "guest"
    assert comment.is_timeline_owner is False
    assert comment.parent_comment_id == 1


@pytest.mark.asyncio
async def test_owner_flag_is_a_snapshot(client_for):
    store = FakeRecordStore(timelines=[timeline_row(1, username="maple")])
    client = client_for(store)

    before = await client.post_comment(1, "me@example.com", "first")
    await client.claim_timeline(1, "me@example.com")

    stored = store.tables["timeline_comments"][0]
    assert before.is_timeline_owner is False
    assert stored["is_timeline_owner"] is False


@pytest.mark.asyncio
async def test_get_user_comments_with_timeline_and_replies(client_for):
    store = FakeRecordStore(
        timelines=[timeline_row(1, username="maple")],
        comments=[
            comment_row(1, commenter_email="me@example.com"),
            comment_row(2, parent=1),
            comment_row(3, parent=1, is_deleted=True),
            comment_row(4, commenter_email="me@example.com"),
        ],
    )
    comments = await client_for(store).get_user_comments("me@example.com")

    assert [c.id for c in comments] == [4, 1]
    assert comments[1].timeline.username == "maple"
    assert comments[1].reply_count == 1
    assert [r.id for r in comments[1].replies] == [2]
    assert comments[0].reply_count == 0


@pytest.mark.asyncio
async def test_verify_connection(client_for):
    store = FakeRecordStore(timelines=[timeline_row(1)])
    await client_for(store).verify_connection()
    assert store.requests[0].url.params["limit"] == "1"


def test_from_settings():
    settings = TrackerSettings(store_url="https://store.example.co/", store_key="k", request_timeout=5)
    client = TimelineServiceClient.from_settings(settings)
    assert client.base_url == "https://store.example.co"
    assert client.api_key == "k"
    assert client.timeout == 5


@pytest.mark.asyncio
async def test_null_verified_flag_reads_as_unverified(client_for):
    store = FakeRecordStore(timelines=[timeline_row(1, email_verified=None)])
    timelines = await client_for(store).get_timelines()
    assert timelines[0].email_verified is False


@pytest.mark.asyncio
async def test_malformed_row_becomes_record_store_error(client_for):
    store = FakeRecordStore(timelines=[timeline_row(1), timeline_row(2, email_verified=True)])
    with pytest.raises(RecordStoreError, match="malformed") as exc_info:
        await client_for(store).get_timelines()
    assert isinstance(exc_info.value.__cause__, ValidationError)
