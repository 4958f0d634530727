import pytest
from sqlalchemy import func, select

from domainstore.app.core.exceptions import ConflictError
from domainstore.app.crud import domain as domain_crud
from domainstore.app.crud import record as record_crud
from domainstore.app.crud import user as user_crud
from domainstore.app.models.record import Record


@pytest.fixture
async def owner(session):
    await domain_crud.create_domain(session, "notes")
    return await user_crud.create_user(session, "owner", "x", is_active=True, domains="notes")


async def count_rows(session, user_id, domain, key):
    return await session.scalar(
        select(func.count()).select_from(Record).where(
            Record.user_id == user_id, Record.domain == domain, Record.key == key
        )
    )


async def test_upsert_is_idempotent(session, owner):
    first = await record_crud.upsert_record(session, owner.id, "notes", "k", "v")
    second = await record_crud.upsert_record(session, owner.id, "notes", "k", "v")

    assert first.id == second.id
    assert second.value == "v"
    assert await count_rows(session, owner.id, "notes", "k") == 1


async def test_upsert_overwrites_value(session, owner):
    await record_crud.upsert_record(session, owner.id, "notes", "k", "old")
    record = await record_crud.upsert_record(session, owner.id, "notes", "k", "new")

    assert record.value == "new"
    assert (await record_crud.get_record(session, owner.id, "notes", "k")).value == "new"


async def test_delete_then_upsert_reuses_the_row(session, owner):
    original = await record_crud.upsert_record(session, owner.id, "notes", "k", "v1")
    assert await record_crud.soft_delete_record(session, owner.id, "notes", "k")
    assert await record_crud.get_record(session, owner.id, "notes", "k") is None

    revived = await record_crud.upsert_record(session, owner.id, "notes", "k", "v2")

    assert revived.id == original.id
    assert revived.is_deleted is False
    assert revived.value == "v2"
    assert await count_rows(session, owner.id, "notes", "k") == 1


async def test_soft_delete_missing_or_deleted_is_noop(session, owner):
    assert await record_crud.soft_delete_record(session, owner.id, "notes", "nope") is False

    await record_crud.upsert_record(session, owner.id, "notes", "k", "v")
    assert await record_crud.soft_delete_record(session, owner.id, "notes", "k") is True
    assert await record_crud.soft_delete_record(session, owner.id, "notes", "k") is False


async def test_update_value_skips_deleted_rows(session, owner):
    await record_crud.upsert_record(session, owner.id, "notes", "k", "v")
    assert await record_crud.update_record_value(session, owner.id, "notes", "k", "w") is True

    await record_crud.soft_delete_record(session, owner.id, "notes", "k")
    assert await record_crud.update_record_value(session, owner.id, "notes", "k", "x") is False


async def test_records_are_scoped_by_user_and_domain(session, owner):
    other = await user_crud.create_user(session, "other", "x", is_active=True, domains="notes")
    await record_crud.upsert_record(session, owner.id, "notes", "k", "mine")
    await record_crud.upsert_record(session, other.id, "notes", "k", "theirs")
    await record_crud.upsert_record(session, owner.id, "elsewhere", "k", "far")

    mine = await record_crud.list_records(session, owner.id, "notes")
    assert [(r.key, r.value) for r in mine] == [("k", "mine")]


async def test_list_records_hides_deleted(session, owner):
    await record_crud.upsert_record(session, owner.id, "notes", "a", "1")
    await record_crud.upsert_record(session, owner.id, "notes", "b", "2")
    await record_crud.soft_delete_record(session, owner.id, "notes", "a")

    assert [r.key for r in await record_crud.list_records(session, owner.id, "notes")] == ["b"]


async def test_username_unique_among_live_users(session):
    await user_crud.create_user(session, "dup", "x")
    with pytest.raises(ConflictError):
        await user_crud.create_user(session, "dup", "y")


async def test_deleted_username_can_be_reused(session):
    first = await user_crud.create_user(session, "reuse", "x")
    assert await user_crud.soft_delete_user(session, first.id)

    second = await user_crud.create_user(session, "reuse", "y")
    assert second.id != first.id
    assert (await user_crud.get_user_by_username(session, "reuse")).id == second.id
    assert await user_crud.get_user(session, first.id) is None


async def test_usernames_are_case_sensitive(session):
    await user_crud.create_user(session, "Carol", "x")
    await user_crud.create_user(session, "carol", "x")
    assert await user_crud.get_user_by_username(session, "CAROL") is None


async def test_deleted_domain_is_hidden_and_name_stays_taken(session):
    await domain_crud.create_domain(session, "gone")
    assert await domain_crud.soft_delete_domain(session, "gone")
    assert await domain_crud.get_domain(session, "gone") is None
    assert await domain_crud.soft_delete_domain(session, "gone") is False

    with pytest.raises(ConflictError):
        await domain_crud.create_domain(session, "gone")


async def test_list_domain_users_matches_whole_names(session):
    member = await user_crud.create_user(session, "m", "x", domains="ab,cd")
    await user_crud.create_user(session, "n", "x", domains="abc")
    admin = await user_crud.create_user(session, "root", "x", is_admin=True)
    gone = await user_crud.create_user(session, "gone", "x", domains="ab")
    await user_crud.soft_delete_user(session, gone.id)

    users = await user_crud.list_domain_users(session, "ab")
    assert [u.id for u in users] == [member.id, admin.id]


async def test_update_user_flags(session):
    user = await user_crud.create_user(session, "flags", "x")

    updated = await user_crud.update_user_flags(session, user.id, is_active=True, is_admin=True)
    assert updated.is_active is True
    assert updated.is_admin is True

    assert await user_crud.update_user_flags(session, 12345, is_active=True) is None
