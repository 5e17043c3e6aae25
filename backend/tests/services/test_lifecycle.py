# tests/services/test_lifecycle.py
from datetime import datetime, timezone

import pytest

from portal.core.errors import NotFound
from portal.models import Account, Article, Role
from portal.services.lifecycle import (
    MAX_DB_INT, MAX_LIMIT, ResourceLifecycle, SoftDelete, clamp_pagination, parse_id
)


@pytest.mark.parametrize("page,limit,expected", [
    (None, None, (1, 10)),
    ("2", "5", (2, 5)),
    ("0", "10", (1, 10)),
    ("-1", "10", (1, 10)),
    ("1", "999", (1, MAX_LIMIT)),
    ("abc", "xyz", (1, 10)),
    (3, 0, (3, 1)),
    ("99999999999999999999", "10", (MAX_DB_INT // 10, 10)),
])
def test_clamp_pagination(page, limit, expected):
    assert clamp_pagination(page, limit) == expected


@pytest.mark.parametrize("raw,expected", [
    ("12", 12),
    (12, 12),
    (" 7 ", 7),
    ("0", None),
    ("-3", None),
    ("abc", None),
    ("1.5", None),
    (True, None),
    (None, None),
    ("99999999999999999999", None),
    (str(MAX_DB_INT), MAX_DB_INT),
    (str(MAX_DB_INT + 1), None),
    ("9" * 5000, None),
    ("\u00b2", None),
])
def test_parse_id(raw, expected):
    assert parse_id(raw) == expected


@pytest.fixture
def articles(db_session):
    return ResourceLifecycle(Article, "News", SoftDelete.TIMESTAMP)


def test_list_page_excludes_soft_deleted_rows(db_session, articles, make_article, writer):
    live = [make_article(writer, title=f"Live {i}") for i in range(3)]
    make_article(writer, title="Gone", deleted_at=datetime.now(timezone.utc))

    result = articles.list_page(db_session)

    assert result["total"] == 3
    assert [a.id for a in result["data"]] == [a.id for a in reversed(live)]
    assert all(a.deleted_at is None for a in result["data"])


def test_list_page_windows_and_counts_pages(db_session, articles, make_article, writer):
    for i in range(7):
        make_article(writer, title=f"Item {i}")

    result = articles.list_page(db_session, page="2", limit="3")

    assert result["page"] == 2
    assert result["limit"] == 3
    assert result["total"] == 7
    assert result["total_pages"] == 3
    assert len(result["data"]) == 3


def test_list_page_with_no_rows(db_session, articles):
    result = articles.list_page(db_session)
    assert result["total"] == 0
    assert result["total_pages"] == 0
    assert result["data"] == []


def test_get_hides_soft_deleted_and_bad_ids(db_session, articles, make_article, writer):
    gone = make_article(writer, deleted_at=datetime.now(timezone.utc))

    with pytest.raises(NotFound):
        articles.get(db_session, gone.id)
    with pytest.raises(NotFound):
        articles.get(db_session, "not-a-number")


def test_soft_delete_flag_applies_extra_changes(db_session, make_account):
    accounts = ResourceLifecycle(Account, "Admin", SoftDelete.FLAG)
    account = make_account(Role.ADMIN)

    accounts.soft_delete(db_session, account, active=False)

    assert account.deleted is True
    assert account.active is False
    assert accounts.count(db_session) == 0


def test_soft_delete_unsupported_without_mode(db_session, make_article, writer):
    plain = ResourceLifecycle(Article, "News", SoftDelete.NONE)
    with pytest.raises(TypeError):
        plain.soft_delete(db_session, make_article(writer))


def test_list_page_far_past_the_end(db_session, articles, make_article, writer):
    make_article(writer)

    result = articles.list_page(db_session, page="99999999999999999999", limit="50")

    assert result["total"] == 1
    assert result["data"] == []


def test_get_with_out_of_range_id(db_session, articles):
    with pytest.raises(NotFound):
        articles.get(db_session, "99999999999999999999")
