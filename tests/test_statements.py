"""Unit tests for the statement builders (all dialects)."""

from __future__ import annotations

import re
from datetime import datetime

import pytest

from kitql import (
    CursorState,
    Delete,
    EmptyColumnsError,
    Fragment,
    Insert,
    InterceptionConfig,
    InvalidPageError,
    JoinType,
    NoEntitiesProvidedError,
    Order,
    Restore,
    SchemaMismatchError,
    Select,
    SoftDeleteNotConfiguredError,
    Subquery,
    TableNameMismatchError,
    UnsupportedByDialectError,
    Update,
    Upsert,
    expr,
)
from tests.fixtures import ARTICLE_KEY, ARTICLE_TAG_KEY, Article, ArticleTag


# ---------------------------------------------------------------------------
# SELECT
# ---------------------------------------------------------------------------


def test_select_mixed_boolean_filter_postgres():
    stmt = (
        Select("users")
        .columns(["id", "name"])
        .order_by("created_at", Order.DESC)
        .filter(
            "age = ? AND salary > ? OR status IN (?,?)",
            [23, 4500, "active", "pending"],
        )
    )
    r = stmt.render("postgres")
    assert r.sql == (
        "SELECT id, name FROM users WHERE age = $1 AND salary > $2 "
        "OR status IN ($3,$4) ORDER BY created_at DESC"
    )
    assert r.params == [23, 4500, "active", "pending"]


def test_select_defaults_to_star():
    assert Select("article").render("sqlite").sql == "SELECT * FROM article"


def test_select_of_entity_lists_fields():
    r = Select.of(Article).render("sqlite")
    assert r.sql == "SELECT id, tenant_id, title, content, views, deleted, created_at FROM article"


def test_select_of_checks_table():
    with pytest.raises(TableNameMismatchError) as exc:
        Select.of(ArticleTag, expected_table="article")
    assert exc.value.details == {"expected": "article", "actual": "article_tag"}


def test_several_filters_are_parenthesised():
    r = Select("article").filter("views > ?", [1]).filter("title LIKE ?", ["a%"]).render("sqlite")
    assert r.sql == "SELECT * FROM article WHERE (views > ?) AND (title LIKE ?)"


def test_filter_closure():
    stmt = Select("article").filter(lambda f: f.append_text("views >= ").append_value(5))
    assert stmt.render("postgres").sql == "SELECT * FROM article WHERE views >= $1"


def test_join():
    stmt = (
        Select("article")
        .columns("article.id, article_tag.tag")
        .join(JoinType.LEFT, "article_tag", "article_tag.article_id = article.id")
    )
    assert stmt.render("sqlite").sql == (
        "SELECT article.id, article_tag.tag FROM article "
        "LEFT JOIN article_tag ON article_tag.article_id = article.id"
    )


def test_join_with_bound_value():
    stmt = Select("article").join(
        JoinType.INNER, "article_tag", "article_tag.article_id = article.id AND tag = ?", ["x"]
    )
    r = stmt.filter("views > ?", [3]).render("postgres")
    assert r.sql.endswith("AND tag = $1 WHERE views > $2")
    assert r.params == ["x", 3]


def test_group_by_having():
    stmt = (
        Select("article_tag")
        .columns(["article_id", expr.count(alias="n")])
        .group_by("article_id")
        .having("COUNT(*) > ?", [1])
    )
    assert stmt.render("sqlite").sql == (
        "SELECT article_id, COUNT(*) AS n FROM article_tag GROUP BY article_id HAVING COUNT(*) > ?"
    )


def test_having_without_group_by():
    r = Select("article").columns("COUNT(*)").having("COUNT(*) > ?", [5]).render("sqlite")
    assert r.sql == "SELECT COUNT(*) FROM article HAVING COUNT(*) > ?"
    assert r.params == [5]


def test_several_having_predicates_are_grouped():
    stmt = (
        Select("article_tag")
        .columns("article_id")
        .group_by("article_id")
        .having("COUNT(*) > ? OR MAX(share_seq) = ?", [1, 9])
        .having("MIN(share_seq) > ?", [0])
    )
    r = stmt.render("postgres")
    assert r.sql == (
        "SELECT article_id FROM article_tag GROUP BY article_id"
        " HAVING (COUNT(*) > $1 OR MAX(share_seq) = $2) AND (MIN(share_seq) > $3)"
    )
    assert r.params == [1, 9, 0]


def test_distinct():
    assert Select("article_tag").columns("tag").distinct().render("sqlite").sql == (
        "SELECT DISTINCT tag FROM article_tag"
    )


def test_order_by_same_column_replaces_direction():
    stmt = Select("article").order_by("id").order_by("views").order_by("id", "DESC")
    assert stmt.render("sqlite").sql == "SELECT * FROM article ORDER BY id DESC, views ASC"


def test_paginate_binds_limit_and_offset():
    r = Select("article").order_by("id").paginate(3, 10).render("postgres")
    assert r.sql == "SELECT * FROM article ORDER BY id ASC LIMIT $1 OFFSET $2"
    assert r.params == [10, 20]


@pytest.mark.parametrize("page_number,page_size", [(0, 10), (1, 0), (-1, 5), (2**62, 2**62)])
def test_paginate_rejects_invalid_pages(page_number, page_size):
    with pytest.raises(InvalidPageError):
        Select("article").paginate(page_number, page_size)


def test_cursor_descending():
    state = CursorState("id", Order.DESC, page_size=5, last_seen=100)
    r = Select("article").order_by("title").cursor(state).render("sqlite")
    assert r.sql == "SELECT * FROM article WHERE id < ? ORDER BY id DESC LIMIT ?"
    assert r.params == [100, 5]


def test_cursor_first_page_with_lookahead():
    r = Select("article").cursor(CursorState("id", page_size=5), lookahead=True).render("sqlite")
    assert r.sql == "SELECT * FROM article ORDER BY id ASC LIMIT ?"
    assert r.params == [6]


def test_with_cte():
    recent = Select("article").columns("id").filter("views > ?", [5])
    r = Select("recent").with_cte("recent", recent).filter("id < ?", [9]).render("postgres")
    assert r.sql == (
        "WITH recent AS (SELECT id FROM article WHERE views > $1) "
        "SELECT * FROM recent WHERE id < $2"
    )


def test_union_all():
    stmt = Select("article").columns("id").union(
        Select("article_tag").columns("article_id"), all=True
    )
    assert stmt.render("sqlite").sql == "SELECT id FROM article UNION ALL SELECT article_id FROM article_tag"


def test_to_count_drops_order_and_paging():
    stmt = Select("article").filter("views > ?", [1]).order_by("id").paginate(2, 5)
    r = stmt.to_count().render("sqlite")
    assert r.sql == "SELECT COUNT(*) FROM article WHERE views > ?"
    assert r.params == [1]
    assert stmt.render("sqlite").sql.endswith("LIMIT ? OFFSET ?")


def test_to_count_wraps_grouped_query():
    stmt = Select("article_tag").columns("article_id").group_by("article_id")
    assert stmt.to_count().render("sqlite").sql == (
        "SELECT COUNT(*) FROM (SELECT article_id FROM article_tag GROUP BY article_id) AS counted"
    )


class TestSubquery:
    def test_numbering_continues_into_subquery(self):
        sub = Subquery(Select("article").columns("id").filter("views > ?", [100]))
        stmt = Select("article_tag").filter("tag = ?", ["x"]).filter(expr.in_subquery("article_id", sub))
        r = stmt.render("postgres")
        assert r.sql == (
            "SELECT * FROM article_tag WHERE (tag = $1) AND "
            "(article_id IN (SELECT id FROM article WHERE views > $2))"
        )
        assert r.params == ["x", 100]

    def test_exists_from_fragment(self):
        sub = Subquery(Fragment("SELECT 1 FROM article_tag WHERE article_id = article.id AND tag = ?", ["x"]))
        r = Select("article").filter(expr.exists(sub)).render("sqlite")
        assert r.sql == (
            "SELECT * FROM article WHERE EXISTS "
            "(SELECT 1 FROM article_tag WHERE article_id = article.id AND tag = ?)"
        )

    def test_subquery_is_never_rendered_alone(self):
        sub = Subquery(lambda f: f.append_text("SELECT 1"))
        assert not hasattr(sub, "render")
        assert sub.append_to(Fragment()).text == "(SELECT 1)"


class TestExpressions:
    def test_and_or_nesting(self):
        predicate = expr.and_(
            expr.eq("tenant_id", 1), expr.or_(expr.gt("views", 10), expr.is_null("content"))
        )
        r = Select("article").filter(predicate).render("sqlite")
        assert r.sql == "SELECT * FROM article WHERE tenant_id = ? AND (views > ? OR content IS NULL)"
        assert r.params == [1, 10]

    def test_empty_in_lists(self):
        assert expr.in_("id", []).text == "1 = 0"
        assert expr.not_in("id", []).text == "1 = 1"
        assert expr.in_("id", [1, 2]).text == "id IN (?,?)"

    def test_comparisons(self):
        assert expr.ne("a", 1).text == "a <> ?"
        assert expr.between("a", 1, 5).text == "a BETWEEN ? AND ?"
        assert expr.like("title", "k%").text == "title LIKE ?"
        assert expr.raw("a = ? OR b = ?", 1, 2).placeholder_count == 2

    def test_case_when(self):
        frag = expr.case_when([(expr.gt("views", 100), "hot")], else_="cold", alias="heat")
        assert frag.text == "CASE WHEN views > ? THEN ? ELSE ? END AS heat"
        assert [v.data for v in frag.values] == [100, "hot", "cold"]

    def test_aggregates(self):
        assert expr.count() == "COUNT(*)"
        assert expr.count("tag", alias="tags", distinct=True) == "COUNT(DISTINCT tag) AS tags"
        assert expr.sum_("views", "total") == "SUM(views) AS total"
        assert expr.max_("id") == "MAX(id)"


# ---------------------------------------------------------------------------
# INSERT / UPSERT
# ---------------------------------------------------------------------------


class TestInsert:
    def test_omits_generated_key_and_unset_fields(self):
        r = Insert.one(Article(tenant_id=1, title="hello"), ARTICLE_KEY).render("postgres")
        assert r.sql == "INSERT INTO article (tenant_id, title) VALUES ($1, $2)"
        assert r.params == [1, "hello"]

    def test_explicit_key_is_written(self):
        r = Insert.one(Article(id=5, title="x"), ARTICLE_KEY).render("sqlite")
        assert r.sql == "INSERT INTO article (id, title) VALUES (?, ?)"

    def test_null_generated_key_is_omitted(self):
        r = Insert.one(Article(id=None, title="x"), ARTICLE_KEY).render("sqlite")
        assert r.sql == "INSERT INTO article (title) VALUES (?)"

    def test_explicit_null_field_is_written(self):
        r = Insert.one(Article(title="x", content=None), ARTICLE_KEY).render("sqlite")
        assert r.sql == "INSERT INTO article (title, content) VALUES (?, ?)"
        assert r.params == ["x", None]

    def test_many_is_one_statement(self):
        records = [Article(title="a", views=1), Article(title="b", views=2)]
        r = Insert.many(records, ARTICLE_KEY).render("postgres")
        assert r.sql == "INSERT INTO article (title, views) VALUES ($1, $2), ($3, $4)"
        assert r.params == ["a", 1, "b", 2]

    def test_composite_key_always_written(self):
        r = Insert.one(ArticleTag(article_id=1, share_seq=10), ARTICLE_TAG_KEY).render("sqlite")
        assert r.sql == "INSERT INTO article_tag (article_id, share_seq) VALUES (?, ?)"

    def test_no_records(self):
        with pytest.raises(NoEntitiesProvidedError):
            Insert.many([], ARTICLE_KEY)

    def test_table_mismatch(self):
        with pytest.raises(TableNameMismatchError):
            Insert.one(ArticleTag(article_id=1, share_seq=1), ARTICLE_TAG_KEY, expected_table="tags")

    def test_default_values(self):
        assert Insert.one(Article(), ARTICLE_KEY).render("sqlite").sql == (
            "INSERT INTO article DEFAULT VALUES"
        )
        assert Insert.one(Article(), ARTICLE_KEY).render("mysql").sql == (
            "INSERT INTO article () VALUES ()"
        )

    def test_manual_rows(self):
        stmt = Insert("article").columns(["title", "created_at"])
        stmt.values_row(["a", datetime(2024, 1, 1)])
        stmt.values(lambda f: f.append_value("b").append_text(", CURRENT_TIMESTAMP"))
        assert stmt.render("sqlite").sql == (
            "INSERT INTO article (title, created_at) VALUES (?, ?), (?, CURRENT_TIMESTAMP)"
        )

    def test_returning(self):
        stmt = Insert.one(Article(title="x"), ARTICLE_KEY).returning("id")
        assert stmt.render("sqlite").sql == "INSERT INTO article (title) VALUES (?) RETURNING id"
        assert stmt.render("postgres").sql == "INSERT INTO article (title) VALUES ($1) RETURNING id"

    def test_returning_rejected_on_mysql_render(self):
        stmt = Insert.one(Article(title="x"), ARTICLE_KEY).returning(["id", "created_at"])
        with pytest.raises(UnsupportedByDialectError):
            stmt.render("mysql")

    def test_returning_rejected_eagerly_with_known_dialect(self):
        with pytest.raises(UnsupportedByDialectError) as exc:
            Insert("article", dialect="mysql").returning("id")
        assert exc.value.details == {"feature": "RETURNING", "dialect": "mysql"}


class TestUpsert:
    def _tag(self) -> Upsert:
        return Upsert.one(ArticleTag(article_id=1, share_seq=10, tag="news"), ARTICLE_TAG_KEY)

    def test_sqlite(self):
        assert self._tag().render("sqlite").sql == (
            "INSERT INTO article_tag (article_id, share_seq, tag) VALUES (?, ?, ?) "
            "ON CONFLICT(article_id, share_seq) DO UPDATE SET tag = EXCLUDED.tag"
        )

    def test_mysql(self):
        assert self._tag().render("mysql").sql == (
            "INSERT INTO article_tag (article_id, share_seq, tag) VALUES (?, ?, ?) "
            "ON DUPLICATE KEY UPDATE tag = VALUES(tag)"
        )

    def test_postgres(self):
        assert self._tag().render("postgres").sql == (
            "INSERT INTO article_tag (article_id, share_seq, tag) VALUES ($1, $2, $3) "
            "ON CONFLICT(article_id, share_seq) DO UPDATE SET tag = EXCLUDED.tag"
        )

    def test_values_identical_across_dialects(self):
        stmt = self._tag()
        assert stmt.render("sqlite").values == stmt.render("mysql").values
        assert stmt.render("sqlite").params == [1, 10, "news"]

    def test_unique_column(self):
        stmt = Upsert("users").columns(["email", "name"]).values_row(["a@x.io", "A"]).on_conflict(["email"])
        assert stmt.render("sqlite").sql == (
            "INSERT INTO users (email, name) VALUES (?, ?) "
            "ON CONFLICT(email) DO UPDATE SET name = EXCLUDED.name"
        )

    def test_update_columns_subset(self):
        stmt = Upsert.one(
            Article(id=1, title="t", views=3), ARTICLE_KEY, update_columns=["views"]
        )
        assert stmt.render("postgres").sql.endswith("ON CONFLICT(id) DO UPDATE SET views = EXCLUDED.views")

    def test_nothing_to_update(self):
        stmt = Upsert.one(ArticleTag(article_id=1, share_seq=10), ARTICLE_TAG_KEY)
        assert stmt.render("sqlite").sql.endswith("ON CONFLICT(article_id, share_seq) DO NOTHING")

    def test_requires_dialect(self):
        with pytest.raises(UnsupportedByDialectError):
            self._tag().to_fragment()

    def test_mysql_noop_needs_a_column(self):
        stmt = Upsert("users").columns(["email"]).values_row(["a@x.io"]).update_columns([])
        assert stmt.render("sqlite").sql == "INSERT INTO users (email) VALUES (?) ON CONFLICT DO NOTHING"
        with pytest.raises(EmptyColumnsError):
            stmt.render("mysql")
        stmt.on_conflict(["email"])
        assert stmt.render("mysql").sql == (
            "INSERT INTO users (email) VALUES (?) ON DUPLICATE KEY UPDATE email = email"
        )


# ---------------------------------------------------------------------------
# UPDATE
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_skips_none_by_default(self):
        r = Update.one(Article(id=7, title="new", content=None), ARTICLE_KEY).render("sqlite")
        assert r.sql == "UPDATE article SET title = ? WHERE id = ?"
        assert r.params == ["new", 7]

    def test_override_empty_writes_null(self):
        stmt = Update.one(Article(id=7, title="new", content=None), ARTICLE_KEY, override_empty=True)
        r = stmt.render("postgres")
        assert r.sql == "UPDATE article SET title = $1, content = $2 WHERE id = $3"
        assert r.params == ["new", None, 7]

    def test_composite_key(self):
        stmt = Update.one(ArticleTag(article_id=1, share_seq=2, tag="t"), ARTICLE_TAG_KEY)
        assert stmt.render("sqlite").sql == (
            "UPDATE article_tag SET tag = ? WHERE article_id = ? AND share_seq = ?"
        )

    def test_no_columns(self):
        with pytest.raises(EmptyColumnsError):
            Update.one(Article(id=7), ARTICLE_KEY).render("sqlite")

    def test_expression_assignment(self):
        stmt = Update("article").set_expr("views", "views + ?", [1]).filter("id = ?", [3])
        assert stmt.render("sqlite").sql == "UPDATE article SET views = views + ? WHERE id = ?"

    def test_soft_delete_predicate_appended(self, soft_delete: InterceptionConfig):
        stmt = Update.one(Article(id=7, title="new"), ARTICLE_KEY, interception=soft_delete)
        r = stmt.render("sqlite")
        assert r.sql == "UPDATE article SET title = ? WHERE id = ? AND deleted = ?"
        assert r.params == ["new", 7, False]

    def test_returning(self):
        stmt = Update("article").set("views", 0).returning("id")
        assert stmt.render("postgres").sql == "UPDATE article SET views = $1 RETURNING id"


# ---------------------------------------------------------------------------
# Placeholder accounting
# ---------------------------------------------------------------------------


def _placeholders(sql: str, target: str) -> list[str]:
    return re.findall(r"\$\d+", sql) if target == "postgres" else re.findall(r"\?", sql)


_ENTITY_STATEMENTS = {
    "insert_all_fields": lambda: Insert.one(
        Article(
            id=3, tenant_id=1, title="t", content="c", views=2, deleted=False,
            created_at=datetime(2024, 5, 1),
        ),
        ARTICLE_KEY,
    ),
    "insert_partial": lambda: Insert.one(Article(title="t", content=None), ARTICLE_KEY),
    "insert_explicit_key": lambda: Insert.one(Article(id=9, views=1), ARTICLE_KEY),
    "insert_many": lambda: Insert.many(
        [Article(title="a", views=1), Article(title="b", views=2)], ARTICLE_KEY
    ),
    "insert_composite_key": lambda: Insert.one(
        ArticleTag(article_id=1, share_seq=2, tag="x"), ARTICLE_TAG_KEY
    ),
    "update_partial": lambda: Update.one(Article(id=7, title="new", content=None), ARTICLE_KEY),
    "update_override_empty": lambda: Update.one(
        Article(id=7, title="new", content=None), ARTICLE_KEY, override_empty=True
    ),
    "update_composite_key": lambda: Update.one(
        ArticleTag(article_id=1, share_seq=2, tag="t", created_at=datetime(2024, 1, 1)),
        ARTICLE_TAG_KEY,
    ),
    "upsert_composite_key": lambda: Upsert.one(
        ArticleTag(article_id=1, share_seq=10, tag="news"), ARTICLE_TAG_KEY
    ),
}


@pytest.mark.parametrize("target", ["sqlite", "mysql", "postgres"])
@pytest.mark.parametrize("case", sorted(_ENTITY_STATEMENTS))
def test_placeholders_match_values(case: str, target: str):
    r = _ENTITY_STATEMENTS[case]().render(target)
    markers = _placeholders(r.sql, target)
    assert len(markers) == len(r.values)
    if target == "postgres":
        assert markers == [f"${i}" for i in range(1, len(r.values) + 1)]


# ---------------------------------------------------------------------------
# DELETE / RESTORE
# ---------------------------------------------------------------------------


class TestDelete:
    def test_composite_keys_in_one_statement(self):
        r = Delete("article_tag").by_keys(ARTICLE_TAG_KEY, [(1, 10), (1, 11)]).render("sqlite")
        assert r.sql == (
            "DELETE FROM article_tag WHERE "
            "(article_id = ? AND share_seq = ?) OR (article_id = ? AND share_seq = ?)"
        )
        assert r.params == [1, 10, 1, 11]

    def test_single_keys_use_in(self):
        r = Delete("article").by_keys(ARTICLE_KEY, [1, 2, 3]).render("postgres")
        assert r.sql == "DELETE FROM article WHERE id IN ($1,$2,$3)"

    def test_from_records(self):
        tags = [ArticleTag(article_id=1, share_seq=10), ArticleTag(article_id=2, share_seq=20)]
        r = Delete.many(tags, ARTICLE_TAG_KEY).render("sqlite")
        assert r.params == [1, 10, 2, 20]

    def test_from_no_records(self):
        with pytest.raises(NoEntitiesProvidedError):
            Delete.many([], ARTICLE_KEY)

    def test_soft_delete_becomes_update(self, soft_delete: InterceptionConfig):
        r = Delete("article", interception=soft_delete).by_keys(ARTICLE_KEY, [1, 2]).render("postgres")
        assert r.sql == "UPDATE article SET deleted = $1 WHERE id IN ($2,$3) AND deleted = $4"
        assert r.params == [True, 1, 2, False]

    def test_excluded_table_deletes_physically(self, soft_delete: InterceptionConfig):
        stmt = Delete("article_tag", interception=soft_delete).by_keys(ARTICLE_TAG_KEY, [(1, 10)])
        assert stmt.render("sqlite").sql == (
            "DELETE FROM article_tag WHERE article_id = ? AND share_seq = ?"
        )

    def test_physical_override(self, soft_delete: InterceptionConfig):
        stmt = Delete("article", interception=soft_delete, physical=True).by_keys(ARTICLE_KEY, [1])
        assert stmt.render("sqlite").sql == "DELETE FROM article WHERE id = ?"

    def test_timestamp_marker(self, interception: InterceptionConfig):
        stamp = datetime(2024, 5, 1, 12, 0)
        interception.set_soft_delete("deleted_at", deleted_value=lambda: stamp, active_value=None)
        r = Delete("article", interception=interception).filter("views = ?", [0]).render("sqlite")
        assert r.sql == "UPDATE article SET deleted_at = ? WHERE (views = ?) AND deleted_at IS NULL"
        assert r.params == [stamp, 0]

    def test_wrong_composite_arity(self):
        with pytest.raises(SchemaMismatchError):
            Delete("article_tag").by_keys(ARTICLE_TAG_KEY, [1])


class TestRestore:
    def test_restore_flag(self, soft_delete: InterceptionConfig):
        r = Restore("article", interception=soft_delete).by_keys(ARTICLE_KEY, [1]).render("sqlite")
        assert r.sql == "UPDATE article SET deleted = ? WHERE id = ?"
        assert r.params == [False, 1]

    def test_restore_timestamp(self, interception: InterceptionConfig):
        interception.set_soft_delete("deleted_at", deleted_value=datetime.now, active_value=None)
        stmt = Restore("article", interception=interception).by_keys(ARTICLE_KEY, [1])
        assert stmt.render("sqlite").sql == "UPDATE article SET deleted_at = NULL WHERE id = ?"

    def test_restore_excluded_table(self, soft_delete: InterceptionConfig):
        stmt = Restore("article_tag", interception=soft_delete).by_keys(ARTICLE_TAG_KEY, [(1, 1)])
        with pytest.raises(SoftDeleteNotConfiguredError):
            stmt.render("sqlite")

    def test_restore_without_soft_delete(self):
        with pytest.raises(SoftDeleteNotConfiguredError):
            Restore("article").by_keys(ARTICLE_KEY, [1]).render("sqlite")


# ---------------------------------------------------------------------------
# Interception ordering
# ---------------------------------------------------------------------------


class TestInterceptionInStatements:
    def test_global_filter_then_soft_delete(self, soft_delete: InterceptionConfig):
        soft_delete.set_global_filter("tenant_id = ?", values=[42])
        r = Select("article", interception=soft_delete).filter("views > ?", [10]).render("sqlite")
        assert r.sql == "SELECT * FROM article WHERE (views > ?) AND (tenant_id = ?) AND deleted = ?"
        assert r.params == [10, 42, False]

    def test_only_injected_predicates(self, soft_delete: InterceptionConfig):
        soft_delete.set_global_filter("tenant_id = ?", values=[42])
        r = Select("article", interception=soft_delete).render("postgres")
        assert r.sql == "SELECT * FROM article WHERE (tenant_id = $1) AND deleted = $2"

    def test_excluded_from_both(self, soft_delete: InterceptionConfig):
        soft_delete.set_global_filter("tenant_id = ?", excluded_tables=["article_tag"], values=[42])
        assert Select("article_tag", interception=soft_delete).render("sqlite").sql == (
            "SELECT * FROM article_tag"
        )

    def test_filter_callable_gets_table(self, interception: InterceptionConfig):
        interception.set_global_filter(lambda table: Fragment(f"{table}.tenant_id = ?", [7]))
        r = Select("article", interception=interception).render("sqlite")
        assert r.sql == "SELECT * FROM article WHERE article.tenant_id = ?"
        assert r.params == [7]

    def test_global_filter_on_delete_and_restore(self, soft_delete: InterceptionConfig):
        soft_delete.set_global_filter("tenant_id = ?", values=[42])
        deleted = Delete("article", interception=soft_delete).by_keys(ARTICLE_KEY, [1]).render("sqlite")
        assert deleted.sql == "UPDATE article SET deleted = ? WHERE id = ? AND (tenant_id = ?) AND deleted = ?"
        restored = Restore("article", interception=soft_delete).by_keys(ARTICLE_KEY, [1]).render("sqlite")
        assert restored.sql == "UPDATE article SET deleted = ? WHERE id = ? AND (tenant_id = ?)"

    def test_or_global_filter_stays_grouped_on_select(self, soft_delete: InterceptionConfig):
        soft_delete.set_global_filter("tenant_id = ? OR is_public = 1", values=[1])
        r = Select("article", interception=soft_delete).filter("owner = ?", ["bob"]).render("sqlite")
        assert r.sql == (
            "SELECT * FROM article WHERE (owner = ?) AND (tenant_id = ? OR is_public = 1) AND deleted = ?"
        )
        assert r.params == ["bob", 1, False]

    def test_or_global_filter_stays_grouped_on_delete(self, soft_delete: InterceptionConfig):
        soft_delete.set_global_filter("tenant_id = ? OR is_public = 1", values=[1])
        soft = Delete("article", interception=soft_delete).by_keys(ARTICLE_KEY, [3]).render("sqlite")
        assert soft.sql == (
            "UPDATE article SET deleted = ? WHERE id = ? AND (tenant_id = ? OR is_public = 1) AND deleted = ?"
        )
        hard = (
            Delete("article", interception=soft_delete, physical=True)
            .by_keys(ARTICLE_KEY, [3])
            .render("postgres")
        )
        assert hard.sql == "DELETE FROM article WHERE id = $1 AND (tenant_id = $2 OR is_public = 1)"
        assert hard.params == [3, 1]

    def test_lone_global_filter_is_not_wrapped(self, interception: InterceptionConfig):
        interception.set_global_filter("tenant_id = ? OR is_public = 1", values=[1])
        r = Select("article", interception=interception).render("sqlite")
        assert r.sql == "SELECT * FROM article WHERE tenant_id = ? OR is_public = 1"
