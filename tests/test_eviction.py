import pytest

from newscache.db import EvictionPolicy

from .helpers import make_article


def _seed(articles, count, category="tech"):
    rows = [make_article(n, category, published=n) for n in range(1, count + 1)]
    articles.upsert(rows)
    return rows


def test_keeps_the_100_most_recent(articles, eviction):
    rows = _seed(articles, 150)

    result = eviction.evict("tech")

    assert result.deleted == 50
    assert articles.count("tech") == 100
    remaining = {a.article_id for a in articles.query_page("tech", "", 0, 200)}
    assert remaining == {row.article_id for row in rows[50:]}


def test_bookmarked_article_outside_keep_set_survives(articles, bookmarks, eviction):
    rows = _seed(articles, 150)
    # Newest first, article #120 of 150 is the 31st oldest
    bookmarked = rows[150 - 120]
    bookmarks.add(bookmarked.article_id)

    eviction.evict("tech")

    assert articles.count("tech") == 101
    assert articles.get(bookmarked.article_id) is not None


def test_small_category_is_untouched(articles, eviction):
    _seed(articles, 100)
    result = eviction.evict("tech")
    assert result.deleted == 0
    assert articles.count("tech") == 100


def test_only_the_evicted_category_shrinks(articles, eviction):
    _seed(articles, 120, "tech")
    sports = [make_article(1000 + n, "sports", published=n) for n in range(120)]
    articles.upsert(sports)

    eviction.evict("tech")

    assert articles.count("tech") == 100
    assert articles.count("sports") == 120


def test_bookmarks_survive_repeated_cycles_in_every_category(articles, bookmarks):
    policy = EvictionPolicy(articles, keep_limit=10)
    old = make_article(1, "general", published=1)
    articles.upsert([old])
    bookmarks.add(old.article_id)

    for cycle in range(3):
        for index, category in enumerate(("general", "sports")):
            fresh = [
                make_article(10000 * index + 100 * cycle + n, category, published=1000 * cycle + n + 10)
                for n in range(2, 30)
            ]
            articles.upsert(fresh)
            policy.evict(category)
            assert articles.get(old.article_id) is not None

    for category in ("general", "sports"):
        stored = articles.query_page(category, "", 0, 500)
        unbookmarked = [a for a in stored if not bookmarks.contains(a.article_id)]
        assert len(unbookmarked) <= 10


def test_keep_limit_must_be_positive(articles):
    with pytest.raises(ValueError):
        EvictionPolicy(articles, keep_limit=0)
