"""Tests for profile persistence."""

import pytest

from byline_scout.database import crud
from byline_scout.database.models import AuthorRecord, init_db
from byline_scout.models.author import Article, AuthorProfile, CandidateSource


def _profile(name="Asha Verma", url="https://www.exampletimes.com/author/asha-verma", articles=1,
             influence=10.0, outlet="Example Times"):
    return AuthorProfile(
        name=name,
        profile_url=url,
        source=CandidateSource.DIRECTORY,
        outlet=outlet,
        topics=["Politics"],
        articles=[
            Article(title=f"Story number {i} from the state", url=f"https://www.exampletimes.com/2024/05/1{i}/story-{i}")
            for i in range(articles)
        ],
        influence_score=influence,
    )


class TestUpsertAuthorProfile:
    """Tests for upsert_author_profile."""

    def test_insert(self, session):
        record = crud.upsert_author_profile(session, _profile(articles=2))

        assert record.id is not None
        assert record.total_articles == 2
        assert record.articles[0]["title"] == "Story number 0 from the state"
        assert record.source == "directory"
        assert record.social_links == {"twitter": None, "linkedin": None, "facebook": None, "instagram": None}

    def test_same_url_overwrites(self, session):
        first = crud.upsert_author_profile(session, _profile(articles=1))
        second = crud.upsert_author_profile(session, _profile(articles=3, influence=40.0))

        assert second.id == first.id
        assert crud.count_profiles(session) == 1
        assert second.total_articles == 3
        assert second.influence_score == 40.0

    def test_same_name_and_outlet_overwrites(self, session):
        first = crud.upsert_author_profile(session, _profile())
        moved = crud.upsert_author_profile(session, _profile(url="https://www.exampletimes.com/author/asha-verma-123"))

        assert moved.id == first.id
        assert moved.profile_url == "https://www.exampletimes.com/author/asha-verma-123"
        assert crud.count_profiles(session) == 1

    def test_same_name_other_outlet_is_separate(self, session):
        crud.upsert_author_profile(session, _profile())
        crud.upsert_author_profile(session, _profile(url="https://www.dailyexample.in/author/asha-verma",
                                                     outlet="Daily Example"))

        assert crud.count_profiles(session) == 2
        assert crud.count_profiles(session, outlet="daily example") == 1


class TestQueries:
    """Tests for listing and fetching stored profiles."""

    def test_list_sorted(self, session):
        crud.upsert_author_profile(session, _profile("Asha Verma", articles=1, influence=50.0))
        crud.upsert_author_profile(session, _profile("Ravi Kumar", "https://www.exampletimes.com/author/ravi-kumar",
                                                     articles=3, influence=20.0))

        by_articles = [r.name for r in crud.list_profiles(session, sort_by="articles")]
        by_influence = [r.name for r in crud.list_profiles(session, sort_by="influence")]

        assert by_articles == ["Ravi Kumar", "Asha Verma"]
        assert by_influence == ["Asha Verma", "Ravi Kumar"]

    def test_list_limit_and_outlet(self, session):
        crud.upsert_author_profile(session, _profile("Asha Verma"))
        crud.upsert_author_profile(session, _profile("Ravi Kumar", "https://www.exampletimes.com/author/ravi-kumar"))

        assert len(crud.list_profiles(session, limit=1)) == 1
        assert crud.list_profiles(session, outlet="Other Outlet") == []

    def test_unknown_sort_key(self, session):
        with pytest.raises(ValueError):
            crud.list_profiles(session, sort_by="name")

    def test_get_profile(self, session):
        record = crud.upsert_author_profile(session, _profile())

        assert crud.get_profile(session, record.id).name == "Asha Verma"
        assert crud.get_profile(session, record.id + 100) is None
        assert crud.get_profile(session, record.id).to_dict()["topics"] == ["Politics"]


class TestMirror:
    """Tests for upsert_author_mirror."""

    def test_mirror_keyed_on_name_and_outlet(self, session):
        crud.upsert_author_mirror(session, _profile(articles=1))
        record = crud.upsert_author_mirror(session, _profile(articles=4))

        assert session.query(AuthorRecord).count() == 1
        assert record.total_articles == 4
        assert record.topics == ["Politics"]


class TestInitDb:
    """Tests for database initialization."""

    def test_same_url_reuses_engine(self, db):
        engine, factory = init_db("sqlite://")

        assert factory is db
