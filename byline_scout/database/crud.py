"""
CRUD operations for stored author profiles.
"""
import datetime
from typing import List, Dict, Any, Optional
from sqlalchemy import desc, func
from sqlalchemy.orm import Session
from byline_scout.database.models import AuthorProfileRecord, AuthorRecord
from byline_scout.models.author import AuthorProfile
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

SORT_COLUMNS = {
    "articles": AuthorProfileRecord.total_articles,
    "recent": AuthorProfileRecord.updated_at,
    "influence": AuthorProfileRecord.influence_score,
}


def _profile_fields(profile: AuthorProfile) -> Dict[str, Any]:
    data = profile.to_dict()
    return {
        "name": data["name"],
        "outlet": data["outlet"],
        "profile_url": data["profile_url"],
        "source": data["source"],
        "role": data["role"],
        "bio": data["bio"],
        "email": data["email"],
        "profile_picture": data["profile_picture"],
        "social_links": data["social_links"],
        "articles": data["articles"],
        "total_articles": data["total_articles"],
        "topics": data["topics"],
        "keywords": data["keywords"],
        "top_keywords": data["top_keywords"],
        "influence_score": data["influence_score"],
        "article_based": data["article_based"],
    }


def find_profile(db: Session, profile_url: str, name: str, outlet: str) -> Optional[AuthorProfileRecord]:
    """
    Find the stored row for a profile.

    Args:
        db: Database session
        profile_url: Profile URL, the primary key of the upsert
        name: Author name, secondary key together with outlet
        outlet: Outlet name

    Returns:
        Matching record or None
    """
    record = db.query(AuthorProfileRecord).filter(AuthorProfileRecord.profile_url == profile_url).first()
    if record is not None:
        return record
    return db.query(AuthorProfileRecord).filter(
        AuthorProfileRecord.name == name,
        AuthorProfileRecord.outlet == outlet
    ).first()


def upsert_author_profile(db: Session, profile: AuthorProfile) -> AuthorProfileRecord:
    """
    Insert or update a profile.

    A row is matched on profile URL first, then on name and outlet. A matched
    row is overwritten with the new snapshot.

    Args:
        db: Database session
        profile: Enriched author profile

    Returns:
        The stored record
    """
    fields = _profile_fields(profile)
    record = find_profile(db, profile.profile_url, profile.name, profile.outlet)

    if record is None:
        record = AuthorProfileRecord(**fields)
        db.add(record)
        logger.debug(f"Inserting profile for {profile.name} ({profile.profile_url})")
    else:
        for key, value in fields.items():
            setattr(record, key, value)
        record.updated_at = datetime.datetime.utcnow()
        logger.debug(f"Updating profile {record.id} for {profile.name}")

    db.commit()
    db.refresh(record)
    return record


def upsert_author_mirror(db: Session, profile: AuthorProfile) -> AuthorRecord:
    """
    Insert or update the legacy author row keyed on name and outlet.

    Args:
        db: Database session
        profile: Enriched author profile

    Returns:
        The stored mirror record
    """
    record = db.query(AuthorRecord).filter(
        AuthorRecord.name == profile.name,
        AuthorRecord.outlet == profile.outlet
    ).first()

    if record is None:
        record = AuthorRecord(name=profile.name, outlet=profile.outlet)
        db.add(record)

    record.profile_url = profile.profile_url
    record.role = profile.role
    record.total_articles = profile.total_articles
    record.topics = list(profile.topics)
    record.influence_score = profile.influence_score
    record.updated_at = datetime.datetime.utcnow()

    db.commit()
    db.refresh(record)
    return record


def list_profiles(db: Session, outlet: Optional[str] = None, sort_by: str = "articles",
                  limit: Optional[int] = None) -> List[AuthorProfileRecord]:
    """
    List stored profiles.

    Args:
        db: Database session
        outlet: Only profiles for this outlet (case-insensitive)
        sort_by: "articles", "recent" or "influence"
        limit: Maximum number of profiles to return

    Returns:
        List of AuthorProfileRecord objects
    """
    if sort_by not in SORT_COLUMNS:
        raise ValueError(f"Unknown sort key: {sort_by}")

    query = db.query(AuthorProfileRecord)
    if outlet:
        query = query.filter(func.lower(AuthorProfileRecord.outlet) == outlet.lower())
    query = query.order_by(desc(SORT_COLUMNS[sort_by]), AuthorProfileRecord.id)
    if limit:
        query = query.limit(limit)
    return query.all()


def get_profile(db: Session, profile_id: int) -> Optional[AuthorProfileRecord]:
    """Get a profile by id."""
    return db.query(AuthorProfileRecord).filter(AuthorProfileRecord.id == profile_id).first()


def count_profiles(db: Session, outlet: Optional[str] = None) -> int:
    """Count stored profiles, optionally for one outlet."""
    query = db.query(func.count(AuthorProfileRecord.id))
    if outlet:
        query = query.filter(func.lower(AuthorProfileRecord.outlet) == outlet.lower())
    return query.scalar() or 0
