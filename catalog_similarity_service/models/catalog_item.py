"""Catalog items (films and series) as seen by the similarity engine."""
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

ItemId = Union[int, str]


@dataclass(frozen=True)
class KeywordTag:
    """A theme/topic tag attached to a catalog item."""

    id: Optional[int]
    name: str

    @classmethod
    def from_tmdb(cls, data: Dict) -> "KeywordTag":
        return cls(id=data.get("id"), name=str(data.get("name") or ""))


def _parse_keywords(raw) -> Optional[Tuple[KeywordTag, ...]]:
    """Accept a list of tags, or TMDB's {"keywords": [...]} / {"results": [...]} wrappers."""
    if raw is None:
        return None
    if isinstance(raw, dict):
        raw = raw.get("keywords", raw.get("results")) or []

    tags = []
    for entry in raw:
        if isinstance(entry, KeywordTag):
            tags.append(entry)
        elif isinstance(entry, dict):
            tags.append(KeywordTag.from_tmdb(entry))
        elif isinstance(entry, str):
            tags.append(KeywordTag(id=None, name=entry))
    return tuple(tags)


def _parse_genre_ids(data: Dict) -> frozenset:
    genre_ids = data.get("genre_ids")
    if genre_ids:
        return frozenset(genre_ids)

    # Detail endpoints return genres as objects
    genres = data.get("genres") or []
    return frozenset(g["id"] for g in genres if isinstance(g, dict) and g.get("id") is not None)


def _to_float(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def _to_int(value) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class CatalogItem:
    """
    A film or series.

    Only id, genre_ids, description, release_date, rating_average, rating_count
    and keywords feed the similarity score. title and media_type are carried
    through for callers.
    """

    id: ItemId
    genre_ids: frozenset = frozenset()
    description: str = ""
    release_date: Optional[str] = None
    rating_average: float = 0.0
    rating_count: int = 0
    keywords: Optional[Tuple[KeywordTag, ...]] = None
    title: Optional[str] = None
    media_type: Optional[str] = None
    raw: Dict = field(default_factory=dict, compare=False, hash=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "genre_ids", frozenset(self.genre_ids or ()))
        object.__setattr__(self, "rating_average", _to_float(self.rating_average))
        object.__setattr__(self, "rating_count", _to_int(self.rating_count))
        if self.keywords is not None and not isinstance(self.keywords, tuple):
            object.__setattr__(self, "keywords", _parse_keywords(self.keywords))

    @classmethod
    def from_tmdb(cls, data: Dict, media_type: Optional[str] = None) -> "CatalogItem":
        """
        Build an item from a TMDB movie or TV payload.

        Args:
            data: TMDB result or detail dict
            media_type: 'movie' or 'tv' (falls back to data['media_type'])

        Returns:
            CatalogItem
        """
        return cls(
            id=data.get("id"),
            genre_ids=_parse_genre_ids(data),
            description=data.get("overview") or "",
            release_date=data.get("release_date") or data.get("first_air_date") or None,
            rating_average=_to_float(data.get("vote_average")),
            rating_count=_to_int(data.get("vote_count")),
            keywords=_parse_keywords(data.get("keywords")),
            title=data.get("title") or data.get("name"),
            media_type=media_type or data.get("media_type"),
            raw=dict(data),
        )

    @property
    def release_year(self) -> Optional[int]:
        """Year from the ISO release date, or None when unknown."""
        if not self.release_date:
            return None
        try:
            return int(str(self.release_date)[:4])
        except ValueError:
            return None

    @property
    def keyword_names(self) -> frozenset:
        """Lowercased keyword names, empty when no keywords are attached."""
        if not self.keywords:
            return frozenset()
        return frozenset(k.name.lower() for k in self.keywords if k.name)

    def to_dict(self) -> Dict:
        """TMDB-shaped dict for API responses."""
        data = dict(self.raw) if self.raw else {
            "id": self.id,
            "title": self.title,
            "overview": self.description,
            "genre_ids": sorted(self.genre_ids, key=str),
            "release_date": self.release_date,
            "vote_average": self.rating_average,
            "vote_count": self.rating_count,
        }
        if self.media_type:
            data["media_type"] = self.media_type
        return data

    def __repr__(self):
        return f"<CatalogItem(id={self.id!r}, title={self.title!r})>"


def keywords_from_tmdb(entries: Iterable[Dict]) -> List[KeywordTag]:
    """Convert raw TMDB keyword dicts to KeywordTags."""
    return list(_parse_keywords(list(entries)) or ())
