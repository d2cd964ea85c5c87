"""
Catalog aggregation and ranking over IGDB.

IGDB refuses queries that combine ``search`` with ``sort``, so searches pull
a large unsorted candidate pool and are ordered here. The "top games" board
blends each record's rating with a global average (Bayesian weighting) so a
handful of perfect votes cannot outrank thousands of good ones.

The filtered, ranked set is cached per request key by :class:`CatalogCache`;
pages are sliced from that cached set.
"""
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import structlog

from questlog.constants import (
    CATALOG_MODES,
    IGDB_IMAGE_URL,
    IGDB_MAX_LIMIT_PER_REQUEST,
    MODE_NEW_RELEASES,
    MODE_TOP_GAMES,
)
from questlog.exceptions import ValidationException
from questlog.services.catalog_cache import make_cache_key
from questlog.services.mature_filter import is_mature_game
from questlog.utils import iso_timestamp, to_number

logger = structlog.get_logger("catalog")

DEFAULT_PAGE_SIZE = 20
DEFAULT_COVER_SIZE = "t_cover_big"
DEFAULT_MIN_VOTES = 2000

FIELDS_LINE = (
    "fields id, name, summary, rating, rating_count, aggregated_rating, aggregated_rating_count, "
    "total_rating, total_rating_count, first_release_date, category, version_parent, parent_game, "
    "cover.image_id, genres.name, themes.name, game_modes.name, player_perspectives.name;"
)
BASE_WHERE = "version_parent = null & parent_game = null"
RATED_WHERE = f"total_rating > 0 & total_rating_count > 0 & {BASE_WHERE}"

TAG_GROUPS = (
    ("genres", "genres"),
    ("themes", "themes"),
    ("modes", "game_modes"),
    ("perspectives", "player_perspectives"),
)


class GameKind(Enum):
    MAIN_GAME = "main_game"
    EDITION = "edition"
    DLC = "dlc"


@dataclass
class IngestedGame:
    kind: GameKind
    game: Dict[str, Any]


def classify_game(raw: Dict[str, Any]) -> GameKind:
    """Editions point at a version_parent, DLCs/expansions at a parent_game"""
    if raw.get("version_parent") is not None:
        return GameKind.EDITION
    if raw.get("parent_game") is not None:
        return GameKind.DLC
    return GameKind.MAIN_GAME


def get_igdb_image_url(image_id: str, size: str) -> str:
    return IGDB_IMAGE_URL.format(size=size, image_id=image_id)


def normalize_name_list(items) -> List[str]:
    """Trimmed names, de-duplicated case-insensitively, sorted"""
    names = []
    seen = set()
    for item in items or []:
        name = item.get("name") if isinstance(item, dict) else None
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            continue
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        names.append(name)
    return sorted(names, key=str.lower)


def normalize_game(raw: Dict[str, Any], cover_size: str = DEFAULT_COVER_SIZE) -> Dict[str, Any]:
    cover = raw.get("cover")
    image_id = cover.get("image_id") if isinstance(cover, dict) else None

    tags_by_type = {group: normalize_name_list(raw.get(field)) for group, field in TAG_GROUPS}
    tags = [tag for group, _ in TAG_GROUPS for tag in tags_by_type[group]]

    return {
        "id": raw.get("id"),
        "name": raw.get("name") or "",
        "summary": raw.get("summary"),
        "first_release_date": raw.get("first_release_date"),
        "rating": raw.get("rating"),
        "rating_count": raw.get("rating_count"),
        "aggregated_rating": raw.get("aggregated_rating"),
        "aggregated_rating_count": raw.get("aggregated_rating_count"),
        "total_rating": raw.get("total_rating"),
        "total_rating_count": raw.get("total_rating_count"),
        "weighted_rating": raw.get("weighted_rating"),
        "weighted_rating_meta": raw.get("weighted_rating_meta"),
        "coverImageId": image_id,
        "coverUrl": get_igdb_image_url(image_id, cover_size) if image_id else None,
        "category": raw.get("category"),
        "tags": tags,
        "tagsByType": tags_by_type,
    }


def ingest_games(raw_games: Optional[Iterable[Dict[str, Any]]], cover_size: str = DEFAULT_COVER_SIZE) -> List[IngestedGame]:
    return [
        IngestedGame(kind=classify_game(raw), game=normalize_game(raw, cover_size))
        for raw in raw_games or []
        if isinstance(raw, dict)
    ]


def filter_to_main_games(ingested: Iterable[IngestedGame]) -> List[Dict[str, Any]]:
    return [item.game for item in ingested if item.kind is GameKind.MAIN_GAME]


def dedupe_by_id(games: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep the first record per id; records without an id are dropped"""
    unique = []
    seen = set()
    for game in games:
        game_id = game.get("id")
        if game_id is None or game_id in seen:
            continue
        seen.add(game_id)
        unique.append(game)
    return unique


def mean(numbers) -> Optional[float]:
    values = [n for n in (to_number(x) for x in numbers or []) if n is not None]
    if not values:
        return None
    return sum(values) / len(values)


def compute_weighted_rating(average_rating, vote_count, global_average, min_votes) -> Optional[float]:
    """Bayesian-weighted score: (v/(v+m))*R + (m/(v+m))*C"""
    r = to_number(average_rating)
    v = to_number(vote_count)
    c = to_number(global_average)
    m = to_number(min_votes)

    if r is None or v is None or v <= 0:
        return None
    if c is None:
        return None
    if m is None or m < 0:
        return None

    return (v / (v + m)) * r + (m / (v + m)) * c


def _first_number(game: Dict[str, Any], fields, default=None) -> Optional[float]:
    for field in fields:
        value = game.get(field)
        if value is not None:
            number = to_number(value)
            return default if number is None else number
    return default


def get_display_rating(game: Dict[str, Any]) -> Optional[float]:
    return _first_number(game, ("weighted_rating", "total_rating", "aggregated_rating", "rating"))


def normalize_tag_filters(tags) -> List[str]:
    return [t for t in (str(tag).strip() for tag in tags or [] if tag is not None) if t]


def apply_filters(games, min_rating=0, tag_filters=None, hide_mature=True) -> List[Dict[str, Any]]:
    safe_min_rating = to_number(min_rating) or 0
    wanted = [t.lower() for t in normalize_tag_filters(tag_filters)]

    kept = []
    for game in games or []:
        if hide_mature and is_mature_game(game):
            continue

        if safe_min_rating > 0:
            rating = get_display_rating(game)
            if rating is None or rating < safe_min_rating:
                continue

        if wanted:
            tags = game.get("tags")
            haystack = [str(t).lower() for t in tags] if isinstance(tags, list) else []
            # Every filter term has to match at least one tag
            if not all(any(w in tag for tag in haystack) for w in wanted):
                continue

        kept.append(game)
    return kept


def paginate(payload: Dict[str, Any], page: int, page_size: int) -> Dict[str, Any]:
    all_games = payload.get("gamesAll") or []
    start = (page - 1) * page_size
    page_games = all_games[start:start + page_size]
    return {
        "fetchedAt": payload.get("fetchedAt"),
        "mode": payload.get("mode"),
        "q": payload.get("q"),
        "page": page,
        "pageSize": page_size,
        "total": len(all_games),
        "count": len(page_games),
        "hasMore": start + page_size < len(all_games),
        "games": page_games,
    }


def escape_search(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


class CatalogService:
    """Builds top-games and new-releases listings from IGDB"""

    def __init__(self, client, cache, cover_size=DEFAULT_COVER_SIZE, page_size=DEFAULT_PAGE_SIZE,
                 candidate_limit=IGDB_MAX_LIMIT_PER_REQUEST, baseline_limit=500, min_votes=DEFAULT_MIN_VOTES,
                 clock=time.time):
        self.client = client
        self.cache = cache
        self.cover_size = cover_size
        self.page_size = page_size
        self.candidate_limit = min(candidate_limit, IGDB_MAX_LIMIT_PER_REQUEST)
        self.baseline_limit = min(baseline_limit, IGDB_MAX_LIMIT_PER_REQUEST)
        self.min_votes = min_votes
        self._clock = clock

    @classmethod
    def from_settings(cls, client, cache, settings):
        catalog = settings.get("catalog", {})
        return cls(
            client,
            cache,
            cover_size=settings.get("igdb", {}).get("cover_size") or DEFAULT_COVER_SIZE,
            page_size=catalog.get("page_size") or DEFAULT_PAGE_SIZE,
            candidate_limit=catalog.get("candidate_limit") or IGDB_MAX_LIMIT_PER_REQUEST,
            baseline_limit=catalog.get("baseline_limit") or 500,
            min_votes=catalog.get("min_votes", DEFAULT_MIN_VOTES),
        )

    def fetch_games(self, mode, q=None, page=1, page_size=None, cover_size=None, min_rating=0,
                    tag_filters=None, hide_mature=True) -> Dict[str, Any]:
        """Return one page of the ranked, filtered listing for ``mode``"""
        if mode not in CATALOG_MODES:
            raise ValidationException(f"Unsupported mode: {mode}")

        requested_size = to_number(page_size)
        if requested_size is None or requested_size < 1:
            requested_size = self.page_size
        safe_page_size = int(min(requested_size, self.page_size))
        safe_page = int(max(1, to_number(page) or 1))
        query_text = q.strip() if isinstance(q, str) else ""
        cover_size = cover_size or self.cover_size
        safe_min_rating = to_number(min_rating) or 0
        tags = normalize_tag_filters(tag_filters)
        hide_mature = bool(hide_mature)

        cache_key = make_cache_key(
            "catalog",
            mode=mode,
            q=query_text,
            coverSize=cover_size,
            minRating=safe_min_rating,
            tagFilters=tags,
            hideMature=hide_mature,
        )
        payload = self.cache.get_or_fetch(
            cache_key,
            lambda: self._build_payload(mode, query_text, cover_size, safe_min_rating, tags, hide_mature),
        )
        return paginate(payload, safe_page, safe_page_size)

    def _build_payload(self, mode, query_text, cover_size, min_rating, tags, hide_mature) -> Dict[str, Any]:
        if query_text:
            candidates = self._search_candidates(mode, query_text, cover_size)
        elif mode == MODE_TOP_GAMES:
            candidates = self._top_rated_candidates(cover_size)
        else:
            candidates = self._new_release_candidates(cover_size)

        filtered = apply_filters(candidates, min_rating=min_rating, tag_filters=tags, hide_mature=hide_mature)
        logger.info(
            "Catalog listing built",
            mode=mode,
            q=query_text or None,
            candidates=len(candidates),
            kept=len(filtered),
        )
        return {
            "fetchedAt": iso_timestamp(),
            "mode": mode,
            "q": query_text or None,
            "gamesAll": filtered,
        }

    def _search_candidates(self, mode, query_text, cover_size) -> List[Dict[str, Any]]:
        query_lines = [
            FIELDS_LINE,
            f'search "{escape_search(query_text)}";',
            f"where {BASE_WHERE};",
            f"limit {self.candidate_limit};",
        ]
        games = filter_to_main_games(ingest_games(self.client.query(query_lines), cover_size))

        if mode == MODE_NEW_RELEASES:
            now_seconds = int(self._clock())
            games = [g for g in games if 0 < (to_number(g.get("first_release_date")) or 0) <= now_seconds]
            games.sort(key=lambda g: _first_number(g, ("first_release_date",), -1), reverse=True)
        else:
            games.sort(
                key=lambda g: (
                    _first_number(g, ("total_rating", "aggregated_rating", "rating"), -1),
                    _first_number(g, ("total_rating_count", "aggregated_rating_count", "rating_count"), -1),
                ),
                reverse=True,
            )
        return dedupe_by_id(games)

    def _top_rated_candidates(self, cover_size) -> List[Dict[str, Any]]:
        by_rating_query = [
            FIELDS_LINE,
            f"where {RATED_WHERE};",
            "sort total_rating desc;",
            f"limit {self.candidate_limit};",
        ]
        by_votes_query = [
            FIELDS_LINE,
            f"where {RATED_WHERE};",
            "sort total_rating_count desc;",
            f"limit {self.candidate_limit};",
        ]
        baseline_query = [
            FIELDS_LINE,
            f"where {RATED_WHERE};",
            "sort total_rating_count desc;",
            f"limit {self.baseline_limit};",
        ]

        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="igdb") as pool:
            futures = [pool.submit(self.client.query, lines)
                       for lines in (by_rating_query, by_votes_query, baseline_query)]
            raw_by_rating, raw_by_votes, raw_baseline = [f.result() for f in futures]

        merged = {}
        for raw in list(raw_by_rating or []) + list(raw_by_votes or []):
            if isinstance(raw, dict) and isinstance(raw.get("id"), int) and not isinstance(raw.get("id"), bool):
                merged[raw["id"]] = raw

        candidates = filter_to_main_games(ingest_games(merged.values(), cover_size))
        baseline = filter_to_main_games(ingest_games(raw_baseline, cover_size))

        global_average = mean(g.get("total_rating") for g in baseline)
        if global_average is None:
            global_average = mean(g.get("total_rating") for g in candidates)

        ranked = []
        for game in candidates:
            score = compute_weighted_rating(
                game.get("total_rating"), game.get("total_rating_count"), global_average, self.min_votes
            )
            if score is not None:
                ranked.append((score, game))
        ranked.sort(key=lambda item: item[0], reverse=True)

        meta = {"globalAverage": global_average, "minVotes": self.min_votes}
        top = [
            {**game, "weighted_rating": score, "weighted_rating_meta": meta}
            for score, game in ranked[:IGDB_MAX_LIMIT_PER_REQUEST]
        ]
        logger.debug("Weighted ranking computed", candidates=len(candidates), global_average=global_average)
        return dedupe_by_id(top)

    def _new_release_candidates(self, cover_size) -> List[Dict[str, Any]]:
        now_seconds = int(self._clock())
        query_lines = [
            FIELDS_LINE,
            f"where first_release_date != null & first_release_date <= {now_seconds} & {BASE_WHERE};",
            "sort first_release_date desc;",
            f"limit {self.candidate_limit};",
        ]
        games = filter_to_main_games(ingest_games(self.client.query(query_lines), cover_size))
        return dedupe_by_id(games)
