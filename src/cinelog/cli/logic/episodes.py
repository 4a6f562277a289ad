"""Episode watch-record deduplication and watch-date resolution.

Trakt timestamps a binge session with the moment of watching. For a yearly
retrospective users expect episodes caught up in a long session to count on
their air date instead, so days with more than BINGE_THRESHOLD episodes use
air dates when they are known.
"""

from collections import OrderedDict
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ...models import WatchedEpisode

# A day is a binge day when strictly more episodes than this were watched
BINGE_THRESHOLD = 4

EpisodeKey = Tuple[int, int]


def deduplicate_episodes(episodes: Iterable[WatchedEpisode]) -> List[WatchedEpisode]:
    """Collapse repeated watches of the same episode into one record.

    Episodes are grouped by (season, episode). Each group keeps the earliest
    known watch timestamp, or None if no watch in the group had one. Groups
    are returned in the order their key first appeared.

    Args:
        episodes: Episode watch records, possibly with rewatches

    Returns:
        One WatchedEpisode per distinct (season, episode)
    """
    earliest: "OrderedDict[EpisodeKey, Optional[datetime]]" = OrderedDict()

    for episode in episodes:
        key = episode.key
        if key not in earliest:
            earliest[key] = episode.watched_at
            continue

        current = earliest[key]
        if episode.watched_at is not None and (current is None or episode.watched_at < current):
            earliest[key] = episode.watched_at

    return [
        WatchedEpisode(season_number=season, episode_number=number, watched_at=watched_at)
        for (season, number), watched_at in earliest.items()
    ]


def is_binge_day(episode_count: int) -> bool:
    return episode_count > BINGE_THRESHOLD


def group_by_watch_day(episodes: Iterable[WatchedEpisode]) -> Dict[Optional[date], List[WatchedEpisode]]:
    """Group episodes by the calendar day they were watched.

    Episodes without a timestamp are grouped under None.
    """
    groups: Dict[Optional[date], List[WatchedEpisode]] = {}
    for episode in episodes:
        day = episode.watched_at.date() if episode.watched_at is not None else None
        groups.setdefault(day, []).append(episode)
    return groups


def choose_episode_date(
    day_count: int,
    watched_at: Optional[datetime],
    air_date: Optional[date],
) -> Optional[date]:
    """Pick the date to record for one episode.

    Args:
        day_count: Episodes watched on the same day as this one
        watched_at: When the episode was watched, if known
        air_date: When the episode aired, if known

    Returns:
        The air date for a binge-day watch with a known air date,
        otherwise the watch timestamp (which may be None)
    """
    if watched_at is None:
        return None
    if is_binge_day(day_count) and air_date is not None:
        return air_date
    return watched_at


def resolve_episode_dates(
    episodes: Iterable[WatchedEpisode],
    air_dates: Mapping[EpisodeKey, date],
) -> List[Tuple[WatchedEpisode, Optional[date]]]:
    """Resolve the date to record for each episode.

    Args:
        episodes: Deduplicated episode watch records
        air_dates: Known air dates keyed by (season, episode)

    Returns:
        (episode, resolved date) pairs in input order
    """
    episodes = list(episodes)
    day_counts = {
        day: len(group)
        for day, group in group_by_watch_day(episodes).items()
        if day is not None
    }

    resolved = []
    for episode in episodes:
        if episode.watched_at is None:
            resolved.append((episode, None))
            continue
        day_count = day_counts[episode.watched_at.date()]
        resolved.append(
            (episode, choose_episode_date(day_count, episode.watched_at, air_dates.get(episode.key)))
        )
    return resolved
