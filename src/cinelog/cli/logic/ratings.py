"""Trakt rating to personal rating conversion."""

from typing import Optional

from ...models import PersonalRating


def map_trakt_rating(trakt_rating: int) -> PersonalRating:
    """Map a Trakt rating (nominally 1-10) onto the five-tier local scale.

    Every integer maps to a tier; values below the scale count as Waste and
    values above it as Outstanding.

    Args:
        trakt_rating: Rating from Trakt

    Returns:
        PersonalRating tier
    """
    if trakt_rating >= 9:
        return PersonalRating.OUTSTANDING
    if trakt_rating >= 7:
        return PersonalRating.ENTERTAINING
    if trakt_rating >= 5:
        return PersonalRating.DECENT
    if trakt_rating >= 3:
        return PersonalRating.MEH
    return PersonalRating.WASTE


def map_optional_rating(trakt_rating: Optional[int]) -> Optional[PersonalRating]:
    return map_trakt_rating(trakt_rating) if trakt_rating is not None else None
