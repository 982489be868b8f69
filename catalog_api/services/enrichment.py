"""
Box office enrichment merge.

Turns whatever the upstream returned for a title into the record stored with
a new movie. Worldwide revenue falls back to 0, opening weekend revenue stays
None when unknown so a reported 0 can still be told apart from no data.
"""
from typing import Optional
import logging

from catalog_api.schemas.box_office import UpstreamBoxOffice, UpstreamRevenue
from catalog_api.schemas.movie import BoxOfficeInfo, Revenue
from catalog_api.services.boxoffice_service import BoxOfficeClient, BoxOfficeError, BoxOfficeNotFound

logger = logging.getLogger(__name__)


def merge_box_office(record: Optional[UpstreamBoxOffice]) -> Optional[BoxOfficeInfo]:
    """Normalize an upstream record; None in, None out"""
    if record is None:
        return None

    # "revenue": null reads as an empty revenue block
    revenue = record.revenue or UpstreamRevenue()
    return BoxOfficeInfo(
        revenue=Revenue(
            worldwide=revenue.worldwide or 0,
            opening_weekend_usa=revenue.opening_weekend_usa,
        ),
        currency=record.currency or "",
        source=record.source or "",
        last_updated=record.last_updated or "",
    )


def fetch_box_office(client: Optional[BoxOfficeClient], title: str) -> Optional[BoxOfficeInfo]:
    """
    Look up enrichment for a movie being created.

    Exactly one attempt, no retries. Not found, upstream failures and a
    disabled client all yield None; creation goes ahead either way.
    """
    if client is None:
        return None

    try:
        record = client.get_movie_box_office(title)
    except BoxOfficeNotFound:
        logger.info(f"No box office record for '{title}'")
        return None
    except (BoxOfficeError, ValueError) as e:
        logger.warning(f"Box office lookup failed for '{title}': {e}")
        return None

    return merge_box_office(record)
