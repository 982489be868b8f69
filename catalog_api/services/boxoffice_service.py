import requests
from typing import Optional
from urllib.parse import urljoin
from pydantic import ValidationError
import logging

from catalog_api.config import Settings
from catalog_api.schemas.box_office import UpstreamBoxOffice, UpstreamError

logger = logging.getLogger(__name__)

ENDPOINT_PATH = "/boxoffice"
DEFAULT_TIMEOUT = 5.0


class BoxOfficeError(Exception):
    """Upstream box office call failed (transport, status or payload)"""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[UpstreamError] = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class BoxOfficeNotFound(BoxOfficeError):
    """Upstream has no record for the requested title (HTTP 404)"""


# Client for the third-party Box Office API
class BoxOfficeClient:
    def __init__(self, base_url: str, api_key: str, timeout: float = DEFAULT_TIMEOUT):
        base_url = (base_url or "").strip()
        api_key = (api_key or "").strip()
        if not base_url:
            raise ValueError("boxoffice: base URL is required")
        if not api_key:
            raise ValueError("boxoffice: API key is required")
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self.session = requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["BoxOfficeClient"]:
        """
        Build a client from settings.
        Returns None (enrichment disabled) when URL or key is not configured.
        """
        try:
            return cls(settings.boxoffice_url, settings.boxoffice_api_key, settings.boxoffice_timeout)
        except ValueError as e:
            logger.warning(f"Box office enrichment disabled: {e}")
            return None

    def get_movie_box_office(self, title: str) -> UpstreamBoxOffice:
        """
        Fetch box office information for a movie title.

        Args:
            title: Movie title (surrounding whitespace is trimmed)

        Returns:
            Parsed upstream record

        Raises:
            ValueError: If title is empty
            BoxOfficeNotFound: If upstream answers 404
            BoxOfficeError: On any other failure
        """
        title = (title or "").strip()
        if not title:
            raise ValueError("boxoffice: title must not be empty")

        url = urljoin(self.base_url, ENDPOINT_PATH)
        headers = {"Accept": "application/json", "X-API-Key": self.api_key}

        try:
            response = self.session.get(url, params={"title": title}, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise BoxOfficeError(f"boxoffice: execute request: {e}") from e

        if response.status_code != 200:
            payload = _decode_error(response)
            message = f"boxoffice: upstream {response.status_code}"
            if payload is not None and payload.message:
                message = f"{message}: {payload.message}"
            if response.status_code == 404:
                raise BoxOfficeNotFound(message, response.status_code, payload)
            raise BoxOfficeError(message, response.status_code, payload)

        try:
            record = UpstreamBoxOffice.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise BoxOfficeError(f"boxoffice: decode success payload: {e}") from e

        logger.debug(f"Box office lookup successful: {title}")
        return record


def _decode_error(response: requests.Response) -> Optional[UpstreamError]:
    try:
        return UpstreamError.model_validate(response.json())
    except (ValueError, ValidationError):
        return None
