# autowheel/client.py
"""HTTP client for the catalog API."""
import os
from typing import List, Optional

import requests
from pydantic import ValidationError

from .schemas import CarOut, CarPage
from .utils import logger

API_TIMEOUT = 30
PAGE_SIZE = 100


class CatalogUnavailable(Exception):
    pass


class CatalogClient:
    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None, session=None):
        self.base_url = (base_url or os.getenv("AUTOWHEEL_API_URL", "http://localhost:8000")).rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _get(self, path: str, **params):
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, params=params or None, timeout=API_TIMEOUT)
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.RequestException as e:
            logger.error("[API Error] GET %s failed: %s", url, e)
            raise CatalogUnavailable(f"Could not reach {url}") from e
        except ValueError as e:
            logger.error("[API Error] GET %s returned a malformed body: %s", url, e)
            raise CatalogUnavailable(f"Malformed response from {url}") from e

    def get_cars(self) -> List[CarOut]:
        cars: List[CarOut] = []
        page = 1
        while True:
            try:
                body = CarPage.model_validate(self._get("/cars", page=page, limit=PAGE_SIZE))
            except ValidationError as e:
                raise CatalogUnavailable("Unexpected catalog payload") from e
            cars.extend(body.data)
            if page >= body.total_pages:
                return cars
            page += 1

    def get_car(self, car_id: int) -> CarOut:
        try:
            return CarOut.model_validate(self._get(f"/cars/{car_id}"))
        except ValidationError as e:
            raise CatalogUnavailable("Unexpected car payload") from e
