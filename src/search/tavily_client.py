import logging
import os
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

import requests

from search.extractors import (
    business_name_from_title,
    extract_address,
    extract_hours,
    extract_phone,
)
from todo_app.date_utils import parse_day, weekday_name
from todo_app.models import BusinessInfo, BusinessSource, HoursCheck, Outcome

logger = logging.getLogger(__name__)


@dataclass
class TavilyConfig:
    api_key: str
    base_url: str = "https://api.tavily.com"
    timeout_s: float = 10.0

    @classmethod
    def from_env(cls) -> "TavilyConfig":
        return cls(
            api_key=os.getenv("TAVILY_API_KEY", "").strip(),
            base_url=os.getenv("TAVILY_BASE_URL", "https://api.tavily.com").strip(),
            timeout_s=float(os.getenv("TAVILY_TIMEOUT_S", "10")),
        )


class TavilyClient:
    """
    Business lookup on top of the Tavily search API.

    Never raises to its caller: a missing key or a failed request degrades to
    a status tag on the returned record (or an empty list).
    """

    def __init__(self, config: TavilyConfig):
        self.config = config
        if not config.api_key:
            logger.warning("Tavily API key not provided. Business validation features will be disabled.")

    @property
    def configured(self) -> bool:
        return bool(self.config.api_key)

    def _search(
        self,
        query: str,
        search_depth: str,
        max_results: int,
        include_answer: bool = False,
    ) -> Tuple[Outcome, List[dict]]:
        if not self.configured:
            return Outcome.UNCONFIGURED, []

        payload = {
            "api_key": self.config.api_key,
            "query": query,
            "search_depth": search_depth,
            "include_images": False,
            "include_answer": include_answer,
            "max_results": max_results,
        }
        try:
            response = requests.post(
                f"{self.config.base_url}/search",
                json=payload,
                timeout=self.config.timeout_s,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Tavily search failed for {query!r}: {e}")
            return Outcome.TRANSPORT_ERROR, []

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            logger.warning(f"Tavily response for {query!r} had no results list")
            return Outcome.CONTENT_ERROR, []

        return Outcome.SUCCESS, [r for r in results if isinstance(r, dict)]

    def search_business(self, business_name: str, location: str) -> BusinessInfo:
        query = f"{business_name} {location} hours contact information"
        outcome, results = self._search(query, "advanced", 5, include_answer=True)

        if outcome is Outcome.UNCONFIGURED:
            return BusinessInfo(
                name=business_name,
                location=location,
                status="api_not_configured",
                error="Tavily API key not provided",
            )
        if outcome is Outcome.TRANSPORT_ERROR:
            return BusinessInfo(
                name=business_name,
                location=location,
                status="unknown",
                error="Failed to fetch business information",
            )

        return consolidate_business_info(results, business_name)

    def search_nearby_businesses(self, business_type: str, location: str, limit: int = 5) -> List[dict]:
        query = f"{business_type} near {location} hours contact"
        _, results = self._search(query, "basic", limit)

        businesses = []
        for result in results[:limit]:
            title = result.get("title") or ""
            businesses.append({
                "name": business_name_from_title(title),
                "url": result.get("url"),
                "description": (result.get("content") or "")[:200],
                "source": title,
            })
        return businesses

    def validate_business_hours(self, business_info: BusinessInfo, scheduled_date: Optional[str]) -> HoursCheck:
        """
        Rough check of free-text hours against the weekday of a date.

        Only flags a day when the hours text mentions "closed" together with
        the weekday's three-letter abbreviation.
        """
        return check_business_hours(business_info.hours, scheduled_date)


def consolidate_business_info(results: List[dict], business_name: str) -> BusinessInfo:
    """Merge search snippets into one record; the first snippet to yield a field wins."""
    info = BusinessInfo(name=business_name)
    needle = business_name.lower()

    for result in results:
        raw_content = result.get("content") or ""
        content = raw_content.lower()
        title = (result.get("title") or "").lower()

        if needle not in title and needle not in content:
            continue

        info.sources.append(BusinessSource(
            title=result.get("title"),
            url=result.get("url"),
            content=raw_content[:300],
        ))

        if info.hours is None:
            info.hours = extract_hours(content)
        if info.phone is None:
            info.phone = extract_phone(content)
        if info.address is None:
            info.address = extract_address(raw_content)

    info.status = "found" if info.hours else "limited_info"
    return info


def check_business_hours(hours: Optional[str], scheduled_date: Optional[str]) -> HoursCheck:
    if not hours or not scheduled_date:
        return HoursCheck(
            is_valid=False,
            reason="Insufficient information to validate hours",
            suggestions=["Contact the business directly to confirm hours"],
        )

    day: Optional[date] = parse_day(scheduled_date)
    if day is None:
        return HoursCheck(
            is_valid=False,
            reason="Unable to validate business hours",
            suggestions=["Contact the business directly"],
        )

    weekday = weekday_name(day)
    hours_text = hours.lower()
    if "closed" in hours_text and weekday[:3] in hours_text:
        return HoursCheck(
            is_valid=False,
            reason=f"Business appears to be closed on {weekday}",
            suggestions=[
                "Try a different day",
                "Contact the business to confirm current hours",
                "Look for alternative businesses nearby",
            ],
        )

    return HoursCheck(
        is_valid=True,
        reason="Business appears to be open",
        suggestions=["Consider calling ahead to confirm availability"],
    )
