import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from llm.llm_client import LLMClient
from search.tavily_client import TavilyClient
from todo_app import date_utils
from todo_app.models import (
    BusinessInfo,
    ParsedData,
    Todo,
    ValidationIssue,
    ValidationResult,
    ValidationStatus,
    escalate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateCheck:
    is_valid: bool
    reason: str
    suggestions: List[str] = field(default_factory=list)


class TodoValidator:
    """Turns free todo text into a ValidationResult.

    Steps run strictly in order: extraction, business lookup, local checks,
    then suggestions. Nothing is retried and suggestions never rewrite the
    parsed record.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        search_client: TavilyClient,
        today: Callable[[], date] = date.today,
    ):
        self.llm = llm_client
        self.search = search_client
        self._today = today

    def validate_todo(self, original_text: str) -> ValidationResult:
        # 1. Extract structured fields (LLMServiceError propagates)
        extraction = self.llm.extract(original_text)
        parsed = extraction.data
        logger.info(f"Parsed todo text ({extraction.outcome.value}): task={parsed.task!r}")

        business_info: Optional[BusinessInfo] = None
        status = ValidationStatus.VALID
        issues: List[ValidationIssue] = []

        # 2. Look up the business when we know what and where
        if parsed.business_name and parsed.location:
            business_info = self.search.search_business(parsed.business_name, parsed.location)

            if parsed.date:
                hours_check = self.search.validate_business_hours(business_info, parsed.date)
                if not hours_check.is_valid:
                    status = escalate(status, ValidationStatus.REQUIRES_ATTENTION)
                    issues.append(ValidationIssue(
                        type="business_hours",
                        message=hours_check.reason,
                        suggestions=hours_check.suggestions,
                    ))

            if business_info.status == "unknown":
                status = escalate(status, ValidationStatus.WARNING)
                issues.append(ValidationIssue(
                    type="business_info",
                    message="Could not find detailed business information",
                    suggestions=["Verify business name and location", "Contact business directly"],
                ))

        # 3. Local date sanity
        if parsed.date:
            date_check = self.validate_date(parsed.date)
            if not date_check.is_valid:
                status = escalate(status, ValidationStatus.WARNING)
                issues.append(ValidationIssue(
                    type="date",
                    message=date_check.reason,
                    suggestions=date_check.suggestions,
                ))

        # 4. Ask for alternatives only when something is off
        suggested_alternatives = None
        if issues:
            suggested_alternatives = self.llm.generate_suggestions(parsed, business_info, issues)

        return ValidationResult(
            original_text=original_text,
            parsed_data=parsed,
            validation_status=status,
            business_info=business_info,
            suggested_alternatives=suggested_alternatives,
            validation_issues=issues,
            scheduled_datetime=self.combine_date_and_time(parsed.date, parsed.time),
            location_data=self.extract_location_data(parsed, business_info),
        )

    def validate_date(self, value: str) -> DateCheck:
        day = date_utils.parse_day(value)
        if day is None:
            return DateCheck(
                is_valid=False,
                reason="Invalid date format",
                suggestions=["Use format YYYY-MM-DD", "Specify a clear date"],
            )

        if day < self._today():
            return DateCheck(
                is_valid=False,
                reason="Date is in the past",
                suggestions=["Choose a future date", "Update the date to today or later"],
            )

        return DateCheck(is_valid=True, reason="Date is valid")

    @staticmethod
    def combine_date_and_time(day: Optional[str], clock: Optional[str]) -> Optional[datetime]:
        return date_utils.combine_date_and_time(day, clock)

    @staticmethod
    def extract_location_data(parsed: ParsedData, business_info: Optional[BusinessInfo]) -> Dict[str, Any]:
        return {
            "query": parsed.location,
            "address": business_info.address if business_info else None,
            "coordinates": None,
        }

    def issues_for(self, todo: Todo) -> List[ValidationIssue]:
        """Re-run the local checks for a stored todo. No network calls."""
        if not todo.parsed_data:
            return []

        parsed = ParsedData.model_validate(todo.parsed_data)
        issues: List[ValidationIssue] = []

        if todo.business_info and parsed.date:
            business_info = BusinessInfo.model_validate(todo.business_info)
            hours_check = self.search.validate_business_hours(business_info, parsed.date)
            if not hours_check.is_valid:
                issues.append(ValidationIssue(
                    type="business_hours",
                    message=hours_check.reason,
                    suggestions=hours_check.suggestions,
                ))

        if parsed.date:
            date_check = self.validate_date(parsed.date)
            if not date_check.is_valid:
                issues.append(ValidationIssue(
                    type="date",
                    message=date_check.reason,
                    suggestions=date_check.suggestions,
                ))
        return issues

    def generate_alternatives(
        self,
        parsed: ParsedData,
        business_info: Optional[BusinessInfo],
        issues: List[ValidationIssue],
    ) -> List[Dict[str, Any]]:
        alternatives: List[Dict[str, Any]] = []

        if business_info and parsed.business_name and parsed.location:
            nearby = self.search.search_nearby_businesses(
                parsed.business_type or "business",
                parsed.location,
                3,
            )
            if nearby:
                alternatives.append({
                    "type": "alternative_businesses",
                    "title": "Try nearby businesses",
                    "options": [
                        {
                            "name": business["name"],
                            "description": business["description"],
                            "action": "replace_business",
                        }
                        for business in nearby
                    ],
                })

        if any(issue.type == "business_hours" for issue in issues):
            options = []
            for iso_day in self.date_alternatives(parsed.date):
                day = date.fromisoformat(iso_day)
                options.append({
                    "date": iso_day,
                    "description": f"{date_utils.weekday_name(day).capitalize()}, {day:%B} {day.day}",
                    "action": "update_date",
                })
            alternatives.append({
                "type": "alternative_dates",
                "title": "Try different dates",
                "options": options,
            })

        return alternatives

    @staticmethod
    def date_alternatives(original: Optional[str]) -> List[str]:
        start = date_utils.parse_day(original)
        if start is None:
            return []
        return date_utils.following_days(start, 3)
