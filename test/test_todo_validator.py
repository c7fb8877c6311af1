import json
from datetime import datetime

import httpx
import pytest

from llm.llm_client import LLMClient, LLMServiceError
from todo_app.models import BusinessInfo, Todo, ValidationIssue, ValidationStatus
from validation.todo_validator import TodoValidator

from conftest import TODAY, FakeSearch, ScriptedProvider


def _parsed(**fields):
    base = {
        "task": "Buy a cake",
        "date": None,
        "time": None,
        "business_name": None,
        "business_type": None,
        "location": None,
        "urgency": "medium",
        "category": "Personal",
    }
    base.update(fields)
    return json.dumps(base)


def _validator(provider, search):
    return TodoValidator(LLMClient(provider=provider, today=lambda: TODAY), search, today=lambda: TODAY)


def test_unconfigured_services_give_a_valid_default_result(unconfigured_llm, unconfigured_search):
    text = "buy groceries from Walmart on Saturday morning"
    validator = TodoValidator(unconfigured_llm, unconfigured_search, today=lambda: TODAY)

    result = validator.validate_todo(text)

    assert result.parsed_data.task == text
    assert result.parsed_data.category == "Personal"
    assert result.parsed_data.business_name is None
    assert result.validation_status is ValidationStatus.VALID
    assert result.validation_issues == []
    assert result.suggested_alternatives is None
    assert result.business_info is None
    assert result.scheduled_datetime is None


def test_no_date_means_no_date_issue():
    provider = ScriptedProvider(_parsed())
    result = _validator(provider, FakeSearch()).validate_todo("buy a cake")
    assert result.validation_status is ValidationStatus.VALID
    assert not [i for i in result.validation_issues if i.type == "date"]
    # only the extraction call was made
    assert len(provider.calls) == 1


def test_yesterday_is_flagged_as_past():
    provider = ScriptedProvider(_parsed(date="2026-10-18"), '{"suggestions": [{"type": "date"}], "reasoning": "r"}')
    result = _validator(provider, FakeSearch()).validate_todo("buy a cake yesterday")

    assert result.validation_status is ValidationStatus.WARNING
    assert [i.type for i in result.validation_issues] == ["date"]
    assert result.validation_issues[0].message == "Date is in the past"
    assert result.suggested_alternatives == {"suggestions": [{"type": "date"}], "reasoning": "r"}
    # suggestions never rewrite the parsed record
    assert result.parsed_data.date == "2026-10-18"


def test_today_is_not_in_the_past():
    provider = ScriptedProvider(_parsed(date="2026-10-19"))
    result = _validator(provider, FakeSearch()).validate_todo("buy a cake today")
    assert result.validation_status is ValidationStatus.VALID


def test_unparseable_date_is_flagged():
    provider = ScriptedProvider(_parsed(date="next friday"))
    result = _validator(provider, FakeSearch()).validate_todo("buy a cake next friday")
    assert result.validation_status is ValidationStatus.WARNING
    assert result.validation_issues[0].message == "Invalid date format"


def test_unknown_business_escalates_to_warning():
    search = FakeSearch(BusinessInfo(name="Grafs Pastry", status="unknown"))
    provider = ScriptedProvider(_parsed(business_name="Grafs Pastry", location="Farmington Hills"))

    result = _validator(provider, search).validate_todo("buy a cake from Grafs Pastry")

    assert search.lookups == [("Grafs Pastry", "Farmington Hills")]
    assert result.validation_status is ValidationStatus.WARNING
    assert [i.type for i in result.validation_issues] == ["business_info"]


def test_requires_attention_is_never_downgraded():
    # no hours known -> hours check fails; unknown status and past date add more issues
    search = FakeSearch(BusinessInfo(name="Grafs Pastry", status="unknown"))
    provider = ScriptedProvider(
        _parsed(business_name="Grafs Pastry", location="Farmington Hills", date="2026-10-01")
    )

    result = _validator(provider, search).validate_todo("buy a cake from Grafs Pastry on Oct 1")

    assert result.validation_status is ValidationStatus.REQUIRES_ATTENTION
    assert [i.type for i in result.validation_issues] == ["business_hours", "business_info", "date"]


def test_closed_business_requires_attention():
    search = FakeSearch(BusinessInfo(
        name="Grafs Pastry",
        hours="mon-sat 7am - 6pm, closed sun",
        address="123 Orchard Lake Road",
        status="found",
    ))
    provider = ScriptedProvider(
        _parsed(business_name="Grafs Pastry", location="Farmington Hills", date="2030-01-06", time="10:00")
    )

    result = _validator(provider, search).validate_todo("buy a cake from Grafs Pastry on Sunday")

    assert result.validation_status is ValidationStatus.REQUIRES_ATTENTION
    assert result.validation_issues[0].message == "Business appears to be closed on sunday"
    assert result.scheduled_datetime == datetime(2030, 1, 6, 10, 0)
    assert result.location_data == {
        "query": "Farmington Hills",
        "address": "123 Orchard Lake Road",
        "coordinates": None,
    }


def test_extraction_transport_failure_propagates():
    class BrokenProvider:
        def generate(self, *, system, user, temperature=0.2):
            raise httpx.ReadTimeout("timed out")

    with pytest.raises(LLMServiceError):
        _validator(BrokenProvider(), FakeSearch()).validate_todo("anything")


def test_combine_date_and_time():
    assert TodoValidator.combine_date_and_time("2030-01-07", "09:30") == datetime(2030, 1, 7, 9, 30)
    assert TodoValidator.combine_date_and_time("2030-01-07", "morning") == datetime(2030, 1, 7)
    assert TodoValidator.combine_date_and_time(None, "09:30") is None
    assert TodoValidator.combine_date_and_time("soon", None) is None


def test_generate_alternatives(unconfigured_llm):
    nearby = [
        {"name": "Sweet Spot", "url": "u1", "description": "Bakery", "source": "Sweet Spot"},
        {"name": "Crumbs", "url": "u2", "description": "Cakes", "source": "Crumbs"},
    ]
    search = FakeSearch(BusinessInfo(name="Grafs Pastry", status="found"), nearby=nearby)
    validator = TodoValidator(unconfigured_llm, search, today=lambda: TODAY)
    parsed = unconfigured_llm.parse_todo_text("x").model_copy(update={
        "business_name": "Grafs Pastry",
        "business_type": "bakery",
        "location": "Farmington Hills",
        "date": "2030-01-06",
    })
    issues = [ValidationIssue(type="business_hours", message="closed", suggestions=[])]

    alternatives = validator.generate_alternatives(parsed, search.business_info, issues)

    assert [a["type"] for a in alternatives] == ["alternative_businesses", "alternative_dates"]
    assert [o["name"] for o in alternatives[0]["options"]] == ["Sweet Spot", "Crumbs"]
    dates = alternatives[1]["options"]
    assert [d["date"] for d in dates] == ["2030-01-07", "2030-01-08", "2030-01-09"]
    assert dates[0]["description"] == "Monday, January 7"


def test_issues_for_stored_todo(unconfigured_llm, unconfigured_search):
    validator = TodoValidator(unconfigured_llm, unconfigured_search, today=lambda: TODAY)
    todo = Todo(
        id=3,
        title="Buy a cake",
        category="Personal",
        created_at=datetime(2026, 10, 1),
        parsed_data={"task": "Buy a cake", "date": "2030-01-06"},
        business_info={"name": "Grafs", "hours": "mon-sat 7am - 6pm, closed sun", "status": "found"},
    )
    assert [i.type for i in validator.issues_for(todo)] == ["business_hours"]
