from search.extractors import (
    business_name_from_title,
    extract_address,
    extract_hours,
    extract_phone,
)


def test_hours_day_range():
    hours = extract_hours("walmart hours: mon-sun 6am - 11pm every day")
    assert hours is not None
    assert "6am - 11pm" in hours


def test_hours_open_phrase():
    assert extract_hours("we are open 8am - 9pm") == "open 8am - 9pm"


def test_hours_bare_range_capped_at_three():
    hours = extract_hours("1 - 2, 3 - 4, 5 - 6, 7 - 8")
    assert hours.count(",") == 2


def test_no_hours():
    assert extract_hours("great cakes and friendly staff") is None


def test_labeled_phone():
    assert extract_phone("call: (248) 555-0199 today") == "(248) 555-0199"


def test_bare_phone():
    assert extract_phone("reach us at 248.555.0199") == "248.555.0199"


def test_address():
    address = extract_address("Visit us at 123 Main Street, Springfield, IL for pickup")
    assert address.startswith("123 Main Street")


def test_no_address():
    assert extract_address("no street here") is None


def test_business_name_from_title():
    assert business_name_from_title("Grafs Pastry - Farmington Hills | Yelp") == "Grafs Pastry"
