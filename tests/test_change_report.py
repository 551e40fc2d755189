"""
Tests for the ChangeReport
"""

# Local
from plugin8.change_report import ChangeReport


def test_empty_report():
    """A fresh report has no reasons and is falsy"""
    report = ChangeReport("Thing")
    assert report.reasons == []
    assert not report
    assert str(report) == "Thing: "


def test_add_appends_in_order():
    report = ChangeReport("Thing")
    report.add("first")
    report.add("second")
    assert report.reasons == ["first", "second"]
    assert report
    assert str(report) == "Thing: first, second"


def test_check_only_records_changes():
    """check() records the reason only when changed and passes the flag
    through
    """
    report = ChangeReport("Thing")
    assert report.check("not recorded", False) is False
    assert report.check("recorded", True) is True
    assert report.reasons == ["recorded"]


def test_reasons_is_a_copy():
    report = ChangeReport("Thing")
    report.add("reason")
    report.reasons.append("sneaky")
    assert report.reasons == ["reason"]


def test_log_if_needed():
    """Logging never raises with or without reasons"""
    report = ChangeReport("Thing")
    report.log_if_needed()
    report.add("reason")
    report.log_if_needed()
