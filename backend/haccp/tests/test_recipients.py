from types import SimpleNamespace

from haccp.services.recipients import resolve_recipients


def _user(**kw):
    base = dict(status="Active", email=None, email_alerts=False, telegram_alerts=False,
                all_facilities_alerts=False, facility_id=None)
    base.update(kw)
    return SimpleNamespace(**base)


def test_home_facility_email_and_global_chat():
    a = _user(email="a@example.com", email_alerts=True, facility_id="F")
    b = _user(telegram_alerts=True, all_facilities_alerts=True, facility_id="G")
    result = resolve_recipients("F", [a, b])
    assert result.email_targets == ["a@example.com"]
    assert result.chat_eligible is True


def test_inactive_users_never_receive_alerts():
    c = _user(status="Inactive", email="c@example.com", email_alerts=True,
              telegram_alerts=True, all_facilities_alerts=True)
    result = resolve_recipients("F", [c])
    assert result.email_targets == []
    assert result.chat_eligible is False
    assert result.empty


def test_global_scope_covers_every_facility():
    g = _user(email="g@example.com", email_alerts=True, all_facilities_alerts=True, facility_id="X")
    for facility in ("F", "G", "anything"):
        assert resolve_recipients(facility, [g]).email_targets == ["g@example.com"]


def test_other_facility_users_are_ignored():
    other = _user(email="o@example.com", email_alerts=True, telegram_alerts=True, facility_id="G")
    assert resolve_recipients("F", [other]).empty


def test_implausible_addresses_and_duplicates_are_dropped():
    users = [
        _user(email="ops@example.com", email_alerts=True, facility_id="F"),
        _user(email="OPS@example.com", email_alerts=True, facility_id="F"),
        _user(email="not-an-address", email_alerts=True, facility_id="F"),
        _user(email="", email_alerts=True, facility_id="F"),
    ]
    assert resolve_recipients("F", users).email_targets == ["ops@example.com"]


def test_email_address_without_email_subscription_is_not_used():
    chat_only = _user(email="chat@example.com", telegram_alerts=True, facility_id="F")
    result = resolve_recipients("F", [chat_only])
    assert result.email_targets == []
    assert result.chat_eligible is True


def test_resolution_is_repeatable():
    users = [
        _user(email="a@example.com", email_alerts=True, facility_id="F"),
        _user(telegram_alerts=True, facility_id="F"),
    ]
    assert resolve_recipients("F", users) == resolve_recipients("F", users)


def test_no_users_is_not_an_error():
    result = resolve_recipients("F", [])
    assert result.email_targets == [] and result.chat_eligible is False
