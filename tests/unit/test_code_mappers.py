from olympics_schedule.common.code_mappers import CodeMapper


def test_default_mappers_resolve_known_codes():
    venues = CodeMapper.default_venue_mapper()
    countries = CodeMapper.default_country_mapper()
    assert venues.resolve("CCU") == "Milano"
    assert venues.resolve(" ssc ") == "Cortina"
    assert countries.resolve("FIN") == "Finland"


def test_unknown_codes_pass_through():
    countries = CodeMapper.default_country_mapper()
    assert countries.lookup("XXX") is None
    assert countries.resolve("XXX") == "XXX"


def test_resolve_joined_skips_blanks():
    countries = CodeMapper.default_country_mapper()
    assert countries.resolve_joined(["FIN", "", " SWE "]) == "Finland vs Sweden"
    assert countries.resolve_joined([]) == ""


def test_with_overrides_is_non_destructive():
    base = CodeMapper.default_venue_mapper()
    custom = base.with_overrides({"ccu": "Milano Arena"})
    assert custom.resolve("CCU") == "Milano Arena"
    assert base.resolve("CCU") == "Milano"
    assert custom.label == "venues"
