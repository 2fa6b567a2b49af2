from app.services.widgets.defaults import (
    DEFAULT_SETTINGS,
    DEFAULT_THEME,
    resolve_settings,
    resolve_theme,
)


def test_empty_theme_resolves_to_defaults():
    theme = resolve_theme(None)

    assert theme.model_dump(by_alias=True) == DEFAULT_THEME


def test_partial_theme_keeps_every_default_key_and_overrides_stored_ones():
    stored = {"primaryColor": "#FF0000", "headerText": "Give Today"}

    theme = resolve_theme(stored).model_dump(by_alias=True)

    assert set(theme) == set(DEFAULT_THEME)
    assert theme["primaryColor"] == "#FF0000"
    assert theme["headerText"] == "Give Today"
    for key in set(DEFAULT_THEME) - set(stored):
        assert theme[key] == DEFAULT_THEME[key]


def test_null_and_unknown_keys_are_ignored():
    theme = resolve_theme({"textColor": None, "sparkles": True})

    dumped = theme.model_dump(by_alias=True)
    assert dumped["textColor"] == DEFAULT_THEME["textColor"]
    assert "sparkles" not in dumped


def test_invalid_stored_value_falls_back_to_its_default_only():
    theme = resolve_theme({"headerAlignment": "diagonal", "fontFamily": "Lato"})

    assert theme.header_alignment == DEFAULT_THEME["headerAlignment"]
    assert theme.font_family == "Lato"


def test_numeric_border_radius_is_read_as_pixels():
    assert resolve_theme({"borderRadius": 12}).border_radius == "12px"


def test_non_object_section_is_treated_as_absent():
    assert resolve_settings(["not", "a", "dict"]).model_dump(by_alias=True) == DEFAULT_SETTINGS


def test_partial_settings_merge():
    settings = resolve_settings({"allowRecurring": False, "suggestedAmounts": [500, 2500]})

    assert settings.allow_recurring is False
    assert settings.suggested_amounts == [500, 2500]
    assert settings.minimum_donation == DEFAULT_SETTINGS["minimumDonation"]
    assert settings.default_frequency == "one-time"
