import pytest
from localeflow import messages


@pytest.fixture(autouse=True)
def reset_locale():
    yield
    messages.set_locale(messages.DEFAULT_LOCALE)


def test_interpolate_replaces_known_placeholders():
    assert messages.interpolate("from %{from} to %{to}", **{"from": "en", "to": "fr"}) == (
        "from en to fr"
    )


def test_interpolate_leaves_unknown_placeholders():
    assert messages.interpolate("keep %{name}") == "keep %{name}"


def test_interpolate_unescapes_double_percent():
    assert messages.interpolate("var %%{count} from %{from}", **{"from": "en"}) == (
        "var %{count} from en"
    )


def test_t_formats_catalog_entry():
    assert messages.t("invalid_locale", invalid="xx!") == "Invalid locale: xx!"


def test_t_returns_key_for_unknown_entry():
    assert messages.t("does_not_exist") == "does_not_exist"


def test_set_locale_falls_back_to_default_for_unknown_catalog():
    messages.set_locale("tlh")
    assert messages.t("no_results") == "The translation provider returned no results."


def test_set_locale_uses_registered_catalog(monkeypatch):
    monkeypatch.setitem(messages.CATALOG, "fr", {"no_results": "Aucun résultat."})

    messages.set_locale("fr")

    assert messages.t("no_results") == "Aucun résultat."
    assert messages.t("invalid_locale", invalid="x!") == "Invalid locale: x!"
