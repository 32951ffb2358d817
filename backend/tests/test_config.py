from config import DEMO_DB_PATH, Settings


def test_default_database_url_points_at_seeded_demo_db(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    url = Settings(_env_file=None).DATABASE_URL

    assert url == f"sqlite:///{DEMO_DB_PATH}"
    assert DEMO_DB_PATH.is_absolute()
    assert DEMO_DB_PATH.parent.name == "scripts"
    assert (DEMO_DB_PATH.parent / "seed_demo_db.py").exists()


def test_comma_separated_settings_are_split(monkeypatch):
    monkeypatch.setenv("SCHEMA_EXCLUDE_TABLES", " migrations , failed_jobs,,")
    monkeypatch.setenv("INTENT_LOCALES", "en,de")
    settings = Settings(_env_file=None)

    assert settings.exclude_table_list == ["migrations", "failed_jobs"]
    assert settings.intent_locale_list == ["en", "de"]
