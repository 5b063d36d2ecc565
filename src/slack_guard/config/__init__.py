"""Settings for slack-guard (pydantic-settings, .env and YAML)."""
