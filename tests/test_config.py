from __future__ import annotations

from dhruva.core.config import DEFAULT_MIRRORS, Settings


def test_dev_candidates_try_local_before_mirrors() -> None:
    settings = Settings(ENV="dev", API_URL="https://custom.example/ ", RAILWAY_URL=None)
    assert settings.candidate_urls() == [
        "https://custom.example",
        "http://localhost:8000",
        *DEFAULT_MIRRORS,
    ]


def test_prod_never_tries_local() -> None:
    settings = Settings(ENV="prod", API_URL=None, RAILWAY_URL=None)
    assert settings.candidate_urls() == DEFAULT_MIRRORS


def test_duplicates_are_removed() -> None:
    mirror = DEFAULT_MIRRORS[0]
    settings = Settings(ENV="prod", API_URL=mirror + "/", RAILWAY_URL=mirror, FALLBACK_URLS=[mirror])
    assert settings.candidate_urls() == [mirror]
