"""
Tests for the translate endpoint and translation cache admin endpoints.

Tests cover:
- Request validation (400) and missing books (404)
- Successful translation with context and camelCase response fields
- Upstream failures mapped to a generic 500 and logged against the key
- Cache hits, statistics and clearing
- Key resolution only on cache misses; unstructured answers never cached
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from ketabyar.core.translation import ModelTranslation, TranslationCache
from ketabyar.core.translation.api_keys import ApiKeyService
from ketabyar.core.translation.prompts import PromptTemplateService
from ketabyar.models.database import ApiErrorLog
from tests.fakes import FABULOUS_RESPONSE, ProviderHTTPError, make_completion

ACOMPLETION = "ketabyar.core.translation.client.acompletion"


# ============================================================================
# VALIDATION TESTS
# ============================================================================


@pytest.mark.api
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"bookId": "some-book"},
        {"selectedText": "fabulous"},
        {"bookId": "", "selectedText": "fabulous"},
        {"bookId": "some-book", "selectedText": ""},
    ],
)
async def test_missing_fields_return_400(client, body):
    mock = AsyncMock()

    with patch(ACOMPLETION, mock):
        response = await client.post("/api/v1/translate", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields"
    mock.assert_not_awaited()


@pytest.mark.api
@pytest.mark.asyncio
async def test_unknown_book_returns_404(client):
    response = await client.post(
        "/api/v1/translate", json={"bookId": "missing", "selectedText": "word"}
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Book not found"


# ============================================================================
# TRANSLATION TESTS
# ============================================================================


@pytest.mark.api
@pytest.mark.asyncio
async def test_translate_returns_result_with_context(client, book):
    mock = AsyncMock(return_value=make_completion(FABULOUS_RESPONSE))

    with patch(ACOMPLETION, mock):
        response = await client.post(
            "/api/v1/translate", json={"bookId": book.id, "selectedText": "fabulous"}
        )

    assert response.status_code == 200
    data = response.json()
    assert data["translatedText"] == "فوق‌العاده"
    assert data["notes"] == ["adjective"]
    assert data["timestamp"]
    assert data["originalContext"]["selected"] == "fabulous"
    assert data["originalContext"]["before"]
    assert data["originalContext"]["after"]

    # Environment key used when no key is stored
    assert mock.call_args.kwargs["api_key"] == "env-test-key"
    prompt = mock.call_args.kwargs["messages"][0]["content"]
    assert "Book: T" in prompt
    assert "Author: A" in prompt
    assert "Persian" in prompt


@pytest.mark.api
@pytest.mark.asyncio
async def test_target_language_is_passed_to_prompt(client, book):
    mock = AsyncMock(return_value=make_completion(FABULOUS_RESPONSE))

    with patch(ACOMPLETION, mock):
        response = await client.post(
            "/api/v1/translate",
            json={"bookId": book.id, "selectedText": "fabulous", "targetLanguage": "ar"},
        )

    assert response.status_code == 200
    assert "Arabic" in mock.call_args.kwargs["messages"][0]["content"]


@pytest.mark.api
@pytest.mark.asyncio
async def test_second_identical_request_is_served_from_cache(client, book):
    mock = AsyncMock(return_value=make_completion(FABULOUS_RESPONSE))
    body = {"bookId": book.id, "selectedText": "fabulous"}

    with patch(ACOMPLETION, mock):
        first = await client.post("/api/v1/translate", json=body)
        second = await client.post("/api/v1/translate", json=body)

    assert first.status_code == second.status_code == 200
    assert second.json()["translatedText"] == "فوق‌العاده"
    assert mock.await_count == 1


@pytest.mark.api
@pytest.mark.asyncio
async def test_cache_disabled_calls_model_every_time(client, book, test_settings):
    test_settings.translation_cache_enabled = False
    mock = AsyncMock(return_value=make_completion(FABULOUS_RESPONSE))
    body = {"bookId": book.id, "selectedText": "fabulous"}

    with patch(ACOMPLETION, mock):
        await client.post("/api/v1/translate", json=body)
        await client.post("/api/v1/translate", json=body)

    assert mock.await_count == 2


@pytest.mark.api
@pytest.mark.asyncio
async def test_stored_default_key_is_used_and_marked(client, book, db_session):
    api_key = await ApiKeyService.create(db_session, "main", "stored-key-1234", is_default=True)
    mock = AsyncMock(return_value=make_completion(FABULOUS_RESPONSE))

    with patch(ACOMPLETION, mock):
        response = await client.post(
            "/api/v1/translate", json={"bookId": book.id, "selectedText": "fabulous"}
        )

    assert response.status_code == 200
    assert mock.call_args.kwargs["api_key"] == "stored-key-1234"
    await db_session.refresh(api_key)
    assert api_key.last_used_at is not None


@pytest.mark.api
@pytest.mark.asyncio
async def test_cached_translation_served_without_api_key(client, book, test_settings):
    body = {"bookId": book.id, "selectedText": "fabulous"}
    with patch(ACOMPLETION, AsyncMock(return_value=make_completion(FABULOUS_RESPONSE))):
        first = await client.post("/api/v1/translate", json=body)

    test_settings.gemini_api_key = None
    mock = AsyncMock()
    with patch(ACOMPLETION, mock):
        second = await client.post("/api/v1/translate", json=body)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["translatedText"] == "فوق‌العاده"
    mock.assert_not_awaited()


@pytest.mark.api
@pytest.mark.asyncio
async def test_cache_hit_does_not_mark_key_used(client, book, db_session):
    await TranslationCache(db_session).store(
        "fabulous", ModelTranslation(translated_text="عالی"), "fa"
    )
    api_key = await ApiKeyService.create(db_session, "main", "stored-key-1234", is_default=True)
    mock = AsyncMock()

    with patch(ACOMPLETION, mock):
        response = await client.post(
            "/api/v1/translate", json={"bookId": book.id, "selectedText": "fabulous"}
        )

    assert response.status_code == 200
    mock.assert_not_awaited()
    await db_session.refresh(api_key)
    assert api_key.last_used_at is None


@pytest.mark.api
@pytest.mark.asyncio
async def test_unstructured_answer_is_not_served_from_cache(client, book):
    body = {"bookId": book.id, "selectedText": "fabulous"}
    mock = AsyncMock(
        side_effect=[
            make_completion("I cannot translate this."),
            make_completion(FABULOUS_RESPONSE),
        ]
    )

    with patch(ACOMPLETION, mock):
        first = await client.post("/api/v1/translate", json=body)
        second = await client.post("/api/v1/translate", json=body)

    assert first.json()["translatedText"] == "I cannot translate this."
    assert second.json()["translatedText"] == "فوق‌العاده"
    assert mock.await_count == 2


@pytest.mark.api
@pytest.mark.asyncio
async def test_default_prompt_template_is_used(client, book, db_session):
    await PromptTemplateService.create(
        db_session, "short", "Give a one-word {language} answer as JSON.", is_default=True
    )
    mock = AsyncMock(return_value=make_completion(FABULOUS_RESPONSE))

    with patch(ACOMPLETION, mock):
        response = await client.post(
            "/api/v1/translate", json={"bookId": book.id, "selectedText": "fabulous"}
        )

    assert response.status_code == 200
    prompt = mock.call_args.kwargs["messages"][0]["content"]
    assert prompt.endswith("Give a one-word Persian answer as JSON.")


# ============================================================================
# FAILURE TESTS
# ============================================================================


@pytest.mark.api
@pytest.mark.asyncio
async def test_upstream_failure_returns_generic_500(client, book):
    mock = AsyncMock(side_effect=ProviderHTTPError(503, "secret upstream detail"))

    with patch(ACOMPLETION, mock):
        response = await client.post(
            "/api/v1/translate", json={"bookId": book.id, "selectedText": "fabulous"}
        )

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to translate text"}
    assert mock.await_count == 1


@pytest.mark.api
@pytest.mark.asyncio
async def test_upstream_failure_is_logged_against_stored_key(client, book, db_session):
    api_key = await ApiKeyService.create(db_session, "main", "stored-key-1234", is_default=True)
    mock = AsyncMock(side_effect=ProviderHTTPError(429, "quota exceeded"))

    with patch(ACOMPLETION, mock):
        response = await client.post(
            "/api/v1/translate", json={"bookId": book.id, "selectedText": "fabulous"}
        )

    assert response.status_code == 500
    logs = (await db_session.execute(select(ApiErrorLog))).scalars().all()
    assert len(logs) == 1
    assert logs[0].api_key_id == api_key.id
    assert logs[0].status_code == 429


@pytest.mark.api
@pytest.mark.asyncio
async def test_failed_translation_is_not_cached(client, book):
    body = {"bookId": book.id, "selectedText": "fabulous"}

    with patch(ACOMPLETION, AsyncMock(side_effect=ProviderHTTPError(503))):
        await client.post("/api/v1/translate", json=body)

    stats = await client.get("/api/v1/translate/cache/stats")
    assert stats.json()["total_entries"] == 0


@pytest.mark.api
@pytest.mark.asyncio
async def test_no_api_key_returns_500(client, book, test_settings):
    test_settings.gemini_api_key = None
    mock = AsyncMock()

    with patch(ACOMPLETION, mock):
        response = await client.post(
            "/api/v1/translate", json={"bookId": book.id, "selectedText": "fabulous"}
        )

    assert response.status_code == 500
    mock.assert_not_awaited()


# ============================================================================
# CACHE ADMIN TESTS
# ============================================================================


@pytest.mark.api
@pytest.mark.asyncio
async def test_cache_stats_and_clear(client, book):
    with patch(ACOMPLETION, AsyncMock(return_value=make_completion(FABULOUS_RESPONSE))):
        await client.post("/api/v1/translate", json={"bookId": book.id, "selectedText": "fabulous"})
        await client.post(
            "/api/v1/translate",
            json={"bookId": book.id, "selectedText": "party", "targetLanguage": "ar"},
        )

    stats = await client.get("/api/v1/translate/cache/stats")
    assert stats.json() == {"total_entries": 2, "languages": {"fa": 1, "ar": 1}}

    cleared = await client.post("/api/v1/translate/cache/clear", params={"target_language": "fa"})
    assert cleared.json() == {"entries_deleted": 1, "target_language": "fa"}

    cleared = await client.post("/api/v1/translate/cache/clear")
    assert cleared.json() == {"entries_deleted": 1, "target_language": None}


@pytest.mark.api
@pytest.mark.asyncio
async def test_cache_admin_requires_token_when_configured(client, test_settings):
    test_settings.api_auth_token = "admin-token"

    denied = await client.get("/api/v1/translate/cache/stats")
    allowed = await client.get(
        "/api/v1/translate/cache/stats", headers={"Authorization": "Bearer admin-token"}
    )

    assert denied.status_code == 401
    assert allowed.status_code == 200


@pytest.mark.api
@pytest.mark.asyncio
async def test_translate_does_not_require_admin_token(client, book, test_settings):
    test_settings.api_auth_token = "admin-token"

    with patch(ACOMPLETION, AsyncMock(return_value=make_completion(FABULOUS_RESPONSE))):
        response = await client.post(
            "/api/v1/translate", json={"bookId": book.id, "selectedText": "fabulous"}
        )

    assert response.status_code == 200


@pytest.mark.api
@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
