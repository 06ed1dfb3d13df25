"""Unit tests for ModelSummaryRecord cache payloads and batch result models."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from repolens.enums.enum_batch import EnumBatchState, EnumItemOutcome
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.enums.enum_summary_provider import EnumSummaryProvider
from repolens.models.model_batch import (
    ModelBatchDeleteResult,
    ModelBatchProgress,
    ModelBatchResult,
    ModelItemResult,
)
from repolens.models.model_provider_credentials import ModelProviderCredentials
from repolens.models.model_summary_record import ModelSummaryRecord


def make_record(text: str = "Does things.") -> ModelSummaryRecord:
    return ModelSummaryRecord(
        text=text,
        generated_at=datetime(2025, 3, 1, 12, 0, tzinfo=UTC),
        provider=EnumSummaryProvider.GROQ,
    )


@pytest.mark.unit
class TestSummaryRecordPayload:
    def test_payload_uses_persisted_field_names(self) -> None:
        payload = make_record().to_cache_payload()
        assert payload == {
            "summary": "Does things.",
            "generatedAt": "2025-03-01T12:00:00+00:00",
            "provider": "groq",
        }

    def test_from_cache_is_never_persisted(self) -> None:
        record = make_record().as_cached()
        assert record.from_cache is True
        assert "fromCache" not in record.to_cache_json()
        assert "from_cache" not in record.to_cache_json()

    def test_decoded_record_is_flagged_from_cache(self) -> None:
        restored = ModelSummaryRecord.from_cache_payload(make_record().to_cache_json())
        assert restored.from_cache is True
        assert restored.text == "Does things."
        assert restored.generated_at == datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

    def test_decodes_javascript_timestamps(self) -> None:
        raw = json.dumps(
            {"summary": "x", "generatedAt": "2024-11-05T08:15:30.123Z", "provider": "openai"}
        )
        record = ModelSummaryRecord.from_cache_payload(raw)
        assert record.provider is EnumSummaryProvider.OPENAI
        assert record.generated_at.tzinfo is not None

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"summary": "x"}'])
    def test_bad_payload_raises_value_error(self, raw: str) -> None:
        with pytest.raises(ValueError):
            ModelSummaryRecord.from_cache_payload(raw)


@pytest.mark.unit
class TestBatchModels:
    def test_progress_percent(self) -> None:
        progress = ModelBatchProgress.at(1, 4, "a.py")
        assert progress.percent == 25.0

    def test_progress_with_zero_total_is_complete(self) -> None:
        assert ModelBatchProgress.at(0, 0, "").percent == 100.0

    def test_result_counters(self) -> None:
        items = (
            ModelItemResult(path="a", kind=EnumNodeKind.FILE, outcome=EnumItemOutcome.SUMMARIZED),
            ModelItemResult(path="b", kind=EnumNodeKind.FILE, outcome=EnumItemOutcome.CACHED),
            ModelItemResult(path="c", kind=EnumNodeKind.FILE, outcome=EnumItemOutcome.FAILED),
            ModelItemResult(path="d", kind=EnumNodeKind.DIRECTORY, outcome=EnumItemOutcome.SKIPPED),
        )
        result = ModelBatchResult(
            state=EnumBatchState.COMPLETED, total=4, processed=4, items=items
        )
        assert (result.summarized, result.cached, result.skipped, result.failed) == (1, 1, 1, 1)
        assert result.has_failures
        assert result.paths_with(EnumItemOutcome.FAILED, EnumItemOutcome.SKIPPED) == ["c", "d"]

    def test_delete_result_success(self) -> None:
        assert ModelBatchDeleteResult(deleted=("k",)).success
        assert not ModelBatchDeleteResult(failed=("k",)).success


@pytest.mark.unit
class TestProviderCredentials:
    def test_key_for_strips_and_defaults_to_empty(self) -> None:
        creds = ModelProviderCredentials(groq_api_key="  gsk_abc  ")
        assert creds.key_for(EnumSummaryProvider.GROQ) == "gsk_abc"
        assert creds.key_for(EnumSummaryProvider.OPENAI) == ""

    def test_for_provider(self) -> None:
        creds = ModelProviderCredentials.for_provider(EnumSummaryProvider.OPENAI, "sk-x")
        assert creds.key_for(EnumSummaryProvider.OPENAI) == "sk-x"
        assert creds.groq_api_key is None

    def test_keys_hidden_in_repr(self) -> None:
        creds = ModelProviderCredentials(groq_api_key="gsk_secret")
        assert "gsk_secret" not in repr(creds)
