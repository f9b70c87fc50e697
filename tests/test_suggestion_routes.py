"""Integration tests for suggestion, surprise and benchmark routes."""
from types import SimpleNamespace

from everything_converter.models.conversion import ConversionAnswer


def test_suggestions_return_three_items(client, dummy_suggestion_service):
    response = client.post("/api/suggestions", json={"fromText": "10 km"})

    assert response.status_code == 200
    assert response.json() == {"suggestions": ["meters", "football fields", "other units"]}
    assert dummy_suggestion_service.calls == [("suggest", "10 km")]


def test_suggestions_require_from_text(client, dummy_suggestion_service):
    response = client.post("/api/suggestions", json={"fromText": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "From text is required"}
    assert dummy_suggestion_service.calls == []


def test_surprise_returns_pairs(client, dummy_suggestion_service):
    response = client.post("/api/surprise", json={"count": 1, "model": "placeholder"})

    assert response.status_code == 200
    assert response.json() == {"pairs": [{"from": "1 blue whale", "to": "elephants"}]}
    _, count, selection = dummy_suggestion_service.calls[0]
    assert count == 1
    assert selection.is_default


def test_surprise_count_out_of_range_is_rejected(client, dummy_suggestion_service):
    response = client.post("/api/surprise", json={"count": 9})

    assert response.status_code == 400


class _FixedPipeline:
    async def convert(self, from_text, to_text, selection, sampling, skip_validation=False):
        if selection.name == "broken/model":
            raise RuntimeError("no endpoints found")
        stats = SimpleNamespace(usage=None, estimated_cost_usd=None)
        return SimpleNamespace(
            answer=ConversionAnswer(result="0.39 dolphins", explanation="58/150"),
            chat=SimpleNamespace(stats=stats),
        )


def test_benchmark_ranks_models(client, dummy_benchmark_service):
    dummy_benchmark_service(_FixedPipeline())

    response = client.post(
        "/api/benchmark",
        json={"from": "58kg", "to": "dolphins", "models": ["broken/model", "openai/gpt-oss-20b:free"]},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["from"] == "58kg"
    first, second = payload["results"]
    assert first["modelId"] == "openai/gpt-oss-20b:free"
    assert first["modelName"] == "GPT OSS 20B"
    assert first["isWinner"] is True
    assert first["tokenCount"] == 0
    assert second["status"] == "error"
    assert second["rank"] is None
    assert second["errorMessage"] == "no endpoints found"


def test_benchmark_model_count_is_bounded(client, dummy_benchmark_service):
    dummy_benchmark_service(_FixedPipeline())

    too_few = client.post("/api/benchmark", json={"from": "a", "to": "b", "models": ["m1"]})
    too_many = client.post(
        "/api/benchmark", json={"from": "a", "to": "b", "models": [f"m{i}" for i in range(11)]}
    )

    assert too_few.status_code == 400
    assert too_many.status_code == 400
