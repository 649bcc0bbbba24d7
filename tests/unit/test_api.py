import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "version" in response.json()


@pytest.mark.asyncio
async def test_list_patterns(client: AsyncClient):
    response = await client.get("/v1/patterns")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 16
    assert data[0]["id"] == "acute_axonal_neuropathy"
    assert data[0]["category"] == "neuropathic"
    assert "fibrillations" in data[0]["criteria"]


@pytest.mark.asyncio
async def test_get_pattern(client: AsyncClient):
    response = await client.get("/v1/patterns/myasthenia_gravis")
    assert response.status_code == 200
    assert response.json()["category"] == "neuromuscular_junction"


@pytest.mark.asyncio
async def test_unknown_pattern_is_404(client: AsyncClient):
    response = await client.get("/v1/patterns/guillain_barre")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_classify_nerve_study(client: AsyncClient):
    payload = {"latency": 5.1, "amplitude": 3.5, "conductionVelocity": 45}

    response = await client.post("/v1/nerves/median_motor/classify", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["parameters"]["latency"]["abnormal"] is True
    assert data["parameters"]["latency"]["direction"] == "above_normal"
    assert data["parameters"]["amplitude"]["reference_range"] == "4-20"
    assert data["pattern"]["pattern"] == "demyelinating"


@pytest.mark.asyncio
async def test_classify_unknown_nerve_is_404(client: AsyncClient):
    response = await client.post("/v1/nerves/facial/classify", json={"latency": 3.0})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_score_patterns(client: AsyncClient, muscle):
    payload = {"muscles": {
        "deltoid": muscle("deltoid", fib="present", pw="present", duration=14,
                          amplitude=7000, recruitment="reduced"),
    }}

    response = await client.post("/v1/patterns/score", json=payload)

    assert response.status_code == 200
    ranked = response.json()
    assert ranked[0]["pattern_id"] == "acute_axonal_neuropathy"
    assert ranked[0]["score"] == 1.0


@pytest.mark.asyncio
async def test_panel_key_fills_muscle_id(client: AsyncClient, muscle):
    entry = muscle("deltoid")
    del entry["muscle"]

    response = await client.post("/v1/patterns/score", json={"muscles": {"deltoid": entry}})

    assert response.status_code == 200
    assert response.json()[0]["pattern_id"] == "normal"


@pytest.mark.asyncio
async def test_negative_duration_is_rejected(client: AsyncClient, muscle):
    payload = {"muscles": {"deltoid": muscle("deltoid", duration=-1)}}
    response = await client.post("/v1/patterns/score", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_muscle_is_rejected(client: AsyncClient, muscle):
    payload = {"muscles": {"deltoid": muscle("deltoid"), "shoulder": muscle("deltoid")}}
    response = await client.post("/v1/patterns/score", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_criteria(client: AsyncClient):
    payload = {"reasonForStudy": {"sensory": {"present": True}}}

    response = await client.post("/v1/criteria", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["can_skip_emg"] is True
    assert data["reasons"] == ["pure sensory neuropathy without weakness"]
    assert data["conflicting"] is False


@pytest.mark.asyncio
async def test_metrics_count_evaluations(client: AsyncClient):
    await client.post("/v1/criteria", json={})

    response = await client.get("/metrics/")

    assert response.status_code == 200
    assert 'emgdx_evaluations_total{kind="criteria"}' in response.text


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "req-abc123"})
    assert response.headers["X-Request-ID"] == "req-abc123"
