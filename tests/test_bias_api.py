"""API tests for the enhanced bias detector endpoint."""

from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from hrsignals.api import bias_detector as bias_api
from hrsignals.models import (
    AiExplainabilityRecord,
    BiasNudgeTemplate,
    ManagerBiasPattern,
    Notification,
)

URL = "/functions/v1/enhanced-bias-detector"
MANAGER_ID = str(uuid4())
COMPANY_ID = str(uuid4())
OTHER_COMPANY_ID = str(uuid4())


def _body(overall_scores, action=None, scores=None):
    ratings = [
        {
            "employeeId": f"emp-{i}",
            "employeeName": f"Employee {i}",
            "overallScore": score,
            "scores": [
                {"dimension": f"d{j}", "score": s} for j, s in enumerate((scores or {}).get(i, ()))
            ],
        }
        for i, score in enumerate(overall_scores)
    ]
    body = {"managerId": MANAGER_ID, "companyId": COMPANY_ID, "ratings": ratings}
    if action:
        body["action"] = action
    return body


async def _add_template(session_maker, company_id=None, title="Calibrate upward ratings"):
    async with session_maker() as session:
        session.add(
            BiasNudgeTemplate(
                id=str(uuid4()),
                company_id=company_id,
                bias_type="leniency",
                severity="high",
                nudge_title=title,
                nudge_message="Compare each rating against the written criteria.",
                suggested_action="Re-read the rubric before finalizing",
                educational_content="Leniency bias inflates ratings across a team.",
                is_active=True,
            )
        )
        await session.commit()


async def _all(session_maker, model):
    async with session_maker() as session:
        result = await session.execute(select(model))
        return list(result.scalars().all())


@pytest.mark.asyncio
async def test_leniency_detected_and_persisted(client, session_maker):
    """Lenient batch yields one stored pattern, an audit row and a notification."""
    await _add_template(session_maker)

    resp = await client.post(URL, json=_body([5, 5, 4.5, 4.8]))
    assert resp.status_code == 200
    data = resp.json()

    assert len(data["patterns"]) == 1
    pattern = data["patterns"][0]
    assert pattern["type"] == "leniency"
    assert pattern["severity"] == "high"
    assert pattern["evidenceCount"] == 4
    assert len(pattern["affectedEmployees"]) == 4
    assert pattern["id"] is not None
    assert pattern["nudge"]["title"] == "Calibrate upward ratings"
    assert pattern["nudge"]["suggestedAction"] == "Re-read the rubric before finalizing"
    assert data["summary"] == {
        "totalPatterns": 1,
        "highSeverity": 1,
        "mediumSeverity": 0,
        "lowSeverity": 0,
    }

    rows = await _all(session_maker, ManagerBiasPattern)
    assert len(rows) == 1
    assert rows[0].id == pattern["id"]
    assert rows[0].manager_id == MANAGER_ID
    assert rows[0].detection_method == "statistical_analysis"
    assert rows[0].status == "active"
    assert rows[0].nudge_template_id == pattern["nudge"]["templateId"]

    records = await _all(session_maker, AiExplainabilityRecord)
    assert len(records) == 1
    assert records[0].function_name == "enhanced-bias-detector"
    assert records[0].entity_id == MANAGER_ID
    assert records[0].human_review_required is True
    assert records[0].confidence_score == pytest.approx(pattern["confidence"])
    assert records[0].weight_breakdown == {
        "statistical_distribution": 0.4,
        "pattern_correlation": 0.3,
        "temporal_analysis": 0.3,
    }
    assert records[0].input_summary["rating_count"] == 4
    assert len(records[0].input_summary["ratings_hash"]) == 64

    notifications = await _all(session_maker, Notification)
    assert len(notifications) == 1
    assert notifications[0].user_id == MANAGER_ID
    assert notifications[0].type == "bias_nudge"


@pytest.mark.asyncio
async def test_company_template_preferred_over_global(client, session_maker):
    """Company-specific nudge wins; another company's template is ignored."""
    await _add_template(session_maker, title="Global nudge")
    await _add_template(session_maker, company_id=COMPANY_ID, title="Company nudge")
    await _add_template(session_maker, company_id=OTHER_COMPANY_ID, title="Other company nudge")

    resp = await client.post(URL, json=_body([5, 5, 5]))
    assert resp.status_code == 200
    assert resp.json()["patterns"][0]["nudge"]["title"] == "Company nudge"


@pytest.mark.asyncio
async def test_missing_template_uses_description(client, session_maker):
    """Without a template the nudge message is the pattern description."""
    resp = await client.post(URL, json=_body([5, 5, 5]))
    pattern = resp.json()["patterns"][0]
    assert pattern["nudge"]["templateId"] is None
    assert pattern["nudge"]["message"] == pattern["description"]


@pytest.mark.asyncio
async def test_insufficient_sample(client, session_maker):
    """Two ratings: explanatory message, nothing written."""
    resp = await client.post(URL, json=_body([5, 5]))
    assert resp.status_code == 200
    data = resp.json()
    assert data["patterns"] == []
    assert "minimum 3 ratings required" in data["message"]

    assert await _all(session_maker, ManagerBiasPattern) == []
    assert await _all(session_maker, AiExplainabilityRecord) == []


@pytest.mark.asyncio
async def test_no_patterns_still_audited(client, session_maker):
    """Unremarkable batch: empty result, audit row at default confidence, no notification."""
    resp = await client.post(URL, json=_body([3, 4, 3.5]))
    assert resp.status_code == 200
    data = resp.json()
    assert data["patterns"] == []
    assert data["summary"]["totalPatterns"] == 0

    records = await _all(session_maker, AiExplainabilityRecord)
    assert len(records) == 1
    assert records[0].confidence_score == 0.5
    assert records[0].human_review_required is False
    assert await _all(session_maker, Notification) == []


@pytest.mark.asyncio
async def test_action_selects_detectors(client):
    """detect_halo_horn ignores the lenient batch mean."""
    body = _body([5, 5, 5], action="detect_halo_horn", scores={1: (5, 5, 4.9)})
    resp = await client.post(URL, json=body)
    assert resp.status_code == 200
    patterns = resp.json()["patterns"]
    assert [p["type"] for p in patterns] == ["halo"]
    assert patterns[0]["affectedEmployees"][0]["employeeId"] == "emp-1"


@pytest.mark.asyncio
async def test_failed_persist_keeps_other_patterns(client, session_maker, monkeypatch):
    """One failed insert does not abort the run; that pattern comes back without an id."""
    original = bias_api.create_bias_pattern
    calls = {"n": 0}

    async def flaky(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            raise SQLAlchemyError("insert failed")
        return await original(*args, **kwargs)

    monkeypatch.setattr(bias_api, "create_bias_pattern", flaky)

    body = _body(
        [3, 3, 3],
        action="detect_halo_horn",
        scores={0: (5, 5, 5), 1: (1, 1, 1), 2: (3, 4, 5)},
    )
    resp = await client.post(URL, json=body)
    assert resp.status_code == 200
    patterns = resp.json()["patterns"]
    assert [p["type"] for p in patterns] == ["halo", "horn"]
    assert patterns[0]["id"] is None
    assert patterns[1]["id"] is not None

    rows = await _all(session_maker, ManagerBiasPattern)
    assert [r.bias_type for r in rows] == ["horn"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"companyId": COMPANY_ID, "ratings": []},
        {"managerId": MANAGER_ID, "ratings": []},
        {"managerId": "not-a-uuid", "companyId": COMPANY_ID, "ratings": []},
        {"action": "detect_everything", "managerId": MANAGER_ID, "companyId": COMPANY_ID},
    ],
)
async def test_invalid_request_is_400(client, body):
    """Missing ids, bad ids and unknown actions are rejected."""
    resp = await client.post(URL, json=body)
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_malformed_json_is_400(client):
    resp = await client.post(
        URL, content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_unexpected_error_is_500(client, monkeypatch):
    """Unhandled failures surface as {"error": message}."""

    def boom(*args, **kwargs):
        raise RuntimeError("detector exploded")

    monkeypatch.setattr(bias_api, "detect_patterns", boom)
    resp = await client.post(URL, json=_body([5, 5, 5]))
    assert resp.status_code == 500
    assert resp.json() == {"error": "detector exploded"}


@pytest.mark.asyncio
async def test_options_preflight(client):
    """Bare OPTIONS is answered with 204 and CORS headers."""
    resp = await client.options(URL)
    assert resp.status_code == 204
    assert resp.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_browser_preflight_is_empty_204(client):
    """Preflight with Origin and Access-Control-Request-Method gets an empty 204."""
    resp = await client.options(
        URL,
        headers={
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )
    assert resp.status_code == 204
    assert resp.content == b""
    assert resp.headers["access-control-allow-origin"] in ("*", "https://app.example.com")
    assert "POST" in resp.headers["access-control-allow-methods"]
    assert "content-type" in resp.headers["access-control-allow-headers"]
