"""HTTP tests for the /v1 routes and the error envelope."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from karbon.models.company import Company
from karbon.models.emissions import EmissionSource
from karbon.modules.certification.eligibility import WINDOW_MONTHS

pytestmark = pytest.mark.anyio


async def _submit(client: AsyncClient, company_id, month: int, year: int, value: float = 100) -> dict:
    resp = await client.post(
        f"/v1/companies/{company_id}/inputs",
        json={
            "month": month,
            "year": year,
            "details": [{"source_name": "Listrik PLN", "value": value}],
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestCompanyEndpoints:
    async def test_create_and_fetch(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/v1/companies",
            json={"name": "PT Angkut Cepat", "jenis_perusahaan": "Logistik", "pendapatan_perbulan": 100},
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["sector"] == "Logistik"
        assert body["monthly_revenue"] == 100

        resp = await client.get(f"/v1/companies/{body['id']}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "PT Angkut Cepat"
        assert resp.headers["X-API-Version"] == "v1"

    async def test_missing_company_uses_error_envelope(self, client: AsyncClient) -> None:
        resp = await client.get("/v1/companies/00000000-0000-0000-0000-00000000dead")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "not_found"
        assert "not found" in body["message"]
        assert body["request_id"] == "unknown"


class TestSourceEndpoints:
    async def test_create_source_with_bad_factor(
        self, client: AsyncClient, sample_company: Company
    ) -> None:
        resp = await client.post(
            f"/v1/companies/{sample_company.id}/sources",
            json={"name": "Genset", "unit": "liter", "emission_factor": "-2"},
        )
        assert resp.status_code == 422
        assert resp.json()["error"] == "invalid_value"

    async def test_list_sources(
        self, client: AsyncClient, sample_company: Company, sample_sources: dict[str, EmissionSource]
    ) -> None:
        resp = await client.get(f"/v1/companies/{sample_company.id}/sources")
        assert resp.status_code == 200
        assert [s["name"] for s in resp.json()] == ["Limbah Padat", "Listrik PLN", "Solar"]

    async def test_delete_source_in_use_is_409(
        self, client: AsyncClient, sample_company: Company, sample_sources
    ) -> None:
        await _submit(client, sample_company.id, 1, 2025)
        resp = await client.delete(
            f"/v1/companies/{sample_company.id}/sources/{sample_sources['listrik'].id}"
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "source_in_use"


class TestInputEndpoints:
    async def test_submit_returns_result(
        self, client: AsyncClient, sample_company: Company, sample_sources
    ) -> None:
        body = await _submit(client, sample_company.id, 3, 2025, value=1000)
        assert body["period"] == "2025-03"
        assert body["details"][0]["emission_value"] == pytest.approx(850.0)
        assert body["details"][0]["source"]["name"] == "Listrik PLN"
        result = body["result"]
        assert result["total_emission"] == pytest.approx(850.0)
        assert result["level"] == "Baik"
        assert result["energi"][0]["percentage"] == pytest.approx(100.0)
        assert result["rekomendasi"] == result["analysis"]

    async def test_duplicate_period_is_409(
        self, client: AsyncClient, sample_company: Company, sample_sources
    ) -> None:
        await _submit(client, sample_company.id, 3, 2025)
        resp = await client.post(
            f"/v1/companies/{sample_company.id}/inputs",
            json={"month": 3, "year": 2025, "details": [{"source_name": "Solar", "value": 1}]},
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "duplicate_input"

    async def test_add_detail_and_read_result(
        self, client: AsyncClient, sample_company: Company, sample_sources
    ) -> None:
        created = await _submit(client, sample_company.id, 3, 2025, value=1000)
        resp = await client.post(
            f"/v1/inputs/{created['id']}/details",
            json={"source_id": str(sample_sources["solar"].id), "value": "250"},
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["emission_value"] == pytest.approx(670.0)

        resp = await client.get(f"/v1/inputs/{created['id']}/result")
        assert resp.status_code == 200
        assert resp.json()["total_emission"] == pytest.approx(1520.0)

        resp = await client.get(f"/v1/inputs/{created['id']}/result/analysis")
        assert resp.status_code == 200
        analysis = resp.json()
        assert analysis["emission_band"] == "High"
        assert analysis["priority_actions"][0]["source"] == "Listrik PLN"

    async def test_list_and_delete(
        self, client: AsyncClient, sample_company: Company, sample_sources
    ) -> None:
        first = await _submit(client, sample_company.id, 1, 2025)
        await _submit(client, sample_company.id, 2, 2025)
        resp = await client.get(f"/v1/companies/{sample_company.id}/inputs")
        assert [i["period"] for i in resp.json()] == ["2025-02", "2025-01"]

        resp = await client.delete(f"/v1/inputs/{first['id']}")
        assert resp.status_code == 204
        resp = await client.get(f"/v1/inputs/{first['id']}")
        assert resp.status_code == 404

    async def test_value_too_large_for_float_is_422(
        self, client: AsyncClient, sample_company: Company, sample_sources
    ) -> None:
        resp = await client.post(
            f"/v1/companies/{sample_company.id}/inputs",
            content=(
                '{"month": 3, "year": 2025, "details": '
                '[{"source_name": "Solar", "value": ' + "9" * 400 + "}]}"
            ),
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 422
        assert resp.json()["error"] == "invalid_value"


class TestCertificationEndpoints:
    async def test_not_eligible_is_409_with_verdict(
        self, client: AsyncClient, sample_company: Company, sample_sources
    ) -> None:
        for month in range(1, 12):
            await _submit(client, sample_company.id, month, 2024)

        resp = await client.get(f"/v1/companies/{sample_company.id}/certification/eligibility")
        assert resp.status_code == 200
        assert resp.json()["reason"] == "insufficient_data"

        resp = await client.post(
            f"/v1/companies/{sample_company.id}/certificates",
            json={"issue_date": "2025-01-15"},
        )
        assert resp.status_code == 409
        body = resp.json()
        assert body["error"] == "not_eligible"
        assert body["detail"]["details"]["months_short"] == 1

    async def test_issue_and_manage_certificate(
        self, client: AsyncClient, sample_company: Company, sample_sources
    ) -> None:
        for month in range(1, WINDOW_MONTHS + 1):
            await _submit(client, sample_company.id, month, 2024)

        resp = await client.post(
            f"/v1/companies/{sample_company.id}/certificates",
            json={"issue_date": "2025-01-15", "expiry_date": "2099-01-15"},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        cert = body["certificate"]
        assert cert["certificate_number"] == f"CERT-{sample_company.id}-1"
        assert body["matched_sequence"][0] == "2024-01"

        resp = await client.get("/v1/certificates/active")
        assert [c["id"] for c in resp.json()] == [cert["id"]]

        resp = await client.patch(
            f"/v1/certificates/{cert['id']}", json={"expiry_date": "2025-01-15"}
        )
        assert resp.status_code == 422
        assert resp.json()["error"] == "invalid_date_range"

        resp = await client.patch(f"/v1/certificates/{cert['id']}", json={"level": "Luar Biasa"})
        assert resp.status_code == 422

        resp = await client.delete(f"/v1/certificates/{cert['id']}")
        assert resp.status_code == 204
        resp = await client.get(f"/v1/certificates/{cert['id']}")
        assert resp.status_code == 404

    async def test_expiry_equal_to_issue_is_422(
        self, client: AsyncClient, sample_company: Company
    ) -> None:
        resp = await client.post(
            f"/v1/companies/{sample_company.id}/certificates",
            json={"issue_date": "2025-01-15", "expiry_date": "2025-01-15"},
        )
        assert resp.status_code == 422
        assert resp.json()["error"] == "invalid_date_range"
