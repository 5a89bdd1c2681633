"""API 엔드포인트 통합 테스트"""

import pytest
from datetime import date
from decimal import Decimal

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from municipal_tax.api.dependencies import get_rule_store, get_settings
from municipal_tax.api.main import load_rules
from municipal_tax.api.middleware import RequestLoggingMiddleware
from municipal_tax.api.routers import municipality, tax
from municipal_tax.api.schemas import ErrorResponse
from municipal_tax.config import DEFAULT_SEED_RULES_FILE, Settings
from municipal_tax.core import RuleFields, RuleStore
from municipal_tax.database import Base, TaxRuleDB, TaxRuleRepository, get_db


# 테스트용 인메모리 데이터베이스 (모든 연결이 같은 DB를 보도록 StaticPool 사용)
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base.metadata.create_all(bind=engine)


def override_get_db():
    """테스트용 DB 세션"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# 테스트용 앱 생성 (lifespan 없이)
app = FastAPI()
app.add_middleware(RequestLoggingMiddleware)
app.include_router(tax.router, prefix="/api/Tax")
app.include_router(municipality.router, prefix="/api/Municipality")
app.dependency_overrides[get_db] = override_get_db

client = TestClient(app)

state = {}


@pytest.fixture(autouse=True)
def fresh_state(tmp_path):
    """테스트마다 새 RuleStore와 빈 테이블"""
    state['store'] = RuleStore()
    state['settings'] = Settings(import_base_dir=tmp_path)
    app.dependency_overrides[get_rule_store] = lambda: state['store']
    app.dependency_overrides[get_settings] = lambda: state['settings']
    yield
    db = TestingSessionLocal()
    try:
        db.query(TaxRuleDB).delete()
        db.commit()
    finally:
        db.close()


def _persisted():
    db = TestingSessionLocal()
    try:
        return TaxRuleRepository(db).load_all()
    finally:
        db.close()


DAILY_RULE = {
    "municipality_name": "Bangalore",
    "recurrence_kind": "Daily",
    "tax_value": "0.08",
    "start_date": "2024-06-15",
    "end_date": "2024-06-15",
}

YEARLY_RULE = {
    "municipality_name": "Bangalore",
    "recurrence_kind": "Yearly",
    "tax_value": "0.25",
    "start_date": "2024-01-01",
    "end_date": "2024-12-31",
}


class TestAddTaxRule:
    """규칙 추가 엔드포인트 테스트"""

    def test_add_rule(self):
        response = client.post("/api/Municipality/taxrule", json=DAILY_RULE)

        assert response.status_code == 201
        data = response.json()
        assert data['id'] == 1
        assert data['municipality_name'] == "Bangalore"
        assert data['recurrence_kind'] == "Daily"
        assert Decimal(str(data['tax_value'])) == Decimal("0.08")
        assert data['source'] == "api"

        persisted = _persisted()
        assert len(persisted) == 1
        assert persisted[0].tax_value == Decimal("0.08")

    def test_add_invalid_rule(self):
        """Monthly 규칙에 day_of_month 누락"""
        payload = {**YEARLY_RULE, "recurrence_kind": "Monthly"}

        response = client.post("/api/Municipality/taxrule", json=payload)

        assert response.status_code == 400
        assert "day_of_month is required for Monthly rules" in response.json()['detail']['errors']
        assert _persisted() == []

    def test_add_unknown_kind(self):
        payload = {**YEARLY_RULE, "recurrence_kind": "Hourly"}

        response = client.post("/api/Municipality/taxrule", json=payload)

        assert response.status_code == 400

    def test_missing_field_is_rejected_by_schema(self):
        payload = {k: v for k, v in DAILY_RULE.items() if k != "start_date"}

        response = client.post("/api/Municipality/taxrule", json=payload)

        assert response.status_code == 422


class TestGetTax:
    """세율 조회 엔드포인트 테스트"""

    def test_precedence(self):
        client.post("/api/Municipality/taxrule", json=YEARLY_RULE)
        client.post("/api/Municipality/taxrule", json=DAILY_RULE)

        response = client.get("/api/Tax/Bangalore/2024.06.15")
        assert response.status_code == 200
        data = response.json()
        assert data['municipality'] == "Bangalore"
        assert data['date'] == "2024-06-15"
        assert Decimal(str(data['tax'])) == Decimal("0.08")
        assert data['recurrence_kind'] == "Daily"

        response = client.get("/api/Tax/bangalore/2024-06-16")
        assert Decimal(str(response.json()['tax'])) == Decimal("0.25")

    def test_known_municipality_without_match_returns_zero(self):
        client.post("/api/Municipality/taxrule", json=DAILY_RULE)

        response = client.get("/api/Tax/Bangalore/2024.06.16")

        assert response.status_code == 200
        assert Decimal(str(response.json()['tax'])) == Decimal("0")
        assert response.json()['rule_id'] is None

    def test_unknown_municipality(self):
        response = client.get("/api/Tax/NonExistentCity/2024.03.15")

        assert response.status_code == 404

    def test_slash_date_is_not_routed(self):
        """YYYY/MM/DD는 경로 구분자로 나뉘어 조회 라우트에 도달하지 않음"""
        client.post("/api/Municipality/taxrule", json=DAILY_RULE)

        response = client.get("/api/Tax/Bangalore/2024/06/15")

        assert response.status_code == 404
        assert response.json()['detail'] == "Not Found"

    def test_invalid_date(self):
        client.post("/api/Municipality/taxrule", json=DAILY_RULE)

        response = client.get("/api/Tax/Bangalore/2024.13.01")

        assert response.status_code == 400


class TestUpdateTaxRule:
    """규칙 수정 엔드포인트 테스트"""

    def test_update_rule(self):
        rule_id = client.post("/api/Municipality/taxrule", json=YEARLY_RULE).json()['id']

        response = client.put(
            "/api/Municipality/taxrule",
            json={**YEARLY_RULE, "id": rule_id, "tax_value": "0.3"}
        )

        assert response.status_code == 200
        assert response.json()['id'] == rule_id
        assert response.json()['updated_at'] is not None
        assert Decimal(str(client.get("/api/Tax/Bangalore/2024.03.03").json()['tax'])) == Decimal("0.3")

        persisted = _persisted()
        assert len(persisted) == 1
        assert persisted[0].tax_value == Decimal("0.3")

    def test_update_unknown_rule(self):
        response = client.put("/api/Municipality/taxrule", json={**YEARLY_RULE, "id": 999})

        assert response.status_code == 404

    def test_update_invalid(self):
        rule_id = client.post("/api/Municipality/taxrule", json=YEARLY_RULE).json()['id']

        response = client.put(
            "/api/Municipality/taxrule",
            json={**YEARLY_RULE, "id": rule_id, "start_date": "2025-01-01"}
        )

        assert response.status_code == 400
        assert "start_date must not be after end_date" in response.json()['detail']['errors']


class TestListTaxRules:

    def test_list_rules(self):
        client.post("/api/Municipality/taxrule", json=YEARLY_RULE)
        client.post("/api/Municipality/taxrule", json=DAILY_RULE)

        response = client.get("/api/Municipality/BANGALORE/taxrules")

        assert response.status_code == 200
        assert [r['id'] for r in response.json()] == [1, 2]

    def test_list_unknown(self):
        response = client.get("/api/Municipality/Nowhere/taxrules")

        assert response.status_code == 200
        assert response.json() == []


class TestImportTaxRules:
    """CSV 가져오기 엔드포인트 테스트"""

    def test_import_partial_failure(self, tmp_path):
        (tmp_path / "rules.csv").write_text(
            "MunicipalityName,Type,TaxValue,StartDate,EndDate,DayOfMonth,DayOfWeek,DayOfYear\n"
            "Delhi,Yearly,0.18,2024.01.01,2024.12.31,,,\n"
            "Delhi,Daily,0.05,2024.08.15,2024.08.15,,,\n"
            "Mumbai,Monthly,0.07,2024.01.01,2024.12.31,,,\n",
            encoding="utf-8"
        )

        response = client.post(
            "/api/Municipality/import-tax-rules",
            params={"filePath": "rules.csv", "fileSourceType": "Local"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data['total'] == 3
        assert data['succeeded'] == 2
        assert data['failed'] == 1
        assert data['failures'][0]['row_number'] == 3
        assert data['failures'][0]['municipality_name'] == "Mumbai"
        assert data['source_label'] == "Local:rules.csv"

        assert len(_persisted()) == 2
        assert Decimal(str(client.get("/api/Tax/Delhi/2024.08.15").json()['tax'])) == Decimal("0.05")

    def test_import_missing_file(self):
        response = client.post(
            "/api/Municipality/import-tax-rules",
            params={"filePath": "missing.csv"}
        )

        assert response.status_code == 400

    def test_import_unknown_source_type(self):
        response = client.post(
            "/api/Municipality/import-tax-rules",
            params={"filePath": "rules.csv", "fileSourceType": "Ftp"}
        )

        assert response.status_code == 400


class TestLoadRules:
    """시작 시 규칙 적재 테스트"""

    def test_seed_when_database_empty(self):
        store = RuleStore()
        db = TestingSessionLocal()
        try:
            count = load_rules(store, db, DEFAULT_SEED_RULES_FILE)
        finally:
            db.close()

        assert count == len(store) > 0
        assert len(_persisted()) == len(store)

    def test_hydrate_from_database_skips_seed(self):
        client.post("/api/Municipality/taxrule", json=YEARLY_RULE)
        client.post("/api/Municipality/taxrule", json=DAILY_RULE)

        store = RuleStore()
        db = TestingSessionLocal()
        try:
            count = load_rules(store, db, DEFAULT_SEED_RULES_FILE)
        finally:
            db.close()

        assert count == 2
        assert store.list("Copenhagen") == ()
        assert store.get(2).start_date == date(2024, 6, 15)
        assert store.get(1).tax_value == Decimal("0.25")
        assert store.add(RuleFields.from_row(YEARLY_RULE)).id == 3

    def test_missing_seed_file_is_skipped(self, tmp_path):
        store = RuleStore()
        db = TestingSessionLocal()
        try:
            assert load_rules(store, db, tmp_path / "missing.yaml") == 0
        finally:
            db.close()


class TestRootEndpoints:

    def test_root_and_health(self):
        from municipal_tax.api.main import app as main_app

        main_client = TestClient(main_app)

        assert main_client.get("/").json()['message'] == "Municipality Tax API"
        assert main_client.get("/health").json() == {"status": "healthy"}

    def test_error_responses_documented(self):
        """오류 응답이 ErrorResponse 스키마로 문서화됨"""
        paths = client.get("/openapi.json").json()['paths']

        tax_404 = paths["/api/Tax/{municipality_name}/{tax_date}"]['get']['responses']['404']
        assert tax_404['content']['application/json']['schema']['$ref'].endswith("/ErrorResponse")

        update_responses = paths["/api/Municipality/taxrule"]['put']['responses']
        assert {"400", "404"} <= set(update_responses)

    def test_error_bodies_match_error_response(self):
        invalid = client.post(
            "/api/Municipality/taxrule",
            json={**YEARLY_RULE, "recurrence_kind": "Monthly"}
        )
        missing = client.get("/api/Tax/Nowhere/2024.01.01")

        assert ErrorResponse(**invalid.json()).detail.errors == [
            "day_of_month is required for Monthly rules"
        ]
        assert isinstance(ErrorResponse(**missing.json()).detail, str)
