"""Tests for the FastAPI endpoints."""

import json
import logging
from typing import Any, Dict, Generator

import pytest
from fastapi.testclient import TestClient

from rcm_analytics.core.dependencies import get_seasonality_store_dependency
from rcm_analytics.main import app
from rcm_analytics.models import CostData
from rcm_analytics.services.seasonality import SeasonalityStore

pytestmark = pytest.mark.api


@pytest.fixture
def client(seasonality_store: SeasonalityStore) -> Generator[TestClient, None, None]:
    """Test client whose endpoints share one isolated seasonality store."""
    app.dependency_overrides[get_seasonality_store_dependency] = lambda: seasonality_store
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def account_payload(reference_factors: Dict[str, Any]) -> Dict[str, Any]:
    return {'accountId': 'ACC-REF', 'factors': reference_factors}


@pytest.fixture
def quarter() -> Dict[str, str]:
    return {'startDate': '2024-01-01', 'endDate': '2024-03-31'}


class TestServiceEndpoints:

    def test_health(self, client: TestClient) -> None:
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json() == {'status': 'healthy'}

    def test_root(self, client: TestClient) -> None:
        data = client.get('/').json()

        assert data['name'] == 'RCM Analytics Engine'
        assert data['docs'] == '/docs'


class TestCollectionEndpoints:

    def test_predict(self, client: TestClient, account_payload: Dict[str, Any]) -> None:
        response = client.post('/collections/predict', json=account_payload)

        assert response.status_code == 200
        data = response.json()
        assert data['likelihoodScore'] == 80
        assert data['likelihoodClass'] == 'very-high'
        assert data['recommendedStrategy'] == 'standard-dunning'
        assert data['expectedCollection'] == 700

    def test_predict_rejects_negative_balance(self, client: TestClient, account_payload: Dict[str, Any]) -> None:
        account_payload['factors']['balance'] = -1

        response = client.post('/collections/predict', json=account_payload)

        assert response.status_code == 422

    def test_predict_rejects_unknown_insurance(self, client: TestClient, account_payload: Dict[str, Any]) -> None:
        account_payload['factors']['insurance'] = 'platinum-plan'

        assert client.post('/collections/predict', json=account_payload).status_code == 422

    @pytest.mark.parametrize('token', ['1e400', 'Infinity', 'NaN'])
    def test_predict_rejects_non_finite_balance(
        self,
        client: TestClient,
        account_payload: Dict[str, Any],
        token: str,
    ) -> None:
        account_payload['factors']['balance'] = '__balance__'
        body = json.dumps(account_payload).replace('"__balance__"', token)

        response = client.post(
            '/collections/predict',
            content=body,
            headers={'Content-Type': 'application/json'},
        )

        assert response.status_code == 422

    def test_time_to_collection(self, client: TestClient, account_payload: Dict[str, Any]) -> None:
        data = client.post('/collections/time-to-collection', json=account_payload).json()

        assert data == {'daysToFirstPayment': 24, 'daysToFullCollection': 125, 'confidence': 80}

    def test_strategy(self, client: TestClient, account_payload: Dict[str, Any]) -> None:
        data = client.post('/collections/strategy', json=account_payload).json()

        assert data['strategy'] == 'standard-dunning'
        assert data['expectedOutcome'] == 'Expected collection: $700 (70% of balance)'

    def test_strategy_rules(self, client: TestClient) -> None:
        rules = client.get('/collections/strategy-rules').json()

        assert rules[0]['ruleId'] == 'active-dispute'
        assert len(rules) == 16

    def test_batch_preserves_order(self, client: TestClient, tiered_portfolio) -> None:
        accounts = [account.model_dump(mode='json') for account in tiered_portfolio]

        data = client.post('/collections/predict/batch', json={'accounts': accounts}).json()

        assert [p['accountId'] for p in data] == ['ACC-PLAT', 'ACC-GOLD', 'ACC-SILV', 'ACC-BRNZ', 'ACC-IRON']

    def test_empty_batch(self, client: TestClient) -> None:
        response = client.post('/collections/predict/batch', json={'accounts': []})

        assert response.status_code == 200
        assert response.json() == []

    def test_segments(self, client: TestClient, tiered_portfolio) -> None:
        accounts = [account.model_dump(mode='json') for account in tiered_portfolio]

        data = client.post('/collections/segments', json={'accounts': accounts}).json()

        assert [s['tier'] for s in data['segments']] == ['platinum', 'gold', 'silver', 'bronze', 'iron']
        assert data['summary']['totalAccounts'] == 5

    def test_work_queue(self, client: TestClient, tiered_portfolio) -> None:
        accounts = [account.model_dump(mode='json') for account in tiered_portfolio]

        data = client.post('/collections/work-queue', json={'accounts': accounts}).json()

        assert data[0]['accountId'] == 'ACC-GOLD'
        assert data[0]['rank'] == 1

    def test_empty_portfolio_metrics(self, client: TestClient) -> None:
        data = client.post('/collections/portfolio-metrics', json={'accounts': []}).json()

        assert data['totalBalance'] == 0
        assert len(data['strategyDistribution']) == 9
        assert data['strategyDistribution']['hold-for-review'] == 0


class TestForecastingEndpoints:

    def test_revenue_forecast(self, client: TestClient, quarter: Dict[str, str]) -> None:
        response = client.post('/forecasting/revenue', json={'dateRange': quarter, 'baseMonthlyRevenue': 100000})

        assert response.status_code == 200
        data = response.json()
        assert [p['forecast'] for p in data['periods']] == [115000, 105000, 102000]
        assert data['seasonalityVersion'] == 0

    def test_inverted_range_rejected(self, client: TestClient) -> None:
        payload = {
            'dateRange': {'startDate': '2024-03-31', 'endDate': '2024-01-01'},
            'baseMonthlyRevenue': 100000,
        }

        assert client.post('/forecasting/revenue', json=payload).status_code == 422

    def test_overflowing_revenue_rejected(self, client: TestClient) -> None:
        body = '{"dateRange": {"startDate": "2024-01-01", "endDate": "2024-03-31"}, "baseMonthlyRevenue": 1e400}'

        response = client.post('/forecasting/revenue', content=body, headers={'Content-Type': 'application/json'})

        assert response.status_code == 422

    def test_seasonality_is_used_by_later_forecasts(self, client: TestClient) -> None:
        history = [{'date': f'2023-{month:02d}-01', 'paidAmount': 950} for month in range(1, 12)]
        history.append({'date': '2023-12-01', 'paidAmount': 1550})

        analysis = client.post('/forecasting/seasonality', json={'history': history}).json()
        model = client.get('/forecasting/model').json()
        forecast = client.post('/forecasting/revenue', json={
            'dateRange': {'startDate': '2024-12-01', 'endDate': '2024-12-31'},
            'baseMonthlyRevenue': 1000,
        }).json()

        assert analysis['modelVersion'] == 1
        assert analysis['peakMonths'] == [12]
        assert model['version'] == 1
        assert model['historicalAverageMonthly'] == 1000
        assert forecast['seasonalityVersion'] == 1
        assert forecast['periods'][0]['forecast'] == 1550

    def test_model_defaults(self, client: TestClient) -> None:
        data = client.get('/forecasting/model').json()

        assert data['version'] == 0
        assert data['monthlySeasonalityFactors']['1'] == 1.15
        assert data['lastCalculatedAt'] is None

    def test_cash_flow(self, client: TestClient, account_payload: Dict[str, Any]) -> None:
        payload = {
            'accounts': [account_payload],
            'dateRange': {'startDate': '2024-01-01', 'endDate': '2024-02-29'},
            'asOf': '2024-01-01',
        }

        data = client.post('/forecasting/cash-flow', json=payload).json()

        assert len(data['weeklyProjections']) == 9
        assert data['weeklyProjections'][3]['expectedCollections'] == 700
        assert data['summary']['peakWeek'] == 4

    def test_scenario(self, client: TestClient) -> None:
        payload = {
            'baseForecast': 100000,
            'assumptions': [{
                'name': 'Claim Volume',
                'type': 'claim-volume',
                'baseValue': 1000,
                'scenarioValue': 1100,
                'unit': 'count',
            }],
        }

        data = client.post('/forecasting/scenario', json=payload).json()

        assert data['scenarioForecast'] == 109000
        assert data['impact'] == 'positive'

    def test_scenario_zero_base_value(self, client: TestClient) -> None:
        payload = {
            'baseForecast': 100000,
            'assumptions': [{
                'name': 'Denials',
                'type': 'denial-rate',
                'baseValue': 0,
                'scenarioValue': 5,
                'unit': 'percent',
            }],
        }

        response = client.post('/forecasting/scenario', json=payload)

        assert response.status_code == 422
        assert 'zero base value' in response.json()['detail']

    def test_common_scenarios(self, client: TestClient) -> None:
        payload = {'collectionRate': 0.85, 'claimVolume': 1000, 'denialRate': 0.1}

        data = client.post('/forecasting/common-scenarios', json=payload).json()

        assert set(data) == {'optimistic', 'pessimistic', 'volumeGrowth', 'volumeDecline'}


class TestKPIEndpoints:

    def test_dashboard(
        self,
        client: TestClient,
        sample_claims,
        sample_kpi_accounts,
        sample_costs,
    ) -> None:
        payload = {
            'claims': [claim.model_dump(mode='json') for claim in sample_claims],
            'accounts': [account.model_dump(mode='json') for account in sample_kpi_accounts],
            'costs': sample_costs.model_dump(mode='json'),
            'dateRange': {'startDate': '2024-01-01', 'endDate': '2024-01-31'},
            'priorPeriodKpis': {'daysInAR': 10},
        }

        response = client.post('/kpis/dashboard', json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data['daysInAR']['value'] == 9
        assert data['daysInAR']['trend']['direction'] == 'down'
        assert data['collectionRate']['benchmark']['performance'] == 'at'

    def test_dashboard_failure_is_500(
        self,
        client: TestClient,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def broken(*args, **kwargs):
            raise RuntimeError('calculator unavailable')

        monkeypatch.setattr('rcm_analytics.api.kpis.generate_kpi_dashboard', broken)
        payload = {
            'costs': {'totalCosts': 0},
            'dateRange': {'startDate': '2024-01-01', 'endDate': '2024-01-31'},
        }

        response = client.post('/kpis/dashboard', json=payload)

        assert response.status_code == 500
        assert 'calculator unavailable' in response.json()['detail']

    def test_result_validation_failure_is_500(
        self,
        client: TestClient,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        def invalid_result(*args, **kwargs):
            return CostData(totalCosts=-1)

        monkeypatch.setattr('rcm_analytics.api.kpis.generate_kpi_dashboard', invalid_result)
        payload = {
            'costs': {'totalCosts': 0},
            'dateRange': {'startDate': '2024-01-01', 'endDate': '2024-01-31'},
        }

        with caplog.at_level(logging.ERROR, logger='rcm_analytics.api.kpis'):
            response = client.post('/kpis/dashboard', json=payload)

        assert response.status_code == 500
        assert 'Error generating KPI dashboard' in response.json()['detail']
        assert any(record.exc_info for record in caplog.records)

    def test_benchmarks(self, client: TestClient) -> None:
        data = client.get('/kpis/benchmarks').json()

        assert data['denialRate']['higherIsBetter'] is False
        assert data['denialRate']['average'] == 8
