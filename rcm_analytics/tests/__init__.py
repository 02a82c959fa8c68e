'''
RCM Analytics Engine Test Suite

Test Modules:
-------------
- test_collection_scorer.py: Collection likelihood scoring
  - Reference account breakdown, class, probabilities and timing
  - Score/probability bounds and classification bands
  - Strategy decision table priority and alternatives

- test_work_queue_scoring.py: Collector work-queue scoring
  - Work-queue weights, bands and strategies
  - Prioritization order and portfolio metrics

- test_segmentation.py: Recovery-tier segmentation
  - Tier boundaries partition 0-100
  - Segment totals and balance-weighted summary

- test_seasonality.py: Versioned seasonality model store
  - Validation, atomic publish, concurrent publishers and readers

- test_revenue_forecaster.py: Revenue, seasonality, cash flow, scenarios
  - Pro-rated monthly periods, bounds and trend
  - Weekly cash-flow buckets and likelihood floor
  - Scenario impacts and sensitivity ordering

- test_kpi_calculator.py: Operational KPIs
  - Each KPI over a hand-checked claim/account sample
  - Empty inputs, trends and benchmark bands

- test_api.py: FastAPI endpoints via TestClient

Running Tests:
--------------
    pip install -e ".[test]"
    pytest rcm_analytics/tests/ -v
    pytest -m reference
    pytest -m "not api"

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
