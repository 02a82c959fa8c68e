"""
RCM Analytics Package.

Predictive scoring and forecasting engine for healthcare revenue-cycle
management: account collectability scoring, portfolio segmentation, revenue
and cash-flow forecasting, and benchmarked operational KPIs.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration and dependencies
    - models: Pydantic schemas and enums
    - services: Scoring, forecasting and KPI logic
"""

__version__ = "1.0.0"
