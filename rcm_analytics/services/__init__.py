"""
RCM Analytics Services Module

Business logic for the predictive scoring and forecasting engine. Every
service except the seasonality store is a set of pure functions over
pydantic records.

Services:
- numeric: Half-up rounding and display formatting
- scoring_policy: Scoring weights, strategy decision tables, segment tiers
- collection_scorer: Per-account collectability prediction
- work_queue_scoring: Collector work-queue scoring and prioritization
- segmentation: Portfolio recovery-tier segmentation
- seasonality: Versioned seasonality model snapshot and store
- revenue_forecaster: Revenue, seasonality, cash-flow and scenario analysis
- kpi_calculator: Benchmarked operational KPIs and dashboard

All services are consumed by the API layer (rcm_analytics/api/).
"""

# =============================================================================
# Collection Scorer Exports
# Six-factor collectability score, probabilities, timing and strategy
# =============================================================================

from rcm_analytics.services.collection_scorer import (
    calculate_score_breakdown,
    calculate_likelihood_score,
    predict_collection_likelihood,
    batch_predict_collection,
    predict_time_to_collection,
    get_optimal_strategy,
    get_strategy_rules,
)

# =============================================================================
# Work-Queue Scoring Exports
# Daily collector work-queue ranking under the work-queue scoring policy
# =============================================================================

from rcm_analytics.services.work_queue_scoring import (
    calculate_collection_score,
    prioritize_accounts,
    get_accounts_by_strategy,
    calculate_portfolio_metrics,
)

# =============================================================================
# Segmentation Exports
# =============================================================================

from rcm_analytics.services.segmentation import segment_accounts

# =============================================================================
# Seasonality Model Exports
# Shared, versioned seasonality state read by every forecast
# =============================================================================

from rcm_analytics.services.seasonality import (
    SeasonalityModel,
    SeasonalityModelError,
    SeasonalityStore,
    get_seasonality_store,
)

# =============================================================================
# Revenue Forecaster Exports
# =============================================================================

from rcm_analytics.services.revenue_forecaster import (
    forecast_revenue,
    calculate_seasonality,
    get_forecast_model_stats,
    project_cash_flow,
    project_cash_flow_for_accounts,
    scenario_analysis,
    classify_scenario_impact,
    create_common_scenarios,
)

# =============================================================================
# KPI Calculator Exports
# =============================================================================

from rcm_analytics.services.kpi_calculator import (
    calculate_days_in_ar,
    calculate_clean_claim_rate,
    calculate_denial_rate,
    calculate_collection_rate,
    calculate_first_pass_yield,
    calculate_cost_to_collect,
    calculate_net_collection_rate,
    calculate_adjusted_collection_rate,
    calculate_average_days_to_payment,
    calculate_denial_overturn_rate,
    generate_kpi_dashboard,
    get_industry_benchmarks,
)

__all__ = [
    # ----- Collection Scorer -----
    'calculate_score_breakdown',
    'calculate_likelihood_score',
    'predict_collection_likelihood',
    'batch_predict_collection',
    'predict_time_to_collection',
    'get_optimal_strategy',
    'get_strategy_rules',
    # ----- Work-Queue Scoring -----
    'calculate_collection_score',
    'prioritize_accounts',
    'get_accounts_by_strategy',
    'calculate_portfolio_metrics',
    # ----- Segmentation -----
    'segment_accounts',
    # ----- Seasonality Model -----
    'SeasonalityModel',
    'SeasonalityModelError',
    'SeasonalityStore',
    'get_seasonality_store',
    # ----- Revenue Forecaster -----
    'forecast_revenue',
    'calculate_seasonality',
    'get_forecast_model_stats',
    'project_cash_flow',
    'project_cash_flow_for_accounts',
    'scenario_analysis',
    'classify_scenario_impact',
    'create_common_scenarios',
    # ----- KPI Calculator -----
    'calculate_days_in_ar',
    'calculate_clean_claim_rate',
    'calculate_denial_rate',
    'calculate_collection_rate',
    'calculate_first_pass_yield',
    'calculate_cost_to_collect',
    'calculate_net_collection_rate',
    'calculate_adjusted_collection_rate',
    'calculate_average_days_to_payment',
    'calculate_denial_overturn_rate',
    'generate_kpi_dashboard',
    'get_industry_benchmarks',
]
