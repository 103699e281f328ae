"""
Evaluation Layer - 评估框架

Modules:
    evaluator: 评估器和智能体
    metrics: 评估指标
"""
from .evaluator import (
    EvalResult,
    Agent,
    RandomAgent,
    RuleBasedAgent,
    Evaluator,
)
from .metrics import (
    GameMetrics,
    MetricsCollector,
    RunningStats,
)

__all__ = [
    # evaluator
    "EvalResult",
    "Agent",
    "RandomAgent",
    "RuleBasedAgent",
    "Evaluator",
    # metrics
    "GameMetrics",
    "MetricsCollector",
    "RunningStats",
]
