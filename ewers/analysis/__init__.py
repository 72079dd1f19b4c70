"""
Risk analysis — incidents + indicators → scored RiskAnalysis.

Scorers:
- LLMScorer: Claude-assisted narrative and classification
- HeuristicScorer: deterministic rules, always available
- FallbackScorer: primary first, secondary on any failure
"""
