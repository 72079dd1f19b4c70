"""
EWERS Core — Early Warning / Early Response System.

Turns incident reports and risk indicators into scored risk analyses,
escalation-tagged alerts and rule-routed notifications, and gates
machine-sourced incidents through a verification queue.

Packages:
- analysis: RiskAnalyzer with LLM and heuristic scorers
- alerting: AlertGenerator and escalation levels
- notifications: rule engine, templates, inbox, fan-out
- review: incident verification state machine
- api: FastAPI routers
"""

__version__ = "1.0.0"
