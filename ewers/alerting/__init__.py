"""
Alerting — RiskAnalysis → escalation-tagged Alert.
"""
