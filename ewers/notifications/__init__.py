"""
Notification rules — incident/alert creation → routed Notification rows.

- conditions: typed predicates AND-reduced over a RuleEvent
- templates: {{ field }} substitution
- engine: rule matching, recipient resolution, notification writes
- fanout: SSE broadcast + push after creation
"""
