"""
Incident verification — gate machine-sourced incidents before they go public.
"""
