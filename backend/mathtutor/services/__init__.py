"""Services Layer — imperative shell around the pure core.

Invariants:
    - Services own IO ordering: quota check -> AI call -> sanitize -> log usage
    - Services never build HTTP responses (routes do)
"""
