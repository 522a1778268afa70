"""Infrastructure Layer — database, AI client, identity, logging.

Invariants:
    - Every external failure is mapped to a MathTutorError subclass before leaving this package
"""
