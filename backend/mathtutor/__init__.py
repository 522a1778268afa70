"""MathTutor Application Package — tutoring API with math-notation sanitization.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
