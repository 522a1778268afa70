"""Prompt Builders — pure text assembly for the tutoring AI calls.

Invariants:
    - Student answers are embedded already normalized (callers run normalize_math_delimiters first)
    - Every prompt forbids \\( and \\[ and asks for $...$ / $$...$$
    - Correction context longer than MAX_CORRECTION_CHARS is truncated with "\\n..."
    - JSON prompts spell out the exact output keys (the client has no response schema)

Design Decisions:
    - Prompts in French: the student audience and curriculum are French-language
"""

import re

MAX_CORRECTION_CHARS = 2500
STUDENT_QUESTION_MARKER = "---QUESTION ÉLÈVE---"

_MATH_FORMAT_RULES = """\
-   **Formatage Mathématique Hybride**:
    -   **Unicode (par défaut)**: Utilise les caractères Unicode pour le simple : `ƒ(𝑥) = 𝑥² − 4𝑥 + 1`, `∀𝑥 ∈ ℝ`.
    -   **LaTeX (pour le complexe)**: Utilise `$..$` ou `$$..$$` SEULEMENT pour les fractions, racines, intégrales, etc.
    -   **INTERDICTION**: Ne JAMAIS utiliser `\\(` ou `\\[`."""


def truncate_correction(text: str, limit: int = MAX_CORRECTION_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "\n..."


def extract_student_question(prompt: str) -> str:
    """Text after the student-question marker, or "" if absent."""
    match = re.search(re.escape(STUDENT_QUESTION_MARKER) + r"\s*(.*)", prompt, re.DOTALL)
    return match.group(1).strip() if match else ""


def build_check_answer_prompt(
    statement: str, correction: str, student_answer: str,
) -> str:
    """Grading prompt: compares the student's answer with the reference correction."""
    return f"""\
CONTEXTE: Tu es un assistant IA correcteur de mathématiques pour des lycéens. Tu dois être rigoureux, encourageant et très clair.

MISSION: Évaluer la réponse d'un élève à un exercice de mathématiques et fournir un feedback structuré en JSON.

INSTRUCTIONS:
1.  Compare la "RÉPONSE DE L'ÉLÈVE" avec la "CORRECTION DE RÉFÉRENCE" et "l'ÉNONCÉ".
2.  Sépare la réponse de l'élève en parties logiques (ex: "Question 1a", "Calcul de la dérivée").
3.  Pour chaque partie, "evaluation" vaut "correct", "incorrect" ou "partial".
4.  Pour chaque partie, rédige une "explanation" claire.
5.  Rédige un "summary" global.
6.  "is_globally_correct" vaut true SEULEMENT si toutes les parties sont "correct".

RÈGLES DE FORMATAGE (OBLIGATOIRES):
-   Réponds UNIQUEMENT avec un objet JSON valide, sans texte autour:
    {{"is_globally_correct": boolean, "summary": string, "detailed_feedback": [{{"part_title": string, "evaluation": "correct" | "incorrect" | "partial", "explanation": string}}]}}
-   "explanation" et "summary" utilisent le Markdown (listes *, titres ###).
{_MATH_FORMAT_RULES}

---
ÉNONCÉ DE L'EXERCICE:
{statement}
---
CORRECTION DE RÉFÉRENCE (pour guider ton jugement):
{truncate_correction(correction)}
---
RÉPONSE DE L'ÉLÈVE À ÉVALUER:
{student_answer}
---
GÉNÈRE MAINTENANT L'OBJET JSON D'ÉVALUATION STRUCTURÉ."""


def build_socratic_prompt(
    question: str, expected_keywords: list[str], student_answer: str,
) -> str:
    """Step check for the Socratic tutor: conceptual correctness only."""
    return f"""\
CONTEXTE: Tu es un tuteur de mathématiques qui évalue la réponse d'un élève (qui peut provenir d'une transcription d'image).
MISSION: Détermine si la réponse de l'élève est correcte. Elle n'a pas besoin d'être parfaitement formulée, mais doit être conceptuellement juste.

QUESTION POSÉE À L'ÉLÈVE: "{question}"

CONCEPTS/MOTS-CLÉS ATTENDUS DANS LA RÉPONSE: "{', '.join(expected_keywords)}"

RÉPONSE DE L'ÉLÈVE: "{student_answer}"

FORMAT DE SORTIE: Réponds UNIQUEMENT avec un objet JSON valide, sans texte avant ou après:
{{"is_correct": boolean}}"""


def build_plan_prompt(prompt: str) -> str:
    """Wrap the client's explanation prompt with the plan JSON contract."""
    return f"""\
{prompt}

FORMAT DE SORTIE: Réponds UNIQUEMENT avec un objet JSON valide, sans texte autour:
{{"steps": [string], "key_concepts": [string]}}
{_MATH_FORMAT_RULES}"""


def build_detail_prompt(prompt: str) -> str:
    return f"{prompt}\n\nRÈGLES DE FORMATAGE:\n{_MATH_FORMAT_RULES}"
