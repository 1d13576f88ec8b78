"""
Prompt templates for the student and teacher solvers.
"""

from ..models import EducationLevel, ExplanationStyle, Subject

FORMAT_RULES = """Formatting rules:
1. Use LaTeX for math and science formulas: inline $...$, block $$...$$
2. Use standard Markdown.
3. Do not use HTML tags."""

STUDENT_STYLE = {
    ExplanationStyle.BRIEF: "Answer concisely. Key points only.",
    ExplanationStyle.DIRECT: (
        "MODE: ANSWER ONLY. Do not write an introduction. "
        "Go straight to the final answer."
    ),
    ExplanationStyle.DETAILED: "Give a comprehensive step-by-step explanation.",
}

ANSWER_KEY_STYLE = {
    ExplanationStyle.BRIEF: "- Keep each answer short and to the point.",
    ExplanationStyle.DIRECT: "- Give only the final answer.",
    ExplanationStyle.DETAILED: (
        "- Include a detailed discussion and the working steps for every question."
    ),
}


def level_instruction(level: EducationLevel) -> str:
    """Tone of the answer for the user's education level."""
    if level in (EducationLevel.KINDERGARTEN, EducationLevel.ELEMENTARY):
        return (
            f"The user's education level is {level.value}. Use very simple, cheerful "
            "language that children can easily understand."
        )
    if level == EducationLevel.UNIVERSITY:
        return (
            "The user is a university student. Use an academic, formal, critical "
            "and in-depth style."
        )
    return f"The user's education level is {level.value}. Adjust the complexity of the language."


def subject_instruction(subject_name: str) -> str:
    if subject_name == Subject.AUTO.value:
        return "Analyse the problem to detect the subject automatically."
    return f"Subject: {subject_name}."


def student_prompt(
    level: EducationLevel,
    subject_name: str,
    style: ExplanationStyle,
    language: str,
) -> str:
    """Prompt asking the model to solve the attached problem."""
    context = " ".join(
        [
            "Your role is a very smart and supportive 'Personal Study Assistant'.",
            level_instruction(level),
            subject_instruction(subject_name),
        ]
    )
    return (
        f"{context}\n"
        f"Instruction: {STUDENT_STYLE[style]}\n\n"
        f"IMPORTANT - {FORMAT_RULES}\n\n"
        f"Language: {language}."
    )


def teacher_prompt(
    level: EducationLevel,
    subject_name: str,
    style: ExplanationStyle,
    question_count: int,
    language: str,
) -> str:
    """Prompt asking the model to write practice questions with an answer key."""
    return f"""Your role is a PROFESSIONAL TEACHER and EXAM CREATOR.

Task: Create {question_count} practice/exam questions together with their answer key, based on the input material (images/text) provided.

Context:
- Education level: {level.value}
- Subject: {subject_name}

Answer key format:
{ANSWER_KEY_STYLE[style]}

Output structure (Markdown is required):
# Practice Questions: {subject_name} ({level.value})

## Questions
1. [Question 1]
2. [Question 2]
...

---
## Answer Key & Discussion
1. **Answer:** ...
   [Discussion in the requested style]

2. **Answer:** ...
...

Rules:
- Questions must be relevant to the input material (if any). If the input is only a topic, write questions about that topic.
- Use LaTeX for formulas ($...$ or $$...$$).
- Write in formal, academic {language}."""
