"""
Tests for the Gemini client wrapper and the solvers.

The google.genai SDK client is replaced by a fake; no network access.
"""

import pytest


class TestGeminiClient:
    """Test request assembly and error mapping."""

    def test_empty_key_rejected(self):
        from edusolver.solvers.gemini import GeminiClient
        from edusolver.utils.errors import ApiKeyMissingError

        for key in (None, "", "   "):
            with pytest.raises(ApiKeyMissingError):
                GeminiClient(key)

    def test_part_order_and_labels(self, fake_genai):
        from edusolver.solvers.gemini import GeminiClient

        client = GeminiClient("key", "test-model", client=fake_genai)
        client.generate("PROMPT", images=[b"img1", b"img2"], texts=["2x = 4", "x?"])

        call = fake_genai.models.calls[0]
        assert call["model"] == "test-model"
        content = call["contents"][0]
        assert content.role == "user"

        parts = content.parts
        assert len(parts) == 5
        assert parts[0].inline_data.mime_type == "image/jpeg"
        assert parts[0].inline_data.data == b"img1"
        assert parts[1].inline_data.data == b"img2"
        assert parts[2].text == "[Input material #1]: 2x = 4"
        assert parts[3].text == "[Input material #2]: x?"
        assert parts[4].text == "PROMPT"

    def test_returns_answer_text(self, make_fake_genai):
        from edusolver.solvers.gemini import GeminiClient

        client = GeminiClient("key", client=make_fake_genai(text="x = 2"))

        assert client.generate("p", [], ["2x = 4"]) == "x = 2"

    def test_empty_answer(self, make_fake_genai):
        from edusolver.solvers.gemini import NO_RESPONSE_TEXT, GeminiClient

        client = GeminiClient("key", client=make_fake_genai(text=None))

        assert client.generate("p", [], ["t"]) == NO_RESPONSE_TEXT

    def test_connection_failure(self, make_fake_genai):
        from edusolver.solvers.gemini import GeminiClient
        from edusolver.utils.errors import InferenceError

        client = GeminiClient("key", client=make_fake_genai(exc=ConnectionError("offline")))

        with pytest.raises(InferenceError) as exc_info:
            client.generate("p", [], ["t"])
        assert exc_info.value.user_message == "Could not connect to the AI service."
        assert "offline" in exc_info.value.technical_details

    def test_api_error(self, make_fake_genai):
        from google.genai import errors
        from edusolver.solvers.gemini import GeminiClient
        from edusolver.utils.errors import InferenceError

        api_error = errors.APIError(
            400,
            {"error": {"code": 400, "message": "API key not valid", "status": "INVALID_ARGUMENT"}},
        )
        client = GeminiClient("key", client=make_fake_genai(exc=api_error))

        with pytest.raises(InferenceError) as exc_info:
            client.generate("p", [], ["t"])
        assert exc_info.value.user_message == "The AI service rejected the request."


class TestSolvers:
    """Test ProblemSolver and QuestionGenerator."""

    def test_problem_solver_success(self, fake_genai):
        from edusolver.solvers import GeminiClient, ProblemSolver, SolveRequest

        solver = ProblemSolver(GeminiClient("key", client=fake_genai))
        result = solver.solve(SolveRequest(texts=["2x = 4"]))

        assert result.success
        assert result.text == "**Jawaban:** $x = 2$"
        assert result.solver_name == "ProblemSolver"
        prompt = fake_genai.models.calls[0]["contents"][0].parts[-1].text
        assert "Personal Study Assistant" in prompt

    def test_problem_solver_failure_is_reported(self, make_fake_genai):
        from edusolver.solvers import GeminiClient, ProblemSolver, SolveRequest

        solver = ProblemSolver(GeminiClient("key", client=make_fake_genai(exc=TimeoutError())))
        result = solver.solve(SolveRequest(texts=["2x = 4"]))

        assert not result.success
        assert result.text is None
        assert result.error_message == "Could not connect to the AI service."

    def test_question_generator_prompt(self, fake_genai):
        from edusolver.models import Subject
        from edusolver.solvers import GeminiClient, QuestionGenerator, SolveRequest

        solver = QuestionGenerator(GeminiClient("key", client=fake_genai))
        solver.solve(
            SolveRequest(
                texts=["Jurnal umum"],
                subject=Subject.OTHER,
                custom_subject="Akuntansi",
                question_count=4,
            )
        )

        prompt = fake_genai.models.calls[0]["contents"][0].parts[-1].text
        assert "Create 4 practice/exam questions" in prompt
        assert "# Practice Questions: Akuntansi (Auto)" in prompt


class TestSolverRegistry:
    """Test solver selection by mode."""

    def test_default_registry(self, fake_genai):
        from edusolver.models import AppMode
        from edusolver.solvers import (
            GeminiClient,
            ProblemSolver,
            QuestionGenerator,
            get_default_registry,
        )

        registry = get_default_registry(GeminiClient("key", client=fake_genai))

        assert isinstance(registry.get_solver(AppMode.STUDENT), ProblemSolver)
        assert isinstance(registry.get_solver(AppMode.TEACHER), QuestionGenerator)
        assert [s.name for s in registry.solvers] == ["ProblemSolver", "QuestionGenerator"]

    def test_priority_order(self, fake_genai):
        from edusolver.models import AppMode
        from edusolver.solvers import GeminiClient, ProblemSolver, SolverRegistry

        client = GeminiClient("key", client=fake_genai)
        low, high = ProblemSolver(client), ProblemSolver(client)
        registry = SolverRegistry()
        registry.register(low, priority=50)
        registry.register(high, priority=5)

        assert registry.get_solver(AppMode.STUDENT) is high
        assert registry.get_solver(AppMode.TEACHER) is None
