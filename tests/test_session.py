"""
Tests for the homework session: submission, results and preferences.
"""

import pytest


class TestApiKey:
    """Test the in-memory API key."""

    def test_blank_key_rejected(self, make_session):
        from edusolver.utils.errors import ApiKeyMissingError

        session = make_session(api_key=None)

        with pytest.raises(ApiKeyMissingError):
            session.set_api_key("   ")
        assert not session.has_api_key

    def test_submit_without_key(self, make_session):
        from edusolver.utils.errors import ApiKeyMissingError

        session = make_session(api_key=None)
        session.staging.add_text("2x = 4")

        with pytest.raises(ApiKeyMissingError):
            session.submit()
        assert session.scans == []

    def test_key_is_not_persisted(self, make_session, storage):
        session = make_session(api_key="secret-key-123")

        for key in storage.keys():
            assert "secret-key-123" not in storage.get_item(key)

    def test_reset(self, make_session):
        session = make_session()
        session.reset_api_key()

        assert not session.has_api_key


class TestSubmit:
    """Test creating and solving scans."""

    def test_success(self, make_session, make_fake_genai):
        fake = make_fake_genai(text="**x = 2**")
        session = make_session(fake)
        session.staging.add_text("2x = 4")

        scan = session.submit()

        assert scan.solution == "**x = 2**"
        assert scan.error is None
        assert scan.loading is False
        stored = session.get_scan(scan.id)
        assert stored.solution == "**x = 2**"
        assert stored.loading is False
        assert stored.text_inputs == ["2x = 4"]

    def test_failure_is_stored_on_scan(self, make_session, make_fake_genai):
        session = make_session(make_fake_genai(exc=ConnectionError("offline")))
        session.staging.add_text("2x = 4")

        scan = session.submit()

        assert scan.solution is None
        assert scan.error == "Failed: Could not connect to the AI service."
        stored = session.get_scan(scan.id)
        assert stored.error == scan.error
        assert stored.loading is False

    def test_pending_scan_is_saved_first(self, make_session):
        from edusolver.models import AppMode

        session = make_session()
        session.staging.add_text("2x = 4")

        scan = session.create_scan()

        assert scan.loading is True
        stored = session.get_scan(scan.id)
        assert stored.loading is True
        assert stored.mode == AppMode.STUDENT

    def test_no_save(self, make_session):
        session = make_session()
        session.staging.add_text("2x = 4")

        scan = session.submit(save=False)

        assert scan.solution
        assert session.scans == []

    def test_empty_batch(self, make_session):
        from edusolver.utils.errors import EmptyBatchError

        with pytest.raises(EmptyBatchError):
            make_session().submit()

    def test_newest_first(self, make_session):
        session = make_session()
        ids = []
        for text in ["first", "second"]:
            session.start_new()
            session.staging.add_text(text)
            ids.append(session.submit().id)

        assert [s.id for s in session.scans] == list(reversed(ids))

    def test_results_and_new_scans_written_from_two_threads(self, make_session, config):
        import threading

        config.history_limit = 1000
        session = make_session()

        pending = []
        for i in range(30):
            session.start_new()
            session.staging.add_text(f"pending {i}")
            pending.append(session.create_scan())

        def solve_all():
            for scan in pending:
                session.run_scan(scan)

        worker = threading.Thread(target=solve_all)
        worker.start()
        created = []
        for i in range(60):
            session.start_new()
            session.staging.add_text(f"new {i}")
            created.append(session.create_scan())
        worker.join(timeout=60)

        assert not worker.is_alive()
        stored = {scan.id: scan for scan in session.scans}
        assert len(stored) == 90
        assert all(scan.id in stored for scan in created)
        for scan in pending:
            assert stored[scan.id].loading is False
            assert stored[scan.id].solution == "**Jawaban:** $x = 2$"

    def test_images_are_sent(self, make_session, make_fake_genai):
        fake = make_fake_genai()
        session = make_session(fake)
        session.staging.add_image(b"jpeg-bytes")

        session.submit()

        parts = fake.models.calls[0]["contents"][0].parts
        assert parts[0].inline_data.data == b"jpeg-bytes"


class TestModes:
    """Test student/teacher mode specifics."""

    def test_toggle(self, make_session):
        from edusolver.models import AppMode

        session = make_session()

        assert session.toggle_mode() == AppMode.TEACHER
        assert session.toggle_mode() == AppMode.STUDENT

    def test_teacher_scan_records_question_count(self, make_session, make_fake_genai):
        from edusolver.models import AppMode

        fake = make_fake_genai()
        session = make_session(fake)
        session.set_mode(AppMode.TEACHER)
        session.question_count = 3
        session.staging.add_text("Hukum Newton")

        scan = session.submit()

        assert scan.mode == AppMode.TEACHER
        assert scan.question_count == 3
        prompt = fake.models.calls[0]["contents"][0].parts[-1].text
        assert "Create 3 practice/exam questions" in prompt

    def test_student_scan_has_no_question_count(self, make_session):
        session = make_session()
        session.question_count = 7
        session.staging.add_text("2x = 4")

        assert session.submit().question_count is None

    def test_question_count_is_clamped(self, make_session):
        session = make_session()

        session.question_count = 0
        assert session.question_count == 1
        session.question_count = 99
        assert session.question_count == 10

    def test_teacher_needs_custom_subject_name(self, make_session):
        from edusolver.models import AppMode, Subject
        from edusolver.utils.errors import MissingSubjectError

        session = make_session()
        session.set_mode(AppMode.TEACHER)
        session.set_subject(Subject.OTHER)
        session.staging.add_text("Jurnal umum")

        with pytest.raises(MissingSubjectError):
            session.submit()

    def test_categories_follow_mode(self, make_session):
        from edusolver.models import AppMode

        session = make_session()
        session.staging.add_text("2x = 4")
        session.submit()

        assert len(session.categories()) == 1
        session.set_mode(AppMode.TEACHER)
        assert session.categories() == []


class TestPreferences:
    """Test level and subject persistence."""

    def test_preferences_survive_restart(self, make_session):
        from edusolver.models import EducationLevel, Subject

        session = make_session()
        session.set_level(EducationLevel.SENIOR_HIGH)
        session.set_subject(Subject.OTHER)
        session.set_custom_subject("Akuntansi")

        restored = make_session().preferences

        assert restored.level == EducationLevel.SENIOR_HIGH
        assert restored.subject == Subject.OTHER
        assert restored.custom_subject == "Akuntansi"

    def test_custom_subject_only_with_other(self, make_session):
        from edusolver.models import Subject

        session = make_session()
        session.set_custom_subject("Akuntansi")
        session.set_subject(Subject.MATH)
        session.staging.add_text("x")

        scan = session.submit()

        assert scan.custom_subject is None
        assert scan.display_subject == "Matematika"

    def test_custom_subject_is_stripped(self, make_session):
        from edusolver.models import Subject

        session = make_session()
        session.set_subject(Subject.OTHER)
        session.set_custom_subject("  Akuntansi  ")
        session.staging.add_text("x")

        assert session.submit().custom_subject == "Akuntansi"

    def test_start_new_resets_batch_and_style(self, make_session):
        from edusolver.models import ExplanationStyle

        session = make_session()
        session.explanation_style = ExplanationStyle.DIRECT
        session.staging.add_text("x")

        session.start_new()

        assert session.staging.is_empty
        assert session.explanation_style == ExplanationStyle.DETAILED


class TestHistory:
    """Test history management through the session."""

    def test_delete_and_clear(self, make_session):
        session = make_session()
        for text in ["a", "b", "c"]:
            session.start_new()
            session.staging.add_text(text)
            session.submit()

        first = session.scans[0]
        assert session.delete_scan(first.id) is True
        assert len(session.scans) == 2
        assert session.clear_history() == 2
        assert session.scans == []
