"""
Tests for grouping history into level/subject categories.
"""


def make_scan(timestamp, level=None, subject=None, custom=None, mode=None):
    from edusolver.models import AppMode, EducationLevel, Scan, Subject

    return Scan(
        text_inputs=["q"],
        timestamp=timestamp,
        education_level=level or EducationLevel.AUTO,
        subject=subject or Subject.AUTO,
        custom_subject=custom,
        mode=mode or AppMode.STUDENT,
    )


class TestGroupScans:
    """Test category grouping."""

    def test_groups_by_level_and_subject(self):
        from edusolver.classification import group_scans
        from edusolver.models import AppMode, EducationLevel, Subject

        scans = [
            make_scan(100, EducationLevel.ELEMENTARY, Subject.MATH),
            make_scan(300, EducationLevel.ELEMENTARY, Subject.MATH),
            make_scan(200, EducationLevel.JUNIOR_HIGH, Subject.MATH),
        ]
        categories = group_scans(scans, AppMode.STUDENT)

        assert [(c.level, c.subject, c.count) for c in categories] == [
            ("SD", "Matematika", 2),
            ("SMP", "Matematika", 1),
        ]
        assert categories[0].last_time == 300
        assert categories[0].key == "SD|Matematika"

    def test_sorted_by_latest_use(self):
        from edusolver.classification import group_scans
        from edusolver.models import AppMode, Subject

        scans = [
            make_scan(100, subject=Subject.BIOLOGY),
            make_scan(500, subject=Subject.HISTORY),
            make_scan(900, subject=Subject.BIOLOGY),
        ]

        subjects = [c.subject for c in group_scans(scans, AppMode.STUDENT)]

        assert subjects == ["Biologi", "Sejarah"]

    def test_filters_by_mode(self):
        from edusolver.classification import group_scans
        from edusolver.models import AppMode

        scans = [make_scan(1), make_scan(2, mode=AppMode.TEACHER)]

        assert sum(c.count for c in group_scans(scans, AppMode.STUDENT)) == 1
        assert sum(c.count for c in group_scans(scans, AppMode.TEACHER)) == 1

    def test_custom_subjects_are_separate(self):
        from edusolver.classification import group_scans
        from edusolver.models import AppMode, Subject

        scans = [
            make_scan(1, subject=Subject.OTHER, custom="Akuntansi"),
            make_scan(2, subject=Subject.OTHER, custom="Seni Rupa"),
            make_scan(3, subject=Subject.OTHER),
        ]
        categories = group_scans(scans, AppMode.STUDENT)

        assert sorted(c.subject for c in categories) == ["Akuntansi", "Lainnya", "Seni Rupa"]
        akuntansi = [c for c in categories if c.subject == "Akuntansi"][0]
        assert akuntansi.custom_subject == "Akuntansi"

    def test_empty(self):
        from edusolver.classification import group_scans
        from edusolver.models import AppMode

        assert group_scans([], AppMode.STUDENT) == []


class TestScansInCategory:
    """Test listing the scans of one category."""

    def test_newest_first(self):
        from edusolver.classification import group_scans, scans_in_category
        from edusolver.models import AppMode, Subject

        scans = [
            make_scan(100, subject=Subject.MATH),
            make_scan(300, subject=Subject.MATH),
            make_scan(200, subject=Subject.PHYSICS),
            make_scan(400, subject=Subject.MATH, mode=AppMode.TEACHER),
        ]
        math = [c for c in group_scans(scans, AppMode.STUDENT) if c.subject == "Matematika"][0]

        listed = scans_in_category(scans, math, AppMode.STUDENT)

        assert [s.timestamp for s in listed] == [300, 100]
