"""Basic tests: passing, failing and exception-contract tests."""

from tddrunner import confirm_false, confirm_true


def is_passing_grade(value):
    return value >= 60


def register(builder):
    @builder.test("Test can be created")
    def can_be_created(case):
        pass

    @builder.test("Test that fails works", expected_failure="Unexpected exception thrown.")
    def fails(case):
        raise RuntimeError("boom")

    @builder.test("Test with throw can be created", raises=ValueError)
    def throws(case):
        raise ValueError("expected")

    @builder.test("Test that never throws can be created", raises=ValueError)
    def never_throws(case):
        case.set_expected_failure_reason("Expected exception type ValueError was not thrown.")

    @builder.test("Test that throws wrong type can be created", raises=ValueError)
    def wrong_type(case):
        case.set_expected_failure_reason("Unexpected exception thrown.")
        raise KeyError("wrong type")

    @builder.test("Test that should throw unexpectedly can be created")
    def should_throw(case):
        case.set_expected_failure_reason("Unexpected exception thrown.")

    @builder.test("Test passing grades")
    def passing_grades(case):
        confirm_false(is_passing_grade(0))
        confirm_true(is_passing_grade(100))
