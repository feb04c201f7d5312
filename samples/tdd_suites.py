"""Suite setup/teardown and per-test fixtures."""

from tddrunner import confirm, fixture


class EntryNameError(Exception):
    pass


class TempTable:
    """Stands in for a temporary database table."""

    def __init__(self):
        self.name = ""

    def setup(self):
        self.name = "test_data_01"

    def teardown(self):
        self.name = ""


class TempEntry:
    """Stands in for a temporary row of data."""

    def __init__(self):
        self.id = None

    def setup(self):
        self.id = 100

    def teardown(self):
        self.id = None


def update_entry_name(entry_id, name):
    if not name:
        raise EntryNameError(f"Entry {entry_id} needs a name")


def register(builder):
    table1 = TempTable()
    table2 = TempTable()
    builder.add_suite("Test suite setup/teardown 1", "Suite 1", table1)
    builder.add_suite("Test suite setup/teardown 2", "Suite 1", table2)

    @builder.test("Test part 1 of suite", suite="Suite 1")
    def part_1(case):
        confirm("test_data_01", table1.name)
        confirm("test_data_01", table2.name)

    @builder.test("Test part 2 of suite", suite="Suite 1", raises=EntryNameError)
    def part_2(case):
        update_entry_name(table1.name, "")

    @builder.test("Test will run setup and teardown code object", raises=EntryNameError)
    def with_fixture(case):
        with fixture(TempEntry()) as entry:
            update_entry_name(entry.id, "")

    @builder.test("Test will run multiple setup and teardown code")
    def with_two_fixtures(case):
        with fixture(TempEntry()) as entry1, fixture(TempEntry()) as entry2:
            update_entry_name(entry1.id, "abc")
            update_entry_name(entry2.id, "def")
