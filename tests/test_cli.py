"""Tests for the click CLI."""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from tutordesk.adapters.file_store import FileWorkspaceStore
from tutordesk.adapters.supabase_rest import SyncError
from tutordesk.cli import format_block, main
from tutordesk.config import Config
from tutordesk.core.blocks import Block, Tag, get_checkbox, get_urgent, make_property
from tutordesk.core.properties import (
    CheckboxValue,
    ContactValue,
    DateValue,
    PersonValue,
    PriorityLevel,
    PriorityValue,
    PropertyType,
    TagValue,
    UrgentValue,
)

TODAY = "2025-01-15"


@pytest.fixture
def config(tmp_path):
    return Config(data_dir=str(tmp_path))


@pytest.fixture
def store(tmp_path):
    return FileWorkspaceStore(tmp_path)


@pytest.fixture
def runner(config):
    with patch("tutordesk.cli.load_config", return_value=config), patch("tutordesk.cli.today_for", return_value=TODAY):
        yield CliRunner()


@pytest.fixture
def blocks():
    return [
        Block(
            id="todo-1111",
            name="Grade essays",
            properties=(
                make_property(PropertyType.CHECKBOX, CheckboxValue()),
                make_property(PropertyType.DATE, DateValue(date=TODAY)),
            ),
        ),
        Block(
            id="student-2222",
            name="Mina",
            properties=(make_property(PropertyType.CONTACT, ContactValue(phone="010")),),
        ),
        Block(
            id="lesson-3333",
            name="Grammar lesson",
            properties=(
                make_property(PropertyType.DATE, DateValue(date=TODAY, time="19:00")),
                make_property(PropertyType.PERSON, PersonValue(block_ids=("student-2222",))),
            ),
        ),
        Block(id="note-4444", name="Summer ideas"),
    ]


@pytest.fixture
def seeded(store, blocks):
    store.save_blocks(blocks)
    return store


class TestFormatBlock:
    def test_full_line(self):
        block = Block(
            id="abcdef123456",
            name="Quiz",
            properties=(
                make_property(PropertyType.CHECKBOX, CheckboxValue(checked=True)),
                make_property(PropertyType.PRIORITY, PriorityValue(level=PriorityLevel.HIGH)),
                make_property(PropertyType.DATE, DateValue(date=TODAY, time="09:00")),
                make_property(PropertyType.TAG, TagValue(tag_ids=("t1",))),
            ),
        )
        line = format_block(block, [Tag(id="t1", name="exam", color="#fff")])
        assert line == "[x] Quiz !!! (2025-01-15 09:00) #exam  [abcdef12]"


class TestToday:
    def test_sections(self, runner, seeded):
        result = runner.invoke(main, ["today"])
        assert result.exit_code == 0
        assert "TOP 3 (0/3)" in result.output
        assert "Grammar lesson" in result.output
        assert "Grade essays" in result.output

    def test_json(self, runner, seeded):
        result = runner.invoke(main, ["today", "--json"])
        data = json.loads(result.output)
        assert data["date"] == TODAY
        assert [b["id"] for b in data["lessons"]] == ["lesson-3333"]
        assert [b["id"] for b in data["deadlines"]] == ["todo-1111"]


class TestList:
    def test_todo_view(self, runner, seeded):
        result = runner.invoke(main, ["list", "--view", "todo", "--json"])
        assert [b["id"] for b in json.loads(result.output)] == ["todo-1111"]

    def test_calendar_invalid_date(self, runner, seeded):
        result = runner.invoke(main, ["list", "--view", "calendar", "--date", "soon"])
        assert result.exit_code == 1
        assert "Invalid date" in result.output

    def test_unknown_tag_is_empty(self, runner, seeded):
        result = runner.invoke(main, ["list", "--view", "tag", "--tag", "nothing"])
        assert "No blocks." in result.output


class TestAdd:
    def test_quick_input(self, runner, seeded, store):
        result = runner.invoke(main, ["add", "[]", "print", "quiz", "@tomorrow", "#exam"])
        assert result.exit_code == 0
        assert "Added print quiz" in result.output
        assert store.load_blocks(TODAY)[0].name == "print quiz"


class TestClassify:
    def test_grouped_json(self, runner, seeded):
        data = json.loads(runner.invoke(main, ["classify", "--json"]).output)
        assert [b["id"] for b in data["student"]] == ["student-2222"]
        assert [b["id"] for b in data["lesson"]] == ["lesson-3333"]
        assert [b["id"] for b in data["todo"]] == ["todo-1111"]
        assert [b["id"] for b in data["unclassified"]] == ["note-4444"]


class TestWeekAndStudents:
    def test_week(self, runner, seeded):
        result = runner.invoke(main, ["week"])
        assert result.exit_code == 0
        assert "Wednesday, 2025-01-15 (today)" in result.output
        assert "19:00-19:50 Grammar lesson with Mina" in result.output

    def test_students(self, runner, seeded):
        result = runner.invoke(main, ["students"])
        assert "Mina" in result.output
        assert "extra 1" in result.output

    def test_deadlines(self, runner, seeded):
        result = runner.invoke(main, ["deadlines"])
        assert "Today:" in result.output
        assert "Grammar lesson" not in result.output


class TestTop3:
    def test_add_by_prefix(self, runner, seeded, store):
        result = runner.invoke(main, ["top3", "add", "note", "--slot", "2"])
        assert result.exit_code == 0
        block = next(b for b in store.load_blocks(TODAY) if b.id == "note-4444")
        assert get_urgent(block) == UrgentValue(added_at=TODAY, slot_index=1)

    def test_list_shows_slots(self, runner, seeded):
        runner.invoke(main, ["top3", "add", "todo"])
        result = runner.invoke(main, ["top3"])
        assert result.output.splitlines()[0].startswith("1. [ ] Grade essays")
        assert result.output.splitlines()[1] == "2. -"

    def test_full(self, runner, store):
        urgent = [
            Block(id=f"u{i}", properties=(make_property(PropertyType.URGENT, UrgentValue(added_at=TODAY, slot_index=i)),))
            for i in range(3)
        ]
        store.save_blocks(urgent + [Block(id="extra")])
        result = runner.invoke(main, ["top3", "add", "extra"])
        assert result.exit_code == 1
        assert "Could not add" in result.output

    def test_remove(self, runner, seeded, store):
        runner.invoke(main, ["top3", "add", "todo"])
        result = runner.invoke(main, ["top3", "remove", "todo"])
        assert "Removed from TOP 3" in result.output
        assert get_urgent(store.load_blocks(TODAY)[0]) is None

    def test_history_empty(self, runner, seeded):
        assert "No TOP 3 history yet." in runner.invoke(main, ["top3", "history"]).output

    def test_history_names_blocks_without_content(self, runner, store):
        urgent = make_property(PropertyType.URGENT, UrgentValue(added_at="2025-01-14"))
        store.save_blocks([Block(id="quiz-1", name="Quiz", properties=(urgent,))])
        result = runner.invoke(main, ["top3", "history"])
        assert "2025-01-14 (0/1 done)" in result.output
        assert "  [ ] Quiz" in result.output.splitlines()


class TestBlockState:
    def test_check_and_uncheck(self, runner, seeded, store):
        runner.invoke(main, ["check", "todo"])
        assert get_checkbox(store.load_blocks(TODAY)[0]) is True
        runner.invoke(main, ["uncheck", "todo"])
        assert get_checkbox(store.load_blocks(TODAY)[0]) is False

    def test_check_without_checkbox(self, runner, seeded):
        result = runner.invoke(main, ["check", "note"])
        assert result.exit_code == 1
        assert "has no checkbox" in result.output

    def test_unknown_block(self, runner, seeded):
        result = runner.invoke(main, ["delete", "zzz"])
        assert result.exit_code == 1
        assert "No block matching" in result.output

    def test_delete_and_restore(self, runner, seeded, store):
        runner.invoke(main, ["delete", "note"])
        assert next(b for b in store.load_blocks(TODAY) if b.id == "note-4444").is_deleted is True
        runner.invoke(main, ["restore", "note"])
        assert next(b for b in store.load_blocks(TODAY) if b.id == "note-4444").is_deleted is False


class TestMaintenance:
    def test_archive_nothing(self, runner, seeded):
        assert "Nothing to archive." in runner.invoke(main, ["archive"]).output

    def test_archive_yesterday(self, runner, store):
        block = Block(id="a", properties=(make_property(PropertyType.URGENT, UrgentValue(added_at="2025-01-14")),))
        store.save_blocks([block])
        assert "Archived 1 TOP 3 item(s)." in runner.invoke(main, ["archive"]).output

    @patch("tutordesk.cli.push_to_remote")
    def test_sync(self, mock_push, runner):
        mock_push.return_value = MagicMock(pushed=3, deleted=1, history=2)
        result = runner.invoke(main, ["sync"])
        assert "Pushed 3 block(s), deleted 1, 2 history day(s)." in result.output

    @patch("tutordesk.cli.push_to_remote", side_effect=SyncError("Missing Supabase credentials"))
    def test_sync_error(self, mock_push, runner):
        result = runner.invoke(main, ["sync"])
        assert result.exit_code == 1
        assert "Error: Missing Supabase credentials" in result.output
