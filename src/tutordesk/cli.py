"""Tutordesk CLI - block notes, lessons and TOP 3 for tutors."""

import json
import logging
import sys

import click

from .adapters.supabase_rest import SyncError
from .config import load_config, today_for
from .core.blocks import (
    Block,
    Tag,
    find_block,
    find_tag_by_name,
    get_checkbox,
    get_date_value,
    get_priority,
    get_tag_ids,
    get_urgent,
    has_property,
    plain_text,
    restore,
    set_checked,
    soft_delete,
    update_block,
)
from .core.classify import CLASSIFICATION_INFO, classified_sections
from .core.dates import parse_day
from .core.properties import PriorityLevel, PropertyType
from .core.serialization import block_to_dict, history_to_dict
from .core.students import search_students, student_summaries
from .core.top3 import MAX_TOP3, add_to_top3, remove_from_top3, top3_blocks
from .core.views import (
    SortType,
    View,
    ViewType,
    bucket_deadlines,
    filter_for_view,
    pinned_first,
    sort_blocks,
    today_deadlines,
    today_lessons,
    weekly_schedule,
)
from .workflows import add_from_input, load_workspace, mutate_blocks, push_to_remote, run_archival


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _check_day(value: str | None) -> str | None:
    if value is not None and parse_day(value) is None:
        _fail(f"Invalid date '{value}', expected YYYY-MM-DD")
    return value


def _resolve(blocks: list[Block], ref: str) -> Block:
    """Block by exact id, else by unique id prefix."""
    exact = find_block(blocks, ref)
    if exact is not None:
        return exact
    matches = [b for b in blocks if b.id.startswith(ref)]
    if not matches:
        _fail(f"No block matching '{ref}'")
    if len(matches) > 1:
        _fail(f"'{ref}' matches {len(matches)} blocks, use a longer id")
    return matches[0]


_PRIORITY_MARKS = {PriorityLevel.HIGH: "!!!", PriorityLevel.MEDIUM: "!!", PriorityLevel.LOW: "!"}


def format_block(block: Block, tags: list[Tag]) -> str:
    """One-line summary: checkbox, name, priority, date, tags, short id."""
    parts = []
    if has_property(block, PropertyType.CHECKBOX):
        parts.append("[x]" if get_checkbox(block) else "[ ]")
    if block.is_pinned:
        parts.append("*")
    parts.append(block.display_name)
    mark = _PRIORITY_MARKS.get(get_priority(block))
    if mark:
        parts.append(mark)
    value = get_date_value(block)
    if value is not None:
        parts.append(f"({value.date} {value.time})" if value.time else f"({value.date})")
    names = [t.name for t in tags if t.id in get_tag_ids(block)]
    if names:
        parts.append(" ".join(f"#{n}" for n in names))
    return f"{' '.join(parts)}  [{block.id[:8]}]"


def _echo_blocks(blocks: list[Block], tags: list[Tag], as_json: bool, empty_msg: str) -> None:
    if as_json:
        click.echo(json.dumps([block_to_dict(b) for b in blocks], indent=2, ensure_ascii=False))
        return
    if not blocks:
        click.echo(empty_msg)
        return
    for block in blocks:
        click.echo(f"  {format_block(block, tags)}")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="tutordesk")
def main(debug: bool):
    """Tutordesk - block notes, lessons and TOP 3 for tutors."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def today(as_json: bool):
    """Show TOP 3, today's lessons and today's deadlines."""
    config = load_config()
    day = today_for(config)
    workspace = load_workspace(config, day)
    top3 = top3_blocks(workspace.blocks)
    lessons = today_lessons(workspace.blocks, day)
    due = today_deadlines(workspace.blocks, day)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "date": day,
                    "top3": [block_to_dict(b) for b in top3],
                    "lessons": [block_to_dict(b) for b in lessons],
                    "deadlines": [block_to_dict(b) for b in due],
                },
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    click.echo(f"Today: {day}\n")
    click.echo(f"TOP 3 ({len(top3)}/{MAX_TOP3}):")
    _echo_blocks(top3, workspace.tags, False, "  (empty)")
    click.echo("\nLessons:")
    _echo_blocks(lessons, workspace.tags, False, "  No lessons today")
    click.echo("\nDeadlines:")
    _echo_blocks(due, workspace.tags, False, "  Nothing due today")


@main.command("list")
@click.option(
    "--view",
    "view_type",
    type=click.Choice([v.value for v in ViewType]),
    default=ViewType.ALL.value,
    help="View to show",
)
@click.option("--tag", "tag_name", default=None, help="Tag name for the tag view")
@click.option("--date", "-d", "target_date", default=None, help="Day for the calendar view (YYYY-MM-DD)")
@click.option("--custom", "custom_view_id", default=None, help="Custom view id")
@click.option("--sort", "sort_type", type=click.Choice([s.value for s in SortType]), default=None)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_blocks(view_type: str, tag_name: str | None, target_date: str | None, custom_view_id: str | None, sort_type: str | None, as_json: bool):
    """List blocks in a view."""
    config = load_config()
    day = today_for(config)
    workspace = load_workspace(config, day)

    tag_id = None
    if tag_name:
        tag = find_tag_by_name(workspace.tags, tag_name)
        tag_id = tag.id if tag else tag_name
    view = View(
        type=ViewType(view_type),
        tag_id=tag_id,
        date=_check_day(target_date),
        custom_view_id=custom_view_id,
    )

    blocks = filter_for_view(
        workspace.blocks,
        view,
        tag_resolver=lambda tid: next((t for t in workspace.tags if t.id == tid), None),
        custom_views=workspace.custom_views,
        today=day,
    )
    if sort_type:
        blocks = sort_blocks(blocks, SortType(sort_type))
    _echo_blocks(pinned_first(blocks), workspace.tags, as_json, "No blocks.")


@main.command()
@click.argument("text", nargs=-1, required=True)
def add(text: tuple[str, ...]):
    """Add a block. Supports [] or /todo, @today/@tomorrow/..., #tags."""
    config = load_config()
    block = add_from_input(config, today_for(config), " ".join(text))
    click.echo(f"Added {block.display_name} [{block.id[:8]}]")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def classify(as_json: bool):
    """Show blocks grouped by automatic classification."""
    config = load_config()
    workspace = load_workspace(config, today_for(config))
    sections = classified_sections(workspace.blocks)

    if as_json:
        click.echo(
            json.dumps(
                {c.value: [block_to_dict(b) for b in blocks] for c, blocks in sections},
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    for classification, blocks in sections:
        info = CLASSIFICATION_INFO[classification]
        click.echo(f"{info.icon} {info.label} ({len(blocks)})")
        for block in blocks:
            click.echo(f"  {format_block(block, workspace.tags)}")


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="Any day in the week (YYYY-MM-DD)")
def week(target_date: str | None):
    """Show the weekly lesson schedule."""
    config = load_config()
    day = today_for(config)
    workspace = load_workspace(config, day)
    schedule = weekly_schedule(workspace.blocks, _check_day(target_date) or day, config.default_lesson_minutes)

    for schedule_day, events in schedule.items():
        weekday = parse_day(schedule_day).strftime("%A")
        marker = " (today)" if schedule_day == day else ""
        click.echo(f"### {weekday}, {schedule_day}{marker}")
        if not events:
            click.echo("  -")
        for event in events:
            who = f" with {event.student_name}" if event.student_name else ""
            click.echo(f"  {event.start_time}-{event.end_time} {event.block.display_name}{who}")


@main.command()
def deadlines():
    """Show dated non-lesson blocks grouped by how soon they are due."""
    config = load_config()
    day = today_for(config)
    workspace = load_workspace(config, day)
    buckets = bucket_deadlines(workspace.blocks, day)

    for label, blocks in (
        ("Overdue", buckets.overdue),
        ("Today", buckets.today),
        ("This week", buckets.this_week),
        ("Next week", buckets.next_week),
        ("Later", buckets.later),
    ):
        if not blocks:
            continue
        click.echo(f"{label}:")
        for block in blocks:
            click.echo(f"  {format_block(block, workspace.tags)}")


@main.command()
@click.option("--search", "query", default="", help="Filter by name")
def students(query: str):
    """Show students with this week's lesson counts."""
    config = load_config()
    day = today_for(config)
    workspace = load_workspace(config, day)
    summaries = search_students(student_summaries(workspace.blocks, day), query)

    if not summaries:
        click.echo("No students.")
        return
    for s in summaries:
        click.echo(f"  {s.name:30} regular {s.regular_lessons}  extra {s.irregular_lessons}  [{s.id[:8]}]")


# ============== TOP 3 ==============


@main.group(invoke_without_command=True)
@click.pass_context
def top3(ctx):
    """Manage today's TOP 3."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(top3_list)


@top3.command("list")
def top3_list():
    """Show the TOP 3 slots."""
    config = load_config()
    workspace = load_workspace(config, today_for(config))
    by_slot = {get_urgent(b).slot_index: b for b in top3_blocks(workspace.blocks)}
    for slot in range(MAX_TOP3):
        block = by_slot.get(slot)
        click.echo(f"{slot + 1}. {format_block(block, workspace.tags) if block else '-'}")


@top3.command("add")
@click.argument("ref")
@click.option("--slot", type=click.IntRange(1, MAX_TOP3), default=None, help="Slot number (1-3)")
def top3_add(ref: str, slot: int | None):
    """Put a block into a TOP 3 slot."""
    config = load_config()
    day = today_for(config)
    block = _resolve(load_workspace(config, day).blocks, ref)
    slot_index = slot - 1 if slot is not None else None
    _, changed = mutate_blocks(config, day, add_to_top3, block.id, day, slot_index)
    if not changed:
        _fail("Could not add to TOP 3 (already there, slot taken, or all slots full)")
    click.echo(f"Added to TOP 3: {block.display_name}")


@top3.command("remove")
@click.argument("ref")
def top3_remove(ref: str):
    """Take a block out of the TOP 3."""
    config = load_config()
    day = today_for(config)
    block = _resolve(load_workspace(config, day).blocks, ref)
    _, changed = mutate_blocks(config, day, remove_from_top3, block.id)
    click.echo(f"Removed from TOP 3: {block.display_name}" if changed else "Not in TOP 3.")


def _history_label(item, blocks: list[Block]) -> str:
    """Archived text, else the live block's name, else its id."""
    text = plain_text(item.content)
    if text:
        return text
    block = find_block(blocks, item.id)
    return block.display_name if block is not None else item.id


@top3.command("history")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def top3_history(as_json: bool):
    """Show archived TOP 3 days, newest first."""
    config = load_config()
    workspace = load_workspace(config, today_for(config))
    history = sorted(workspace.history, key=lambda h: h.date, reverse=True)

    if as_json:
        click.echo(json.dumps([history_to_dict(h) for h in history], indent=2, ensure_ascii=False))
        return
    if not history:
        click.echo("No TOP 3 history yet.")
        return
    for entry in history:
        done = sum(1 for item in entry.blocks if item.completed)
        click.echo(f"{entry.date} ({done}/{len(entry.blocks)} done)")
        for item in entry.blocks:
            click.echo(f"  {'[x]' if item.completed else '[ ]'} {_history_label(item, workspace.blocks)}")


# ============== Block state ==============


def _update(ref: str, fn, *args) -> tuple[Block, bool]:
    config = load_config()
    day = today_for(config)
    block = _resolve(load_workspace(config, day).blocks, ref)
    _, changed = mutate_blocks(config, day, update_block, block.id, fn, *args)
    return block, changed


@main.command()
@click.argument("ref")
def check(ref: str):
    """Mark a todo done."""
    block, changed = _update(ref, set_checked, True)
    if not changed and not has_property(block, PropertyType.CHECKBOX):
        _fail(f"{block.display_name} has no checkbox")
    click.echo(f"Checked: {block.display_name}")


@main.command()
@click.argument("ref")
def uncheck(ref: str):
    """Mark a todo not done."""
    block, changed = _update(ref, set_checked, False)
    if not changed and not has_property(block, PropertyType.CHECKBOX):
        _fail(f"{block.display_name} has no checkbox")
    click.echo(f"Unchecked: {block.display_name}")


@main.command()
@click.argument("ref")
def delete(ref: str):
    """Move a block to the trash."""
    block, _ = _update(ref, soft_delete)
    click.echo(f"Deleted: {block.display_name}")


@main.command("restore")
@click.argument("ref")
def restore_cmd(ref: str):
    """Bring a block back from the trash."""
    block, _ = _update(ref, restore)
    click.echo(f"Restored: {block.display_name}")


# ============== Maintenance ==============


@main.command()
def archive():
    """Archive yesterday's TOP 3 now."""
    config = load_config()
    result = run_archival(config, today_for(config))
    if result.archived:
        click.echo(f"Archived {len(result.archived)} TOP 3 item(s).")
    else:
        click.echo("Nothing to archive.")


@main.command()
def watch():
    """Run the nightly archival scheduler."""
    from .scheduler import run_scheduler

    click.echo("Starting archival scheduler...")
    click.echo("Press Ctrl+C to stop")
    try:
        run_scheduler()
    except (KeyboardInterrupt, SystemExit):
        click.echo("\nScheduler stopped.")


@main.command()
def sync():
    """Push blocks and TOP 3 history to Supabase."""
    config = load_config()
    try:
        report = push_to_remote(config, today_for(config))
    except SyncError as e:
        _fail(str(e))
    click.echo(f"Pushed {report.pushed} block(s), deleted {report.deleted}, {report.history} history day(s).")


if __name__ == "__main__":
    main()
