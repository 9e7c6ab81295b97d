"""Unit tests for query_engine module."""

import itertools

import pytest
from pydantic import ValidationError

from src.core.db_client import DatabaseError
from src.core.errors import ErrorKind, ServiceError
from src.domain.task import Task
from src.services import query_engine
from src.services.query_engine import TaskPage, TaskQuery, apply_query, make_comparator, sort_tasks


_ids = itertools.count(1)


def make_task(
    title: str,
    *,
    status: str = "pending",
    priority: str = "medium",
    description: str = "",
    due_date: str | None = None,
    created_at: str | None = None,
    owner_id: str = "owner-1",
) -> Task:
    n = next(_ids)
    stamp = created_at or f"2026-01-01T00:00:{n % 60:02d}Z"
    return Task(
        id=str(n),
        owner_id=owner_id,
        title=title,
        description=description,
        status=status,
        priority=priority,
        due_date=due_date,
        created_at=stamp,
        updated_at=stamp,
    )


@pytest.fixture
def mixed_tasks() -> list[Task]:
    return [
        make_task("Buy milk", status="pending", priority="low", created_at="2026-01-01T08:00:00Z"),
        make_task("Pay rent", status="completed", priority="high", created_at="2026-01-02T08:00:00Z"),
        make_task(
            "Call plumber",
            status="in-progress",
            priority="medium",
            description="Kitchen MILK pipe",
            created_at="2026-01-03T08:00:00Z",
        ),
        make_task("Book flights", status="pending", priority="high", created_at="2026-01-04T08:00:00Z"),
        make_task("Renew passport", status="pending", priority="medium", created_at="2026-01-05T08:00:00Z"),
        make_task("File taxes", status="completed", priority="low", created_at="2026-01-06T08:00:00Z"),
    ]


@pytest.mark.unit
class TestFiltering:
    """Tests for status, priority and search predicates."""

    def test_no_filters_returns_everything(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(limit=100))

        assert page.total == len(mixed_tasks)
        assert {t.id for t in page.tasks} == {t.id for t in mixed_tasks}

    def test_all_is_not_a_filter(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(status="all", priority="all", limit=100))

        assert page.total == len(mixed_tasks)

    def test_status_filter_exact_match(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(status="pending", limit=100))

        assert page.total == 3
        assert all(t.status == "pending" for t in page.tasks)

    def test_priority_filter_exact_match(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(priority="high", limit=100))

        assert {t.title for t in page.tasks} == {"Pay rent", "Book flights"}

    def test_search_matches_title_or_description_case_insensitively(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(search="milk", limit=100))

        assert {t.title for t in page.tasks} == {"Buy milk", "Call plumber"}

    def test_filters_combine_with_and(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(status="pending", priority="high", limit=100))

        assert [t.title for t in page.tasks] == ["Book flights"]
        assert page.total == 1

    @pytest.mark.parametrize(
        ("status", "priority", "search"),
        [
            ("pending", None, None),
            (None, "low", None),
            (None, None, "a"),
            ("completed", "low", "taxes"),
            ("in-progress", "all", "pipe"),
            ("unknown-status", None, None),
        ],
    )
    def test_no_false_positives(self, mixed_tasks, status, priority, search):
        query = TaskQuery(status=status, priority=priority, search=search, limit=2)
        page = apply_query(mixed_tasks, query)

        expected = [t for t in mixed_tasks if query_engine.matches_filters(t, query)]
        assert page.total == len(expected)
        for task in page.tasks:
            if status and status != "all":
                assert task.status == status
            if priority and priority != "all":
                assert task.priority == priority
            if search:
                assert search.lower() in (task.title + " " + task.description).lower()


@pytest.mark.unit
class TestSorting:
    """Tests for the single-key comparator."""

    def test_default_sort_is_created_at_descending(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(limit=100))

        created = [t.created_at for t in page.tasks]
        assert created == sorted(created, reverse=True)

    def test_sort_by_title_ascending(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(sort_by="title", order="asc", limit=100))

        titles = [t.title for t in page.tasks]
        assert titles == sorted(titles)

    def test_priority_sorts_by_rank_not_alphabet(self):
        tasks = [make_task("l", priority="low"), make_task("h", priority="high"), make_task("m", priority="medium")]

        desc = sort_tasks(tasks, "priority", "desc")
        asc = sort_tasks(tasks, "priority", "asc")

        assert [t.priority for t in desc] == ["high", "medium", "low"]
        assert [t.priority for t in asc] == ["low", "medium", "high"]

    @pytest.mark.parametrize("permutation", list(itertools.permutations(["low", "medium", "high", "urgent"])))
    def test_priority_order_independent_of_insertion(self, permutation):
        tasks = [make_task(p, priority=p) for p in permutation]

        ordered = sort_tasks(tasks, "priority", "desc")

        # unrecognised priorities rank 0, below low
        assert [t.priority for t in ordered] == ["high", "medium", "low", "urgent"]

    @pytest.mark.parametrize("order", ["asc", "ASC", "ascending", "up", "DESC"])
    def test_only_exact_desc_sorts_descending(self, order):
        tasks = [make_task("l", priority="low"), make_task("h", priority="high"), make_task("m", priority="medium")]

        ordered = sort_tasks(tasks, "priority", order)

        assert [t.priority for t in ordered] == ["low", "medium", "high"]

    def test_missing_due_dates_sort_below_present_ones(self):
        tasks = [
            make_task("none"),
            make_task("late", due_date="2026-12-01"),
            make_task("early", due_date="2026-02-01"),
        ]

        asc = sort_tasks(tasks, "dueDate", "asc")

        assert [t.title for t in asc] == ["none", "early", "late"]

    def test_unknown_sort_field_falls_back_to_created_at(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(sort_by="nonsense", order="asc", limit=100))

        created = [t.created_at for t in page.tasks]
        assert created == sorted(created)

    def test_snake_case_sort_names_are_accepted(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(sort_by="created_at", order="asc", limit=100))

        created = [t.created_at for t in page.tasks]
        assert created == sorted(created)

    def test_comparator_never_reports_equality(self):
        a = make_task("same", priority="high")
        b = make_task("same", priority="high")

        for field in ("title", "priority"):
            for order in ("asc", "desc"):
                compare = make_comparator(field, order)
                assert compare(a, b) == 1
                assert compare(b, a) == 1

    def test_order_of_equal_keys_is_unspecified(self):
        """Ties come back as a permutation of the tied tasks, in no promised order."""
        tied = [make_task(f"t{i}", priority="medium") for i in range(5)]
        tasks = [make_task("top", priority="high"), *tied, make_task("bottom", priority="low")]

        ordered = sort_tasks(tasks, "priority", "desc")

        assert ordered[0].title == "top"
        assert ordered[-1].title == "bottom"
        assert {t.id for t in ordered[1:-1]} == {t.id for t in tied}


@pytest.mark.unit
class TestPagination:
    """Tests for offset/limit paging."""

    def test_total_independent_of_page_and_limit(self, mixed_tasks):
        totals = {
            apply_query(mixed_tasks, TaskQuery(status="pending", page=page, limit=limit)).total
            for page in (1, 2, 5)
            for limit in (1, 2, 10)
        }

        assert totals == {3}

    def test_total_pages_rounds_up(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(limit=4))

        assert page.total_pages == 2
        assert page.current_page == 1
        assert len(page.tasks) == 4

    @pytest.mark.parametrize("limit", [1, 2, 4, 6, 10])
    def test_pages_concatenate_to_full_sorted_sequence(self, mixed_tasks, limit):
        full = apply_query(mixed_tasks, TaskQuery(sort_by="title", order="asc", limit=100)).tasks

        first = apply_query(mixed_tasks, TaskQuery(sort_by="title", order="asc", page=1, limit=limit))
        pages = [first.tasks] + [
            apply_query(mixed_tasks, TaskQuery(sort_by="title", order="asc", page=n, limit=limit)).tasks
            for n in range(2, first.total_pages + 1)
        ]
        stitched = [t.id for chunk in pages for t in chunk]

        assert stitched == [t.id for t in full]
        assert len(stitched) == len(set(stitched))

    def test_out_of_range_page_is_empty_not_an_error(self, mixed_tasks):
        page = apply_query(mixed_tasks, TaskQuery(page=99, limit=5))

        assert page.tasks == []
        assert page.total == len(mixed_tasks)
        assert page.total_pages == 2
        assert page.current_page == 99

    def test_empty_set_has_zero_pages(self):
        page = apply_query([], TaskQuery())

        assert page.total == 0
        assert page.total_pages == 0
        assert page.tasks == []

    @pytest.mark.parametrize(("requested", "expected"), [(1, 1), (100, 100), (101, 100), (10_000, 100)])
    def test_limit_is_clamped_to_maximum(self, requested, expected):
        assert TaskQuery(limit=requested).limit == expected

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_is_rejected(self, limit):
        with pytest.raises(ValidationError):
            TaskQuery(limit=limit)

    def test_default_order_is_descending(self):
        assert TaskQuery().order == "desc"

    def test_to_api_uses_camel_case(self, mixed_tasks):
        body = apply_query(mixed_tasks, TaskQuery(limit=2)).to_api()

        assert body["count"] == 2
        assert body["totalPages"] == 3
        assert body["currentPage"] == 1
        assert "createdAt" in body["tasks"][0]
        assert "ownerId" in body["tasks"][0]


@pytest.mark.unit
class TestListTasks:
    """Tests for list_tasks against a store."""

    async def test_only_owner_tasks_are_listed(self, task_store):
        await task_store.create("alice", {"title": "mine", "status": "pending", "priority": "low"})
        await task_store.create("bob", {"title": "theirs", "status": "pending", "priority": "low"})

        result = await query_engine.list_tasks(task_store=task_store, owner_id="alice", query=TaskQuery())

        assert isinstance(result, TaskPage)
        assert [t.title for t in result.tasks] == ["mine"]
        assert result.total == 1

    async def test_store_failure_is_upstream(self, task_store, in_memory_db):
        in_memory_db.fail_with = DatabaseError("disk on fire")

        result = await query_engine.list_tasks(task_store=task_store, owner_id="alice", query=TaskQuery())

        assert isinstance(result, ServiceError)
        assert result.kind == ErrorKind.UPSTREAM
