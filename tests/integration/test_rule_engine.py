"""RuleEngine.evaluate end-to-end against SQLite: matching, materialization, idempotency."""

import asyncio
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from scrumflow.application.dtos.rule_result import Applied, Failed, RuleResult, Suppressed
from scrumflow.domain.exceptions import AutomationException
from scrumflow.infrastructure.services.rule_engine import PERSISTENCE_ERROR, RuleEngine
from scrumflow.infrastructure.services.template_materializer import (
    TemplateMaterializer,
)
from scrumflow.shared.enums import ResourceType, SuppressionReason


@pytest.fixture
def engine(session_factory) -> RuleEngine:
    return RuleEngine(session_factory)


@pytest.fixture
async def seeded(store):
    """One project, one user and an active workflow."""
    project = await store.project("Apollo")
    user = await store.user("dev@example.com")
    workflow = await store.workflow(project)
    return project, user, workflow


async def test_completed_bug_creates_review_task(engine, store, seeded, make_event) -> None:
    """A matching transition applies the rule and creates one linked task."""
    project, user, workflow = seeded
    rule = await store.rule(workflow, task_type_id="bug")
    await store.template(project, rule, name="Review {{father}}")

    results = await engine.evaluate(make_event(project, user, task_type_id="bug"))

    assert len(results) == 1
    assert results[0].rule_id == rule.id
    assert results[0].outcome == Applied(1)
    tasks = await store.tasks(project.id)
    assert [t.title for t in tasks] == ["Review [Task #42](/tasks/42)"]
    assert results[0].task_ids == (tasks[0].id,)
    assert tasks[0].created_by == user.id
    assert tasks[0].status == "available"
    assert tasks[0].card_id is None
    assert await store.ledger(rule.id, "task", "42") is not None


async def test_non_matching_state_returns_empty(engine, store, seeded, make_event) -> None:
    """No rule targets the new state: empty result, no tasks, no ledger rows."""
    project, user, workflow = seeded
    rule = await store.rule(workflow, to_state="completed")
    await store.template(project, rule)

    results = await engine.evaluate(
        make_event(project, user, from_state="available", to_state="claimed")
    )

    assert results == []
    assert await store.tasks(project.id) == []
    assert await store.ledger(rule.id, "task", "42") is None


async def test_redelivery_is_suppressed(engine, store, seeded, make_event) -> None:
    """The same rule and origin fire at most once."""
    project, user, workflow = seeded
    rule = await store.rule(workflow)
    await store.template(project, rule)
    event = make_event(project, user)

    first = await engine.evaluate(event)
    second = await engine.evaluate(event)

    assert first[0].outcome == Applied(1)
    assert second == [RuleResult(rule.id, Suppressed(SuppressionReason.IDEMPOTENT))]
    assert len(await store.tasks(project.id)) == 1


async def test_concurrent_deliveries_apply_once(engine, store, seeded, make_event) -> None:
    """Two evaluations racing on one origin: one applies, the other is suppressed."""
    project, user, workflow = seeded
    rule = await store.rule(workflow)
    await store.template(project, rule)
    event = make_event(project, user)

    first, second = await asyncio.gather(engine.evaluate(event), engine.evaluate(event))

    outcomes = sorted(
        [first[0].outcome, second[0].outcome], key=lambda o: type(o).__name__
    )
    assert outcomes == [Applied(1), Suppressed(SuppressionReason.IDEMPOTENT)]
    assert len(await store.tasks(project.id)) == 1


async def test_rule_fires_again_for_a_different_origin(engine, store, seeded, make_event) -> None:
    project, user, workflow = seeded
    rule = await store.rule(workflow)
    await store.template(project, rule)

    await engine.evaluate(make_event(project, user, resource_id="42"))
    results = await engine.evaluate(make_event(project, user, resource_id="43"))

    assert results[0].outcome == Applied(1)
    assert len(await store.tasks(project.id)) == 2


async def test_system_transition_is_ignored(engine, store, seeded, make_event) -> None:
    """user_triggered=False: no matching, no ledger rows, no tasks."""
    project, user, workflow = seeded
    rule = await store.rule(workflow)
    await store.template(project, rule)

    results = await engine.evaluate(make_event(project, user, user_triggered=False))

    assert results == []
    assert await store.ledger(rule.id, "task", "42") is None
    assert await store.tasks(project.id) == []


async def test_inactive_workflow_and_rule_do_not_fire(engine, store, make_event) -> None:
    project = await store.project()
    user = await store.user()
    inactive_workflow = await store.workflow(project, is_active=False)
    await store.template(project, await store.rule(inactive_workflow))
    active_workflow = await store.workflow(project)
    await store.template(project, await store.rule(active_workflow, is_active=False))

    assert await engine.evaluate(make_event(project, user)) == []
    assert await store.tasks(project.id) == []


async def test_workflow_of_another_project_does_not_fire(engine, store, make_event) -> None:
    project = await store.project("Apollo")
    other = await store.project("Gemini")
    user = await store.user()
    rule = await store.rule(await store.workflow(other))
    await store.template(other, rule)

    assert await engine.evaluate(make_event(project, user)) == []


async def test_task_type_filter(engine, store, seeded, make_event) -> None:
    """A filtered rule needs an equal task type; an unfiltered rule takes any."""
    project, user, workflow = seeded
    bug_rule = await store.rule(workflow, task_type_id="bug")
    any_rule = await store.rule(workflow)
    await store.template(project, bug_rule)
    await store.template(project, any_rule)

    feature = await engine.evaluate(
        make_event(project, user, resource_id="1", task_type_id="feature")
    )
    untyped = await engine.evaluate(make_event(project, user, resource_id="2"))

    assert [r.rule_id for r in feature] == [any_rule.id]
    assert [r.rule_id for r in untyped] == [any_rule.id]


async def test_card_rule_ignores_task_events(engine, store, seeded, make_event) -> None:
    project, user, workflow = seeded
    card_rule = await store.rule(workflow, resource_type=ResourceType.CARD)
    await store.template(project, card_rule)

    assert await engine.evaluate(make_event(project, user)) == []


async def test_card_event_links_tasks_to_card(engine, store, seeded, make_event) -> None:
    """Card origins set card_id and render a card link for {{father}}."""
    project, user, workflow = seeded
    card_rule = await store.rule(
        workflow, resource_type=ResourceType.CARD, to_state="done"
    )
    await store.template(project, card_rule, name="Retro for {{father}}")

    results = await engine.evaluate(
        make_event(
            project,
            user,
            resource_type=ResourceType.CARD,
            resource_id="7",
            from_state="doing",
            to_state="done",
        )
    )

    assert results[0].outcome == Applied(1)
    [task] = await store.tasks(project.id)
    assert task.title == "Retro for [Card #7](/cards/7)"
    assert task.card_id == "7"
    assert await store.ledger(card_rule.id, "card", "7") is not None


async def test_one_task_per_template_in_execution_order(engine, store, seeded, make_event) -> None:
    project, user, workflow = seeded
    rule = await store.rule(workflow)
    await store.template(project, rule, name="third", execution_order=2)
    await store.template(project, rule, name="first", execution_order=0)
    await store.template(project, rule, name="second", execution_order=1)

    [result] = await engine.evaluate(make_event(project, user))

    assert result.outcome == Applied(3)
    by_id = {t.id: t.title for t in await store.tasks(project.id)}
    assert [by_id[task_id] for task_id in result.task_ids] == ["first", "second", "third"]


async def test_rule_without_templates_applies_with_zero_tasks(
    engine, store, seeded, make_event
) -> None:
    """Zero templates still records the ledger row."""
    project, user, workflow = seeded
    rule = await store.rule(workflow)

    results = await engine.evaluate(make_event(project, user))

    assert results == [RuleResult(rule.id, Applied(0))]
    assert await store.ledger(rule.id, "task", "42") is not None
    assert await store.tasks(project.id) == []


async def test_variables_resolved_in_description(engine, store, seeded, make_event) -> None:
    """Created resources render (created); unknown tokens are kept."""
    project, user, workflow = seeded
    rule = await store.rule(workflow, to_state="available")
    await store.template(
        project,
        rule,
        name="Triage {{father}}",
        description="{{from_state}} -> {{to_state}} by {{user}} in {{project}} {{sprint}}",
    )

    await engine.evaluate(
        make_event(project, user, from_state=None, to_state="available")
    )

    [task] = await store.tasks(project.id)
    assert task.description == (
        "(created) -> available by dev@example.com in Apollo {{sprint}}"
    )


async def test_empty_description_stored_as_none(engine, store, seeded, make_event) -> None:
    project, user, workflow = seeded
    rule = await store.rule(workflow)
    await store.template(project, rule, description="")

    await engine.evaluate(make_event(project, user))

    [task] = await store.tasks(project.id)
    assert task.description is None


async def test_long_title_is_truncated(engine, store, seeded, make_event) -> None:
    project, user, workflow = seeded
    rule = await store.rule(workflow)
    await store.template(project, rule, name="Write the release notes for " + "x" * 60)

    await engine.evaluate(make_event(project, user))

    [task] = await store.tasks(project.id)
    assert len(task.title) == 56
    assert task.title.startswith("Write the release notes for ")


async def test_template_priority_and_type_copied(engine, store, seeded, make_event) -> None:
    project, user, workflow = seeded
    rule = await store.rule(workflow)
    await store.template(project, rule, type_id="type-qa", priority=1)

    await engine.evaluate(make_event(project, user))

    [task] = await store.tasks(project.id)
    assert task.type_id == "type-qa"
    assert task.priority == 1


async def test_results_ordered_by_rule_id(engine, store, seeded, make_event) -> None:
    project, user, workflow = seeded
    rules = [await store.rule(workflow, name=f"rule {i}") for i in range(3)]
    other_workflow = await store.workflow(project)
    rules.append(await store.rule(other_workflow, name="rule 3"))

    results = await engine.evaluate(make_event(project, user))

    assert [r.rule_id for r in results] == sorted(r.id for r in rules)
    assert all(r.outcome == Applied(0) for r in results)


async def test_deleted_template_fails_only_its_rule(engine, store, seeded, make_event) -> None:
    """A configuration error rolls back that rule; siblings still apply."""
    project, user, workflow = seeded
    broken = await store.rule(workflow, name="broken")
    healthy = await store.rule(workflow, name="healthy")
    await store.template(project, broken, name="kept", execution_order=0)
    deleted = await store.template(project, broken, name="gone", execution_order=1)
    await store.template(project, healthy, name="healthy task")
    await store.delete_template(deleted.id)

    results = await engine.evaluate(make_event(project, user))

    by_rule = {r.rule_id: r for r in results}
    assert by_rule[healthy.id].outcome == Applied(1)
    failed = by_rule[broken.id].outcome
    assert isinstance(failed, Failed)
    assert failed.error_code == "RULE_CONFIGURATION_ERROR"
    assert deleted.id in failed.message
    assert await store.ledger(broken.id, "task", "42") is None
    assert [t.title for t in await store.tasks(project.id)] == ["healthy task"]


async def test_template_from_another_project_fails_rule(engine, store, seeded, make_event) -> None:
    project, user, workflow = seeded
    other = await store.project("Gemini")
    rule = await store.rule(workflow)
    await store.template(other, rule)

    [result] = await engine.evaluate(make_event(project, user))

    assert result.failed
    assert result.outcome.error_code == "RULE_CONFIGURATION_ERROR"
    assert await store.ledger(rule.id, "task", "42") is None


class _FailingMaterializer(TemplateMaterializer):
    """Raises a database error while materializing one chosen rule."""

    def __init__(self, failing_rule_id: str) -> None:
        super().__init__()
        self.failing_rule_id = failing_rule_id

    async def materialize(self, session, rule, event, context):
        tasks = await super().materialize(session, rule, event, context)
        if rule.id == self.failing_rule_id:
            raise OperationalError("INSERT INTO task", {}, Exception("disk I/O error"))
        return tasks


async def test_persistence_failure_raises_after_all_rules(
    session_factory, store, seeded, make_event
) -> None:
    """The failing rule rolls back; the sibling commits; the caller gets all results."""
    project, user, workflow = seeded
    first = await store.rule(workflow, name="first")
    second = await store.rule(workflow, name="second")
    await store.template(project, first, name="from first")
    await store.template(project, second, name="from second")
    failing, healthy = sorted([first, second], key=lambda r: r.id)
    engine = RuleEngine(session_factory, materializer=_FailingMaterializer(failing.id))

    with pytest.raises(AutomationException) as exc_info:
        await engine.evaluate(make_event(project, user))

    exc = exc_info.value
    assert exc.error_code == "AUTOMATION_FAILED"
    assert exc.details["failed_rule_ids"] == [failing.id]
    assert [r.rule_id for r in exc.results] == [failing.id, healthy.id]
    assert exc.results[0].outcome.error_code == PERSISTENCE_ERROR
    assert exc.results[1].outcome == Applied(1)
    assert await store.ledger(failing.id, "task", "42") is None
    assert await store.ledger(healthy.id, "task", "42") is not None
    expected_title = "from first" if healthy is first else "from second"
    assert [t.title for t in await store.tasks(project.id)] == [expected_title]


async def test_failed_rule_can_apply_on_redelivery(
    session_factory, store, seeded, make_event
) -> None:
    """Nothing is recorded for a rolled-back rule, so a retry applies it."""
    project, user, workflow = seeded
    rule = await store.rule(workflow)
    await store.template(project, rule)
    event = make_event(project, user)

    with pytest.raises(AutomationException):
        await RuleEngine(
            session_factory, materializer=_FailingMaterializer(rule.id)
        ).evaluate(event)
    results = await RuleEngine(session_factory).evaluate(event)

    assert results[0].outcome == Applied(1)
    assert len(await store.tasks(project.id)) == 1


async def test_missing_user_renders_empty_email(engine, store, seeded, make_event) -> None:
    """A user id without a directory row resolves {{user}} to an empty string."""
    project, user, workflow = seeded
    rule = await store.rule(workflow)
    await store.template(project, rule, name="By [{{user}}]")
    await engine.evaluate(make_event(project, SimpleNamespace(id="ghost-user")))

    [task] = await store.tasks(project.id)
    assert task.title == "By []"
