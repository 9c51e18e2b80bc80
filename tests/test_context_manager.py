from datetime import timedelta

import pytest
from pydantic import ValidationError

from smartagent.config import ContextSettings
from smartagent.domain.context.context_manager import ContextAssembler
from smartagent.domain.context.context_retriever import are_files_related, extract_topic, is_relevant_to_task
from smartagent.domain.models.context import (
    Change,
    ContextLayerName,
    LessonLearned,
    PastTask,
    ProjectContext,
    SemanticContext,
    SessionContext,
    SuggestedPattern,
    TemporalContext,
)
from smartagent.domain.models.conversation import ConversationContext, ConversationMessage, MessageRole
from smartagent.domain.models.task_state import TaskKind


@pytest.fixture
def project():
    return ProjectContext(
        name="Task App",
        version="1.0.0",
        current_phase="Polish",
        conventions=["Design token system for styling", "Zustand with Immer for state management"],
        lessons=[
            LessonLearned(id="l1", lesson="Strict types", severity="critical"),
            LessonLearned(id="l2", lesson="Small files", severity="info"),
        ],
    )


@pytest.fixture
def assembler(clock, project):
    assembler = ContextAssembler(ContextSettings(), clock)
    assembler.initialize(project)
    return assembler


def test_keyword_relevance():
    assert is_relevant_to_task("Design token system for styling", TaskKind.UPDATE_STYLES)
    assert not is_relevant_to_task("Zustand with Immer", TaskKind.UPDATE_STYLES)


def test_files_related_by_directory_feature_or_name():
    assert are_files_related("src/components/Card.tsx", "src/components/Button.tsx")
    assert are_files_related("src/features/tasks/list/List.tsx", "src/features/tasks/api.ts")
    assert are_files_related("src/a/TaskCard.tsx", "src/b/TaskCard.test.tsx")
    assert not are_files_related("src/a/Header.tsx", "src/b/Footer.tsx")


def test_extract_topic_uses_verb_and_next_word():
    assert extract_topic("please create BookingCard now") == "create BookingCard"
    assert extract_topic("what is going on here today") == "what is going on here..."


def test_project_layer_items(assembler, clock):
    items = {i.id: i for i in assembler.gather_relevant_context(TaskKind.UPDATE_STYLES)}

    assert items["project-overview"].content == "Project: Task App v1.0.0 - Phase: Polish"
    assert items["project-overview"].priority == 90
    assert items["project-conventions"].content == "Key Conventions:\nDesign token system for styling"
    assert items["project-conventions"].tokens == 20
    assert items["lessons-learned"].content == "Important Lessons:\n- Strict types"


def test_conventions_are_keyword_gated(assembler):
    ids = [i.id for i in assembler.gather_relevant_context(TaskKind.OPTIMIZE_PERFORMANCE)]
    assert "project-conventions" not in ids


def test_session_layer_prefers_files_related_to_current_file(assembler, clock):
    assembler.update_layer(
        ContextLayerName.SESSION,
        SessionContext(
            id="s1",
            start_time=clock.now(),
            recent_files=["src/components/Card.tsx", "src/app/page.tsx", "src/components/Button.tsx"],
        ),
    )

    items = {i.id: i for i in assembler.gather_relevant_context(TaskKind.REFACTOR, current_file="src/components/Nav.tsx")}

    assert items["recent-files"].content == "Recently edited: src/components/Card.tsx, src/components/Button.tsx"
    assert items["recent-files"].tokens == 20


def test_conversation_layer_items(assembler, clock):
    conversation = ConversationContext(
        id="c1",
        established_context=["GridLayout only"],
        messages=[ConversationMessage(role=MessageRole.USER, content="create TaskCard please", timestamp=clock.now())],
    )
    assembler.update_layer(ContextLayerName.CONVERSATION, conversation)

    items = {i.id: i for i in assembler.gather_relevant_context(TaskKind.CREATE_COMPONENT)}

    assert items["established-context"].content == "We've established: GridLayout only"
    assert items["user-preferences"].content == "Communication style: casual, Detail level: balanced"
    assert items["conversation-summary"].content == "Recent discussion: create TaskCard"


def test_semantic_and_temporal_layers(assembler, clock):
    assembler.update_layer(
        ContextLayerName.SEMANTIC,
        SemanticContext(
            task_kind=TaskKind.MIGRATE_LAYOUT,
            similar_past_tasks=[
                PastTask(id="t1", kind=TaskKind.MIGRATE_LAYOUT, description="Dashboard grid", patterns=["GridLayout"]),
                PastTask(id="t2", kind=TaskKind.ADD_FEATURE, description="Export button"),
            ],
            suggested_patterns=[
                SuggestedPattern(name="Low", description="rarely works", success_rate=20),
                SuggestedPattern(name="High", description="usually works", success_rate=95),
            ],
        ),
    )
    assembler.update_layer(
        ContextLayerName.TEMPORAL,
        TemporalContext(
            recent_changes=[
                Change(file="a.tsx", type="modified", timestamp=clock.now() - timedelta(minutes=30)),
                Change(file="b.tsx", type="created", timestamp=clock.now() - timedelta(hours=5)),
            ]
        ),
    )

    items = {i.id: i for i in assembler.gather_relevant_context(TaskKind.MIGRATE_LAYOUT)}

    assert items["similar-tasks"].content == "Similar successful implementations:\n- Dashboard grid (GridLayout)"
    assert items["suggested-patterns"].content.splitlines()[1] == "- High: usually works"
    assert items["recent-changes"].content == "Recent changes:\n- modified a.tsx"
    assert items["velocity"].priority == 50


def test_update_layer_validates_value(assembler):
    with pytest.raises(ValidationError):
        assembler.update_layer(ContextLayerName.SESSION, {"working_directory": "."})
    with pytest.raises(ValueError):
        assembler.update_layer("weather", {})


def test_get_context_returns_a_copy(assembler):
    context = assembler.get_context()
    context.project.name = "Changed"

    assert assembler.get_context().project.name == "Task App"


def test_build_task_context_respects_budget(clock, project):
    assembler = ContextAssembler(ContextSettings(max_tokens=60), clock)
    assembler.initialize(project)

    window = assembler.build_task_context(TaskKind.UPDATE_STYLES, "tweak the theme")

    assert window.max_tokens == 60
    assert window.current_tokens <= 60
    assert [i.id for i in window.items] == ["project-overview"]
