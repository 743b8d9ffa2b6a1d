"""Dashboard aggregates."""

from projectflow.features.dashboard import service
from projectflow.features.members.service import add_member
from projectflow.features.product_features.service import create_features
from projectflow.features.projects.service import create_project, patch_project, save_summary, update_project_name
from projectflow.features.tasks.service import create_task
from projectflow.features.users.service import ensure_profile
from projectflow.models.feature import FeatureInput
from projectflow.models.member import MemberRole
from projectflow.models.project import ProjectPatchRequest
from projectflow.models.task import TaskCreateRequest, TaskStatus
from projectflow.models.user_profile import EnsureProfileRequest

USER = "user_dash"


def _seed():
    owned = create_project(USER).project_id
    update_project_name(USER, owned, "Task Flow")
    save_summary(USER, owned, "Boards")
    patch_project(USER, owned, ProjectPatchRequest(category="Productivity"))
    create_project(USER)

    ensure_profile(USER, EnsureProfileRequest(email="dash@example.com"))
    shared = create_project("someone_else").project_id
    add_member("someone_else", shared, "dash@example.com", MemberRole.MEMBER)
    create_project("unrelated")

    create_task(USER, TaskCreateRequest(project_id=owned, title="Wire board"))
    create_task(USER, TaskCreateRequest(project_id=owned, title="Ship", status=TaskStatus.COMPLETED))
    create_task("someone_else", TaskCreateRequest(project_id=shared, title="Shared task"))
    create_features(
        USER,
        owned,
        [
            FeatureInput(title="Boards", priority="High", effort="Large", category="Core"),
            FeatureInput(title="Themes", priority="Low", category="UI/UX"),
        ],
    )
    return owned, shared


def test_dashboard_stats_cover_owned_and_member_projects():
    _seed()

    stats = service.get_dashboard_stats(USER)

    assert stats["total_projects"] == 3
    assert stats["member_projects_count"] == 1
    assert stats["projects_by_status"]["active"] == 1
    assert stats["projects_by_status"]["draft"] == 2
    assert stats["total_tasks"] == 3
    assert stats["tasks_by_status"]["todo"] == 2
    assert stats["tasks_by_status"]["completed"] == 1
    assert len(stats["recent_projects"]) == 3


def test_recent_projects_are_capped():
    for _ in range(7):
        create_project(USER)

    assert len(service.get_dashboard_stats(USER)["recent_projects"]) == service.RECENT_PROJECTS


def test_categories_and_feature_breakdown():
    _seed()

    categories = service.get_project_stats_by_category(USER)
    assert categories == {"Productivity": 1, "Other": 2}

    features = service.get_feature_stats(USER)
    assert features["by_priority"]["High"] == 1
    assert features["by_priority"]["Low"] == 1
    assert features["by_priority"]["Critical"] == 0
    assert features["by_effort"] == {"Small": 0, "Medium": 1, "Large": 1, "XL": 0}
    assert features["by_category"] == {"Core": 1, "UI/UX": 1}


def test_empty_dashboard():
    stats = service.get_dashboard_stats("nobody")

    assert stats["total_projects"] == 0
    assert stats["total_tasks"] == 0
    assert service.get_recent_activities("nobody") == []


def test_recent_activities_newest_first_and_limited():
    _seed()

    activities = service.get_recent_activities(USER, limit=4)

    assert len(activities) == 4
    timestamps = [a["timestamp"] for a in activities]
    assert timestamps == sorted(timestamps, reverse=True)
    assert {a["type"] for a in service.get_recent_activities(USER)} == {"project_created", "task_created", "feature_created"}


def test_dashboard_api(client):
    _seed()
    headers = {"X-User-Id": USER}

    stats = client.get("/api/dashboard/stats", headers=headers)
    assert stats.json()["data"]["total_projects"] == 3

    activities = client.get("/api/dashboard/activities", params={"limit": 2}, headers=headers)
    assert len(activities.json()["data"]) == 2
    assert isinstance(activities.json()["data"][0]["timestamp"], str)

    assert client.get("/api/dashboard/activities", params={"limit": 0}, headers=headers).status_code == 400
