from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from projectflow.projects.models import Project
from projectflow.tasks.models import ProjectTask
from tests.factories import create_project
from tests.factories import create_task

pytestmark = pytest.mark.django_db


def list_url():
    return reverse("api_v1:projects-list")


def detail_url(pk):
    return reverse("api_v1:projects-detail", kwargs={"pk": pk})


class TestProjectAPI:
    def test_requires_authentication(self, api_client):
        res = api_client.get(list_url())
        assert res.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list_includes_task_counts(self, api_client, developer_user, project):
        create_task(project, status=ProjectTask.Status.DONE)
        create_task(project)
        api_client.force_authenticate(user=developer_user)

        res = api_client.get(list_url())

        assert res.status_code == status.HTTP_200_OK
        [data] = res.data
        assert data["id"] == project.id
        assert data["task_count"] == 2
        assert data["completed_task_count"] == 1
        assert data["created_by_name"] == "Maria Lopez"

    def test_manager_creates_project(self, api_client, manager_user):
        api_client.force_authenticate(user=manager_user)

        res = api_client.post(
            list_url(), {"name": "Gemini", "status": 1}, format="json"
        )

        assert res.status_code == status.HTTP_201_CREATED, res.data
        project = Project.objects.get(pk=res.data["id"])
        assert project.created_by == manager_user
        assert project.status == Project.Status.ACTIVE

    def test_developer_cannot_create(self, api_client, developer_user):
        api_client.force_authenticate(user=developer_user)
        res = api_client.post(list_url(), {"name": "Nope"}, format="json")
        assert res.status_code == status.HTTP_403_FORBIDDEN

    def test_end_date_must_follow_start_date(self, api_client, manager_user):
        api_client.force_authenticate(user=manager_user)
        start = timezone.now()
        res = api_client.post(
            list_url(),
            {
                "name": "Backwards",
                "start_date": start.isoformat(),
                "end_date": (start - timedelta(days=1)).isoformat(),
            },
            format="json",
        )
        assert res.status_code == status.HTTP_400_BAD_REQUEST
        assert "end_date" in res.data

    def test_update_broadcasts_project_updated(
        self,
        api_client,
        manager_user,
        project,
        realtime,
        django_capture_on_commit_callbacks,
    ):
        realtime.join("viewer", project.id)
        api_client.force_authenticate(user=manager_user)

        with django_capture_on_commit_callbacks(execute=True):
            res = api_client.patch(
                detail_url(project.id), {"status": 2}, format="json"
            )

        assert res.status_code == status.HTTP_200_OK
        [(event, payload)] = realtime.events_for("viewer")
        assert event == "ProjectUpdated"
        assert payload["status"] == 2

    def test_delete_is_soft_and_silent(
        self,
        api_client,
        manager_user,
        project,
        realtime,
        django_capture_on_commit_callbacks,
    ):
        realtime.join("viewer", project.id)
        api_client.force_authenticate(user=manager_user)

        with django_capture_on_commit_callbacks(execute=True):
            res = api_client.delete(detail_url(project.id))

        assert res.status_code == status.HTTP_204_NO_CONTENT
        project.refresh_from_db()
        assert project.is_active is False
        assert realtime.sent == []
        assert api_client.get(detail_url(project.id)).status_code == 404

    def test_with_tasks(self, api_client, developer_user, project):
        task = create_task(project, title="Kickoff")
        other = create_project(project.created_by, name="Other")
        create_task(other)
        api_client.force_authenticate(user=developer_user)

        res = api_client.get(
            reverse("api_v1:projects-with-tasks", kwargs={"pk": project.id})
        )

        assert res.status_code == status.HTTP_200_OK
        assert [t["id"] for t in res.data["tasks"]] == [task.id]
