from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from projectflow.tasks.models import ProjectTask
from tests.factories import create_project
from tests.factories import create_task

pytestmark = pytest.mark.django_db


def list_url():
    return reverse("api_v1:tasks-list")


def detail_url(pk):
    return reverse("api_v1:tasks-detail", kwargs={"pk": pk})


class TestTaskAPI:
    def test_developer_creates_task_and_board_is_notified(
        self,
        api_client,
        developer_user,
        project,
        realtime,
        django_capture_on_commit_callbacks,
    ):
        realtime.join("viewer", project.id)
        api_client.force_authenticate(user=developer_user)

        with django_capture_on_commit_callbacks(execute=True):
            res = api_client.post(
                list_url(),
                {
                    "title": "  Write tests  ",
                    "project": project.id,
                    "priority": ProjectTask.Priority.HIGH,
                    "assigned_to": developer_user.id,
                },
                format="json",
            )

        assert res.status_code == status.HTTP_201_CREATED, res.data
        assert res.data["title"] == "Write tests"
        assert res.data["assigned_to_name"] == "Dana Kim"
        [(event, payload)] = realtime.events_for("viewer")
        assert event == "TaskCreated"
        assert payload["id"] == res.data["id"]
        assert payload["priority"] == 2
        assert payload["assignedToId"] == developer_user.id

    def test_invalid_task_publishes_nothing(
        self,
        api_client,
        developer_user,
        project,
        realtime,
        django_capture_on_commit_callbacks,
    ):
        realtime.join("viewer", project.id)
        api_client.force_authenticate(user=developer_user)

        with django_capture_on_commit_callbacks(execute=True):
            res = api_client.post(
                list_url(), {"title": "   ", "project": project.id}, format="json"
            )

        assert res.status_code == status.HTTP_400_BAD_REQUEST
        assert "title" in res.data
        assert realtime.sent == []

    def test_due_date_must_be_in_future(self, api_client, developer_user, project):
        api_client.force_authenticate(user=developer_user)
        res = api_client.post(
            list_url(),
            {
                "title": "Late",
                "project": project.id,
                "due_date": (timezone.now() - timedelta(days=1)).isoformat(),
            },
            format="json",
        )
        assert res.status_code == status.HTTP_400_BAD_REQUEST
        assert "due_date" in res.data

    def test_cannot_create_in_inactive_project(
        self, api_client, developer_user, project
    ):
        project.is_active = False
        project.save()
        api_client.force_authenticate(user=developer_user)

        res = api_client.post(
            list_url(), {"title": "Ghost", "project": project.id}, format="json"
        )

        assert res.status_code == status.HTTP_400_BAD_REQUEST
        assert "project" in res.data

    def test_plain_user_cannot_write(self, api_client, plain_user, project):
        api_client.force_authenticate(user=plain_user)
        res = api_client.post(
            list_url(), {"title": "x", "project": project.id}, format="json"
        )
        assert res.status_code == status.HTTP_403_FORBIDDEN

    def test_filter_by_project_and_status(self, api_client, developer_user, project):
        done = create_task(project, status=ProjectTask.Status.DONE)
        create_task(project)
        create_task(create_project(project.created_by, name="Other"))
        api_client.force_authenticate(user=developer_user)

        res = api_client.get(list_url(), {"project": project.id, "status": 3})

        assert res.status_code == status.HTTP_200_OK
        assert [t["id"] for t in res.data] == [done.id]

    def test_status_change_broadcasts_update(
        self,
        api_client,
        developer_user,
        project,
        realtime,
        django_capture_on_commit_callbacks,
    ):
        task = create_task(project)
        realtime.join("viewer", project.id)
        api_client.force_authenticate(user=developer_user)

        with django_capture_on_commit_callbacks(execute=True):
            res = api_client.patch(detail_url(task.id), {"status": 1}, format="json")

        assert res.status_code == status.HTTP_200_OK
        [(event, payload)] = realtime.events_for("viewer")
        assert event == "TaskUpdated"
        assert payload["status"] == 1

    def test_task_cannot_move_projects(self, api_client, developer_user, project):
        task = create_task(project)
        other = create_project(project.created_by, name="Other")
        api_client.force_authenticate(user=developer_user)

        res = api_client.patch(
            detail_url(task.id), {"project": other.id}, format="json"
        )

        assert res.status_code == status.HTTP_400_BAD_REQUEST

    def test_only_managers_delete(
        self,
        api_client,
        developer_user,
        manager_user,
        project,
        realtime,
        django_capture_on_commit_callbacks,
    ):
        task = create_task(project)
        realtime.join("viewer", project.id)

        api_client.force_authenticate(user=developer_user)
        denied = api_client.delete(detail_url(task.id))
        assert denied.status_code == status.HTTP_403_FORBIDDEN

        api_client.force_authenticate(user=manager_user)
        with django_capture_on_commit_callbacks(execute=True):
            res = api_client.delete(detail_url(task.id))

        assert res.status_code == status.HTTP_204_NO_CONTENT
        [(event, payload)] = realtime.events_for("viewer")
        assert event == "TaskDeleted"
        assert payload["id"] == task.id
        assert payload["projectId"] == project.id
