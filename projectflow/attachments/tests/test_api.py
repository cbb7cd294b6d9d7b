import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status

from projectflow.attachments.models import Attachment
from tests.factories import create_task

pytestmark = pytest.mark.django_db


def upload_url(task_id):
    return reverse("api_v1:attachments-upload", kwargs={"task_id": task_id})


def detail_url(pk):
    return reverse("api_v1:attachments-detail", kwargs={"pk": pk})


@pytest.fixture
def task(project):
    return create_task(project)


def pdf(name="design.pdf", content=b"%PDF-1.4 test"):
    return SimpleUploadedFile(name, content, content_type="application/pdf")


class TestAttachmentAPI:
    def test_upload_notifies_board(
        self,
        api_client,
        developer_user,
        task,
        realtime,
        django_capture_on_commit_callbacks,
    ):
        realtime.join("viewer", task.project_id)
        api_client.force_authenticate(user=developer_user)

        with django_capture_on_commit_callbacks(execute=True):
            res = api_client.post(
                upload_url(task.id), {"file": pdf()}, format="multipart"
            )

        assert res.status_code == status.HTTP_201_CREATED, res.data
        attachment = Attachment.objects.get(pk=res.data["id"])
        assert attachment.file_name == "design.pdf"
        assert attachment.file.name.startswith("attachments/")
        assert attachment.file.name != "attachments/design.pdf"
        [(event, payload)] = realtime.events_for("viewer")
        assert event == "AttachmentAdded"
        assert payload["fileName"] == "design.pdf"
        assert payload["uploadedById"] == developer_user.id

    def test_upload_to_unknown_task(self, api_client, developer_user):
        api_client.force_authenticate(user=developer_user)
        res = api_client.post(upload_url(424242), {"file": pdf()}, format="multipart")
        assert res.status_code == status.HTTP_404_NOT_FOUND

    def test_upload_requires_file(self, api_client, developer_user, task):
        api_client.force_authenticate(user=developer_user)
        res = api_client.post(upload_url(task.id), {}, format="multipart")
        assert res.status_code == status.HTTP_400_BAD_REQUEST

    def test_rejects_disallowed_extension(self, api_client, developer_user, task):
        api_client.force_authenticate(user=developer_user)
        res = api_client.post(
            upload_url(task.id),
            {"file": SimpleUploadedFile("run.exe", b"MZ")},
            format="multipart",
        )
        assert res.status_code == status.HTTP_400_BAD_REQUEST
        assert ".exe" in res.data["detail"]

    def test_rejects_oversized_file(self, api_client, developer_user, task, settings):
        settings.ATTACHMENT_MAX_SIZE = 4
        api_client.force_authenticate(user=developer_user)

        res = api_client.post(
            upload_url(task.id), {"file": pdf()}, format="multipart"
        )

        assert res.status_code == status.HTTP_400_BAD_REQUEST
        assert not Attachment.objects.exists()

    def test_download_returns_original_name(self, api_client, developer_user, task):
        api_client.force_authenticate(user=developer_user)
        created = api_client.post(
            upload_url(task.id), {"file": pdf()}, format="multipart"
        )

        res = api_client.get(
            reverse("api_v1:attachments-download", kwargs={"pk": created.data["id"]})
        )

        assert res.status_code == status.HTTP_200_OK
        assert 'filename="design.pdf"' in res["Content-Disposition"]
        assert b"".join(res.streaming_content) == b"%PDF-1.4 test"

    def test_only_uploader_or_admin_deletes(
        self,
        api_client,
        developer_user,
        manager_user,
        admin_user,
        task,
        realtime,
        django_capture_on_commit_callbacks,
    ):
        api_client.force_authenticate(user=developer_user)
        created = api_client.post(
            upload_url(task.id), {"file": pdf()}, format="multipart"
        )
        attachment_id = created.data["id"]
        realtime.join("viewer", task.project_id)

        api_client.force_authenticate(user=manager_user)
        assert (
            api_client.delete(detail_url(attachment_id)).status_code
            == status.HTTP_403_FORBIDDEN
        )

        api_client.force_authenticate(user=admin_user)
        with django_capture_on_commit_callbacks(execute=True):
            res = api_client.delete(detail_url(attachment_id))

        assert res.status_code == status.HTTP_204_NO_CONTENT
        assert not Attachment.objects.filter(pk=attachment_id).exists()
        [(event, payload)] = realtime.events_for("viewer")
        assert event == "AttachmentDeleted"
        assert payload == {"attachmentId": attachment_id, "taskId": task.id}

    def test_list_by_task(self, api_client, developer_user, task, project):
        api_client.force_authenticate(user=developer_user)
        mine = api_client.post(upload_url(task.id), {"file": pdf()}, format="multipart")
        other_task = create_task(project, title="Other")
        api_client.post(upload_url(other_task.id), {"file": pdf()}, format="multipart")

        res = api_client.get(reverse("api_v1:attachments-list"), {"task": task.id})

        assert [a["id"] for a in res.data] == [mine.data["id"]]
