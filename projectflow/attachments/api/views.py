import logging
from pathlib import Path

from django.conf import settings
from django.db import transaction
from django.http import FileResponse
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import OpenApiTypes
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser
from rest_framework.parsers import MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from projectflow.attachments.models import Attachment
from projectflow.tasks.models import ProjectTask
from projectflow.users.api.permissions import IsOwnerOrAdmin

from .serializers import AttachmentSerializer

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(
        tags=["Attachments"],
        parameters=[
            OpenApiParameter(
                name="task",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Filter by task ID",
            ),
        ],
    ),
    retrieve=extend_schema(tags=["Attachments"]),
    destroy=extend_schema(tags=["Attachments"]),
    download=extend_schema(tags=["Attachments"]),
)
class AttachmentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    """Task attachments stored on local disk under MEDIA_ROOT.

    - upload: multipart ``file`` for a task (size/extension checked)
    - destroy: uploader or Admin only; the file is removed after commit
    """

    serializer_class = AttachmentSerializer
    permission_classes = [IsAuthenticated, IsOwnerOrAdmin]
    owner_field = "uploaded_by_id"

    def get_queryset(self):
        qs = Attachment.objects.select_related("uploaded_by")
        task_id = self.request.query_params.get("task")
        if task_id and str(task_id).isdigit():
            qs = qs.filter(task_id=int(task_id))
        return qs

    @extend_schema(
        tags=["Attachments"],
        request={
            "multipart/form-data": {
                "type": "object",
                "properties": {"file": {"type": "string", "format": "binary"}},
                "required": ["file"],
            }
        },
        responses={201: AttachmentSerializer},
    )
    @action(
        detail=False,
        methods=["post"],
        url_path=r"upload/(?P<task_id>\d+)",
        parser_classes=[MultiPartParser, FormParser],
    )
    def upload(self, request, task_id=None):
        task = ProjectTask.objects.filter(pk=task_id).first()
        if task is None:
            return Response(
                {"detail": f"Task with ID {task_id} not found"},
                status=status.HTTP_404_NOT_FOUND,
            )

        upload = request.FILES.get("file")
        if not upload or not upload.size:
            return Response(
                {"detail": "No file uploaded"}, status=status.HTTP_400_BAD_REQUEST
            )

        max_size = settings.ATTACHMENT_MAX_SIZE
        if upload.size > max_size:
            return Response(
                {
                    "detail": "File size exceeds maximum allowed size of "
                    f"{max_size // 1024 // 1024}MB"
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        extension = Path(upload.name).suffix.lower()
        if extension not in settings.ATTACHMENT_ALLOWED_EXTENSIONS:
            return Response(
                {"detail": f"File type {extension} is not allowed"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        attachment = Attachment.objects.create(
            file=upload,
            file_name=upload.name,
            content_type=upload.content_type or "",
            file_size=upload.size,
            task=task,
            uploaded_by=request.user,
        )
        logger.info(
            "File uploaded: %s for task %s by user %s",
            attachment.file_name,
            task.pk,
            request.user.pk,
        )
        out = AttachmentSerializer(attachment, context={"request": request}).data
        return Response(out, status=status.HTTP_201_CREATED)

    @action(detail=True)
    def download(self, request, pk=None):
        attachment = self.get_object()
        if not attachment.file or not attachment.file.storage.exists(
            attachment.file.name
        ):
            return Response(
                {"detail": "File not found on server"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return FileResponse(
            attachment.file.open("rb"),
            as_attachment=True,
            filename=attachment.file_name,
            content_type=attachment.content_type or None,
        )

    def perform_destroy(self, instance):
        storage = instance.file.storage
        name = instance.file.name
        instance.delete()
        if name:
            transaction.on_commit(lambda: storage.delete(name))
        logger.info("Attachment %s deleted by user %s", name, self.request.user.pk)
