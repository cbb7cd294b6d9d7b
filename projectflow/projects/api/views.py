from django.db.models import Count
from django.db.models import Q
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from projectflow.projects.models import Project
from projectflow.tasks.models import ProjectTask
from projectflow.users.api.permissions import IsProjectManagerCanWrite

from .serializers import ProjectSerializer
from .serializers import ProjectWithTasksSerializer


@extend_schema_view(
    list=extend_schema(tags=["Projects"]),
    retrieve=extend_schema(tags=["Projects"]),
    create=extend_schema(tags=["Projects"]),
    update=extend_schema(tags=["Projects"]),
    partial_update=extend_schema(tags=["Projects"]),
    destroy=extend_schema(tags=["Projects"]),
    with_tasks=extend_schema(tags=["Projects"]),
)
class ProjectViewSet(viewsets.ModelViewSet):
    """Active projects.

    - update / partial_update: broadcast ``ProjectUpdated`` to the project group
    - destroy: soft delete (``is_active=False``), no realtime event
    """

    serializer_class = ProjectSerializer
    permission_classes = [IsProjectManagerCanWrite]

    def get_queryset(self):
        return (
            Project.objects.filter(is_active=True)
            .select_related("created_by")
            .annotate(
                task_count=Count("tasks"),
                completed_task_count=Count(
                    "tasks", filter=Q(tasks__status=ProjectTask.Status.DONE)
                ),
            )
        )

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def destroy(self, request, *args, **kwargs):
        project = self.get_object()
        # Queryset update keeps the soft delete out of post_save.
        Project.objects.filter(pk=project.pk).update(is_active=False)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, url_path="with-tasks")
    def with_tasks(self, request, pk=None):
        project = self.get_object()
        serializer = ProjectWithTasksSerializer(project, context={"request": request})
        return Response(serializer.data)
