from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import viewsets

from projectflow.tasks.models import ProjectTask
from projectflow.users.api.permissions import IsDeveloperCanWrite
from projectflow.users.api.permissions import IsProjectManagerCanWrite

from .filters import TaskFilter
from .serializers import TaskSerializer


@extend_schema_view(
    list=extend_schema(tags=["Tasks"]),
    retrieve=extend_schema(tags=["Tasks"]),
    create=extend_schema(tags=["Tasks"]),
    update=extend_schema(tags=["Tasks"]),
    partial_update=extend_schema(tags=["Tasks"]),
    destroy=extend_schema(tags=["Tasks"]),
)
class TaskViewSet(viewsets.ModelViewSet):
    """Project tasks.

    Every successful create/update/destroy is broadcast to the task's project
    group once the transaction commits (see ``projectflow.tasks.signals``).
    """

    serializer_class = TaskSerializer
    filterset_class = TaskFilter
    queryset = ProjectTask.objects.select_related("assigned_to", "project")

    def get_permissions(self):
        if self.action == "destroy":
            return [IsProjectManagerCanWrite()]
        return [IsDeveloperCanWrite()]
