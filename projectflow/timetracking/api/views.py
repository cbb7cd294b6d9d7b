from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import OpenApiTypes
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from projectflow.timetracking.models import TimeEntry
from projectflow.users.api.permissions import IsOwnerOrAdmin

from .serializers import StartTimerSerializer
from .serializers import TimeEntrySerializer
from .serializers import UpdateTimeEntrySerializer


@extend_schema_view(
    list=extend_schema(
        tags=["Time Entries"],
        parameters=[
            OpenApiParameter(
                name="task",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Filter by task ID",
            ),
        ],
    ),
    retrieve=extend_schema(tags=["Time Entries"]),
    create=extend_schema(tags=["Time Entries"], request=StartTimerSerializer),
    update=extend_schema(tags=["Time Entries"], request=UpdateTimeEntrySerializer),
    partial_update=extend_schema(
        tags=["Time Entries"], request=UpdateTimeEntrySerializer
    ),
    destroy=extend_schema(tags=["Time Entries"]),
    active=extend_schema(tags=["Time Entries"]),
    stop=extend_schema(tags=["Time Entries"], request=None),
)
class TimeEntryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    """Task timers.

    - create: start a timer for request.user (one running timer per user)
    - stop: close a running timer owned by request.user
    - update: edit the description only
    """

    serializer_class = TimeEntrySerializer
    permission_classes = [IsAuthenticated, IsOwnerOrAdmin]
    owner_field = "user_id"

    def get_queryset(self):
        qs = TimeEntry.objects.select_related("task", "user")
        task_id = self.request.query_params.get("task")
        if task_id and str(task_id).isdigit():
            qs = qs.filter(task_id=int(task_id))
        return qs

    def create(self, request, *args, **kwargs):
        serializer = StartTimerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if TimeEntry.objects.filter(user=request.user, end_time__isnull=True).exists():
            return Response(
                {"detail": "You already have an active timer. Stop it first."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        entry = TimeEntry.objects.create(
            task=serializer.validated_data["task"],
            user=request.user,
            description=serializer.validated_data.get("description", ""),
        )
        out = TimeEntrySerializer(entry, context={"request": request}).data
        return Response(out, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        entry = self.get_object()
        serializer = UpdateTimeEntrySerializer(
            entry, data=request.data, partial=kwargs.get("partial", False)
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(TimeEntrySerializer(entry, context={"request": request}).data)

    def partial_update(self, request, *args, **kwargs):
        kwargs["partial"] = True
        return self.update(request, *args, **kwargs)

    @action(detail=True, methods=["post", "put"])
    def stop(self, request, pk=None):
        entry = self.get_object()
        if entry.user_id != request.user.id:
            return Response(status=status.HTTP_403_FORBIDDEN)
        if not entry.is_running:
            return Response(
                {"detail": "Timer is already stopped"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        entry.stop()
        entry.save(update_fields=["end_time", "duration_minutes"])
        return Response(TimeEntrySerializer(entry, context={"request": request}).data)

    @action(detail=False)
    def active(self, request):
        entry = (
            TimeEntry.objects.select_related("task", "user")
            .filter(user=request.user, end_time__isnull=True)
            .first()
        )
        if entry is None:
            return Response(None)
        return Response(TimeEntrySerializer(entry, context={"request": request}).data)
