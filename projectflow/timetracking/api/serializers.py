from rest_framework import serializers

from projectflow.tasks.models import ProjectTask
from projectflow.timetracking.models import TimeEntry


class TimeEntrySerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source="user.display_name", read_only=True)
    task_title = serializers.CharField(source="task.title", read_only=True)

    class Meta:
        model = TimeEntry
        fields = (
            "id",
            "task",
            "task_title",
            "user",
            "user_name",
            "start_time",
            "end_time",
            "duration_minutes",
            "description",
            "created_at",
        )
        read_only_fields = (
            "id",
            "user",
            "start_time",
            "end_time",
            "duration_minutes",
            "created_at",
        )


class StartTimerSerializer(serializers.Serializer):
    task = serializers.PrimaryKeyRelatedField(queryset=ProjectTask.objects.all())
    description = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )


class UpdateTimeEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = TimeEntry
        fields = ("description",)
