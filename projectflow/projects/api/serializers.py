from __future__ import annotations

from typing import Any

from rest_framework import serializers

from projectflow.projects.models import Project
from projectflow.tasks.api.serializers import TaskSerializer


class ProjectSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(
        source="created_by.display_name", read_only=True
    )
    task_count = serializers.SerializerMethodField()
    completed_task_count = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = (
            "id",
            "name",
            "description",
            "status",
            "start_date",
            "end_date",
            "created_by",
            "created_by_name",
            "created_at",
            "updated_at",
            "task_count",
            "completed_task_count",
        )
        read_only_fields = ("id", "created_by", "created_at", "updated_at")

    def get_task_count(self, obj: Project) -> int:
        annotated = getattr(obj, "task_count", None)
        if annotated is not None:
            return int(annotated)
        return obj.tasks.count()

    def get_completed_task_count(self, obj: Project) -> int:
        annotated = getattr(obj, "completed_task_count", None)
        if annotated is not None:
            return int(annotated)
        return obj.tasks.filter(status=obj.tasks.model.Status.DONE).count()

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end <= start:
            msg = "End date must be after start date"
            raise serializers.ValidationError({"end_date": msg})
        return attrs


class ProjectWithTasksSerializer(ProjectSerializer):
    tasks = TaskSerializer(many=True, read_only=True)

    class Meta(ProjectSerializer.Meta):
        fields = (*ProjectSerializer.Meta.fields, "tasks")
