from __future__ import annotations

from typing import Any

from django.utils import timezone
from rest_framework import serializers

from projectflow.projects.models import Project
from projectflow.tasks.models import ProjectTask


class TaskSerializer(serializers.ModelSerializer):
    project = serializers.PrimaryKeyRelatedField(
        queryset=Project.objects.filter(is_active=True)
    )
    assigned_to_name = serializers.SerializerMethodField()

    class Meta:
        model = ProjectTask
        fields = (
            "id",
            "title",
            "description",
            "status",
            "priority",
            "project",
            "assigned_to",
            "assigned_to_name",
            "due_date",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")

    def get_assigned_to_name(self, obj: ProjectTask) -> str | None:
        if obj.assigned_to is None:
            return None
        return obj.assigned_to.display_name

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Task title is required"
            raise serializers.ValidationError(msg)
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        due_date = attrs.get("due_date")
        if self.instance is None and due_date and due_date <= timezone.now():
            msg = "Due date must be in the future"
            raise serializers.ValidationError({"due_date": msg})
        if self.instance is not None and "project" in attrs:
            if attrs["project"].pk != self.instance.project_id:
                msg = "Tasks cannot be moved between projects."
                raise serializers.ValidationError({"project": msg})
        return attrs
