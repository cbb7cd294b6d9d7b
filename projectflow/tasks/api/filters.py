import django_filters

from projectflow.tasks.models import ProjectTask


class TaskFilter(django_filters.FilterSet):
    project = django_filters.NumberFilter(field_name="project_id")
    assigned_to = django_filters.NumberFilter(field_name="assigned_to_id")
    status = django_filters.TypedChoiceFilter(
        choices=ProjectTask.Status.choices, coerce=int
    )
    priority = django_filters.TypedChoiceFilter(
        choices=ProjectTask.Priority.choices, coerce=int
    )

    class Meta:
        model = ProjectTask
        fields = ["project", "assigned_to", "status", "priority"]
