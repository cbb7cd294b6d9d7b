from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from projectflow.attachments.api.views import AttachmentViewSet
from projectflow.projects.api.views import ProjectViewSet
from projectflow.tasks.api.views import TaskViewSet
from projectflow.timetracking.api.views import TimeEntryViewSet
from projectflow.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet)
router.register("projects", ProjectViewSet, basename="projects")
router.register("tasks", TaskViewSet, basename="tasks")
router.register("time-entries", TimeEntryViewSet, basename="time-entries")
router.register("attachments", AttachmentViewSet, basename="attachments")


app_name = "api"
urlpatterns = router.urls
