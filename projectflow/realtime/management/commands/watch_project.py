import asyncio

from django.core.management.base import BaseCommand
from django.core.management.base import CommandError

from projectflow.realtime.client import ProjectSubscription
from projectflow.realtime.handlers import InvalidationLog
from projectflow.realtime.handlers import ToastLog
from projectflow.realtime.handlers import build_project_handlers

STYLE_FOR_LEVEL = {
    "success": "SUCCESS",
    "info": "HTTP_INFO",
    "warning": "WARNING",
}


class Command(BaseCommand):
    help = "Subscribe to a project's realtime events and print them as toasts"

    def add_arguments(self, parser):
        parser.add_argument("project_id", type=int)
        parser.add_argument("--url", default="http://localhost:8000")
        parser.add_argument("--token", required=True, help="JWT access token")

    def handle(self, *args, **options):
        try:
            asyncio.run(self._watch(options))
        except KeyboardInterrupt:
            self.stdout.write("Stopped")

    async def _watch(self, options):
        project_id = options["project_id"]
        subscription = ProjectSubscription(options["url"], token=options["token"])
        toasts = ToastLog(echo=self._print_toast)
        for event, handler in build_project_handlers(
            project_id, InvalidationLog(), toasts
        ).items():
            subscription.on(event, handler)

        if not await subscription.connect():
            msg = f"Could not connect to {options['url']}"
            raise CommandError(msg)
        try:
            if not await subscription.join_project(project_id):
                msg = f"Could not join project {project_id}"
                raise CommandError(msg)
            self.stdout.write(f"Watching project {project_id}; Ctrl+C to stop")
            while True:
                await asyncio.sleep(3600)
        finally:
            await subscription.disconnect()

    def _print_toast(self, toast):
        style = getattr(self.style, STYLE_FOR_LEVEL.get(toast.level, "NOTICE"))
        self.stdout.write(style(f"[{toast.title}] {toast.message}"))
