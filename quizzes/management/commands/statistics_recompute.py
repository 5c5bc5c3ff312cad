from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from quizzes.statistics_services import recompute_many


class Command(BaseCommand):
    help = "Rebuild per-user attempt count and average score from completed quiz attempts."

    def add_arguments(self, parser) -> None:
        parser.add_argument("--all", action="store_true", help="Rebuild statistics for every user.")
        parser.add_argument(
            "--user",
            action="append",
            default=[],
            help="Username to rebuild. Can be provided multiple times.",
        )

    def handle(self, *args, **options):
        usernames = sorted({str(item).strip() for item in options.get("user") or [] if str(item).strip()})
        if options.get("all"):
            processed = recompute_many()
        elif usernames:
            known = set(
                get_user_model().objects.filter(username__in=usernames).values_list("username", flat=True)
            )
            unknown = [name for name in usernames if name not in known]
            if unknown:
                raise CommandError(f"Unknown user(s): {', '.join(unknown)}")
            processed = recompute_many(usernames=usernames)
        else:
            raise CommandError("Provide --all or at least one --user")

        self.stdout.write(self.style.SUCCESS(f"Rebuilt statistics for {processed} user(s)."))
