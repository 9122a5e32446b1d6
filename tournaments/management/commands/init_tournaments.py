"""Apply pending migrations and seed baseline data into an empty store."""

from django.core.management import call_command
from django.core.management.base import BaseCommand, CommandError

from tournaments import conf
from tournaments.services.seeding import seed_data


class Command(BaseCommand):
    help = "Migrate the database and load baseline tournaments if it is empty"

    def add_arguments(self, parser):
        parser.add_argument(
            "--skip-migrate",
            action="store_true",
            help="Do not run pending migrations first",
        )
        parser.add_argument(
            "--no-seed",
            action="store_true",
            help="Only migrate, never seed",
        )

    def handle(self, *args, **options):
        verbosity = options.get("verbosity", 1)
        if not options["skip_migrate"]:
            call_command("migrate", interactive=False, verbosity=max(verbosity - 1, 0))

        if options["no_seed"] or not conf.SEED_ON_INIT:
            self.stdout.write("Seeding disabled")
            return

        result = seed_data()
        if not result.succeeded:
            raise CommandError(result.detail)
        if result.value:
            self.stdout.write(self.style.SUCCESS("Seed data loaded"))
        else:
            self.stdout.write("Seed data already loaded")
