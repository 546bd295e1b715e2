"""Validate a template file and store it under a name."""

from __future__ import annotations

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from core.services import import_and_store


class Command(BaseCommand):
    """Import a dashboard template document into template storage."""

    help = "Validate a dashboard template JSON file and store it (idempotent; replaces an existing name)."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("path", help="Path to the template JSON file.")
        parser.add_argument("--name", required=True, help="Name to store the template under.")
        parser.add_argument(
            "--check",
            action="store_true",
            help="Dry-run: validate and report without writing.",
        )
        parser.add_argument(
            "--write",
            action="store_true",
            help="Write the template to storage.",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        check: bool = options["check"]
        write: bool = options["write"]
        if check and write:
            raise CommandError("Use either --check or --write, not both.")
        if not check and not write:
            raise CommandError("Refusing to write without explicit intent; pass --check or --write.")

        path = Path(options["path"])
        try:
            json_text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CommandError(f"Failed to read {path}: {exc}") from exc

        result, saved = import_and_store(json_text, path.name, options["name"], write=write)
        if result.error is not None:
            for issue in result.error.issues:
                self.stderr.write(str(issue))
            raise CommandError(result.error.message)

        for issue in result.warnings:
            self.stdout.write(self.style.WARNING(str(issue)))
        for fix in result.fixes:
            self.stdout.write(f"Fixed: {fix}")

        if check:
            self.stdout.write(self.style.SUCCESS(f"{path.name} is a valid template (no changes written)."))
            return None
        if saved is None or saved.error is not None:
            raise CommandError(saved.error.message if saved is not None and saved.error is not None else "Save failed.")
        self.stdout.write(self.style.SUCCESS(f"Stored {path.name} as {options['name']!r}."))
        return None
