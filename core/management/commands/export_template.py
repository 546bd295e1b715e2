"""Write a stored dashboard template to a JSON file."""

from __future__ import annotations

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from core.export.template import TemplateType
from core.services import export_stored_template


class Command(BaseCommand):
    """Export a stored template as a Generic or Complete document."""

    help = "Export a stored dashboard template to a JSON file named after its title."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("name", help="Stored template name.")
        parser.add_argument(
            "--output",
            default=".",
            help="Directory the file is written to (default: current directory).",
        )
        parser.add_argument(
            "--complete",
            action="store_true",
            help="Include dataset rows (Complete template). Without it only schemas are exported.",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        name: str = options["name"]
        output_dir = Path(options["output"])
        template_type = TemplateType.COMPLETE if options["complete"] else TemplateType.GENERIC

        if not output_dir.is_dir():
            raise CommandError(f"Output directory does not exist: {output_dir}")

        result = export_stored_template(name, template_type)
        if result is None:
            raise CommandError(f"No stored template named {name!r}.")
        if result.error is not None or result.filename is None or result.content is None:
            raise CommandError(result.error.message if result.error is not None else "Export failed.")

        path = output_dir / result.filename
        try:
            path.write_text(result.content, encoding="utf-8")
        except OSError as exc:
            raise CommandError(f"Failed to write {path}: {exc}") from exc

        self.stdout.write(self.style.SUCCESS(f"Exported {name!r} ({template_type}) to {path}"))
        return None
