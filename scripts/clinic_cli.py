#!/usr/bin/env python3
"""Interactive terminal front end for the clinic records API."""

import shlex
import sys
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from clinic.client import ClinicClient
from clinic.errors import ClinicError


class ClinicCLI:
    """Interactive screens for searching, registering and viewing patients."""

    def __init__(self, base_url: str = "http://localhost:5000"):
        """Initialize clinic CLI."""
        self.base_url = base_url
        self.console = Console()
        self.client = ClinicClient(base_url)

    def start(self) -> None:
        """Start the interactive session."""
        self.console.print(
            Panel.fit(
                "[bold blue]🏥 Clinic Management System[/bold blue]\n"
                "Search, register and view patients and their visits.\n"
                "Type /help for the list of commands.",
                border_style="blue",
            )
        )

        # Test connection
        if not self._test_connection():
            self.console.print(f"[red]❌ Cannot connect to the clinic API at {self.base_url}.[/red]")
            return

        self.console.print("[green]✅ Connected to clinic API[/green]\n")
        self._show_patients()

        try:
            while True:
                user_input = Prompt.ask("\n[bold cyan]clinic[/bold cyan]").strip()
                if not user_input:
                    continue

                try:
                    command, *args = shlex.split(user_input)
                except ValueError as e:
                    self.console.print(f"[red]❌ Cannot parse command: {e}[/red]")
                    continue
                command = command.lower()

                if command in ["/quit", "/exit", "quit", "exit"]:
                    break

                try:
                    self._dispatch(command, args)
                except ClinicError as e:
                    self.console.print(f"[red]❌ {type(e).__name__}: {e}[/red]")

        except KeyboardInterrupt:
            pass
        finally:
            self.console.print("\n[yellow]👋 Goodbye![/yellow]")
            self.client.close()

    def _dispatch(self, command: str, args: list[str]) -> None:
        if command == "/help":
            self._show_help()
        elif command in ["/list", "/search"]:
            self._show_patients(" ".join(args) or None)
        elif command == "/add":
            self._add_patient()
        elif command == "/show" and args:
            self._show_patient(args[0])
        elif command == "/visit" and args:
            self._add_visit(args[0])
        elif command == "/delete" and args:
            self._delete_patient(args[0])
        elif command == "/delete-visit" and len(args) == 2:
            self._delete_visit(args[0], args[1])
        elif command == "/export":
            self._export(args[0] if args else None)
        else:
            self.console.print("[yellow]Unknown command or missing arguments. Type /help.[/yellow]")

    def _test_connection(self) -> bool:
        """Test connection to the service."""
        try:
            return self.client.health().get("status") == "healthy"
        except ClinicError:
            return False

    def _show_patients(self, search: str | None = None) -> None:
        patients = self.client.list_patients(search)

        table = Table(title=f"Patients matching '{search}'" if search else "Patients")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Phone")
        table.add_column("Address")
        for patient in patients:
            table.add_row(patient.id, patient.name, patient.phone, patient.address or "No address provided")

        self.console.print(table)

    def _show_patient(self, patient_id: str) -> None:
        details = self.client.get_patient_with_visits(patient_id)
        patient = details.patient

        self.console.print(
            Panel(
                f"[bold]Phone:[/bold] {patient.phone}\n[bold]Address:[/bold] {patient.address or 'Not provided'}",
                title=f"[bold green]{patient.name}[/bold green]",
                border_style="green",
            )
        )

        table = Table(title="Visit History")
        table.add_column("ID", style="dim")
        table.add_column("Date")
        table.add_column("Disease", style="bold")
        table.add_column("Medication")
        for visit in details.visits:
            table.add_row(visit.id, visit.date.isoformat(), visit.disease, visit.medication or "-")

        self.console.print(table)

    def _add_patient(self) -> None:
        name = Prompt.ask("Name")
        phone = Prompt.ask("Phone")
        address = Prompt.ask("Address", default="")

        patient = self.client.create_patient(name, phone, address or None)
        self.console.print(f"[green]✅ Added {patient.name} ({patient.id})[/green]")
        self._show_patients()

    def _add_visit(self, patient_id: str) -> None:
        disease = Prompt.ask("Disease")
        medication = Prompt.ask("Medication", default="")
        visit_date = Prompt.ask("Date", default=date.today().isoformat())

        self.client.add_visit(patient_id, disease, medication or None, visit_date)
        self.console.print("[green]✅ Visit added[/green]")
        self._show_patient(patient_id)

    def _delete_patient(self, patient_id: str) -> None:
        patient = self.client.get_patient_with_visits(patient_id).patient
        if not Confirm.ask(f"Delete {patient.name}? This action cannot be undone"):
            return

        deleted_visits = self.client.delete_patient(patient_id)
        self.console.print(f"[green]✅ Patient deleted along with {deleted_visits} visits[/green]")
        self._show_patients()

    def _delete_visit(self, patient_id: str, visit_id: str) -> None:
        self.client.delete_visit(patient_id, visit_id)
        self.console.print("[green]✅ Visit deleted[/green]")
        self._show_patient(patient_id)

    def _export(self, filename: str | None) -> None:
        report = self.client.export_patients()
        path = Path(filename or f"patient_details_{date.today().isoformat()}.txt")
        path.write_text(report, encoding="utf-8")
        self.console.print(f"[green]✅ Patient details written to {path}[/green]")

    def _show_help(self) -> None:
        """Show help information."""
        help_text = """
[bold]Available Commands:[/bold]
• /list [term] - List patients, optionally searching name or phone
• /add - Register a new patient
• /show <patient_id> - Show a patient and their visit history
• /visit <patient_id> - Add a visit to a patient
• /delete <patient_id> - Delete a patient and all their visits
• /delete-visit <patient_id> <visit_id> - Delete one visit
• /export [file] - Download all patient details to a text file
• /quit or /exit - Exit
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]❓ Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the clinic CLI."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:5000"

    cli = ClinicCLI(base_url)
    cli.start()


if __name__ == "__main__":
    main()
