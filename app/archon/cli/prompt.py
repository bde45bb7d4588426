"""Interactive answers to snapshot decisions.

Renders a DecisionRequest with Rich and reads the answer through
typer.confirm.
"""

import typer

from archon.snapshot.decisions import DecisionRequest
from archon.utils.formatting import console, create_entry_table, format_entry_row


class TyperConfirm:
    """Ask decision requests on the terminal.

    The request's message and entries are printed before the question;
    pressing enter selects the request's default.
    """

    def __call__(self, request: DecisionRequest) -> bool:
        if request.message:
            console.print(f"\n[warning]{request.message}[/]")
        if request.entries:
            table = create_entry_table(title="")
            for entry in request.entries:
                table.add_row(*format_entry_row(entry))
            console.print(table)

        try:
            return typer.confirm(request.question, default=request.default)
        except typer.Abort as e:
            raise EOFError("No answer was given") from e
