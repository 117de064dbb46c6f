"""Providers command."""

from rich.table import Table

from . import app
from ._common import out
from ..detection.providers import FUNCTION_CALL, STRUCT_EVENT, default_registry


@app.command()
def providers():
    """List the built-in analytics providers and the call shapes they match."""
    table = Table(title="Supported providers")
    table.add_column("Provider", style="cyan", no_wrap=True)
    table.add_column("Call shape")
    table.add_column("Event arg", justify="right")
    table.add_column("Properties arg", justify="right")

    for desc in default_registry():
        if desc.kind == FUNCTION_CALL:
            prefix = f"'{desc.command}', " if desc.command else ""
            shape = f"{desc.function_name}({prefix}...)"
        else:
            shape = " / ".join(f"{obj}.{desc.method_name}(...)" for obj in desc.object_names)
        if desc.extraction == STRUCT_EVENT:
            event_arg, props_arg = "action", "struct"
        else:
            event_arg = str(desc.event_arg)
            props_arg = "-" if desc.properties_arg is None else str(desc.properties_arg)
        table.add_row(desc.name, shape, event_arg, props_arg)

    table.add_row("gtm", "dataLayer.push({event: ...})", "event", "object")
    out.print(table)
