"""
Console tracing and masking helpers for fetch_trust.

Request/response panels are printed only when `ClientConfig.debug_print` is
enabled; everything else goes through named loggers.
"""
import json
from typing import Any, Dict, Mapping, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

console = Console(stderr=True)

SENSITIVE_HEADERS = ("authorization", "proxy-authorization", "x-api-key")


def mask_sensitive(value: Optional[str], show_chars: int = 4) -> str:
    """Mask sensitive values for logging."""
    if not value:
        return "<none>"
    if len(value) <= show_chars:
        return "*" * len(value)
    return value[:show_chars] + "***"


def mask_auth_header(value: Optional[str]) -> str:
    """Keep the auth scheme readable, mask the credential."""
    if not value:
        return "<none>"
    scheme, _, credential = value.partition(" ")
    if not credential:
        return mask_sensitive(value)
    return f"{scheme} {mask_sensitive(credential)}"


def mask_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    masked = dict(headers)
    for key in masked:
        if key.lower() in SENSITIVE_HEADERS:
            masked[key] = mask_auth_header(masked[key])
    return masked


def format_body(body: Any) -> str:
    """Format body for pretty printing."""
    if body is None:
        return ""
    if isinstance(body, (dict, list)):
        return json.dumps(body, indent=2, ensure_ascii=False)
    if isinstance(body, bytes):
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError:
            return f"<binary data: {len(body)} bytes>"
        try:
            return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
        except ValueError:
            return text
    return str(body)


def print_panel(content: str, title: Optional[str] = None) -> None:
    console.print(Panel(content, title=title))


def print_syntax_panel(code: str, lexer: str = "json", title: Optional[str] = None) -> None:
    console.print(Panel(Syntax(code, lexer, theme="monokai"), title=title, expand=True))


def print_request(method: str, url: str, headers: Mapping[str, str], body: Optional[bytes]) -> None:
    print_panel(f"[bold cyan]{method}[/bold cyan] {url}", title="[bold blue]Request[/bold blue]")
    console.print("[bold]Headers:[/bold]", mask_headers(headers))
    if body:
        print_syntax_panel(format_body(body), title="[bold]Request Body[/bold]")


def print_response(url: str, status: int, reason: str, body: Optional[bytes]) -> None:
    color = "green" if status == 200 else "red"
    print_panel(
        f"[bold {color}]{status}[/bold {color}] {reason}",
        title=f"[bold blue]Response[/bold blue] ({url})",
    )
    if body:
        print_syntax_panel(format_body(body), title=f"[bold]Response Body[/bold] (URL: {url})")
