"""CLI commands for the Fabric gateway client.

Provides ``fabric-client init-env`` to generate a ``.env`` file for a Fabric
test-network organisation, and ``fabric-client check`` to run the full
initialisation against a live peer and report the result.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from fabric_client.errors import SetupError
from fabric_client.org_setup import OrgSetup, OrgSetupInitializer

app = typer.Typer(help="Fabric gateway client utilities.", no_args_is_help=True)
console = Console()

_DEFAULT_NETWORK_ROOT = Path.home() / "fabric-samples" / "test-network"


# ---------------------------------------------------------------------------
# Test-network layout
# ---------------------------------------------------------------------------


def _org_name_from_domain(org_domain: str) -> str:
    """``org1.example.com`` -> ``Org1``."""
    label = org_domain.split(".", 1)[0]
    return label[:1].upper() + label[1:]


def _test_network_paths(network_root: Path, org_domain: str, user: str, peer: str) -> dict[str, Path]:
    """Return the crypto material locations ``cryptogen`` produces for an org."""
    crypto = network_root / "organizations" / "peerOrganizations" / org_domain
    user_msp = crypto / "users" / f"{user}@{org_domain}" / "msp"
    return {
        "CRYPTO_PATH": crypto,
        "CERT_PATH": user_msp / "signcerts" / "cert.pem",
        "KEY_PATH": user_msp / "keystore",
        "TLS_CERT_PATH": crypto / "peers" / f"{peer}.{org_domain}" / "tls" / "ca.crt",
    }


# ---------------------------------------------------------------------------
# .env rendering
# ---------------------------------------------------------------------------


def _render_env(
    *,
    org_name: str,
    paths: dict[str, Path],
    peer_endpoint: str,
    gateway_peer: str,
    port: int,
) -> str:
    """Render the ``.env`` file contents."""
    return f"""\
# Fabric Gateway Client — Environment Configuration
# Generated by: fabric-client init-env
# See fabric_client/config.py for full documentation of each variable.

# --- Application ---
PORT={port}
ORG_NAME={org_name}
MSP_ID={org_name}MSP

# --- Crypto material ---
CRYPTO_PATH={paths["CRYPTO_PATH"]}
CERT_PATH={paths["CERT_PATH"]}
# Must hold exactly one private key file (or point at the key file itself).
KEY_PATH={paths["KEY_PATH"]}
TLS_CERT_PATH={paths["TLS_CERT_PATH"]}

# --- Peer gateway ---
PEER_ENDPOINT={peer_endpoint}
# Must match a name in the peer's TLS certificate.
GATEWAY_PEER={gateway_peer}
CONNECT_TIMEOUT=10
"""


# ---------------------------------------------------------------------------
# CLI commands
# ---------------------------------------------------------------------------

_force_option = typer.Option(False, "--force", help="Overwrite an existing .env file.")
_org_domain_option = typer.Option("org1.example.com", "--org-domain", help="Organisation domain.")
_user_option = typer.Option("User1", "--user", help="Enrolled user whose credentials to use.")
_peer_option = typer.Option("peer0", "--peer", help="Peer host label inside the org domain.")
_peer_port_option = typer.Option(7051, "--peer-port", help="Peer gateway port.")
_port_option = typer.Option(3000, "--port", help="Application port written as PORT.")
_network_root_option = typer.Option(
    _DEFAULT_NETWORK_ROOT, "--network-root", help="fabric-samples test-network directory."
)
_output_option = typer.Option(Path(".env"), "--output", "-o", help="Where to write the env file.")
_env_file_option = typer.Option(Path(".env"), "--env-file", "-e", help="Env file to load.")


@app.command()
def init_env(
    force: bool = _force_option,
    org_domain: str = _org_domain_option,
    user: str = _user_option,
    peer: str = _peer_option,
    peer_port: int = _peer_port_option,
    port: int = _port_option,
    network_root: Path = _network_root_option,
    output: Path = _output_option,
) -> None:
    """Generate a .env file pointing at a test-network organisation's credentials."""
    if output.exists() and not force:
        console.print(
            f"[bold yellow]⚠  {output} already exists.[/bold yellow]\n"
            "  Run again with [bold]--force[/bold] to overwrite.",
        )
        raise typer.Exit(code=1)

    org_name = _org_name_from_domain(org_domain)
    paths = _test_network_paths(network_root.expanduser(), org_domain, user, peer)
    gateway_peer = f"{peer}.{org_domain}"
    content = _render_env(
        org_name=org_name,
        paths=paths,
        peer_endpoint=f"localhost:{peer_port}",
        gateway_peer=gateway_peer,
        port=port,
    )
    output.write_text(content, encoding="utf-8")

    missing = [name for name, path in paths.items() if not path.exists()]
    rows = [
        f"[bold]File written:[/bold]   {output}",
        f"[bold]Organisation:[/bold]   {org_name} ({org_name}MSP)",
        f"[bold]Peer:[/bold]           {gateway_peer} at localhost:{peer_port}",
        f"[bold]Crypto path:[/bold]    {paths['CRYPTO_PATH']}",
    ]
    if missing:
        rows.append(f"[bold yellow]Not found yet:[/bold yellow]  {', '.join(missing)}")
    console.print(Panel("\n".join(rows), title="init-env summary", border_style="green"))


def _summary(setup: OrgSetup) -> str:
    cfg = setup.config
    identity = setup.gateway.identity
    t = setup.gateway.timeouts
    return "\n".join(
        [
            f"[bold]Organisation:[/bold]  {cfg.org_name} ({identity.msp_id})",
            f"[bold]Endpoint:[/bold]      {cfg.peer_endpoint}",
            f"[bold]Gateway peer:[/bold]  {cfg.gateway_peer}",
            f"[bold]Identity:[/bold]      {identity.certificate.subject.rfc4514_string()}",
            f"[bold]Timeouts:[/bold]      evaluate {t.evaluate:g}s, endorse {t.endorse:g}s,"
            f" submit {t.submit:g}s, commit status {t.commit_status:g}s",
        ]
    )


@app.command()
def check(env_file: Path = _env_file_option) -> None:
    """Load credentials, connect to the peer gateway, and report the result."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    initializer = OrgSetupInitializer(env_file)
    try:
        setup = initializer.initialize()
    except SetupError as exc:
        console.print(f"[bold red]✘[/bold red] {type(exc).__name__}: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    try:
        console.print(Panel(_summary(setup), title="Gateway ready", border_style="green"))
    finally:
        initializer.close()
