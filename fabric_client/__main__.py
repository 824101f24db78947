"""Allow running with ``python -m fabric_client``.

Subcommands
-----------
- ``python -m fabric_client check``      → initialise and connect to the peer
- ``python -m fabric_client init-env``   → generate ``.env`` for a test-network org
"""

from fabric_client.cli import app

app(prog_name="fabric-client")
