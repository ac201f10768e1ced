"""
systemd service installation for unattended monitoring.

Renders a unit that runs the monitor command for a fixed domain list and
installs it with systemctl.
"""

import getpass
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Optional

from .exceptions import DependencyMissingError


SERVICE_NAME = "cloudflare-dns-toggle.service"
DEFAULT_UNIT_PATH = Path("/etc/systemd/system") / SERVICE_NAME

UNIT_TEMPLATE = """\
[Unit]
Description=Cloudflare DNS Proxy Auto-Toggle
After=network.target

[Service]
Type=simple
User={user}
WorkingDirectory={working_directory}
ExecStart={exec_start}
Restart=always
RestartSec=10

[Install]
WantedBy=multi-user.target
"""


def render_unit(
    domains: list[str],
    working_directory: Path,
    executable: str,
    user: Optional[str] = None,
    env_file: Optional[Path] = None,
) -> str:
    """
    Render the systemd unit file.

    Args:
        domains: Domains passed to the monitor command
        working_directory: Directory the service runs in
        executable: Absolute path of the cloudflare-dns-toggle executable
        user: Account the service runs as (defaults to the current user)
        env_file: Env file passed with --env-file

    Returns:
        Unit file content
    """
    args = [executable, "monitor"]
    if env_file is not None:
        args += ["--env-file", str(env_file)]
    args += domains

    return UNIT_TEMPLATE.format(
        user=user or getpass.getuser(),
        working_directory=working_directory,
        exec_start=shlex.join(args),
    )


def install_service(
    unit_content: str,
    unit_path: Path = DEFAULT_UNIT_PATH,
    run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> Path:
    """
    Write the unit file and enable and start the service.

    Raises:
        DependencyMissingError: If systemctl is not available
        subprocess.CalledProcessError: If a systemctl command fails
        OSError: If the unit file cannot be written
    """
    systemctl = which("systemctl")
    if systemctl is None:
        raise DependencyMissingError(
            code="missing_dependency",
            message="Missing dependencies: systemctl",
            details={"dependencies": ["systemctl"]},
        )

    unit_path.parent.mkdir(parents=True, exist_ok=True)
    unit_path.write_text(unit_content, encoding="utf-8")

    run([systemctl, "daemon-reload"], check=True)
    run([systemctl, "enable", unit_path.name], check=True)
    run([systemctl, "start", unit_path.name], check=True)

    return unit_path
