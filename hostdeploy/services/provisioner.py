"""
Provisioner

Drives one remote host through the deployment steps, in order:

    1. reset_directory      wipe and recreate the application directory
    2. sync_source          pull if a git tree exists, otherwise clone
    3. install_dependencies docker, compose tool, nginx (host topology)
    4. render_configs       upload compose and nginx descriptors
    5. recreate_containers  replace any previous deployment
    6. activate_proxy       nginx -t, then reload only if it passed
    7. validate_deployment  docker ps + HTTP probe (informational)

Any failure in steps 1-6 raises and aborts the run. Step 7 never raises.
cleanup() tears down everything the steps above created.
"""

import posixpath
import shlex
from typing import List, Optional, Sequence

from hostdeploy.constants import (
    BASE_PACKAGES,
    COMPOSE_COMMAND,
    DOCKER_SOCKET,
    NGINX_SITES_AVAILABLE,
    NGINX_SITES_ENABLED,
    PROBE_URL,
    PROXY_PACKAGES,
)
from hostdeploy.exceptions import HostDeployError, ProvisionError, ProxyValidationError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.results import (
    CleanupOutcome,
    DeploymentOutcome,
    RemoteState,
    RenderedConfig,
    SSHResult,
    SyncAction,
    ValidationReport,
)
from hostdeploy.models.target import ContainerRuntime, DeploymentTarget, ProxyTopology
from hostdeploy.services.config_renderer import ConfigRenderer
from hostdeploy.services.remote_inspector import RemoteInspector
from hostdeploy.services.ssh_service import SSHService
from hostdeploy.utils import authenticated_url

# Lines of output kept in error context
ERROR_CONTEXT_LINES = 20


class Provisioner:
    """Idempotent, strictly sequential provisioning of a single host."""

    def __init__(
        self,
        target: DeploymentTarget,
        ssh_service: SSHService,
        logger: Optional[DeployLogger] = None,
        renderer: Optional[ConfigRenderer] = None,
        inspector: Optional[RemoteInspector] = None,
    ):
        self.target = target
        self.ssh = ssh_service
        self.logger = logger
        self.renderer = renderer or ConfigRenderer(target)
        self.inspector = inspector or RemoteInspector(ssh_service)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def _dir(self) -> str:
        return shlex.quote(self.target.remote_dir)

    @property
    def _site_name(self) -> str:
        return self.target.container_name

    @property
    def _site_available(self) -> str:
        return posixpath.join(NGINX_SITES_AVAILABLE, self._site_name)

    @property
    def _site_enabled(self) -> str:
        return posixpath.join(NGINX_SITES_ENABLED, self._site_name)

    @property
    def _site_backup(self) -> str:
        return f"{self._site_available}.bak"

    def _step(self, name: str) -> None:
        if self.logger:
            self.logger.step(name)

    def _success(self, message: str) -> None:
        if self.logger:
            self.logger.success(message)

    def _warning(self, message: str) -> None:
        if self.logger:
            self.logger.warning(message)

    @staticmethod
    def _context(result: SSHResult) -> str:
        text = result.stderr.strip() or result.stdout.strip()
        return "\n".join(text.splitlines()[-ERROR_CONTEXT_LINES:])

    def _run(self, step: str, description: str, lines: Sequence[str]) -> SSHResult:
        """Run a batch; any failure aborts the run."""
        result = self.ssh.run_script(lines)
        if result.is_failure:
            raise ProvisionError(
                step,
                f"{description} failed (exit {result.returncode})",
                context=self._context(result),
            )
        return result

    def _run_ignoring(self, description: str, lines: Sequence[str]) -> bool:
        """Run a batch whose failure is expected in the common case."""
        result = self.ssh.run_script(lines)
        if result.is_failure:
            self._warning(f"{description} failed (ignored)")
            return False
        return True

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def reset_directory(self) -> None:
        """Step 1: remove and recreate the application directory."""
        user = shlex.quote(self.target.ssh_user)
        self._step("Preparing remote directory")
        self._run(
            "reset",
            "Directory reset",
            [
                f"sudo rm -rf {self._dir}",
                f"sudo mkdir -p {self._dir}",
                f"sudo chown -R {user}:{user} {self._dir}",
            ],
        )
        self._success("Remote directory ready")

    def sync_source(self) -> SyncAction:
        """Step 2: pull when a working tree exists, otherwise clone fresh."""
        branch = shlex.quote(self.target.branch)
        self._step("Syncing repository")

        state = self.inspector.repository(self.target.remote_dir)

        if state is RemoteState.PRESENT:
            if self.logger:
                self.logger.log("Repository exists, pulling latest changes")
            self._run(
                "sync",
                "git pull",
                [f"cd {self._dir}", f"git pull origin {branch}"],
            )
            self._success(f"Repository updated ({self.target.branch})")
            return SyncAction.PULLED

        url = authenticated_url(self.target.repo_url, self.target.auth_token)
        self._run(
            "sync",
            "git clone",
            [
                f"mkdir -p {self._dir}",
                f"cd {self._dir}",
                f"git clone -b {branch} {shlex.quote(url)} .",
            ],
        )
        self._success(f"Repository cloned ({self.target.branch})")
        return SyncAction.CLONED

    def install_dependencies(self) -> None:
        """Step 3: make sure docker, compose and (host topology) nginx are installed."""
        user = shlex.quote(self.target.ssh_user)
        host_proxy = self.target.topology is ProxyTopology.HOST
        packages = BASE_PACKAGES + (PROXY_PACKAGES if host_proxy else [])

        self._step("Installing dependencies")

        lines = [
            "sudo apt-get update -y",
            "sudo DEBIAN_FRONTEND=noninteractive apt-get install -y "
            + " ".join(packages),
            "sudo systemctl enable docker",
            "sudo systemctl start docker",
        ]
        if host_proxy:
            lines += ["sudo systemctl enable nginx", "sudo systemctl start nginx"]

        lines += [
            f"sudo usermod -aG docker {user}",
            f"sudo chown root:docker {DOCKER_SOCKET} || true",
            f"sudo chmod 660 {DOCKER_SOCKET} || true",
            "docker --version",
        ]
        if self.target.runtime is ContainerRuntime.COMPOSE:
            lines.append(f"{COMPOSE_COMMAND} --version")

        self._run("dependencies", "Dependency installation", lines)
        self._success("Dependencies installed")

    def render_configs(self) -> RenderedConfig:
        """Step 4: write the compose and proxy descriptors to the remote host."""
        self._step("Writing configuration")
        rendered = self.renderer.render()

        for path, content in (
            (rendered.compose_path, rendered.compose_file),
            (rendered.proxy_path, rendered.proxy_file),
        ):
            result = self.ssh.upload_text(path, content)
            if result.is_failure:
                raise ProvisionError(
                    "render", f"Could not write {path}", context=self._context(result)
                )
            self._success(f"Wrote {path}")

        return rendered

    def recreate_containers(self) -> bool:
        """
        Step 5: replace any previous deployment with a fresh one.

        Returns:
            True if a container with the reserved name existed beforehand
        """
        name = self.target.container_name
        self._step("Deploying containers")

        if self.target.runtime is ContainerRuntime.DOCKER_RUN:
            image = shlex.quote(name.lower())
            port = self.target.app_port
            self._run(
                "containers",
                "docker build",
                [f"cd {self._dir}", f"docker build -t {image} ."],
            )

            state = self.inspector.container(name)
            if state is RemoteState.PRESENT:
                if self.logger:
                    self.logger.log(f"Removing existing container {name}")
                self._run(
                    "containers",
                    "Container removal",
                    [f"docker rm -f {shlex.quote(name)}"],
                )

            self._run(
                "containers",
                "docker run",
                [
                    f"docker run -d --name {shlex.quote(name)} "
                    f"--restart unless-stopped -p {port}:{port} {image}"
                ],
            )
            self._success(f"Container {name} started")
            return state is RemoteState.PRESENT

        state = self.inspector.container(name)

        # "down" on a stack that never existed is not a failure
        self._run_ignoring(
            "Stopping previous stack",
            [f"cd {self._dir}", f"{COMPOSE_COMMAND} down"],
        )
        self._run(
            "containers",
            "Compose up",
            [f"cd {self._dir}", f"{COMPOSE_COMMAND} up -d --build"],
        )
        self._success("Containers deployed")
        return state is RemoteState.PRESENT

    def activate_proxy(self) -> None:
        """
        Step 6: validate the proxy config; reload only if it is valid.

        HOST topology: the running nginx keeps serving the previous site
        until the new one passes `nginx -t`.
        CONTAINER topology: the nginx container was already recreated with
        the new config by step 5, so a failed check aborts the run but the
        previous proxy is gone by then.
        """
        self._step("Activating reverse proxy")

        if self.target.topology is ProxyTopology.HOST:
            self._activate_host_proxy()
        else:
            self._activate_container_proxy()

        self._success("Reverse proxy reloaded")

    def _activate_host_proxy(self) -> None:
        site = shlex.quote(self._site_available)
        enabled = shlex.quote(self._site_enabled)
        backup = shlex.quote(self._site_backup)
        source = shlex.quote(self.renderer.proxy_path)

        self._run(
            "proxy",
            "Installing site config",
            [
                f"if [ -f {site} ]; then sudo cp -f {site} {backup}; "
                f"else sudo rm -f {backup}; fi",
                f"sudo cp {source} {site}",
                f"sudo ln -sf {site} {enabled}",
            ],
        )

        check = self.ssh.execute_command("sudo nginx -t")
        if check.is_failure:
            # Put the previous site back; the running nginx was never reloaded
            self._run_ignoring(
                "Restoring previous site config",
                [
                    f"if [ -f {backup} ]; then sudo mv -f {backup} {site}; "
                    f"else sudo rm -f {site} {enabled}; fi"
                ],
            )
            raise ProxyValidationError(check.output)

        self._run(
            "proxy",
            "nginx reload",
            [
                f"sudo rm -f {backup}",
                f"sudo rm -f {shlex.quote(posixpath.join(NGINX_SITES_ENABLED, 'default'))}",
                "sudo systemctl reload nginx",
            ],
        )

    def _activate_container_proxy(self) -> None:
        proxy = shlex.quote(self.target.proxy_container_name)

        check = self.ssh.execute_command(f"docker exec {proxy} nginx -t")
        if check.is_failure:
            raise ProxyValidationError(check.output)

        self._run("proxy", "nginx reload", [f"docker exec {proxy} nginx -s reload"])

    def validate_deployment(self) -> ValidationReport:
        """Step 7: list containers and probe the proxy. Never raises."""
        self._step("Validating deployment")
        report = ValidationReport()

        try:
            containers = self.ssh.execute_command("docker ps")
            report.containers = containers.stdout
            if containers.is_failure:
                self._warning("Could not list containers")

            probe = self.ssh.execute_command(f"curl -sS -I {PROBE_URL}")
            report.probe_output = probe.output
            report.probe_ok = probe.is_success
        except HostDeployError as e:
            self._warning(f"Validation skipped: {e.message}")
            return report

        if report.probe_ok:
            self._success(f"{PROBE_URL} responded")
        else:
            self._warning(f"{PROBE_URL} did not respond")

        return report

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def deploy(self) -> DeploymentOutcome:
        """
        Run every step in order.

        Returns:
            DeploymentOutcome describing what happened

        Raises:
            ProvisionError: If any of steps 1-6 fails
            SSHError: If the host cannot be reached
        """
        if self.target.reset_workdir:
            self.reset_directory()
        elif self.logger:
            self.logger.log("Keeping existing working tree (reset disabled)")

        action = self.sync_source()
        self.install_dependencies()
        self.render_configs()
        replaced = self.recreate_containers()
        self.activate_proxy()
        report = self.validate_deployment()

        return DeploymentOutcome(
            host=self.target.server_address,
            url=self.target.public_url,
            sync_action=action,
            replaced_container=replaced,
            report=report,
        )

    def cleanup(self) -> CleanupOutcome:
        """
        Remove containers, images, the app directory and proxy config.

        Raises:
            ProvisionError: If the app directory or proxy config cannot be removed
        """
        outcome = CleanupOutcome(host=self.target.server_address)
        name = shlex.quote(self.target.container_name)

        self._step("Stopping containers")
        if self.target.runtime is ContainerRuntime.DOCKER_RUN:
            stopped = self._run_ignoring("Container removal", [f"docker rm -f {name}"])
        else:
            stopped = self._run_ignoring(
                "Stopping stack", [f"cd {self._dir}", f"{COMPOSE_COMMAND} down"]
            )
        if not stopped:
            outcome.warnings.append("No running stack to stop")

        if not self._run_ignoring(
            "Pruning docker resources", ["docker system prune -af --volumes"]
        ):
            outcome.warnings.append("docker system prune failed")

        self._step("Removing files")
        self._run("cleanup", "Directory removal", [f"sudo rm -rf {self._dir}"])
        outcome.removed_paths.append(self.target.remote_dir)

        if self.target.topology is ProxyTopology.HOST:
            self._remove_host_site(outcome)

        self._success("All resources removed")
        return outcome

    def _remove_host_site(self, outcome: CleanupOutcome) -> None:
        paths: List[str] = [self._site_available, self._site_enabled, self._site_backup]
        self._run(
            "cleanup",
            "Site config removal",
            ["sudo rm -f " + " ".join(shlex.quote(p) for p in paths)],
        )
        outcome.removed_paths.extend(paths[:2])

        check = self.ssh.execute_command("sudo nginx -t")
        if check.is_failure:
            self._warning("nginx config invalid after removal, not reloaded")
            outcome.warnings.append("nginx not reloaded")
            return

        self._run("cleanup", "nginx reload", ["sudo systemctl reload nginx"])
