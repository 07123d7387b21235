"""Tests for the provisioning procedure, run against a scripted fake host."""

import pytest

from hostdeploy.exceptions import ProvisionError, ProxyValidationError
from hostdeploy.models.results import SyncAction
from hostdeploy.services.provisioner import Provisioner
from tests.conftest import FakeSSHService, make_target


class TestSourceSync:
    """Pull when a working tree exists, clone otherwise."""

    def test_existing_repository_is_pulled(self, target, fake_ssh):
        fake_ssh.respond("test -d", 0)

        action = Provisioner(target, fake_ssh).sync_source()

        assert action is SyncAction.PULLED
        assert fake_ssh.ran("git pull origin main")
        assert not fake_ssh.ran("git clone")

    def test_missing_repository_is_cloned_with_branch_and_token(self, fake_ssh):
        target = make_target(branch="release")

        action = Provisioner(target, fake_ssh).sync_source()

        assert action is SyncAction.CLONED
        assert fake_ssh.ran(
            "git clone -b release https://ghp_secret123@example.com/org/app.git ."
        )
        assert not fake_ssh.ran("git pull")

    def test_marker_checked_in_app_dir(self, target, fake_ssh):
        Provisioner(target, fake_ssh).sync_source()

        assert fake_ssh.commands[0] == "test -d /home/deploy/app/.git"

    def test_clone_failure_aborts(self, target, fake_ssh):
        fake_ssh.respond("git clone", 128, stderr="fatal: Authentication failed")

        with pytest.raises(ProvisionError) as exc:
            Provisioner(target, fake_ssh).sync_source()

        assert exc.value.step == "sync"
        assert "Authentication failed" in exc.value.context


class TestDirectoryReset:

    def test_directory_is_wiped_and_owned_by_user(self, target, fake_ssh):
        Provisioner(target, fake_ssh).reset_directory()

        script = fake_ssh.commands[0]
        assert "sudo rm -rf /home/deploy/app" in script
        assert "sudo mkdir -p /home/deploy/app" in script
        assert "sudo chown -R deploy:deploy /home/deploy/app" in script

    def test_reset_can_be_disabled(self, fake_ssh):
        target = make_target(reset_workdir=False)
        fake_ssh.respond("test -d", 0)

        outcome = Provisioner(target, fake_ssh).deploy()

        assert not fake_ssh.ran("sudo rm -rf")
        assert outcome.sync_action is SyncAction.PULLED


class TestDependencies:

    def test_container_topology_skips_host_nginx(self, target, fake_ssh):
        Provisioner(target, fake_ssh).install_dependencies()

        script = fake_ssh.commands[0]
        assert "apt-get install -y docker.io docker-compose" in script
        assert "nginx" not in script
        assert "sudo usermod -aG docker deploy" in script
        assert "docker-compose --version" in script

    def test_host_topology_installs_nginx(self, host_target, fake_ssh):
        Provisioner(host_target, fake_ssh).install_dependencies()

        script = fake_ssh.commands[0]
        assert "apt-get install -y docker.io docker-compose nginx" in script
        assert "sudo systemctl enable nginx" in script


class TestConfigUpload:

    def test_both_descriptors_uploaded(self, target, fake_ssh):
        rendered = Provisioner(target, fake_ssh).render_configs()

        assert fake_ssh.uploads["/home/deploy/app/docker-compose.yml"] == rendered.compose_file
        assert fake_ssh.uploads["/home/deploy/app/nginx/default.conf"] == rendered.proxy_file
        assert "proxy_pass http://app:8080;" in rendered.proxy_file

    def test_upload_failure_aborts(self, target, fake_ssh):
        fake_ssh.respond("upload", 1, stderr="No space left on device")

        with pytest.raises(ProvisionError):
            Provisioner(target, fake_ssh).render_configs()


class TestContainerRecreation:

    def test_down_failure_on_missing_stack_is_ignored(self, target, fake_ssh):
        fake_ssh.respond("docker-compose down", 1, stderr="no such file")

        replaced = Provisioner(target, fake_ssh).recreate_containers()

        assert replaced is False
        assert fake_ssh.index("docker-compose down") < fake_ssh.index(
            "docker-compose up -d --build"
        )

    def test_compose_up_failure_aborts(self, target, fake_ssh):
        fake_ssh.respond("docker-compose up", 1, stderr="build failed")

        with pytest.raises(ProvisionError) as exc:
            Provisioner(target, fake_ssh).recreate_containers()

        assert exc.value.step == "containers"

    def test_docker_run_removes_existing_container_first(self, docker_run_target, fake_ssh):
        fake_ssh.respond("docker ps -a", 0, stdout="myapp\n")

        replaced = Provisioner(docker_run_target, fake_ssh).recreate_containers()

        assert replaced is True
        assert fake_ssh.index("docker build -t myapp .") < fake_ssh.index("docker rm -f myapp")
        assert fake_ssh.index("docker rm -f myapp") < fake_ssh.index("docker run -d")
        assert fake_ssh.ran("-p 8080:8080 myapp")

    def test_docker_run_without_existing_container(self, docker_run_target, fake_ssh):
        replaced = Provisioner(docker_run_target, fake_ssh).recreate_containers()

        assert replaced is False
        assert not fake_ssh.ran("docker rm -f")
        assert fake_ssh.ran("docker run -d --name myapp")

    def test_similarly_named_container_is_not_a_collision(self, docker_run_target, fake_ssh):
        fake_ssh.respond("docker ps -a", 0, stdout="myapp-old\n")

        Provisioner(docker_run_target, fake_ssh).recreate_containers()

        assert not fake_ssh.ran("docker rm -f")


class TestProxyActivation:
    """A config that fails nginx -t must never be reloaded."""

    def test_host_proxy_reloaded_after_successful_check(self, host_target, fake_ssh):
        Provisioner(host_target, fake_ssh).activate_proxy()

        assert fake_ssh.index("sudo ln -sf") < fake_ssh.index("sudo nginx -t")
        assert fake_ssh.index("sudo nginx -t") < fake_ssh.index("systemctl reload nginx")

    def test_host_proxy_not_reloaded_when_check_fails(self, host_target, fake_ssh):
        fake_ssh.respond("nginx -t", 1, stderr="nginx: [emerg] unexpected end of file")

        with pytest.raises(ProxyValidationError) as exc:
            Provisioner(host_target, fake_ssh).activate_proxy()

        assert "unexpected end of file" in exc.value.context
        assert not fake_ssh.ran("systemctl reload nginx")
        # previous site restored (or the new one removed)
        assert fake_ssh.ran("sudo mv -f /etc/nginx/sites-available/myapp.bak")

    def test_container_proxy_not_reloaded_when_check_fails(self, target, fake_ssh):
        fake_ssh.respond("nginx -t", 1, stderr="emerg")

        with pytest.raises(ProxyValidationError):
            Provisioner(target, fake_ssh).activate_proxy()

        assert fake_ssh.ran("docker exec myapp-nginx nginx -t")
        assert not fake_ssh.ran("nginx -s reload")

    def test_container_proxy_reloaded(self, target, fake_ssh):
        Provisioner(target, fake_ssh).activate_proxy()

        assert fake_ssh.ran("docker exec myapp-nginx nginx -s reload")


class TestValidation:

    def test_failed_probe_does_not_fail_deploy(self, target, fake_ssh):
        fake_ssh.respond("curl", 7, stderr="Connection refused")

        outcome = Provisioner(target, fake_ssh).deploy()

        assert outcome.report.probe_ok is False
        assert "Connection refused" in outcome.report.probe_output

    def test_successful_probe(self, target, fake_ssh):
        fake_ssh.respond("curl", 0, stdout="HTTP/1.1 200 OK")

        report = Provisioner(target, fake_ssh).validate_deployment()

        assert report.probe_ok is True


class TestDeploy:

    def test_steps_run_in_order(self, target, fake_ssh):
        outcome = Provisioner(target, fake_ssh).deploy()

        order = [
            "sudo rm -rf /home/deploy/app",
            "git clone",
            "apt-get install",
            "upload /home/deploy/app/docker-compose.yml",
            "docker-compose up -d --build",
            "nginx -t",
            "curl",
        ]
        positions = [fake_ssh.index(needle) for needle in order]
        assert positions == sorted(positions)
        assert outcome.sync_action is SyncAction.CLONED
        assert outcome.url == "http://203.0.113.10"

    def test_failure_stops_remaining_steps(self, target, fake_ssh):
        fake_ssh.respond("apt-get install", 100, stderr="E: Unable to locate package")

        with pytest.raises(ProvisionError) as exc:
            Provisioner(target, fake_ssh).deploy()

        assert exc.value.step == "dependencies"
        assert not fake_ssh.ran("upload")
        assert not fake_ssh.ran("docker-compose up")
        assert not fake_ssh.ran("curl")

    def test_identical_runs_upload_identical_configs(self, target):
        first, second = FakeSSHService(), FakeSSHService()

        Provisioner(target, first).deploy()
        Provisioner(make_target(), second).deploy()

        assert first.uploads == second.uploads


class TestCleanup:

    def test_never_started_stack_is_not_an_error(self, target, fake_ssh):
        fake_ssh.respond("docker-compose down", 1, stderr="No such file or directory")

        outcome = Provisioner(target, fake_ssh).cleanup()

        assert "/home/deploy/app" in outcome.removed_paths
        assert outcome.warnings
        assert fake_ssh.ran("docker system prune -af --volumes")

    def test_host_topology_removes_site_and_reloads(self, host_target, fake_ssh):
        outcome = Provisioner(host_target, fake_ssh).cleanup()

        assert "/etc/nginx/sites-available/myapp" in outcome.removed_paths
        assert "/etc/nginx/sites-enabled/myapp" in outcome.removed_paths
        assert fake_ssh.index("sudo rm -f /etc/nginx") < fake_ssh.index(
            "systemctl reload nginx"
        )

    def test_directory_removal_failure_raises(self, target, fake_ssh):
        fake_ssh.respond("sudo rm -rf", 1, stderr="Permission denied")

        with pytest.raises(ProvisionError):
            Provisioner(target, fake_ssh).cleanup()

    def test_docker_run_cleanup_force_removes_container(self, docker_run_target, fake_ssh):
        Provisioner(docker_run_target, fake_ssh).cleanup()

        assert fake_ssh.ran("docker rm -f myapp")
        assert not fake_ssh.ran("docker-compose down")


class TestContainerProxyOrdering:
    """The container proxy is checked after compose has recreated it."""

    def test_check_follows_compose_up(self, target, fake_ssh):
        Provisioner(target, fake_ssh).deploy()

        assert fake_ssh.index("docker-compose up -d --build") < fake_ssh.index(
            "docker exec myapp-nginx nginx -t"
        )

    def test_failed_check_stops_before_validation(self, target, fake_ssh):
        fake_ssh.respond("nginx -t", 1, stderr="emerg")

        with pytest.raises(ProxyValidationError):
            Provisioner(target, fake_ssh).deploy()

        assert fake_ssh.ran("docker-compose up -d --build")
        assert not fake_ssh.ran("curl")
