"""
Integration tests for the full setup sequence.

Runs the real step list against the fake host and checks that a second
run converges without touching anything.
"""

import pytest

from ghostdc.config import Settings
from ghostdc.core.executor import Executor, use_executor
from ghostdc.deploy import build_setup

REPO = "https://git.example.com/ghost-template.git"


def run_setup(host, platform, **overrides):
    settings = Settings(domain="blog.example.com", repo_url=REPO, **overrides).validate()
    executor = use_executor(Executor(platform=platform, transport=host))
    build_setup(settings)
    return executor.run()


class TestSetupWorkflow:
    """Full setup against a fresh host."""

    def test_fresh_host(self, fake_host, ubuntu):
        result = run_setup(fake_host, ubuntu)

        assert result.success, result.errors
        assert fake_host.packages >= {"git", "curl", "snapd", "cron"}
        assert fake_host.snaps == {"core", "certbot"}
        assert fake_host.docker and fake_host.compose == "plugin"
        assert fake_host.docker_running and fake_host.docker_enabled
        assert fake_host.stack_running
        assert {"/opt/ghost/content", "/opt/ghost/mysql"} <= fake_host.dirs
        assert "/etc/letsencrypt/live/blog.example.com/fullchain.pem" in fake_host.files

    def test_placeholders_substituted(self, fake_host, ubuntu):
        run_setup(fake_host, ubuntu)

        for relative in ("docker-compose.yml", "nginx/default.conf", "config.production.json"):
            content = fake_host.files[f"/opt/ghost/{relative}"]
            assert "<domain>" not in content
            assert "blog.example.com" in content

        assert "server_name blog.example.com www.blog.example.com;" in \
            fake_host.files["/opt/ghost/nginx/default.conf"]

    def test_certificate_covers_www(self, fake_host, ubuntu):
        run_setup(fake_host, ubuntu)

        certbot = next(c for c in fake_host.commands if c[0] == "certbot")
        domains = [certbot[i + 1] for i, arg in enumerate(certbot) if arg == "-d"]
        assert domains == ["blog.example.com", "www.blog.example.com"]

    def test_renewal_cron_stops_nginx(self, fake_host, ubuntu):
        run_setup(fake_host, ubuntu)

        lines = fake_host.crontab.strip().splitlines()
        assert len(lines) == 1
        assert lines[0].startswith("0 3 * * * certbot renew --quiet")
        assert '--pre-hook "cd /opt/ghost && docker compose stop nginx"' in lines[0]
        assert '--post-hook "cd /opt/ghost && docker compose start nginx"' in lines[0]

    def test_steps_run_in_order(self, fake_host, ubuntu):
        result = run_setup(fake_host, ubuntu)

        order = result.changed_resources
        assert order.index("git:/opt/ghost") < order.index("placeholder:/opt/ghost/docker-compose.yml")
        assert order.index("cert:blog.example.com") < order.index("exec:install-docker")
        assert order.index("exec:install-compose") < order.index("cron:certbot-renew")
        assert order[-1] == "compose:/opt/ghost"

    def test_second_run_changes_nothing(self, fake_host, ubuntu):
        first = run_setup(fake_host, ubuntu)
        assert first.success

        files_before = dict(fake_host.files)
        crontab_before = fake_host.crontab

        second = run_setup(fake_host, ubuntu)

        assert second.success, second.errors
        assert second.changed_resources == []
        assert fake_host.files == files_before
        assert fake_host.crontab == crontab_before

    def test_kept_back_packages_settle(self, fake_host, ubuntu):
        fake_host.kept_back = ["linux-generic"]
        run_setup(fake_host, ubuntu)

        second = run_setup(fake_host, ubuntu)

        assert second.success, second.errors
        assert "apt:apt-upgrade" not in second.changed_resources
        assert fake_host.kept_back == ["linux-generic"]

    def test_existing_cron_entry_kept(self, fake_host, ubuntu):
        fake_host.crontab = "30 2 * * * certbot renew\n"

        run_setup(fake_host, ubuntu)

        assert fake_host.crontab == "30 2 * * * certbot renew\n"

    def test_failure_aborts_remaining_steps(self, fake_host, ubuntu):
        fake_host.fail_on.add("certonly")

        result = run_setup(fake_host, ubuntu)

        assert not result.success
        assert result.failed_resource == "cert:blog.example.com"
        assert "certonly: simulated failure" in str(result.errors[0])
        assert not fake_host.docker
        assert fake_host.crontab is None
        assert not fake_host.stack_running

    def test_rerun_after_failure_resumes(self, fake_host, ubuntu):
        fake_host.fail_on.add("certonly")
        run_setup(fake_host, ubuntu)

        fake_host.fail_on.clear()
        result = run_setup(fake_host, ubuntu)

        assert result.success
        assert result.changed_resources[0] == "cert:blog.example.com"
        assert fake_host.stack_running

    def test_without_www(self, fake_host, ubuntu):
        run_setup(fake_host, ubuntu, include_www=False)

        certbot = next(c for c in fake_host.commands if c[0] == "certbot")
        assert certbot.count("-d") == 1


class TestLocalFiles:
    """Placeholder and directory steps against the real filesystem."""

    def test_placeholder_substitution_on_disk(self, tmp_path, ubuntu):
        conf = tmp_path / "nginx" / "default.conf"
        conf.parent.mkdir()
        conf.write_text("server_name <domain>;\n")

        settings = Settings(domain="blog.example.com", project_dir=str(tmp_path),
                            config_files=["nginx/default.conf"], data_dirs=["content"])
        settings.validate()

        from ghostdc.resources.file import File
        from ghostdc.resources.placeholder import Placeholder

        executor = use_executor(Executor(platform=ubuntu))
        Placeholder(settings.project_path("nginx/default.conf"),
                    token=settings.placeholder, value=settings.domain)
        File(settings.project_path("content"), ensure="directory")

        result = executor.run()

        assert result.success, result.errors
        assert conf.read_text() == "server_name blog.example.com;\n"
        assert (tmp_path / "content").is_dir()

        # Converged
        executor = use_executor(Executor(platform=ubuntu))
        Placeholder(str(conf), token="<domain>", value="blog.example.com")
        File(str(tmp_path / "content"), ensure="directory")

        assert not executor.plan().has_changes

    def test_failing_download_in_pipeline_aborts_run(self, ubuntu):
        from ghostdc.resources.exec import Exec

        executor = use_executor(Executor(platform=ubuntu))
        Exec("install-docker", command="false | sh", unless="false")
        Exec("after", command="true", unless="false")

        result = executor.run()

        assert not result.success
        assert result.failed_resource == "exec:install-docker"
        assert result.changed_resources == []
