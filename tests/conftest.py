"""
Shared fixtures: a fake Ubuntu host that remembers what the deploy did to it.
"""

import shlex

import pytest

from ghostdc.core import Platform
from ghostdc.core.executor import Executor, reset_executor, use_executor

UBUNTU = Platform(system="Linux", distro="ubuntu", version="24.04", arch="x86_64")

TEMPLATE_FILES = {
    "docker-compose.yml": "services:\n  ghost:\n    environment:\n      url: https://<domain>\n",
    "nginx/default.conf": "server {\n  server_name <domain> www.<domain>;\n}\n",
    "config.production.json": '{"url": "https://<domain>"}\n',
}


class FakeHost:
    """
    Transport double for a fresh Ubuntu host.

    Understands the commands the setup sequence issues and records every
    command it receives in `commands` (argument lists) and `shells`.
    """

    def __init__(self):
        self.files = {
            "/etc/os-release": 'NAME="Ubuntu"\nID=ubuntu\nVERSION_ID="24.04"\n',
        }
        self.dirs = set()
        self.packages = set()
        self.snaps = set()
        self.upgradable = ["openssl"]
        self.kept_back = []
        self.crontab = None
        self.docker = False
        self.docker_running = False
        self.docker_enabled = False
        self.compose = None  # None, "plugin" or "standalone"
        self.stack_running = False
        self.commands = []
        self.shells = []
        self.fail_on = set()

    # Transport interface

    def file_exists(self, path):
        return path in self.files or path in self.dirs

    def read_file(self, path):
        if path in self.files:
            return self.files[path].encode("utf-8")
        raise FileNotFoundError(path)

    def write_file(self, path, content):
        self.files[path] = content.decode("utf-8") if isinstance(content, bytes) else content

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def run_command(self, args):
        self.commands.append(list(args))
        for needle in self.fail_on:
            if needle in " ".join(args):
                return (f"{needle}: simulated failure", 1)

        head = args[0]
        if args[:3] == ["apt-get", "-s", "upgrade"]:
            return self._simulate_upgrade()
        if head == "dpkg-query":
            pkg = args[-1]
            if pkg in self.packages:
                return ("install ok installed 1.0", 0)
            return (f"dpkg-query: no packages found matching {pkg}", 1)
        if head == "snap":
            return self._snap(args[1:])
        if head == "git":
            return self._git(args[1:])
        if head == "certbot":
            name = args[args.index("--cert-name") + 1]
            self.files[f"/etc/letsencrypt/live/{name}/fullchain.pem"] = "CERT"
            return ("Successfully received certificate.", 0)
        if head == "docker" and args[1:] == ["compose", "version"]:
            if self.compose == "plugin":
                return ("Docker Compose version v2.27.0", 0)
            return ("docker: 'compose' is not a docker command.", 1)
        if head == "systemctl":
            return self._systemctl(args[1], args[2])
        if head == "mkdir":
            self.dirs.add(args[-1])
            return ("", 0)
        if head == "stat":
            if args[-1] in self.dirs:
                return ("directory|755", 0)
            if args[-1] in self.files:
                return ("regular file|644", 0)
            return ("stat: cannot statx: No such file or directory", 1)
        return ("", 0)

    def run_shell(self, command):
        self.shells.append(command)
        for needle in self.fail_on:
            if needle in command:
                return (f"{needle}: simulated failure", 1)

        if command == "uname -s":
            return ("Linux\n", 0)
        if command == "uname -m":
            return ("x86_64\n", 0)
        if command.startswith("echo $(($(date +%s)"):
            return ("10\n", 0)
        if "apt-get update" in command:
            self.files["/var/lib/apt/periodic/update-success-stamp"] = ""
            return ("", 0)
        if "apt-get upgrade" in command:
            self.upgradable = []
            return ("", 0)
        if "apt-get install -y docker-compose-plugin" in command:
            self.compose = "plugin"
            return ("", 0)
        if "apt-get install -y" in command:
            self.packages.update(command.split("apt-get install -y", 1)[1].split())
            return ("", 0)
        if command == "ln -s /snap/bin/certbot /usr/bin/certbot":
            self.files["/usr/bin/certbot"] = ""
            return ("", 0)
        if command == "command -v docker":
            return ("/usr/bin/docker", 0) if self.docker else ("", 1)
        if command == "command -v docker-compose":
            return ("/usr/local/bin/docker-compose", 0) if self.compose == "standalone" else ("", 1)
        if command == "command -v docker-compose || docker compose version":
            return ("", 0) if self.compose else ("", 1)
        if command == "curl -fsSL https://get.docker.com | sh":
            self.docker = True
            return ("", 0)
        if command == "crontab -l":
            if self.crontab is None:
                return ("no crontab for root\n", 1)
            return (self.crontab, 0)
        if command.startswith("(crontab -l"):
            inner = command[command.index("echo ") + 5:command.rindex(") | crontab -")]
            entry = shlex.split(inner)[0]
            self.crontab = (self.crontab or "") + entry + "\n"
            return ("", 0)
        if command.startswith("cd ") and " && " in command:
            return self._compose(command.split(" && ", 1)[1])
        return ("", 0)

    # Helpers

    def _simulate_upgrade(self):
        lines = ["Reading package lists...", "Calculating upgrade..."]
        if self.kept_back:
            lines.append("The following packages have been kept back:")
            lines.append("  " + " ".join(self.kept_back))
        for pkg in self.upgradable:
            lines.append(f"Inst {pkg} [1.0] (1.1 Ubuntu:24.04/noble-updates [amd64])")
        for pkg in self.upgradable:
            lines.append(f"Conf {pkg} (1.1 Ubuntu:24.04/noble-updates [amd64])")
        return ("\n".join(lines) + "\n", 0)

    def _snap(self, args):
        if args[0] == "list":
            name = args[1]
            if name in self.snaps:
                return (
                    "Name     Version  Rev   Tracking       Publisher   Notes\n"
                    f"{name}  2.11.0   4182  latest/stable  certbot-eff  classic\n",
                    0,
                )
            return ("error: no matching snaps installed", 1)
        if args[0] == "install":
            self.snaps.add(args[1])
            return (f"{args[1]} installed", 0)
        return ("", 0)

    def _git(self, args):
        if args[0] == "clone":
            path = args[-1]
            self.dirs.update({path, f"{path}/.git", f"{path}/nginx"})
            for relative, content in TEMPLATE_FILES.items():
                self.files[f"{path}/{relative}"] = content
            return (f"Cloning into '{path}'...", 0)
        if args[0] == "-C":
            sub = args[2:]
            if sub[0] == "rev-parse":
                return ("4f2a9c1\n", 0)
            return ("", 0)
        return ("", 0)

    def _systemctl(self, verb, unit):
        if verb == "is-active":
            return ("active", 0) if self.docker_running else ("inactive", 3)
        if verb == "is-enabled":
            return ("enabled", 0) if self.docker_enabled else ("disabled", 1)
        if verb == "start":
            self.docker_running = True
        elif verb == "enable":
            self.docker_enabled = True
        return ("", 0)

    def _compose(self, command):
        args = shlex.split(command)
        if args[:2] == ["docker", "compose"]:
            sub = args[2:]
        elif args[0] == "docker-compose":
            sub = args[1:]
        else:
            return ("", 0)

        if sub[0] == "ps":
            return ("ghost\nnginx\ndb\n" if self.stack_running else "", 0)
        if sub[0] == "up":
            self.stack_running = True
        elif sub[0] == "down":
            self.stack_running = False
        return ("", 0)


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def ubuntu():
    return UBUNTU


@pytest.fixture
def executor(fake_host):
    """Executor bound to the fake host; new resources register with it."""
    return use_executor(Executor(platform=UBUNTU, transport=fake_host))


@pytest.fixture(autouse=True)
def _fresh_executor():
    reset_executor()
    yield
    reset_executor()
