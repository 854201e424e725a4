# ABOUTME: Tests for the cleo commands
# ABOUTME: Runs each command through CommandTester with its collaborators replaced

import json

import pytest
from cleo.testers.command_tester import CommandTester

from bref_cli.cli import create_application


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)


def tester_for(name):
    return CommandTester(create_application().find(name))


class FakeInvoker:
    instances = []

    def __init__(self, settings, console, error_console):
        self.settings = settings
        self.calls = []
        FakeInvoker.instances.append(self)

    def invoke(self, function_name, arguments):
        self.calls.append((function_name, list(arguments)))
        return 7


@pytest.fixture
def fake_invoker(monkeypatch):
    FakeInvoker.instances = []
    monkeypatch.setattr("bref_cli.cli.commands.cli.RemoteInvoker", FakeInvoker)
    return FakeInvoker


class TestApplication:
    def test_registered_commands(self):
        application = create_application()

        for name in ["init", "cli", "dashboard", "layers"]:
            assert application.has(name)


class TestCliCommand:
    def test_forwards_arguments_and_exit_code(self, fake_invoker):
        status = tester_for("cli").execute("my-function -- migrate --force")

        assert status == 7
        invoker = fake_invoker.instances[0]
        assert invoker.calls == [("my-function", ["migrate", "--force"])]
        assert invoker.settings.region == "us-east-1"
        assert invoker.settings.profile == "default"

    def test_flags_override_environment(self, fake_invoker, monkeypatch):
        monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-3")
        monkeypatch.setenv("AWS_PROFILE", "staging")

        tester_for("cli").execute("--region ap-south-1 my-function")

        settings = fake_invoker.instances[0].settings
        assert settings.region == "ap-south-1"
        assert settings.profile == "staging"

    def test_invalid_region(self, fake_invoker):
        assert tester_for("cli").execute("--region nowhere my-function") == 1
        assert fake_invoker.instances == []


class TestDashboardCommand:
    def test_invalid_port(self, capsys):
        assert tester_for("dashboard").execute("--port http") == 1
        assert "Invalid port" in capsys.readouterr().err

    def test_invalid_stage(self, capsys):
        assert tester_for("dashboard").execute("--stage bad_stage") == 1
        assert "Invalid stage name" in capsys.readouterr().err

    def test_settings_are_passed_to_bootstrapper(self, monkeypatch):
        captured = {}

        class FakeBootstrapper:
            def __init__(self, settings, console, error_console):
                captured["settings"] = settings

            def run(self):
                return 0

        monkeypatch.setattr("bref_cli.cli.commands.dashboard.DashboardBootstrapper", FakeBootstrapper)
        monkeypatch.setenv("AWS_PROFILE", "staging")

        assert tester_for("dashboard").execute("--port 9000 --stage prod") == 0

        settings = captured["settings"]
        assert settings.port == 9000
        assert settings.stage == "prod"
        assert settings.profile == "staging"
        assert settings.host == "localhost"


class TestLayersCommand:
    @pytest.fixture
    def layers_file(self, tmp_path):
        path = tmp_path / "layers.json"
        path.write_text(json.dumps({"php-82": {"eu-west-1": "41"}, "php-82-fpm": {"eu-west-1": "43"}}))
        return path

    def test_prints_arns(self, layers_file, capsys):
        status = tester_for("layers").execute(f"eu-west-1 --layers-file {layers_file} --arns")

        assert status == 0
        output = capsys.readouterr().out
        assert "arn:aws:lambda:eu-west-1:534081306603:layer:php-82:41" in output
        assert "arn:aws:lambda:eu-west-1:534081306603:layer:php-82-fpm:43" in output

    def test_table(self, layers_file, capsys):
        assert tester_for("layers").execute(f"eu-west-1 --layers-file {layers_file}") == 0
        assert "php-82-fpm" in capsys.readouterr().out

    def test_region_from_environment(self, layers_file, monkeypatch, capsys):
        monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-1")

        assert tester_for("layers").execute(f"--layers-file {layers_file} --arns") == 0
        assert "eu-west-1" in capsys.readouterr().out

    def test_region_without_layers(self, layers_file, capsys):
        assert tester_for("layers").execute(f"sa-east-1 --layers-file {layers_file}") == 1
        assert "No layers are published in sa-east-1" in capsys.readouterr().out

    def test_missing_layers_file(self, tmp_path, capsys):
        assert tester_for("layers").execute(f"eu-west-1 --layers-file {tmp_path / 'nope.json'}") == 1
        assert "Layers file not found" in capsys.readouterr().out


class TestInitCommand:
    def test_creates_project(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert tester_for("init").execute("web --php-version 8.2") == 0
        assert "runtime: php-82-fpm" in (tmp_path / "serverless.yml").read_text()

    def test_unknown_template(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        assert tester_for("init").execute("symfony --php-version 8.2") == 1
        assert "Unknown template" in capsys.readouterr().out

    def test_existing_project(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "index.php").write_text("<?php\n")

        assert tester_for("init").execute("function --php-version 8.2") == 1
        assert "already contains index.php" in capsys.readouterr().out
