"""Tests for the remote configurator."""

from conftest import ScriptedRunner, git_output, requires_git
from vsjournal.remote import ConfigureOutcome, RemoteConfigurator

URL = "git@github.com:user/journal.git"
UNBORN = (128, "HEAD", "fatal: ambiguous argument 'HEAD': unknown revision or path not in the working tree.")


class TestRemoteConfigurator:
    """Test each configuration step against a scripted runner."""

    def test_initializes_missing_repository(self, tmp_path, notifier):
        runner = ScriptedRunner({("rev-parse", "--abbrev-ref"): UNBORN})
        configurator = RemoteConfigurator(tmp_path, runner, notifier)

        outcome = configurator.configure(lambda: URL)

        assert outcome is ConfigureOutcome.CONFIGURED
        assert runner.calls == [
            ("init",),
            ("remote", "remove", "origin"),
            ("remote", "add", "origin", URL),
            ("rev-parse", "--abbrev-ref", "HEAD"),
            ("checkout", "-b", "master"),
        ]
        assert notifier.errors == []
        assert "Git remote set successfully." in notifier.infos

    def test_init_failure_is_fatal(self, tmp_path, notifier):
        runner = ScriptedRunner({("init",): (1, "", "fatal: cannot mkdir .git: Permission denied")})
        asked = []

        outcome = RemoteConfigurator(tmp_path, runner, notifier).configure(lambda: asked.append(1))

        assert outcome is ConfigureOutcome.FAILED
        assert asked == []
        assert notifier.errors == [
            "Failed to initialize Git repository: fatal: cannot mkdir .git: Permission denied"
        ]

    def test_cancelled_prompt_is_silent(self, repo_root, notifier):
        runner = ScriptedRunner()

        outcome = RemoteConfigurator(repo_root, runner, notifier).configure(lambda: None)

        assert outcome is ConfigureOutcome.CANCELLED
        assert runner.calls == []
        assert notifier.infos == []
        assert notifier.errors == []

    def test_blank_url_counts_as_cancel(self, repo_root, notifier):
        outcome = RemoteConfigurator(repo_root, ScriptedRunner(), notifier).configure(lambda: "   ")
        assert outcome is ConfigureOutcome.CANCELLED

    def test_missing_origin_is_tolerated(self, repo_root, notifier):
        runner = ScriptedRunner({
            ("remote", "remove"): (2, "", "error: No such remote: 'origin'"),
            ("rev-parse", "--abbrev-ref"): (0, "master", ""),
        })

        outcome = RemoteConfigurator(repo_root, runner, notifier).configure(lambda: URL)

        assert outcome is ConfigureOutcome.CONFIGURED
        assert runner.called("remote", "add", "origin", URL)
        assert notifier.errors == []

    def test_add_remote_failure_stops(self, repo_root, notifier):
        runner = ScriptedRunner({("remote", "add"): (128, "", "fatal: remote origin already exists.")})

        outcome = RemoteConfigurator(repo_root, runner, notifier).configure(lambda: URL)

        assert outcome is ConfigureOutcome.FAILED
        assert notifier.errors == ["Failed to set Git remote: fatal: remote origin already exists."]
        assert not runner.called("rev-parse")
        assert not runner.called("checkout")

    def test_already_on_primary_branch(self, repo_root, notifier):
        runner = ScriptedRunner({("rev-parse", "--abbrev-ref"): (0, "master", "")})

        RemoteConfigurator(repo_root, runner, notifier).configure(lambda: URL)

        assert not runner.called("checkout")

    def test_switches_to_existing_primary_branch(self, repo_root, notifier):
        runner = ScriptedRunner({("rev-parse", "--abbrev-ref"): (0, "main", "")})

        outcome = RemoteConfigurator(repo_root, runner, notifier).configure(lambda: URL)

        assert outcome is ConfigureOutcome.CONFIGURED
        assert runner.calls[-2:] == [("rev-parse", "--verify", "master"), ("checkout", "master")]

    def test_creates_primary_branch_from_other_branch(self, repo_root, notifier):
        runner = ScriptedRunner({
            ("rev-parse", "--abbrev-ref"): (0, "main", ""),
            ("rev-parse", "--verify"): (128, "", "fatal: Needed a single revision"),
        })

        RemoteConfigurator(repo_root, runner, notifier).configure(lambda: URL)

        assert runner.calls[-1] == ("checkout", "-b", "master")

    def test_branch_creation_failure(self, repo_root, notifier):
        runner = ScriptedRunner({
            ("rev-parse", "--abbrev-ref"): UNBORN,
            ("checkout",): (128, "", "fatal: cannot lock ref"),
        })

        outcome = RemoteConfigurator(repo_root, runner, notifier).configure(lambda: URL)

        assert outcome is ConfigureOutcome.FAILED
        assert notifier.errors == ["Failed to create master branch: fatal: cannot lock ref"]

    def test_rerun_issues_same_commands(self, repo_root, notifier):
        runner = ScriptedRunner({("rev-parse", "--abbrev-ref"): (0, "master", "")})
        configurator = RemoteConfigurator(repo_root, runner, notifier)

        configurator.configure(lambda: URL)
        first = list(runner.calls)
        runner.calls.clear()
        configurator.configure(lambda: URL)

        assert runner.calls == first
        assert notifier.errors == []

    def test_missing_directory(self, tmp_path, notifier):
        runner = ScriptedRunner()

        outcome = RemoteConfigurator(tmp_path / "missing", runner, notifier).configure(lambda: URL)

        assert outcome is ConfigureOutcome.FAILED
        assert runner.calls == []
        assert "does not exist" in notifier.errors[0]


@requires_git
class TestRemoteConfiguratorWithGit:
    """Run the configurator against real git."""

    def test_configure_twice_is_idempotent(self, tmp_path, bare_remote, notifier):
        root = tmp_path / "VSJournal"
        root.mkdir()
        configurator = RemoteConfigurator(root, notifier=notifier)

        assert configurator.configure(lambda: str(bare_remote)) is ConfigureOutcome.CONFIGURED
        first = (
            git_output(root, "remote", "get-url", "origin"),
            git_output(root, "symbolic-ref", "--short", "HEAD"),
        )
        assert configurator.configure(lambda: str(bare_remote)) is ConfigureOutcome.CONFIGURED
        second = (
            git_output(root, "remote", "get-url", "origin"),
            git_output(root, "symbolic-ref", "--short", "HEAD"),
        )

        assert first == second == (str(bare_remote), "master")
        assert git_output(root, "remote") == "origin"
        assert notifier.errors == []

    def test_new_url_replaces_binding(self, tmp_path, bare_remote, notifier):
        root = tmp_path / "VSJournal"
        root.mkdir()
        configurator = RemoteConfigurator(root, notifier=notifier)

        configurator.configure(lambda: "https://example.com/old.git")
        configurator.configure(lambda: str(bare_remote))

        assert git_output(root, "remote", "get-url", "origin") == str(bare_remote)
