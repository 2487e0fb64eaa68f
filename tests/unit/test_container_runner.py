"""Unit tests for the ContainerRunner workflow."""

import logging
from unittest.mock import ANY, call, patch

import pytest

from dockhand.core import transfer
from dockhand.core.errors import CancellationError, EngineError, ValidationError
from dockhand.execution.container_runner import ContainerRunner, RunResult


@pytest.fixture
def runner(mock_docker, running):
    return ContainerRunner(mock_docker, running, location="/scratch")


class TestBuildScript:
    """Test the command wrapper."""

    def test_changes_to_location(self, runner):
        script = runner.build_script("make all")

        assert script == "set -eu\nmkdir -p /scratch\ncd /scratch\nmake all\n"

    def test_quotes_location(self, mock_docker, running):
        runner = ContainerRunner(mock_docker, running, location="/my work")

        assert "cd '/my work'\n" in runner.build_script("ls")


class TestEnsureImage:
    """Test image availability checks."""

    def test_present_image_is_not_pulled(self, runner, mock_docker, running):
        runner.ensure_image("alpine")

        mock_docker.image_exists.assert_called_once_with("alpine", running)
        mock_docker.pull_image.assert_not_called()

    def test_missing_image_is_pulled(self, runner, mock_docker, running):
        mock_docker.image_exists.return_value = False

        runner.ensure_image("alpine")

        mock_docker.pull_image.assert_called_once_with("alpine", running)

    def test_missing_image_without_pull(self, runner, mock_docker):
        mock_docker.image_exists.return_value = False

        with pytest.raises(ValidationError, match="does not exist locally"):
            runner.ensure_image("alpine", pull=False)

        mock_docker.pull_image.assert_not_called()


class TestRun:
    """Test the full run workflow."""

    def test_minimal_run(self, runner, mock_docker, running):
        result = runner.run("alpine", "true")

        assert result == RunResult(container="c0ffee")
        mock_docker.create_container.assert_called_once_with("alpine", running)
        mock_docker.copy_into_container.assert_not_called()
        mock_docker.start_container.assert_called_once_with(
            "c0ffee", runner.build_script("true"), running
        )
        mock_docker.copy_from_container.assert_not_called()
        mock_docker.commit_container.assert_not_called()
        mock_docker.delete_container.assert_called_once_with("c0ffee", running)

    def test_full_run_order(self, runner, mock_docker, running, tmp_path):
        (tmp_path / "in.txt").write_text("input")

        result = runner.run(
            "alpine",
            "make",
            input_paths=["in.txt"],
            output_paths=["out"],
            source_dir=str(tmp_path),
            destination_dir=str(tmp_path / "dest"),
            commit="result:latest",
        )

        assert result.copied == ["out"]
        assert result.image == "result:latest"
        assert [c[0] for c in mock_docker.method_calls] == [
            "image_exists",
            "create_container",
            "copy_into_container",
            "start_container",
            "copy_from_container",
            "commit_container",
            "delete_container",
        ]
        mock_docker.copy_from_container.assert_called_once_with(
            "c0ffee", ["out"], "/scratch", str(tmp_path / "dest"), running
        )
        mock_docker.copy_into_container.assert_called_once_with("c0ffee", ANY, running)

    def test_archive_contents(self, runner, mock_docker, tmp_path):
        import tarfile

        (tmp_path / "in.txt").write_text("input")
        names = []

        def capture(container, archive, flag):
            with tarfile.open(fileobj=archive, mode="r") as tar:
                names.extend(tar.getnames())

        mock_docker.copy_into_container.side_effect = capture

        runner.run("alpine", "true", input_paths=["in.txt"], source_dir=str(tmp_path))

        assert names == ["scratch/in.txt"]

    def test_container_deleted_on_failure(self, runner, mock_docker, running):
        mock_docker.start_container.side_effect = EngineError("Unable to start container.")

        with pytest.raises(EngineError):
            runner.run("alpine", "false", output_paths=["out"], commit="never")

        mock_docker.copy_from_container.assert_not_called()
        mock_docker.commit_container.assert_not_called()
        mock_docker.delete_container.assert_called_once_with("c0ffee", running)

    def test_cleanup_failure_does_not_mask_success(self, runner, mock_docker, caplog):
        mock_docker.delete_container.side_effect = EngineError("Unable to delete container.")

        with caplog.at_level(logging.WARNING):
            result = runner.run("alpine", "true")

        assert result.container == "c0ffee"
        assert "Unable to delete container c0ffee" in caplog.text

    def test_cleanup_failure_after_cancellation_is_quiet(self, runner, mock_docker, running, caplog):
        def interrupted(*args):
            running.cancel()
            raise CancellationError()

        mock_docker.start_container.side_effect = interrupted
        mock_docker.delete_container.side_effect = CancellationError()

        with caplog.at_level(logging.WARNING):
            with pytest.raises(CancellationError):
                runner.run("alpine", "sleep 100")

        assert "Unable to delete container" not in caplog.text

    def test_shell_after_command(self, runner, mock_docker, running):
        with patch("dockhand.execution.container_runner.random_tag", return_value="snap"):
            runner.run("alpine", "true", shell=True)

        assert mock_docker.method_calls[-4:] == [
            call.commit_container("c0ffee", "snap", running),
            call.spawn_shell("snap", running),
            call.delete_image("snap", running),
            call.delete_container("c0ffee", running),
        ]

    def test_shell_after_failed_command(self, runner, mock_docker, running):
        mock_docker.start_container.side_effect = EngineError("Unable to start container.")

        with pytest.raises(EngineError):
            runner.run("alpine", "false", shell=True)

        mock_docker.spawn_shell.assert_called_once()

    def test_no_shell_after_cancellation(self, runner, mock_docker, running):
        def interrupted(*args):
            running.cancel()
            raise CancellationError()

        mock_docker.start_container.side_effect = interrupted

        with pytest.raises(CancellationError):
            runner.run("alpine", "sleep 100", shell=True)

        mock_docker.spawn_shell.assert_not_called()


class TestShellInto:
    """Test opening a shell on a container snapshot."""

    def test_snapshot_removed_after_shell_failure(self, runner, mock_docker, running):
        mock_docker.spawn_shell.side_effect = EngineError("The shell exited with a failure.")

        with patch("dockhand.execution.container_runner.random_tag", return_value="snap"):
            with pytest.raises(EngineError):
                runner.shell_into("c0ffee")

        mock_docker.delete_image.assert_called_once_with("snap", running)


class TestCancellationBetweenSteps:
    """Test that a latched flag stops the run at the next step."""

    def test_cancelled_before_run(self, runner, mock_docker, running):
        running.cancel()

        with pytest.raises(CancellationError):
            runner.run("alpine", "rm -rf /data", output_paths=["out"], commit="img")

        mock_docker.create_container.assert_not_called()
        mock_docker.start_container.assert_not_called()

    def test_cancelled_after_create(self, runner, mock_docker, running):
        def create(image, flag):
            running.cancel()
            return "c0ffee"

        mock_docker.create_container.side_effect = create

        with pytest.raises(CancellationError):
            runner.run("alpine", "rm -rf /data", output_paths=["out"], commit="img")

        mock_docker.start_container.assert_not_called()
        mock_docker.copy_from_container.assert_not_called()
        mock_docker.commit_container.assert_not_called()
        mock_docker.delete_container.assert_called_once_with("c0ffee", running)

    def test_cancelled_while_archiving(self, runner, mock_docker, running, tmp_path):
        (tmp_path / "in.txt").write_text("input")
        archive = transfer.create_archive

        def cancelling_archive(*args):
            running.cancel()
            return archive(*args)

        with patch.object(transfer, "create_archive", side_effect=cancelling_archive):
            with pytest.raises(CancellationError):
                runner.run("alpine", "true", input_paths=["in.txt"], source_dir=str(tmp_path))

        mock_docker.copy_into_container.assert_not_called()
        mock_docker.start_container.assert_not_called()

    def test_cancelled_during_command(self, runner, mock_docker, running):
        mock_docker.start_container.side_effect = lambda *args: running.cancel()

        with pytest.raises(CancellationError):
            runner.run("alpine", "sleep 100", output_paths=["out"], commit="img", shell=True)

        mock_docker.spawn_shell.assert_not_called()
        mock_docker.copy_from_container.assert_not_called()
        mock_docker.commit_container.assert_not_called()


class TestShellAfterFailure:
    """Test the shell opened after a failed command."""

    def test_shell_failure_does_not_hide_command_failure(self, runner, mock_docker, caplog):
        mock_docker.start_container.side_effect = EngineError("Unable to start container.")
        mock_docker.spawn_shell.side_effect = EngineError("The shell exited with a failure.")

        with caplog.at_level(logging.WARNING):
            with pytest.raises(EngineError, match="Unable to start container."):
                runner.run("alpine", "false", shell=True)

        assert "Unable to open a shell in container c0ffee" in caplog.text
        mock_docker.delete_container.assert_called_once()
