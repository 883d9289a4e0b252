"""
Build driver.

Renders the configure-and-build shell script from its template, runs it and
interprets its exit status. The script reserves two exit codes so the two
ways a toolchain build can fail stay distinguishable from the outside:

    0  success
    2  configure failed (almost always a boot JDK problem)
    3  make failed (failure logs are archived before giving up)

Any other non-zero status is reported as a generic driver failure.
"""

import logging
import subprocess
from pathlib import Path
from typing import Callable, List, Optional

from ..config import BuildConfig, BuildVariant
from ..errors import JdkPackError
from ..packaging.archive import ArchiveError
from .failure_logs import FailureLogCollector
from .process_tree import kill_process_tree

CONFIGURE_FAILED_EXIT = 2
MAKE_FAILED_EXIT = 3

SCRIPT_NAME = "configure-and-build.sh"
TEMPLATE_NAME = "configure-and-build.template"
BUILD_LOG_NAME = "build.log"


class BuildDriverError(JdkPackError):
    """Raised when the configure-and-build script fails unexpectedly."""

    pass


class ConfigureFailedError(BuildDriverError):
    """Raised when configure exits with the configure-failure code."""

    pass


class MakeFailedError(BuildDriverError):
    """Raised when make exits with the make-failure code."""

    pass


def template_dir() -> Path:
    return Path(__file__).parent.parent / "templates"


class BuildDriver:
    """Runs configure and make for a BuildConfig.

    Example usage:
        driver = BuildDriver(config, failure_logs=collector)
        driver.prepare(args.render())
        driver.run()
    """

    def __init__(
        self,
        config: BuildConfig,
        failure_logs: Optional[FailureLogCollector] = None,
        show_progress: bool = True,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        """
        Args:
            config: Build configuration
            failure_logs: Collector invoked when make fails
            show_progress: Echo toolchain output to stdout as well as the log
            popen: Process factory (injectable for tests)
        """
        self.config = config
        self.failure_logs = failure_logs
        self.show_progress = show_progress
        self.popen = popen

    @property
    def script_path(self) -> Path:
        return self.config.config_dir / SCRIPT_NAME

    @property
    def build_log_path(self) -> Path:
        return self.config.target_path / BUILD_LOG_NAME

    def make_targets(self) -> List[str]:
        """Extra make targets for this variant.

        OpenJ9 also builds the test and debug images. Exploded builds must
        not have any additional targets.
        """
        if self.config.make_exploded:
            return []
        if self.config.variant == BuildVariant.OPENJ9:
            return ["test-image", "debug-image"]
        return []

    def configure_command(self, configure_args: str) -> Optional[str]:
        """Full configure command, or None when configure is skipped."""
        if self.config.assemble_exploded_image:
            return None
        return f"bash ./configure --verbose {configure_args}".rstrip()

    def make_command(self) -> str:
        parts = [
            self.config.make_command_name,
            self.config.make_args_for_any_platform,
            self.config.user_make_args,
            *self.make_targets(),
        ]
        command = " ".join(part for part in parts if part)
        if self.config.assemble_exploded_image:
            # Touch first so make only re-links jmods instead of recompiling after signing
            command = f"make -t && {command}"
        return command

    def render_script(self, configure_args: str) -> Path:
        """Write configure-and-build.sh into the workspace config directory.

        Returns:
            Path to the rendered script
        """
        configure = self.configure_command(configure_args)
        if configure is None:
            logging.info("Skipping configure because we're assembling an exploded image")
            configure = "echo \"Skipping configure because we're assembling an exploded image\""
        else:
            logging.info(f"Running ./configure with arguments '{configure}'")

        template = (template_dir() / TEMPLATE_NAME).read_text(encoding="utf-8")
        script = (
            template.replace("{buildRoot}", str(self.config.build_root))
            .replace("{configureCommand}", configure)
            .replace("{makeCommand}", self.make_command())
        )

        self.config.config_dir.mkdir(parents=True, exist_ok=True)
        self.script_path.write_text(script, encoding="utf-8")
        self.script_path.chmod(0o755)
        return self.script_path

    def write_command_metadata(self, configure_args: str) -> None:
        """Record the configure and make invocations in the metadata directory."""
        metadata_dir = self.config.metadata_dir
        metadata_dir.mkdir(parents=True, exist_ok=True)
        (metadata_dir / "configure.txt").write_text(configure_args, encoding="utf-8")
        (metadata_dir / "makeCommandArg.txt").write_text(self.make_command(), encoding="utf-8")

    def prepare(self, configure_args: str) -> Path:
        self.write_command_metadata(configure_args)
        return self.render_script(configure_args)

    def execute(self) -> int:
        """Run the rendered script, streaming its output into build.log.

        Returns:
            Script exit status

        Raises:
            BuildDriverError: If the script cannot be started
        """
        cmd = ["bash", str(self.script_path), str(self.config.workspace_dir), self.config.target_dir]
        self.build_log_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            process = self.popen(
                cmd,
                cwd=str(self.config.workspace_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise BuildDriverError(f"Failed to start {self.script_path}: {e}") from e

        with open(self.build_log_path, "a", encoding="utf-8") as log:
            try:
                for line in process.stdout:
                    log.write(line)
                    if self.show_progress:
                        print(line, end="")
                return process.wait()
            except KeyboardInterrupt:
                killed = kill_process_tree(process.pid)
                logging.warning(f"Build interrupted, terminated {killed} toolchain processes")
                raise

    def run(self) -> None:
        """Execute the build and interpret its exit status.

        Raises:
            ConfigureFailedError: configure failed
            MakeFailedError: make failed (after failure logs were archived)
            BuildDriverError: any other non-zero status
        """
        exit_code = self.execute()
        if exit_code == 0:
            return

        if exit_code == MAKE_FAILED_EXIT:
            self._capture_failure_logs()
            raise MakeFailedError(f"Failed to make the JDK, see {self.build_log_path}")

        if exit_code == CONFIGURE_FAILED_EXIT:
            raise ConfigureFailedError(
                "Failed to configure the JDK. "
                "Did you set the JDK boot directory correctly? Override by exporting JDK_BOOT_DIR. "
                f"Current JDK_BOOT_DIR value: {self.config.jdk_boot_dir or '<unset>'}"
            )

        raise BuildDriverError(f"{SCRIPT_NAME} exited with status {exit_code}")

    def _capture_failure_logs(self) -> None:
        if self.failure_logs is None:
            return
        try:
            artifact = self.failure_logs.collect()
        except (OSError, ArchiveError) as e:
            logging.warning(f"Could not archive make failure logs: {e}")
            return
        if artifact is not None:
            logging.info(f"Make failure logs archived to {artifact}")
