"""Buildpack lifecycle: detect, build, launch.

The lifecycle is an explicit state machine with one-way transitions:

    PENDING -> DETECTING -> DETECTED | UNDETECTED*
    DETECTED -> BUILDING -> BUILT | BUILD_FAILED*
    BUILT -> LAUNCHING -> RUNNING | NO_WEB_PROCESS | LAUNCH_FAILED*

States marked * are terminal failures. Every terminal state maps to a process
exit code; RUNNING reports the web process's own exit status. No phase is
retried.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from function_run.core.errors import ExitCode, LaunchDescriptorError
from function_run.core.launch import (
    LAUNCH_FILE_NAME,
    WEB_PROCESS_TYPE,
    ProcessDefinition,
    load_launch_descriptor,
)
from function_run.core.process_runner.abc import ProcessRunner
from function_run.core.user_feedback import UserFeedback

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    PENDING = "pending"
    DETECTING = "detecting"
    DETECTED = "detected"
    UNDETECTED = "undetected"
    BUILDING = "building"
    BUILT = "built"
    BUILD_FAILED = "build-failed"
    LAUNCHING = "launching"
    RUNNING = "running"
    NO_WEB_PROCESS = "no-web-process"
    LAUNCH_FAILED = "launch-failed"


_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.PENDING: frozenset({LifecycleState.DETECTING}),
    LifecycleState.DETECTING: frozenset({LifecycleState.DETECTED, LifecycleState.UNDETECTED}),
    LifecycleState.DETECTED: frozenset({LifecycleState.BUILDING}),
    LifecycleState.BUILDING: frozenset({LifecycleState.BUILT, LifecycleState.BUILD_FAILED}),
    LifecycleState.BUILT: frozenset({LifecycleState.LAUNCHING}),
    LifecycleState.LAUNCHING: frozenset(
        {
            LifecycleState.RUNNING,
            LifecycleState.NO_WEB_PROCESS,
            LifecycleState.LAUNCH_FAILED,
        }
    ),
}

TERMINAL_EXIT_CODES: dict[LifecycleState, ExitCode] = {
    LifecycleState.UNDETECTED: ExitCode.DETECT_FAILED,
    LifecycleState.BUILD_FAILED: ExitCode.BUILD_FAILED,
    LifecycleState.NO_WEB_PROCESS: ExitCode.SUCCESS,
    LifecycleState.LAUNCH_FAILED: ExitCode.LAUNCH_FAILED,
}


@dataclass(frozen=True)
class PhaseEnvironment:
    """Process contract for buildpack executables.

    Both phases receive the same environment; positional arguments are
    ``bin/detect <platform_dir> <plan>`` and
    ``bin/build <layers_dir> <platform_dir> <plan>``.
    """

    buildpack_dir: Path
    home_dir: Path
    platform_dir: Path
    layers_dir: Path
    plan: Path
    stack_id: str

    def env(self) -> dict[str, str]:
        return {
            "CNB_BUILDPACK_DIR": str(self.buildpack_dir),
            "CNB_STACK_ID": self.stack_id,
            "HOME": str(self.home_dir),
        }

    def detect_args(self) -> list[str | Path]:
        return [self.buildpack_dir / "bin" / "detect", self.platform_dir, self.plan]

    def build_args(self) -> list[str | Path]:
        return [self.buildpack_dir / "bin" / "build", self.layers_dir, self.platform_dir, self.plan]

    @property
    def launch_descriptor(self) -> Path:
        return self.layers_dir / LAUNCH_FILE_NAME


@dataclass(frozen=True)
class LifecycleOutcome:
    """Terminal result of a lifecycle run.

    Attributes:
        state: Terminal state reached
        exit_code: Exit code the program should terminate with
        history: Every state visited, in order
        message: Human-readable reason for a failure state
        build_output: Captured build output (empty if build never ran)
        build_returncode: Exit status of bin/build, None if it did not exit
        process: Web process that was launched, if any
    """

    state: LifecycleState
    exit_code: int
    history: tuple[LifecycleState, ...]
    message: str | None = None
    build_output: str = ""
    build_returncode: int | None = None
    process: ProcessDefinition | None = None

    @property
    def success(self) -> bool:
        return self.state in (LifecycleState.RUNNING, LifecycleState.NO_WEB_PROCESS)


class LifecycleRunner:
    """Drives one buildpack through detect, build and launch.

    A runner is single-use; create a new one per run.
    """

    def __init__(
        self,
        process_runner: ProcessRunner,
        environment: PhaseEnvironment,
        feedback: UserFeedback,
        *,
        detect_timeout: float | None = None,
        build_timeout: float | None = None,
    ) -> None:
        self._process_runner = process_runner
        self._environment = environment
        self._feedback = feedback
        self._detect_timeout = detect_timeout
        self._build_timeout = build_timeout
        self._history: list[LifecycleState] = [LifecycleState.PENDING]

    @property
    def state(self) -> LifecycleState:
        return self._history[-1]

    def _advance(self, new_state: LifecycleState) -> None:
        allowed = _TRANSITIONS.get(self.state, frozenset())
        if new_state not in allowed:
            raise RuntimeError(
                f"Illegal lifecycle transition: {self.state.value} -> {new_state.value}"
            )
        logger.debug("Lifecycle transition: %s -> %s", self.state.value, new_state.value)
        self._history.append(new_state)

    def _finish(
        self,
        state: LifecycleState,
        *,
        exit_code: int | None = None,
        message: str | None = None,
        build_output: str = "",
        build_returncode: int | None = None,
        process: ProcessDefinition | None = None,
    ) -> LifecycleOutcome:
        self._advance(state)
        if exit_code is None:
            exit_code = int(TERMINAL_EXIT_CODES[state])
        return LifecycleOutcome(
            state=state,
            exit_code=exit_code,
            history=tuple(self._history),
            message=message,
            build_output=build_output,
            build_returncode=build_returncode,
            process=process,
        )

    def run(self) -> LifecycleOutcome:
        """Run detect, build and launch in sequence.

        Returns:
            LifecycleOutcome for the terminal state reached

        Raises:
            RuntimeError: If the runner has already been used
        """
        if self.state is not LifecycleState.PENDING:
            raise RuntimeError("LifecycleRunner has already run")

        env = self._environment.env()

        self._advance(LifecycleState.DETECTING)
        detect = self._process_runner.run(
            self._environment.detect_args(),
            env,
            capture_output=False,
            timeout=self._detect_timeout,
        )
        if not detect.success:
            reason = detect.error or f"bin/detect exited with status {detect.returncode}"
            return self._finish(
                LifecycleState.UNDETECTED,
                message=f"No buildpacks detected: {reason}",
            )
        self._advance(LifecycleState.DETECTED)

        self._advance(LifecycleState.BUILDING)
        build = self._process_runner.run(
            self._environment.build_args(),
            env,
            capture_output=True,
            timeout=self._build_timeout,
        )
        if build.output:
            # Failed build output is shown even in quiet mode
            if build.success:
                self._feedback.info(build.output.rstrip("\n"))
            else:
                self._feedback.error(build.output.rstrip("\n"))
        if not build.success:
            reason = build.error or f"exit status {build.returncode}"
            return self._finish(
                LifecycleState.BUILD_FAILED,
                message=f"bin/build did not exit successfully: {reason}",
                build_output=build.output,
                build_returncode=build.returncode,
            )
        self._advance(LifecycleState.BUILT)

        self._advance(LifecycleState.LAUNCHING)
        return self._launch(build.output)

    def _launch(self, build_output: str) -> LifecycleOutcome:
        try:
            descriptor = load_launch_descriptor(self._environment.launch_descriptor)
        except LaunchDescriptorError as e:
            return self._finish(
                LifecycleState.LAUNCH_FAILED,
                message=str(e),
                build_output=build_output,
                build_returncode=0,
            )

        process = descriptor.find_process(WEB_PROCESS_TYPE)
        if process is None:
            return self._finish(
                LifecycleState.NO_WEB_PROCESS,
                message=f"No '{WEB_PROCESS_TYPE}' process declared; nothing to launch",
                build_output=build_output,
                build_returncode=0,
            )

        try:
            exit_code = self._process_runner.run_interactive(process.argv())
        except OSError as e:
            return self._finish(
                LifecycleState.LAUNCH_FAILED,
                message=f"Failed to start {process.command}: {e}",
                build_output=build_output,
                build_returncode=0,
                process=process,
            )

        return self._finish(
            LifecycleState.RUNNING,
            exit_code=exit_code,
            build_output=build_output,
            build_returncode=0,
            process=process,
        )
