import logging
import subprocess
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from . import actions, downloader, utils
from . import constants as const
from .context import DeviceHandle, TaskContext
from .device import DeviceController
from .errors import ToolError
from .i18n import get_string
from .logger import flush_handlers, get_logger
from .ui import ui


class RunState(Enum):
    INIT = "init"
    DEVICE_PREFLIGHT = "device_preflight"
    ENV_PREFLIGHT = "env_preflight"
    WORKSPACE_READY = "workspace_ready"
    DOWNLOADED = "downloaded"
    EXTRACTED = "extracted"
    PUSHED = "pushed"
    PATCHED = "patched"
    PULLED = "pulled"
    BOOTLOADER_REQUESTED = "bootloader_requested"
    FLASHED = "flashed"
    REBOOTED = "rebooted"
    DONE = "done"
    FAILED = "failed"
    CLEANUP = "cleanup"


@dataclass
class RunResult:
    state: RunState
    last_state: RunState
    failed_step: Optional[RunState] = None
    error: Optional[BaseException] = None
    device: Optional[DeviceHandle] = None
    history: List[RunState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is RunState.DONE

    @property
    def interrupted(self) -> bool:
        return isinstance(self.error, KeyboardInterrupt)


FAILURES = (ToolError, subprocess.CalledProcessError, OSError, RuntimeError, KeyboardInterrupt)


class Orchestrator:
    """Runs the root-and-flash pipeline for one device, one step per state.

    Every step either advances to its state or ends the run in FAILED; the
    workspace is removed in the cleanup phase whichever way the run ends.
    """

    def __init__(
        self,
        dev: DeviceController,
        logger: Optional[logging.Logger] = None,
        workspace_base: Optional[Union[str, Path]] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.dev = dev
        self.logger = logger or get_logger()
        self.workspace_base = workspace_base
        self.clock = clock
        self.sleep = sleep

    def _steps(self) -> List[Tuple[RunState, Callable[[TaskContext], None]]]:
        return [
            (RunState.DEVICE_PREFLIGHT, self._device_preflight),
            (RunState.ENV_PREFLIGHT, self._env_preflight),
            (RunState.WORKSPACE_READY, self._create_workspace),
            (RunState.DOWNLOADED, self._download),
            (RunState.EXTRACTED, self._extract),
            (RunState.PUSHED, self._push),
            (RunState.PATCHED, self._patch),
            (RunState.PULLED, self._pull),
            (RunState.BOOTLOADER_REQUESTED, self._enter_bootloader),
            (RunState.FLASHED, self._flash),
            (RunState.REBOOTED, self._reboot),
        ]

    def _device_preflight(self, ctx: TaskContext) -> None:
        utils.check_dependencies()
        ctx.device = actions.confirm_device_connected(ctx.dev)
        actions.confirm_rooted_debugging(ctx.dev)
        actions.confirm_patch_script_present(ctx.dev)

    def _env_preflight(self, ctx: TaskContext) -> None:
        actions.confirm_extraction_runtime()
        actions.ensure_packages()

    def _create_workspace(self, ctx: TaskContext) -> None:
        ctx.workspace = utils.create_workspace(self.workspace_base)

    def _download(self, ctx: TaskContext) -> None:
        ctx.artifact = downloader.fetch_latest_build(ctx.dev, ctx.workspace / const.FN_BUILD_ZIP)

    def _extract(self, ctx: TaskContext) -> None:
        ctx.boot_image = actions.extract_boot_image(ctx.artifact.path, ctx.workspace)

    def _push(self, ctx: TaskContext) -> None:
        actions.push_boot_image(ctx.dev, ctx.boot_image)

    def _patch(self, ctx: TaskContext) -> None:
        actions.invoke_patch(ctx.dev)

    def _pull(self, ctx: TaskContext) -> None:
        ctx.patched_image = actions.pull_patched_image(ctx.dev, ctx.workspace / const.FN_PATCHED_BOOT)

    def _enter_bootloader(self, ctx: TaskContext) -> None:
        actions.reboot_to_bootloader(ctx.dev)
        ctx.bootloader_ready = actions.await_bootloader_device(
            ctx.dev, clock=self.clock, sleep=self.sleep
        )

    def _flash(self, ctx: TaskContext) -> None:
        if not ctx.bootloader_ready:
            self.logger.warning(get_string("wf_warn_no_bootloader").format(serial=ctx.dev.serial))
        actions.flash_boot_image(ctx.dev, ctx.patched_image)

    def _reboot(self, ctx: TaskContext) -> None:
        actions.reboot_normal(ctx.dev)

    def _fail(self, result: RunResult, state: RunState, error: BaseException) -> None:
        result.state = RunState.FAILED
        result.failed_step = state
        result.error = error
        result.history.append(RunState.FAILED)

    def _report_failure(self, result: RunResult, expected: bool = True) -> None:
        step = get_string(f"wf_title_{result.failed_step.value}")
        if not expected:
            self.logger.error(get_string("wf_err_unexpected").format(
                step=step, kind=type(result.error).__name__, e=result.error
            ))
            return
        if result.interrupted:
            self.logger.error(get_string("wf_err_cancelled").format(step=step))
            return
        self.logger.error(get_string("wf_err_failed").format(
            step=step, kind=type(result.error).__name__, e=result.error
        ))

    def _cleanup(self, ctx: TaskContext, result: RunResult) -> None:
        result.history.append(RunState.CLEANUP)
        self.logger.info(get_string("wf_cleanup"))
        try:
            utils.remove_workspace(ctx.workspace)
        except OSError as e:
            self.logger.warning(get_string("wf_warn_cleanup").format(path=ctx.workspace, e=e))
        self.logger.info(get_string("wf_end"))
        flush_handlers(self.logger)

    def _run_steps(self, ctx: TaskContext, result: RunResult) -> RunResult:
        steps = self._steps()
        for index, (state, action) in enumerate(steps, 1):
            self.logger.info(get_string("wf_step").format(
                index=index, total=len(steps), title=get_string(f"wf_title_{state.value}")
            ))
            try:
                action(ctx)
            except FAILURES as e:
                self._fail(result, state, e)
                self._report_failure(result)
                return result
            except Exception as e:
                self._fail(result, state, e)
                self._report_failure(result, expected=False)
                raise

            result.last_state = state
            result.history.append(state)

        result.state = RunState.DONE
        result.last_state = RunState.DONE
        result.history.append(RunState.DONE)
        return result

    def run(self) -> RunResult:
        ctx = TaskContext(dev=self.dev)
        result = RunResult(state=RunState.INIT, last_state=RunState.INIT, history=[RunState.INIT])

        with ui.bound(self.logger):
            try:
                return self._run_steps(ctx, result)
            finally:
                result.device = ctx.device
                self._cleanup(ctx, result)
