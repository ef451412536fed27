# Deployment trigger
# runs the one configured deploy command (git pull, restart, ...)
# - at most one deploy in flight; a second caller gets DeployBusy
# - bounded by a timeout; the process is killed when it runs over

import os
import signal
import subprocess
import sys
import threading

PIPE_DRAIN_TIMEOUT = 5.0


class DeployBusy(Exception):
    pass


class DeployExecutionError(Exception):
    def __init__(self, message, outcome=None):
        super().__init__(message)
        self.outcome = outcome


class DeployOutcome:
    def __init__(self, returncode, stdout="", stderr="", timed_out=False):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.timed_out = timed_out

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    def __repr__(self):
        return f"DeployOutcome(returncode={self.returncode!r}, timed_out={self.timed_out})"


def _kill_group(proc):
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    proc.kill()


def _drain(proc):
    # a child that left the process group can hold the pipes open indefinitely
    try:
        return proc.communicate(timeout=PIPE_DRAIN_TIMEOUT)
    except subprocess.TimeoutExpired:
        proc.stdout.close()
        proc.stderr.close()
        return "", ""


def run_cmd(cmd, timeout=None) -> DeployOutcome:
    """
    Run cmd (argv list, no shell), capture stdout/stderr.
    Kills the child if it is still running after `timeout` seconds.
    """
    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            start_new_session=True,  # own process group, so a timeout kills the whole script
        )
    except OSError as e:
        raise DeployExecutionError(f"could not start {cmd[0]}: {e.strerror or e}") from e

    try:
        out, err = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_group(proc)
        proc.wait()
        out, err = _drain(proc)
        return DeployOutcome(proc.returncode, (out or "").strip(), (err or "").strip(), timed_out=True)
    return DeployOutcome(proc.returncode, out.strip(), err.strip())


class DeployTrigger:
    def __init__(self, command, timeout, busy_wait=0.0):
        self.command = list(command)
        self.timeout = timeout
        self.busy_wait = busy_wait
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def _acquire(self) -> bool:
        if self.busy_wait > 0:
            return self._lock.acquire(timeout=self.busy_wait)
        return self._lock.acquire(blocking=False)

    def run(self) -> DeployOutcome:
        """
        Run the deploy command once, holding the guard for its whole lifetime.

        Returns the outcome on exit status 0. Raises DeployBusy if another
        deploy holds the guard, DeployExecutionError on a start failure,
        non-zero exit or timeout.
        """
        if not self._acquire():
            raise DeployBusy("deploy already in progress")

        try:
            print(f"[deploy] running {' '.join(self.command)} (timeout {self.timeout:g}s)")
            outcome = run_cmd(self.command, timeout=self.timeout)
        finally:
            self._lock.release()

        if outcome.stdout:
            print(f"[deploy] stdout:\n{outcome.stdout}")
        if outcome.stderr:
            print(f"[deploy] stderr:\n{outcome.stderr}", file=sys.stderr)

        if outcome.timed_out:
            raise DeployExecutionError(f"deploy timed out after {self.timeout:g}s", outcome)
        if outcome.returncode != 0:
            raise DeployExecutionError(f"deploy exited with status {outcome.returncode}", outcome)
        return outcome
