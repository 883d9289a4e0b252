"""
Toolchain process tree cleanup.

configure and make spawn deep process trees (shells, compilers, the boot
JDK). Killing only the direct child on interrupt leaves compilers running
and holding files in the workspace, so the whole tree is terminated,
children first.
"""

import logging

import psutil


def kill_process_tree(root_pid: int, timeout: float = 3) -> int:
    """Terminate a process and all of its descendants.

    Args:
        root_pid: PID of the root process
        timeout: Seconds to wait for graceful termination before killing

    Returns:
        Number of processes signalled
    """
    try:
        root_proc = psutil.Process(root_pid)
    except psutil.NoSuchProcess:
        return 0

    try:
        children = root_proc.children(recursive=True)
    except psutil.NoSuchProcess:
        children = []

    # Children first (bottom-up to avoid orphans)
    processes_to_kill = list(reversed(children)) + [root_proc]

    killed_count = 0
    for proc in processes_to_kill:
        try:
            proc.terminate()
            killed_count += 1
            logging.debug(f"Terminated process {proc.pid}")
        except psutil.NoSuchProcess:
            pass  # Already dead
        except psutil.AccessDenied as e:
            logging.warning(f"Failed to terminate process {proc.pid}: {e}")

    _gone, alive = psutil.wait_procs(processes_to_kill, timeout=timeout)

    # Force kill any stragglers
    for proc in alive:
        try:
            proc.kill()
            logging.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass
        except psutil.AccessDenied as e:
            logging.warning(f"Failed to force kill process {proc.pid}: {e}")

    return killed_count
