import psutil
import logging
from typing import List

from devhost.local.config import effective_settings as config

log = logging.getLogger(__name__)


def identify_processes_to_stop(pid: int) -> List[psutil.Process]:
    """
    Returns the module process and all of its descendants.

    :param pid: The PID of the module process.
    :return: The processes that are still alive, parent first.
    """
    try:
        parent = psutil.Process(pid)
        return [parent] + parent.children(recursive=True)
    except psutil.NoSuchProcess:
        return []


def _signal_all(processes: List[psutil.Process], force: bool) -> None:
    for proc in processes:
        try:
            if force:
                log.warning(f"Killing module process {proc.pid}, it ignored SIGTERM.")
                proc.kill()
            else:
                proc.terminate()
        except psutil.NoSuchProcess:
            pass


def terminate_child(pid: int) -> None:
    """
    Stops the module and its descendants.

    Every process gets SIGTERM, then SIGKILL if it is still alive after
    `TERMINATE_TIMEOUT` seconds.

    :param pid: The PID of the module process.
    """
    processes = identify_processes_to_stop(pid)
    if not processes:
        log.debug(f"Module process {pid} already gone.")
        return

    log.info(f"Stopping module (PID {pid}) and {len(processes) - 1} descendant(s)...")
    _signal_all(processes, force=False)
    _, alive = psutil.wait_procs(processes, timeout=config.TERMINATE_TIMEOUT)
    if alive:
        _signal_all(alive, force=True)
        psutil.wait_procs(alive, timeout=1)
