"""
Finding and stopping processes: by name, by the port they hold, and editors left open in terminal windows.
"""


import csv
import os
import sys

import psutil  # pip install psutil

if sys.platform == "win32":
    import wmi  # pip install wmi

from buildrules import tools
from buildrules.console import log_verbose


# How long to wait for a killed process to actually go away.
KILL_WAIT_SECONDS = 3


def kill_pid(pid):
    """
    Forcibly terminate a process.
        Parameters:
            pid (int): The process id.
        Returns:
            True if the process was killed, False if it was already gone or we aren't allowed to kill it.
    """
    try:
        process = psutil.Process(pid)
        process.kill()
        process.wait(timeout=KILL_WAIT_SECONDS)
    except psutil.NoSuchProcess:
        log_verbose(f"Process {pid} is already gone")
        return False
    except psutil.AccessDenied:
        log_verbose(f"Not allowed to kill process {pid}")
        return False
    except psutil.TimeoutExpired:
        log_verbose(f"Process {pid} did not exit within {KILL_WAIT_SECONDS} seconds")
    return True


def kill_by_name(pattern):
    """
    Terminate every process whose name contains a pattern (ignoring case).  This process is never touched.
        Parameters:
            pattern (str): Part of the process name, e.g. "waitress".
        Returns:
            List of the pids that were terminated.
    """
    pattern = pattern.lower()
    if sys.platform == "win32":
        return _kill_by_name_wmi(pattern)

    killed = []
    for process in psutil.process_iter(["pid", "name"]):
        pid = process.info["pid"]
        name = process.info["name"] or ""
        if pid == os.getpid() or pattern not in name.lower():
            continue
        if kill_pid(pid):
            killed.append(pid)
    return killed


def _kill_by_name_wmi(pattern):
    killed = []
    wmi_connection = wmi.WMI()
    for process in wmi_connection.Win32_Process():
        if process.ProcessId == os.getpid() or pattern not in (process.Name or "").lower():
            continue
        try:
            process.Terminate()
        except wmi.x_wmi as error:
            log_verbose(f"Could not terminate process {process.ProcessId}: {error}")
            continue
        killed.append(process.ProcessId)
    return killed


def find_port_owner(port):
    """
    Find the process holding a local TCP/UDP port, preferring one that's listening on it.
        Parameters:
            port (int): The local port.
        Returns:
            The owning pid, or None if nothing (that we're allowed to see) has the port.
    """
    owners = [(pid, connection) for pid, connection in _inet_connections()
              if pid and connection.laddr and connection.laddr.port == port]
    for pid, connection in owners:
        if connection.status == psutil.CONN_LISTEN:
            return pid
    if owners:
        return owners[0][0]
    return None


def _inet_connections():
    try:
        return [(connection.pid, connection) for connection in psutil.net_connections(kind="inet")]
    except psutil.AccessDenied:
        pass

    # macOS only lets root list everyone's connections at once, so ask process by process instead.
    connections = []
    for process in psutil.process_iter(["pid"]):
        try:
            for connection in process.net_connections(kind="inet"):
                connections.append((process.info["pid"], connection))
        except (psutil.AccessDenied, psutil.NoSuchProcess):
            continue
    return connections


def close_terminal_windows(title, pattern):
    """
    Close editors left running in terminal windows.  On Windows that's processes matching the pattern whose window
    title starts with the given title; elsewhere there are no window titles to go on, so it's processes matching the
    pattern that have a controlling terminal.
        Parameters:
            title (str):   Window title, e.g. "Terminal".
            pattern (str): Part of the editor's process name, e.g. "vim".
        Returns:
            List of the pids that were terminated.
    """
    if sys.platform == "win32":
        pids = _windowed_pids(title, pattern)
    else:
        pids = []
        for process in psutil.process_iter(["pid", "name", "terminal"]):
            name = process.info["name"] or ""
            if pattern.lower() in name.lower() and process.info["terminal"] and process.info["pid"] != os.getpid():
                pids.append(process.info["pid"])
    return [pid for pid in pids if kill_pid(pid)]


def _windowed_pids(title, pattern):
    result = tools.run_tool(["tasklist", "/V", "/FO", "CSV", "/NH",
                             "/FI", f"WINDOWTITLE eq {title}*", "/FI", f"IMAGENAME eq {pattern}*"])
    if not result.ok:
        return []
    pids = []
    # Rows are "Image Name","PID",...; tasklist prints an INFO: line instead when nothing matches.
    for row in csv.reader(result.stdout.splitlines()):
        if len(row) > 1 and row[1].isdigit():
            pids.append(int(row[1]))
    return pids
