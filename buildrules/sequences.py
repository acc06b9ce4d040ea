"""
The command sequences the rules run: update, run (Python or Node.js), exit and rollback (CTLFS).

Each external step is reported as it finishes.  Unless running strict, a failed step doesn't stop the sequence, the
same as typing the commands by hand one after another would.
"""


import json
import os

from buildrules import git, processes, tools
from buildrules.console import log, log_result, log_verbose


NODE_ENTRY_POINT = "index.js"
NODE_GREETING = "Hello from Node.js!"


# ----------------------------------------------------------------------------------------------------------------------
# ---------------------------------------------------- Helpers ---------------------------------------------------------
# ----------------------------------------------------------------------------------------------------------------------


def open_in_browser(settings, url):
    result = tools.spawn_tool([settings["browser"], url])
    log_result(f"Opening {url} in {settings['browser']}", result)
    return result.ok


def ask_for_commit_message(settings):
    """
    Pop up a box asking for the commit message.
        Returns:
            The message, or None if the box was cancelled.
    """
    # easygui needs Tk, so only import it when a box is actually wanted.
    import easygui  # pip install easygui
    return easygui.enterbox("Commit message?", "build update", settings["default_commit_message"])


# ----------------------------------------------------------------------------------------------------------------------
# --------------------------------------------------- Sequences --------------------------------------------------------
# ----------------------------------------------------------------------------------------------------------------------


def update(settings, cache, message=None, strict=None):
    """
    Stage and commit everything, bring the current branch in line with origin (fetch, pull, push), remember the
    branch in the build cache and open the repository in the browser.
        Parameters:
            settings (dict):   The merged settings.
            cache (BuildCache): Where the branch gets recorded.
            message (str):     Commit message, defaults to the configured one (or a prompt, if configured).
            strict (bool):     True to stop at the first failed git step, defaults to the configured value.
        Returns:
            True if every git step succeeded.
        Raises:
            ToolError if the current branch can't be determined.
    """
    if strict is None:
        strict = settings["strict"]

    log("\nUpdating repository...")

    if not message:
        if settings["prompt_for_commit_message"]:
            message = ask_for_commit_message(settings)
            if message is None:
                log("No commit message entered, skipping update")
                return False
        else:
            message = settings["default_commit_message"]
    log_verbose(f"Commit message: {message}")

    all_ok = True

    result = git.run_git("add", "-A")
    log_result("Staging changes", result)
    if not result.ok:
        all_ok = False
        if strict:
            return False

    # git diff --quiet exits 0 when nothing is staged, in which case committing would just fail.
    if git.run_git("diff", "--cached", "--quiet").ok:
        log("Nothing to commit")
    else:
        result = git.run_git("commit", "-m", message)
        log_result(f"Committing \"{message}\"", result)
        if not result.ok:
            all_ok = False
            if strict:
                return False

    branch = git.current_branch()
    log(f"Current branch: {branch}")

    # Pull before push so the push doesn't get rejected for trivially being behind.
    for label, verb in (("Fetching", "fetch"), ("Pulling", "pull"), ("Pushing", "push")):
        result = git.run_git(verb, "origin", branch)
        log_result(f"{label} {branch}", result)
        if not result.ok:
            all_ok = False
            if strict:
                log("Stopping update, branch not cached")
                return False

    cache.save(branch)
    log(f"Cached {branch} as the last successful branch")

    url = git.repository_url()
    if url is None:
        log("No origin remote configured, not opening browser")
    else:
        open_in_browser(settings, url)

    return all_ok


def run_python(settings):
    """
    Start the Python app under waitress and open it in the browser, if this is a Python project.
        Returns:
            True if the server was started.
    """
    marker = settings["python_marker"]
    if not os.path.exists(marker):
        log(f"No {marker} found, this doesn't look like a Python project.")
        log("For a Node.js project try: build run nodejs")
        return False

    host = settings["host"]
    port = settings["port"]
    log(f"\nStarting {settings['wsgi_app']} on {host}:{port}...")
    result = tools.spawn_tool(["waitress-serve", f"--host={host}", f"--port={port}", settings["wsgi_app"]])
    log_result("Starting waitress", result)
    if not result.ok:
        return False
    open_in_browser(settings, f"http://{host}:{port}/")
    return True


def run_nodejs(settings):
    """
    Create a bare-bones Node.js project if there isn't one yet, otherwise start the one that's there.
        Returns:
            True if the project was created or started.
    """
    folder = settings["node_folder"]

    if os.path.exists(folder) and not os.path.isdir(folder):
        log(f"{folder} exists but isn't a folder, not creating a Node.js project there.")
        log("Set node_folder in build_config.json to somewhere else.")
        return False

    if not os.path.isdir(folder):
        log(f"\nCreating Node.js project in {folder}...")
        os.makedirs(folder)
        package = {
            "name": os.path.basename(os.path.abspath(folder)),
            "version": "1.0.0",
            "description": "Minimal Node.js application",
            "main": NODE_ENTRY_POINT,
            "scripts": {"start": f"node {NODE_ENTRY_POINT}"},
            "dependencies": {},
        }
        with open(os.path.join(folder, "package.json"), "w") as package_file:
            json.dump(package, package_file, indent=2)
            package_file.write("\n")
        with open(os.path.join(folder, NODE_ENTRY_POINT), "w") as entry_file:
            entry_file.write(f"console.log(\"{NODE_GREETING}\");\n")
        log("...done!  Run it with: build run nodejs")
        return True

    log(f"\nStarting Node.js project in {folder}...")
    result = tools.spawn_tool(["node", NODE_ENTRY_POINT], cwd=folder)
    log_result("Starting node", result)
    return result.ok


def exit_project(settings, cache, strict=None):
    """
    Wrap up for the day: update (unless exit_runs_update is off), stop the servers, free the port, and close
    editors left open in terminal windows.  A step that finds nothing to do doesn't stop the ones after it.
    """
    if settings["exit_runs_update"]:
        try:
            update(settings, cache, strict=strict)
        except tools.BuildError as error:
            log(f"!!!!! Update failed: {error}")
    else:
        log_verbose("exit_runs_update is off, not updating")

    pattern = settings["server_process_pattern"]
    log(f"\nStopping {pattern} processes...")
    killed = processes.kill_by_name(pattern)
    if killed:
        log(f"Stopped {len(killed)} process(es): {', '.join(str(pid) for pid in killed)}")
    else:
        log(f"No {pattern} processes found")

    port = settings["port"]
    log(f"\nFreeing port {port}...")
    pid = processes.find_port_owner(port)
    if pid is None:
        log(f"No process found on port {port}")
    elif processes.kill_pid(pid):
        log(f"Killed process {pid} on port {port}")
    else:
        log(f"!!!!! Could not kill process {pid} on port {port}")

    title = settings["terminal_window_title"]
    editor = settings["editor_process_pattern"]
    log(f"\nClosing {editor} in {title} windows...")
    closed = processes.close_terminal_windows(title, editor)
    if closed:
        log(f"Closed {len(closed)} process(es): {', '.join(str(pid) for pid in closed)}")
    else:
        log(f"No {editor} processes found in {title} windows")


def rollback(cache):
    """
    Go back to the last branch an update succeeded for (rule CTLFS).
        Returns:
            True if the branch was checked out and pulled.
    """
    branch = cache.load()
    if branch is None:
        log("No cached branch found")
        return False

    log(f"\nRolling back to {branch}...")
    result = git.run_git("checkout", branch)
    log_result(f"Checking out {branch}", result)
    # Pulling the cached branch into whatever is still checked out would merge it there.
    if not result.ok:
        return False
    result = git.run_git("pull", "origin", branch)
    log_result(f"Pulling {branch}", result)
    if not result.ok:
        return False
    log(f"Rolled back to {branch}")
    return True
