"""
Console output, optionally mirrored to an output file.
"""


import os


# Global variables.
g_verbose = False
g_output_file = None


def configure(settings):
    """
    Set up logging from the settings, (re)starting the output file if one is wanted.
        Parameters:
            settings (dict): The merged settings.
    """
    global g_verbose
    global g_output_file

    close()
    g_verbose = settings["verbose_output"]
    if settings["output_to_file"]:
        # Make sure we start with no output file.
        if os.path.exists(settings["output_file"]):
            os.remove(settings["output_file"])
        g_output_file = open(settings["output_file"], "a")
        g_output_file.write("Logging to output file requested and started\n")


def close():
    global g_output_file
    if g_output_file is not None:
        g_output_file.close()
        g_output_file = None


def log(message, no_newline=False):
    """
    Log a regular message (will always be seen).
        Parameters:
            message (str):     A message to log.
            no_newline (bool): True to NOT print a newline after the log message.
    """
    if no_newline:
        print(message, end="")
    else:
        print(message)
    if g_output_file is not None:
        g_output_file.write(message + "\n")


def log_verbose(message):
    """
    Log a message that should only appear when verbose mode is enabled.
        Parameters:
            message (str): A message to log when verbose_output is enabled.
    """
    if g_verbose:
        log(message)


def log_result(label, result):
    """
    Report how an external tool call went.
        Parameters:
            label (str):         What the step was doing.
            result (ToolResult): What came back.
    """
    log_verbose("$ " + " ".join(result.args))
    if result.stdout.strip():
        log_verbose(result.stdout.rstrip())
    if result.ok:
        log(f"{label} ... done")
    else:
        log(f"!!!!! {label} ... {result.status.value} (exit code {result.returncode})")
        if result.stderr.strip():
            log(result.stderr.rstrip())
