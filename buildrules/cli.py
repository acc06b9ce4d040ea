"""
The build command: picks the rule and runs its sequence.

    build                     update, then exit
    build update ["message"]  commit, fetch, pull, push, cache the branch, open the repo in the browser
    build run                 start the Python app under waitress
    build run nodejs          create or start the Node.js app
    build exit                update, stop servers, free the port, close terminal editors
    build CTLFS               check out and pull the last cached branch
"""


import argparse
import sys

from buildrules import __version__, console, sequences
from buildrules.cache import BuildCache
from buildrules.config import load_config
from buildrules.console import log
from buildrules.tools import BuildError


RULES = ("default", "update", "run", "run nodejs", "exit", "CTLFS")


def resolve_rule(rule, argument=None):
    """
    Work out the rule from the command line, "run" followed by "nodejs" being the one two-word rule.
        Parameters:
            rule (str):     First positional argument, may be None or empty.
            argument (str): Second positional argument, if any.
        Returns:
            The rule name.
    """
    if not rule:
        return "default"
    if rule == "run" and argument == "nodejs":
        return "run nodejs"
    return rule


def dispatch(rule, settings, cache, message=None, strict=None):
    """
    Run the sequence for a rule.
        Parameters:
            rule (str):         The resolved rule name.
            settings (dict):    The merged settings.
            cache (BuildCache): The build cache.
            message (str):      Commit message, only used by update.
            strict (bool):      Overrides the configured strict setting when not None.
        Returns:
            The exit code, which is 0 whether or not the steps succeeded.
    """
    if rule == "default":
        # A failed update mustn't stop exit from running, same as running the two rules one after the other.
        try:
            sequences.update(settings, cache, message, strict)
        except BuildError as error:
            log(f"!!!!! Update failed: {error}")
        sequences.exit_project(settings, cache, strict)
    elif rule == "update":
        sequences.update(settings, cache, message, strict)
    elif rule == "run":
        sequences.run_python(settings)
    elif rule == "run nodejs":
        sequences.run_nodejs(settings)
    elif rule == "exit":
        sequences.exit_project(settings, cache, strict)
    elif rule == "CTLFS":
        sequences.rollback(cache)
    else:
        log(f"build: *** No rule to make target '{rule}'.  Stop.")
    return 0


def parse_args(argv):
    parser = argparse.ArgumentParser(prog="build", description="Project build rules.")
    parser.add_argument("rule", nargs="?", default="", help="one of: " + ", ".join(RULES))
    parser.add_argument("argument", nargs="?", help="commit message for update, or nodejs for run")
    parser.add_argument("--config", help="config file (default: build_config.json if present)")
    parser.add_argument("--strict", action="store_true", default=None,
                        help="stop a sequence at the first failed git step")
    parser.add_argument("--verbose", action="store_true", help="show the commands being run and their output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv=None):
    """
    The main function.  It all starts here!
    """
    args = parse_args(sys.argv[1:] if argv is None else argv)
    rule = resolve_rule(args.rule, args.argument)
    message = args.argument if rule in ("update", "default") else None

    try:
        settings = load_config(args.config)
        if args.verbose:
            settings["verbose_output"] = True
        console.configure(settings)
        cache = BuildCache(settings["cache_file"])
        return dispatch(rule, settings, cache, message, args.strict)
    except BuildError as error:
        log(f"!!!!! {error}")
        return 1
    finally:
        console.close()


if __name__ == "__main__":
    sys.exit(main())
