"""
The bits of git the sequences need to ask about: the current branch and where origin lives.
"""


import re

from buildrules import tools


# user@host:path, the scp-like syntax git uses for ssh remotes.  A one-letter host is a Windows drive, C:/repos.
SCP_LIKE_URL = re.compile(r"^(?:[^@/]+@)?([^:/\\]{2,}):(?!//)(.+)$")
# ssh://user@host:port/path
SSH_URL = re.compile(r"^ssh://(?:[^@/]+@)?([^:/]+)(?::\d+)?/(.+)$")


def run_git(*args, capture=True):
    return tools.run_tool(["git"] + list(args), capture=capture)


def current_branch():
    """
    Get the name of the branch that's checked out.
        Returns:
            The branch name.
        Raises:
            ToolError if git can't tell us (not a repository, no commits yet, git not installed).
    """
    result = run_git("rev-parse", "--abbrev-ref", "HEAD")
    if not result.ok:
        raise tools.ToolError(result)
    return result.stdout.strip()


def browsable_url(remote_url):
    """
    Turn a git remote URL into one a browser can open.
        Parameters:
            remote_url (str): The remote's URL as configured in git.
        Returns:
            An http(s) URL with the .git suffix removed.
    """
    url = remote_url.strip()
    if url.endswith(".git"):
        url = url[:-len(".git")]
    if url.startswith("http://") or url.startswith("https://"):
        return url

    match = SSH_URL.match(url) or SCP_LIKE_URL.match(url)
    if match:
        return f"https://{match.group(1)}/{match.group(2).lstrip('/')}"
    return url


def repository_url(remote="origin"):
    """
    Get the browsable URL of a remote, None if the remote isn't configured.
    """
    result = run_git("remote", "get-url", remote)
    if not result.ok or not result.stdout.strip():
        return None
    return browsable_url(result.stdout)
