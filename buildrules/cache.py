"""
The build cache: remembers the last branch an update went through for.
"""


import json
import os


class BuildCache:
    """
    A single-record JSON file, {"LastSuccessfulBranch": "<branch>"}.  There's no locking, it's assumed only one
    build runs at a time.
    """

    FIELD = "LastSuccessfulBranch"

    def __init__(self, path):
        self.path = path

    def save(self, branch):
        """
        Record a branch, replacing whatever was there before.
            Parameters:
                branch (str): The branch name.
        """
        with open(self.path, "w") as cache_file:
            json.dump({self.FIELD: branch}, cache_file)

    def load(self):
        """
        Get the cached branch.
            Returns:
                The branch name, or None if there's no cache file or it can't be read.
        """
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path) as cache_file:
                cache_data = json.load(cache_file)
        except (OSError, json.JSONDecodeError):
            return None
        if not isinstance(cache_data, dict):
            return None
        branch = cache_data.get(self.FIELD)
        if not isinstance(branch, str) or not branch:
            return None
        return branch
