from typing import Optional, Union


class GitHubError(Exception):
    pass


class GitHubConfigurationError(GitHubError):
    pass


class GitHubRateLimitError(GitHubError):
    def __init__(self, message: str, retry_after: Union[int, float, None] = None):
        super().__init__(message)
        self.retry_after: Optional[float] = retry_after
