"""
GitHub protocol rewriting.

Fetch URLs for GitHub-hosted repositories are tried in the configured
protocol order. The push URL is computed separately: it uses SSH unless the
configuration restricts GitHub access to HTTPS.
"""

import re
from typing import Iterator, List, Optional
from urllib.parse import urlparse

from gitsource.config import Config
from gitsource.exceptions import InsecureUrlError, InvalidUrlError

_SSH_WITHOUT_PORT = re.compile(r"^ssh://[^@]+@[^:]+:[^0-9]+")
INSECURE_SCHEMES = ("http", "git")


class GitHubUrls:
    """Protocol-aware URL forms for the configured GitHub domains."""

    def __init__(self, config: Config):
        self.config = config
        domains = "|".join(re.escape(domain) for domain in config.github_domains)
        self._repo_url = re.compile(rf"^(?:https?|git)://({domains})/(.*)$")
        self._push_url = re.compile(
            rf"^(?:https?|git)://({domains})/([^/]+)/([^/]+?)(?:\.git)?$"
        )

    @property
    def protocols(self) -> List[str]:
        return self.config.github_protocols

    def is_github_url(self, url: str) -> bool:
        return bool(self._repo_url.match(url))

    def protocol_urls(self, url: str) -> Iterator[str]:
        """
        Yield the fetch URL for each configured protocol, in preference order.

        ssh and git both use the scp-like form, which is yielded only once.

        Examples (protocols https, ssh, git):
            https://github.com/org/repo -> https://github.com/org/repo
                                        -> git@github.com:org/repo
        """
        match = self._repo_url.match(url)
        if not match:
            yield url
            return
        host, path = match.groups()
        seen = set()
        for protocol in self.protocols:
            if protocol == "https":
                protocol_url = f"https://{host}/{path}"
            else:
                protocol_url = f"git@{host}:{path}"
            if protocol_url not in seen:
                seen.add(protocol_url)
                yield protocol_url

    def push_url(self, url: str) -> Optional[str]:
        """
        Push URL for a GitHub repository URL, None for other hosts.

        Examples:
            protocols [https]           -> https://github.com/org/repo.git
            protocols [https, ssh, git] -> git@github.com:org/repo.git
        """
        match = self._push_url.match(url)
        if not match:
            return None
        host, org, repo = match.groups()
        if set(self.protocols) == {"https"}:
            return f"https://{host}/{org}/{repo}.git"
        return f"git@{host}:{org}/{repo}.git"

    def check_allowed(self, url: str) -> None:
        """
        Refuse URLs that are malformed or that the configuration forbids.

        Raises:
            InvalidUrlError: ssh:// URL with a non-numeric port
            InsecureUrlError: http:// or git:// URL while secure-http is on
        """
        if _SSH_WITHOUT_PORT.match(url):
            raise InvalidUrlError(
                url,
                'ssh URLs should have a port number after ":".\n'
                "Use ssh://git@example.com:22/path or just git@example.com:path if you do not want to provide a password or custom port.",
            )
        if not self.config.secure_http:
            return
        parsed = urlparse(url)
        if parsed.scheme in INSECURE_SCHEMES and parsed.netloc:
            raise InsecureUrlError(url)
