"""
Formula bumping — compute checksums for new releases.

Resolves the release tag (explicit, or the latest GitHub release/tag),
downloads the tag archive without verification and returns an updated
formula carrying the archive's real SHA-256.
"""

import logging
from dataclasses import replace

from github import Github, GithubException, UnknownObjectException

from formula_tap.config import github_token
from formula_tap.core.fetcher import ArchiveFetcher, sha256_file
from formula_tap.errors import FetchError, ManifestError
from formula_tap.models.formula import Formula

logger = logging.getLogger(__name__)


class FormulaBumper:
    """Produces formulae with up-to-date url and sha256 stanzas."""

    def __init__(
        self,
        fetcher: ArchiveFetcher | None = None,
        token: str | None = None,
        github: Github | None = None,
    ):
        self.token = token or github_token()
        self.fetcher = fetcher or ArchiveFetcher()

        if github is not None:
            self.gh = github
        elif self.token:
            self.gh = Github(self.token)
        else:
            logger.warning("No GITHUB_TOKEN. Release lookups will be rate-limited.")
            self.gh = Github()

    def latest_tag(self, repo_name: str) -> str:
        """Tag of the latest published release, falling back to the newest tag."""
        try:
            repo = self.gh.get_repo(repo_name)
            try:
                return repo.get_latest_release().tag_name
            except UnknownObjectException:
                logger.debug(f"{repo_name} has no releases, falling back to tags")

            for tag in repo.get_tags():
                return tag.name
        except GithubException as e:
            raise FetchError(f"GitHub lookup failed for {repo_name}: {e}") from e

        raise FetchError(f"{repo_name} has no releases or tags")

    async def compute(self, formula: Formula, version: str | None = None) -> Formula:
        """
        Return a copy of `formula` whose sha256 matches its (possibly new) archive.

        `version` is a release tag ("v1.2.0") or a bare version ("1.2.0");
        a bare version takes the "v" prefix when the current tag has one.
        Without it, GitHub tag archives move to the latest release; other
        URLs are only re-hashed.
        """
        if formula.tag is None:
            if version:
                raise ManifestError(formula.name, [f"{formula.url} is not a GitHub tag archive"])
            candidate = formula
        else:
            if not version and not formula.github_repo:
                raise ManifestError(formula.name, ["cannot look up releases for a non-GitHub archive; pass a version"])
            tag = self._as_tag(formula, version) if version else self.latest_tag(formula.github_repo)
            candidate = formula.with_release(tag, formula.sha256)
            logger.info(f"[Bump] {formula.name}: {formula.tag} -> {tag}")

        archive = await self.fetcher.fetch(candidate, verify=False)
        digest = sha256_file(archive)

        if digest == formula.sha256 and candidate.url == formula.url:
            logger.info(f"[Bump] {formula.name} is already up to date")
        return replace(candidate, sha256=digest)

    @staticmethod
    def _as_tag(formula: Formula, version: str) -> str:
        """'1.2.0' -> 'v1.2.0' when the formula's current tag is v-prefixed."""
        if formula.tag.startswith("v") and not version.startswith("v"):
            return f"v{version}"
        return version
