"""
Repository coordinate model for regkeeper.

A catalog entry points at its source repository with a reference string
such as ``github:elizaos-plugins/plugin-solana``; this module parses it
into a :class:`RepositoryCoordinate`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from regkeeper.constants import GITHUB_REF_PREFIX
from regkeeper.exceptions import ParseError


@dataclass(frozen=True)
class RepositoryCoordinate:
    """Owner and name of a GitHub repository.

    Attributes:
        owner: Account or organization owning the repository.
        name: Repository name.
    """

    owner: str
    name: str

    @property
    def slug(self) -> str:
        """``owner/name`` form used by the GitHub API and the report."""
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return f"{GITHUB_REF_PREFIX}{self.slug}"

    @classmethod
    def parse(cls, reference: Any) -> "RepositoryCoordinate":
        """Parse a ``github:<owner>/<repo>`` reference.

        Path segments after the repository name are ignored.

        Raises:
            ParseError: ``reference`` is not a string, lacks the
                ``github:`` prefix, or has an empty owner or name.

        Example::

            >>> RepositoryCoordinate.parse("github:acme/plugin-foo").slug
            'acme/plugin-foo'
        """
        if not isinstance(reference, str):
            raise ParseError(
                "Repository reference must be a string",
                value=repr(reference),
            )

        if not reference.startswith(GITHUB_REF_PREFIX):
            raise ParseError(
                f"Repository reference must start with '{GITHUB_REF_PREFIX}'",
                value=reference,
            )

        parts = reference[len(GITHUB_REF_PREFIX):].split("/")
        owner = parts[0].strip()
        name = parts[1].strip() if len(parts) > 1 else ""

        if not owner or not name:
            raise ParseError(
                "Repository reference must name both owner and repository",
                value=reference,
            )

        return cls(owner=owner, name=name)

    @classmethod
    def try_parse(cls, reference: Any) -> Optional["RepositoryCoordinate"]:
        """Like :meth:`parse` but returns ``None`` instead of raising."""
        try:
            return cls.parse(reference)
        except ParseError:
            return None
