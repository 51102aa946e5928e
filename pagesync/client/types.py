"""Response types returned by the Pages API.

Only the fields the pipeline reads are modelled; everything else in the
store's payload is ignored.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Project:
    """A Pages project as reported by GET /pages/projects/{name}.

    subdomain: e.g. "my-site.pages.dev"; branch previews live under it.
    domains: Attached domains; the last entry is usually the custom domain.
    """

    name: str
    subdomain: str
    production_branch: str
    domains: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "Project":
        return cls(
            name=data.get("name", ""),
            subdomain=data.get("subdomain", ""),
            production_branch=data.get("production_branch", ""),
            domains=list(data.get("domains") or []),
        )


@dataclass
class Deployment:
    """A deployment record created by POST /deployments."""

    id: str
    url: str
    environment: str = ""
    branch: Optional[str] = None
    aliases: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "Deployment":
        trigger = data.get("deployment_trigger") or {}
        metadata = trigger.get("metadata") or {}
        return cls(
            id=data["id"],
            url=data.get("url", ""),
            environment=data.get("environment", ""),
            branch=metadata.get("branch"),
            aliases=list(data.get("aliases") or []),
        )
