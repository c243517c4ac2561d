"""Project lookup through a personal API key."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from posthog_wizard.constants import CloudRegion, get_cloud_url_from_region, get_host_from_region
from posthog_wizard.exceptions import ProjectDataError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 30.0


@dataclass(frozen=True)
class ProjectData:
    """Credentials the rest of the wizard needs for one PostHog project.

    Attributes:
        project_api_key: Public ingestion key (``phc_...``) written to the env file.
        host: Ingestion host for the project's region.
        access_token: Personal API key used for the API and LLM gateway.
        project_id: Numeric project id.
        cloud_url: Web app URL for the region.
    """

    project_api_key: str
    host: str
    access_token: str
    project_id: int
    cloud_url: str


def fetch_project_data(
    api_key: str,
    region: CloudRegion | str,
    *,
    client: httpx.Client | None = None,
) -> ProjectData:
    """Resolve the current project of a personal API key.

    Raises:
        ProjectDataError: The key is rejected or the response lacks a project token.
    """
    cloud_url = get_cloud_url_from_region(region)
    url = f"{cloud_url}/api/projects/@current/"

    owns_client = client is None
    http = client if client is not None else httpx.Client(timeout=DEFAULT_TIMEOUT)
    try:
        resp = http.get(url, headers={"Authorization": f"Bearer {api_key}"})
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPStatusError as exc:
        raise ProjectDataError(
            f"PostHog rejected the API key (HTTP {exc.response.status_code}). "
            "Check the key and its region."
        ) from exc
    except (httpx.HTTPError, ValueError) as exc:
        raise ProjectDataError(f"Could not reach PostHog: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    token = data.get("api_token") if isinstance(data, dict) else None
    project_id = data.get("id") if isinstance(data, dict) else None
    if not token or project_id is None:
        raise ProjectDataError("PostHog did not return a project token for this API key.")

    logger.debug("Resolved project %s in %s", project_id, cloud_url)
    return ProjectData(
        project_api_key=token,
        host=get_host_from_region(region),
        access_token=api_key,
        project_id=int(project_id),
        cloud_url=cloud_url,
    )
