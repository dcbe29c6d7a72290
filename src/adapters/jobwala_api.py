"""JobWala backend facade.

Thin mapping from admin-panel operations to `(endpoint, method, body)` calls on
the `RequestExecutor`. The only state it touches is the credential store, and
only to persist a freshly issued token and profile after authentication.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import quote

import httpx

from adapters.local_storage import FileKeyValueStore
from adapters.request_executor import RequestExecutor
from core.config import AppSettings
from core.domain.errors import ClassifiedError
from core.domain.models import UserSnapshot
from core.log import get_logger
from core.services.credential_store import CredentialStore
from core.services.endpoint_resolver import EndpointResolver

_log = get_logger("api")

EMPLOYER_ROLES = ("company", "consultancy")
ADMIN_ROLES = ("admin", "superadmin")


def _clean_filters(filters: dict[str, Any] | None) -> dict[str, Any] | None:
    if not filters:
        return None
    cleaned = {k: v for k, v in filters.items() if v is not None and v != ""}
    return cleaned or None


class JobWalaAPI:
    def __init__(self, executor: RequestExecutor, credentials: CredentialStore) -> None:
        self._executor = executor
        self._credentials = credentials

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    @property
    def resolver(self) -> EndpointResolver:
        return self._executor.resolver

    async def _request(self, endpoint: str, **kwargs: Any) -> Any:
        return await self._executor.execute(endpoint, **kwargs)

    async def _store_session(self, data: Any) -> None:
        if isinstance(data, dict) and data.get("token"):
            await self._credentials.set_token(str(data["token"]))
            await self._credentials.save_user_profile(data.get("user"))

    # Authentication

    async def login(self, credentials: dict[str, Any]) -> Any:
        user_type = credentials.get("userType")
        if user_type == "jobseeker":
            endpoint = "/jobseeker/login"
        elif user_type == "employer":
            endpoint = "/employer/login"
        else:
            endpoint = "/auth/login"
        data = await self._request(endpoint, method="POST", json=credentials)
        await self._store_session(data)
        return data

    async def company_login(self, credentials: dict[str, Any]) -> Any:
        data = await self._request("/company/login", method="POST", json=credentials)
        await self._store_session(data)
        return data

    async def consultancy_login(self, credentials: dict[str, Any]) -> Any:
        data = await self._request("/consultancy/login", method="POST", json=credentials)
        await self._store_session(data)
        return data

    async def register(self, user_data: dict[str, Any]) -> Any:
        data = await self._request("/auth/register", method="POST", json=user_data)
        await self._store_session(data)
        return data

    async def company_register(self, user_data: dict[str, Any]) -> Any:
        data = await self._request("/company/register", method="POST", json=user_data)
        await self._store_session(data)
        return data

    async def consultancy_register(self, user_data: dict[str, Any]) -> Any:
        data = await self._request("/consultancy/register", method="POST", json=user_data)
        await self._store_session(data)
        return data

    async def logout(self) -> None:
        try:
            await self._request("/auth/logout", method="POST")
        except ClassifiedError as exc:
            _log.warning("Logout request failed, clearing local session anyway: %s", exc.message)
        finally:
            await self._credentials.clear_token()

    async def get_current_user(self) -> Any:
        try:
            data = await self._request("/auth/me")
        except ClassifiedError:
            await self._credentials.clear_token()
            raise
        user = data.get("user") if isinstance(data, dict) else None
        await self._credentials.save_current_user(user)
        return user

    # Session helpers

    def is_authenticated(self) -> bool:
        return self._credentials.is_authenticated

    async def get_current_user_from_storage(self) -> UserSnapshot | None:
        return await self._credentials.load_user_profile()

    async def has_role(self, role: str) -> bool:
        user = await self.get_current_user_from_storage()
        return user is not None and user.user_type == role

    async def has_any_role(self, roles: Iterable[str]) -> bool:
        user = await self.get_current_user_from_storage()
        return user is not None and user.user_type in set(roles)

    async def is_employer(self) -> bool:
        return await self.has_any_role(EMPLOYER_ROLES)

    async def is_admin(self) -> bool:
        return await self.has_any_role(ADMIN_ROLES)

    # Jobs

    async def get_jobs(self, filters: dict[str, Any] | None = None) -> Any:
        return await self._request("/jobs", params=_clean_filters(filters))

    async def get_job(self, job_id: str) -> Any:
        return await self._request(f"/jobs/{job_id}")

    async def create_job(self, job_data: dict[str, Any]) -> Any:
        return await self._request("/jobs", method="POST", json=job_data)

    async def update_job(self, job_id: str, job_data: dict[str, Any]) -> Any:
        return await self._request(f"/jobs/{job_id}", method="PUT", json=job_data)

    async def delete_job(self, job_id: str) -> Any:
        return await self._request(f"/jobs/{job_id}", method="DELETE")

    async def search_jobs(self, query: str) -> Any:
        return await self._request("/jobs/search/suggestions", params={"q": query})

    async def get_jobs_for_admin(self, filters: dict[str, Any] | None = None) -> Any:
        return await self._request("/admin/jobs", params=_clean_filters(filters))

    async def approve_job(self, job_id: str) -> Any:
        return await self._request(f"/admin/jobs/{job_id}/approve", method="PUT")

    async def reject_job(self, job_id: str, reason: str) -> Any:
        return await self._request(f"/admin/jobs/{job_id}/reject", method="PUT", json={"reason": reason})

    # Applications

    async def get_job_applications(self, job_id: str) -> Any:
        return await self._request(f"/applications/job/{job_id}")

    async def get_applications_for_admin(self, filters: dict[str, Any] | None = None) -> Any:
        return await self._request("/admin/applications", params=_clean_filters(filters))

    async def update_application_status(self, application_id: str, status: str) -> Any:
        return await self._request(
            f"/applications/{application_id}/status",
            method="PUT",
            json={"status": status},
        )

    # Users and teams

    async def get_users_for_admin(self, filters: dict[str, Any] | None = None) -> Any:
        return await self._request("/admin/users", params=_clean_filters(filters))

    async def update_user_status(self, user_id: str, status: str) -> Any:
        return await self._request(f"/admin/users/{user_id}/status", method="PUT", json={"status": status})

    async def delete_user(self, user_id: str) -> Any:
        return await self._request(f"/admin/users/{user_id}", method="DELETE")

    async def update_team_limit(self, user_id: str, team_limit: int) -> Any:
        return await self._request(
            f"/admin/users/{user_id}/team-limit",
            method="PATCH",
            json={"teamLimit": int(team_limit)},
        )

    # Packages

    async def get_packages(self, package_type: str | None = None) -> Any:
        return await self._request("/packages", params=_clean_filters({"type": package_type}))

    async def get_admin_packages(self) -> Any:
        return await self._request("/admin/packages")

    async def create_package(self, package_data: dict[str, Any]) -> Any:
        return await self._request("/admin/packages", method="POST", json=package_data)

    async def update_package(self, package_id: str, package_data: dict[str, Any]) -> Any:
        return await self._request(f"/admin/packages/{package_id}", method="PUT", json=package_data)

    async def delete_package(self, package_id: str) -> Any:
        return await self._request(f"/admin/packages/{package_id}", method="DELETE")

    async def toggle_package_active(self, package_id: str) -> Any:
        return await self._request(f"/admin/packages/{package_id}/toggle-active", method="PATCH")

    async def toggle_package_featured(self, package_id: str) -> Any:
        return await self._request(f"/admin/packages/{package_id}/toggle-featured", method="PATCH")

    # Advertisements

    async def get_advertisements(self, limit: int = 100) -> Any:
        return await self._request("/advertisements/admin/list", params={"limit": limit})

    async def get_advertisement_stats(self) -> Any:
        return await self._request("/advertisements/admin/stats")

    async def create_advertisement(self, ad_data: dict[str, Any]) -> Any:
        return await self._request("/advertisements/admin/create", method="POST", json=ad_data)

    async def update_advertisement(self, ad_id: str, ad_data: dict[str, Any]) -> Any:
        return await self._request(f"/advertisements/admin/{ad_id}", method="PUT", json=ad_data)

    async def delete_advertisement(self, ad_id: str) -> Any:
        return await self._request(f"/advertisements/admin/{ad_id}", method="DELETE")

    async def update_advertisement_status(self, ad_id: str, status: str) -> Any:
        return await self._request(
            f"/advertisements/admin/{ad_id}/status",
            method="PUT",
            json={"status": status},
        )

    # Homepage

    async def get_homepage_config(self) -> Any:
        return await self._request("/admin/homepage/config")

    async def update_homepage_config(self, config: dict[str, Any]) -> Any:
        return await self._request("/admin/homepage/config", method="PUT", json=config)

    async def add_homepage_banner(self, banner: dict[str, Any]) -> Any:
        return await self._request("/admin/homepage/banners", method="POST", json=banner)

    async def delete_homepage_banner(self, index: int) -> Any:
        return await self._request(f"/admin/homepage/banners/{index}", method="DELETE")

    # Master data (job posting form lookups)

    async def get_job_roles(self) -> Any:
        return await self._request("/job-roles")

    async def get_industries(self) -> Any:
        return await self._request("/industries")

    async def get_industry_subcategories(self, industry: str) -> Any:
        return await self._request(f"/industries/{quote(industry, safe='')}/subcategories")

    async def get_departments(self) -> Any:
        return await self._request("/departments")

    async def get_department_subcategories(self, department: str) -> Any:
        return await self._request(f"/departments/{quote(department, safe='')}/subcategories")

    async def search_skills(self, query: str, limit: int = 12) -> Any:
        return await self._request("/skills/search", params={"q": query, "limit": limit})

    async def get_popular_skills(self, limit: int = 50) -> Any:
        return await self._request("/skills/popular", params={"limit": limit})

    # Dashboard

    async def get_admin_dashboard(self) -> Any:
        return await self._request("/admin/dashboard")

    async def get_admin_stats(self) -> Any:
        return await self._request("/admin/stats")

    # Uploads

    async def upload_file(self, path: Path, *, kind: str = "general") -> Any:
        """Multipart upload; the transport sets the boundary header."""

        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        # Read once so every retry re-sends the same bytes.
        content = path.read_bytes()
        return await self._request(
            f"/upload/{kind}",
            method="POST",
            files={"file": (path.name, content, content_type)},
        )


def create_api(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> JobWalaAPI:
    """Wire settings, endpoint resolver, storage, credentials and executor."""

    settings = settings or AppSettings()
    resolver = EndpointResolver(settings)
    credentials = CredentialStore(FileKeyValueStore(settings.resolved_storage_path()))
    executor = RequestExecutor(settings, resolver, credentials, transport=transport)
    return JobWalaAPI(executor, credentials)
