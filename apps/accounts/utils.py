# accounts/utils.py
from __future__ import annotations

from django.utils.http import url_has_allowed_host_and_scheme


def resolve_safe_next_url(request, candidate: str | None = None) -> str:
    """Return a safe ``next`` URL limited to the current host."""
    if request is None:
        return ""

    next_url = candidate or request.POST.get("next") or request.GET.get("next")
    if not next_url:
        return ""

    if url_has_allowed_host_and_scheme(
        url=next_url,
        allowed_hosts={request.get_host()},
        require_https=request.is_secure(),
    ):
        return next_url
    return ""
