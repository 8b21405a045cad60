# OAuth callback page renderer.
# Created: 2026-10-03
#
# The page never carries tokens. It only hands the opaque result id to the
# opener window (popup flow) or to the app origin (redirect flow); the app
# then fetches the payload once from /oauth/result/{id}.

from __future__ import annotations

from jinja2 import Environment, PackageLoader, select_autoescape

_env = Environment(
    loader=PackageLoader("aeroscan", "templates"),
    autoescape=select_autoescape(["html"]),
)


def render_callback_page(result_id: str, target_origin: str | None = None) -> str:
    """Render the popup/redirect hand-off page.

    *target_origin* must already be sanitized (see ``sanitize_origin``);
    both values are emitted through ``tojson`` so they stay inert inside the
    inline script.
    """
    template = _env.get_template("oauth_callback.html")
    return template.render(result_id=result_id, target_origin=target_origin)
