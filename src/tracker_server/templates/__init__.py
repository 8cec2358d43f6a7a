"""HTML templates for the few pages the auth routes render themselves."""

from __future__ import annotations

import html
from functools import lru_cache
from pathlib import Path
from string import Template

_TEMPLATE_DIR = Path(__file__).parent


@lru_cache(maxsize=None)
def load_template(name: str) -> Template:
    """Read a template file once and return it as a string.Template.

    Uses $variable syntax so CSS braces in the markup are left alone.

    Raises:
        FileNotFoundError: If the template does not exist.
    """
    return Template((_TEMPLATE_DIR / name).read_text())


def render_page(title: str, body: str) -> str:
    """Wrap already-escaped body markup in the base layout."""
    return load_template("base.html").safe_substitute(
        title=html.escape(title), body=body,
    )


def render_error(message: str, login_url: str) -> str:
    """Render the generic sign-in error page."""
    body = load_template("error.html").safe_substitute(
        message=html.escape(message),
        login_url=html.escape(login_url, quote=True),
    )
    return render_page("Sign-in failed", body)
