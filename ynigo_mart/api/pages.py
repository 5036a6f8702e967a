"""HTML rendering for the kiosk screens."""

from __future__ import annotations

from html import escape as html_escape
from typing import Callable, Iterable, Optional
from urllib.parse import quote

from ynigo_mart.services.session import SessionController
from ynigo_mart.store.records import UserRecord

APP_TITLE = "Ynigo Mart"

DEFAULT_AVATAR = "data:image/svg+xml;utf8," + quote(
    "<svg xmlns='http://www.w3.org/2000/svg' width='120' height='120'>"
    "<rect width='120' height='120' fill='#e5f3fb'/>"
    "<circle cx='60' cy='46' r='22' fill='#62b6f0'/>"
    "<rect x='20' y='78' width='80' height='28' rx='14' fill='#62b6f0'/>"
    "</svg>",
)

BASE_CSS = """
body{font-family:system-ui,sans-serif;margin:0;background:#f4f9fc;color:#1d3340;}
header{display:flex;justify-content:space-between;align-items:center;padding:16px 24px;background:#62b6f0;color:#fff;}
header a,header button{color:#fff;}
.banner{margin:16px 24px;padding:12px 16px;border-radius:8px;}
.banner--error{background:#ffe3e3;color:#8a1f1f;}
.banner--notice{background:#e3f8e9;color:#1f6b37;}
#profile-grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(160px,1fr));gap:16px;padding:24px;}
.profile{display:block;text-align:center;background:#fff;border-radius:12px;padding:12px;text-decoration:none;color:inherit;box-shadow:0 1px 3px rgba(0,0,0,.1);}
.profile img{width:120px;height:120px;border-radius:50%;object-fit:cover;}
.overlay{position:fixed;inset:0;background:rgba(0,0,0,.45);display:flex;align-items:center;justify-content:center;}
.modal{background:#fff;border-radius:12px;padding:24px;min-width:280px;text-align:center;}
.modal img{width:150px;height:150px;border-radius:50%;object-fit:cover;}
.form-card{max-width:420px;margin:24px auto;background:#fff;border-radius:12px;padding:24px;}
.form-card label{display:block;margin:12px 0 4px;}
.muted{color:#6b7f8c;}
"""


def _banner(error: Optional[str], notice: Optional[str]) -> str:
    parts = []
    if error:
        parts.append(f"<div class='banner banner--error' role='alert'>{html_escape(error)}</div>")
    if notice:
        parts.append(f"<div class='banner banner--notice' role='status'>{html_escape(notice)}</div>")
    return "".join(parts)


def render_page(title: str, body: str) -> str:
    return (
        "<!doctype html><html lang='en'><head><meta charset='utf-8'>"
        "<meta name='viewport' content='width=device-width, initial-scale=1'>"
        f"<title>{html_escape(title)}</title><style>{BASE_CSS}</style></head>"
        f"<body>{body}</body></html>"
    )


def avatar_src(record: UserRecord) -> str:
    return record.image if record.image.strip() else DEFAULT_AVATAR


def render_profile_card(record: UserRecord, key: Optional[str] = None) -> str:
    """Render one card linking to the funding modal; cards without a key are not clickable."""

    key = record.id if key is None else key
    name = html_escape(record.name)
    inner = f"<img src='{html_escape(avatar_src(record))}' alt='{name}' /><h3>{name}</h3>"
    if not key:
        return f"<div class='profile profile--disabled' title='Missing id'>{inner}</div>"
    return f"<a class='profile' href='/profiles/{quote(key, safe='')}'>{inner}</a>"


def render_session_modal(session: SessionController, error: Optional[str] = None) -> str:
    user = session.user
    if user is None:
        return ""
    name = html_escape(user.name)
    return (
        "<div id='input-overlay' class='overlay'><div class='modal'>"
        f"<img id='user-image' src='{html_escape(avatar_src(user))}' alt='{name}' />"
        f"<h2 id='user-name'>{name}</h2>"
        f"<p>Balance: <b id='user-balance'>{html_escape(session.displayed_balance or '0.00')}</b></p>"
        f"{_banner(error, None)}"
        "<form method='post' action='/session/confirm'>"
        "<input id='amount' name='amount' type='number' step='0.01' min='0.01' inputmode='decimal' "
        f"placeholder='Amount' value='{html_escape(session.amount_text)}' required />"
        "<button id='confirm-session-btn' type='submit'>Add funds</button>"
        "</form>"
        "<form method='post' action='/session/close'>"
        "<button id='back-btn' type='submit'>Back</button>"
        "</form>"
        "</div></div>"
    )


def render_home(
    records: Iterable[UserRecord],
    *,
    session: Optional[SessionController] = None,
    profile_key: Optional[Callable[[UserRecord], str]] = None,
    error: Optional[str] = None,
    notice: Optional[str] = None,
    modal_error: Optional[str] = None,
) -> str:
    """Render the listing screen, with the funding modal on top when a session is open."""

    cards = "".join(
        render_profile_card(record, profile_key(record) if profile_key else None) for record in records
    )
    if not cards:
        cards = "<p class='muted'>No profiles yet.</p>"
    modal = render_session_modal(session, modal_error) if session is not None and session.is_open else ""
    body = (
        "<header id='home-screen'>"
        f"<h1>{APP_TITLE}</h1>"
        "<a id='add-profile-btn' href='/profiles/new'>Add profile</a>"
        "</header>"
        f"{_banner(error, notice)}"
        f"<main id='profile-grid'>{cards}</main>"
        f"{modal}"
    )
    return render_page(APP_TITLE, body)


def render_add_profile(*, name: str = "", error: Optional[str] = None) -> str:
    """Render the add-profile form; the submit button locks until the response arrives."""

    body = (
        "<header>"
        f"<h1>{APP_TITLE}</h1>"
        "<a id='cancel-add-profile' href='/'>Cancel</a>"
        "</header>"
        f"{_banner(error, None)}"
        "<section id='add-profile-screen' class='form-card'>"
        "<h2>New profile</h2>"
        "<form method='post' action='/profiles' enctype='multipart/form-data' "
        "onsubmit=\"document.getElementById('submit-profile').disabled=true;\">"
        "<label for='new-name'>Name</label>"
        f"<input id='new-name' name='name' type='text' value='{html_escape(name)}' required />"
        "<label for='new-image-file'>Picture</label>"
        "<input id='new-image-file' name='image' type='file' accept='image/*' capture='user' required />"
        "<p><button id='submit-profile' type='submit'>Add profile</button></p>"
        "</form>"
        "</section>"
    )
    return render_page(f"{APP_TITLE} · New profile", body)
