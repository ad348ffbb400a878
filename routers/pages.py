from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from config import TEMPLATES_DIR
from .auth import GIVER_ROLES, OptionalUserDep

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=TEMPLATES_DIR)


@router.get("/", response_class=HTMLResponse)
def index_page(request: Request, current: OptionalUserDep):
    # logged in users go straight to their dashboard
    if current:
        return RedirectResponse(url="/dashboard", status_code=303)

    return templates.TemplateResponse(
        request,
        "index.html",
        {"current_user": None},
    )


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, current: OptionalUserDep):
    if current:
        return RedirectResponse(url="/dashboard", status_code=303)

    return templates.TemplateResponse(request, "login.html", {"current_user": None})


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(request: Request, current: OptionalUserDep):
    """
    Seeker / giver dashboard. The page itself is static; sessions, wallet
    and matches are fetched from the JSON routes by the browser.
    """
    if current is None:
        return RedirectResponse(url="/login", status_code=303)

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "current_user": current,
            "is_giver": current.role in GIVER_ROLES,
        },
    )
