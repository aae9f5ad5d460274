import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from api_client import ExpensesApiClient
from config import get_settings
from csrf import generate_csrf_token, validate_csrf_token
from formatting import format_currency, format_date
from models import CATEGORIES
from services import ExpenseTracker

logging.basicConfig(level=getattr(logging, get_settings().log_level, logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="Expense Tracker")
templates = Jinja2Templates(directory="templates")


def _load_app_version() -> str:
    try:
        import tomllib
    except Exception:
        return "unknown"
    try:
        with open("pyproject.toml", "rb") as f:
            data = tomllib.load(f)
        return str(data.get("project", {}).get("version", "unknown"))
    except Exception:
        return "unknown"


APP_VERSION = _load_app_version()

templates.env.filters["currency"] = format_currency
templates.env.filters["local_date"] = format_date
templates.env.globals["csrf_token"] = generate_csrf_token
templates.env.globals["categories"] = CATEGORIES
templates.env.globals["app_version"] = APP_VERSION


def get_tracker(request: Request) -> ExpenseTracker:
    tracker = getattr(request.app.state, "tracker", None)
    if tracker is None:
        settings = get_settings()
        # No configured base URL means the API lives on this page's origin.
        base_url = settings.api_base_url or str(request.base_url).rstrip("/")
        tracker = ExpenseTracker(ExpensesApiClient(base_url))
        request.app.state.tracker = tracker
    return tracker


def _int_param(request: Request, name: str) -> Optional[int]:
    raw = request.query_params.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {name}") from exc


def filter_from_request(
    request: Request,
) -> tuple[Optional[str], Optional[int], Optional[int]]:
    category = request.query_params.get("category")
    month = _int_param(request, "month")
    year = _int_param(request, "year")
    if month is not None and not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="Month must be between 1 and 12")
    return category, month, year


def render(request: Request, template: str, context: dict[str, object]) -> HTMLResponse:
    return templates.TemplateResponse(request, template, context)


@app.get("/", response_class=HTMLResponse)
async def dashboard(request: Request, tracker: ExpenseTracker = Depends(get_tracker)):
    category, month, year = filter_from_request(request)
    if not tracker.loaded:
        await tracker.load(category=category, month=month, year=year)
    else:
        await tracker.set_filter(category=category, month=month, year=year)
    state = tracker.state
    return render(
        request,
        "index.html",
        {
            "state": state,
            "monthly": tracker.monthly_view(),
            "api_base": get_settings().api_base_url or "default origin",
        },
    )


@app.post("/expenses")
async def create_expense(request: Request, tracker: ExpenseTracker = Depends(get_tracker)):
    form = await request.form()
    if not validate_csrf_token(str(form.get("csrf_token", ""))):
        raise HTTPException(status_code=400, detail="Invalid CSRF token")
    fields = ("amount", "category", "date", "payment_method", "merchant", "notes")
    tracker.update_form(**{name: str(form[name]) for name in fields if name in form})
    await tracker.submit()
    current = tracker.state.filter
    url = request.app.url_path_for("dashboard")
    query = urlencode(
        {"category": current.category, "month": current.month, "year": current.year}
    )
    return RedirectResponse(url=f"{url}?{query}", status_code=303)
