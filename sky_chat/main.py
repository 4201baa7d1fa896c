from pathlib import Path

from fastapi import FastAPI, Request, Depends, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from jinja2 import Environment, FileSystemLoader, select_autoescape

from . import config
from .chat.routes import router as chat_router
from .crm import get_lead, list_leads
from .db import get_db, init_db

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

app = FastAPI(title="Sky AI", version="0.1.0")
app.include_router(chat_router, prefix="/chat")

templates = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)


@app.on_event("startup")
def startup():
    init_db()


def require_admin(pw: str | None):
    if not config.ADMIN_PASSWORD or pw != config.ADMIN_PASSWORD:
        raise HTTPException(403, "Unauthorized")


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/admin/leads", response_class=HTMLResponse)
def admin_leads(request: Request, pw: str | None = None, db: Session = Depends(get_db)):
    require_admin(pw)
    leads = list_leads(db)
    template = templates.get_template("leads.html")
    return HTMLResponse(template.render(request=request, leads=leads, pw=pw))


@app.get("/admin/leads/{lead_id}", response_class=HTMLResponse)
def admin_lead_detail(request: Request, lead_id: str, pw: str | None = None, db: Session = Depends(get_db)):
    require_admin(pw)

    lead = get_lead(db, lead_id)
    if not lead:
        raise HTTPException(404, "Lead not found")

    template = templates.get_template("lead_detail.html")
    return HTMLResponse(template.render(
        request=request,
        lead=lead,
        messages=lead.conversation_history or [],
        pw=pw,
    ))
