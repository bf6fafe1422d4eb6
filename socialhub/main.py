import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from socialhub.config import settings
from socialhub.deps import init_db
from socialhub.errors import SocialHubError

# Routers
from socialhub.routers import auth, users, workspaces, platforms, approvals, posts, analytics, scheduler_api

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="SocialHub API", version="0.1.0")

@app.on_event("startup")
def _startup():
    init_db()
    if settings.scheduler_enabled:
        scheduler_api.start_scheduler(settings.scheduler_cron)

@app.on_event("shutdown")
def _shutdown():
    scheduler_api.stop_scheduler()

@app.exception_handler(SocialHubError)
async def _domain_error(request: Request, exc: SocialHubError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

@app.get("/")
def root():
    return {"message": "SocialHub API is running!"}

# Mount routes
app.include_router(auth.router)           # /auth/*
app.include_router(users.router)          # /users/*
app.include_router(workspaces.router)     # /workspaces/*
app.include_router(platforms.router)      # /workspaces/{id}/platforms/*
app.include_router(approvals.router)      # /workspaces/{id}/posts/* (before posts)
app.include_router(posts.router)          # /workspaces/{id}/posts/*
app.include_router(analytics.router)      # /workspaces/{id}/analytics/*
app.include_router(scheduler_api.router)  # /scheduler/*
