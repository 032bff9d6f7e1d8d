# backend/docrepo/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import engine, SessionLocal
from . import models
from .api import auth, categories, dashboard, documents, settings as settings_api, storage, uploads, users
from .services.auth import AuthClient
from .utils.logging import api_logger

# Create all tables on startup
models.Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DEFAULT_ADMIN_EMAIL and settings.DEFAULT_ADMIN_PASSWORD:
        db = SessionLocal()
        try:
            admin = AuthClient(db).ensure_admin(settings.DEFAULT_ADMIN_EMAIL, settings.DEFAULT_ADMIN_PASSWORD)
            api_logger.info("Default admin available", extra={"user_id": admin.id})
        finally:
            db.close()
    yield


app = FastAPI(title="Document Repository API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your actual frontend URL
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(categories.router)
app.include_router(documents.router)
app.include_router(uploads.router)
app.include_router(storage.router)
app.include_router(dashboard.router)
app.include_router(settings_api.router)

@app.get("/")
async def root():
    return {"message": "Document Repository API is running"}
