# app/main.py

from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.db.base import init_db
from app.routers import answers as answers_router
from app.routers import join as join_router
from app.routers import prompts as prompts_router
from app.routers import sessions as sessions_router
from app.routers import slides as slides_router
from app.routers import user_profile as user_profile_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# ------------------------
# 1) app
# ------------------------
# local tables (production schema lives in Supabase migrations)
@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.app_env in ("local", "test"):
        init_db()
    yield


app = FastAPI(title="Classroom Live API", lifespan=lifespan)

# ------------------------
# 2) CORS
# ------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------
# 3) routers
# ------------------------
app.include_router(sessions_router.router)
app.include_router(join_router.router)
app.include_router(prompts_router.router)
app.include_router(answers_router.router)
app.include_router(slides_router.router)
app.include_router(user_profile_router.router)


@app.get("/")
def root():
    return {"ok": True}
