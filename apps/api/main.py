from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from routes import chat_sessions
from services.supabase_client import get_supabase_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # close channels of every page still mounted
    await chat_sessions.close_all()


app = FastAPI(title="Zen Chat API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_sessions.router)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "api",
        "supabase_configured": bool(config.SUPABASE_URL and config.SUPABASE_SERVICE_ROLE_KEY),
        "stream_configured": bool(config.STREAM_URL),
    }


@app.get("/ready")
async def ready():
    # Chat works without either dependency (local sessions, canned fallbacks),
    # but we are only "ready" when the stream backend is configured.
    checks = {
        "stream_url": bool(config.STREAM_URL),
        "supabase": get_supabase_client() is not None,
    }
    if not checks["stream_url"]:
        return JSONResponse(status_code=503, content={"status": "not_ready", "checks": checks})
    return {"status": "ready", "checks": checks}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
