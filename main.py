"""
Scorewise - Community Cricket Scoring API
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings, configure_logging
from app.database import init_db
from app.api.players import router as players_router
from app.api.match import router as match_router

configure_logging()

app = FastAPI(
    title="Scorewise",
    description="Ball-by-ball scoring for community cricket matches",
    version="0.1.0",
)

# The scoring UI dev servers
default_origins = [
    "http://localhost:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:5174",
]

if settings.CORS_ORIGINS:
    default_origins.extend([o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()])

app.add_middleware(
    CORSMiddleware,
    allow_origins=default_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(players_router, prefix="/api")
app.include_router(match_router, prefix="/api")


@app.on_event("startup")
def startup_event():
    """Create the players and matches tables if missing"""
    init_db()


@app.get("/")
def root():
    """Service banner"""
    return {
        "name": "Scorewise API",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/api/health")
def health_check():
    """API health check"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
