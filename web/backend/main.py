"""SolFlow web backend - FastAPI application."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from solflow import __version__

from .routes import graphs_router, nodes_router, runs_router, ws_router

app = FastAPI(
    title="SolFlow",
    description="Execution backend for the Solana visual node builder",
    version=__version__,
)

# Configure CORS for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(nodes_router, prefix="/api")
app.include_router(graphs_router, prefix="/api")
app.include_router(runs_router, prefix="/api")
app.include_router(ws_router, prefix="/api")


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "solflow"}

