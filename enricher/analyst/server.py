"""
Analyst Server

FastAPI host for scheduled or on-demand enrichment runs.

Endpoints:
- POST /analyze/{pipeline}: Run the static or conditional pipeline once
- GET /health: Health check

Each request builds fresh adapters from the loaded config and returns the
run outcome; the HTTP status mirrors the outcome status (200 or 500).
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from ..common.config import load_config, EnricherConfig
from .orchestrator import PipelineVariant, run_pipeline

logger = logging.getLogger("enricher.analyst.server")

# Global state
config: Optional[EnricherConfig] = None

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load config on startup"""
    global config

    logger.info("Starting up...")
    config = load_config()
    logger.info(
        "Loaded config (record store: %s, llm: %s/%s)",
        config.record_store.base_url or "<unset>",
        config.llm.provider,
        config.llm.model,
    )

    yield

    logger.info("Shutting down...")

app = FastAPI(
    title="Enricher Analyst",
    description="Conditional record enrichment via a language model",
    version="0.1.0",
    lifespan=lifespan,
)

@app.get("/health")
async def health():
    """Liveness plus the pipelines this host can run."""
    return {
        "status": "healthy",
        "service": "analyst",
        "initialized": config is not None,
        "pipelines": [variant.value for variant in PipelineVariant],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

@app.post("/analyze/{pipeline}")
def analyze(pipeline: str):
    """Run one pass of the named pipeline and return its outcome."""
    if config is None:
        raise HTTPException(status_code=503, detail="Server not initialized")

    try:
        variant = PipelineVariant(pipeline)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown pipeline: {pipeline}")

    outcome = run_pipeline(variant, config)
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_response())

def run_server():
    """Run the Analyst server"""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    server_config = load_config().server

    logger.info("Starting server on port %d", server_config.port)
    uvicorn.run(
        "enricher.analyst.server:app",
        host=server_config.host,
        port=server_config.port,
        reload=False,
    )

if __name__ == "__main__":
    run_server()
