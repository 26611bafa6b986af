"""FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from app.api.router import api_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Checkout-Lens",
    description="Guest-checkout property inspection: four room photos compared against baseline references by a vision model.",
    version="0.1.0",
)

app.include_router(api_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
