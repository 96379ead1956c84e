from __future__ import annotations  # FastAPI server exposing the interview orchestration API

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router


logger = logging.getLogger(__name__)

app = FastAPI(title="Interview Orchestration API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(router)


@app.get("/health")
def health() -> dict:  # Liveness probe
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_server:app", host="0.0.0.0", port=8000)
