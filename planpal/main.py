# planpal/main.py
import os
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planpal.assistant import controller as assistant_controller
from planpal.planning import controller as planning_controller

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app = FastAPI(title="PlanPal — group event planner + assistant")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.include_router(planning_controller.router)
app.include_router(assistant_controller.router)


@app.get("/")
async def root():
    return {"ok": True, "message": "PlanPal planner + assistant"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
