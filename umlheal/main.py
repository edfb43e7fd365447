from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os
import logging
from dotenv import load_dotenv

from umlheal.config import get_healing_config
from umlheal.routers.diagrams import router as diagrams_router

# Load environment variables
load_dotenv()

# Set up logging
logging.basicConfig(level=getattr(logging, get_healing_config().log_level, logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="umlheal Diagram Service")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "http://localhost:3000").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include diagram router
app.include_router(diagrams_router)


@app.get("/")
async def root():
    return {"message": "umlheal Diagram Service API", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


def run():
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    run()
