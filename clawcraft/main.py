"""
FastAPI entry point for ClawCraft QA.
"""
import logging
from fastapi import FastAPI
from clawcraft.config import settings
from clawcraft.api import slack_commands

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api_title,
    description="Turns Jira stories and bugs into Xray-ready Gherkin scenarios from Slack",
    version=settings.api_version,
)

# Include routers
app.include_router(slack_commands.router, prefix="/slack", tags=["Slack"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "ClawCraft QA API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    logger.info("pt-claw listening on http://localhost:%s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
