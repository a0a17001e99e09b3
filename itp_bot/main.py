"""FastAPI application entrypoint."""

from dotenv import load_dotenv
from fastapi import FastAPI

from itp_bot.adapters.inbound.http.routes import router

# Load environment variables from .env file
load_dotenv()

app = FastAPI(
    title="ITP Transfer Bot",
    description="WhatsApp assistant that computes Spain's vehicle transfer tax (ITP)",
    version="0.1.0",
)

app.include_router(router)
