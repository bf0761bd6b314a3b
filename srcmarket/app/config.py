import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JSON_SORT_KEYS = False

    # Remote backend (system of record)
    UPSTREAM_BASE_URL = os.getenv("UPSTREAM_BASE_URL", "https://k-connect.ru").rstrip("/")
    UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "10"))

    # Where the page loader fetches /api/* from. Empty = this server on loopback.
    STOREFRONT_API_BASE = os.getenv("STOREFRONT_API_BASE", "").rstrip("/")
    IMAGE_BASE_URL = os.getenv("IMAGE_BASE_URL", UPSTREAM_BASE_URL).rstrip("/")

    # Comma-separated list
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

    APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT = int(os.getenv("APP_PORT", "8080"))

    # Comma-separated; empty = accept any Host header
    TRUSTED_HOSTS = [h.strip() for h in os.getenv("TRUSTED_HOSTS", "").split(",") if h.strip()] or None
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def storefront_base(config) -> str:
    # Never derived from the request: the Host header is client-controlled.
    return config.get("STOREFRONT_API_BASE") or f"http://127.0.0.1:{config['APP_PORT']}"
