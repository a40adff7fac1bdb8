# storefront/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # --- API Info ---
    API_TITLE: str = "Storefront API"
    API_DESCRIPTION: str = "Product catalog, cart, order placement, payment reconciliation and shipping for the online store."
    API_VERSION: str = "1.0.0"

    # --- Server Configuration ---
    PORT: int = int(os.getenv("PORT", "8000"))
    HOST: str = os.getenv("HOST", "0.0.0.0")

    # --- Database ---
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    # Bounded wait for store operations and outbound calls (seconds)
    STORE_TIMEOUT_SECONDS: int = int(os.getenv("STORE_TIMEOUT_SECONDS", "10"))
    UPSTREAM_TIMEOUT_SECONDS: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))

    # --- Token verification ---
    ENCODING_SECRET_KEY: str = os.getenv("ENCODING_SECRET_KEY") or "dev-only-signing-key-change-me-in-production"
    ENCODING_ALGORITHM: str = os.getenv("ENCODING_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # --- Mercado Pago ---
    MERCADO_PAGO_ACCESS_TOKEN: str = os.getenv("MERCADO_PAGO_ACCESS_TOKEN", "")
    MERCADO_PAGO_BASE_URL: str = os.getenv("MERCADO_PAGO_BASE_URL", "https://api.mercadopago.com")
    PAYMENT_CURRENCY: str = os.getenv("PAYMENT_CURRENCY", "BRL")
    # The webhook must point at the backend domain, back URLs at the frontend
    BACKEND_PUBLIC_URL: str = os.getenv("BACKEND_PUBLIC_URL", "")
    FRONTEND_PUBLIC_URL: str = os.getenv("FRONTEND_PUBLIC_URL", "")

    # --- Melhor Envio ---
    MELHOR_ENVIO_BASE_URL: str = os.getenv("MELHOR_ENVIO_BASE_URL", "https://sandbox.melhorenvio.com.br")
    MELHOR_ENVIO_TOKEN: str = os.getenv("MELHOR_ENVIO_TOKEN", "")
    MELHOR_ENVIO_FROM_POSTAL_CODE: str = os.getenv("MELHOR_ENVIO_FROM_POSTAL_CODE", "")
    MELHOR_ENVIO_PLATFORM_NAME: str = os.getenv("MELHOR_ENVIO_PLATFORM_NAME", "Storefront")
    MELHOR_ENVIO_DEFAULT_AGENCY_ID: str = os.getenv("MELHOR_ENVIO_DEFAULT_AGENCY_ID", "")
    MELHOR_ENVIO_USER_AGENT: str = os.getenv("MELHOR_ENVIO_USER_AGENT", "Storefront (contato@storefront.local)")

    # --- Logging ---
    LOGGING_CONFIG: str = os.getenv("LOGGING_CONFIG", "")


settings = Settings()
