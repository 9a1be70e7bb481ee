"""
Container entrypoint for the solar proposal engine.

Binds to 0.0.0.0:$PORT as required by the hosting platform.
"""

import logging
import os

import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    print(f"Starting Proposta Comercial on port {port}")

    # Import app here to ensure clean module loading
    from web.app import app

    uvicorn.run(app, host="0.0.0.0", port=port)
