#!/usr/bin/env python3
"""
Main entry point for the inventory CRUD server.
"""

import os

import uvicorn
from dotenv import load_dotenv


def main():
    """Main function to run the FastAPI server."""
    # Load environment variables from .env file
    load_dotenv()

    # Verify required environment variables
    required_vars = ["DATABASE_URL", "BUCKET_NAME"]

    missing_vars = [var for var in required_vars if not os.getenv(var)]

    if missing_vars:
        print("⚠️  Missing required environment variables:")
        for var in missing_vars:
            print(f"  - {var}")
        print("\nPlease set these variables in your .env file")
        return

    # Get configuration
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    reload = os.getenv("ENV", "prod") == "dev"
    log_level = os.getenv("LOG_LEVEL", "info").lower()

    # Run the server
    print(f"🚀 Inventory app listening at http://localhost:{port}")
    print(f"🔍 Health check available at http://localhost:{port}/health")

    if reload:
        print("🔄 Hot reload enabled for development")

    uvicorn.run("inventory.api:app", host=host, port=port, reload=reload, log_level=log_level)


if __name__ == "__main__":
    main()
