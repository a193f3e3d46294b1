#!/usr/bin/env python3
"""
Script to run the Library Catalog API server.
"""

import uvicorn

from api.config import config
from utilities.config import config as library_config


def main():
    """Run the API server."""
    print("Starting Library Catalog API Server")
    print(f"Host: {config.host}")
    print(f"Port: {config.port}")
    print(f"Debug: {config.debug}")
    print(f"Database: {library_config.mongodb_database}")
    print("=" * 50)

    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
        access_log=config.access_log
    )


if __name__ == "__main__":
    main()
