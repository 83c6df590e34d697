"""Main application entry point."""

import uvicorn

from eventhub.config.environment import IS_PRODUCTION_ENVIRONMENT, env_int

PORT = env_int('PORT', 5000)

if __name__ == "__main__":
    if not IS_PRODUCTION_ENVIRONMENT:
        # Development mode - auto-reload on code changes
        uvicorn.run(
            "eventhub.api.main:app",
            host="0.0.0.0",
            port=PORT,
            reload=True,
            log_level="debug"
        )
    else:
        # Production mode - use string reference for proper multi-worker support
        uvicorn.run(
            "eventhub.api.main:app",  # String reference required for multiple workers
            host="0.0.0.0",
            port=PORT,
            reload=False,
            workers=env_int('WEB_CONCURRENCY', 4),
            log_level="info",
            proxy_headers=True,
            forwarded_allow_ips="*"
        )
