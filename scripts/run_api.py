"""
Run the playing-time API server with uvicorn.
"""

import uvicorn
import os
import sys

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import API_HOST, API_PORT, LOG_LEVEL


if __name__ == "__main__":
    print("=" * 60)
    print("Youth Basketball Playing-Time API Server")
    print("=" * 60)
    print(f"Serving games on http://{API_HOST}:{API_PORT}/api")
    print(f"Interactive docs: http://localhost:{API_PORT}/docs")
    print("=" * 60)

    uvicorn.run(
        "app.main:app",
        host=API_HOST,
        port=API_PORT,
        reload="--reload" in sys.argv,
        log_level=LOG_LEVEL.lower()
    )
