import uvicorn
import logging
import os
from messagepilot import create_app
from messagepilot.core.config import configure_logging

configure_logging()

app = create_app()

if __name__ == "__main__":
    # Start the FastAPI server
    logging.info("FastAPI server starting...")
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "20616")))
