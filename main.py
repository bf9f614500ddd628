"""
Entry point for the Case Review Backend

Run with `python main.py` from the repository root. The src directory is
put on the path so a plain checkout works; `pip install -e .` (or
`pip install -e ".[test]"` for the test suite) installs the dependencies
and makes `case_review` importable everywhere else, e.g. `uvicorn case_review.app:app`.
"""

import sys
import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file before settings are read
load_dotenv()

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from case_review.config.settings import LOG_LEVEL, PORT

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

from case_review.app import app

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Case Review Backend on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
