import logging
import os
import sys

import uvicorn

# Configure logging to stdout
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

# Add the src directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
src_path = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

logger.info("=" * 60)
logger.info("Rx-Reader Startup")
logger.info("=" * 60)
logger.info(f"Python version: {sys.version.split()[0]}")
logger.info(f"Source path: {src_path}")

# Log critical environment variables (without exposing secrets)
logger.info("Environment Configuration:")
logger.info(f"  PORT: {os.environ.get('PORT', '8000')}")
logger.info(f"  APP_ENV: {os.environ.get('APP_ENV', 'not set')}")
logger.info(f"  MISTRAL_API_KEY: {'✅ set' if os.environ.get('MISTRAL_API_KEY') else '❌ not set'}")
logger.info(f"  MISTRAL_VISION_MODEL: {os.environ.get('MISTRAL_VISION_MODEL', 'default')}")
logger.info(f"  UPLOAD_STAGING_DIR: {os.environ.get('UPLOAD_STAGING_DIR', 'default')}")


def main():
    try:
        from rxreader.app import app
        from rxreader.core.config import get_settings
        logger.info("✅ Successfully imported rxreader.app")
    except Exception as e:
        logger.error(f"❌ Failed to import application: {e}", exc_info=True)
        sys.exit(1)

    settings = get_settings()
    logger.info(f"🚀 Starting uvicorn on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    main()
