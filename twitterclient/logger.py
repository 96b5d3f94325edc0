import logging
from .config import Config

logger = logging.getLogger('twitterclient')
logger.setLevel(getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))
