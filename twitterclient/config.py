from dotenv import load_dotenv
import os

load_dotenv()

class Config:
    TWITTER_API_KEY = os.getenv('TWITTER_API_KEY')
    TWITTER_API_SECRET = os.getenv('TWITTER_API_SECRET')
    TWITTER_ACCESS_TOKEN = os.getenv('TWITTER_ACCESS_TOKEN')
    TWITTER_ACCESS_SECRET = os.getenv('TWITTER_ACCESS_SECRET')
    TWITTER_BEARER_TOKEN = os.getenv('TWITTER_BEARER_TOKEN')

    API_BASE_URL = os.getenv('TWITTER_API_BASE_URL', 'https://api.twitter.com/1.1')
    OAUTH_BASE_URL = os.getenv('TWITTER_OAUTH_BASE_URL', 'https://api.twitter.com')

    REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', '30'))
    USER_AGENT = os.getenv('USER_AGENT', 'twitterclient/0.1.0')

    REQUEST_TOKEN_CACHE_SIZE = int(os.getenv('REQUEST_TOKEN_CACHE_SIZE', '256'))
    REQUEST_TOKEN_TTL_SECONDS = int(os.getenv('REQUEST_TOKEN_TTL_SECONDS', '900'))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
