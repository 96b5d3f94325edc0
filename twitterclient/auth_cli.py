#!/usr/bin/env python3
"""
Credential acquisition CLI tool.

Usage:
    twitterclient-auth user                 # PIN-based OAuth1 flow, prints token + secret
    twitterclient-auth user --callback URL  # prints the authorize URL for a web callback
    twitterclient-auth app                  # prints an app-only bearer token

API key and secret come from --api-key/--api-secret or TWITTER_API_KEY/TWITTER_API_SECRET.
"""
import argparse
import sys

from .client import TwitterClient
from .errors import TwitterError
from .logger import logger


def acquire_user_token(client: TwitterClient, callback_url=None, read_pin=input) -> int:
    """Run the three-legged flow interactively."""
    request_token = client.request_oauth(callback_url)
    url = client.authorize_url(request_token["oauth_token"])
    print(f"\n🔗 Open this URL and authorize the application:\n\n  {url}\n")
    if callback_url:
        print(f"Request token secret (needed for verify): {request_token['oauth_token_secret']}")
        return 0

    pin = read_pin("PIN: ").strip()
    access_token = client.verify_oauth(pin, request_token["oauth_token"])
    print(f"\n✓ Authorized as @{access_token.get('screen_name', '?')} (user_id={access_token.get('user_id', '?')})")
    print(f"  TWITTER_ACCESS_TOKEN={access_token['oauth_token']}")
    print(f"  TWITTER_ACCESS_SECRET={access_token['oauth_token_secret']}")
    return 0


def acquire_app_token(client: TwitterClient) -> int:
    """Fetch an app-only bearer token."""
    app_token = client.request_oauth2()
    print("\n✓ App-only bearer token obtained")
    print(f"  TWITTER_BEARER_TOKEN={app_token['access_token']}")
    return 0


def main(argv=None, read_pin=input) -> int:
    parser = argparse.ArgumentParser(description='Obtain Twitter API credentials')
    parser.add_argument('--api-key', help='API key (default: TWITTER_API_KEY)')
    parser.add_argument('--api-secret', help='API secret (default: TWITTER_API_SECRET)')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # user command
    user_parser = subparsers.add_parser('user', help='OAuth1 user access token (PIN flow)')
    user_parser.add_argument('--callback', help='Callback URL instead of the PIN flow')

    # app command
    subparsers.add_parser('app', help='OAuth2 app-only bearer token')

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    with TwitterClient(api_key=args.api_key, api_secret=args.api_secret) as client:
        try:
            if args.command == 'user':
                return acquire_user_token(client, args.callback, read_pin=read_pin)
            return acquire_app_token(client)
        except TwitterError as e:
            logger.error("Credential acquisition failed: %s", e)
            print(f"✗ Error: {e}", file=sys.stderr)
            return 1


if __name__ == '__main__':
    sys.exit(main())
