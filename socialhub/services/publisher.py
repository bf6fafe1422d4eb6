# socialhub/services/publisher.py
"""Publishing to the social platform APIs.

Each ``publish_to_*`` call decrypts the stored account token, performs the
platform's HTTP calls and reports a :class:`PublishResult`. Platform errors
never escape; they come back as a failed result with the error text so the
scheduler can record them per platform.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional

import httpx
from cryptography.fernet import InvalidToken

from socialhub.config import settings
from socialhub.db import token_crypto
from socialhub.db.models import Platform

logger = logging.getLogger(__name__)

GRAPH_URL = "https://graph.facebook.com/v18.0"
X_TWEETS_URL = "https://api.twitter.com/2/tweets"
LINKEDIN_UGC_URL = "https://api.linkedin.com/v2/ugcPosts"
TIKTOK_VIDEO_INIT_URL = "https://open.tiktokapis.com/v2/post/publish/video/init/"

X_MAX_CHARS = 280
TIKTOK_MAX_TITLE = 150

PLATFORM_LIMITS = {
    Platform.META: {"max_characters": 2200, "max_hashtags": 30},
    Platform.X: {"max_characters": 280, "max_hashtags": 10},
    Platform.LINKEDIN: {"max_characters": 3000, "max_hashtags": 5},
    Platform.TIKTOK: {"max_characters": 2200, "max_hashtags": 100},
}


class PublishError(Exception):
    pass


@dataclass
class PublishResult:
    success: bool
    platform_post_id: Optional[str] = None
    error: Optional[str] = None


def format_hashtags(content: str, hashtags: List[str], sep: str = "\n\n") -> str:
    if not hashtags:
        return content
    tags = " ".join(f"#{t.lstrip('#')}" for t in hashtags)
    return f"{content}{sep}{tags}"


@contextmanager
def _session(client: Optional[httpx.Client]) -> Iterator[httpx.Client]:
    if client is not None:
        yield client
        return
    with httpx.Client(timeout=httpx.Timeout(settings.publish_timeout_seconds, connect=5)) as c:
        yield c


def _describe(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}: {exc.response.text[:300]}"
    if isinstance(exc, InvalidToken):
        return "Stored access token could not be decrypted"
    return str(exc) or exc.__class__.__name__


def _body(r: httpx.Response) -> dict:
    data = r.json()
    if not isinstance(data, dict):
        raise PublishError(f"Unexpected response body from {r.request.url.host}")
    return data


_FAILURES = (httpx.HTTPError, InvalidToken, PublishError, KeyError, ValueError, TypeError, AttributeError, RuntimeError)


def publish_to_meta(content: str, media_urls: List[str], hashtags: List[str], access_token_encrypted: str,
                    client: Optional[httpx.Client] = None) -> PublishResult:
    try:
        token = token_crypto.decrypt_token(access_token_encrypted)
        with _session(client) as c:
            r = c.get(f"{GRAPH_URL}/me/accounts", params={"access_token": token})
            r.raise_for_status()
            pages = _body(r).get("data") or []
            if not pages:
                raise PublishError("No Facebook pages found")
            page = pages[0]

            payload = {"message": format_hashtags(content, hashtags)}
            if media_urls:
                payload["url"] = media_urls[0]
            r = c.post(f"{GRAPH_URL}/{page['id']}/feed", json=payload, params={"access_token": page["access_token"]})
            r.raise_for_status()
            return PublishResult(True, platform_post_id=str(_body(r)["id"]))
    except _FAILURES as e:
        logger.error("Failed to publish to Meta: %s", _describe(e))
        return PublishResult(False, error=_describe(e))


def publish_to_x(content: str, media_urls: List[str], hashtags: List[str], access_token_encrypted: str,
                 client: Optional[httpx.Client] = None) -> PublishResult:
    try:
        token = token_crypto.decrypt_token(access_token_encrypted)
        text = format_hashtags(content, hashtags)[:X_MAX_CHARS]
        with _session(client) as c:
            r = c.post(
                X_TWEETS_URL,
                headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
                json={"text": text},
            )
            r.raise_for_status()
            return PublishResult(True, platform_post_id=str(_body(r)["data"]["id"]))
    except _FAILURES as e:
        logger.error("Failed to publish to X: %s", _describe(e))
        return PublishResult(False, error=_describe(e))


def publish_to_linkedin(content: str, media_urls: List[str], hashtags: List[str], access_token_encrypted: str,
                        person_id: str, client: Optional[httpx.Client] = None) -> PublishResult:
    try:
        token = token_crypto.decrypt_token(access_token_encrypted)
        share = {
            "shareCommentary": {"text": format_hashtags(content, hashtags)},
            "shareMediaCategory": "ARTICLE" if media_urls else "NONE",
        }
        if media_urls:
            share["media"] = [{"status": "READY", "originalUrl": media_urls[0]}]
        payload = {
            "author": f"urn:li:person:{person_id}",
            "lifecycleState": "PUBLISHED",
            "specificContent": {"com.linkedin.ugc.ShareContent": share},
            "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": "PUBLIC"},
        }
        with _session(client) as c:
            r = c.post(
                LINKEDIN_UGC_URL,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                    "X-Restli-Protocol-Version": "2.0.0",
                },
                json=payload,
            )
            r.raise_for_status()
            # UGC id comes back in the body, and in x-restli-id on 201s without one
            post_id = None
            if r.content:
                post_id = _body(r).get("id")
            post_id = post_id or r.headers.get("x-restli-id")
            if not post_id:
                raise PublishError("LinkedIn response carried no post id")
            return PublishResult(True, platform_post_id=str(post_id))
    except _FAILURES as e:
        logger.error("Failed to publish to LinkedIn: %s", _describe(e))
        return PublishResult(False, error=_describe(e))


def publish_to_tiktok(content: str, media_urls: List[str], hashtags: List[str], access_token_encrypted: str,
                      client: Optional[httpx.Client] = None) -> PublishResult:
    try:
        token = token_crypto.decrypt_token(access_token_encrypted)
        if not media_urls:
            raise PublishError("TikTok requires video content")
        caption = format_hashtags(content, hashtags, sep=" ")
        payload = {
            "post_info": {
                "title": caption[:TIKTOK_MAX_TITLE],
                "privacy_level": "PUBLIC_TO_EVERYONE",
                "disable_comment": False,
                "disable_duet": False,
                "disable_stitch": False,
                "video_cover_timestamp_ms": 1000,
            },
            "source_info": {"source": "PULL_FROM_URL", "video_url": media_urls[0]},
        }
        with _session(client) as c:
            r = c.post(
                TIKTOK_VIDEO_INIT_URL,
                headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
                json=payload,
            )
            r.raise_for_status()
            data = _body(r).get("data") or {}
            return PublishResult(True, platform_post_id=str(data.get("publish_id") or "tiktok_post"))
    except _FAILURES as e:
        logger.error("Failed to publish to TikTok: %s", _describe(e))
        return PublishResult(False, error=_describe(e))


def publish_to_platform(
    platform: str,
    content: str,
    media_urls: List[str],
    hashtags: List[str],
    access_token_encrypted: str,
    platform_user_id: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> PublishResult:
    if platform == Platform.META:
        return publish_to_meta(content, media_urls, hashtags, access_token_encrypted, client=client)
    if platform == Platform.X:
        return publish_to_x(content, media_urls, hashtags, access_token_encrypted, client=client)
    if platform == Platform.LINKEDIN:
        return publish_to_linkedin(content, media_urls, hashtags, access_token_encrypted, platform_user_id or "", client=client)
    if platform == Platform.TIKTOK:
        return publish_to_tiktok(content, media_urls, hashtags, access_token_encrypted, client=client)
    return PublishResult(False, error=f"Unsupported platform: {platform}")
