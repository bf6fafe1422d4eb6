import json

import httpx
import pytest

from socialhub.db import token_crypto
from socialhub.services import publisher


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def token():
    return token_crypto.encrypt_token("plain-access")


def test_format_hashtags():
    assert publisher.format_hashtags("Hello", []) == "Hello"
    assert publisher.format_hashtags("Hello", ["news", "#tech"]) == "Hello\n\n#news #tech"
    assert publisher.format_hashtags("Hello", ["a"], sep=" ") == "Hello #a"


def test_publish_to_x_truncates_and_sends_bearer(token):
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"data": {"id": "tweet-1"}})

    result = publisher.publish_to_platform("X", "x" * 300, [], ["tag"], token, client=_client(handler))
    assert result.success
    assert result.platform_post_id == "tweet-1"
    assert seen["auth"] == "Bearer plain-access"
    assert len(seen["body"]["text"]) == 280


def test_publish_to_meta_posts_to_first_page(token):
    calls = []

    def handler(request):
        calls.append(request)
        if request.url.path.endswith("/me/accounts"):
            assert request.url.params["access_token"] == "plain-access"
            return httpx.Response(200, json={"data": [{"id": "page-9", "access_token": "page-token"}]})
        assert request.url.path.endswith("/page-9/feed")
        assert request.url.params["access_token"] == "page-token"
        body = json.loads(request.content)
        assert body["message"] == "Launch day\n\n#launch"
        assert body["url"] == "https://cdn.example.com/a.png"
        return httpx.Response(200, json={"id": "page-9_123"})

    result = publisher.publish_to_platform(
        "META", "Launch day", ["https://cdn.example.com/a.png"], ["launch"], token, client=_client(handler),
    )
    assert result.success
    assert result.platform_post_id == "page-9_123"
    assert len(calls) == 2


def test_publish_to_meta_without_pages_fails(token):
    result = publisher.publish_to_platform(
        "META", "hi", [], [], token, client=_client(lambda r: httpx.Response(200, json={"data": []})),
    )
    assert not result.success
    assert result.error == "No Facebook pages found"


def test_publish_to_linkedin_reads_restli_header(token):
    def handler(request):
        body = json.loads(request.content)
        assert body["author"] == "urn:li:person:person-7"
        share = body["specificContent"]["com.linkedin.ugc.ShareContent"]
        assert share["shareMediaCategory"] == "NONE"
        assert request.headers["X-Restli-Protocol-Version"] == "2.0.0"
        return httpx.Response(201, headers={"x-restli-id": "urn:li:share:42"})

    result = publisher.publish_to_platform(
        "LINKEDIN", "hello", [], [], token, platform_user_id="person-7", client=_client(handler),
    )
    assert result.success
    assert result.platform_post_id == "urn:li:share:42"


def test_publish_to_linkedin_with_media_uses_article(token):
    def handler(request):
        share = json.loads(request.content)["specificContent"]["com.linkedin.ugc.ShareContent"]
        assert share["shareMediaCategory"] == "ARTICLE"
        assert share["media"][0]["originalUrl"] == "https://example.com/post"
        return httpx.Response(201, json={"id": "urn:li:ugcPost:1"})

    result = publisher.publish_to_platform(
        "LINKEDIN", "read this", ["https://example.com/post"], [], token, "p", client=_client(handler),
    )
    assert result.platform_post_id == "urn:li:ugcPost:1"


def test_publish_to_tiktok_requires_video(token):
    result = publisher.publish_to_platform(
        "TIKTOK", "dance", [], [], token, client=_client(lambda r: httpx.Response(500)),
    )
    assert not result.success
    assert result.error == "TikTok requires video content"


def test_publish_to_tiktok_pulls_video_from_url(token):
    def handler(request):
        body = json.loads(request.content)
        assert body["source_info"] == {"source": "PULL_FROM_URL", "video_url": "https://cdn.example.com/v.mp4"}
        assert len(body["post_info"]["title"]) == 150
        return httpx.Response(200, json={"data": {"publish_id": "v_pub_1"}})

    result = publisher.publish_to_platform(
        "TIKTOK", "t" * 200, ["https://cdn.example.com/v.mp4"], [], token, client=_client(handler),
    )
    assert result.success
    assert result.platform_post_id == "v_pub_1"


def test_http_errors_become_failed_results(token):
    result = publisher.publish_to_platform(
        "X", "hi", [], [], token, client=_client(lambda r: httpx.Response(503, text="over capacity")),
    )
    assert not result.success
    assert result.error.startswith("HTTP 503")
    assert "over capacity" in result.error


def test_undecryptable_token_fails_without_calling_out():
    def handler(request):
        raise AssertionError("no request expected")

    result = publisher.publish_to_platform("X", "hi", [], [], "not-a-fernet-token", client=_client(handler))
    assert not result.success
    assert result.error == "Stored access token could not be decrypted"


def test_unsupported_platform():
    result = publisher.publish_to_platform("MYSPACE", "hi", [], [], "whatever")
    assert not result.success
    assert result.error == "Unsupported platform: MYSPACE"


@pytest.mark.parametrize("platform, media", [
    ("META", []),
    ("X", []),
    ("LINKEDIN", []),
    ("TIKTOK", ["https://cdn.example.com/v.mp4"]),
])
def test_non_object_json_body_is_a_failed_result(token, platform, media):
    result = publisher.publish_to_platform(
        platform, "hi", media, [], token, platform_user_id="p",
        client=_client(lambda r: httpx.Response(200, json=[])),
    )
    assert not result.success
    assert result.error.startswith("Unexpected response body")
