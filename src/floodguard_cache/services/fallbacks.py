"""Synthesized responses served when the network is unavailable."""

import json

from floodguard_cache.entities import CachedResponse

OFFLINE_MESSAGE = "You are offline. Please check your internet connection."

PLACEHOLDER_SVG = (
    '<svg width="200" height="150" xmlns="http://www.w3.org/2000/svg">'
    '<rect width="100%" height="100%" fill="#f3f4f6"/>'
    '<text x="50%" y="50%" text-anchor="middle" fill="#9ca3af">Image Unavailable</text>'
    "</svg>"
)

ASSET_UNAVAILABLE = "Asset unavailable offline"


def offline_api_response(url: str = "") -> CachedResponse:
    """503 JSON body telling application code to retry later.

    Callers must read ``offline: true`` as "not a server error".
    """
    body = json.dumps({"success": False, "message": OFFLINE_MESSAGE, "offline": True})
    return CachedResponse.build(
        body,
        status=503,
        status_text="Service Unavailable",
        headers={"Content-Type": "application/json"},
        url=url,
    )


def placeholder_image_response(url: str = "") -> CachedResponse:
    return CachedResponse.build(
        PLACEHOLDER_SVG,
        status=200,
        headers={"Content-Type": "image/svg+xml"},
        url=url,
    )


def asset_unavailable_response(url: str = "") -> CachedResponse:
    return CachedResponse.build(
        ASSET_UNAVAILABLE,
        status=404,
        status_text="Not Found",
        headers={"Content-Type": "text/plain; charset=utf-8"},
        url=url,
    )
